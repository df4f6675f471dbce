# File: secreq_api/api/v1/endpoints/invites_endpoint.py
import structlog
from fastapi import APIRouter, Depends, Request

from secreq_api.api.v1 import schemas
from secreq_api.application.use_cases.accept_invite_use_case import AcceptInviteUseCase
from secreq_api.application.use_cases.send_invite_use_case import SendInviteUseCase
from secreq_api.core.errors import HandlerError, InternalError
from secreq_api.dependencies import SessionToken, get_accept_invite_use_case, get_send_invite_use_case

router = APIRouter()
log = structlog.get_logger(__name__)

INVITE_ERROR_RESPONSES = {
    400: {"model": schemas.MessageResponse},
    401: {"model": schemas.MessageResponse},
    404: {"model": schemas.MessageResponse},
    500: {"model": schemas.MessageResponse},
}


@router.post(
    "/organizations/invites/accept",
    response_model=schemas.AcceptInviteResponse,
    summary="Accept an organization invite",
    responses={**INVITE_ERROR_RESPONSES, 403: {"model": schemas.MessageResponse}},
)
async def accept_invite_endpoint(
    request_body: schemas.AcceptInviteRequest,
    request: Request,
    access_token: SessionToken,
    use_case: AcceptInviteUseCase = Depends(get_accept_invite_use_case),
):
    endpoint_log = log.bind(request_id=getattr(request.state, "request_id", None))
    try:
        accepted = await use_case.execute(request_body.token, access_token)
    except HandlerError as e:
        endpoint_log.info("Invite acceptance rejected", status_code=e.status_code, error=e.message)
        return e.to_response(key="message")
    except Exception as e:
        endpoint_log.exception("Unexpected error accepting invite")
        return InternalError("Unexpected error", details=str(e)).to_response(key="message")

    return schemas.AcceptInviteResponse(
        message="Invitation accepted",
        organization_id=accepted.organization_id,
        role=accepted.role,
    )


@router.post(
    "/organizations/invites/send",
    response_model=schemas.MessageResponse,
    response_model_exclude_none=True,
    summary="Email the accept link for a pending invite",
    responses=INVITE_ERROR_RESPONSES,
)
async def send_invite_endpoint(
    request_body: schemas.SendInviteRequest,
    request: Request,
    access_token: SessionToken,
    use_case: SendInviteUseCase = Depends(get_send_invite_use_case),
):
    endpoint_log = log.bind(
        request_id=getattr(request.state, "request_id", None),
        invite_id=request_body.invite_id,
    )
    try:
        await use_case.execute(request_body.invite_id, access_token)
    except HandlerError as e:
        endpoint_log.info("Invite email not sent", status_code=e.status_code, error=e.message)
        return e.to_response(key="message")
    except Exception as e:
        endpoint_log.exception("Unexpected error sending invite email")
        return InternalError("Unexpected error", details=str(e)).to_response(key="message")

    return schemas.MessageResponse(message="Invite email sent")
