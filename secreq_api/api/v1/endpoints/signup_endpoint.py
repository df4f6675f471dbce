# File: secreq_api/api/v1/endpoints/signup_endpoint.py
import structlog
from fastapi import APIRouter, Depends, Request

from secreq_api.api.v1 import schemas
from secreq_api.application.use_cases.notify_signup_use_case import NotifySignupUseCase
from secreq_api.core.errors import HandlerError
from secreq_api.dependencies import SessionToken, get_notify_signup_use_case

router = APIRouter()
log = structlog.get_logger(__name__)


@router.post(
    "/notify-signup",
    response_model=schemas.NotifySignupResponse,
    response_model_exclude_none=True,
    summary="Announce a new signup",
    description="Posts a Slack message for the session user if the account was created moments ago; otherwise reports `skipped`.",
    responses={
        401: {"model": schemas.MessageResponse},
        500: {"model": schemas.MessageResponse},
        502: {"model": schemas.MessageResponse},
    },
)
async def notify_signup_endpoint(
    request: Request,
    access_token: SessionToken,
    use_case: NotifySignupUseCase = Depends(get_notify_signup_use_case),
):
    endpoint_log = log.bind(request_id=getattr(request.state, "request_id", None))
    try:
        result = await use_case.execute(access_token)
    except HandlerError as e:
        endpoint_log.info("Signup notification not sent", status_code=e.status_code, error=e.message)
        return e.to_response(key="message")

    if result.skipped:
        return schemas.NotifySignupResponse(ok=True, skipped=True)
    return schemas.NotifySignupResponse(ok=True)
