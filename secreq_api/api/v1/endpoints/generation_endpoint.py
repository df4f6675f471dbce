# File: secreq_api/api/v1/endpoints/generation_endpoint.py
import structlog
from fastapi import APIRouter, Depends, Request, status

from secreq_api.api.v1 import schemas
from secreq_api.application.use_cases.generate_text_use_case import GenerateTextUseCase
from secreq_api.core.errors import HandlerError, InternalError
from secreq_api.dependencies import SessionToken, get_generate_text_use_case

router = APIRouter()
log = structlog.get_logger(__name__)


@router.post(
    "/generate",
    response_model=schemas.GenerateTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate text for a prompt",
    description="Authenticates the session, checks `userId` against it and forwards the prompt to the generation provider.",
    responses={
        400: {"model": schemas.ErrorResponse},
        401: {"model": schemas.ErrorResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
async def generate_text_endpoint(
    request_body: schemas.GenerateTextRequest,
    request: Request,
    access_token: SessionToken,
    use_case: GenerateTextUseCase = Depends(get_generate_text_use_case),
):
    endpoint_log = log.bind(request_id=getattr(request.state, "request_id", None))
    endpoint_log.info("Received request to generate text")

    try:
        text = await use_case.execute(request_body.prompt, request_body.user_id, access_token)
        endpoint_log.info("Text generated successfully", text_length=len(text))
        return schemas.GenerateTextResponse(text=text)
    except HandlerError as e:
        endpoint_log.info("Text generation request rejected", status_code=e.status_code, error=e.message)
        return e.to_response(key="error")
    except Exception:
        endpoint_log.exception("Unexpected error generating text")
        return InternalError("Generation failed").to_response(key="error")
