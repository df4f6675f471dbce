# File: secreq_api/api/v1/endpoints/embedding_endpoint.py
import structlog
from fastapi import APIRouter, Depends, Request, status

from secreq_api.api.v1 import schemas
from secreq_api.application.use_cases.embed_texts_use_case import EmbedTextsUseCase
from secreq_api.core.errors import HandlerError, InternalError
from secreq_api.dependencies import SessionToken, get_embed_texts_use_case

router = APIRouter()
log = structlog.get_logger(__name__)


@router.post(
    "/embed",
    response_model=schemas.EmbedResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate Embeddings for Texts",
    description="Receives a list of texts and returns one embedding per text, in input order. Fails as a whole if any text fails.",
    responses={
        400: {"model": schemas.ErrorResponse},
        401: {"model": schemas.ErrorResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
async def embed_texts_endpoint(
    request_body: schemas.EmbedRequest,
    request: Request,
    access_token: SessionToken,
    use_case: EmbedTextsUseCase = Depends(get_embed_texts_use_case),
):
    endpoint_log = log.bind(
        request_id=getattr(request.state, "request_id", None),
        num_texts=len(request_body.texts),
    )
    endpoint_log.info("Received request to generate embeddings")

    try:
        embeddings = await use_case.execute(request_body.texts, request_body.user_id, access_token)
        endpoint_log.info("Embeddings generated successfully", num_embeddings=len(embeddings))
        return schemas.EmbedResponse(embeddings=embeddings)
    except HandlerError as e:
        endpoint_log.info("Embedding request rejected", status_code=e.status_code, error=e.message)
        return e.to_response(key="error")
    except Exception:
        endpoint_log.exception("Unexpected error generating embeddings")
        return InternalError("Embedding failed").to_response(key="error")
