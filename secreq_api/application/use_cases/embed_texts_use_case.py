# File: secreq_api/application/use_cases/embed_texts_use_case.py
import functools
from typing import List, Optional

import structlog

from secreq_api.application.fanout import gather_all
from secreq_api.application.ports.generation_port import EmbeddingModelPort
from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.use_cases.authenticated_generation import AuthenticatedGenerationUseCase
from secreq_api.core.metrics import EMBEDDING_TEXTS_TOTAL

log = structlog.get_logger(__name__)


class EmbedTextsUseCase(AuthenticatedGenerationUseCase[List[str], List[List[float]]]):
    """
    Use case for generating embeddings for a list of texts.
    One provider call per text; result[i] is the vector for texts[i].
    Texts arrive cleaned (NUL bytes and surrounding whitespace removed).
    """

    result_field = "embeddings"

    def __init__(
        self,
        identity: IdentityVerifierPort,
        embedding_model: EmbeddingModelPort,
        max_concurrency: Optional[int] = None,
    ):
        super().__init__(identity)
        self.embedding_model = embedding_model
        self.max_concurrency = max_concurrency
        log.info(
            "EmbedTextsUseCase initialized",
            model_adapter=type(embedding_model).__name__,
            max_concurrency=max_concurrency,
        )

    async def invoke(self, texts: List[str]) -> List[List[float]]:
        use_case_log = log.bind(num_texts=len(texts))
        use_case_log.info("Executing embedding generation for texts")

        calls = [functools.partial(self.embedding_model.embed_one, text) for text in texts]
        embeddings = await gather_all(calls, max_concurrency=self.max_concurrency)

        EMBEDDING_TEXTS_TOTAL.inc(len(embeddings))
        use_case_log.info("Successfully generated embeddings", num_embeddings=len(embeddings))
        return embeddings
