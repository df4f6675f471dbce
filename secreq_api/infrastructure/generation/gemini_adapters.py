# File: secreq_api/infrastructure/generation/gemini_adapters.py
from typing import Any, Dict, List, Optional

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from secreq_api.application.ports.generation_port import EmbeddingModelPort, TextGenerationPort
from secreq_api.core.errors import ProviderError
from secreq_api.core.metrics import PROVIDER_CALL_DURATION_SECONDS, PROVIDER_ERRORS_TOTAL

log = structlog.get_logger(__name__)


class GeminiClientHolder:
    """
    Lazily builds the google-genai client. A missing API key is not checked up
    front; it surfaces as a provider failure on the first call.
    """

    def __init__(self, api_key: Optional[str]):
        self._api_key = api_key or None
        self._client: Optional[genai.Client] = None

    def get(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client


def _provider_error(operation: str, model_name: str, e: Exception) -> ProviderError:
    if isinstance(e, genai_errors.APIError):
        error_type = f"api_error_{e.code}"
    else:
        error_type = type(e).__name__
    PROVIDER_ERRORS_TOTAL.labels(operation=operation, error_type=error_type).inc()
    log.error("Gemini call failed", operation=operation, model_name=model_name, error_type=error_type, error=str(e))
    return ProviderError(f"Gemini {operation} error: {e}", operation=operation, error_type=error_type)


class GeminiTextGenerationAdapter(TextGenerationPort):
    """
    Adapter for Gemini text generation.
    """

    def __init__(self, client_holder: GeminiClientHolder, model_name: str, temperature: float):
        self._clients = client_holder
        self._model_name = model_name
        self._temperature = temperature
        log.info("GeminiTextGenerationAdapter initialized", model_name=model_name)

    async def generate(self, prompt: str) -> str:
        try:
            client = self._clients.get()
            with PROVIDER_CALL_DURATION_SECONDS.labels(operation="generation", model_name=self._model_name).time():
                response = await client.aio.models.generate_content(
                    model=self._model_name,
                    contents=prompt,
                    config=types.GenerateContentConfig(temperature=self._temperature),
                )
        except Exception as e:
            raise _provider_error("generation", self._model_name, e) from e

        return response.text or ""

    def get_model_info(self) -> Dict[str, Any]:
        return {"model_name": self._model_name, "provider": "google"}


class GeminiEmbeddingAdapter(EmbeddingModelPort):
    """
    Adapter for Gemini embeddings, one input string per call.
    """

    def __init__(self, client_holder: GeminiClientHolder, model_name: str, task_type: str):
        self._clients = client_holder
        self._model_name = model_name
        self._task_type = task_type
        log.info("GeminiEmbeddingAdapter initialized", model_name=model_name, task_type=task_type)

    async def embed_one(self, text: str) -> List[float]:
        try:
            client = self._clients.get()
            with PROVIDER_CALL_DURATION_SECONDS.labels(operation="embedding", model_name=self._model_name).time():
                response = await client.aio.models.embed_content(
                    model=self._model_name,
                    contents=text,
                    config=types.EmbedContentConfig(task_type=self._task_type),
                )
        except Exception as e:
            raise _provider_error("embedding", self._model_name, e) from e

        if not response.embeddings or not response.embeddings[0].values:
            PROVIDER_ERRORS_TOTAL.labels(operation="embedding", error_type="empty_embedding").inc()
            raise ProviderError("Gemini returned no embedding values.", operation="embedding", error_type="empty_embedding")
        return list(response.embeddings[0].values)

    def get_model_info(self) -> Dict[str, Any]:
        return {"model_name": self._model_name, "provider": "google", "task_type": self._task_type}
