# File: secreq_api/application/ports/generation_port.py
import abc
from typing import Any, Dict, List


class TextGenerationPort(abc.ABC):
    """
    Abstract port for single-prompt text generation.
    """

    @abc.abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Generates text for one prompt.

        Raises:
            ProviderError: If the provider call fails.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def get_model_info(self) -> Dict[str, Any]:
        raise NotImplementedError


class EmbeddingModelPort(abc.ABC):
    """
    Abstract port defining the interface for an embedding model.
    One call embeds exactly one input string.
    """

    @abc.abstractmethod
    async def embed_one(self, text: str) -> List[float]:
        """
        Generates the embedding vector for a single text.

        Raises:
            ProviderError: If the provider call fails or returns no vector.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def get_model_info(self) -> Dict[str, Any]:
        raise NotImplementedError
