# File: secreq_api/application/use_cases/generate_text_use_case.py
import structlog

from secreq_api.application.ports.generation_port import TextGenerationPort
from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.use_cases.authenticated_generation import AuthenticatedGenerationUseCase

log = structlog.get_logger(__name__)


class GenerateTextUseCase(AuthenticatedGenerationUseCase[str, str]):
    """Single prompt in, single text out. Exactly one provider call."""

    result_field = "text"

    def __init__(self, identity: IdentityVerifierPort, generator: TextGenerationPort):
        super().__init__(identity)
        self.generator = generator
        log.info("GenerateTextUseCase initialized", model_adapter=type(generator).__name__)

    async def invoke(self, prompt: str) -> str:
        log.debug("Generating text", prompt_length=len(prompt))
        return await self.generator.generate(prompt)
