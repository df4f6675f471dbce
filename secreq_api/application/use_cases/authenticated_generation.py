# File: secreq_api/application/use_cases/authenticated_generation.py
import abc
from typing import Generic, Optional, TypeVar

import structlog

from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.use_cases.session_auth import authenticate
from secreq_api.core.errors import AuthError, HandlerError, InternalError, ProviderError

log = structlog.get_logger(__name__)

InputT = TypeVar("InputT")
ResultT = TypeVar("ResultT")


class AuthenticatedGenerationUseCase(abc.ABC, Generic[InputT, ResultT]):
    """
    Shared request flow for the AI proxy endpoints:
    authenticate -> bind payload userId to session -> invoke provider.

    Inputs arrive already validated by the request schema. Subclasses supply
    `invoke`; the result is returned under `result_field` by the endpoint.
    """

    result_field: str = "result"

    def __init__(self, identity: IdentityVerifierPort):
        self.identity = identity

    @abc.abstractmethod
    async def invoke(self, inputs: InputT) -> ResultT:
        raise NotImplementedError

    async def execute(self, inputs: InputT, user_id: str, access_token: Optional[str]) -> ResultT:
        use_case_log = log.bind(use_case=type(self).__name__)

        principal = await authenticate(self.identity, access_token)
        if principal.id != user_id:
            use_case_log.warning("Payload userId does not match session principal", principal_id=principal.id)
            raise AuthError("Unauthorized")

        use_case_log = use_case_log.bind(user_id=principal.id)
        try:
            result = await self.invoke(inputs)
        except HandlerError:
            raise
        except ProviderError as e:
            use_case_log.error("Provider call failed", operation=e.operation, error=str(e))
            raise InternalError(f"{e.operation.capitalize()} failed", details=str(e)) from e
        use_case_log.info("Generation request completed")
        return result
