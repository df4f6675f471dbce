# File: secreq_api/application/ports/identity_port.py
import abc
from typing import Optional

from secreq_api.domain.models import Principal


class IdentityVerifierPort(abc.ABC):
    """
    Abstract port for resolving the principal behind a session.
    """

    @abc.abstractmethod
    async def get_principal(self, access_token: Optional[str]) -> Principal:
        """
        Resolves the authenticated principal for a session access token.

        Raises:
            AuthError: If there is no token, the provider rejects it, or it
                reports no user.
        """
        raise NotImplementedError
