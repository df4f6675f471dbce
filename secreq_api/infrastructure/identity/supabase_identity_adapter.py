# File: secreq_api/infrastructure/identity/supabase_identity_adapter.py
from typing import Optional

import structlog

from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.core.errors import AuthError
from secreq_api.domain.models import Principal
from secreq_api.infrastructure.supabase_client import SupabaseClientProvider

log = structlog.get_logger(__name__)


class SupabaseIdentityAdapter(IdentityVerifierPort):
    """
    Resolves the principal by asking Supabase Auth who owns the access token.
    """

    def __init__(self, client_provider: SupabaseClientProvider):
        self._clients = client_provider

    async def get_principal(self, access_token: Optional[str]) -> Principal:
        if not access_token:
            log.debug("No session access token present")
            raise AuthError("No session")

        client = await self._clients.get()
        try:
            response = await client.auth.get_user(access_token)
        except Exception as e:
            log.info("Supabase rejected session token", error=str(e))
            raise AuthError("Invalid session") from e

        user = response.user if response is not None else None
        if user is None or not user.id:
            log.info("Supabase returned no user for session token")
            raise AuthError("No user for session")

        return Principal(id=str(user.id), email=user.email, created_at=user.created_at)
