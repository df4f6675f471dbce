# File: secreq_api/application/use_cases/session_auth.py
from typing import Optional

import structlog

from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.core.errors import AuthError
from secreq_api.domain.models import Principal

log = structlog.get_logger(__name__)


async def authenticate(
    identity: IdentityVerifierPort,
    access_token: Optional[str],
    failure_message: str = "Unauthorized",
) -> Principal:
    """Resolves the session principal; any verifier failure becomes an AuthError."""
    try:
        principal = await identity.get_principal(access_token)
    except AuthError as e:
        log.info("Session authentication failed", reason=e.message)
        raise AuthError(failure_message) from e
    except Exception as e:
        log.warning("Identity verifier errored, treating as unauthenticated", error=str(e))
        raise AuthError(failure_message) from e

    if principal is None or not principal.id:
        log.info("Identity verifier returned no principal id")
        raise AuthError(failure_message)
    return principal
