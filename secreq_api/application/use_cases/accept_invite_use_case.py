# File: secreq_api/application/use_cases/accept_invite_use_case.py
from datetime import datetime
from typing import Callable, Optional

import structlog

from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.ports.invite_repository_port import InviteRepositoryPort
from secreq_api.application.use_cases.session_auth import authenticate
from secreq_api.core.errors import ForbiddenError, HandlerError, InternalError, NotFoundError, ValidationError
from secreq_api.core.metrics import INVITE_ACCEPTANCES_TOTAL
from secreq_api.domain.models import INVITE_STATUS_PENDING, AcceptedInvite, utc_now

log = structlog.get_logger(__name__)


class AcceptInviteUseCase:
    """
    Accepts an organization invite for the signed-in user.

    The invite is matched by token, must still be pending and unexpired, and
    its email must match the session email (case-insensitive).
    """

    def __init__(
        self,
        identity: IdentityVerifierPort,
        invites: InviteRepositoryPort,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.identity = identity
        self.invites = invites
        self.clock = clock

    async def execute(self, token: str, access_token: Optional[str]) -> AcceptedInvite:
        try:
            accepted = await self._accept(token, access_token)
        except HandlerError as e:
            INVITE_ACCEPTANCES_TOTAL.labels(outcome=type(e).__name__).inc()
            raise
        except Exception as e:
            log.exception("Unexpected error accepting invite")
            INVITE_ACCEPTANCES_TOTAL.labels(outcome="InternalError").inc()
            raise InternalError("Unexpected error", details=str(e)) from e
        INVITE_ACCEPTANCES_TOTAL.labels(outcome="accepted").inc()
        return accepted

    async def _accept(self, token: str, access_token: Optional[str]) -> AcceptedInvite:
        principal = await authenticate(self.identity, access_token, failure_message="Authentication required")
        accept_log = log.bind(user_id=principal.id)

        invite = await self.invites.get_by_token(token)
        if invite is None:
            accept_log.info("Invite token not found")
            raise NotFoundError("Invalid invite token")

        accept_log = accept_log.bind(invite_id=invite.id, organization_id=invite.organization_id)
        if invite.status != INVITE_STATUS_PENDING:
            accept_log.info("Invite is not pending", status=invite.status)
            raise ValidationError("Invite already used or not available")

        if invite.is_expired(self.clock()):
            accept_log.info("Invite has expired", expires_at=str(invite.expires_at))
            raise ValidationError("Invite has expired")

        if (principal.email or "").lower() != (invite.email or "").lower():
            accept_log.warning("Invite email does not match signed-in user")
            raise ForbiddenError("Invite email does not match signed-in user")

        try:
            await self.invites.upsert_membership(principal.id, invite.organization_id, invite.role)
        except Exception as e:
            accept_log.error("Failed to add membership", error=str(e))
            raise InternalError("Failed to add membership", details=str(e)) from e

        try:
            await self.invites.mark_accepted(invite.id)
        except Exception as e:
            # membership is already committed; the invite just stays pending
            accept_log.error("Failed to mark invite as accepted", error=str(e))

        accept_log.info("Invitation accepted", role=invite.role)
        return AcceptedInvite(organization_id=invite.organization_id, role=invite.role)
