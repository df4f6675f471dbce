# File: secreq_api/application/use_cases/send_invite_use_case.py
import html
from datetime import timezone
from typing import Optional
from urllib.parse import urlencode

import structlog

from secreq_api.application.ports.email_port import EmailSenderPort
from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.ports.invite_repository_port import InviteRepositoryPort
from secreq_api.application.use_cases.session_auth import authenticate
from secreq_api.core.errors import HandlerError, InternalError, NotFoundError, ProviderError, ValidationError
from secreq_api.core.metrics import INVITE_EMAILS_TOTAL
from secreq_api.domain.models import INVITE_STATUS_PENDING, InviteEmail, OrganizationInvite

log = structlog.get_logger(__name__)

DEFAULT_ORGANIZATION_NAME = "SecReq"
ACCEPT_INVITE_PAGE = "/accept-invite"


def build_accept_url(app_url: str, token: str) -> str:
    return f"{app_url.rstrip('/')}{ACCEPT_INVITE_PAGE}?{urlencode({'token': token})}"


def build_invite_email(invite: OrganizationInvite, accept_url: str) -> InviteEmail:
    organization = invite.organization_name or DEFAULT_ORGANIZATION_NAME
    subject = f"You're invited to collaborate on {organization}"
    link = html.escape(accept_url)

    paragraphs = [
        f"<h2>{html.escape(subject)}</h2>",
        f"<p>You have been invited with the role <strong>{html.escape(invite.role)}</strong>.</p>",
    ]
    if invite.expires_at is not None:
        expires_at = invite.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        expires_text = expires_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        paragraphs.append(f"<p>This invite will expire on <strong>{expires_text}</strong>.</p>")
    paragraphs.append(
        f'<p><a href="{link}" style="background:#111827;color:#fff;padding:10px 16px;'
        f'border-radius:8px;text-decoration:none">Accept Invitation</a></p>'
    )
    paragraphs.append(f"<p>Or copy and paste this link into your browser:<br/>{link}</p>")

    body = "".join(paragraphs)
    return InviteEmail(
        to=(invite.email or "").strip().lower(),
        subject=subject,
        html=f'<div style="font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial">{body}</div>',
    )


class SendInviteUseCase:
    """
    Emails the accept link for a pending invite. The link targets the web
    app's accept page, which drives the acceptance flow with the token.
    """

    def __init__(
        self,
        identity: IdentityVerifierPort,
        invites: InviteRepositoryPort,
        email_sender: EmailSenderPort,
        app_url: str,
    ):
        self.identity = identity
        self.invites = invites
        self.email_sender = email_sender
        self.app_url = app_url

    async def execute(self, invite_id: str, access_token: Optional[str]) -> None:
        try:
            await self._send(invite_id, access_token)
        except HandlerError as e:
            INVITE_EMAILS_TOTAL.labels(outcome=type(e).__name__).inc()
            raise
        except Exception as e:
            log.exception("Unexpected error sending invite email")
            INVITE_EMAILS_TOTAL.labels(outcome="InternalError").inc()
            raise InternalError("Unexpected error", details=str(e)) from e
        INVITE_EMAILS_TOTAL.labels(outcome="sent").inc()

    async def _send(self, invite_id: str, access_token: Optional[str]) -> None:
        principal = await authenticate(self.identity, access_token, failure_message="Authentication required")
        send_log = log.bind(user_id=principal.id, invite_id=invite_id)

        invite = await self.invites.get_by_id(invite_id)
        if invite is None:
            send_log.info("Invite not found")
            raise NotFoundError("Invite not found")

        if invite.status != INVITE_STATUS_PENDING:
            send_log.info("Invite is not pending", status=invite.status)
            raise ValidationError("Invite already used or not available")

        if not invite.email or not invite.token:
            send_log.warning("Invite has no recipient or token")
            raise ValidationError("Invite already used or not available")

        email = build_invite_email(invite, build_accept_url(self.app_url, invite.token))
        try:
            await self.email_sender.send(email)
        except ProviderError as e:
            send_log.error("Invite email was not sent", error=str(e))
            raise InternalError("Failed to send invite email", details=str(e)) from e

        send_log.info("Invite email sent", organization_id=invite.organization_id)
