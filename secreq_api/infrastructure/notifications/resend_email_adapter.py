# File: secreq_api/infrastructure/notifications/resend_email_adapter.py
from typing import Optional

import httpx
import structlog

from secreq_api.application.ports.email_port import EmailSenderPort
from secreq_api.core.errors import ProviderError
from secreq_api.core.metrics import PROVIDER_ERRORS_TOTAL
from secreq_api.domain.models import InviteEmail

log = structlog.get_logger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"


def _json_field(response: httpx.Response, key: str) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data.get(key) if isinstance(data, dict) else None


class ResendEmailAdapter(EmailSenderPort):
    """Sends transactional email through the Resend HTTP API. No retries."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str],
        sender: str,
        api_url: str = RESEND_EMAILS_URL,
    ):
        self._client = http_client
        self._api_key = api_key or None
        self._sender = sender
        self._api_url = api_url

    def _failure(self, message: str, error_type: str) -> ProviderError:
        PROVIDER_ERRORS_TOTAL.labels(operation="email", error_type=error_type).inc()
        log.error("Resend email send failed", error_type=error_type, error=message)
        return ProviderError(message, operation="email", error_type=error_type)

    async def send(self, email: InviteEmail) -> None:
        if not self._api_key:
            raise self._failure("Missing API key", error_type="missing_api_key")

        payload = {
            "from": self._sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.html,
        }
        try:
            response = await self._client.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise self._failure(str(e) or type(e).__name__, error_type=type(e).__name__) from e

        if not response.is_success:
            detail = _json_field(response, "message")
            raise self._failure(detail or response.text[:200] or f"HTTP {response.status_code}", error_type=f"http_{response.status_code}")

        log.info("Invite email accepted by Resend", email_id=_json_field(response, "id"))
