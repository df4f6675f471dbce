# File: secreq_api/client/invite_api_client.py
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from secreq_api.api.v1.schemas import AcceptInviteRequest

log = structlog.get_logger(__name__)

ACCEPT_INVITE_PATH = "/api/v1/organizations/invites/accept"
GENERIC_FAILURE_MESSAGE = "Failed to accept invitation"


@dataclass
class InviteAcceptOutcome:
    ok: bool
    message: str


class InviteApiClient:
    """Async HTTP client for the invite acceptance endpoint. One request per call, no retries."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def close(self):
        if self._owns_client:
            await self.client.aclose()
            log.info("Invite API client closed.")

    async def accept(self, token: str) -> InviteAcceptOutcome:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        payload = AcceptInviteRequest(token=token).model_dump()
        response = await self.client.post(f"{self.base_url}{ACCEPT_INVITE_PATH}", json=payload, headers=headers)

        try:
            data = response.json()
        except ValueError:
            data = {}
        message = data.get("message") if isinstance(data, dict) else None

        log.info("Invite acceptance response received", status_code=response.status_code)
        return InviteAcceptOutcome(ok=response.is_success, message=message or GENERIC_FAILURE_MESSAGE)
