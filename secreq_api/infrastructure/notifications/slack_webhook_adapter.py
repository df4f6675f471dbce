# File: secreq_api/infrastructure/notifications/slack_webhook_adapter.py
import httpx
import structlog

from secreq_api.application.ports.notification_port import NotificationPort

log = structlog.get_logger(__name__)


class SlackWebhookAdapter(NotificationPort):
    """Posts `{"text": message}` to a Slack incoming webhook. No retries."""

    def __init__(self, http_client: httpx.AsyncClient):
        self._client = http_client

    async def deliver(self, target_url: str, message: str) -> bool:
        response = await self._client.post(target_url, json={"text": message})
        if not response.is_success:
            log.error(
                "Slack webhook returned non-success status",
                status_code=response.status_code,
                detail=response.text[:200],
            )
            return False
        log.debug("Slack webhook accepted message", status_code=response.status_code)
        return True
