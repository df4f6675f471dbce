# File: secreq_api/application/use_cases/notify_signup_use_case.py
from datetime import datetime
from typing import Callable, Optional

import structlog

from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.ports.notification_port import NotificationPort
from secreq_api.application.use_cases.session_auth import authenticate
from secreq_api.core.errors import DeliveryError, HandlerError, InternalError
from secreq_api.core.metrics import SIGNUP_NOTIFICATIONS_TOTAL
from secreq_api.domain.models import NotifyResult, Principal, SignupNotification, utc_now

log = structlog.get_logger(__name__)

UNKNOWN_EMAIL = "unknown"


class NotifySignupUseCase:
    """
    Posts a "new signup" message for the session principal, but only inside a
    short window after the account was created. The window is the dedup guard:
    later calls for the same principal are skipped because the account aged
    out, not because a call was recorded.
    """

    def __init__(
        self,
        identity: IdentityVerifierPort,
        notifier: NotificationPort,
        webhook_url: Optional[str],
        window_seconds: int = 30,
        message_prefix: str = "secreq",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.identity = identity
        self.notifier = notifier
        self.webhook_url = webhook_url
        self.window_seconds = window_seconds
        self.message_prefix = message_prefix
        self.clock = clock

    def is_recent(self, principal: Principal) -> bool:
        age = principal.age_seconds(self.clock())
        if age is None:
            return False
        return age <= self.window_seconds

    def build_notification(self, principal: Principal) -> SignupNotification:
        email = principal.email or UNKNOWN_EMAIL
        return SignupNotification(
            message=f"{self.message_prefix} - {email} signed up",
            target_url=self.webhook_url,
        )

    async def execute(self, access_token: Optional[str]) -> NotifyResult:
        try:
            return await self._notify(access_token)
        except HandlerError:
            raise
        except Exception as e:
            log.exception("Unexpected error during signup notification")
            SIGNUP_NOTIFICATIONS_TOTAL.labels(outcome="failed").inc()
            raise InternalError("Unexpected error", details=str(e)) from e

    async def _notify(self, access_token: Optional[str]) -> NotifyResult:
        if not self.webhook_url:
            log.error("Signup notification requested but SLACK_WEBHOOK_URL is not configured")
            raise InternalError("Missing SLACK_WEBHOOK_URL")

        principal = await authenticate(self.identity, access_token)
        notify_log = log.bind(user_id=principal.id)

        if not self.is_recent(principal):
            notify_log.info("Account not recently created, skipping notification", created_at=str(principal.created_at))
            SIGNUP_NOTIFICATIONS_TOTAL.labels(outcome="skipped").inc()
            return NotifyResult(skipped=True)

        notification = self.build_notification(principal)
        delivered = await self.notifier.deliver(notification.target_url, notification.message)
        if not delivered:
            notify_log.error("Signup notification was rejected by the webhook")
            SIGNUP_NOTIFICATIONS_TOTAL.labels(outcome="failed").inc()
            raise DeliveryError("Failed to notify Slack")

        notify_log.info("Signup notification delivered")
        SIGNUP_NOTIFICATIONS_TOTAL.labels(outcome="delivered").inc()
        return NotifyResult(skipped=False)
