# File: secreq_api/domain/models.py
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel

# Request-scoped entities. Nothing here is persisted by the service itself.

INVITE_STATUS_PENDING = "pending"
INVITE_STATUS_ACCEPTED = "accepted"


class Principal(BaseModel):
    """Authenticated identity for the lifetime of one request."""
    id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    def age_seconds(self, now: datetime) -> Optional[float]:
        if self.created_at is None:
            return None
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return (now - created_at).total_seconds()


class SignupNotification(BaseModel):
    message: str
    target_url: str


class NotifyResult(BaseModel):
    skipped: bool = False


class OrganizationInvite(BaseModel):
    id: str
    organization_id: str
    email: Optional[str] = None
    role: str
    status: str
    expires_at: Optional[datetime] = None
    token: Optional[str] = None
    organization_name: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at < now


class AcceptedInvite(BaseModel):
    organization_id: str
    role: str


class InviteEmail(BaseModel):
    to: str
    subject: str
    html: str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
