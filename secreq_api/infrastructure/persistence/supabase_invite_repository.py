# File: secreq_api/infrastructure/persistence/supabase_invite_repository.py
from typing import Any, Dict, Optional

import structlog
from postgrest.exceptions import APIError

from secreq_api.application.ports.invite_repository_port import InviteRepositoryPort
from secreq_api.domain.models import INVITE_STATUS_ACCEPTED, OrganizationInvite
from secreq_api.infrastructure.supabase_client import SupabaseClientProvider

log = structlog.get_logger(__name__)

INVITES_TABLE = "organization_invites"
MEMBERSHIPS_TABLE = "organization_memberships"
INVITE_COLUMNS = "id, organization_id, email, role, status, expires_at"
# organizations(name) embeds the parent row through the foreign key
INVITE_EMAIL_COLUMNS = "id, organization_id, email, role, token, status, expires_at, organizations(name)"


def _invite_from_row(row: Dict[str, Any]) -> OrganizationInvite:
    row = dict(row)
    organization = row.pop("organizations", None)
    if isinstance(organization, dict):
        row["organization_name"] = organization.get("name")
    return OrganizationInvite(**row)


class SupabaseInviteRepository(InviteRepositoryPort):
    """
    Invite and membership tables through the service-role client.
    A failed lookup is reported as "no such invite"; writes propagate their errors.
    """

    def __init__(self, client_provider: SupabaseClientProvider):
        self._clients = client_provider

    async def _find_one(self, columns: str, column: str, value: str) -> Optional[OrganizationInvite]:
        client = await self._clients.get()
        try:
            response = await (
                client.table(INVITES_TABLE)
                .select(columns)
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except APIError as e:
            log.warning("Invite lookup failed", lookup_column=column, error=e.message, code=e.code)
            return None
        rows = response.data or []
        if not rows:
            return None
        return _invite_from_row(rows[0])

    async def get_by_token(self, token: str) -> Optional[OrganizationInvite]:
        return await self._find_one(INVITE_COLUMNS, "token", token)

    async def get_by_id(self, invite_id: str) -> Optional[OrganizationInvite]:
        return await self._find_one(INVITE_EMAIL_COLUMNS, "id", invite_id)

    async def upsert_membership(self, user_id: str, organization_id: str, role: str) -> None:
        client = await self._clients.get()
        await (
            client.table(MEMBERSHIPS_TABLE)
            .upsert(
                {"user_id": user_id, "organization_id": organization_id, "role": role},
                on_conflict="user_id,organization_id",
            )
            .execute()
        )
        log.debug("Membership upserted", user_id=user_id, organization_id=organization_id, role=role)

    async def mark_accepted(self, invite_id: str) -> None:
        client = await self._clients.get()
        await (
            client.table(INVITES_TABLE)
            .update({"status": INVITE_STATUS_ACCEPTED})
            .eq("id", invite_id)
            .execute()
        )
