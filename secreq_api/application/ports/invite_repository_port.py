# File: secreq_api/application/ports/invite_repository_port.py
import abc
from typing import Optional

from secreq_api.domain.models import OrganizationInvite


class InviteRepositoryPort(abc.ABC):

    @abc.abstractmethod
    async def get_by_token(self, token: str) -> Optional[OrganizationInvite]:
        raise NotImplementedError

    @abc.abstractmethod
    async def upsert_membership(self, user_id: str, organization_id: str, role: str) -> None:
        """Adds or refreshes a membership; conflicts on (user_id, organization_id)."""
        raise NotImplementedError

    @abc.abstractmethod
    async def mark_accepted(self, invite_id: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_by_id(self, invite_id: str) -> Optional[OrganizationInvite]:
        """Includes the invite token and organization name."""
        raise NotImplementedError
