import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from secreq_api.application.ports.email_port import EmailSenderPort
from secreq_api.application.ports.generation_port import EmbeddingModelPort, TextGenerationPort
from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.ports.invite_repository_port import InviteRepositoryPort
from secreq_api.application.ports.notification_port import NotificationPort
from secreq_api.core.config import Settings
from secreq_api.core.errors import AuthError, ProviderError
from secreq_api.dependencies import ServiceContainer
from secreq_api.domain.models import InviteEmail, OrganizationInvite, Principal
from secreq_api.main import create_app

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
USER_ID = "user-123"
TOKEN = "good-token"
AUTH_HEADERS = {"Authorization": f"Bearer {TOKEN}"}
WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXX"
APP_URL = "https://app.secreq.test"


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeIdentity(IdentityVerifierPort):
    def __init__(self, principals: Optional[Dict[str, Principal]] = None, error: Optional[Exception] = None):
        self.principals = principals or {}
        self.error = error
        self.calls = 0

    async def get_principal(self, access_token):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if access_token not in self.principals:
            raise AuthError("No session")
        return self.principals[access_token]


class FakeTextGenerator(TextGenerationPort):
    def __init__(self, reply: str = "generated answer", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    def get_model_info(self):
        return {"model_name": "fake-text"}


class FakeEmbedder(EmbeddingModelPort):
    """Vector for text is [len(text), index-of-call]; completion order is reversed via delays."""

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.texts: List[str] = []

    async def embed_one(self, text):
        self.texts.append(text)
        # later inputs finish first
        await asyncio.sleep(0.001 * max(0, 20 - len(self.texts)))
        if text == self.fail_on:
            raise ProviderError("boom", operation="embedding")
        return [float(len(text)), float(ord(text[0]))]

    def get_model_info(self):
        return {"model_name": "fake-embed"}


class FakeNotifier(NotificationPort):
    def __init__(self, ok: bool = True, error: Optional[Exception] = None):
        self.ok = ok
        self.error = error
        self.deliveries: List[tuple] = []

    async def deliver(self, target_url, message):
        if self.error is not None:
            raise self.error
        self.deliveries.append((target_url, message))
        return self.ok


class FakeInviteRepository(InviteRepositoryPort):
    """Invites keyed by token."""

    def __init__(
        self,
        invites: Optional[Dict[str, OrganizationInvite]] = None,
        upsert_error: Optional[Exception] = None,
        mark_error: Optional[Exception] = None,
    ):
        self.invites = invites or {}
        self.upsert_error = upsert_error
        self.mark_error = mark_error
        self.memberships: List[tuple] = []
        self.accepted: List[str] = []

    async def get_by_token(self, token):
        return self.invites.get(token)

    async def get_by_id(self, invite_id):
        for invite in self.invites.values():
            if invite.id == invite_id:
                return invite
        return None

    async def upsert_membership(self, user_id, organization_id, role):
        if self.upsert_error is not None:
            raise self.upsert_error
        self.memberships.append((user_id, organization_id, role))

    async def mark_accepted(self, invite_id):
        if self.mark_error is not None:
            raise self.mark_error
        self.accepted.append(invite_id)


class FakeEmailSender(EmailSenderPort):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.sent: List[InviteEmail] = []

    async def send(self, email):
        if self.error is not None:
            raise self.error
        self.sent.append(email)


def make_principal(seconds_old: Optional[float] = 10, email: Optional[str] = "new@secreq.io") -> Principal:
    created_at = NOW - timedelta(seconds=seconds_old) if seconds_old is not None else None
    return Principal(id=USER_ID, email=email, created_at=created_at)


class Harness:
    def __init__(self, **overrides):
        self.clock = overrides.pop("clock", FakeClock())
        self.identity = overrides.pop("identity", FakeIdentity({TOKEN: make_principal()}))
        self.generator = overrides.pop("generator", FakeTextGenerator())
        self.embedder = overrides.pop("embedder", FakeEmbedder())
        self.notifier = overrides.pop("notifier", FakeNotifier())
        self.invites = overrides.pop("invites", FakeInviteRepository())
        self.email_sender = overrides.pop("email_sender", FakeEmailSender())
        settings_overrides = {"SLACK_WEBHOOK_URL": WEBHOOK_URL, "EMBEDDING_MAX_CONCURRENCY": 4, "APP_URL": APP_URL}
        settings_overrides.update(overrides.pop("settings", {}))
        self.settings = Settings(**settings_overrides)
        self.container = ServiceContainer.from_components(
            settings=self.settings,
            identity=self.identity,
            text_generator=self.generator,
            embedding_model=self.embedder,
            notifier=self.notifier,
            invites=self.invites,
            email_sender=self.email_sender,
            clock=self.clock,
        )
        self.client = TestClient(create_app(self.container))


@pytest.fixture
def harness_factory():
    return Harness


@pytest.fixture
def harness():
    return Harness()
