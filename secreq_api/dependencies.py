# File: secreq_api/dependencies.py
"""
Centralized dependency wiring for the SecReq API.

The container is built once per process in the app lifespan (or handed in
directly by tests) and stored on `app.state`. Endpoint dependencies resolve
use cases from it instead of from module-level client singletons.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Callable, Optional

import httpx
import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from secreq_api.application.ports.email_port import EmailSenderPort
from secreq_api.application.ports.generation_port import EmbeddingModelPort, TextGenerationPort
from secreq_api.application.ports.identity_port import IdentityVerifierPort
from secreq_api.application.ports.invite_repository_port import InviteRepositoryPort
from secreq_api.application.ports.notification_port import NotificationPort
from secreq_api.application.use_cases.accept_invite_use_case import AcceptInviteUseCase
from secreq_api.application.use_cases.embed_texts_use_case import EmbedTextsUseCase
from secreq_api.application.use_cases.generate_text_use_case import GenerateTextUseCase
from secreq_api.application.use_cases.notify_signup_use_case import NotifySignupUseCase
from secreq_api.application.use_cases.send_invite_use_case import SendInviteUseCase
from secreq_api.core.config import Settings
from secreq_api.domain.models import utc_now
from secreq_api.infrastructure.generation.gemini_adapters import (
    GeminiClientHolder,
    GeminiEmbeddingAdapter,
    GeminiTextGenerationAdapter,
)
from secreq_api.infrastructure.identity.supabase_identity_adapter import SupabaseIdentityAdapter
from secreq_api.infrastructure.notifications.resend_email_adapter import ResendEmailAdapter
from secreq_api.infrastructure.notifications.slack_webhook_adapter import SlackWebhookAdapter
from secreq_api.infrastructure.persistence.supabase_invite_repository import SupabaseInviteRepository
from secreq_api.infrastructure.supabase_client import SupabaseClientProvider

log = structlog.get_logger(__name__)

SESSION_COOKIE_NAME = "sb-access-token"

bearer_scheme = HTTPBearer(bearerFormat="JWT", auto_error=False)


@dataclass
class ServiceContainer:
    generate_text: GenerateTextUseCase
    embed_texts: EmbedTextsUseCase
    notify_signup: NotifySignupUseCase
    accept_invite: AcceptInviteUseCase
    send_invite: SendInviteUseCase
    text_generator: TextGenerationPort
    embedding_model: EmbeddingModelPort

    @classmethod
    def from_components(
        cls,
        settings: Settings,
        identity: IdentityVerifierPort,
        text_generator: TextGenerationPort,
        embedding_model: EmbeddingModelPort,
        notifier: NotificationPort,
        invites: InviteRepositoryPort,
        email_sender: EmailSenderPort,
        clock: Callable[[], datetime] = utc_now,
    ) -> "ServiceContainer":
        return cls(
            generate_text=GenerateTextUseCase(identity, text_generator),
            embed_texts=EmbedTextsUseCase(
                identity,
                embedding_model,
                max_concurrency=settings.EMBEDDING_MAX_CONCURRENCY,
            ),
            notify_signup=NotifySignupUseCase(
                identity,
                notifier,
                webhook_url=settings.SLACK_WEBHOOK_URL,
                window_seconds=settings.SIGNUP_NOTIFY_WINDOW_SECONDS,
                message_prefix=settings.SIGNUP_MESSAGE_PREFIX,
                clock=clock,
            ),
            accept_invite=AcceptInviteUseCase(identity, invites, clock=clock),
            send_invite=SendInviteUseCase(identity, invites, email_sender, app_url=settings.APP_URL),
            text_generator=text_generator,
            embedding_model=embedding_model,
        )


def build_service_container(settings: Settings, http_client: httpx.AsyncClient) -> ServiceContainer:
    """Builds the production adapters. Nothing here performs network I/O."""
    auth_clients = SupabaseClientProvider(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY.get_secret_value(),
        name="auth",
    )
    service_key = settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value() if settings.SUPABASE_SERVICE_ROLE_KEY else ""
    service_clients = SupabaseClientProvider(settings.SUPABASE_URL, service_key, name="service")

    gemini = GeminiClientHolder(settings.GOOGLE_API_KEY.get_secret_value() if settings.GOOGLE_API_KEY else None)

    return ServiceContainer.from_components(
        settings=settings,
        identity=SupabaseIdentityAdapter(auth_clients),
        text_generator=GeminiTextGenerationAdapter(
            gemini, settings.GENERATION_MODEL_NAME, settings.GENERATION_TEMPERATURE
        ),
        embedding_model=GeminiEmbeddingAdapter(
            gemini, settings.EMBEDDING_MODEL_NAME, settings.EMBEDDING_TASK_TYPE
        ),
        notifier=SlackWebhookAdapter(http_client),
        invites=SupabaseInviteRepository(service_clients),
        email_sender=ResendEmailAdapter(
            http_client,
            settings.RESEND_API_KEY.get_secret_value() if settings.RESEND_API_KEY else None,
            sender=settings.INVITE_EMAIL_FROM,
        ),
    )


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        log.error("Service container requested but it was never initialized.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again later.",
        )
    return container


async def get_session_token(
    request: Request,
    authorization: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Optional[str]:
    """Session context: bearer token first, Supabase session cookie as fallback."""
    if authorization is not None and authorization.credentials:
        return authorization.credentials
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def get_generate_text_use_case(container: Annotated[ServiceContainer, Depends(get_container)]) -> GenerateTextUseCase:
    return container.generate_text


def get_embed_texts_use_case(container: Annotated[ServiceContainer, Depends(get_container)]) -> EmbedTextsUseCase:
    return container.embed_texts


def get_notify_signup_use_case(container: Annotated[ServiceContainer, Depends(get_container)]) -> NotifySignupUseCase:
    return container.notify_signup


def get_accept_invite_use_case(container: Annotated[ServiceContainer, Depends(get_container)]) -> AcceptInviteUseCase:
    return container.accept_invite


def get_send_invite_use_case(container: Annotated[ServiceContainer, Depends(get_container)]) -> SendInviteUseCase:
    return container.send_invite


SessionToken = Annotated[Optional[str], Depends(get_session_token)]
