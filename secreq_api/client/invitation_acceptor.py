# File: secreq_api/client/invitation_acceptor.py
"""
Client-side controller for the accept-invite page.

States: IDLE -> SUBMITTING -> {SUCCEEDED, FAILED, NO_TOKEN}. The controller is
driven by `activate(token)`; navigation and notifications go through injected
ports so every transition can be exercised without a browser.
"""
import abc
import enum
from typing import Optional

import httpx
import structlog

from secreq_api.client.invite_api_client import InviteAcceptOutcome, InviteApiClient

log = structlog.get_logger(__name__)

HOME_ROUTE = "/"
LOGIN_ROUTE = "/auth/login"
UNREACHABLE_MESSAGE = "Could not reach the server"

_UNSET = object()


class NavigatorPort(abc.ABC):
    @abc.abstractmethod
    def redirect(self, route: str) -> None:
        raise NotImplementedError


class ToasterPort(abc.ABC):
    @abc.abstractmethod
    def success(self, title: str, description: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def error(self, title: str, description: str) -> None:
        raise NotImplementedError


class AcceptorState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NO_TOKEN = "no_token"


class InvitationAcceptor:

    def __init__(self, api: InviteApiClient, navigator: NavigatorPort, toaster: ToasterPort):
        self.api = api
        self.navigator = navigator
        self.toaster = toaster
        self.state = AcceptorState.IDLE
        self._last_token = _UNSET

    async def activate_from_url(self, url: str) -> AcceptorState:
        """Reads `token` from the page URL's query string and activates."""
        return await self.activate(httpx.URL(url).params.get("token"))

    async def activate(self, token: Optional[str]) -> AcceptorState:
        # runs at most once per distinct token value
        if token == self._last_token:
            log.debug("Invite acceptor re-activated with same token, ignoring", state=self.state.value)
            return self.state
        self._last_token = token

        if not token:
            self.state = AcceptorState.NO_TOKEN
            self.navigator.redirect(HOME_ROUTE)
            return self.state

        self.state = AcceptorState.SUBMITTING
        try:
            outcome = await self.api.accept(token)
        except httpx.HTTPError as e:
            log.warning("Invite acceptance request failed", error=str(e))
            outcome = InviteAcceptOutcome(ok=False, message=UNREACHABLE_MESSAGE)

        if outcome.ok:
            self.state = AcceptorState.SUCCEEDED
            self.toaster.success("Joined organization", outcome.message)
            self.navigator.redirect(LOGIN_ROUTE)
        else:
            self.state = AcceptorState.FAILED
            self.toaster.error("Error", outcome.message)
            self.navigator.redirect(HOME_ROUTE)
        return self.state
