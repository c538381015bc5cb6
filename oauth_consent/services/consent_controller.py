"""Consent flow state machine.

One ConsentController drives one consent session:

    Loading ──validate──► Failed            (bad params: shown inline)
       │
       └──resolve client──► Failed          (resolver error: shown inline)
                  │
                  ▼
                Ready ──deny──────────────► Redirected(denied)
                  │
                approve
                  ▼
             Authorizing ──issue code──► Redirected(approved)
                  │
                  └──issuer error──────► Redirected(failed)  (error=server_error)

Redirected and Failed are terminal: load(), approve() and deny() are all
no-ops there.  A new navigation gets a new controller.

The state value is the single source of truth: pages are rendered from
it and nothing else.

STALE RESPONSES
----------------
load() can be called again while an earlier load() is still awaiting the
resolver (the user navigated to a new query string).  Each load() starts a
new generation; any await that resumes under an older generation drops its
result instead of overwriting the newer state.  approve() checks the same
counter, so a code issued for a request the user navigated away from never
turns into a redirect.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, Protocol

from oauth_consent.core.metrics import CONSENT_DECISIONS, CONSENT_PAGE_LOADS
from oauth_consent.models.authorization_request import AuthorizationRequest
from oauth_consent.models.authorization_result import AuthorizationResult
from oauth_consent.models.client_metadata import ClientMetadata
from oauth_consent.models.errors import ConsentError, RequestValidationError
from oauth_consent.services.redirect_builder import (
    ACCESS_DENIED,
    SERVER_ERROR,
    build_error_redirect,
    build_success_redirect,
)
from oauth_consent.services.request_validator import validate_authorization_request

logger = logging.getLogger(__name__)

Outcome = Literal["approved", "denied", "failed"]


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Loading:
    pass


@dataclass(frozen=True, slots=True)
class Ready:
    request: AuthorizationRequest
    client: ClientMetadata


@dataclass(frozen=True, slots=True)
class Authorizing:
    request: AuthorizationRequest
    client: ClientMetadata


@dataclass(frozen=True, slots=True)
class Redirected:
    url: str
    outcome: Outcome


@dataclass(frozen=True, slots=True)
class Failed:
    messages: tuple[str, ...]
    status_code: int = 400


ConsentState = Loading | Ready | Authorizing | Redirected | Failed


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class ClientResolver(Protocol):
    async def resolve(self, client_id: str, scope: str) -> ClientMetadata: ...


class CodeIssuer(Protocol):
    async def issue(self, request: AuthorizationRequest) -> AuthorizationResult: ...


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class ConsentController:
    def __init__(self, resolver: ClientResolver, issuer: CodeIssuer) -> None:
        self._resolver = resolver
        self._issuer = issuer
        self._state: ConsentState = Loading()
        self._generation = 0

    @property
    def state(self) -> ConsentState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            logger.info(
                "Discarding stale response  generation=%d current=%d",
                generation,
                self._generation,
            )
            return True
        return False

    async def load(self, params: Mapping[str, str]) -> ConsentState:
        """Validate the incoming parameters and resolve the client.

        Terminal states are final: a new navigation gets a new controller.
        """
        current = self._state
        if isinstance(current, (Redirected, Failed)):
            logger.info("Load ignored  state=%s", type(current).__name__)
            return current

        self._generation += 1
        generation = self._generation
        self._state = Loading()

        try:
            request = validate_authorization_request(params).require()
        except RequestValidationError as e:
            logger.info("Invalid authorization request  errors=%d", len(e.messages))
            CONSENT_PAGE_LOADS.labels(result="invalid_request").inc()
            self._state = Failed(e.messages, status_code=400)
            return self._state

        try:
            client = await self._resolver.resolve(request.client_id, request.scope)
        except ConsentError as e:
            if self._is_stale(generation):
                return self._state
            # Shown inline even though redirect_uri is known here; see
            # DESIGN.md, "Resolver failures".
            CONSENT_PAGE_LOADS.labels(result="resolver_failed").inc()
            self._state = Failed((e.message,), status_code=502)
            return self._state

        if self._is_stale(generation):
            return self._state

        CONSENT_PAGE_LOADS.labels(result="ready").inc()
        self._state = Ready(request=request, client=client)
        return self._state

    async def approve(self) -> ConsentState:
        """Issue a code and redirect.  No-op unless Ready."""
        current = self._state
        if not isinstance(current, Ready):
            logger.info("Approve ignored  state=%s", type(current).__name__)
            return current

        generation = self._generation
        request = current.request
        # Set before awaiting: a second approve() arriving while the issuer
        # is in flight sees Authorizing and does nothing.
        self._state = Authorizing(request=request, client=current.client)

        try:
            result = await self._issuer.issue(request)
        except ConsentError as e:
            if self._is_stale(generation):
                return self._state
            return self._fail_authorization(request, e)

        if self._is_stale(generation):
            return self._state

        # result.state is deliberately ignored.
        url = build_success_redirect(request.redirect_uri, result.code, request.state)
        return self._redirect(url, "approved", request.client_id)

    def deny(self) -> ConsentState:
        """Send access_denied back to the caller.  No-op unless Ready."""
        current = self._state
        if not isinstance(current, Ready):
            logger.info("Deny ignored  state=%s", type(current).__name__)
            return current

        request = current.request
        url = build_error_redirect(request.redirect_uri, ACCESS_DENIED, request.state)
        return self._redirect(url, "denied", request.client_id)

    def _fail_authorization(
        self, request: AuthorizationRequest, error: ConsentError
    ) -> ConsentState:
        if not request.redirect_uri:
            CONSENT_DECISIONS.labels(outcome="failed").inc()
            self._state = Failed((error.message,), status_code=502)
            return self._state
        url = build_error_redirect(
            request.redirect_uri, SERVER_ERROR, request.state, error.message
        )
        return self._redirect(url, "failed", request.client_id)

    def _redirect(self, url: str, outcome: Outcome, client_id: str) -> ConsentState:
        CONSENT_DECISIONS.labels(outcome=outcome).inc()
        logger.info(
            "Consent finished  client_id=%s outcome=%s",
            client_id,
            outcome,
            extra={"client_id": client_id, "outcome": outcome},
        )
        self._state = Redirected(url=url, outcome=outcome)
        return self._state
