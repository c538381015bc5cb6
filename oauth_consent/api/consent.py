from __future__ import annotations

import logging
from typing import Annotated, Literal
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from oauth_consent.api import pages
from oauth_consent.api.dependencies import new_consent_controller
from oauth_consent.core.config import SETTINGS
from oauth_consent.middleware.request_context import consent_id_var
from oauth_consent.repos.consent_session_repo import InMemoryConsentSessionRepo
from oauth_consent.services.consent_controller import (
    Authorizing,
    ConsentController,
    Failed,
    Ready,
    Redirected,
)
from oauth_consent.services.request_validator import first_values

# ---------------------------------------------------------------------------
# Consent UI: the user-facing half of Authorization Code + PKCE
#
# Endpoints:
#   GET  /                           landing page
#   GET  /oauth/authorize            validate, resolve client, show consent
#   POST /oauth/consent/{id}         Approve / Deny, redirect to the caller
#
# The controller (services/consent_controller.py) owns every decision;
# these handlers only translate HTTP in and out of it.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(tags=["consent"])

# Module-level singleton: the page load and the decision post share it
consent_sessions = InMemoryConsentSessionRepo(
    ttl_seconds=SETTINGS.consent_session_ttl_sec
)

_DEMO_PARAMS = {
    "client_id": "demo-client",
    "scope": "conversion",
    "state": "demo-state",
    "redirect_uri": "http://localhost:3000/callback",
    "response_type": "code",
    # S256 of the RFC 7636 Appendix B example verifier
    "code_challenge": "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
    "code_challenge_method": "S256",
}


# ========================== GET / ==========================================


@router.get("/")
def landing() -> HTMLResponse:
    demo_url = f"/oauth/authorize?{urlencode(_DEMO_PARAMS)}" if SETTINGS.is_dev else None
    return pages.render_landing(demo_url)


# ========================== GET /oauth/authorize ===========================
# The calling application sends the user's browser here with the seven
# authorization request parameters.


@router.get("/oauth/authorize")
async def consent_page(
    request: Request,
    controller: Annotated[ConsentController, Depends(new_consent_controller)],
) -> HTMLResponse:
    params = first_values(request.query_params.multi_items())
    logger.info(
        "Authorization request received  client_id=%s scope=%s",
        params.get("client_id", ""),
        params.get("scope", ""),
    )

    state = await controller.load(params)

    if not isinstance(state, Ready):
        # Failed: validation errors or resolver failure, shown inline.
        return pages.render_state(state)

    consent_id = consent_sessions.create(controller)
    consent_id_var.set(consent_id)
    logger.info(
        "Consent session opened  client_id=%s",
        state.request.client_id,
        extra={"client_id": state.request.client_id},
    )
    return pages.render_consent(state, consent_id)


# ========================== POST /oauth/consent/{id} ========================
# The consent form posts the user's decision here.  Success and failure both
# leave through a 303 to the caller's redirect_uri.


@router.post("/oauth/consent/{consent_id}", response_model=None)
async def submit_decision(
    consent_id: str,
    decision: Annotated[Literal["approve", "deny"], Form()],
) -> RedirectResponse | HTMLResponse:
    consent_id_var.set(consent_id)

    controller = consent_sessions.get(consent_id)
    if controller is None:
        logger.warning("Decision for unknown or expired consent session")
        return pages.render_expired()

    logger.info("Consent decision received  decision=%s", decision)
    if decision == "approve":
        state = await controller.approve()
    else:
        state = controller.deny()

    if isinstance(state, Authorizing):
        # Re-entrant submit while the first approve is still in flight.
        return pages.render_in_progress()

    if isinstance(state, (Redirected, Failed)):
        consent_sessions.discard(consent_id)

    if isinstance(state, Redirected):
        # 303 so the browser follows with GET, not a re-POST of the form.
        return RedirectResponse(url=state.url, status_code=status.HTTP_303_SEE_OTHER)

    return pages.render_state(state, consent_id)
