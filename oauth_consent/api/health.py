"""Health and readiness endpoints.

  /health (liveness): the process answers.  Always 200; the body says
    whether the authorization server is configured and how many consent
    sessions are pending.

  /ready (readiness): can this instance serve consent pages?  Not without
    an authorization server to resolve clients against, so 503 until
    AUTH_SERVER_URL is set.  The upstream itself is not pinged: one slow
    authorization server should not pull every replica out of rotation.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from oauth_consent.api.consent import consent_sessions
from oauth_consent.core.config import SETTINGS

router = APIRouter(tags=["health"])


class HealthChecks(BaseModel):
    auth_server: str


class HealthOut(BaseModel):
    status: str
    checks: HealthChecks
    pending_consents: int


@router.get("/health", response_model=HealthOut)
async def health() -> HealthOut:
    return HealthOut(
        status="ok",
        checks=HealthChecks(
            auth_server="configured" if SETTINGS.auth_server_configured else "not_configured",
        ),
        pending_consents=len(consent_sessions),
    )


@router.get("/ready")
async def ready() -> Response:
    if not SETTINGS.auth_server_configured:
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
