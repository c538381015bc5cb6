from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from oauth_consent.api.consent import router as consent_router
from oauth_consent.api.health import router as health_router
from oauth_consent.api.metrics_endpoint import router as metrics_router
from oauth_consent.core.config import SETTINGS
from oauth_consent.core.logging import setup_logging
from oauth_consent.middleware.metrics import MetricsMiddleware
from oauth_consent.middleware.request_context import RequestContextMiddleware
from oauth_consent.services.auth_server import AuthServerClient

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # One pooled HTTP client for the whole process, closed on shutdown.
    auth_server = AuthServerClient(
        SETTINGS.auth_server_url,
        SETTINGS.auth_server_token,
        auth_scheme=SETTINGS.auth_server_auth_scheme,
        timeout=SETTINGS.auth_server_timeout_sec,
    )
    app.state.auth_server = auth_server
    if not SETTINGS.auth_server_configured:
        logger.warning("AUTH_SERVER_URL is not set; consent pages will fail to load")
    try:
        yield
    finally:
        await auth_server.aclose()


# only app setup + router registration

app = FastAPI(
    title="oauth-consent",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(consent_router)

logger.info(
    "oauth-consent started  env=%s log_level=%s port=%d auth_server=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.auth_server_url or "-",
    "on" if SETTINGS.is_dev else "off",
)
