"""Prometheus metrics middleware: count, time and gauge every request.

Endpoint labels use the URL path, with one exception: the consent decision
path embeds a random session id, so it is collapsed to its template.
Otherwise every consent would mint a new time series.
"""

from __future__ import annotations

import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from oauth_consent.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

_CONSENT_PATH = re.compile(r"^/oauth/consent/[^/]+$")


def endpoint_label(path: str) -> str:
    if _CONSENT_PATH.match(path):
        return "/oauth/consent/{consent_id}"
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect Prometheus metrics for every HTTP request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Scrapes of /metrics itself are not traffic.
        if request.url.path == "/metrics":
            return await call_next(request)

        endpoint = endpoint_label(request.url.path)
        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code: str | None = None

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        except Exception:
            # Starlette turns an unhandled exception into a 500.
            status_code = "500"
            raise
        finally:
            duration = time.monotonic() - start
            ACTIVE_REQUESTS.dec()
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code if status_code is not None else "500",
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration)

        return response
