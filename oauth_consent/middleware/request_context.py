"""Request context middleware: request ids, consent ids, timing.

A consent session spans at least two HTTP requests (page load, then the
Approve/Deny post) and a redirect out to another site.  Every log line
therefore carries two correlation ids:

  request_id: one per HTTP request.  Taken from X-Request-ID when the
              proxy in front of us set one, generated otherwise, and
              echoed back on the response.
  consent_id: one per consent session.  Set by the consent routes once
              the session exists.

Both live in ContextVars: requests interleave on one event loop thread, so
thread-locals would leak ids between them.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
consent_id_var: ContextVar[str] = ContextVar("consent_id", default="-")


class RequestContextFilter(logging.Filter):
    """Stamp the current request and consent ids onto every LogRecord.

    Attached to the root handler by setup_logging(): logger-level filters
    do not see records propagated up from child loggers, handler filters do.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        if not hasattr(record, "consent_id"):
            record.consent_id = consent_id_var.get("-")  # type: ignore[attr-defined]
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request id, time the request, log one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        consent_id_var.set("-")

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # Only the path: the query string of /oauth/authorize holds the
        # caller's state and PKCE challenge.
        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
