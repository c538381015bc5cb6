"""HTTP transport to the authorization server.

Both upstream endpoints (/oauth/scopes, /oauth/authorize) share the same
credential header, the same error body shape and the same failure
classification, so that lives here once:

  response received, 2xx      -> returned to the caller for parsing
  response received, non-2xx  -> ServiceError(message, status, error code)
  no response at all          -> NetworkError(<caller's generic message>)

Single attempt per call.  Whether to retry is the user's decision (reload
the page), never ours: a retried /oauth/authorize could mint two codes.
"""

from __future__ import annotations

import logging
import time

import httpx
from pydantic import ValidationError

from oauth_consent.core.metrics import AUTH_SERVER_DURATION, AUTH_SERVER_REQUESTS
from oauth_consent.models.auth_server_payloads import ErrorBody
from oauth_consent.models.errors import NetworkError, ServiceError

logger = logging.getLogger(__name__)

GENERIC_API_ERROR = "API request failed"


def error_from_response(response: httpx.Response) -> ServiceError:
    """Build a ServiceError from a non-success response.

    A body that does not parse as an ErrorBody counts as empty.
    """
    try:
        body = ErrorBody.model_validate_json(response.content)
    except ValidationError:
        body = ErrorBody()

    return ServiceError(
        body.error_description or body.message or GENERIC_API_ERROR,
        status_code=response.status_code,
        error_code=body.error,
    )


class AuthServerClient:
    """Thin async client for the authorization server.

    The credential is pre-provisioned (see Settings.auth_server_token) and
    injected here; this class never creates or refreshes it.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        auth_scheme: str = "Bearer",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._auth_scheme = auth_scheme
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    def __repr__(self) -> str:
        return f"AuthServerClient(base_url={self.base_url!r})"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = (
                f"{self._auth_scheme} {self._token}" if self._auth_scheme else self._token
            )
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, str],
        *,
        failure_message: str,
    ) -> httpx.Response:
        """Send one request; return the response only if it is a 2xx.

        Args:
            method: HTTP method.
            path: Endpoint path, e.g. "/oauth/scopes".
            params: Query parameters (URL-encoded by httpx).
            failure_message: Message for the NetworkError raised when no
                response is received.

        Raises:
            ServiceError: The server answered with a non-2xx status.
            NetworkError: The request could not be completed.
        """
        start = time.monotonic()
        try:
            response = await self._http_client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                headers=self._headers(),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            AUTH_SERVER_REQUESTS.labels(endpoint=path, result="network_error").inc()
            logger.warning(
                "Authorization server unreachable  %s %s  error=%s",
                method,
                path,
                type(e).__name__,
            )
            raise NetworkError(failure_message) from e
        finally:
            AUTH_SERVER_DURATION.labels(endpoint=path).observe(time.monotonic() - start)

        if not response.is_success:
            error = error_from_response(response)
            AUTH_SERVER_REQUESTS.labels(endpoint=path, result="http_error").inc()
            logger.warning(
                "Authorization server error  %s %s  status=%d error=%s",
                method,
                path,
                response.status_code,
                error.error_code,
            )
            raise error

        AUTH_SERVER_REQUESTS.labels(endpoint=path, result="ok").inc()
        logger.debug("Authorization server %s %s → %d", method, path, response.status_code)
        return response

    async def aclose(self) -> None:
        await self._http_client.aclose()

