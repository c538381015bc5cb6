from __future__ import annotations

import logging

from pydantic import ValidationError

from oauth_consent.models.auth_server_payloads import AuthorizeResponse
from oauth_consent.models.authorization_request import AuthorizationRequest
from oauth_consent.models.authorization_result import AuthorizationResult
from oauth_consent.models.errors import ServiceError
from oauth_consent.services.auth_server import AuthServerClient

logger = logging.getLogger(__name__)

AUTHORIZE_PATH = "/oauth/authorize"
AUTHORIZE_FAILED = "Failed to authorize OAuth request"


class AuthorizationIssuer:
    """Exchange an approved request for an authorization code."""

    def __init__(self, auth_server: AuthServerClient) -> None:
        self._auth_server = auth_server

    async def issue(self, request: AuthorizationRequest) -> AuthorizationResult:
        """POST every request field to the authorize endpoint.

        The code_challenge is forwarded exactly as the calling application
        sent it; only the holder of the matching verifier can redeem the
        code.

        Raises:
            ServiceError: Non-2xx response, or a 2xx without a code.
            NetworkError: The authorization server could not be reached.
        """
        response = await self._auth_server.request(
            "POST",
            AUTHORIZE_PATH,
            request.as_params(),
            failure_message=AUTHORIZE_FAILED,
        )

        try:
            body = AuthorizeResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                "Malformed authorize response  client_id=%s status=%d",
                request.client_id,
                response.status_code,
            )
            raise ServiceError(AUTHORIZE_FAILED, status_code=response.status_code) from e

        echoed_state = body.state
        if echoed_state != request.state:
            # Not an error: the echo is never used for the redirect.
            logger.warning(
                "Authorization server did not echo state  client_id=%s echoed=%s",
                request.client_id,
                "missing" if echoed_state is None else "different",
            )

        logger.info("Authorization code issued  client_id=%s", request.client_id)
        return AuthorizationResult(code=body.code, state=echoed_state)
