from __future__ import annotations

import logging

from pydantic import ValidationError

from oauth_consent.models.auth_server_payloads import ScopesResponse
from oauth_consent.models.client_metadata import ClientMetadata
from oauth_consent.models.errors import ServiceError
from oauth_consent.services.auth_server import AuthServerClient

logger = logging.getLogger(__name__)

SCOPES_PATH = "/oauth/scopes"
RESOLVE_FAILED = "Failed to fetch OAuth client information"


class ClientInfoResolver:
    """Look up what the consent page shows about the requesting application."""

    def __init__(self, auth_server: AuthServerClient) -> None:
        self._auth_server = auth_server

    async def resolve(self, client_id: str, scope: str) -> ClientMetadata:
        """Fetch display metadata and scope descriptions for a client.

        Both arguments come from an already-validated request.

        Raises:
            ServiceError: Non-2xx response, or a 2xx body that is not a ScopesResponse.
            NetworkError: The authorization server could not be reached.
        """
        response = await self._auth_server.request(
            "GET",
            SCOPES_PATH,
            {"client_id": client_id, "scope": scope},
            failure_message=RESOLVE_FAILED,
        )

        try:
            data = ScopesResponse.model_validate_json(response.content).data
        except ValidationError as e:
            logger.warning(
                "Malformed scopes response  client_id=%s status=%d",
                client_id,
                response.status_code,
            )
            raise ServiceError(RESOLVE_FAILED, status_code=response.status_code) from e

        client = ClientMetadata.new(
            client_id=client_id,
            requested_scope=scope,
            name=data.name,
            description=data.display_description,
            logo=data.logo_uri,
            scope_descriptions=[d for d in data.scope_description or () if d],
            previously_consented=data.previous_consented,
        )
        logger.info(
            "Resolved client  client_id=%s name=%s scopes=%d",
            client_id,
            client.name,
            len(client.scopes),
        )
        return client

