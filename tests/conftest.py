from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import oauth_consent` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from oauth_consent.api.consent import consent_sessions  # noqa: E402
from oauth_consent.api.dependencies import get_auth_server  # noqa: E402
from oauth_consent.main import app  # noqa: E402
from oauth_consent.services.auth_server import AuthServerClient  # noqa: E402

AUTH_SERVER_URL = "https://auth.test"
AUTH_SERVER_TOKEN = "test-credential-9f2c"

REDIRECT_URI = "https://app.example.com/oauth/callback"
ORIGINAL_STATE = "-G2EoDooYcrJ5p8EF1AM677T8BvnSMxQMU4HtUjoQ4Y"
CODE_CHALLENGE = "BSupaW6JDyiPDgU4HM8wkLj94DELW0BvsxPAoO2d5XA"

VALID_PARAMS = {
    "client_id": "8f9a0002-ae0f-4412-ac4c-902f1e88e5ff",
    "scope": "conversion",
    "state": ORIGINAL_STATE,
    "redirect_uri": REDIRECT_URI,
    "response_type": "code",
    "code_challenge": CODE_CHALLENGE,
    "code_challenge_method": "S256",
}

SCOPES_BODY = {
    "data": {
        "client_id": VALID_PARAMS["client_id"],
        "name": "Zapier",
        "display_description": "Connect your conversions to 5000+ apps",
        "logo_uri": "https://cdn.example.com/zapier.png",
        "scope_description": ["Read your conversion data", "Create conversions"],
        "previous_consented": False,
    }
}


# A scripted reply: (status, JSON body or raw text), or an exception to raise.
Reply = tuple[int, object] | Exception


class FakeAuthServer:
    """Authorization server stand-in behind httpx.MockTransport.

    Set `scopes` / `authorize` to change what the two endpoints answer.
    Every request received is kept in `requests` for assertions.
    """

    def __init__(self) -> None:
        self.scopes: Reply = (200, SCOPES_BODY)
        self.authorize: Reply = (200, {"code": "abc123", "state": ORIGINAL_STATE})
        self.requests: list[httpx.Request] = []
        self._clients: list[AuthServerClient] = []

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth/scopes":
            reply = self.scopes
        elif request.url.path == "/oauth/authorize":
            reply = self.authorize
        else:
            return httpx.Response(404, json={"error": "not_found"})

        if isinstance(reply, Exception):
            raise reply
        status_code, body = reply
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    def client(self, token: str = AUTH_SERVER_TOKEN, **kwargs: object) -> AuthServerClient:
        server_client = AuthServerClient(
            AUTH_SERVER_URL,
            token,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self._handler)),
            **kwargs,  # type: ignore[arg-type]
        )
        self._clients.append(server_client)
        return server_client

    async def aclose(self) -> None:
        for server_client in self._clients:
            await server_client.aclose()

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture(autouse=True)
def reset_consent_sessions() -> None:
    """Clear pending consent sessions between tests."""
    consent_sessions._by_id.clear()


@pytest.fixture
def auth_server() -> Iterator[FakeAuthServer]:
    server = FakeAuthServer()
    yield server
    asyncio.run(server.aclose())


@pytest.fixture
def client(auth_server: FakeAuthServer) -> Iterator[TestClient]:
    """App client wired to the fake authorization server.

    Redirects are not followed: the Location header is what we assert on.
    """
    server_client = auth_server.client()
    app.dependency_overrides[get_auth_server] = lambda: server_client
    try:
        yield TestClient(app, follow_redirects=False)
    finally:
        app.dependency_overrides.pop(get_auth_server, None)
