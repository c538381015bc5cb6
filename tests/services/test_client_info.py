"""ClientInfoResolver against a scripted authorization server."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from oauth_consent.models.client_metadata import ClientMetadata, ScopeDescriptor
from oauth_consent.models.errors import NetworkError, ServiceError
from oauth_consent.services.client_info import RESOLVE_FAILED, ClientInfoResolver
from tests.conftest import AUTH_SERVER_TOKEN, VALID_PARAMS, FakeAuthServer

CLIENT_ID = VALID_PARAMS["client_id"]


def _resolve(server: FakeAuthServer, scope: str = "conversion", **client_kwargs) -> ClientMetadata:
    resolver = ClientInfoResolver(server.client(**client_kwargs))
    return asyncio.run(resolver.resolve(CLIENT_ID, scope))


def test_resolve_maps_payload(auth_server: FakeAuthServer) -> None:
    client = _resolve(auth_server)
    assert client.id == CLIENT_ID
    assert client.name == "Zapier"
    assert client.description == "Connect your conversions to 5000+ apps"
    assert client.logo == "https://cdn.example.com/zapier.png"
    assert client.scopes == (
        ScopeDescriptor("read_your_conversion_data", "Read your conversion data"),
        ScopeDescriptor("create_conversions", "Create conversions"),
    )
    assert client.previously_consented is False


def test_resolve_sends_query_and_credential(auth_server: FakeAuthServer) -> None:
    _resolve(auth_server, scope="conversion reports")
    (request,) = auth_server.requests_to("/oauth/scopes")
    assert request.method == "GET"
    assert request.url.params["client_id"] == CLIENT_ID
    assert request.url.params["scope"] == "conversion reports"
    assert request.headers["authorization"] == f"Bearer {AUTH_SERVER_TOKEN}"
    assert request.headers["accept"] == "application/json"


def test_resolve_raw_credential_when_scheme_empty(auth_server: FakeAuthServer) -> None:
    _resolve(auth_server, auth_scheme="")
    (request,) = auth_server.requests_to("/oauth/scopes")
    assert request.headers["authorization"] == AUTH_SERVER_TOKEN


def test_resolve_no_credential_header_without_token(auth_server: FakeAuthServer) -> None:
    resolver = ClientInfoResolver(auth_server.client(token=""))
    asyncio.run(resolver.resolve(CLIENT_ID, "conversion"))
    (request,) = auth_server.requests_to("/oauth/scopes")
    assert "authorization" not in request.headers


def test_resolve_defaults_for_sparse_payload(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (200, {"data": {"client_id": CLIENT_ID}})
    client = _resolve(auth_server)
    assert client.name == "Unknown Application"
    assert client.description == "No description available"
    assert client.logo is None
    assert client.scopes == (ScopeDescriptor("conversion", "Access to conversion data"),)


def test_resolve_empty_scope_list_falls_back(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (200, {"data": {"name": "App", "scope_description": []}})
    client = _resolve(auth_server, scope="reports")
    assert client.scopes == (ScopeDescriptor("reports", "Access to reports data"),)


def test_resolve_previously_consented(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (200, {"data": {"name": "App", "previous_consented": True}})
    assert _resolve(auth_server).previously_consented is True


def test_resolve_error_uses_error_description(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (
        400,
        {"error": "invalid_client", "error_description": "Unknown client", "message": "x"},
    )
    with pytest.raises(ServiceError) as exc_info:
        _resolve(auth_server)
    err = exc_info.value
    assert err.message == "Unknown client"
    assert err.status_code == 400
    assert err.error_code == "invalid_client"


def test_resolve_error_falls_back_to_message(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (403, {"message": "Forbidden for this organization"})
    with pytest.raises(ServiceError) as exc_info:
        _resolve(auth_server)
    assert exc_info.value.message == "Forbidden for this organization"
    assert exc_info.value.error_code is None


def test_resolve_error_generic_message_for_non_json(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (502, "<html>Bad Gateway</html>")
    with pytest.raises(ServiceError) as exc_info:
        _resolve(auth_server)
    assert exc_info.value.message == "API request failed"
    assert exc_info.value.status_code == 502


def test_resolve_malformed_success_payload(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (200, {"client_id": CLIENT_ID})
    with pytest.raises(ServiceError) as exc_info:
        _resolve(auth_server)
    assert exc_info.value.message == RESOLVE_FAILED
    assert exc_info.value.status_code == 200


def test_resolve_network_failure(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = httpx.ConnectError("connection refused")
    with pytest.raises(NetworkError) as exc_info:
        _resolve(auth_server)
    assert exc_info.value.message == RESOLVE_FAILED


def test_resolve_single_attempt_on_failure(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = httpx.ReadTimeout("timed out")
    with pytest.raises(NetworkError):
        _resolve(auth_server)
    assert len(auth_server.requests_to("/oauth/scopes")) == 1


def test_resolve_mistyped_payload_is_service_error(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (200, {"data": {"name": "App", "scope_description": "not a list"}})
    with pytest.raises(ServiceError) as exc_info:
        _resolve(auth_server)
    assert exc_info.value.message == RESOLVE_FAILED


def test_resolve_drops_blank_scope_descriptions(auth_server: FakeAuthServer) -> None:
    auth_server.scopes = (200, {"data": {"name": "App", "scope_description": ["", "Read reports"]}})
    client = _resolve(auth_server)
    assert client.scopes == (ScopeDescriptor("read_reports", "Read reports"),)
