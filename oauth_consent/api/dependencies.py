from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from oauth_consent.services.auth_server import AuthServerClient
from oauth_consent.services.authorization_issuer import AuthorizationIssuer
from oauth_consent.services.client_info import ClientInfoResolver
from oauth_consent.services.consent_controller import ConsentController


def get_auth_server(request: Request) -> AuthServerClient:
    """The shared authorization server client created in the app lifespan."""
    return request.app.state.auth_server


def new_consent_controller(
    auth_server: Annotated[AuthServerClient, Depends(get_auth_server)],
) -> ConsentController:
    """A fresh state machine: every navigation to /oauth/authorize gets one."""
    return ConsentController(
        resolver=ClientInfoResolver(auth_server),
        issuer=AuthorizationIssuer(auth_server),
    )
