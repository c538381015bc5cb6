"""Response bodies of the authorization server.

Wire shapes only: the services map these onto ClientMetadata and
AuthorizationResult.  Unknown fields are ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScopesData(BaseModel):
    """`data` of a GET /oauth/scopes response."""

    client_id: str | None = None
    name: str | None = None
    display_description: str | None = None
    logo_uri: str | None = None
    scope_description: list[str] | None = None
    previous_consented: bool = False


class ScopesResponse(BaseModel):
    data: ScopesData


class AuthorizeResponse(BaseModel):
    """Body of a successful POST /oauth/authorize."""

    code: str = Field(min_length=1)
    state: str | None = None  # echo of the request state, never trusted


class ErrorBody(BaseModel):
    """Error body of any non-2xx response.  All fields optional."""

    error: str | None = None
    error_description: str | None = None
    message: str | None = None
