from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# The seven query parameters of an authorization request, in the order
# they are validated and forwarded to the authorization server.
PARAM_NAMES: tuple[str, ...] = (
    "client_id",
    "scope",
    "state",
    "redirect_uri",
    "response_type",
    "code_challenge",
    "code_challenge_method",
)


@dataclass(frozen=True, slots=True)
class AuthorizationRequest:
    client_id: str
    scope: str
    state: str
    redirect_uri: str
    response_type: Literal["code"]
    code_challenge: str
    code_challenge_method: Literal["S256"]

    def as_params(self) -> dict[str, str]:
        """All seven fields, verbatim, as query parameters."""
        return {name: getattr(self, name) for name in PARAM_NAMES}
