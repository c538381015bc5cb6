from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AuthorizationResult:
    """What the authorization server returned for an approved request.

    `state` is the server's echo and is informational only.  Redirects are
    always built from the state of the original AuthorizationRequest.
    """

    code: str
    state: str | None = None
