from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from oauth_consent.models.authorization_request import PARAM_NAMES, AuthorizationRequest
from oauth_consent.models.errors import RequestValidationError

# Validation of the incoming authorization request (the seven query params
# the calling application puts on /oauth/authorize).
#
# Every rule runs and every violation is reported, in PARAM_NAMES order.

CLIENT_ID_REQUIRED = "Client ID is required"
SCOPE_REQUIRED = "Scope is required"
STATE_REQUIRED = "State is required"
INVALID_REDIRECT_URI = "Invalid redirect URI"
RESPONSE_TYPE_MUST_BE_CODE = 'Response type must be "code"'
CODE_CHALLENGE_REQUIRED = "Code challenge is required"
CHALLENGE_METHOD_MUST_BE_S256 = 'Code challenge method must be "S256"'

# RFC 3986 §3.1: ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_WHITESPACE_OR_CONTROL = re.compile(r"[\x00-\x20\x7f]")
_HOST_REQUIRED_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Either a valid request and no errors, or no request and >= 1 error."""

    request: AuthorizationRequest | None
    errors: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return self.request is not None

    @property
    def redirect_uri_valid(self) -> bool:
        return INVALID_REDIRECT_URI not in self.errors

    def require(self) -> AuthorizationRequest:
        """Return the request, or raise with every violation."""
        if self.request is None:
            raise RequestValidationError(self.errors)
        return self.request


def is_absolute_uri(value: str) -> bool:
    """True for `scheme:rest` URIs usable as a redirect target.

    Custom schemes (native app callbacks like com.example.app:/cb) are
    allowed; web schemes additionally need a host.
    """
    if not value or _WHITESPACE_OR_CONTROL.search(value):
        return False
    scheme, sep, rest = value.partition(":")
    if not sep or not rest or not _SCHEME.match(scheme):
        return False
    try:
        parts = urlsplit(value)
        # Accessing .port validates it (raises on "host:abc")
        parts.port
    except ValueError:
        return False
    if parts.scheme.lower() in _HOST_REQUIRED_SCHEMES and not parts.hostname:
        return False
    return True


def first_values(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Collapse a multi-valued query into first-value-wins, like
    URLSearchParams.get().  Only the seven known names are kept."""
    params: dict[str, str] = {}
    for key, value in pairs:
        if key in PARAM_NAMES and key not in params:
            params[key] = value
    return params


def validate_authorization_request(params: Mapping[str, str]) -> ValidationResult:
    """Validate raw query parameters.  Pure function.

    Absent keys are treated as the empty string.
    """
    raw = {name: params.get(name) or "" for name in PARAM_NAMES}
    errors: list[str] = []

    if not raw["client_id"]:
        errors.append(CLIENT_ID_REQUIRED)
    if not raw["scope"]:
        errors.append(SCOPE_REQUIRED)
    if not raw["state"]:
        errors.append(STATE_REQUIRED)
    if not is_absolute_uri(raw["redirect_uri"]):
        errors.append(INVALID_REDIRECT_URI)
    # Authorization Code grant only; implicit ("token") is not supported.
    if raw["response_type"] != "code":
        errors.append(RESPONSE_TYPE_MUST_BE_CODE)
    if not raw["code_challenge"]:
        errors.append(CODE_CHALLENGE_REQUIRED)
    # S256 only, "plain" is rejected.
    if raw["code_challenge_method"] != "S256":
        errors.append(CHALLENGE_METHOD_MUST_BE_S256)

    if errors:
        return ValidationResult(request=None, errors=tuple(errors))

    request = AuthorizationRequest(  # type: ignore[arg-type]
        client_id=raw["client_id"],
        scope=raw["scope"],
        state=raw["state"],
        redirect_uri=raw["redirect_uri"],
        response_type=raw["response_type"],
        code_challenge=raw["code_challenge"],
        code_challenge_method=raw["code_challenge_method"],
    )
    return ValidationResult(request=request, errors=())
