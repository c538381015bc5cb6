from __future__ import annotations

from typing import Literal
from urllib.parse import unquote_plus, urlencode, urlsplit, urlunsplit

# Redirect URLs delivered back to the calling application.
#
# The caller's redirect_uri may already carry query parameters of its own
# (tenant ids, return paths...).  Those must survive: we only ever set our
# own keys, and every other query segment is kept byte for byte.  Setting a
# key replaces its first occurrence in place and drops later duplicates, so
# a crafted redirect_uri like ?code=evil&code=x cannot smuggle a second code
# past the caller.

RedirectError = Literal["access_denied", "server_error"]

ACCESS_DENIED: RedirectError = "access_denied"
SERVER_ERROR: RedirectError = "server_error"


def _segment_key(segment: str) -> str:
    return unquote_plus(segment.partition("=")[0])


def _set_query_params(url: str, updates: list[tuple[str, str]]) -> str:
    parts = urlsplit(url)
    segments = parts.query.split("&") if parts.query else []

    for key, value in updates:
        encoded = urlencode([(key, value)])
        merged: list[str] = []
        replaced = False
        for segment in segments:
            if _segment_key(segment) != key:
                merged.append(segment)
            elif not replaced:
                merged.append(encoded)
                replaced = True
        if not replaced:
            merged.append(encoded)
        segments = merged

    return urlunsplit(parts._replace(query="&".join(segments)))


def build_success_redirect(redirect_uri: str, code: str, state: str) -> str:
    """redirect_uri with `code` and `state` set.

    `state` must be the original request's state, never the server's echo.
    """
    return _set_query_params(redirect_uri, [("code", code), ("state", state)])


def build_error_redirect(
    redirect_uri: str,
    error: RedirectError,
    state: str | None = None,
    description: str | None = None,
) -> str:
    """redirect_uri with `error`, plus `state`/`error_description` when given."""
    updates = [("error", error)]
    if state:
        updates.append(("state", state))
    if description:
        updates.append(("error_description", description))
    return _set_query_params(redirect_uri, updates)
