from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_CLIENT_NAME = "Unknown Application"
DEFAULT_CLIENT_DESCRIPTION = "No description available"

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")


def scope_slug(description: str) -> str:
    """Derive a machine name from a human scope description.

    "Read your conversion data!" -> "read_your_conversion_data"
    """
    return _NON_SLUG_RUN.sub("_", description.lower()).strip("_")


@dataclass(frozen=True, slots=True)
class ScopeDescriptor:
    name: str
    description: str

    @staticmethod
    def from_description(description: str) -> ScopeDescriptor:
        return ScopeDescriptor(name=scope_slug(description), description=description)

    @staticmethod
    def fallback(scope: str) -> ScopeDescriptor:
        # Used when the server sends no descriptions for the requested scope.
        return ScopeDescriptor(name=scope, description=f"Access to {scope} data")


@dataclass(frozen=True, slots=True)
class ClientMetadata:
    id: str
    name: str
    description: str
    logo: str | None
    scopes: tuple[ScopeDescriptor, ...]
    previously_consented: bool = False

    @staticmethod
    def new(
        *,
        client_id: str,
        requested_scope: str,
        name: str | None = None,
        description: str | None = None,
        logo: str | None = None,
        scope_descriptions: Iterable[str] | None = None,
        previously_consented: bool = False,
    ) -> ClientMetadata:
        # Defaults and the scope fallback live here so every construction
        # path gets them.
        scopes = tuple(
            ScopeDescriptor.from_description(desc) for desc in scope_descriptions or ()
        )
        if not scopes:
            scopes = (ScopeDescriptor.fallback(requested_scope),)
        return ClientMetadata(
            id=client_id,
            name=name or DEFAULT_CLIENT_NAME,
            description=description or DEFAULT_CLIENT_DESCRIPTION,
            logo=logo or None,
            scopes=scopes,
            previously_consented=previously_consented,
        )
