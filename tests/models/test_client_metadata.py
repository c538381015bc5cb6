from __future__ import annotations

import re

import pytest

from oauth_consent.models.client_metadata import (
    DEFAULT_CLIENT_DESCRIPTION,
    DEFAULT_CLIENT_NAME,
    ClientMetadata,
    ScopeDescriptor,
    scope_slug,
)

_SLUG = re.compile(r"^(?:[a-z0-9]+(?:_[a-z0-9]+)*)?$")


@pytest.mark.parametrize(
    ("description", "slug"),
    [
        ("Read your conversion data", "read_your_conversion_data"),
        ("  Create -- Conversions!!  ", "create_conversions"),
        ("Access: profile & e-mail (read-only)", "access_profile_e_mail_read_only"),
        ("ALLCAPS123", "allcaps123"),
        ("Überweisungen lesen", "berweisungen_lesen"),
        ("___", ""),
    ],
)
def test_scope_slug(description: str, slug: str) -> None:
    assert scope_slug(description) == slug


@pytest.mark.parametrize(
    "description",
    ["Read data", "__x__", "a   b", "émoji 🎉 scope", "", "Tabs\tand\nnewlines"],
)
def test_scope_slug_shape(description: str) -> None:
    slug = scope_slug(description)
    assert _SLUG.match(slug)
    assert scope_slug(description) == slug


def test_new_applies_defaults_and_fallback_scope() -> None:
    client = ClientMetadata.new(client_id="c1", requested_scope="conversion")
    assert client.id == "c1"
    assert client.name == DEFAULT_CLIENT_NAME
    assert client.description == DEFAULT_CLIENT_DESCRIPTION
    assert client.logo is None
    assert client.scopes == (
        ScopeDescriptor(name="conversion", description="Access to conversion data"),
    )
    assert client.previously_consented is False


def test_new_empty_description_list_uses_fallback() -> None:
    client = ClientMetadata.new(
        client_id="c1", requested_scope="reports", scope_descriptions=[]
    )
    assert [s.name for s in client.scopes] == ["reports"]


def test_new_keeps_description_order() -> None:
    client = ClientMetadata.new(
        client_id="c1",
        requested_scope="conversion",
        name="Zapier",
        scope_descriptions=["Write things", "Read things"],
    )
    assert client.name == "Zapier"
    assert [s.name for s in client.scopes] == ["write_things", "read_things"]
    assert [s.description for s in client.scopes] == ["Write things", "Read things"]
