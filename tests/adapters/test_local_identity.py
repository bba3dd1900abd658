"""Tests for the passwordless local identity provider."""

from unittest.mock import patch

import pytest

from taskpilot_cli.adapters.local_identity import LocalIdentityProvider, local_identity


def test_local_identity_id_is_lowercased_email():
    assert local_identity("Ada@Example.com").external_id == "local-ada@example.com"


def test_default_session_uses_configured_email():
    session = LocalIdentityProvider(email="ada@example.com").default_session()
    assert session.identity.email == "ada@example.com"


def test_default_session_falls_back_to_os_user():
    with patch("taskpilot_cli.adapters.local_identity.getpass.getuser", return_value="ada"):
        session = LocalIdentityProvider().default_session()
    assert session.identity.email == "ada@localhost"


def test_never_requires_login():
    assert LocalIdentityProvider.requires_login is False


@pytest.mark.asyncio
async def test_sign_in_checks_no_password():
    session = await LocalIdentityProvider().sign_in("ada@example.com", "")
    assert session.identity.external_id == "local-ada@example.com"
    assert session.id_token is None


@pytest.mark.asyncio
async def test_sign_up_and_update_profile():
    provider = LocalIdentityProvider()
    session = await provider.sign_up("ada@example.com", "", "Ada")
    assert session.identity.display_name == "Ada"

    await provider.update_profile(session, "Ada L.")

    assert (await provider.lookup(session)).display_name == "Ada L."
