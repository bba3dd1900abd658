"""Tests for AuthService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskpilot_cli.adapters.local_identity import LocalIdentityProvider
from taskpilot_cli.models import AuthenticationError, AuthSession, Identity
from taskpilot_cli.services.auth_service import AuthService
from taskpilot_cli.services.user_service import UserService


@pytest.fixture()
def config_service():
    svc = MagicMock()
    svc.load_session.return_value = None
    return svc


@pytest.fixture()
def user_service(user_repository, cache):
    return UserService(user_repository, cache)


@pytest.fixture()
def local_auth(config_service, user_service):
    return AuthService(LocalIdentityProvider(email="ada@example.com"), config_service, user_service)


@pytest.fixture()
def remote_provider():
    provider = MagicMock()
    provider.requires_login = True
    provider.sign_in = AsyncMock()
    provider.sign_out = AsyncMock()
    provider.lookup = AsyncMock()
    provider.default_session.return_value = None
    return provider


def _session(external_id="uid-1", email="ada@example.com", name=None) -> AuthSession:
    return AuthSession(
        identity=Identity(external_id=external_id, email=email, display_name=name),
        id_token="id-token",
        refresh_token="refresh-token",
    )


class TestLocalContext:
    def test_always_authenticated(self, local_auth):
        assert local_auth.is_authenticated()

    @pytest.mark.asyncio
    async def test_current_user_creates_directory_record(self, local_auth, user_repository):
        user = await local_auth.current_user()

        assert user.id == "local-ada@example.com"
        assert user.name == "ada"
        assert await user_repository.get(user.id) == user

    @pytest.mark.asyncio
    async def test_sign_in_remembers_session(self, local_auth, config_service):
        user = await local_auth.sign_in("grace@example.com", "")

        assert user.email == "grace@example.com"
        config_service.save_session.assert_called_once()
        config_service.set_context_user.assert_called_once_with("grace@example.com")

    @pytest.mark.asyncio
    async def test_sign_up_uses_name(self, local_auth):
        user = await local_auth.sign_up("Grace Hopper", "grace@example.com", "")

        assert user.name == "Grace Hopper"
        assert user.initials == "GH"

    @pytest.mark.asyncio
    async def test_update_profile(self, local_auth, user_repository):
        await local_auth.current_user()

        user = await local_auth.update_profile("Ada Lovelace")

        assert user.name == "Ada Lovelace"
        assert user.initials == "AL"
        assert (await user_repository.get(user.id)).name == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_update_profile_without_record(self, local_auth, user_repository):
        user = await local_auth.update_profile("Ada Lovelace")

        assert user.name == "Ada Lovelace"
        assert len(await user_repository.list_all()) == 1


class TestRemoteContext:
    def test_not_authenticated_without_session(self, remote_provider, config_service, user_service):
        auth = AuthService(remote_provider, config_service, user_service)

        assert not auth.is_authenticated()
        with pytest.raises(AuthenticationError, match="Not logged in"):
            auth.current_session()

    @pytest.mark.asyncio
    async def test_current_user_falls_back_to_identity(
        self, remote_provider, config_service, user_service
    ):
        session = _session(email=None)
        config_service.load_session.return_value = session
        remote_provider.lookup.return_value = session.identity
        auth = AuthService(remote_provider, config_service, user_service)

        user = await auth.current_user()

        assert user.id == "uid-1"
        assert user.name == "uid-1"
        assert user.email == ""

    @pytest.mark.asyncio
    async def test_sign_in_attaches_session(
        self, remote_provider, config_service, user_service, user_repository
    ):
        session = _session(name="Ada Lovelace")
        remote_provider.sign_in.return_value = session
        strategy_context = MagicMock()
        auth = AuthService(remote_provider, config_service, user_service, strategy_context)

        user = await auth.sign_in("ada@example.com", "secret")

        assert user.id == "uid-1"
        assert await user_repository.get("uid-1") == user
        strategy_context.strategy.attach_session.assert_called_once_with(
            session, on_refresh=config_service.save_session
        )

    @pytest.mark.asyncio
    async def test_bad_credentials(self, remote_provider, config_service, user_service):
        remote_provider.sign_in.side_effect = AuthenticationError("Invalid email or password.")
        auth = AuthService(remote_provider, config_service, user_service)

        with pytest.raises(AuthenticationError):
            await auth.sign_in("ada@example.com", "wrong")
        config_service.save_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_sign_out(self, remote_provider, config_service, user_service):
        session = _session()
        config_service.load_session.return_value = session
        auth = AuthService(remote_provider, config_service, user_service)

        await auth.sign_out()

        remote_provider.sign_out.assert_awaited_once_with(session)
        config_service.clear_session.assert_called_once()
        config_service.set_context_user.assert_called_once_with(None)
