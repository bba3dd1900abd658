"""Tests for UserService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskpilot_cli.models import BackendError, DuplicateError, Identity, NotFoundError
from taskpilot_cli.services.user_service import (
    UserService,
    avatar_for,
    default_name,
    initials_for,
)
from taskpilot_cli.utils.view_cache import SETTINGS_VIEW, TEAM_VIEW


@pytest.fixture()
def service(user_repository, cache):
    return UserService(user_repository, cache)


def test_initials_for():
    assert initials_for("Ada Lovelace") == "AL"
    assert initials_for("Ada King Lovelace") == "AK"
    assert initials_for("Ada") == "A"
    assert initials_for("ada lovelace") == "al"
    assert initials_for("") == ""


def test_avatar_and_default_name():
    assert avatar_for("Ada") == "https://picsum.photos/seed/Ada/200"
    assert default_name("ada@example.com") == "ada"


class TestAddUser:
    @pytest.mark.asyncio
    async def test_creates_user(self, service, user_repository):
        user = await service.add_user("Ada Lovelace", "ada@example.com")

        assert user.initials == "AL"
        assert user.avatar_url == "https://picsum.photos/seed/Ada Lovelace/200"
        assert await user_repository.get(user.id) == user

    @pytest.mark.asyncio
    async def test_name_defaults_to_email(self, service):
        user = await service.add_user(None, "grace@example.com")

        assert user.name == "grace"
        assert user.initials == "g"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service, user_repository):
        await service.add_user("Ada", "ada@example.com")

        with pytest.raises(DuplicateError, match="already exists"):
            await service.add_user("Other Ada", "ada@example.com")
        assert len(await user_repository.list_all()) == 1

    @pytest.mark.asyncio
    async def test_invalidates_team_view(self, service, cache):
        cache.put(TEAM_VIEW, [])

        await service.add_user("Ada", "ada@example.com")

        assert cache.get(TEAM_VIEW) is None

    @pytest.mark.asyncio
    async def test_backend_failure(self, cache):
        repo = MagicMock()
        repo.find_by_email = AsyncMock(side_effect=BackendError("down"))

        with pytest.raises(BackendError, match="Failed to add user"):
            await UserService(repo, cache).add_user("Ada", "ada@example.com")


class TestListUsers:
    @pytest.mark.asyncio
    async def test_lists_and_caches(self, service, cache):
        await service.add_user("Ada", "ada@example.com")
        await service.add_user("Grace", "grace@example.com")

        users = await service.list_users()

        assert sorted(u.name for u in users) == ["Ada", "Grace"]
        assert len(cache.get(TEAM_VIEW)) == 2

    @pytest.mark.asyncio
    async def test_backend_failure_is_empty(self, cache):
        repo = MagicMock()
        repo.list_all = AsyncMock(side_effect=BackendError("down"))

        assert await UserService(repo, cache).list_users() == []

    @pytest.mark.asyncio
    async def test_get_user_failure_is_none(self, cache):
        repo = MagicMock()
        repo.get = AsyncMock(side_effect=BackendError("down"))

        assert await UserService(repo, cache).get_user("u1") is None


class TestEnsureUserOnLogin:
    @pytest.mark.asyncio
    async def test_creates_record_once(self, service, user_repository):
        identity = Identity(external_id="uid-1", display_name="Ada Lovelace", email="ada@example.com")

        first = await service.ensure_user_on_login(identity)
        second = await service.ensure_user_on_login(identity)

        assert first == second
        assert first.id == "uid-1"
        assert first.initials == "AL"
        assert len(await user_repository.list_all()) == 1

    @pytest.mark.asyncio
    async def test_uses_photo_url(self, service):
        identity = Identity(
            external_id="uid-1", email="ada@example.com", photo_url="https://img/ada.png"
        )

        user = await service.ensure_user_on_login(identity)

        assert user.name == "ada"
        assert user.avatar_url == "https://img/ada.png"

    @pytest.mark.asyncio
    async def test_no_email_no_record(self, service, user_repository):
        assert await service.ensure_user_on_login(Identity(external_id="uid-1")) is None
        assert await user_repository.list_all() == []


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_renames_and_recomputes_initials(self, service, user_repository):
        user = await service.add_user("Ada", "ada@example.com")

        await service.update_user_profile(user.id, "  Ada Lovelace ")

        stored = await user_repository.get(user.id)
        assert stored.name == "Ada Lovelace"
        assert stored.initials == "AL"

    @pytest.mark.asyncio
    async def test_empty_name(self, service):
        with pytest.raises(ValueError, match="Name cannot be empty"):
            await service.update_user_profile("u1", "   ")

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            await service.update_user_profile("nope", "Ada")


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_served_from_settings_view(self, service, user_repository, cache, alice):
        await user_repository.save(alice)

        assert await service.get_profile(alice.id) == alice
        assert cache.get(SETTINGS_VIEW)["id"] == alice.id

        user_repository.get = AsyncMock(side_effect=AssertionError("read the backend"))
        assert (await service.get_profile(alice.id)).model_dump() == alice.model_dump()

    @pytest.mark.asyncio
    async def test_other_users_view_is_ignored(self, service, user_repository, alice, bob):
        await user_repository.save(alice)
        await user_repository.save(bob)
        await service.get_profile(alice.id)

        assert await service.get_profile(bob.id) == bob

    @pytest.mark.asyncio
    async def test_missing_user_is_not_cached(self, service, cache):
        assert await service.get_profile("nope") is None
        assert cache.get(SETTINGS_VIEW) is None

    @pytest.mark.asyncio
    async def test_rename_refreshes_view(self, service, user_repository, alice):
        await user_repository.save(alice)
        await service.get_profile(alice.id)

        await service.update_user_profile(alice.id, "Alice Baker")

        profile = await service.get_profile(alice.id)
        assert profile.name == "Alice Baker"
        assert profile.initials == "AB"
