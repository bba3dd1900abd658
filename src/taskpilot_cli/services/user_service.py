"""User service - Team directory operations."""

from __future__ import annotations

import uuid

from pydantic import ValidationError

from taskpilot_cli.models import (
    BackendError,
    DuplicateError,
    Identity,
    TaskPilotError,
    User,
)
from taskpilot_cli.repositories import UserRepository
from taskpilot_cli.utils.logger import get_logger
from taskpilot_cli.utils.view_cache import SETTINGS_VIEW, TEAM_VIEW, ViewCache

logger = get_logger(__name__)


def initials_for(name: str) -> str:
    """First letters of the first two words of a name ("Ada Lovelace" -> "AL")."""
    return "".join(word[0] for word in name.split()[:2])


def avatar_for(name: str) -> str:
    """Placeholder avatar URL seeded by the user's name."""
    return f"https://picsum.photos/seed/{name}/200"


def default_name(email: str) -> str:
    return email.split("@", 1)[0]


class UserService:
    """Service for the team directory."""

    def __init__(self, user_repository: UserRepository, cache: ViewCache):
        self.repository = user_repository
        self.cache = cache

    async def add_user(self, name: str | None, email: str) -> User:
        """Invite a user to the directory.

        Args:
            name: Display name; defaults to the local part of the email
            email: Email address, unique across the directory

        Returns:
            The created User

        Raises:
            DuplicateError: If a user with this email already exists
            BackendError: If the backend fails
        """
        try:
            existing = await self.repository.find_by_email(email)
        except TaskPilotError as e:
            raise BackendError("Failed to add user") from e
        if existing:
            raise DuplicateError("A user with this email already exists.")

        name = (name or "").strip() or default_name(email)
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            avatar_url=avatar_for(name),
            initials=initials_for(name),
        )
        try:
            await self.repository.save(user)
        except TaskPilotError as e:
            logger.error("failed to add user %s: %s", email, e)
            raise BackendError("Failed to add user") from e

        logger.info("added user %s", user.id)
        self.cache.invalidate(TEAM_VIEW)
        return user

    async def list_users(self) -> list[User]:
        """List the directory. Empty if the backend is unavailable."""
        cached = self.cache.get(TEAM_VIEW)
        if cached is not None:
            try:
                return [User.model_validate(item) for item in cached]
            except ValidationError:
                logger.warning("discarding stale %s view", TEAM_VIEW)

        try:
            users = await self.repository.list_all()
        except TaskPilotError:
            logger.error("failed to list users", exc_info=True)
            return []
        self.cache.put(TEAM_VIEW, [u.model_dump(mode="json", by_alias=True) for u in users])
        return users

    async def get_user(self, user_id: str) -> User | None:
        try:
            return await self.repository.get(user_id)
        except TaskPilotError:
            logger.error("failed to read user %s", user_id, exc_info=True)
            return None

    async def get_profile(self, user_id: str) -> User | None:
        """Directory record of the signed-in user, served from the settings view.

        The view holds one user; a record cached for someone else is ignored.
        """
        cached = self.cache.get(SETTINGS_VIEW)
        if isinstance(cached, dict) and cached.get("id") == user_id:
            try:
                return User.model_validate(cached)
            except ValidationError:
                logger.warning("discarding stale %s view", SETTINGS_VIEW)

        user = await self.get_user(user_id)
        if user is not None:
            self.cache.put(SETTINGS_VIEW, user.model_dump(mode="json", by_alias=True))
        return user

    async def ensure_user_on_login(self, identity: Identity) -> User | None:
        """Make sure a signed-in identity has a directory record.

        The record is keyed by the identity's external id, so calling this
        on every sign-in creates it once. Identities without an email get no
        record.

        Returns:
            The existing or created User, or None without an email
        """
        if not identity.email:
            return None

        existing = await self.repository.get(identity.external_id)
        if existing is not None:
            return existing

        name = identity.display_name or default_name(identity.email)
        user = User(
            id=identity.external_id,
            name=name,
            email=identity.email,
            avatar_url=identity.photo_url or avatar_for(name),
            initials=initials_for(name),
        )
        await self.repository.save(user)
        logger.info("created directory record for %s", user.id)
        self.cache.invalidate(TEAM_VIEW)
        return user

    async def update_user_profile(self, user_id: str, name: str) -> None:
        """Rename a user, recomputing the initials.

        Raises:
            NotFoundError: If the user has no directory record
        """
        name = name.strip()
        if not name:
            raise ValueError("Name cannot be empty.")
        await self.repository.update_fields(
            user_id, {"name": name, "initials": initials_for(name)}
        )
        self.cache.invalidate(SETTINGS_VIEW, TEAM_VIEW)


def get_user_service() -> UserService:
    """Factory function to create a UserService instance."""
    from taskpilot_cli.services.config_service import (
        get_storage_strategy_context,
        get_view_cache,
    )

    return UserService(get_storage_strategy_context().user_repository, get_view_cache())
