"""Service for handling authentication-related operations."""

from __future__ import annotations

from taskpilot_cli.models import AuthenticationError, AuthSession, Identity, User
from taskpilot_cli.models.storage_strategy import StorageStrategyContext
from taskpilot_cli.repositories import IdentityProvider
from taskpilot_cli.services.config_service import ConfigService
from taskpilot_cli.services.user_service import (
    UserService,
    avatar_for,
    default_name,
    initials_for,
)
from taskpilot_cli.utils.logger import get_logger

logger = get_logger(__name__)

NOT_LOGGED_IN = "Not logged in. Use 'taskpilot auth login' to authenticate."


class AuthService:
    """Signs users in and out of the active context and resolves the actor."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        config_service: ConfigService,
        user_service: UserService,
        storage_strategy_context: StorageStrategyContext | None = None,
    ):
        self.identity_provider = identity_provider
        self.config_service = config_service
        self.user_service = user_service
        self.storage_strategy_context = storage_strategy_context

    def _attach(self, session: AuthSession | None) -> None:
        if self.storage_strategy_context is not None:
            self.storage_strategy_context.strategy.attach_session(
                session, on_refresh=self.config_service.save_session
            )

    async def _remember(self, session: AuthSession) -> User | None:
        self.config_service.save_session(session)
        self.config_service.set_context_user(session.identity.email)
        self._attach(session)
        return await self.user_service.ensure_user_on_login(session.identity)

    def is_authenticated(self) -> bool:
        """Check if the active context has a usable session."""
        if not self.identity_provider.requires_login:
            return True
        return self.config_service.load_session() is not None

    def current_session(self) -> AuthSession:
        """The stored session, or the provider's default one.

        Raises:
            AuthenticationError: If nobody is signed in
        """
        session = self.config_service.load_session()
        if session is None:
            session = self.identity_provider.default_session()
        if session is None:
            raise AuthenticationError(NOT_LOGGED_IN)
        return session

    async def sign_in(self, email: str, password: str) -> User | None:
        """Sign in and make sure the user has a directory record.

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        session = await self.identity_provider.sign_in(email, password)
        logger.info("signed in %s", session.identity.external_id)
        return await self._remember(session)

    async def sign_up(self, name: str | None, email: str, password: str) -> User | None:
        """Create an account, sign it in and add it to the directory."""
        session = await self.identity_provider.sign_up(email, password, name or None)
        logger.info("signed up %s", session.identity.external_id)
        return await self._remember(session)

    async def sign_out(self) -> None:
        """Forget the session of the active context."""
        session = self.config_service.load_session()
        if session is not None:
            await self.identity_provider.sign_out(session)
        self.config_service.clear_session()
        self.config_service.set_context_user(None)
        self._attach(None)

    async def current_identity(self) -> Identity:
        """Identity of the signed-in user, as the provider reports it now."""
        session = self.current_session()
        if not self.identity_provider.requires_login:
            return session.identity
        return await self.identity_provider.lookup(session)

    async def current_user(self) -> User:
        """Directory record of the signed-in user.

        Falls back to a snapshot built from the identity when the directory
        has no record (or no email is known).
        """
        identity = await self.current_identity()
        user = await self.user_service.get_profile(identity.external_id)
        if user is None and not self.identity_provider.requires_login:
            user = await self.user_service.ensure_user_on_login(identity)
        if user is not None:
            return user

        email = identity.email or ""
        name = identity.display_name or default_name(email) or identity.external_id
        return User(
            id=identity.external_id,
            name=name,
            email=email,
            avatar_url=identity.photo_url or avatar_for(name),
            initials=initials_for(name),
        )

    async def update_profile(self, name: str) -> User:
        """Change the signed-in user's display name everywhere it is kept."""
        session = self.current_session()
        await self.identity_provider.update_profile(session, name)

        identity = session.identity.model_copy(update={"display_name": name})
        if await self.user_service.get_user(identity.external_id) is None:
            await self.user_service.ensure_user_on_login(identity)
        else:
            await self.user_service.update_user_profile(identity.external_id, name)

        if self.config_service.load_session() is not None:
            self.config_service.save_session(session.model_copy(update={"identity": identity}))
        return await self.current_user()


def get_auth_service() -> AuthService:
    """Factory function to create an AuthService instance."""
    from taskpilot_cli.services.config_service import get_config_service
    from taskpilot_cli.services.user_service import get_user_service

    config_service = get_config_service()
    storage_strategy_context = config_service.storage_strategy_context
    return AuthService(
        storage_strategy_context.identity_provider,
        config_service,
        get_user_service(),
        storage_strategy_context,
    )
