"""Configuration service for managing TaskPilot CLI configuration.

This module provides the ConfigService class, which is the single source of truth
for all configuration management in TaskPilot CLI. It handles:

- Loading and saving config.json
- Context management (list, add, switch)
- Stored sessions for each context
- Environment overrides of API keys
- Building the storage strategy and view cache of the active context
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path

from platformdirs import user_cache_dir, user_config_dir, user_data_dir
from pydantic import ValidationError

from taskpilot_cli.models.config_models import AppConfig, Context
from taskpilot_cli.models.core import AuthSession
from taskpilot_cli.models.storage_strategy import (
    LocalStorageStrategy,
    RemoteStorageStrategy,
    StorageStrategy,
    StorageStrategyContext,
)
from taskpilot_cli.utils.logger import get_logger
from taskpilot_cli.utils.view_cache import ViewCache

logger = get_logger(__name__)

FIREBASE_API_KEY_ENV = "TASKPILOT_FIREBASE_API_KEY"
AI_API_KEY_ENV = "TASKPILOT_AI_API_KEY"


class ConfigService:
    """Service for managing application configuration.

    Loads the configuration lazily, creating a default one with a local
    vault on first run, and builds the storage backend of the active
    context on demand.
    """

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("taskpilot_cli"))
        self.config_path = self.config_dir / "config.json"
        self.credentials_dir = self.config_dir / "credentials"
        self.data_dir = Path(user_data_dir("taskpilot_cli"))
        self.cache_dir = Path(user_cache_dir("taskpilot_cli"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._storage_strategy_context: StorageStrategyContext | None = None
        self._view_cache: ViewCache | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage, applying environment overrides."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = self.create_default_config()
        except (OSError, ValidationError) as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        self._apply_environment(self._config)
        return self._config

    @staticmethod
    def _apply_environment(config: AppConfig) -> None:
        firebase_key = os.environ.get(FIREBASE_API_KEY_ENV)
        if firebase_key:
            config.firebase.api_key = firebase_key
        ai_key = os.environ.get(AI_API_KEY_ENV)
        if ai_key:
            config.ai.api_key = ai_key

    def save_config(self):
        """Save the current configuration to storage.

        Keys supplied through the environment are not written to disk.
        """
        config = self.config.model_copy(deep=True)
        if os.environ.get(FIREBASE_API_KEY_ENV):
            config.firebase.api_key = None
        if os.environ.get(AI_API_KEY_ENV):
            config.ai.api_key = None

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(config.model_dump_json(indent=4))

            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def create_default_config(self) -> AppConfig:
        """Create a default configuration with a local context.

        Users don't need an account to get started; a hosted context can be
        added later with ``taskpilot contexts add``.
        """
        local_context = Context(
            name="local",
            type="local",
            source=str(self.data_dir / "taskpilot.db"),
            description="Local vault",
        )
        self._config = AppConfig(
            current_context_name=local_context.name,
            contexts=[local_context],
        )
        self.save_config()
        return self._config

    def list_contexts(self) -> list[Context]:
        """List all available contexts."""
        return self.config.contexts

    def get_current_context(self) -> Context:
        """Get the currently active context.

        Raises:
            ValueError: If the current context is not configured
        """
        return self.config.get_current_context()

    def use_context(self, name: str) -> Context:
        """Set the current context by name."""
        context = self.config.get_context(name)
        self.config.current_context_name = context.name
        self.save_config()
        self._storage_strategy_context = None
        self._view_cache = None
        return context

    def add_context(self, context: Context):
        """Add a new context to the configuration."""
        self.config.add_context(context)
        self.save_config()

    def set_context_user(self, email: str | None, context_name: str | None = None) -> None:
        """Record which email is signed in to a context."""
        context = (
            self.config.get_context(context_name)
            if context_name
            else self.get_current_context()
        )
        context.user = email
        self.save_config()

    # Sessions

    def _credentials_path(self, context_name: str | None) -> Path:
        if context_name is None:
            context_name = self.get_current_context().name
        return self.credentials_dir / f"{context_name}.json"

    def load_session(self, context_name: str | None = None) -> AuthSession | None:
        """Load the stored session of a context (default: current context).

        Returns:
            The session, or None if nobody is signed in
        """
        cred_path = self._credentials_path(context_name)
        if not cred_path.exists():
            return None

        try:
            with open(cred_path, encoding="utf-8") as f:
                return AuthSession.model_validate(json.load(f))
        except (JSONDecodeError, ValidationError) as e:
            logger.warning("ignoring unreadable credentials %s: %s", cred_path, e)
            return None

    def save_session(self, session: AuthSession, context_name: str | None = None) -> None:
        """Save a session for a context (default: current context)."""
        cred_path = self._credentials_path(context_name)
        cred_path.parent.mkdir(parents=True, exist_ok=True)

        with open(cred_path, "w", encoding="utf-8") as f:
            f.write(session.model_dump_json(indent=2))

        # Tokens are secrets
        cred_path.chmod(0o600)

    def clear_session(self, context_name: str | None = None) -> None:
        """Remove the stored session of a context."""
        cred_path = self._credentials_path(context_name)
        if cred_path.exists():
            cred_path.unlink()

    # Backend

    def build_strategy(self, context: Context) -> StorageStrategy:
        """Build the storage strategy for a context."""
        if context.type == "remote":
            strategy: StorageStrategy = RemoteStorageStrategy(
                project_id=context.source,
                firebase=self.config.firebase,
                api=self.config.api,
            )
            strategy.attach_session(
                self.load_session(context.name),
                on_refresh=lambda session: self.save_session(session, context.name),
            )
            return strategy
        return LocalStorageStrategy(db_path=context.source, email=context.user)

    @property
    def storage_strategy_context(self) -> StorageStrategyContext:
        """Storage backend of the active context, built on first use."""
        if self._storage_strategy_context is None:
            context = self.get_current_context()
            logger.debug("using %s context %s", context.type, context.name)
            self._storage_strategy_context = StorageStrategyContext(
                self.build_strategy(context)
            )
        return self._storage_strategy_context

    @property
    def view_cache(self) -> ViewCache:
        """View cache of the active context."""
        if self._view_cache is None:
            cache_config = self.config.cache
            cache_file = None
            if cache_config.enabled:
                cache_file = self.cache_dir / f"views-{self.get_current_context().name}.json"
            self._view_cache = ViewCache(cache_file=cache_file, ttl=cache_config.ttl)
        return self._view_cache

    async def close_storage(self) -> None:
        """Close the backend built for this process, if any."""
        context = self._storage_strategy_context
        if context is not None:
            self._storage_strategy_context = None
            await context.close()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service


def get_storage_strategy_context() -> StorageStrategyContext:
    """Get the StorageStrategyContext of the active context."""
    return get_config_service().storage_strategy_context


def get_view_cache() -> ViewCache:
    """Get the ViewCache of the active context."""
    return get_config_service().view_cache


async def close_storage() -> None:
    """Close the active backend's connections, if it was built."""
    await get_config_service().close_storage()
