"""
Strategy Pattern: Storage Strategy Container

The StorageStrategyContext holds the backend chosen for the active context
at startup and hands the same adapter instances to every service. Services
never know whether they talk to a local vault or the hosted backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from taskpilot_cli.models.config_models import APIConfig, FirebaseConfig
from taskpilot_cli.models.core import AuthSession
from taskpilot_cli.repositories import (
    DocumentStore,
    FileStorage,
    IdentityProvider,
    ProjectRepository,
    UserRepository,
)


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy bundles the document store, file storage and identity
    provider of one backend.
    """

    @abstractmethod
    def get_document_store(self) -> DocumentStore:
        """Get the document store for this strategy."""

    @abstractmethod
    def get_file_storage(self) -> FileStorage:
        """Get the file storage for this strategy."""

    @abstractmethod
    def get_identity_provider(self) -> IdentityProvider:
        """Get the identity provider for this strategy."""

    def attach_session(
        self,
        session: AuthSession | None,
        on_refresh: Callable[[AuthSession], None] | None = None,
    ) -> None:
        """Act on behalf of ``session`` from now on (no-op by default)."""

    async def close(self) -> None:
        """Release connections held by the adapters."""
        await self.get_document_store().close()
        await self.get_file_storage().close()
        await self.get_identity_provider().close()

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""


class LocalStorageStrategy(StorageStrategy):
    """
    Local vault strategy: documents in SQLite, uploads in a ``files``
    directory next to the vault file.
    """

    def __init__(self, db_path: str, email: str | None = None):
        """
        Initialize local strategy.

        Args:
            db_path: Path to SQLite vault file
            email: Email of the configured local user, if any
        """
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from taskpilot_cli.adapters.local_identity import LocalIdentityProvider
        from taskpilot_cli.adapters.sqlite import LocalFileStorage, SqliteDocumentStore

        self._store = SqliteDocumentStore(db_path=db_path)
        self._file_storage = LocalFileStorage(Path(db_path).expanduser().parent / "files")
        self._identity_provider = LocalIdentityProvider(email=email)

    def get_document_store(self) -> DocumentStore:
        return self._store

    def get_file_storage(self) -> FileStorage:
        return self._file_storage

    def get_identity_provider(self) -> IdentityProvider:
        return self._identity_provider

    @property
    def storage_type(self) -> str:
        return "local"


class RemoteStorageStrategy(StorageStrategy):
    """
    Hosted backend strategy: Firestore, Firebase Auth and Firebase Storage
    sharing a single HTTP client.
    """

    def __init__(
        self,
        project_id: str,
        firebase: FirebaseConfig | None = None,
        api: APIConfig | None = None,
        transport=None,
    ):
        """
        Initialize remote strategy.

        Args:
            project_id: Firebase project id
            firebase: Endpoints, API key and storage bucket
            api: Timeout and retry settings
            transport: Optional httpx transport (tests)
        """
        from taskpilot_cli.adapters.firebase import (
            FirebaseClient,
            FirebaseFileStorage,
            FirebaseIdentityProvider,
            FirestoreDocumentStore,
        )

        firebase = firebase or FirebaseConfig()
        api = api or APIConfig()
        self.project_id = project_id

        self._client = FirebaseClient(
            firebase.api_key,
            timeout=api.timeout,
            retry=api.retry,
            transport=transport,
        )
        self._store = FirestoreDocumentStore(
            self._client, project_id, endpoint=firebase.firestore_endpoint
        )
        self._identity_provider = FirebaseIdentityProvider(
            self._client,
            identity_endpoint=firebase.identity_endpoint,
            token_endpoint=firebase.token_endpoint,
        )
        self._file_storage = FirebaseFileStorage(
            self._client,
            bucket=firebase.storage_bucket or f"{project_id}.appspot.com",
            endpoint=firebase.storage_endpoint,
        )

    def get_document_store(self) -> DocumentStore:
        return self._store

    def get_file_storage(self) -> FileStorage:
        return self._file_storage

    def get_identity_provider(self) -> IdentityProvider:
        return self._identity_provider

    def attach_session(
        self,
        session: AuthSession | None,
        on_refresh: Callable[[AuthSession], None] | None = None,
    ) -> None:
        self._client.attach_session(
            session,
            refresher=self._identity_provider.refresh,
            on_refresh=on_refresh,
        )

    async def close(self) -> None:
        # All adapters share one client
        await self._client.close()

    @property
    def storage_type(self) -> str:
        return "remote"


class StorageStrategyContext:
    """
    Strategy context that provides access to the active backend.

    This is the single source of truth for storage access throughout the
    application. It's created once at startup by the ConfigService and
    injected into all services.

    Usage:
        strategy = LocalStorageStrategy(db_path="/path/to/vault.db")
        context = StorageStrategyContext(strategy)

        projects = await context.project_repository.list_all()
    """

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy
        self._project_repository: ProjectRepository | None = None
        self._user_repository: UserRepository | None = None

    def switch_strategy(self, new_strategy: StorageStrategy):
        """Switch to a new storage strategy at runtime (advanced use case)."""
        self._strategy = new_strategy
        self._project_repository = None
        self._user_repository = None

    @property
    def document_store(self) -> DocumentStore:
        return self._strategy.get_document_store()

    @property
    def file_storage(self) -> FileStorage:
        return self._strategy.get_file_storage()

    @property
    def identity_provider(self) -> IdentityProvider:
        return self._strategy.get_identity_provider()

    @property
    def project_repository(self) -> ProjectRepository:
        """Typed project repository over the strategy's document store."""
        if self._project_repository is None:
            self._project_repository = ProjectRepository(self.document_store)
        return self._project_repository

    @property
    def user_repository(self) -> UserRepository:
        """Typed user repository over the strategy's document store."""
        if self._user_repository is None:
            self._user_repository = UserRepository(self.document_store)
        return self._user_repository

    @property
    def storage_type(self) -> str:
        """Get storage type (for logging/debugging only)."""
        return self._strategy.storage_type

    @property
    def strategy(self) -> StorageStrategy:
        """Get underlying strategy (for advanced use cases)."""
        return self._strategy

    async def close(self) -> None:
        await self._strategy.close()
