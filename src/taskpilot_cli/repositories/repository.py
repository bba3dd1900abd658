"""Repository abstraction layer for TaskPilot.

This module defines the abstract base classes (interfaces) for the external
services the application persists to, following the hexagonal architecture
(Ports & Adapters) pattern:

- DocumentStore: collections of JSON-like documents ("projects", "users")
- FileStorage: object storage for project attachments
- IdentityProvider: sign-in/sign-up and profile of the acting user

Concrete adapters live in ``taskpilot_cli.adapters``. Instances are
constructed once at start-up and injected into repositories and services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from taskpilot_cli.models import AuthSession, Identity

PROJECTS_COLLECTION = "projects"
USERS_COLLECTION = "users"


@dataclass
class Document:
    """A stored document as read from a DocumentStore.

    Attributes:
        id: Document identifier within its collection
        data: Field values; timestamps are ``datetime`` or ISO-8601 strings
        revision: Opaque version token usable for a conditional update
    """

    id: str
    data: dict[str, Any] = field(default_factory=dict)
    revision: str | None = None


class DocumentStore(ABC):
    """Abstract base class for document persistence operations.

    Every method raises BackendError when the backend cannot be reached or
    rejects the request.
    """

    @abstractmethod
    async def list_all(self, collection: str) -> list[Document]:
        """List every document of a collection.

        Args:
            collection: Collection name

        Returns:
            List of Document objects (empty if the collection is empty)
        """
        raise NotImplementedError(
            "DocumentStore.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Document | None:
        """Get a document by ID.

        Args:
            collection: Collection name
            document_id: Document identifier

        Returns:
            Document, or None if it does not exist
        """
        raise NotImplementedError("DocumentStore.get() must be implemented by adapter")

    @abstractmethod
    async def find(self, collection: str, field_name: str, value: Any) -> list[Document]:
        """Find documents whose top-level field equals ``value``.

        Args:
            collection: Collection name
            field_name: Top-level field to compare
            value: Value to compare for equality

        Returns:
            Matching Document objects
        """
        raise NotImplementedError(
            "DocumentStore.find() must be implemented by adapter"
        )

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a generated identifier.

        Args:
            collection: Collection name
            data: Field values

        Returns:
            The generated document identifier
        """
        raise NotImplementedError("DocumentStore.add() must be implemented by adapter")

    @abstractmethod
    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document with a known identifier.

        Args:
            collection: Collection name
            document_id: Document identifier
            data: Field values
        """
        raise NotImplementedError("DocumentStore.set() must be implemented by adapter")

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        revision: str | None = None,
    ) -> None:
        """Update top-level fields of an existing document.

        Args:
            collection: Collection name
            document_id: Document identifier
            fields: Top-level fields to replace; others are left untouched
            revision: When given, the write only succeeds if the stored
                document still carries this revision

        Raises:
            NotFoundError: If the document does not exist
            ConflictError: If ``revision`` no longer matches
        """
        raise NotImplementedError(
            "DocumentStore.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error.

        Args:
            collection: Collection name
            document_id: Document identifier
        """
        raise NotImplementedError(
            "DocumentStore.delete() must be implemented by adapter"
        )

    async def close(self) -> None:
        """Release connections held by the store."""


class FileStorage(ABC):
    """Abstract base class for object storage of uploaded files."""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``path``.

        Args:
            path: Object path, e.g. ``projects/<id>/<filename>``
            content: File bytes
            content_type: MIME type recorded with the object

        Returns:
            A URL the file can be retrieved from
        """
        raise NotImplementedError(
            "FileStorage.upload() must be implemented by adapter"
        )

    async def close(self) -> None:
        """Release connections held by the storage."""


class IdentityProvider(ABC):
    """Abstract base class for the authentication provider."""

    requires_login: bool = True

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password.

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        raise NotImplementedError(
            "IdentityProvider.sign_in() must be implemented by adapter"
        )

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        """Create an account and sign it in.

        Raises:
            AuthenticationError: If the account cannot be created
        """
        raise NotImplementedError(
            "IdentityProvider.sign_up() must be implemented by adapter"
        )

    @abstractmethod
    async def lookup(self, session: AuthSession) -> Identity:
        """Fetch the current identity record for a session.

        Raises:
            AuthenticationError: If the session is no longer valid
        """
        raise NotImplementedError(
            "IdentityProvider.lookup() must be implemented by adapter"
        )

    @abstractmethod
    async def update_profile(self, session: AuthSession, display_name: str) -> None:
        """Change the provider-side display name of the signed-in identity."""
        raise NotImplementedError(
            "IdentityProvider.update_profile() must be implemented by adapter"
        )

    def default_session(self) -> AuthSession | None:
        """Session to act with when nobody has signed in.

        Providers with ``requires_login`` return None.
        """
        return None

    async def refresh(self, session: AuthSession) -> AuthSession:
        """Exchange the refresh token for a new id token.

        Providers whose sessions never expire return the session unchanged.
        """
        return session

    async def sign_out(self, session: AuthSession) -> None:
        """Invalidate provider-side session state (no-op by default)."""

    async def close(self) -> None:
        """Release connections held by the provider."""
