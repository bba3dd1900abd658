"""Typed access to the ``users`` collection."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from taskpilot_cli.models import BackendError, User
from taskpilot_cli.utils.logger import get_logger

from .repository import USERS_COLLECTION, Document, DocumentStore

logger = get_logger(__name__)


def decode_user(document: Document) -> User:
    """Build a User from a stored document.

    Raises:
        BackendError: If the document does not hold a valid user
    """
    data = dict(document.data)
    data.setdefault("id", document.id)
    try:
        return User.model_validate(data)
    except ValidationError as e:
        raise BackendError(f"Malformed user document {document.id}: {e}") from e


class UserRepository:
    """Reads and writes directory users through a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_all(self) -> list[User]:
        users = []
        for document in await self.store.list_all(USERS_COLLECTION):
            try:
                users.append(decode_user(document))
            except BackendError as e:
                logger.warning("skipping user: %s", e)
        return users

    async def get(self, user_id: str) -> User | None:
        document = await self.store.get(USERS_COLLECTION, user_id)
        return decode_user(document) if document is not None else None

    async def find_by_email(self, email: str) -> list[User]:
        documents = await self.store.find(USERS_COLLECTION, "email", email)
        return [decode_user(document) for document in documents]

    async def save(self, user: User) -> None:
        """Create or overwrite the user document keyed by ``user.id``."""
        await self.store.set(USERS_COLLECTION, user.id, user.to_document())

    async def update_fields(self, user_id: str, fields: dict[str, Any]) -> None:
        await self.store.update(USERS_COLLECTION, user_id, fields)
