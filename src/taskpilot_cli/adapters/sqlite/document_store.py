"""SQLite implementation of DocumentStore."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from taskpilot_cli.adapters.sqlite.connection import DatabaseConnection, execute_with_retry
from taskpilot_cli.adapters.sqlite.utils import (
    dump_document,
    generate_document_id,
    json_path,
    load_document,
    now_iso,
)
from taskpilot_cli.models import BackendError, ConflictError, NotFoundError
from taskpilot_cli.repositories import Document, DocumentStore


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        data=load_document(row["data"]),
        revision=str(row["revision"]),
    )


class SqliteDocumentStore(DocumentStore):
    """Document store kept in a local SQLite vault.

    Each document is one row holding its JSON body and an integer revision
    bumped on every write, which backs conditional updates.
    """

    def __init__(self, db_path: str | Path | None = None, database: DatabaseConnection | None = None):
        """Initialize the store.

        Args:
            db_path: Vault file path. Ignored when ``database`` is given.
            database: Pre-built connection manager (shared or in-memory)
        """
        if database is None:
            if db_path is None:
                raise ValueError("db_path or database is required")
            database = DatabaseConnection(db_path)
        self.database = database

    @property
    def connection(self) -> sqlite3.Connection:
        return self.database.connection

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return execute_with_retry(self.connection, sql, params)
        except sqlite3.Error as e:
            raise BackendError(f"Local vault error: {e}") from e

    def _commit(self) -> None:
        try:
            self.connection.commit()
        except sqlite3.Error as e:
            raise BackendError(f"Local vault error: {e}") from e

    async def list_all(self, collection: str) -> list[Document]:
        cursor = self._execute(
            "SELECT id, data, revision FROM documents WHERE collection = ? "
            "ORDER BY created_at, rowid",
            (collection,),
        )
        return [_row_to_document(row) for row in cursor.fetchall()]

    async def get(self, collection: str, document_id: str) -> Document | None:
        cursor = self._execute(
            "SELECT id, data, revision FROM documents WHERE collection = ? AND id = ?",
            (collection, document_id),
        )
        row = cursor.fetchone()
        return _row_to_document(row) if row else None

    async def find(self, collection: str, field_name: str, value: Any) -> list[Document]:
        cursor = self._execute(
            "SELECT id, data, revision FROM documents "
            "WHERE collection = ? AND json_extract(data, ?) = ? "
            "ORDER BY created_at, rowid",
            (collection, json_path(field_name), value),
        )
        return [_row_to_document(row) for row in cursor.fetchall()]

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        document_id = generate_document_id()
        await self.set(collection, document_id, data)
        return document_id

    async def set(self, collection: str, document_id: str, data: dict[str, Any]) -> None:
        now = now_iso()
        self._execute(
            """INSERT INTO documents (collection, id, data, revision, created_at, updated_at)
               VALUES (?, ?, ?, 1, ?, ?)
               ON CONFLICT(collection, id) DO UPDATE SET
                   data = excluded.data,
                   revision = documents.revision + 1,
                   updated_at = excluded.updated_at""",
            (collection, document_id, dump_document(data), now, now),
        )
        self._commit()

    async def update(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        revision: str | None = None,
    ) -> None:
        current = await self.get(collection, document_id)
        if current is None:
            raise NotFoundError(f"Document not found: {collection}/{document_id}")
        if revision is not None and revision != current.revision:
            raise ConflictError(
                f"{collection}/{document_id} was modified concurrently "
                f"(expected revision {revision}, found {current.revision})"
            )

        merged = {**current.data, **fields}
        cursor = self._execute(
            """UPDATE documents
               SET data = ?, revision = revision + 1, updated_at = ?
               WHERE collection = ? AND id = ? AND revision = ?""",
            (dump_document(merged), now_iso(), collection, document_id, int(current.revision)),
        )
        if cursor.rowcount != 1:
            self.connection.rollback()
            raise ConflictError(f"{collection}/{document_id} was modified concurrently")
        self._commit()

    async def delete(self, collection: str, document_id: str) -> None:
        self._execute(
            "DELETE FROM documents WHERE collection = ? AND id = ?",
            (collection, document_id),
        )
        self._commit()

    async def close(self) -> None:
        self.database.close()
