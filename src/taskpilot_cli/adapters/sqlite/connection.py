"""Database connection management for the SQLite local vault.

A DatabaseConnection is constructed once per vault path at start-up and
handed to the document store, which owns its lifecycle.
"""

from __future__ import annotations

import os
import sqlite3
import time
from pathlib import Path

from taskpilot_cli.adapters.sqlite.migrations.m001_initial_schema import ALL_MIGRATIONS
from taskpilot_cli.adapters.sqlite.migrations.runner import MigrationRunner


class DatabaseConnection:
    """Connection to one vault file.

    Provides:
    - Lazy connection opening with migrations applied
    - WAL mode for better concurrency
    - Automatic directory creation
    - Owner read/write only file permissions
    """

    def __init__(self, db_path: str | Path):
        """Initialize the connection manager.

        Args:
            db_path: Vault file path, or ``":memory:"`` for a throwaway vault
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the open connection, opening it on first use."""
        if self._connection is None:
            self._connection = self._open()
        return self._connection

    def _open(self) -> sqlite3.Connection:
        is_new_database = False
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            is_new_database = not self.db_path.exists()

        connection = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
            timeout=30.0,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA journal_mode = WAL")

        if is_new_database:
            os.chmod(self.db_path, 0o600)

        MigrationRunner(connection).run_migrations(ALL_MIGRATIONS)
        return connection

    def close(self) -> None:
        """Commit pending work and close the connection."""
        if self._connection is not None:
            try:
                self._connection.commit()
                self._connection.close()
            finally:
                self._connection = None


def execute_with_retry(
    connection: sqlite3.Connection,
    sql: str,
    params: tuple | dict | None = None,
    max_retries: int = 3,
) -> sqlite3.Cursor:
    """Execute SQL, retrying with backoff while the database is locked.

    Raises:
        sqlite3.OperationalError: If the database remains locked after retries
    """
    for attempt in range(max_retries):
        try:
            return connection.execute(sql, params or ())
        except sqlite3.OperationalError as e:
            if "database is locked" in str(e) and attempt < max_retries - 1:
                # 0.1s, 0.2s, 0.4s
                time.sleep(0.1 * (2**attempt))
                continue
            raise
    raise sqlite3.OperationalError("Max retries exceeded")
