"""Forward-only schema migrations for the local vault.

Migrations carry a sequential version; the runner records each applied
version in ``schema_version`` and applies only the ones above the current
version, each inside its own transaction.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Migration(ABC):
    """Base class for vault migrations."""

    @property
    @abstractmethod
    def version(self) -> int:
        """Migration version number (sequential)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the migration."""

    @abstractmethod
    def up(self, connection: sqlite3.Connection) -> None:
        """Apply the migration on ``connection``."""


class MigrationRunner:
    """Applies pending migrations and reports schema history."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at DATETIME NOT NULL
            )
        """)
        self.connection.commit()

    def get_current_version(self) -> int:
        """Highest applied version, 0 for a fresh database."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def pending(self, migrations: list[Migration]) -> list[Migration]:
        """Migrations above the current version, in version order."""
        current = self.get_current_version()
        return sorted(
            (m for m in migrations if m.version > current), key=lambda m: m.version
        )

    def run_migration(self, migration: Migration) -> None:
        """Apply one migration and record it.

        Raises:
            ValueError: If the migration is not newer than the schema
            RuntimeError: If the migration fails (its changes are rolled back)
        """
        current = self.get_current_version()
        if migration.version <= current:
            raise ValueError(
                f"Migration version {migration.version} is not greater than "
                f"current version {current}"
            )

        try:
            migration.up(self.connection)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) "
                "VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now(UTC).isoformat()),
            )
            self.connection.commit()
        except Exception as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Apply every pending migration.

        Returns:
            Number of migrations applied
        """
        pending = self.pending(migrations)
        for migration in pending:
            self.run_migration(migration)
        return len(pending)

    def get_migration_history(self) -> list[dict]:
        """Applied migrations as ``{version, description, applied_at}`` dicts."""
        cursor = self.connection.execute(
            "SELECT version, description, applied_at FROM schema_version ORDER BY version"
        )
        return [
            {"version": row[0], "description": row[1], "applied_at": row[2]}
            for row in cursor.fetchall()
        ]
