"""Migration 001: documents table."""

import sqlite3

from taskpilot_cli.adapters.sqlite import schema

from .runner import Migration


class InitialSchemaMigration(Migration):
    """Create the documents table and its indexes."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Documents table"

    def up(self, connection: sqlite3.Connection) -> None:
        connection.execute(schema.CREATE_DOCUMENTS_TABLE)
        for index_sql in schema.ALL_INDEXES:
            connection.execute(index_sql)


initial_migration = InitialSchemaMigration()

ALL_MIGRATIONS = [initial_migration]
