"""Tests for the vault migration runner."""

import sqlite3

import pytest

from taskpilot_cli.adapters.sqlite.migrations.m001_initial_schema import ALL_MIGRATIONS
from taskpilot_cli.adapters.sqlite.migrations.runner import Migration, MigrationRunner


class BrokenMigration(Migration):
    version = 2
    description = "Broken"

    def up(self, connection):
        connection.execute("CREATE TABLE half_done (id TEXT)")
        connection.execute("THIS IS NOT SQL")


@pytest.fixture()
def connection():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def test_fresh_database_is_version_zero(connection):
    assert MigrationRunner(connection).get_current_version() == 0


def test_runs_pending_migrations_once(connection):
    runner = MigrationRunner(connection)

    assert runner.run_migrations(ALL_MIGRATIONS) == 1
    assert runner.run_migrations(ALL_MIGRATIONS) == 0
    assert runner.get_current_version() == 1

    tables = {row[0] for row in connection.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "documents" in tables


def test_history(connection):
    runner = MigrationRunner(connection)
    runner.run_migrations(ALL_MIGRATIONS)

    history = runner.get_migration_history()

    assert [entry["version"] for entry in history] == [1]
    assert history[0]["description"] == "Documents table"


def test_rejects_old_version(connection):
    runner = MigrationRunner(connection)
    runner.run_migrations(ALL_MIGRATIONS)

    with pytest.raises(ValueError):
        runner.run_migration(ALL_MIGRATIONS[0])


def test_failed_migration_is_not_recorded(connection):
    runner = MigrationRunner(connection)
    runner.run_migrations(ALL_MIGRATIONS)

    with pytest.raises(RuntimeError, match="Migration 2 failed"):
        runner.run_migration(BrokenMigration())

    assert runner.get_current_version() == 1
