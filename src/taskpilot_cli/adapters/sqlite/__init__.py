"""SQLite adapter module - Local vault storage implementation."""

from taskpilot_cli.adapters.sqlite.connection import DatabaseConnection
from taskpilot_cli.adapters.sqlite.document_store import SqliteDocumentStore
from taskpilot_cli.adapters.sqlite.file_storage import LocalFileStorage

__all__ = [
    "DatabaseConnection",
    "SqliteDocumentStore",
    "LocalFileStorage",
]
