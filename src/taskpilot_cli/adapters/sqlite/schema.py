"""Database schema definitions for the local SQLite vault.

The vault mirrors the hosted document store: each row is one JSON document
of a collection, so projects keep their tasks, activities and files
embedded exactly as they are stored remotely.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

CREATE_DOCUMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    data TEXT NOT NULL,
    revision INTEGER NOT NULL DEFAULT 1,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    PRIMARY KEY (collection, id)
)
"""

CREATE_DOCUMENTS_COLLECTION_INDEX = """
CREATE INDEX IF NOT EXISTS idx_documents_collection
    ON documents(collection, created_at)
"""

ALL_INDEXES = [
    CREATE_DOCUMENTS_COLLECTION_INDEX,
]
