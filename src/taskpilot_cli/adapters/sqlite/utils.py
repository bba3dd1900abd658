"""Utility functions for the SQLite adapter."""

from __future__ import annotations

import json
import re
import secrets
import string
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_ID_ALPHABET = string.ascii_letters + string.digits
_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def generate_document_id(length: int = 20) -> str:
    """Generate a random document identifier in the hosted store's format.

    Returns:
        20 alphanumeric characters (e.g. "q3KZ1x0bYpL7mN2vR8sT")
    """
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def now_iso() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(UTC).isoformat()


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_document(data: dict[str, Any]) -> str:
    """Serialize document fields to JSON text (datetimes as ISO strings)."""
    return json.dumps(data, default=_json_default, ensure_ascii=False)


def load_document(text: str) -> dict[str, Any]:
    """Parse stored JSON text back to document fields."""
    return json.loads(text)


def json_path(field_name: str) -> str:
    """JSON path for a top-level document field.

    Raises:
        ValueError: If the field name is not a plain identifier
    """
    if not _FIELD_NAME.match(field_name):
        raise ValueError(f"Invalid field name: {field_name!r}")
    return f"$.{field_name}"
