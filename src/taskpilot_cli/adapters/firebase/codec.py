"""Conversion between plain values and Firestore REST typed values.

The REST API wraps every value in a single-key object naming its type,
e.g. ``{"stringValue": "x"}`` or ``{"mapValue": {"fields": {...}}}``.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

# Firestore reports nanoseconds; datetime holds at most microseconds
_FRACTION = re.compile(r"\.(\d{6})\d+")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp as returned by the REST API."""
    text = _FRACTION.sub(r".\1", value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def encode_value(value: Any) -> dict[str, Any]:
    """Wrap a plain Python value as a Firestore typed value.

    Raises:
        TypeError: For values with no Firestore representation
    """
    if value is None:
        return {"nullValue": None}
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, Enum):
        return encode_value(value.value)
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, date):
        return {"timestampValue": format_timestamp(datetime(value.year, value.month, value.day))}
    if isinstance(value, (list, tuple)):
        if not value:
            return {"arrayValue": {}}
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def decode_value(value: dict[str, Any]) -> Any:
    """Unwrap a Firestore typed value.

    Timestamps become aware datetimes; references, geo points and bytes are
    returned in their REST form.
    """
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    for key in ("referenceValue", "geoPointValue", "bytesValue"):
        if key in value:
            return value[key]
    raise ValueError(f"Unknown Firestore value: {value!r}")


def encode_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {key: encode_value(v) for key, v in data.items()}


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(v) for key, v in fields.items()}
