"""Conversion of Firestore-native timestamps to ISO-8601 strings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def _format_datetime(dt: datetime) -> str:
    # Naive datetimes are assumed to already be UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_datetime(value: Any) -> datetime | None:
    """Return *value* as a datetime if it is, or can convert itself to, one."""
    if isinstance(value, datetime):
        return value
    for method in ("to_datetime", "ToDatetime"):
        convert = getattr(value, method, None)
        if callable(convert):
            converted = convert()
            if isinstance(converted, datetime):
                return converted
    return None


def normalize_timestamp(value: Any) -> Any:
    """Convert a native timestamp to an ISO-8601 string.

    ``None`` stays ``None``. Datetimes (including Firestore's
    ``DatetimeWithNanoseconds``) and objects exposing ``to_datetime()`` or
    ``ToDatetime()`` are rendered in UTC with millisecond precision, e.g.
    ``2024-01-02T03:04:05.000Z``. Anything else is returned unchanged: it is
    assumed to already be primitive and is not validated.
    """
    if value is None:
        return None
    dt = _as_datetime(value)
    if dt is None:
        return value
    return _format_datetime(dt)


def convert_timestamps(obj: Any) -> Any:
    """Recursively normalize every native timestamp inside dicts and lists."""
    if isinstance(obj, dict):
        return {key: convert_timestamps(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [convert_timestamps(value) for value in obj]
    return normalize_timestamp(obj)


def now_iso() -> str:
    """The current instant in the same format as :func:`normalize_timestamp`."""
    return _format_datetime(datetime.now(timezone.utc))
