"""Utility functions for time handling.

All timestamps are UTC and timezone-aware. They are persisted as ISO-8601
strings with microseconds and a "+00:00" offset so that lexical order in
SQLite matches chronological order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    return utc_now().isoformat()


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_storage(dt: datetime) -> str:
    """Format a datetime for a TEXT timestamp column."""
    return ensure_utc(dt).isoformat(timespec="microseconds")


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Accepts datetimes, ISO-8601 strings (a trailing ``Z`` is allowed) and the
    ``YYYY-MM-DD HH:MM:SS`` form SQLite's CURRENT_TIMESTAMP produces.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    return ensure_utc(parsed)
