"""Timestamp utilities for UTC handling and tolerant datetime parsing.

NocoDB exposes row creation times in several shapes depending on version
(``2024-03-01 10:20:30+00:00``, ``2024-03-01T10:20:30.000Z``, epoch numbers),
so parsing here is best-effort and returns None instead of raising.
"""

from datetime import datetime, timezone
from typing import Any, Optional

# Epoch values above this are milliseconds (year ~5138 in seconds)
_EPOCH_MILLIS_THRESHOLD = 100_000_000_000


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Example:
        >>> ensure_utc(datetime(2025, 11, 4, 12, 0)).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a timestamp-like value to a UTC datetime.

    Accepts datetimes, unix epoch numbers (seconds or milliseconds) and
    ISO 8601 strings with ``T`` or space separators, with or without a ``Z``
    suffix, and date-only strings.

    Returns:
        Timezone-aware datetime in UTC, or None if the value is empty or unparsable

    Example:
        >>> parse_timestamp("2025-11-04 12:00:00+00:00").hour
        12
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, (int, float)):
        return _from_epoch(value)

    if not isinstance(value, str):
        return None

    cleaned = value.strip()
    if not cleaned:
        return None

    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    try:
        return _from_epoch(float(cleaned))
    except ValueError:
        return None


def _from_epoch(number: float) -> Optional[datetime]:
    if number < 0:
        return None
    if number > _EPOCH_MILLIS_THRESHOLD:
        number = number / 1000.0
    try:
        return datetime.fromtimestamp(number, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO 8601 UTC with milliseconds and a ``Z`` suffix.

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
