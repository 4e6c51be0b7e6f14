"""
UTC helpers.

Timestamps are stored as UTC and leave the API as ISO 8601 strings with
millisecond precision and a ``Z`` suffix, e.g. ``2024-01-15T14:30:00.000Z``.
"""

from datetime import datetime, timezone

UTC = timezone.utc

_ISO_SECONDS = "%Y-%m-%dT%H:%M:%S"


def utc_now() -> datetime:
    """Aware current time in UTC."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    # SQLite hands datetimes back naive; they were written as UTC.
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso8601(dt: datetime) -> str:
    """Render ``dt`` for API responses (``record.created_at`` -> ``"...T14:30:00.000Z"``)."""
    value = to_utc(dt)
    return f"{value.strftime(_ISO_SECONDS)}.{value.microsecond // 1000:03d}Z"
