"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Make a datetime timezone-aware.

    Some backends hand back naive datetimes even for timezone columns;
    those are stored in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def isoformat_or_none(value: datetime | None) -> str | None:
    """Serialize a datetime for JSON payloads."""
    value = as_utc(value)
    return value.isoformat() if value else None
