"""
Centralized datetime utilities for secure-options.

All datetimes are handled in UTC. Error objects stamp themselves with
these helpers so timestamps are consistent and easy to mock in tests.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime is in UTC timezone.

    Naive datetimes are assumed to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo == timezone.utc:
        return dt
    else:
        return dt.astimezone(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO string with Z suffix.

    Args:
        dt: Datetime to format (will be converted to UTC)

    Returns:
        ISO formatted string with 'Z' suffix
        Example: "2024-01-15T10:30:45.123456Z"
    """
    utc_dt = ensure_utc(dt)
    return utc_dt.isoformat().replace('+00:00', 'Z')
