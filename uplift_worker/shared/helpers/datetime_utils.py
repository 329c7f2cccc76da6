"""
DateTime utility functions for the Cart Uplift learning worker
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def now_utc() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def parse_iso_timestamp(timestamp_str: str) -> Optional[datetime]:
    """
    Parse ISO timestamp string to timezone-aware datetime object.
    Handles both 'Z' suffix and '+00:00' formats for UTC timestamps.

    Args:
        timestamp_str: ISO timestamp string (e.g., "2024-01-15T10:30:00Z")

    Returns:
        timezone-aware datetime object or None if parsing fails
    """
    try:
        if timestamp_str.endswith("Z"):
            timestamp_str = timestamp_str.replace("Z", "+00:00")
        return ensure_utc(datetime.fromisoformat(timestamp_str))
    except (ValueError, TypeError, AttributeError):
        return None


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def window_start(as_of: datetime, days: int) -> datetime:
    """Start of a trailing window of `days` ending at `as_of`"""
    return ensure_utc(as_of) - timedelta(days=days)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed from start to end, never negative"""
    delta = ensure_utc(end) - ensure_utc(start)
    return max(0, int(delta.total_seconds() // 60))
