"""Time helpers shared across the watchdog."""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_duration(duration: timedelta) -> str:
    """
    Render a duration as "M minutes and S seconds".

    Args:
        duration: Duration to render; negative values render as zero

    Returns:
        Human readable duration
    """
    total_seconds = max(int(duration.total_seconds()), 0)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes} minutes and {seconds} seconds"
