"""UTC calendar-day helpers.

Day keys are integer timestamps truncated to 00:00:00.000 UTC.
Epoch time has no leap seconds, so a UTC day is always MS_PER_DAY long.
"""

from datetime import datetime, timezone
from typing import Iterator

MS_PER_DAY = 86_400_000


def utc_day_start_ms(timestamp_ms: int) -> int:
    """Truncate a millisecond timestamp to UTC midnight.

    Args:
        timestamp_ms: Milliseconds since epoch (may be negative).

    Returns:
        Milliseconds since epoch of the enclosing UTC midnight.
    """
    return timestamp_ms - (timestamp_ms % MS_PER_DAY)


def next_day_ms(day_ms: int) -> int:
    """Return the UTC midnight following the day containing day_ms."""
    return utc_day_start_ms(day_ms) + MS_PER_DAY


def iter_days_ms(start_ms: int, end_ms: int) -> Iterator[int]:
    """Yield every UTC midnight from start_ms to end_ms inclusive.

    Args:
        start_ms: First day key (UTC midnight).
        end_ms: Last day key (UTC midnight).

    Yields:
        Day keys in ascending order.
    """
    day = utc_day_start_ms(start_ms)
    while day <= end_ms:
        yield day
        day += MS_PER_DAY


def day_label(day_seconds: int) -> str:
    """Format a day key (seconds) as YYYY-MM-DD."""
    return datetime.fromtimestamp(day_seconds, tz=timezone.utc).strftime("%Y-%m-%d")
