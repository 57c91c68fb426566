# backend/fincatch/utils/date_utils.py
"""
Timestamp utility functions for the valuation engine.

All timestamps in the engine are Unix seconds (UTC), matching what the
market data API accepts and returns.

Usage:
    from fincatch.utils.date_utils import generate_sample_timestamps

    samples = generate_sample_timestamps(start, end, interval_days=7)
"""

import math
from datetime import datetime, timedelta, timezone

SECONDS_PER_HOUR: int = 60 * 60
SECONDS_PER_DAY: int = 24 * SECONDS_PER_HOUR
SECONDS_PER_YEAR: int = 365 * SECONDS_PER_DAY

# Monday trading window closes at 02:15 UTC (Vietnamese session open)
_MONDAY_CUTOFF_HOUR = 2
_MONDAY_CUTOFF_MINUTE = 15


def last_trading_timestamp(now: float) -> int:
    """
    Get the end of the most recent trading window as a Unix timestamp.

    On weekdays this is simply ``now``. On weekends (and early Monday,
    before 02:15 UTC) it snaps back to the most recent Saturday 02:00 UTC,
    so that ``result - 86400`` is the start of Friday's trading window.

    Args:
        now: Current time in Unix seconds

    Returns:
        Unix seconds marking the end of the last trading window

    Example:
        >>> # Sunday 2024-03-10 12:00 UTC
        >>> last_trading_timestamp(1710072000)
        1709949600  # Saturday 2024-03-09 02:00 UTC
    """
    moment = datetime.fromtimestamp(now, tz=timezone.utc)
    weekday = moment.weekday()  # Monday = 0, Sunday = 6

    before_monday_cutoff = weekday == 0 and (
            moment.hour < _MONDAY_CUTOFF_HOUR
            or (moment.hour == _MONDAY_CUTOFF_HOUR and moment.minute < _MONDAY_CUTOFF_MINUTE)
    )
    if weekday not in (5, 6) and not before_monday_cutoff:
        return math.floor(now)

    # Days back to the most recent Saturday: Sat=0, Sun=1, Mon=2
    saturday_offset = {5: 0, 6: 1, 0: 2}[weekday]
    saturday = (moment - timedelta(days=saturday_offset)).replace(
        hour=2, minute=0, second=0, microsecond=0
    )
    return int(saturday.timestamp())


def generate_sample_timestamps(start: int, end: int, interval_days: int = 1) -> list[int]:
    """
    Generate sample timestamps from start to end (inclusive).

    Samples are spaced ``interval_days`` apart. The final sample is always
    exactly ``end`` even when the range is not a multiple of the interval.

    Args:
        start: First timestamp (Unix seconds)
        end: Last timestamp (Unix seconds)
        interval_days: Spacing between samples in days

    Returns:
        Sorted list of timestamps; empty if start > end

    Raises:
        ValueError: If interval_days is not positive
    """
    if interval_days <= 0:
        raise ValueError(f"interval_days must be positive, got {interval_days}")

    if start > end:
        return []

    step = interval_days * SECONDS_PER_DAY
    timestamps = list(range(start, end + 1, step))

    if timestamps[-1] != end:
        timestamps.append(end)

    return timestamps


def start_of_day_utc(timestamp: float) -> int:
    """Truncate a Unix timestamp to 00:00:00 UTC of the same day."""
    return int(timestamp) - int(timestamp) % SECONDS_PER_DAY
