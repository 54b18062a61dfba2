"""
Utility functions for the Courtside rotation timer.

This module contains time helpers shared by the clock, persistence and API layers.
"""
import math
import time
from datetime import datetime, timezone


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(3661)
        '61:01'
    """
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def now_ms() -> int:
    """
    Get current wall-clock time in epoch milliseconds.

    Returns:
        Current time as integer epoch milliseconds
    """
    return int(time.time() * 1000)


def whole_seconds_between(start_ms: int, end_ms: int) -> int:
    """Whole seconds elapsed from start_ms to end_ms, never negative."""
    return max(0, (int(end_ms) - int(start_ms)) // 1000)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def iso_date(timestamp_ms: int) -> str:
    """UTC calendar date (YYYY-MM-DD) of an epoch-millisecond timestamp."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.date().isoformat()


def iso_timestamp(timestamp_ms: int) -> str:
    """UTC ISO-8601 timestamp with millisecond precision."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
