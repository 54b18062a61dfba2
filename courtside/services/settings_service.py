"""
Settings normalization for the Courtside rotation timer.

Two shapes of settings record exist in storage: the minute-based form written
by the settings screen (``halfTime``, ``quarterTime``, ``subsTime``) and the
seconds-based fields (``halfLengthSeconds``, ``subIntervalSeconds``,
``subWarningSeconds``, ``quarterBreakSeconds``). Both are reduced here to a
``GameSettings`` value the rotation engine can trust.
"""
import math
from typing import Any, Dict, Optional

from ..models import GameSettings
from ..utils import round_half_up
from ..utils.constants import (
    DEFAULT_HALF_MINUTES,
    DEFAULT_QUARTER_MINUTES,
    DEFAULT_SUB_INTERVAL_MINUTES,
    DEFAULT_SUB_WARNING_SECONDS,
    MAX_HALF_LENGTH_SECONDS,
    MAX_HALF_MINUTES,
    MAX_SUB_INTERVAL_SECONDS,
    MAX_SUB_MINUTES,
    MIN_HALF_LENGTH_SECONDS,
    MIN_HALF_MINUTES,
    MIN_SUB_INTERVAL_SECONDS,
    MIN_SUB_MINUTES,
)


def _number(value: Any) -> Optional[float]:
    """Finite numeric value or None; booleans and strings are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def clamp_to_range(value: Any, minimum: int, maximum: int) -> int:
    """Round to a whole number and clamp; non-numeric input yields the minimum."""
    number = _number(value)
    if number is None:
        return minimum
    return max(minimum, min(maximum, round_half_up(number)))


def derive_quarter_minutes(half_minutes: int) -> int:
    """
    Quarter break offered for a given half length.

    Short halves split evenly, common youth lengths use fixed marks, and long
    halves split evenly within 12-20 minutes.
    """
    if half_minutes <= 10:
        return clamp_to_range(half_minutes / 2, 1, 12)
    if half_minutes <= 18:
        return 8
    if half_minutes <= 24:
        return 10
    return clamp_to_range(half_minutes / 2, 12, 20)


def normalize_times(values: Dict[str, Any]) -> Dict[str, int]:
    """
    Normalize the minute-based settings form.

    Args:
        values: Mapping with optional ``halfTime``, ``quarterTime`` and
            ``subsTime`` minutes

    Returns:
        Dict with all three keys; ``quarterTime`` is 0 when quarter breaks are
        switched off, otherwise derived from the half length
    """
    half_raw = values.get("halfTime", DEFAULT_HALF_MINUTES)
    half = clamp_to_range(
        DEFAULT_HALF_MINUTES if _number(half_raw) is None else half_raw,
        MIN_HALF_MINUTES,
        MAX_HALF_MINUTES,
    )
    quarter_raw = _number(values.get("quarterTime", DEFAULT_QUARTER_MINUTES))
    quarter_enabled = quarter_raw is not None and quarter_raw > 0
    subs_raw = values.get("subsTime", DEFAULT_SUB_INTERVAL_MINUTES)
    subs = clamp_to_range(
        DEFAULT_SUB_INTERVAL_MINUTES if _number(subs_raw) is None else subs_raw,
        MIN_SUB_MINUTES,
        MAX_SUB_MINUTES,
    )
    return {
        "halfTime": half,
        "quarterTime": derive_quarter_minutes(half) if quarter_enabled else 0,
        "subsTime": subs,
    }


def game_settings_from_record(record: Optional[Dict[str, Any]]) -> GameSettings:
    """
    Build the timing configuration for a new game from a stored record.

    Seconds fields take precedence over the legacy minute fields. A missing
    record yields the defaults (18 minute halves, 4 minute windows, 30 second
    warning, quarter break at 8 minutes remaining).
    """
    record = record or {}

    half_seconds = _number(record.get("halfLengthSeconds"))
    half_minutes = (
        half_seconds / 60 if half_seconds is not None
        else _number(record.get("halfTime")) or DEFAULT_HALF_MINUTES
    )
    sub_seconds = _number(record.get("subIntervalSeconds"))
    sub_minutes = (
        sub_seconds / 60 if sub_seconds is not None
        else _number(record.get("subsTime")) or DEFAULT_SUB_INTERVAL_MINUTES
    )

    quarter_seconds = _number(record.get("quarterBreakSeconds"))
    if quarter_seconds is None:
        quarter_minutes = _number(record.get("quarterTime"))
        if quarter_minutes is None:
            quarter_minutes = DEFAULT_QUARTER_MINUTES
        quarter_seconds = quarter_minutes * 60

    warning = _number(record.get("subWarningSeconds"))
    if warning is None:
        warning = DEFAULT_SUB_WARNING_SECONDS

    return GameSettings(
        half_length_seconds=clamp_to_range(
            half_minutes * 60, MIN_HALF_LENGTH_SECONDS, MAX_HALF_LENGTH_SECONDS
        ),
        sub_interval_seconds=clamp_to_range(
            sub_minutes * 60, MIN_SUB_INTERVAL_SECONDS, MAX_SUB_INTERVAL_SECONDS
        ),
        sub_warning_seconds=max(0, round_half_up(warning)),
        quarter_break_seconds=max(0, round_half_up(quarter_seconds)),
    )
