"""Timing configuration captured when a game starts."""

from dataclasses import dataclass

from ..utils.constants import (
    DEFAULT_HALF_LENGTH_SECONDS,
    DEFAULT_QUARTER_BREAK_SECONDS,
    DEFAULT_SUB_INTERVAL_SECONDS,
    DEFAULT_SUB_WARNING_SECONDS,
)


@dataclass(frozen=True)
class GameSettings:
    """
    Period and substitution lengths in whole seconds.

    Settings are frozen for the lifetime of a game; edits made in the settings
    screen only apply to the next game.

    Attributes:
        half_length_seconds: Length of each half
        sub_interval_seconds: Length of the automatic substitution window;
            0 turns automatic substitutions off
        sub_warning_seconds: Window remainder at which the next swap is proposed
        quarter_break_seconds: Game-clock remainder that triggers the quarter
            break; 0 disables quarter breaks
    """
    half_length_seconds: int = DEFAULT_HALF_LENGTH_SECONDS
    sub_interval_seconds: int = DEFAULT_SUB_INTERVAL_SECONDS
    sub_warning_seconds: int = DEFAULT_SUB_WARNING_SECONDS
    quarter_break_seconds: int = DEFAULT_QUARTER_BREAK_SECONDS

    @property
    def quarter_breaks_enabled(self) -> bool:
        return self.quarter_break_seconds > 0
