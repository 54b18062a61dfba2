"""Clock service for the Courtside rotation timer."""

from typing import Callable, Optional

from ..models import RotationState
from ..utils import now_ms, whole_seconds_between


class ClockEngine:
    """
    Wall-clock anchored countdown for the game clock and the substitution window.

    Simulated time only advances in ``flush``: elapsed time is derived from
    ``now - last_tick_ms`` rather than from how often a host timer fired, so a
    process suspended in the background loses nothing and counts nothing twice.
    """

    def __init__(self, game_state: RotationState, clock: Optional[Callable[[], int]] = None):
        self.game_state = game_state
        self._clock = clock

    def now(self) -> int:
        """Current epoch milliseconds from the injected clock or the wall clock."""
        return int(self._clock()) if self._clock is not None else now_ms()

    # ------------------------------------------------------------------
    # Core clock controls
    # ------------------------------------------------------------------
    def flush(self) -> int:
        """
        Consume whole seconds elapsed since the last anchor.

        While paused or after the game ended the anchor simply moves to now.
        Otherwise the anchor advances by exactly the consumed seconds so the
        sub-second remainder carries into the next flush.

        Returns:
            Number of seconds applied (0 when nothing was consumed)
        """
        now = self.now()
        if self.game_state.paused or self.game_state.game_ended:
            self.game_state.last_tick_ms = now
            return 0

        elapsed = (now - self.game_state.last_tick_ms) // 1000
        if elapsed <= 0:
            return 0

        self.apply_elapsed(elapsed)
        self.game_state.last_tick_ms += elapsed * 1000
        return elapsed

    def apply_elapsed(self, seconds: int) -> None:
        """Decrement both clocks (floored at 0) and credit every current starter."""
        if seconds <= 0:
            return

        self.game_state.game_clock = max(0, self.game_state.game_clock - seconds)
        self.game_state.sub_window_clock = max(0, self.game_state.sub_window_clock - seconds)

        ledger = self.game_state.court_seconds
        for player in self.game_state.starters:
            ledger[player.id] = ledger.get(player.id, 0) + seconds

    def reanchor(self) -> None:
        """Move the anchor to now without consuming any time."""
        self.game_state.last_tick_ms = self.now()

    def catch_up(self, since_ms: int) -> int:
        """
        Apply the whole seconds that passed since ``since_ms`` and re-anchor.

        Used when resuming a snapshot that was saved while the game was running.
        As with ``flush``, the sub-second remainder carries into the next flush.
        """
        now = self.now()
        elapsed = whole_seconds_between(since_ms, now)
        self.apply_elapsed(elapsed)
        self.game_state.last_tick_ms = min(now, int(since_ms) + elapsed * 1000)
        return elapsed

    # ------------------------------------------------------------------
    # Window resets
    # ------------------------------------------------------------------
    def reset_sub_window(self) -> None:
        self.game_state.sub_window_clock = self.game_state.settings.sub_interval_seconds

    def reset_for_next_half(self) -> None:
        self.game_state.game_clock = self.game_state.settings.half_length_seconds
        self.reset_sub_window()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def in_warning_window(self) -> bool:
        """True while the substitution window is inside its warning threshold."""
        window = self.game_state.sub_window_clock
        return 0 < window <= self.game_state.settings.sub_warning_seconds
