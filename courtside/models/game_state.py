"""
RotationState model for the Courtside rotation timer.

This module contains the RotationState dataclass which represents the complete
state of a live game: roster partition, court-time ledger, clocks, break
bookkeeping and the snapshot (de)serialization used for crash recovery.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .player import Player
from .settings import GameSettings
from .substitution import (
    EMPTY_SWAP, NO_DRAFT, ManualPrompt, ManualSwapDraft, PendingSwap
)
from ..utils.constants import (
    DEFAULT_HALF_LENGTH_SECONDS,
    DEFAULT_SUB_INTERVAL_SECONDS,
    DEFAULT_SUB_WARNING_SECONDS,
    SNAPSHOT_VERSION,
)


class PauseReason(Enum):
    """Why the game clock is stopped. GAME_ENDED is terminal."""
    NONE = "none"
    QUARTER_BREAK = "quarter"
    HALF_BREAK = "half"
    GAME_ENDED = "end"

    def to_json(self) -> Optional[str]:
        return None if self is PauseReason.NONE else self.value

    @classmethod
    def from_json(cls, value: Optional[str]) -> "PauseReason":
        if value is None:
            return cls.NONE
        return cls(value)


@dataclass
class RotationState:
    """
    Represents the complete state of a basketball game in progress.

    Attributes:
        starters: Players on court, in slot order (never more than five)
        bench: Remaining participating players, in bench order
        initial_roster: Every participating player, used for the archive
        court_seconds: Player id -> whole seconds spent as a starter
        sub_counts: Player id -> substitutions (entries and exits)
        settings: Timing configuration frozen at game start
        game_clock: Seconds left in the current half
        sub_window_clock: Seconds left until the next automatic substitution
        last_tick_ms: Anchor of the wall-clock delta computation
        paused: Whether the clocks are stopped
        pause_reason: Break or end state when paused by the game itself
        quarter_pause_triggered: Whether this half's quarter break already fired
        last_quarter_label: Label of the most recent quarter break
        last_half_label: Label of the most recent half break
        break_overlay_dismissed: Coach hid the break summary to adjust the lineup
        quarter_counter: Number of the next quarter break within the half
        half_counter: Number of the half currently being played
        pending_swap: Current automatic substitution proposal
        sub_countdown_active: Whether the window is inside its warning threshold
        draft: Manual substitution in progress
        prompt: Question currently put to the coach, if any
        game_start_ms: Epoch milliseconds when the game started
        game_ended: Whether the game has been finalized
        latest_saved_game_id: Id of the archived game once finalized
    """
    starters: List[Player] = field(default_factory=list)
    bench: List[Player] = field(default_factory=list)
    initial_roster: List[Player] = field(default_factory=list)
    court_seconds: Dict[str, int] = field(default_factory=dict)
    sub_counts: Dict[str, int] = field(default_factory=dict)
    settings: GameSettings = field(default_factory=GameSettings)
    # clocks
    game_clock: int = DEFAULT_HALF_LENGTH_SECONDS
    sub_window_clock: int = DEFAULT_SUB_INTERVAL_SECONDS
    last_tick_ms: int = 0
    # pause and break bookkeeping
    paused: bool = False
    pause_reason: PauseReason = PauseReason.NONE
    quarter_pause_triggered: bool = False
    last_quarter_label: Optional[str] = None
    last_half_label: Optional[str] = None
    break_overlay_dismissed: bool = False
    quarter_counter: int = 1
    half_counter: int = 1
    # substitutions
    pending_swap: PendingSwap = EMPTY_SWAP
    sub_countdown_active: bool = False
    draft: ManualSwapDraft = NO_DRAFT
    prompt: Optional[ManualPrompt] = None
    # lifecycle
    game_start_ms: int = 0
    game_ended: bool = False
    latest_saved_game_id: Optional[str] = None

    def roster_ids(self) -> List[str]:
        """Ids of every player currently on court or on the bench."""
        return [p.id for p in self.starters] + [p.id for p in self.bench]

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.starters + self.bench:
            if player.id == player_id:
                return player
        return None

    def ensure_ledger_entries(self) -> None:
        """Make sure every rostered player has ledger entries and an archive row."""
        known = {p.id for p in self.initial_roster}
        for player in self.starters + self.bench:
            self.court_seconds.setdefault(player.id, 0)
            self.sub_counts.setdefault(player.id, 0)
            if player.id not in known:
                known.add(player.id)
                self.initial_roster.append(player)

    def to_json(self, saved_at: int) -> dict:
        """
        Convert RotationState to the persisted snapshot record.

        The camelCase keys are shared with games persisted by earlier releases
        and must not be renamed.

        Args:
            saved_at: Epoch milliseconds of the write

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        swap = self.pending_swap
        return {
            "version": SNAPSHOT_VERSION,
            "savedAt": saved_at,
            "starters": [p.to_dict() for p in self.starters],
            "bench": [p.to_dict() for p in self.bench],
            "initialRoster": [p.to_dict() for p in self.initial_roster],
            "pendingIn": swap.incoming.to_dict() if swap.incoming else None,
            "pendingOut": swap.outgoing.to_dict() if swap.outgoing else None,
            "subCountdownActive": self.sub_countdown_active,
            "subWindowClock": self.sub_window_clock,
            "gameClock": self.game_clock,
            "isPaused": self.paused,
            "pauseReason": self.pause_reason.to_json(),
            "quarterPauseTriggered": self.quarter_pause_triggered,
            "lastQuarterLabel": self.last_quarter_label,
            "lastHalfLabel": self.last_half_label,
            "breakOverlayDismissed": self.break_overlay_dismissed,
            "halfLengthSeconds": self.settings.half_length_seconds,
            "subIntervalSeconds": self.settings.sub_interval_seconds,
            "subWarningSeconds": self.settings.sub_warning_seconds,
            "quarterBreakSeconds": self.settings.quarter_break_seconds,
            "quarterCounter": self.quarter_counter,
            "halfCounter": self.half_counter,
            "playerCourtSeconds": [[k, v] for k, v in self.court_seconds.items()],
            "playerSubCounts": [[k, v] for k, v in self.sub_counts.items()],
            "gameStartTimestamp": self.game_start_ms,
            "gameEnded": self.game_ended,
            "latestSavedGameId": self.latest_saved_game_id,
        }

    @staticmethod
    def from_json(data: dict, now: int) -> "RotationState":
        """
        Create RotationState from a persisted snapshot record.

        Missing optional fields fall back to the values a fresh game would
        use. Manual drafts and prompts are never restored.

        Args:
            data: Snapshot dictionary
            now: Epoch milliseconds used for missing timestamps

        Returns:
            New RotationState instance

        Raises:
            ValueError, TypeError, KeyError: If the record is malformed
        """

        def _players(key: str) -> List[Player]:
            return [Player.from_dict(p) for p in data.get(key) or []]

        def _optional_player(key: str) -> Optional[Player]:
            raw = data.get(key)
            return Player.from_dict(raw) if raw else None

        def _int(key: str, default: int) -> int:
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return default
            return int(value)

        def _pairs(key: str) -> Dict[str, int]:
            return {str(k): int(v) for k, v in data.get(key) or []}

        gs = RotationState()
        gs.starters = _players("starters")
        gs.bench = _players("bench")
        gs.initial_roster = _players("initialRoster") or gs.starters + gs.bench
        gs.court_seconds = _pairs("playerCourtSeconds")
        gs.sub_counts = _pairs("playerSubCounts")

        gs.settings = GameSettings(
            half_length_seconds=_int("halfLengthSeconds", DEFAULT_HALF_LENGTH_SECONDS),
            sub_interval_seconds=_int("subIntervalSeconds", DEFAULT_SUB_INTERVAL_SECONDS),
            sub_warning_seconds=_int("subWarningSeconds", DEFAULT_SUB_WARNING_SECONDS),
            quarter_break_seconds=_int("quarterBreakSeconds", 0),
        )
        gs.game_clock = max(0, _int("gameClock", gs.settings.half_length_seconds))
        gs.sub_window_clock = max(0, _int("subWindowClock", gs.settings.sub_interval_seconds))
        gs.last_tick_ms = now

        gs.paused = bool(data.get("isPaused", False))
        gs.pause_reason = PauseReason.from_json(data.get("pauseReason"))
        gs.quarter_pause_triggered = bool(data.get("quarterPauseTriggered", False))
        gs.last_quarter_label = data.get("lastQuarterLabel")
        gs.last_half_label = data.get("lastHalfLabel")
        gs.break_overlay_dismissed = bool(data.get("breakOverlayDismissed", False))
        gs.quarter_counter = _int("quarterCounter", 1)
        gs.half_counter = _int("halfCounter", 1)

        gs.pending_swap = PendingSwap(
            incoming=_optional_player("pendingIn"),
            outgoing=_optional_player("pendingOut"),
        )
        gs.sub_countdown_active = bool(data.get("subCountdownActive", False))

        gs.game_start_ms = _int("gameStartTimestamp", now)
        gs.game_ended = bool(data.get("gameEnded", False))
        gs.latest_saved_game_id = data.get("latestSavedGameId")

        gs.ensure_ledger_entries()
        return gs


def snapshot_saved_at(data: Dict[str, Any], default: int) -> int:
    """The ``savedAt`` timestamp of a snapshot record, or ``default``."""
    value = data.get("savedAt")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)
