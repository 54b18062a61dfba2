"""
Game session host for the Courtside rotation timer.

A GameSession plays the part of the court screen: it resumes or starts the
live game, drives the periodic tick, autosaves on a fixed cadence and saves
whenever the game is paused, backgrounded or left.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from ..models import (
    ArchivedGame, ConfirmPending, ConfirmPrompt, GameSettings, PartialDraft,
    Player, ReasonPrompt, RotationState,
)
from ..utils import fmt_mmss, now_ms
from ..utils.constants import AUTOSAVE_INTERVAL_MS, MANUAL_REASONS, TICK_INTERVAL_MS
from .persistence_service import PersistenceService
from .rotation_service import RotationService
from .settings_service import game_settings_from_record, normalize_times
from .storage import (
    HistoryStore, KeyValueStore, LineupStore, RosterStore, SettingsStore, StorageError,
)

logger = logging.getLogger(__name__)

BACKGROUND_STATES = ("background", "inactive")


class GameSession:
    """Owns the live RotationService and everything around it."""

    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], int]] = None):
        self.store = store
        self.roster = RosterStore(store)
        self.lineups = LineupStore(store)
        self.settings = SettingsStore(store)
        self.history = HistoryStore(store)
        self.persistence = PersistenceService(store, self.history)
        self._clock = clock
        self.rotation: Optional[RotationService] = None
        self._last_autosave_ms = 0

    def now(self) -> int:
        return int(self._clock()) if self._clock is not None else now_ms()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self, finalize_on_load: bool = False) -> RotationService:
        """
        Resume the stored game or start a fresh one.

        Args:
            finalize_on_load: End the game right after loading it (the home
                screen's "end unfinished game" action)

        Returns:
            The live RotationService
        """
        self.persistence.clear_live_preview()

        rotation = None
        snapshot = self.persistence.load_snapshot()
        if snapshot is not None:
            try:
                rotation = RotationService.from_snapshot(
                    snapshot, clock=self._clock, on_game_ended=self._archive
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Discarding unreadable ongoing game: %s", e)
                self.persistence.delete_snapshot()

        if rotation is None:
            rotation = self._fresh_rotation()

        self.rotation = rotation
        rotation.evaluate()
        if finalize_on_load:
            rotation.finalize_game()
        self._last_autosave_ms = self.now()
        return rotation

    def new_game(
        self,
        players: Optional[List[Player]] = None,
        selected: Optional[List[str]] = None,
        lineup: Optional[Dict[str, List[str]]] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> RotationService:
        """
        Store any supplied setup records, drop the ongoing game and start fresh.

        ``settings`` uses the minute-based form (``halfTime``, ``quarterTime``,
        ``subsTime``) and is normalized before it is stored.
        """
        try:
            if players is not None:
                self.roster.save_players(players)
            if selected is not None:
                self.roster.save_selection(selected)
            if lineup is not None:
                self.lineups.save(lineup.get("starters", []), lineup.get("bench", []))
            if settings is not None:
                self.settings.save(normalize_times(settings))
        except StorageError as e:
            logger.warning("Could not store game setup: %s", e)

        self.persistence.delete_snapshot()
        self.persistence.clear_live_preview()
        self.rotation = self._fresh_rotation()
        self.rotation.evaluate()
        self._last_autosave_ms = self.now()
        return self.rotation

    def _fresh_rotation(self) -> RotationService:
        players: List[Player] = []
        lineup = None
        record = None
        try:
            players = self.roster.todays_players()
            lineup = self.lineups.load()
            record = self.settings.load_record()
        except StorageError as e:
            logger.warning("Could not read game setup, using defaults: %s", e)
        settings: GameSettings = game_settings_from_record(record)
        return RotationService.new_game(
            players, settings, lineup=lineup, clock=self._clock, on_game_ended=self._archive
        )

    def _archive(self, archive: ArchivedGame) -> Optional[str]:
        return self.persistence.archive_game(archive)

    def _require_rotation(self) -> RotationService:
        if self.rotation is None:
            return self.load()
        return self.rotation

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------
    def tick(self) -> int:
        """Periodic tick; also autosaves every few seconds while the game is on."""
        rotation = self._require_rotation()
        elapsed = rotation.tick()
        now = self.now()
        if not rotation.is_ended and now - self._last_autosave_ms >= AUTOSAVE_INTERVAL_MS:
            self.persistence.auto_save(rotation)
            self._last_autosave_ms = now
        return elapsed

    def on_app_state_change(self, status: str) -> None:
        """Settle elapsed time on every transition; save when the app goes to the background."""
        rotation = self._require_rotation()
        rotation.tick()
        if status in BACKGROUND_STATES and not rotation.is_ended:
            self.persistence.save_snapshot(rotation)

    def leave(self) -> None:
        """The coach navigated away from the court."""
        rotation = self._require_rotation()
        rotation.tick()
        if not rotation.is_ended:
            self.persistence.save_snapshot(rotation)

    def toggle_pause(self) -> bool:
        rotation = self._require_rotation()
        toggled = rotation.toggle_pause()
        if toggled:
            rotation.evaluate()
            self.persistence.save_snapshot(rotation)
        return toggled

    def end_game(self, confirmed: bool) -> bool:
        return self._require_rotation().end_game(confirmed)

    def open_live_stats(self) -> Optional[ArchivedGame]:
        """
        Statistics for the stats screen.

        Before the end this publishes the live preview; afterwards it returns
        the archived game.
        """
        rotation = self._require_rotation()
        gs = rotation.game_state
        if gs.game_ended:
            if gs.latest_saved_game_id is None:
                return None
            return self.history.get(gs.latest_saved_game_id)
        return self.persistence.save_live_preview(rotation)

    def has_unfinished_game(self) -> bool:
        return self.persistence.has_unfinished_game()

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def state_view(self) -> Dict[str, Any]:
        """JSON-ready view of the live game for the court screen."""
        rotation = self._require_rotation()
        gs: RotationState = rotation.game_state

        def _player(player: Optional[Player]) -> Optional[dict]:
            if player is None:
                return None
            return {
                "id": player.id,
                "name": player.name,
                "seconds": gs.court_seconds.get(player.id, 0),
                "subs": gs.sub_counts.get(player.id, 0),
            }

        return {
            "gameClock": gs.game_clock,
            "gameClockDisplay": fmt_mmss(gs.game_clock),
            "subWindowClock": gs.sub_window_clock,
            "subWindowDisplay": fmt_mmss(gs.sub_window_clock),
            "isPaused": gs.paused,
            "pauseReason": gs.pause_reason.to_json(),
            "gameEnded": gs.game_ended,
            "halfCounter": gs.half_counter,
            "quarterCounter": gs.quarter_counter,
            "lastQuarterLabel": gs.last_quarter_label,
            "lastHalfLabel": gs.last_half_label,
            "breakOverlayDismissed": gs.break_overlay_dismissed,
            "starters": [_player(p) for p in gs.starters],
            "bench": [_player(p) for p in gs.bench],
            "pendingIn": _player(gs.pending_swap.incoming),
            "pendingOut": _player(gs.pending_swap.outgoing),
            "subCountdownActive": gs.sub_countdown_active,
            "draft": _draft_view(gs, _player),
            "prompt": _prompt_view(gs, _player),
            "latestSavedGameId": gs.latest_saved_game_id,
            "manualReasons": list(MANUAL_REASONS),
            "tickIntervalMs": TICK_INTERVAL_MS,
        }


def _draft_view(gs: RotationState, player_view: Callable) -> Optional[dict]:
    draft = gs.draft
    if isinstance(draft, PartialDraft):
        return {
            "state": "partial",
            "side": draft.side.value,
            "player": player_view(draft.player),
            "reason": draft.reason,
        }
    if isinstance(draft, ConfirmPending):
        return {
            "state": "confirm",
            "incoming": player_view(draft.incoming),
            "outgoing": player_view(draft.outgoing),
            "reason": draft.reason,
        }
    return None


def _prompt_view(gs: RotationState, player_view: Callable) -> Optional[dict]:
    prompt = gs.prompt
    if isinstance(prompt, ReasonPrompt):
        return {"type": "reason", "side": prompt.side.value, "player": player_view(prompt.player)}
    if isinstance(prompt, ConfirmPrompt):
        return {
            "type": "confirm",
            "incoming": player_view(prompt.incoming),
            "outgoing": player_view(prompt.outgoing),
            "reason": prompt.reason,
        }
    return None
