"""
Rotation service for the Courtside rotation timer.

This module owns the live game: who is on court, how long everyone has played,
when the automatic substitution fires, quarter and half breaks, the manual
substitution workflow, and the one-way transition into the finished state.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from ..models import (
    EMPTY_SWAP, NO_DRAFT, ArchivedGame, ArchivedPlayer, ConfirmPending,
    ConfirmPrompt, GameSettings, NoDraft, PartialDraft, PauseReason,
    PendingSwap, Player, ReasonPrompt, RosterSide, RotationState,
    snapshot_saved_at,
)
from ..utils import LIVE_PREVIEW_ID, STARTER_SLOTS, iso_date, round_half_up
from ..utils.constants import FINAL_HALF
from .clock_service import ClockEngine
from .substitution_planner import plan_substitution

logger = logging.getLogger(__name__)

GameEndedListener = Callable[[ArchivedGame], Optional[str]]


def order_for_lineup(
    players: Iterable[Player],
    lineup: Optional[Dict[str, List[str]]] = None,
) -> List[Player]:
    """
    Order today's players by the stored lineup.

    Lineup starters come first, then lineup bench, then everyone the lineup
    does not mention in their original order. Ids the lineup knows but that
    are not playing today are dropped, and nobody appears twice.
    """
    players = list(players)
    by_id = {p.id: p for p in players}
    base_ids = [p.id for p in players]
    if lineup:
        order = list(lineup.get("starters", [])) + list(lineup.get("bench", [])) + base_ids
    else:
        order = base_ids

    ordered: List[Player] = []
    seen = set()
    for player_id in order:
        player = by_id.get(player_id)
        if player is not None and player_id not in seen:
            seen.add(player_id)
            ordered.append(player)
    return ordered


class RotationService:
    """
    State machine for a live game.

    States: active (running or paused, possibly at a quarter or half break)
    and ended. Every public operation is a no-op once the game has ended.
    """

    def __init__(
        self,
        game_state: RotationState,
        clock: Optional[Callable[[], int]] = None,
        on_game_ended: Optional[GameEndedListener] = None,
    ):
        """
        Args:
            game_state: State to drive
            clock: Optional epoch-millisecond clock (defaults to the wall clock)
            on_game_ended: Called with the archive when the game finalizes;
                returns the stored archive id, or None if it was not stored
        """
        self.game_state = game_state
        self.clock = ClockEngine(game_state, clock)
        self.on_game_ended = on_game_ended

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def new_game(
        cls,
        players: Iterable[Player],
        settings: GameSettings,
        lineup: Optional[Dict[str, List[str]]] = None,
        clock: Optional[Callable[[], int]] = None,
        on_game_ended: Optional[GameEndedListener] = None,
    ) -> "RotationService":
        """Start a fresh game: first five in lineup order start, clocks at full length."""
        ordered = order_for_lineup(players, lineup)
        state = RotationState(
            starters=ordered[:STARTER_SLOTS],
            bench=ordered[STARTER_SLOTS:],
            initial_roster=list(ordered),
            court_seconds={p.id: 0 for p in ordered},
            sub_counts={p.id: 0 for p in ordered},
            settings=settings,
            game_clock=settings.half_length_seconds,
            sub_window_clock=settings.sub_interval_seconds,
        )
        service = cls(state, clock=clock, on_game_ended=on_game_ended)
        now = service.clock.now()
        state.game_start_ms = now
        state.last_tick_ms = now
        logger.info(
            "New game: %d starters, %d on bench, %ss halves, %ss windows",
            len(state.starters), len(state.bench),
            settings.half_length_seconds, settings.sub_interval_seconds,
        )
        return service

    @classmethod
    def from_snapshot(
        cls,
        data: dict,
        clock: Optional[Callable[[], int]] = None,
        on_game_ended: Optional[GameEndedListener] = None,
    ) -> "RotationService":
        """
        Resume a persisted game.

        A snapshot saved while the clock was running is credited with the
        whole seconds that passed since ``savedAt``.

        Raises:
            ValueError, TypeError, KeyError: If the snapshot is malformed
        """
        service = cls(RotationState(), clock=clock, on_game_ended=on_game_ended)
        now = service.clock.now()
        state = RotationState.from_json(data, now)
        service.game_state = state
        service.clock.game_state = state

        if not state.game_ended and not state.paused:
            caught_up = service.clock.catch_up(snapshot_saved_at(data, now))
            logger.info("Resumed running game, applied %ds since last save", caught_up)
        else:
            service.clock.reanchor()
            logger.info("Resumed paused game (%s)", state.pause_reason.value)
        return service

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_ended(self) -> bool:
        return self.game_state.game_ended

    @property
    def is_running(self) -> bool:
        return not self.game_state.paused and not self.game_state.game_ended

    def plan(self) -> PendingSwap:
        """Current automatic proposal for the live ledger."""
        gs = self.game_state
        return plan_substitution(gs.starters, gs.bench, gs.court_seconds)

    def side_of(self, player_id: str) -> Optional[RosterSide]:
        if any(p.id == player_id for p in self.game_state.starters):
            return RosterSide.STARTERS
        if any(p.id == player_id for p in self.game_state.bench):
            return RosterSide.BENCH
        return None

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------
    def tick(self) -> int:
        """Flush elapsed time and evaluate breaks and the substitution window."""
        elapsed = self.clock.flush()
        self.evaluate()
        return elapsed

    def evaluate(self) -> None:
        """Apply at most one clock-driven transition for the current clocks."""
        gs = self.game_state
        if gs.game_ended:
            return

        if gs.game_clock <= 0:
            if not gs.paused:
                self._end_half()
            return

        if (
            gs.settings.quarter_breaks_enabled
            and not gs.quarter_pause_triggered
            and not gs.paused
            and gs.game_clock <= gs.settings.quarter_break_seconds
        ):
            self._enter_quarter_break()
            return

        if not gs.paused:
            self._evaluate_sub_window()

    def _end_half(self) -> None:
        gs = self.game_state
        gs.paused = True
        gs.last_half_label = f"Half {gs.half_counter}"
        self._clear_substitution_state()
        gs.quarter_pause_triggered = False
        gs.break_overlay_dismissed = False
        gs.quarter_counter = 1

        if gs.half_counter >= FINAL_HALF:
            self.finalize_game()
        else:
            gs.pause_reason = PauseReason.HALF_BREAK
            self.clock.reset_sub_window()
            gs.pending_swap = self.plan()
            logger.info("%s ended, half-time break", gs.last_half_label)

        gs.half_counter += 1

    def _enter_quarter_break(self) -> None:
        gs = self.game_state
        gs.paused = True
        gs.last_quarter_label = f"Quarter {gs.quarter_counter}"
        gs.quarter_counter += 1
        gs.pause_reason = PauseReason.QUARTER_BREAK
        gs.quarter_pause_triggered = True
        self.clock.reset_sub_window()
        self._clear_substitution_state()
        gs.break_overlay_dismissed = False
        gs.pending_swap = self.plan()
        logger.info("%s complete, quarter break", gs.last_quarter_label)

    def _evaluate_sub_window(self) -> None:
        gs = self.game_state
        if gs.settings.sub_interval_seconds <= 0:
            # automatic substitutions are off
            gs.sub_countdown_active = False
            return

        if gs.sub_window_clock == 0:
            swap = self.plan()
            if swap.is_complete:
                self.perform_sub(swap.incoming, swap.outgoing)
            if not isinstance(gs.draft, NoDraft):
                logger.debug("Substitution window expired, discarding manual draft")
            self._clear_substitution_state()
            self.clock.reset_sub_window()
            return

        if isinstance(gs.draft, NoDraft) and self.clock.in_warning_window():
            gs.pending_swap = self.plan()
            gs.sub_countdown_active = True
        else:
            gs.sub_countdown_active = False

    def _clear_substitution_state(self) -> None:
        gs = self.game_state
        gs.pending_swap = EMPTY_SWAP
        gs.sub_countdown_active = False
        gs.draft = NO_DRAFT
        gs.prompt = None

    # ------------------------------------------------------------------
    # Substitutions
    # ------------------------------------------------------------------
    def perform_sub(self, incoming: Optional[Player], outgoing: Optional[Player]) -> bool:
        """
        Swap one bench player onto the court for one starter.

        The outgoing player joins the end of the bench and the incoming player
        the end of the starters; both substitution counters go up by one.
        Court seconds are untouched.

        Returns:
            True if the swap was applied
        """
        gs = self.game_state
        if incoming is None or outgoing is None or gs.game_ended:
            return False

        entering = next((p for p in gs.bench if p.id == incoming.id), None)
        leaving = next((p for p in gs.starters if p.id == outgoing.id), None)
        if entering is None or leaving is None:
            logger.debug(
                "Ignoring substitution %s for %s: players not on the expected sides",
                incoming.id, outgoing.id,
            )
            return False

        gs.sub_counts[entering.id] = gs.sub_counts.get(entering.id, 0) + 1
        gs.sub_counts[leaving.id] = gs.sub_counts.get(leaving.id, 0) + 1
        gs.starters = [p for p in gs.starters if p.id != leaving.id] + [entering]
        gs.bench = [p for p in gs.bench if p.id != entering.id] + [leaving]
        gs.ensure_ledger_entries()
        logger.info("Substitution: %s in for %s", entering.name, leaving.name)
        return True

    # ---------- Manual substitution workflow ---------- #

    def request_reason(self, player_id: str) -> bool:
        """Ask the coach why the tapped player is leaving or entering."""
        gs = self.game_state
        if gs.game_ended or not isinstance(gs.draft, NoDraft):
            return False
        side = self.side_of(player_id)
        if side is None:
            return False
        gs.prompt = ReasonPrompt(player=gs.find_player(player_id), side=side)
        return True

    def start_draft(self, player_id: str, reason: str) -> bool:
        """
        Begin a manual substitution from the tapped player.

        Automatic suggestions are suppressed until the draft is confirmed or
        cancelled. A second draft cannot start while one is open.
        """
        gs = self.game_state
        if gs.game_ended:
            return False
        if not isinstance(gs.draft, NoDraft):
            logger.debug("Ignoring draft for %s: another draft is open", player_id)
            return False
        side = self.side_of(player_id)
        if side is None:
            return False

        gs.draft = PartialDraft(side=side, player=gs.find_player(player_id), reason=reason)
        gs.pending_swap = EMPTY_SWAP
        gs.sub_countdown_active = False
        gs.prompt = None
        return True

    def select_player(self, player_id: str) -> bool:
        """
        Fill in the open side of a draft.

        A player on the draft's own side replaces its candidate; a player on
        the opposite side completes the draft and asks for confirmation.
        """
        gs = self.game_state
        draft = gs.draft
        if gs.game_ended or not isinstance(draft, PartialDraft):
            return False
        side = self.side_of(player_id)
        if side is None:
            return False
        player = gs.find_player(player_id)

        if side is draft.side:
            gs.draft = PartialDraft(side=side, player=player, reason=draft.reason)
            return True

        if side is RosterSide.BENCH:
            incoming, outgoing = player, draft.player
        else:
            incoming, outgoing = draft.player, player
        gs.draft = ConfirmPending(incoming=incoming, outgoing=outgoing, reason=draft.reason)
        gs.prompt = ConfirmPrompt(incoming=incoming, outgoing=outgoing, reason=draft.reason)
        return True

    def tap_player(self, player_id: str) -> bool:
        """Handle a tap on a starter or bench player the way the court screen does."""
        draft = self.game_state.draft
        if isinstance(draft, PartialDraft):
            return self.select_player(player_id)
        if isinstance(draft, ConfirmPending):
            return False
        return self.request_reason(player_id)

    def confirm_draft(self) -> bool:
        """Apply a complete draft exactly once and clear it."""
        draft = self.game_state.draft
        if self.game_state.game_ended or not isinstance(draft, ConfirmPending):
            return False
        applied = self.perform_sub(draft.incoming, draft.outgoing)
        if applied:
            logger.info("Manual substitution confirmed (%s)", draft.reason)
        self.cancel_draft()
        return applied

    def cancel_draft(self) -> None:
        """Discard any draft and prompt; roster and ledger are left alone."""
        self._clear_substitution_state()

    # ------------------------------------------------------------------
    # Pause, breaks and the end of the game
    # ------------------------------------------------------------------
    def toggle_pause(self) -> bool:
        """
        Pause a running game or resume a paused one.

        Resuming with the game clock at zero starts the next half. Time that
        ran out before the pause was pressed is settled first, so a half that
        already ended becomes the half-time break instead of a plain pause.

        Returns:
            False once the game has ended, True otherwise
        """
        gs = self.game_state
        if gs.game_ended or gs.pause_reason is PauseReason.GAME_ENDED:
            return False

        self.clock.flush()
        if not gs.paused:
            self.evaluate()
            if gs.paused:
                self.clock.reanchor()
                return True

        if gs.paused:
            if gs.game_clock == 0:
                self.clock.reset_for_next_half()
                gs.quarter_pause_triggered = False
            gs.pause_reason = PauseReason.NONE
            gs.last_quarter_label = None
            gs.last_half_label = None
            gs.prompt = None
            gs.break_overlay_dismissed = False
            gs.pending_swap = EMPTY_SWAP
            gs.sub_countdown_active = False
            gs.paused = False
        else:
            gs.pause_reason = PauseReason.NONE
            gs.paused = True
        self.clock.reanchor()
        return True

    def dismiss_break_overlay(self) -> bool:
        """Hide the break summary so the coach can adjust the lineup."""
        gs = self.game_state
        if not gs.paused or gs.pause_reason not in (PauseReason.QUARTER_BREAK, PauseReason.HALF_BREAK):
            return False
        gs.break_overlay_dismissed = True
        return True

    def end_game(self, confirmed: bool) -> bool:
        """Coach-initiated end of game; nothing happens without confirmation."""
        if self.game_state.game_ended:
            self.game_state.break_overlay_dismissed = False
            return False
        if not confirmed:
            return False
        return self.finalize_game()

    def finalize_game(self) -> bool:
        """
        Close the game and hand the archive to the listener.

        Idempotent: only the first call flushes, archives and returns True.
        """
        gs = self.game_state
        if gs.game_ended:
            return False

        self.clock.flush()
        gs.game_ended = True
        gs.paused = True
        self._clear_substitution_state()
        self.clock.reset_sub_window()
        gs.pause_reason = PauseReason.GAME_ENDED
        gs.break_overlay_dismissed = False
        gs.quarter_pause_triggered = False
        gs.last_quarter_label = None
        gs.last_half_label = None

        archive = self.build_archive(self.clock.now())
        if archive is not None and self.on_game_ended is not None:
            saved_id = self.on_game_ended(archive)
            if saved_id:
                gs.latest_saved_game_id = saved_id
        self.clock.reanchor()
        logger.info("Game finalized")
        return True

    # ------------------------------------------------------------------
    # Archives
    # ------------------------------------------------------------------
    def build_archive(self, ended_at: int, game_id: Optional[str] = None) -> Optional[ArchivedGame]:
        """
        Summarize the game for the history archive.

        Returns:
            ArchivedGame, or None when nobody played
        """
        gs = self.game_state
        if not gs.initial_roster:
            return None

        live = game_id == LIVE_PREVIEW_ID
        players = [
            ArchivedPlayer(
                id=p.id,
                name=p.name,
                seconds=gs.court_seconds.get(p.id, 0),
                subs=gs.sub_counts.get(p.id, 0),
            )
            for p in gs.initial_roster
        ]
        return ArchivedGame(
            id=game_id or str(ended_at),
            practice_date=iso_date(gs.game_start_ms if live else ended_at),
            started_at=gs.game_start_ms,
            ended_at=ended_at,
            total_game_seconds=max(1, round_half_up((ended_at - gs.game_start_ms) / 1000)),
            players=players,
        )

    def build_live_snapshot(self) -> Optional[ArchivedGame]:
        """Read-only summary of the game so far; does not finalize anything."""
        self.clock.flush()
        return self.build_archive(self.clock.now(), game_id=LIVE_PREVIEW_ID)
