"""
Substitution models for the Courtside rotation timer.

Automatic proposals are plain ``PendingSwap`` pairs. The manual workflow is a
small tagged union so that a draft is always exactly one of: nothing in
progress, one side picked, or both sides picked and awaiting confirmation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .player import Player


class RosterSide(Enum):
    """Which half of the roster a player was tapped on."""
    STARTERS = "starters"
    BENCH = "bench"

    @property
    def opposite(self) -> "RosterSide":
        return RosterSide.BENCH if self is RosterSide.STARTERS else RosterSide.STARTERS


@dataclass(frozen=True)
class PendingSwap:
    """Next automatic substitution proposal; either side may be missing."""
    incoming: Optional[Player] = None
    outgoing: Optional[Player] = None

    @property
    def is_empty(self) -> bool:
        return self.incoming is None and self.outgoing is None

    @property
    def is_complete(self) -> bool:
        return self.incoming is not None and self.outgoing is not None


EMPTY_SWAP = PendingSwap()


# ---------- Manual substitution drafts ---------- #

@dataclass(frozen=True)
class NoDraft:
    """No manual substitution in progress."""


@dataclass(frozen=True)
class PartialDraft:
    """
    The coach picked one player and a reason; the other side is still open.

    A draft started from a starter has ``side == STARTERS`` and ``player`` is
    the outgoing candidate; a draft started from the bench holds the incoming
    candidate.
    """
    side: RosterSide
    player: Player
    reason: str

    @property
    def incoming(self) -> Optional[Player]:
        return self.player if self.side is RosterSide.BENCH else None

    @property
    def outgoing(self) -> Optional[Player]:
        return self.player if self.side is RosterSide.STARTERS else None


@dataclass(frozen=True)
class ConfirmPending:
    """Both sides picked; nothing is applied until the coach confirms."""
    incoming: Player
    outgoing: Player
    reason: str


ManualSwapDraft = Union[NoDraft, PartialDraft, ConfirmPending]
NO_DRAFT = NoDraft()


# ---------- Prompts shown to the coach ---------- #

@dataclass(frozen=True)
class ReasonPrompt:
    """Ask why a starter is leaving (or why a bench player is entering)."""
    player: Player
    side: RosterSide


@dataclass(frozen=True)
class ConfirmPrompt:
    """Final confirmation of a complete manual substitution."""
    incoming: Player
    outgoing: Player
    reason: str


ManualPrompt = Union[ReasonPrompt, ConfirmPrompt]
