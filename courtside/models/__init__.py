"""
Models package for the Courtside rotation timer.

This package contains the core data models used throughout the application.
"""
from .player import Player
from .settings import GameSettings
from .substitution import (
    RosterSide, PendingSwap, EMPTY_SWAP, NoDraft, PartialDraft, ConfirmPending,
    ManualSwapDraft, NO_DRAFT, ReasonPrompt, ConfirmPrompt, ManualPrompt
)
from .game_state import RotationState, PauseReason, snapshot_saved_at
from .game_report import ArchivedGame, ArchivedPlayer

__all__ = [
    "Player", "GameSettings", "RosterSide", "PendingSwap", "EMPTY_SWAP",
    "NoDraft", "PartialDraft", "ConfirmPending", "ManualSwapDraft", "NO_DRAFT",
    "ReasonPrompt", "ConfirmPrompt", "ManualPrompt", "RotationState",
    "PauseReason", "snapshot_saved_at", "ArchivedGame", "ArchivedPlayer"
]
