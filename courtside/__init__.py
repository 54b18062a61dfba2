"""
Courtside Rotation Timer

Live basketball rotation tracking: a wall-clock anchored game clock and
substitution window, automatic and manual substitutions, quarter and half
breaks, and crash-safe snapshots that resume where the game left off.

This package provides the rotation engine and a Flask JSON API for hosting it.
"""
from .models import Player, RotationState, ArchivedGame
from .services import GameSession, PersistenceService, RotationService, ServiceFactory
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ms, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "Player", "RotationState", "ArchivedGame", "GameSession",
    "PersistenceService", "RotationService", "ServiceFactory",
    "create_app", "run_web_app", "fmt_mmss", "now_ms", "APP_TITLE"
]
