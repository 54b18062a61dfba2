"""
Services package for the Courtside rotation timer.

This package contains the clock, planner, rotation state machine,
persistence and session services, plus the factory that wires them together.
"""
from .storage import (
    StorageError, KeyValueStore, MemoryStore, JsonFileStore,
    RosterStore, LineupStore, SettingsStore, HistoryStore
)
from .settings_service import (
    clamp_to_range, derive_quarter_minutes, normalize_times, game_settings_from_record
)
from .clock_service import ClockEngine
from .substitution_planner import plan_substitution
from .rotation_service import RotationService, order_for_lineup
from .persistence_service import PersistenceService
from .game_session import GameSession
from .service_factory import ServiceFactory

__all__ = [
    "StorageError", "KeyValueStore", "MemoryStore", "JsonFileStore",
    "RosterStore", "LineupStore", "SettingsStore", "HistoryStore",
    "clamp_to_range", "derive_quarter_minutes", "normalize_times",
    "game_settings_from_record", "ClockEngine", "plan_substitution",
    "RotationService", "order_for_lineup", "PersistenceService",
    "GameSession", "ServiceFactory"
]
