"""
Constants for the Courtside rotation timer.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Courtside Rotation"

# Game timing defaults
DEFAULT_HALF_MINUTES = 18
DEFAULT_QUARTER_MINUTES = 8
DEFAULT_SUB_INTERVAL_MINUTES = 4
DEFAULT_HALF_LENGTH_SECONDS = DEFAULT_HALF_MINUTES * 60
DEFAULT_SUB_INTERVAL_SECONDS = DEFAULT_SUB_INTERVAL_MINUTES * 60
DEFAULT_SUB_WARNING_SECONDS = 30
DEFAULT_QUARTER_BREAK_SECONDS = DEFAULT_QUARTER_MINUTES * 60

# Clamps applied when loading stored settings (seconds)
MIN_HALF_LENGTH_SECONDS = 60
MAX_HALF_LENGTH_SECONDS = 3600
MIN_SUB_INTERVAL_SECONDS = 30
MAX_SUB_INTERVAL_SECONDS = 3600

# Clamps applied by the settings form (minutes)
MIN_HALF_MINUTES = 5
MAX_HALF_MINUTES = 60
MIN_SUB_MINUTES = 1
MAX_SUB_MINUTES = 15
SETTINGS_HISTORY_LIMIT = 100

# Basketball puts five players on court
STARTER_SLOTS = 5
FINAL_HALF = 2

# Host cadence
TICK_INTERVAL_MS = 500
AUTOSAVE_INTERVAL_MS = 5000

# Persisted snapshot format
SNAPSHOT_VERSION = 1
LIVE_PREVIEW_ID = "live"

# Manual substitution reasons offered to the coach
REASON_MANUAL = "Manual sub"
REASON_INJURY = "Injury / penalty"
MANUAL_REASONS = [REASON_MANUAL, REASON_INJURY]


class StorageKeys:
    """Record keys shared with the roster, lineup, settings and history screens."""

    PLAYERS = "playersDB"
    SELECTED_TODAY = "selectedPlayers"
    GAME_SETTINGS = "gameSettings"
    SETTINGS_HISTORY = "gameSettingsHistory"
    LINEUP = "gameLineup"
    GAME_HISTORY = "gameHistory"
    LIVE_PREVIEW = "liveGamePreview"
    ONGOING_GAME = "ongoingGameState"
