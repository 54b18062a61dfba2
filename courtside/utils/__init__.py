"""
Utilities package for the Courtside rotation timer.

This package contains utility functions used throughout the application.
"""
from .time_utils import (
    fmt_mmss, now_ms, whole_seconds_between, round_half_up, iso_date, iso_timestamp
)
from .constants import (
    APP_TITLE, DEFAULT_HALF_LENGTH_SECONDS, DEFAULT_SUB_INTERVAL_SECONDS,
    DEFAULT_SUB_WARNING_SECONDS, DEFAULT_QUARTER_BREAK_SECONDS, STARTER_SLOTS,
    SNAPSHOT_VERSION, LIVE_PREVIEW_ID, StorageKeys
)

__all__ = [
    "fmt_mmss", "now_ms", "whole_seconds_between", "round_half_up", "iso_date",
    "iso_timestamp", "APP_TITLE", "DEFAULT_HALF_LENGTH_SECONDS",
    "DEFAULT_SUB_INTERVAL_SECONDS", "DEFAULT_SUB_WARNING_SECONDS",
    "DEFAULT_QUARTER_BREAK_SECONDS", "STARTER_SLOTS", "SNAPSHOT_VERSION",
    "LIVE_PREVIEW_ID", "StorageKeys"
]
