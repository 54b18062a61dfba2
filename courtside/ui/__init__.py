"""
UI package for the Courtside rotation timer.

This package contains the Flask server that exposes the live game as JSON.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
