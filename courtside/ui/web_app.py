"""
Web application module for the Courtside rotation timer.

This module contains the Flask server that exposes the live game as a JSON
API. Requests are serialized through one lock, and every request ticks the
session first so the clocks are current before anything is read or changed.
"""
import logging
import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from ..models import Player
from ..services import GameSession, ServiceFactory, StorageError
from ..utils import APP_TITLE

logger = logging.getLogger(__name__)

APP_STATES = ("active", "background", "inactive")


def create_app(session: Optional[GameSession] = None, data_dir: Optional[str] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        session: Session to serve; one is built over ``data_dir`` when omitted
        data_dir: Directory for JSON records (in-memory when None)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    if session is None:
        session = ServiceFactory(data_dir=data_dir).create_game_session()
    lock = threading.Lock()
    app.config["GAME_SESSION"] = session

    def _body() -> Dict[str, Any]:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def _player_id(data: Dict[str, Any]) -> Optional[str]:
        value = data.get("player_id")
        return str(value) if value not in (None, "") else None

    def _state(**extra) -> Tuple[Any, int]:
        payload = {"success": True, "state": session.state_view()}
        payload.update(extra)
        return jsonify(payload), 200

    def _rejected(message: str, status: int = 400) -> Tuple[Any, int]:
        return jsonify({"success": False, "error": message, "state": session.state_view()}), status

    def _known_player(player_id: Optional[str]) -> bool:
        rotation = session.rotation
        return rotation is not None and player_id is not None and rotation.side_of(player_id) is not None

    # ==================== Live game ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        with lock:
            session.tick()
            return _state()

    @app.route("/api/tick", methods=["POST"])
    def tick():
        with lock:
            elapsed = session.tick()
            return _state(elapsed=elapsed)

    @app.route("/api/pause", methods=["POST"])
    def toggle_pause():
        """Pause or resume; resuming after a half starts the next one."""
        with lock:
            session.tick()
            if not session.toggle_pause():
                return _rejected("Game has ended")
            return _state()

    @app.route("/api/end-game", methods=["POST"])
    def end_game():
        with lock:
            session.tick()
            if _body().get("confirm") is not True:
                return _rejected("End of game must be confirmed")
            if not session.end_game(confirmed=True):
                return _rejected("Game has already ended")
            return _state()

    @app.route("/api/lifecycle", methods=["POST"])
    def app_state_change():
        with lock:
            session.tick()
            status = _body().get("status")
            if status not in APP_STATES:
                return _rejected(f"Unknown app state: {status!r}")
            session.on_app_state_change(status)
            return _state()

    @app.route("/api/leave", methods=["POST"])
    def leave():
        with lock:
            session.tick()
            session.leave()
            return _state()

    @app.route("/api/break-overlay/dismiss", methods=["POST"])
    def dismiss_break_overlay():
        with lock:
            session.tick()
            if not session.rotation.dismiss_break_overlay():
                return _rejected("No break in progress")
            return _state()

    # ==================== Manual substitutions ==================== #

    @app.route("/api/manual/tap", methods=["POST"])
    def tap_player():
        """Tap on a starter or bench player."""
        with lock:
            session.tick()
            player_id = _player_id(_body())
            if not _known_player(player_id):
                return _rejected("Player not found", 404)
            if not session.rotation.tap_player(player_id):
                return _rejected("Tap ignored")
            return _state()

    @app.route("/api/manual/reason", methods=["POST"])
    def request_reason():
        with lock:
            session.tick()
            player_id = _player_id(_body())
            if not _known_player(player_id):
                return _rejected("Player not found", 404)
            if not session.rotation.request_reason(player_id):
                return _rejected("A manual substitution is already in progress")
            return _state()

    @app.route("/api/manual/start", methods=["POST"])
    def start_draft():
        with lock:
            session.tick()
            data = _body()
            player_id = _player_id(data)
            reason = data.get("reason")
            if not isinstance(reason, str) or not reason.strip():
                return _rejected("A reason is required")
            if not _known_player(player_id):
                return _rejected("Player not found", 404)
            if not session.rotation.start_draft(player_id, reason.strip()):
                return _rejected("A manual substitution is already in progress")
            return _state()

    @app.route("/api/manual/select", methods=["POST"])
    def select_player():
        with lock:
            session.tick()
            player_id = _player_id(_body())
            if not _known_player(player_id):
                return _rejected("Player not found", 404)
            if not session.rotation.select_player(player_id):
                return _rejected("No manual substitution in progress")
            return _state()

    @app.route("/api/manual/confirm", methods=["POST"])
    def confirm_draft():
        with lock:
            session.tick()
            if not session.rotation.confirm_draft():
                return _rejected("Nothing to confirm")
            return _state()

    @app.route("/api/manual/cancel", methods=["POST"])
    def cancel_draft():
        with lock:
            session.tick()
            session.rotation.cancel_draft()
            return _state()

    # ==================== History ==================== #

    @app.route("/api/history", methods=["GET"])
    def get_history():
        try:
            games = session.history.games()
        except StorageError as e:
            logger.warning("Could not read game history: %s", e)
            return jsonify({"success": False, "error": str(e)}), 500
        return jsonify({"success": True, "games": [g.to_json() for g in games]})

    @app.route("/api/history/<game_id>", methods=["GET"])
    def get_history_game(game_id: str):
        try:
            game = session.history.get(game_id)
        except StorageError as e:
            logger.warning("Could not read game history: %s", e)
            return jsonify({"success": False, "error": str(e)}), 500
        if game is None:
            return jsonify({"success": False, "error": f"Game {game_id} not found"}), 404
        return jsonify({"success": True, "game": game.to_json()})

    @app.route("/api/live-preview", methods=["GET"])
    def live_preview():
        """Statistics so far, or the archived game once the game has ended."""
        with lock:
            session.tick()
            game = session.open_live_stats()
            if game is None:
                return jsonify({"success": False, "error": "No statistics available"}), 404
            return jsonify({"success": True, "game": game.to_json()})

    # ==================== Game setup ==================== #

    @app.route("/api/unfinished-game", methods=["GET"])
    def unfinished_game():
        return jsonify({"success": True, "unfinished": session.has_unfinished_game()})

    @app.route("/api/game/new", methods=["POST"])
    def new_game():
        """Start a fresh game, optionally storing roster, selection, lineup and settings first."""
        data = _body()
        try:
            players = None
            if data.get("players") is not None:
                players = [Player.from_dict(p) for p in data["players"]]
            selected = data.get("selected")
            if selected is not None and not isinstance(selected, list):
                return jsonify({"success": False, "error": "selected must be a list"}), 400
            lineup = data.get("lineup")
            if lineup is not None and not isinstance(lineup, dict):
                return jsonify({"success": False, "error": "lineup must be an object"}), 400
            settings = data.get("settings")
            if settings is not None and not isinstance(settings, dict):
                return jsonify({"success": False, "error": "settings must be an object"}), 400
        except (TypeError, ValueError) as e:
            return jsonify({"success": False, "error": str(e)}), 400

        with lock:
            session.new_game(
                players=players,
                selected=[str(pid) for pid in selected] if selected is not None else None,
                lineup=lineup,
                settings=settings,
            )
            return _state()

    @app.before_request
    def ensure_loaded():
        with lock:
            if session.rotation is None:
                session.load()

    logger.debug("%s API ready", APP_TITLE)
    return app


def run_web_app(host: str = "127.0.0.1", port: int = 7122, data_dir: Optional[str] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        data_dir: Directory for JSON records
    """
    app = create_app(data_dir=data_dir)
    logger.info("Serving %s on http://%s:%d", APP_TITLE, host, port)
    app.run(host=host, port=port, debug=False)
