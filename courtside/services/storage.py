"""
Key-value storage for the Courtside rotation timer.

Every record the app keeps (roster, today's selection, lineup, settings,
history, ongoing game) is a JSON value stored under a fixed key. The rotation
engine never touches a backend directly; it receives the typed stores below.
"""
import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional, Protocol

from ..models import ArchivedGame, Player
from ..utils import iso_timestamp, now_ms
from ..utils.constants import SETTINGS_HISTORY_LIMIT, StorageKeys

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a record cannot be read from or written to storage."""


class KeyValueStore(Protocol):
    """Abstract record store - supports DIP."""

    def load(self, key: str, default: Any = None) -> Any:
        """Return the JSON value stored under key, or default when absent."""
        ...

    def save(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key, overwriting in place."""
        ...

    def remove(self, key: str) -> None:
        """Delete the record under key; missing keys are ignored."""
        ...


class MemoryStore:
    """In-process store, used by tests and by the web app when no directory is given."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._records: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str, default: Any = None) -> Any:
        raw = self._records.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        try:
            self._records[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialize record '{key}': {e}") from e

    def remove(self, key: str) -> None:
        self._records.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._records)


class JsonFileStore:
    """
    Store each record as ``<key>.json`` inside a directory.

    Writes go to a temporary file that replaces the record atomically, so a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def load(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not os.path.exists(path):
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable record %s: %s", key, e)
            return default
        except OSError as e:
            raise StorageError(f"Cannot read record '{key}': {e}") from e

    def save(self, key: str, value: Any) -> None:
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, indent=2)
                os.replace(tmp_path, self._path(key))
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Cannot write record '{key}': {e}") from e

    def remove(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Cannot remove record '{key}': {e}") from e


# ---------- Typed stores owned by the surrounding screens ---------- #

class RosterStore:
    """All known players and the ids picked for today's game."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def players(self) -> List[Player]:
        players = []
        for record in self.store.load(StorageKeys.PLAYERS, []) or []:
            try:
                players.append(Player.from_dict(record))
            except ValueError:
                logger.warning("Skipping malformed player record: %r", record)
        return players

    def selected_ids(self) -> List[str]:
        return [str(pid) for pid in self.store.load(StorageKeys.SELECTED_TODAY, []) or []]

    def todays_players(self) -> List[Player]:
        """Selected players in roster order."""
        selected = set(self.selected_ids())
        return [p for p in self.players() if p.id in selected]

    def save_players(self, players: List[Player]) -> None:
        self.store.save(StorageKeys.PLAYERS, [p.to_dict() for p in players])

    def save_selection(self, player_ids: List[str]) -> None:
        self.store.save(StorageKeys.SELECTED_TODAY, list(player_ids))


class LineupStore:
    """Optional starter/bench ordering chosen on the lineup screen."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> Optional[Dict[str, List[str]]]:
        record = self.store.load(StorageKeys.LINEUP, None)
        if not isinstance(record, dict):
            return None
        return {
            "starters": [str(pid) for pid in record.get("starters") or []],
            "bench": [str(pid) for pid in record.get("bench") or []],
        }

    def save(self, starters: List[str], bench: List[str]) -> None:
        self.store.save(StorageKeys.LINEUP, {"starters": list(starters), "bench": list(bench)})


class SettingsStore:
    """Stored period lengths and substitution interval."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load_record(self) -> Optional[Dict[str, Any]]:
        record = self.store.load(StorageKeys.GAME_SETTINGS, None)
        return record if isinstance(record, dict) else None

    def save(self, values: Dict[str, Any]) -> None:
        """Store a settings record and remember it in the settings history."""
        self.store.save(StorageKeys.GAME_SETTINGS, values)
        history = self.store.load(StorageKeys.SETTINGS_HISTORY, []) or []
        entry = dict(values)
        entry["savedAt"] = iso_timestamp(now_ms())
        self.store.save(
            StorageKeys.SETTINGS_HISTORY, [entry, *history][:SETTINGS_HISTORY_LIMIT]
        )

    def history(self) -> List[Dict[str, Any]]:
        return list(self.store.load(StorageKeys.SETTINGS_HISTORY, []) or [])


class HistoryStore:
    """Archive of finished games, most recent first."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _records(self) -> List[Dict[str, Any]]:
        records = self.store.load(StorageKeys.GAME_HISTORY, []) or []
        return [r for r in records if isinstance(r, dict)]

    def games(self) -> List[ArchivedGame]:
        games = []
        for record in self._records():
            try:
                games.append(ArchivedGame.from_json(record))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed history record: %r", record)
        games.sort(key=lambda g: g.ended_at, reverse=True)
        return games

    def get(self, game_id: str) -> Optional[ArchivedGame]:
        for game in self.games():
            if game.id == game_id:
                return game
        return None

    def prepend(self, game: ArchivedGame) -> None:
        self.store.save(StorageKeys.GAME_HISTORY, [game.to_json(), *self._records()])

    def live_preview(self) -> Optional[ArchivedGame]:
        record = self.store.load(StorageKeys.LIVE_PREVIEW, None)
        if not isinstance(record, dict):
            return None
        return ArchivedGame.from_json(record)

    def save_live_preview(self, game: ArchivedGame) -> None:
        self.store.save(StorageKeys.LIVE_PREVIEW, game.to_json())

    def clear_live_preview(self) -> None:
        self.store.remove(StorageKeys.LIVE_PREVIEW)
