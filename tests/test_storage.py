"""
Unit tests for the key-value stores and the typed stores built on them.
"""
import os
import tempfile
import unittest
from unittest.mock import patch

from courtside.models import ArchivedGame, Player
from courtside.services import (
    HistoryStore, JsonFileStore, LineupStore, MemoryStore, RosterStore,
    SettingsStore, StorageError,
)
from courtside.utils import StorageKeys


class TestMemoryStore(unittest.TestCase):
    """Test cases for MemoryStore."""

    def test_missing_key_returns_default(self) -> None:
        store = MemoryStore()
        self.assertIsNone(store.load("nothing"))
        self.assertEqual(store.load("nothing", []), [])

    def test_values_are_copied(self) -> None:
        store = MemoryStore()
        record = {"ids": ["a"]}
        store.save("key", record)
        record["ids"].append("b")
        self.assertEqual(store.load("key"), {"ids": ["a"]})

    def test_unserializable_value_raises(self) -> None:
        with self.assertRaises(StorageError):
            MemoryStore().save("key", object())

    def test_remove_is_tolerant(self) -> None:
        store = MemoryStore({"a": 1})
        store.remove("a")
        store.remove("a")
        self.assertEqual(store.keys(), [])


class TestJsonFileStore(unittest.TestCase):
    """Test cases for JsonFileStore."""

    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.directory = os.path.join(self.temp_dir.name, "records")
        self.store = JsonFileStore(self.directory)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_save_and_load(self) -> None:
        self.store.save(StorageKeys.GAME_HISTORY, [{"id": "1"}])
        self.assertTrue(os.path.exists(os.path.join(self.directory, "gameHistory.json")))
        self.assertEqual(self.store.load(StorageKeys.GAME_HISTORY), [{"id": "1"}])
        self.assertEqual(
            [name for name in os.listdir(self.directory) if name.endswith(".tmp")], []
        )

    def test_corrupt_file_returns_default(self) -> None:
        os.makedirs(self.directory)
        with open(os.path.join(self.directory, "gameLineup.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertEqual(self.store.load(StorageKeys.LINEUP, "fallback"), "fallback")

    def test_remove(self) -> None:
        self.store.save("key", 1)
        self.store.remove("key")
        self.store.remove("key")
        self.assertIsNone(self.store.load("key"))

    def test_unwritable_directory_raises_storage_error(self) -> None:
        blocker = os.path.join(self.temp_dir.name, "blocker")
        with open(blocker, "w", encoding="utf-8") as f:
            f.write("")
        with self.assertRaises(StorageError):
            JsonFileStore(blocker).save("key", 1)


class TestTypedStores(unittest.TestCase):
    """Test cases for the roster, lineup, settings and history stores."""

    def setUp(self) -> None:
        self.store = MemoryStore()

    def test_todays_players_keep_roster_order(self) -> None:
        self.store.save(StorageKeys.PLAYERS, [
            {"id": "a", "name": "Ann"}, {"name": "broken"}, {"id": 7, "name": "Num"},
            {"id": "c", "name": "Cal"},
        ])
        self.store.save(StorageKeys.SELECTED_TODAY, ["c", "7", "zzz"])
        roster = RosterStore(self.store)

        self.assertEqual([p.id for p in roster.players()], ["a", "7", "c"])
        self.assertEqual([p.id for p in roster.todays_players()], ["7", "c"])

        roster.save_players([Player(id="z", name="Zed")])
        self.assertEqual(self.store.load(StorageKeys.PLAYERS), [{"id": "z", "name": "Zed"}])

    def test_lineup_store(self) -> None:
        lineups = LineupStore(self.store)
        self.assertIsNone(lineups.load())

        self.store.save(StorageKeys.LINEUP, "garbage")
        self.assertIsNone(lineups.load())

        lineups.save(["a", "b"], ["c"])
        self.assertEqual(lineups.load(), {"starters": ["a", "b"], "bench": ["c"]})

    def test_settings_history_is_capped(self) -> None:
        settings = SettingsStore(self.store)
        with patch("courtside.services.storage.now_ms", return_value=1_700_000_000_000):
            for half in range(105):
                settings.save({"halfTime": half})

        self.assertEqual(settings.load_record(), {"halfTime": 104})
        history = settings.history()
        self.assertEqual(len(history), 100)
        self.assertEqual(history[0]["halfTime"], 104)
        self.assertEqual(history[0]["savedAt"], "2023-11-14T22:13:20.000Z")

    def test_history_sorted_and_lookup(self) -> None:
        history = HistoryStore(self.store)
        older = ArchivedGame(id="100", practice_date="2023-01-01", started_at=0,
                             ended_at=100, total_game_seconds=1)
        newer = ArchivedGame(id="200", practice_date="2023-01-02", started_at=0,
                             ended_at=200, total_game_seconds=1)
        history.prepend(newer)
        history.prepend(older)
        self.store.save(
            StorageKeys.GAME_HISTORY, self.store.load(StorageKeys.GAME_HISTORY) + [{"bad": 1}, 5]
        )

        self.assertEqual([g.id for g in history.games()], ["200", "100"])
        self.assertEqual(history.get("100"), older)
        self.assertIsNone(history.get("300"))

    def test_live_preview_round_trip(self) -> None:
        history = HistoryStore(self.store)
        self.assertIsNone(history.live_preview())
        preview = ArchivedGame(id="live", practice_date="2023-11-14", started_at=1,
                               ended_at=2, total_game_seconds=1)
        history.save_live_preview(preview)
        self.assertEqual(history.live_preview(), preview)
        history.clear_live_preview()
        self.assertIsNone(history.live_preview())


if __name__ == "__main__":
    unittest.main()
