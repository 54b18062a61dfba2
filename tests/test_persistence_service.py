"""
Unit tests for snapshot persistence, resume and archiving.
"""
import unittest

from courtside.models import ArchivedGame, ArchivedPlayer, GameSettings, PauseReason, Player
from courtside.services import (
    MemoryStore, PersistenceService, RotationService, StorageError,
)
from courtside.utils import StorageKeys

START_MS = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FailingStore(MemoryStore):
    """Store that refuses every write."""

    def save(self, key, value):
        raise StorageError(f"disk full while writing {key}")

    def remove(self, key):
        raise StorageError(f"disk full while removing {key}")


def make_game(clock: FakeClock, on_game_ended=None) -> RotationService:
    players = [Player(id=f"p{i}", name=f"Player {i}") for i in range(1, 8)]
    settings = GameSettings(
        half_length_seconds=600, sub_interval_seconds=120, sub_warning_seconds=30,
        quarter_break_seconds=0,
    )
    return RotationService.new_game(players, settings, clock=clock, on_game_ended=on_game_ended)


def make_archive(ended_at: int) -> ArchivedGame:
    return ArchivedGame(
        id=str(ended_at),
        practice_date="2023-11-14",
        started_at=ended_at - 60_000,
        ended_at=ended_at,
        total_game_seconds=60,
        players=[ArchivedPlayer(id="p1", name="Player 1", seconds=60, subs=0)],
    )


class TestPersistenceService(unittest.TestCase):
    """Test cases for PersistenceService."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = MemoryStore()
        self.persistence = PersistenceService(self.store)
        self.game = make_game(self.clock, on_game_ended=self.persistence.archive_game)

    def run_seconds(self, seconds: int) -> None:
        for _ in range(seconds):
            self.clock.advance(1000)
            self.game.tick()

    def test_save_flushes_before_writing(self) -> None:
        self.clock.advance(3500)
        self.assertTrue(self.persistence.save_snapshot(self.game))

        data = self.store.load(StorageKeys.ONGOING_GAME)
        self.assertEqual(data["version"], 1)
        self.assertEqual(data["savedAt"], self.clock.now)
        self.assertEqual(data["gameClock"], 597)
        self.assertEqual(data["subWindowClock"], 117)
        self.assertIsNone(data["pauseReason"])
        self.assertIn(["p1", 3], data["playerCourtSeconds"])
        self.assertIn(["p6", 0], data["playerCourtSeconds"])
        self.assertEqual([p["id"] for p in data["starters"]], ["p1", "p2", "p3", "p4", "p5"])

    def test_resume_running_game_catches_up(self) -> None:
        self.run_seconds(30)
        self.persistence.save_snapshot(self.game)
        self.clock.advance(90_500)

        data = self.persistence.load_snapshot()
        resumed = RotationService.from_snapshot(data, clock=self.clock)
        gs = resumed.game_state

        self.assertEqual(gs.game_clock, 480)
        self.assertEqual(gs.sub_window_clock, 0)
        self.assertEqual(gs.court_seconds["p1"], 120)
        self.assertEqual(gs.court_seconds["p6"], 0)
        self.assertEqual(gs.last_tick_ms, self.clock.now - 500)

        # the overdue substitution happens on the next evaluation
        resumed.tick()
        self.assertEqual([p.id for p in gs.bench], ["p7", "p1"])
        self.assertEqual(gs.sub_window_clock, 120)

    def test_resume_paused_game_does_not_catch_up(self) -> None:
        self.run_seconds(20)
        self.game.toggle_pause()
        self.persistence.save_snapshot(self.game)
        self.clock.advance(600_000)

        resumed = RotationService.from_snapshot(self.persistence.load_snapshot(), clock=self.clock)
        self.assertEqual(resumed.game_state.game_clock, 580)
        self.assertTrue(resumed.game_state.paused)
        self.assertEqual(resumed.game_state.court_seconds["p1"], 20)

    def test_snapshot_restores_break_state(self) -> None:
        self.game.game_state.paused = True
        self.game.game_state.pause_reason = PauseReason.HALF_BREAK
        self.game.game_state.last_half_label = "Half 1"
        self.game.game_state.half_counter = 2
        self.game.game_state.break_overlay_dismissed = True
        self.persistence.save_snapshot(self.game)

        gs = RotationService.from_snapshot(
            self.persistence.load_snapshot(), clock=self.clock
        ).game_state
        self.assertIs(gs.pause_reason, PauseReason.HALF_BREAK)
        self.assertEqual(gs.last_half_label, "Half 1")
        self.assertEqual(gs.half_counter, 2)
        self.assertTrue(gs.break_overlay_dismissed)
        self.assertEqual(gs.settings, self.game.game_state.settings)
        self.assertEqual(gs.game_start_ms, START_MS)

    def test_incompatible_snapshots_are_ignored(self) -> None:
        self.store.save(StorageKeys.ONGOING_GAME, {"version": 2, "gameClock": 10})
        self.assertIsNone(self.persistence.load_snapshot())
        self.assertFalse(self.persistence.has_unfinished_game())

        self.store.save(StorageKeys.ONGOING_GAME, ["not", "a", "snapshot"])
        self.assertIsNone(self.persistence.load_snapshot())

        self.store.save(StorageKeys.ONGOING_GAME, {"gameClock": 10})
        self.assertIsNone(self.persistence.load_snapshot())

    def test_finished_snapshot_is_deleted(self) -> None:
        self.store.save(StorageKeys.ONGOING_GAME, {"version": 1, "gameEnded": True})
        self.assertIsNone(self.persistence.load_snapshot())
        self.assertIsNone(self.store.load(StorageKeys.ONGOING_GAME))

    def test_malformed_snapshot_raises_on_restore(self) -> None:
        with self.assertRaises(ValueError):
            RotationService.from_snapshot(
                {"version": 1, "starters": [{"name": "no id"}]}, clock=self.clock
            )

    def test_has_unfinished_game(self) -> None:
        self.assertFalse(self.persistence.has_unfinished_game())
        self.persistence.save_snapshot(self.game)
        self.assertTrue(self.persistence.has_unfinished_game())

    def test_finalize_archives_and_clears_live_records(self) -> None:
        self.run_seconds(45)
        self.persistence.save_snapshot(self.game)
        self.persistence.save_live_preview(self.game)
        self.assertIsNotNone(self.store.load(StorageKeys.LIVE_PREVIEW))

        self.game.end_game(confirmed=True)

        history = self.store.load(StorageKeys.GAME_HISTORY)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["id"], str(START_MS + 45_000))
        self.assertEqual(history[0]["totalGameSeconds"], 45)
        self.assertIsNone(self.store.load(StorageKeys.ONGOING_GAME))
        self.assertIsNone(self.store.load(StorageKeys.LIVE_PREVIEW))
        self.assertEqual(self.game.game_state.latest_saved_game_id, history[0]["id"])

        # an ended game is never written back
        self.assertTrue(self.persistence.save_snapshot(self.game))
        self.assertIsNone(self.store.load(StorageKeys.ONGOING_GAME))
        self.assertFalse(self.persistence.auto_save(self.game))

    def test_history_is_most_recent_first(self) -> None:
        self.persistence.archive_game(make_archive(START_MS))
        self.persistence.archive_game(make_archive(START_MS + 10_000))
        history = self.store.load(StorageKeys.GAME_HISTORY)
        self.assertEqual([g["id"] for g in history], [str(START_MS + 10_000), str(START_MS)])

    def test_live_preview_leaves_ongoing_record_alone(self) -> None:
        self.persistence.save_snapshot(self.game)
        before = self.store.load(StorageKeys.ONGOING_GAME)
        self.run_seconds(12)

        preview = self.persistence.save_live_preview(self.game)

        self.assertEqual(preview.id, "live")
        self.assertEqual(preview.total_game_seconds, 12)
        self.assertEqual(self.store.load(StorageKeys.LIVE_PREVIEW)["id"], "live")
        self.assertEqual(self.store.load(StorageKeys.ONGOING_GAME), before)

    def test_write_failures_are_not_fatal(self) -> None:
        persistence = PersistenceService(FailingStore())
        game = make_game(self.clock, on_game_ended=persistence.archive_game)
        self.clock.advance(5000)

        self.assertFalse(persistence.save_snapshot(game))
        self.assertIsNone(persistence.save_live_preview(game))
        self.assertFalse(persistence.delete_snapshot())

        # the game carries on and finalizes without an archive id
        self.assertTrue(game.end_game(confirmed=True))
        self.assertTrue(game.is_ended)
        self.assertIsNone(game.game_state.latest_saved_game_id)


if __name__ == "__main__":
    unittest.main()
