"""
Unit tests for the rotation data models.
"""
import unittest

from courtside.models import (
    EMPTY_SWAP, PartialDraft, PauseReason, PendingSwap, Player, RosterSide, RotationState,
)


class TestModels(unittest.TestCase):
    """Test cases for players, swaps and the snapshot record."""

    def test_player_from_dict_requires_id(self) -> None:
        self.assertEqual(Player.from_dict({"id": 3}), Player(id="3", name=""))
        with self.assertRaises(ValueError):
            Player.from_dict({"name": "Anonymous"})
        with self.assertRaises(ValueError):
            Player.from_dict("p1")

    def test_pause_reason_wire_values(self) -> None:
        self.assertIsNone(PauseReason.NONE.to_json())
        self.assertEqual(PauseReason.QUARTER_BREAK.to_json(), "quarter")
        self.assertIs(PauseReason.from_json(None), PauseReason.NONE)
        self.assertIs(PauseReason.from_json("end"), PauseReason.GAME_ENDED)

    def test_swap_and_draft_sides(self) -> None:
        a, b = Player(id="a"), Player(id="b")
        self.assertTrue(EMPTY_SWAP.is_empty)
        self.assertFalse(PendingSwap(incoming=a).is_complete)
        self.assertTrue(PendingSwap(incoming=a, outgoing=b).is_complete)

        draft = PartialDraft(side=RosterSide.STARTERS, player=a, reason="Manual sub")
        self.assertIs(draft.outgoing, a)
        self.assertIsNone(draft.incoming)
        self.assertIs(RosterSide.STARTERS.opposite, RosterSide.BENCH)

    def test_snapshot_defaults_for_missing_fields(self) -> None:
        gs = RotationState.from_json({
            "version": 1,
            "starters": [{"id": "a", "name": "A"}],
            "bench": [{"id": "b", "name": "B"}],
            "playerCourtSeconds": [["a", 40]],
        }, now=5000)

        self.assertEqual([p.id for p in gs.initial_roster], ["a", "b"])
        self.assertEqual(gs.court_seconds, {"a": 40, "b": 0})
        self.assertEqual(gs.sub_counts, {"a": 0, "b": 0})
        self.assertEqual(gs.settings.quarter_break_seconds, 0)
        self.assertEqual(gs.game_clock, gs.settings.half_length_seconds)
        self.assertEqual(gs.game_start_ms, 5000)
        self.assertEqual(gs.last_tick_ms, 5000)
        self.assertTrue(gs.pending_swap.is_empty)

    def test_snapshot_uses_wire_keys(self) -> None:
        record = RotationState().to_json(saved_at=42)
        self.assertEqual(record["version"], 1)
        self.assertEqual(record["savedAt"], 42)
        for key in ("pendingIn", "pendingOut", "breakOverlayDismissed", "latestSavedGameId",
                    "playerSubCounts", "gameStartTimestamp", "quarterPauseTriggered"):
            self.assertIn(key, record)


if __name__ == "__main__":
    unittest.main()
