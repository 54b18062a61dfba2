"""Dataclasses representing finished games in the history archive."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ArchivedPlayer:
    """Final court time and substitution count of one player."""

    id: str
    name: str
    seconds: int
    subs: int

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "seconds": self.seconds, "subs": self.subs}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ArchivedPlayer":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            seconds=int(data.get("seconds", 0)),
            subs=int(data.get("subs", 0)),
        )


@dataclass(frozen=True)
class ArchivedGame:
    """Snapshot of a completed (or, with id ``live``, an in-progress) game."""

    id: str
    practice_date: str
    started_at: int
    ended_at: int
    total_game_seconds: int
    players: List[ArchivedPlayer] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "practiceDate": self.practice_date,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "totalGameSeconds": self.total_game_seconds,
            "players": [p.to_json() for p in self.players],
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ArchivedGame":
        return cls(
            id=str(data["id"]),
            practice_date=str(data.get("practiceDate") or ""),
            started_at=int(data.get("startedAt", 0)),
            ended_at=int(data.get("endedAt", 0)),
            total_game_seconds=int(data.get("totalGameSeconds", 0)),
            players=[ArchivedPlayer.from_json(p) for p in data.get("players") or []],
        )
