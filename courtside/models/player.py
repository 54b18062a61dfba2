"""
Player model for the Courtside rotation timer.

Players are created by the roster screens and are read-only inside the
rotation engine; everything else references them by id.
"""
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Player:
    """
    A rostered player.

    Attributes:
        id: Stable unique identifier assigned by the roster store
        name: Display name
    """
    id: str
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """
        Create from dictionary for JSON deserialization.

        Raises:
            ValueError: If the record carries no id
        """
        if not isinstance(data, dict) or data.get("id") in (None, ""):
            raise ValueError(f"Invalid player record: {data!r}")
        return cls(id=str(data["id"]), name=str(data.get("name") or ""))
