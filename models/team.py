"""
Team DTO for the matchday engine.
A team is an ordered starting lineup, an ordered bench and a tactic. Player records live
outside the team; slots only reference them by id.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from .constants import DEFAULT_ROLE_FOR_POSITION, DUTIES, POSITIONS, ROLE_POSITIONS
from .tactics import Tactic


@dataclass(frozen=True)
class LineupSlot:
    """A player assigned to a position with a role and duty."""

    player_id: str
    position: str
    role: str = ""
    duty: str = "Support"

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"unknown position {self.position!r}")
        if not self.role:
            object.__setattr__(self, "role", DEFAULT_ROLE_FOR_POSITION[self.position])
        if self.role not in ROLE_POSITIONS:
            raise ValueError(f"unknown role {self.role!r}")
        if self.duty not in DUTIES:
            raise ValueError(f"unknown duty {self.duty!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "position": self.position,
            "role": self.role,
            "duty": self.duty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineupSlot":
        return cls(
            player_id=data["player_id"],
            position=data["position"],
            role=data.get("role", ""),
            duty=data.get("duty", "Support"),
        )


@dataclass
class Team:
    """A club's matchday setup."""

    id: str = ""
    name: str = ""
    starters: List[LineupSlot] = field(default_factory=list)
    bench: List[LineupSlot] = field(default_factory=list)
    tactic: Tactic = field(default_factory=Tactic)

    def slot_for(self, player_id: str) -> Optional[LineupSlot]:
        for slot in self.starters + self.bench:
            if slot.player_id == player_id:
                return slot
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "starters": [s.to_dict() for s in self.starters],
            "bench": [s.to_dict() for s in self.bench],
            "tactic": self.tactic.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            starters=[LineupSlot.from_dict(s) for s in data.get("starters", [])],
            bench=[LineupSlot.from_dict(s) for s in data.get("bench", [])],
            tactic=Tactic.from_dict(data.get("tactic", {})),
        )
