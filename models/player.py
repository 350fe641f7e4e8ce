"""
Player DTO for the matchday engine.
Attributes are 0-200. Condition (fatigue, morale, match fitness, health) is a separate
immutable value so progression passes can return a new one instead of mutating the player.
"""
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Dict, Any, List

from .constants import (
    ATTRIBUTE_MAX,
    CONDITION_MAX,
    GOALKEEPING_ATTRIBUTES,
    MENTAL_ATTRIBUTES,
    PHYSICAL_ATTRIBUTES,
    POSITION_COMPATIBILITY,
    POSITIONS,
    SUITABILITY_COMPATIBLE,
    SUITABILITY_INCOMPATIBLE,
    SUITABILITY_NATURAL,
    SUITABILITY_SECONDARY,
    TECHNICAL_ATTRIBUTES,
)


class HealthStatus(str, Enum):
    HEALTHY = "Healthy"
    INJURED = "Injured"
    SUSPENDED = "Suspended"


def _pct(value: float) -> int:
    return int(min(CONDITION_MAX, max(0, round(value))))


@dataclass(frozen=True)
class Condition:
    """Dynamic matchday state. Percentages are clamped to 0-100 on construction."""

    fatigue: int = 0
    morale: int = 50
    match_fitness: int = 100
    status: HealthStatus = HealthStatus.HEALTHY
    injury_days: int = 0
    suspended_matches: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "fatigue", _pct(self.fatigue))
        object.__setattr__(self, "morale", _pct(self.morale))
        object.__setattr__(self, "match_fitness", _pct(self.match_fitness))
        object.__setattr__(self, "status", HealthStatus(self.status))
        object.__setattr__(self, "injury_days", max(0, int(self.injury_days)))
        object.__setattr__(self, "suspended_matches", max(0, int(self.suspended_matches)))

    @property
    def is_injured(self) -> bool:
        return self.status == HealthStatus.INJURED

    @property
    def is_available(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fatigue": self.fatigue,
            "morale": self.morale,
            "match_fitness": self.match_fitness,
            "status": self.status.value,
            "injury_days": self.injury_days,
            "suspended_matches": self.suspended_matches,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Condition":
        return cls(
            fatigue=data.get("fatigue", 0),
            morale=data.get("morale", 50),
            match_fitness=data.get("match_fitness", 100),
            status=data.get("status", HealthStatus.HEALTHY),
            injury_days=data.get("injury_days", 0),
            suspended_matches=data.get("suspended_matches", 0),
        )


@dataclass
class Player:
    """A player. One natural position plus optional secondaries; all attributes 0-200."""

    id: str = ""
    name: str = ""
    age: int = 16
    position: str = "CM"
    secondary_positions: List[str] = field(default_factory=list)
    potential_ability: int = 100
    current_ability: int = 100
    # Technical
    crossing: int = 100
    dribbling: int = 100
    finishing: int = 100
    heading: int = 100
    marking: int = 100
    passing: int = 100
    tackling: int = 100
    technique: int = 100
    # Mental
    anticipation: int = 100
    composure: int = 100
    decisions: int = 100
    off_the_ball: int = 100
    positioning: int = 100
    teamwork: int = 100
    vision: int = 100
    work_rate: int = 100
    # Physical
    acceleration: int = 100
    agility: int = 100
    balance: int = 100
    pace: int = 100
    stamina: int = 100
    strength: int = 100
    # Goalkeeping
    aerial_reach: int = 50
    handling: int = 50
    kicking: int = 50
    one_on_ones: int = 50
    reflexes: int = 50

    condition: Condition = field(default_factory=Condition)

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"unknown position {self.position!r}")
        for pos in self.secondary_positions:
            if pos not in POSITIONS:
                raise ValueError(f"unknown secondary position {pos!r}")

    @property
    def is_gk(self) -> bool:
        return self.position == "GK"

    def attribute_group(self, names: List[str]) -> Dict[str, int]:
        return {name: getattr(self, name) for name in names}

    def overall_ability(self) -> int:
        """Group-average ability. Outfield: mean of technical, mental and physical means."""
        if self.is_gk:
            gk = [getattr(self, a) for a in GOALKEEPING_ATTRIBUTES]
            return min(ATTRIBUTE_MAX, sum(gk) // len(gk))
        means = []
        for group in (TECHNICAL_ATTRIBUTES, MENTAL_ATTRIBUTES, PHYSICAL_ATTRIBUTES):
            values = [getattr(self, a) for a in group]
            means.append(sum(values) / len(values))
        return min(ATTRIBUTE_MAX, int(sum(means) / len(means)))

    def with_condition(self, condition: Condition) -> "Player":
        return replace(self, condition=condition)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "condition":
                value = value.to_dict()
            elif f.name == "secondary_positions":
                value = list(value)
            d[f.name] = value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        kwargs = {k: data[k] for k in cls.__dataclass_fields__ if k in data and k != "condition"}
        if "condition" in data:
            kwargs["condition"] = Condition.from_dict(data["condition"])
        return cls(**kwargs)


def can_play(player: Player, position: str) -> bool:
    """Natural, listed secondary, or compatible position."""
    return (
        player.position == position
        or position in player.secondary_positions
        or position in POSITION_COMPATIBILITY.get(player.position, ())
    )


def position_suitability(player: Player, position: str) -> float:
    if player.position == position:
        return SUITABILITY_NATURAL
    if position in player.secondary_positions:
        return SUITABILITY_SECONDARY
    if position in POSITION_COMPATIBILITY.get(player.position, ()):
        return SUITABILITY_COMPATIBLE
    return SUITABILITY_INCOMPATIBLE


def position_rating(player: Player, position: str) -> int:
    """Current ability scaled by how well the player fits *position*."""
    return int(player.current_ability * position_suitability(player, position))
