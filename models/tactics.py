"""
Tactic configuration for a team.
Validated at construction: an unknown enumeration value or an out-of-range mentality
raises pydantic.ValidationError (a ValueError) before any simulation starts.
"""
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .constants import FORMATIONS


class Formation(str, Enum):
    FOUR_FOUR_TWO = "4-4-2"
    FOUR_THREE_THREE = "4-3-3"
    FOUR_TWO_THREE_ONE = "4-2-3-1"
    FOUR_ONE_FOUR_ONE = "4-1-4-1"
    FOUR_FIVE_ONE = "4-5-1"
    THREE_FIVE_TWO = "3-5-2"
    THREE_FOUR_TWO_ONE = "3-4-2-1"
    FIVE_THREE_TWO = "5-3-2"
    FIVE_TWO_TWO_ONE = "5-2-2-1"

    @property
    def positions(self) -> tuple[str, ...]:
        return FORMATIONS[self.value]


class DefensiveHeight(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class PassingStyle(str, Enum):
    SHORT = "Short"
    MIXED = "Mixed"
    LONG = "Long"


class Tempo(str, Enum):
    SLOW = "Slow"
    MEDIUM = "Medium"
    FAST = "Fast"


class TacticalStyle(str, Enum):
    """Discrete style inferred from a tactic (see simulation.tactical)."""

    HIGH_PRESS = "HighPress"
    COUNTER_ATTACK = "CounterAttack"
    POSSESSION = "Possession"
    DIRECT_PLAY = "DirectPlay"
    BALANCED = "Balanced"


class Tactic(BaseModel):
    """How a team sets up. Mutated only by the caller, read by the engine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    formation: Formation = Formation.FOUR_FOUR_TWO
    attacking_mentality: int = Field(default=50, ge=0, le=100)
    defensive_height: DefensiveHeight = DefensiveHeight.MEDIUM
    passing_style: PassingStyle = PassingStyle.MIXED
    tempo: Tempo = Tempo.MEDIUM

    def intensity(self) -> int:
        """Rough 0-100 pressing/tempo load of the setup."""
        press = {DefensiveHeight.HIGH: 30, DefensiveHeight.MEDIUM: 20, DefensiveHeight.LOW: 10}
        tempo = {Tempo.FAST: 30, Tempo.MEDIUM: 20, Tempo.SLOW: 10}
        total = press[self.defensive_height] + tempo[self.tempo] + self.attacking_mentality // 3
        return min(100, total)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tactic":
        return cls.model_validate(data)
