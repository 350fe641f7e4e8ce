"""
Substitution suggestion DTO. Advisory only; nothing in the engine acts on it.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Any, Optional


class SubstitutionReason(str, Enum):
    INJURED = "Injured"
    LOW_FITNESS = "LowFitness"
    HIGH_FATIGUE = "HighFatigue"
    TACTICAL_ATTACKING = "TacticalAttacking"
    TACTICAL_DEFENSIVE = "TacticalDefensive"


class SuggestionUrgency(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


@dataclass(frozen=True)
class SubstitutionSuggestion:
    player_out_id: str
    player_in_id: str
    reason: SubstitutionReason
    urgency: SuggestionUrgency
    player_out_name: str = ""
    player_in_name: str = ""
    detail: Optional[int] = None  # fitness / fatigue reading that triggered it

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_out_id": self.player_out_id,
            "player_out_name": self.player_out_name,
            "player_in_id": self.player_in_id,
            "player_in_name": self.player_in_name,
            "reason": self.reason.value,
            "urgency": self.urgency.name,
            "detail": self.detail,
        }
