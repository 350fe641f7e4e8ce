"""
Data models for the matchday engine: players and their condition, teams and tactics,
match results and substitution suggestions.
"""
from .player import Player, Condition, HealthStatus, can_play, position_rating, position_suitability
from .tactics import Tactic, TacticalStyle, Formation, DefensiveHeight, PassingStyle, Tempo
from .team import Team, LineupSlot
from .match_result import (
    MatchMode,
    MatchContext,
    MatchEvent,
    Goal,
    OwnGoal,
    Penalty,
    YellowCard,
    RedCard,
    Injury,
    Substitution,
    MatchStatistics,
    PlayerMatchRating,
    MatchResult,
)
from .suggestion import SubstitutionReason, SuggestionUrgency, SubstitutionSuggestion

__all__ = [
    "Player",
    "Condition",
    "HealthStatus",
    "can_play",
    "position_rating",
    "position_suitability",
    "Tactic",
    "TacticalStyle",
    "Formation",
    "DefensiveHeight",
    "PassingStyle",
    "Tempo",
    "Team",
    "LineupSlot",
    "MatchMode",
    "MatchContext",
    "MatchEvent",
    "Goal",
    "OwnGoal",
    "Penalty",
    "YellowCard",
    "RedCard",
    "Injury",
    "Substitution",
    "MatchStatistics",
    "PlayerMatchRating",
    "MatchResult",
    "SubstitutionReason",
    "SuggestionUrgency",
    "SubstitutionSuggestion",
]
