"""
Matchday simulation core.
Resolves matches between two lineups (quick scoreline or live event stream), applies
post-match / rest / aging progression to player condition, and advises on substitutions.
"""
import logging

from .config import EngineConfig, DEFAULT_CONFIG
from .condition import effective_ability, condition_factor, in_match_condition
from .strength import TeamStrength, team_strength, lineup_strength, strength_from_abilities
from .tactical import classify_style, clash_modifier, tactic_clash, apply_modifier, CLASH_TABLE, STYLE_RULES
from .engine import LiveMatch, LiveStep, goal_probability, quick_score, simulate, simulate_match
from .progression import (
    AgingResult,
    MatchOutcome,
    after_match,
    rest,
    age_player,
    age_players,
    update_after_match,
    update_during_rest,
)
from .substitution import LineupView, PlayerView, SubstitutionAdvisor, advise

logging.getLogger("matchday").addHandler(logging.NullHandler())

__all__ = [
    "EngineConfig",
    "DEFAULT_CONFIG",
    "effective_ability",
    "condition_factor",
    "in_match_condition",
    "TeamStrength",
    "team_strength",
    "lineup_strength",
    "strength_from_abilities",
    "classify_style",
    "clash_modifier",
    "tactic_clash",
    "apply_modifier",
    "CLASH_TABLE",
    "STYLE_RULES",
    "LiveMatch",
    "LiveStep",
    "goal_probability",
    "quick_score",
    "simulate",
    "simulate_match",
    "AgingResult",
    "MatchOutcome",
    "after_match",
    "rest",
    "age_player",
    "age_players",
    "update_after_match",
    "update_during_rest",
    "LineupView",
    "PlayerView",
    "SubstitutionAdvisor",
    "advise",
]
