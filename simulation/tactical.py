"""
Tactical style classifier and clash resolver.

A tactic collapses to one of five discrete styles via an ordered rule list (first
match wins). Two styles meeting produce a signed modifier from a 25-entry lookup
table that is anti-symmetric by construction: clash(A, B) == -clash(B, A).
"""
from __future__ import annotations

import itertools
from typing import Callable, Dict, List, Tuple

from models.tactics import DefensiveHeight, PassingStyle, Tactic, TacticalStyle, Tempo

from .config import DEFAULT_CONFIG, MAX_CLASH_MODIFIER, EngineConfig, parse_style_pair
from .strength import TeamStrength

# ===================================================================
# Style classification
# ===================================================================

StyleRule = Tuple[TacticalStyle, Callable[[Tactic], bool]]

STYLE_RULES: List[StyleRule] = [
    (
        TacticalStyle.HIGH_PRESS,
        lambda t: t.defensive_height == DefensiveHeight.HIGH and t.attacking_mentality > 70,
    ),
    (
        TacticalStyle.COUNTER_ATTACK,
        lambda t: t.defensive_height == DefensiveHeight.LOW and t.tempo == Tempo.FAST,
    ),
    (
        TacticalStyle.POSSESSION,
        lambda t: t.passing_style == PassingStyle.SHORT and t.tempo != Tempo.FAST,
    ),
    (
        TacticalStyle.DIRECT_PLAY,
        lambda t: t.passing_style == PassingStyle.LONG,
    ),
]


def classify_style(tactic: Tactic, rules: List[StyleRule] | None = None) -> TacticalStyle:
    """First rule whose predicate holds; Balanced when none does."""
    for style, predicate in STYLE_RULES if rules is None else rules:
        if predicate(tactic):
            return style
    return TacticalStyle.BALANCED


# ===================================================================
# Clash table
# ===================================================================

ClashTable = Dict[Tuple[TacticalStyle, TacticalStyle], float]


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def build_clash_table(dominance: Dict[str, float]) -> ClashTable:
    """Expand "Winner>Loser" entries into the full ordered-pair table.

    Each entry also fills its mirror with the negated value; unlisted pairs are 0.
    """
    table: ClashTable = {
        pair: 0.0 for pair in itertools.product(list(TacticalStyle), repeat=2)
    }
    for key, modifier in dominance.items():
        a, b = parse_style_pair(key)
        if a == b:
            continue
        value = _clamp(modifier, -MAX_CLASH_MODIFIER, MAX_CLASH_MODIFIER)
        table[(a, b)] = value
        table[(b, a)] = -value
    return table


CLASH_TABLE: ClashTable = build_clash_table(DEFAULT_CONFIG.clash_dominance)


def _table_for(config: EngineConfig) -> ClashTable:
    if config.clash_dominance == DEFAULT_CONFIG.clash_dominance:
        return CLASH_TABLE
    return build_clash_table(config.clash_dominance)


def clash_modifier(
    home: TacticalStyle,
    away: TacticalStyle,
    config: EngineConfig | None = None,
) -> float:
    """Signed modifier for *home* facing *away*, in [-0.25, +0.25]."""
    table = _table_for(config or DEFAULT_CONFIG)
    return table[(TacticalStyle(home), TacticalStyle(away))]


def tactic_clash(home: Tactic, away: Tactic, config: EngineConfig | None = None) -> float:
    return clash_modifier(classify_style(home), classify_style(away), config)


def apply_modifier(
    home: TeamStrength,
    away: TeamStrength,
    modifier: float,
) -> Tuple[TeamStrength, TeamStrength]:
    """Home gains (1 + m) attack and (1 + m/2) defense; away gets the mirror."""
    m = _clamp(modifier, -MAX_CLASH_MODIFIER, MAX_CLASH_MODIFIER)
    return (
        home.scaled(1.0 + m, 1.0 + m / 2.0),
        away.scaled(1.0 - m, 1.0 - m / 2.0),
    )
