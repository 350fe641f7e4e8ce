"""
Condition & effective-ability calculator.

Turns a player's latent ability plus their matchday condition into the single integer the
rest of the engine works with. Four independent multiplicative factors:

    fatigue  = 1 - fatigue * 0.003
    morale   = 0.85 + morale * 0.0025
    fitness  = 0.80 + match_fitness * 0.002
    injury   = 0.5 if injured else 1.0

The product is clamped to [0.50, 1.15] so a single bad reading can't zero a player out
and a perfect one can't push a rating past 115%.
"""
from __future__ import annotations

from dataclasses import replace

from models.constants import ATTRIBUTE_MAX
from models.player import Condition

MIN_FACTOR = 0.50
MAX_FACTOR = 1.15
MAX_EFFECTIVE_ABILITY = round(ATTRIBUTE_MAX * MAX_FACTOR)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def fatigue_factor(fatigue: int) -> float:
    return 1.0 - fatigue * 0.003


def morale_factor(morale: int) -> float:
    return 0.85 + morale * 0.0025


def fitness_factor(match_fitness: int) -> float:
    return 0.80 + match_fitness * 0.002


def injury_factor(condition: Condition) -> float:
    return 0.5 if condition.is_injured else 1.0


def condition_factor(condition: Condition | None) -> float:
    """Clamped product of the four factors. No condition -> neutral 1.0."""
    if condition is None:
        return 1.0
    product = (
        fatigue_factor(condition.fatigue)
        * morale_factor(condition.morale)
        * fitness_factor(condition.match_fitness)
        * injury_factor(condition)
    )
    return _clamp(product, MIN_FACTOR, MAX_FACTOR)


def effective_ability(base: int, condition: Condition | None = None) -> int:
    """Matchday rating for *base* ability under *condition*."""
    base = int(_clamp(base, 0, ATTRIBUTE_MAX))
    if condition is None:
        return base
    value = round_half_up(base * condition_factor(condition))
    return int(_clamp(value, 0, MAX_EFFECTIVE_ABILITY))


def in_match_condition(condition: Condition, minutes_on_pitch: int, stamina: int = 100) -> Condition:
    """Match-local drift after *minutes_on_pitch*: fatigue builds, sharpness drops.

    Stamina 200 halves the drain, stamina 0 raises it by half. The returned value only lives for
    the current match; persisted condition is owned by the progression engine.
    """
    if minutes_on_pitch <= 0:
        return condition
    drain = _clamp(1.5 - stamina / 200.0, 0.5, 1.5)
    return replace(
        condition,
        fatigue=condition.fatigue + round(minutes_on_pitch * 0.5 * drain),
        match_fitness=condition.match_fitness - round(minutes_on_pitch * 0.4 * drain),
    )
