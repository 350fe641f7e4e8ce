"""
Tuning parameters for the matchday engine.

Every probability and rate the engine uses lives here so balance can be adjusted (and
validated) without touching the simulation code. The defaults are the shipped balance;
construct EngineConfig(...) with overrides to experiment. Invalid values are rejected at
construction time.
"""
from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.tactics import TacticalStyle

MAX_CLASH_MODIFIER = 0.25

# "Winner>Loser" -> modifier for the first style. The mirrored pair gets the negation.
DEFAULT_CLASH_DOMINANCE: Dict[str, float] = {
    "HighPress>Possession": 0.20,
    "Possession>CounterAttack": 0.15,
    "CounterAttack>HighPress": 0.25,
    "DirectPlay>HighPress": 0.15,
    "DirectPlay>Possession": -0.10,
}


def parse_style_pair(key: str) -> Tuple[TacticalStyle, TacticalStyle]:
    """'HighPress>Possession' -> (HIGH_PRESS, POSSESSION)."""
    left, sep, right = key.partition(">")
    if not sep:
        raise ValueError(f"clash key {key!r} must look like 'StyleA>StyleB'")
    return TacticalStyle(left.strip()), TacticalStyle(right.strip())


class EngineConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Goal model ---
    base_goal_rate: float = Field(default=0.03, ge=0.0, le=1.0)
    goal_rate_per_100: float = Field(default=0.01, ge=0.0, le=1.0)  # per 100 points of attack - defense
    variance_low: float = Field(default=0.8, gt=0.0)
    variance_high: float = Field(default=1.2, gt=0.0)
    min_goal_probability: float = Field(default=0.005, ge=0.0, le=1.0)
    max_goal_probability: float = Field(default=0.10, ge=0.0, le=1.0)

    # --- Match clock ---
    quick_rounds: int = Field(default=45, ge=1)
    minute_step: int = Field(default=2, ge=1)
    match_minutes: int = Field(default=90, ge=1)

    # --- Live event bands (per side, per step) ---
    own_goal_chance: float = Field(default=0.0002, ge=0.0, le=1.0)
    penalty_chance: float = Field(default=0.0045, ge=0.0, le=1.0)
    penalty_conversion: float = Field(default=0.75, ge=0.0, le=1.0)
    yellow_card_chance: float = Field(default=0.05, ge=0.0, le=1.0)
    live_injury_chance: float = Field(default=0.015, ge=0.0, le=1.0)
    max_substitutions: int = Field(default=3, ge=0)

    # --- Tactical clash ---
    clash_dominance: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_CLASH_DOMINANCE))

    # --- Post-match progression ---
    post_match_injury_chance: float = Field(default=0.03, ge=0.0, le=1.0)
    injury_severity_weights: Tuple[float, float, float] = (0.6, 0.3, 0.1)  # minor, moderate, severe
    injury_day_ranges: Tuple[Tuple[int, int], Tuple[int, int], Tuple[int, int]] = (
        (7, 21), (28, 56), (63, 182),
    )
    injury_fitness_loss: int = Field(default=20, ge=0)
    fatigue_tiers: Tuple[Tuple[int, int], ...] = ((45, 10), (70, 20), (90, 30))  # (max minutes, +fatigue)
    fatigue_overtime: int = Field(default=35, ge=0)
    featured_fitness_gain: int = Field(default=5, ge=0)  # full 90 minutes
    morale_win: int = 5
    morale_draw: int = 1
    morale_loss: int = -4
    morale_sent_off: int = -5
    bench_fatigue_recovery: int = Field(default=10, ge=0)
    bench_fitness_loss: int = Field(default=3, ge=0)
    bench_morale_loss: int = Field(default=2, ge=0)
    young_bench_morale_loss: int = Field(default=4, ge=0)
    young_age: int = Field(default=21, ge=0)

    # --- Rest ---
    rest_fatigue_per_day: int = Field(default=10, ge=0)
    rest_fitness_per_day: int = Field(default=2, ge=0)
    rest_morale_cap: int = Field(default=80, ge=0, le=100)
    rest_morale_max_gain: int = Field(default=7, ge=0)

    # --- Aging ---
    youth_max_age: int = Field(default=21, ge=0)
    peak_max_age: int = Field(default=28, ge=0)
    steep_decline_age: int = Field(default=33, ge=0)  # decline accelerates past this
    peak_fluctuation: int = Field(default=2, ge=0)
    physical_decline_age: int = Field(default=30, ge=0)
    potential_decline_age: int = Field(default=30, ge=0)
    potential_decline_per_year: int = Field(default=2, ge=0)
    retirement_age: int = Field(default=33, ge=0)
    retirement_chances: Tuple[Tuple[int, float], ...] = ((35, 0.1), (38, 0.3), (40, 0.6))  # (max age, chance)
    retirement_chance_late: float = Field(default=0.9, ge=0.0, le=1.0)
    low_ability_threshold: int = Field(default=100, ge=0)
    low_ability_retirement_bonus: float = Field(default=0.2, ge=0.0, le=1.0)

    # --- Substitution advisor ---
    low_fitness_threshold: int = 35
    low_fitness_after_minute: int = 55
    high_fatigue_threshold: int = 75
    high_fatigue_after_minute: int = 60
    trailing_after_minute: int = 70
    leading_after_minute: int = 75
    tactical_goal_margin: int = Field(default=2, ge=1)
    replacement_min_fitness: int = Field(default=50, ge=0, le=100)

    @field_validator("clash_dominance")
    @classmethod
    def _check_clash(cls, value: Dict[str, float]) -> Dict[str, float]:
        seen = set()
        for key, modifier in value.items():
            a, b = parse_style_pair(key)
            if a == b and modifier != 0.0:
                raise ValueError(f"{key}: a style cannot dominate itself")
            if frozenset((a, b)) in seen:
                raise ValueError(f"{key}: pair defined twice")
            seen.add(frozenset((a, b)))
            if abs(modifier) > MAX_CLASH_MODIFIER:
                raise ValueError(f"{key}: |{modifier}| exceeds {MAX_CLASH_MODIFIER}")
        return value

    @model_validator(mode="after")
    def _check_bands(self) -> "EngineConfig":
        if self.variance_low > self.variance_high:
            raise ValueError("variance_low must not exceed variance_high")
        if self.min_goal_probability > self.max_goal_probability:
            raise ValueError("min_goal_probability must not exceed max_goal_probability")
        live_total = (
            self.own_goal_chance + self.penalty_chance + self.yellow_card_chance
            + self.live_injury_chance + self.max_goal_probability
        )
        if live_total > 1.0:
            raise ValueError(f"live event bands sum to {live_total:.4f} > 1")
        if abs(sum(self.injury_severity_weights) - 1.0) > 1e-6:
            raise ValueError("injury_severity_weights must sum to 1")
        for lo, hi in self.injury_day_ranges:
            if lo < 1 or lo > hi:
                raise ValueError(f"bad injury day range ({lo}, {hi})")
        limits = [limit for limit, _ in self.fatigue_tiers]
        if limits != sorted(limits):
            raise ValueError("fatigue_tiers must be ordered by minutes")
        ages = [age for age, _ in self.retirement_chances]
        if ages != sorted(ages):
            raise ValueError("retirement_chances must be ordered by age")
        for _, chance in self.retirement_chances:
            if not 0.0 <= chance <= 1.0:
                raise ValueError(f"retirement chance {chance} outside [0, 1]")
        if not self.youth_max_age <= self.peak_max_age <= self.steep_decline_age:
            raise ValueError("aging phases must be ordered: youth <= peak <= steep decline")
        return self


DEFAULT_CONFIG = EngineConfig()
