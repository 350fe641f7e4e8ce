"""
Player progression engine.

Three pure passes over condition / player values:

* after_match  - fatigue, post-match injury, match fitness, morale and suspensions
                 for one player after a fixture (featured or not).
* rest         - recovery over a number of days without a match.
* age_player   - the yearly birthday: development, decline, potential erosion and
                 the retirement roll.

Nothing is mutated; each pass returns a new value. The roster helpers at the bottom
apply a pass exactly once per player and return the new conditions keyed by id plus
a list of summary dicts for logging / display.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from models.constants import ATTRIBUTE_MAX, PHYSICAL_ATTRIBUTES
from models.match_result import MatchResult
from models.player import Condition, HealthStatus, Player

from .config import DEFAULT_CONFIG, EngineConfig

_log = logging.getLogger("matchday.progression")


class MatchOutcome(str, Enum):
    WIN = "Win"
    DRAW = "Draw"
    LOSS = "Loss"
    NONE = "None"


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def outcome_for(result: MatchResult, team_id: str) -> MatchOutcome:
    if team_id not in (result.home_team_id, result.away_team_id):
        return MatchOutcome.NONE
    diff = result.goal_difference_for(team_id)
    if diff > 0:
        return MatchOutcome.WIN
    if diff < 0:
        return MatchOutcome.LOSS
    return MatchOutcome.DRAW


# ===================================================================
# After a match
# ===================================================================

def _fatigue_for_minutes(minutes: int, cfg: EngineConfig) -> int:
    for limit, increase in cfg.fatigue_tiers:
        if minutes <= limit:
            return increase
    return cfg.fatigue_overtime


def _morale_for_outcome(outcome: MatchOutcome, cfg: EngineConfig) -> int:
    return {
        MatchOutcome.WIN: cfg.morale_win,
        MatchOutcome.DRAW: cfg.morale_draw,
        MatchOutcome.LOSS: cfg.morale_loss,
    }.get(MatchOutcome(outcome), 0)


def roll_injury_days(rng: random.Random, config: EngineConfig | None = None) -> int:
    """Recovery time for a new injury: minor / moderate / severe by weight."""
    cfg = config or DEFAULT_CONFIG
    lo, hi = rng.choices(cfg.injury_day_ranges, weights=cfg.injury_severity_weights)[0]
    return rng.randint(lo, hi)


def after_match(
    condition: Condition,
    minutes_played: int,
    *,
    age: int = 25,
    outcome: MatchOutcome = MatchOutcome.NONE,
    sent_off: bool = False,
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> Condition:
    """Condition after a fixture for a player who played *minutes_played* (0 = not featured)."""
    cfg = config or DEFAULT_CONFIG

    if minutes_played <= 0:
        suspended = condition.suspended_matches
        status = condition.status
        if suspended > 0:
            suspended -= 1
            if suspended == 0 and status == HealthStatus.SUSPENDED:
                status = HealthStatus.HEALTHY
        morale_loss = cfg.young_bench_morale_loss if age <= cfg.young_age else cfg.bench_morale_loss
        return replace(
            condition,
            fatigue=condition.fatigue - cfg.bench_fatigue_recovery,
            morale=condition.morale - morale_loss,
            match_fitness=condition.match_fitness - cfg.bench_fitness_loss,
            status=status,
            suspended_matches=suspended,
        )

    rng = rng if rng is not None else random.Random()
    share = min(minutes_played, cfg.match_minutes) / cfg.match_minutes
    fatigue = condition.fatigue + _fatigue_for_minutes(minutes_played, cfg)
    fitness = condition.match_fitness + round(cfg.featured_fitness_gain * share)
    morale = condition.morale + _morale_for_outcome(outcome, cfg)
    status = condition.status
    injury_days = condition.injury_days
    suspended = condition.suspended_matches

    if sent_off:
        morale += cfg.morale_sent_off
        suspended += 1
        if status == HealthStatus.HEALTHY:
            status = HealthStatus.SUSPENDED

    if not condition.is_injured and rng.random() < cfg.post_match_injury_chance:
        injury_days = roll_injury_days(rng, cfg)
        fitness -= cfg.injury_fitness_loss
        status = HealthStatus.INJURED

    return Condition(
        fatigue=fatigue,
        morale=morale,
        match_fitness=fitness,
        status=status,
        injury_days=injury_days,
        suspended_matches=suspended,
    )


# ===================================================================
# Rest
# ===================================================================

def rest(condition: Condition, days: int, config: EngineConfig | None = None) -> Condition:
    """Recovery over *days* without a match."""
    if days <= 0:
        return condition
    cfg = config or DEFAULT_CONFIG

    morale = condition.morale
    if morale < cfg.rest_morale_cap:
        gain = min(days // 2, cfg.rest_morale_max_gain)
        morale = min(cfg.rest_morale_cap, morale + gain)

    status = condition.status
    injury_days = max(0, condition.injury_days - days)
    if status == HealthStatus.INJURED and injury_days == 0:
        status = HealthStatus.SUSPENDED if condition.suspended_matches else HealthStatus.HEALTHY

    return replace(
        condition,
        fatigue=condition.fatigue - cfg.rest_fatigue_per_day * days,
        match_fitness=condition.match_fitness + cfg.rest_fitness_per_day * days,
        morale=morale,
        status=status,
        injury_days=injury_days,
    )


# ===================================================================
# Aging
# ===================================================================

@dataclass(frozen=True)
class AgingResult:
    player: Player
    ability_change: int
    retiring: bool


def _development(player: Player, rng: random.Random, cfg: EngineConfig) -> int:
    """Raw ability change for the year, keyed on the age before the birthday."""
    age = player.age
    if age <= cfg.youth_max_age:
        headroom = player.potential_ability - player.current_ability
        if headroom <= 0:
            return 0
        return min(headroom, max(1, round(headroom * rng.uniform(0.1, 0.3))))
    if age <= cfg.peak_max_age:
        spread = cfg.peak_fluctuation
        return rng.randint(-spread, spread)
    if age <= cfg.steep_decline_age:
        return -rng.randint(0, 3)
    return -rng.randint(2, 5) if age <= cfg.steep_decline_age + 3 else -rng.randint(3, 7)


def _decay_physicals(player: Player, rng: random.Random) -> Dict[str, int]:
    hi = 3 if player.age < 34 else 5
    return {attr: max(0, getattr(player, attr) - rng.randint(1, hi)) for attr in PHYSICAL_ATTRIBUTES}


def _retirement_chance(age: int, current_ability: int, cfg: EngineConfig) -> float:
    if age < cfg.retirement_age:
        return 0.0
    chance = cfg.retirement_chance_late
    for max_age, table_chance in cfg.retirement_chances:
        if age <= max_age:
            chance = table_chance
            break
    if current_ability < cfg.low_ability_threshold:
        chance += cfg.low_ability_retirement_bonus
    return min(1.0, chance)


def age_player(
    player: Player,
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> AgingResult:
    """One birthday for *player*. The input is left untouched."""
    cfg = config or DEFAULT_CONFIG
    rng = rng if rng is not None else random.Random()

    new_age = player.age + 1
    current = player.current_ability + _development(player, rng, cfg)
    if player.age <= cfg.peak_max_age:
        # growth and peak fluctuation never push past potential
        current = min(current, max(player.current_ability, player.potential_ability))

    physicals: Dict[str, int] = {}
    if player.age >= cfg.physical_decline_age:
        physicals = _decay_physicals(player, rng)
        before = player.overall_ability()
        after = replace(player, **physicals).overall_ability()
        current -= before - after

    current = int(_clamp(current, 0, ATTRIBUTE_MAX))
    potential = player.potential_ability
    if new_age > cfg.potential_decline_age:
        potential = max(0, potential - cfg.potential_decline_per_year)

    aged = replace(player, age=new_age, current_ability=current, potential_ability=potential, **physicals)
    retiring = rng.random() < _retirement_chance(new_age, current, cfg)
    if retiring:
        _log.debug("%s (%d) flagged for retirement", player.id, new_age)
    return AgingResult(player=aged, ability_change=current - player.current_ability, retiring=retiring)


# ===================================================================
# Roster helpers
# ===================================================================

def _unique(players: Iterable[Player]) -> List[Player]:
    seen: set[str] = set()
    out = []
    for p in players:
        if p.id in seen:
            continue
        seen.add(p.id)
        out.append(p)
    return out


def update_after_match(
    players: Iterable[Player],
    result: MatchResult,
    team_id: str,
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> Tuple[Dict[str, Condition], List[Dict[str, Any]]]:
    """Apply ``after_match`` once to every player of *team_id*'s squad.

    Returns ``({player_id: new_condition}, summaries)``.
    """
    rng = rng if rng is not None else random.Random()
    minutes = result.minutes_played()
    sent_off = set(result.sent_off())
    outcome = outcome_for(result, team_id)

    conditions: Dict[str, Condition] = {}
    summaries: List[Dict[str, Any]] = []
    for p in _unique(players):
        played = minutes.get(p.id, 0)
        old = p.condition
        new = after_match(
            old, played,
            age=p.age, outcome=outcome, sent_off=p.id in sent_off, rng=rng, config=config,
        )
        conditions[p.id] = new
        newly_injured = new.is_injured and not old.is_injured
        if newly_injured:
            _log.debug("%s injured after match (%d days)", p.id, new.injury_days)
        summaries.append({
            "player_id": p.id,
            "minutes_played": played,
            "fatigue_change": new.fatigue - old.fatigue,
            "morale_change": new.morale - old.morale,
            "fitness_change": new.match_fitness - old.match_fitness,
            "injured": newly_injured,
            "injury_days": new.injury_days if newly_injured else 0,
            "suspended": new.suspended_matches > 0,
        })
    return conditions, summaries


def update_during_rest(
    players: Iterable[Player],
    days: int,
    config: EngineConfig | None = None,
) -> Tuple[Dict[str, Condition], List[Dict[str, Any]]]:
    """Apply ``rest`` once to every player. Returns ``({player_id: condition}, summaries)``."""
    conditions: Dict[str, Condition] = {}
    summaries: List[Dict[str, Any]] = []
    for p in _unique(players):
        old = p.condition
        new = rest(old, days, config)
        conditions[p.id] = new
        summaries.append({
            "player_id": p.id,
            "fatigue_recovered": old.fatigue - new.fatigue,
            "morale_change": new.morale - old.morale,
            "healed": old.is_injured and not new.is_injured,
        })
    return conditions, summaries


def age_players(
    players: Iterable[Player],
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> List[AgingResult]:
    """Season rollover: one ``age_player`` per distinct player."""
    rng = rng if rng is not None else random.Random()
    return [age_player(p, rng, config) for p in _unique(players)]
