"""
Match simulation engine.

Resolves a fixture between two lineups into a MatchResult. Key design goals:

1. **Condition-driven**: every starter contributes its effective ability (position fit,
   then fatigue / morale / fitness / injury) to one of three strength buckets, and the
   tactical clash between the two setups shifts attack and defense before any dice roll.
2. **Two resolutions**: Quick mode rolls 45 independent goal chances per side; Live mode
   walks the clock in two-minute steps and produces the full event stream (cards,
   injuries, forced substitutions, penalties) that a renderer can consume as it happens.
3. **Reproducible**: all randomness comes from one ``random.Random`` per call, seeded
   from the context or supplied by the caller. Nothing is retained between calls.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from models.constants import DEFENSE_POSITIONS, SCORING_POSITIONS
from models.match_result import (
    Goal,
    Injury,
    MatchContext,
    MatchEvent,
    MatchMode,
    MatchResult,
    MatchStatistics,
    OwnGoal,
    Penalty,
    PlayerMatchRating,
    RedCard,
    Substitution,
    YellowCard,
)
from models.player import Condition, HealthStatus, Player, position_rating
from models.suggestion import SubstitutionSuggestion
from models.team import LineupSlot, Team

from .condition import effective_ability, in_match_condition
from .config import DEFAULT_CONFIG, EngineConfig
from .strength import TeamStrength, lineup_strength, team_strength
from .substitution import LineupView, advise, pick_replacement
from .tactical import apply_modifier, tactic_clash

_log = logging.getLogger("matchday.engine")

HOME = "home"
AWAY = "away"


# ===================================================================
# Helper utilities
# ===================================================================

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _pick_scorer(
    slots: Sequence[LineupSlot],
    players: Dict[str, Player],
    rng: random.Random,
) -> Optional[str]:
    """Attacking slot first (weighted by finishing), then anyone, then nobody."""
    known = [s for s in slots if s.player_id in players]
    pool = [s for s in known if s.position in SCORING_POSITIONS] or known
    if not pool:
        return None
    weights = [players[s.player_id].finishing + 1 for s in pool]
    return rng.choices(pool, weights=weights)[0].player_id


# ===================================================================
# Goal model
# ===================================================================

def goal_probability(
    attack: float,
    defense: float,
    rng: random.Random,
    config: EngineConfig | None = None,
) -> float:
    """Per-tick chance that *attack* scores against *defense*.

    base 3% plus 1% per 100 points of advantage, times a uniform variance draw,
    clamped to [0.5%, 10%].
    """
    cfg = config or DEFAULT_CONFIG
    base = cfg.base_goal_rate + (attack - defense) / 100.0 * cfg.goal_rate_per_100
    variance = rng.uniform(cfg.variance_low, cfg.variance_high)
    return _clamp(base * variance, cfg.min_goal_probability, cfg.max_goal_probability)


def _quick_rounds(
    home: TeamStrength,
    away: TeamStrength,
    rng: random.Random,
    cfg: EngineConfig,
) -> Iterator[Tuple[int, bool, bool]]:
    last_minute = cfg.match_minutes - 1
    for rnd in range(cfg.quick_rounds):
        minute = min(cfg.minute_step * rnd + 1, last_minute)
        p_home = goal_probability(home.attack, away.defense, rng, cfg)
        home_scored = rng.random() < p_home
        p_away = goal_probability(away.attack, home.defense, rng, cfg)
        away_scored = rng.random() < p_away
        yield minute, home_scored, away_scored


def quick_score(
    home_strength: TeamStrength,
    away_strength: TeamStrength,
    rng: random.Random,
    config: EngineConfig | None = None,
) -> Tuple[int, int]:
    """Scoreline only: 45 independent rounds, one goal roll per side per round."""
    home_goals = away_goals = 0
    for _, home_scored, away_scored in _quick_rounds(home_strength, away_strength, rng, config or DEFAULT_CONFIG):
        home_goals += home_scored
        away_goals += away_scored
    return home_goals, away_goals


# ===================================================================
# Post-hoc statistics and ratings
# ===================================================================

def derive_statistics(
    home: TeamStrength,
    away: TeamStrength,
    home_score: int,
    away_score: int,
    home_id: str,
    away_id: str,
    events: Sequence[MatchEvent] = (),
) -> MatchStatistics:
    """Team numbers from the kickoff strengths and the final score.

    Possession is the attack share (clamped 25-75); shots and corners rise with it and
    shots never fall below goals scored.
    """
    total = home.attack + away.attack
    share = home.attack / total if total > 0 else 0.5
    home_possession = round(_clamp(100.0 * share, 25.0, 75.0), 1)

    def _shots(s: float, goals: int) -> Tuple[int, int]:
        shots = max(goals, round(4 + 16 * s))
        on_target = min(shots, max(goals, round(shots * (0.25 + 0.2 * s))))
        return shots, on_target

    home_shots, home_on_target = _shots(share, home_score)
    away_shots, away_on_target = _shots(1.0 - share, away_score)

    def _count(kind: type, team_id: str) -> int:
        return sum(1 for e in events if isinstance(e, kind) and e.team == team_id)

    return MatchStatistics(
        home_possession=home_possession,
        away_possession=round(100.0 - home_possession, 1),
        home_shots=home_shots,
        away_shots=away_shots,
        home_shots_on_target=home_on_target,
        away_shots_on_target=away_on_target,
        home_corners=round(1 + 9 * share),
        away_corners=round(1 + 9 * (1.0 - share)),
        home_yellow_cards=_count(YellowCard, home_id),
        away_yellow_cards=_count(YellowCard, away_id),
        home_red_cards=_count(RedCard, home_id),
        away_red_cards=_count(RedCard, away_id),
    )


def _goals_by_player(events: Iterable[MatchEvent]) -> Dict[str, int]:
    goals: Dict[str, int] = {}
    for e in events:
        if e.player_id and e.is_goal and not isinstance(e, OwnGoal):
            goals[e.player_id] = goals.get(e.player_id, 0) + 1
    return goals


@dataclass(frozen=True)
class _Appearance:
    player: Player
    position: str
    minutes: int
    yellow_cards: int = 0
    sent_off: bool = False


def _player_rating(
    ability: int,
    position: str,
    goals: int,
    goals_for: int,
    goals_against: int,
    yellow_cards: int,
    sent_off: bool,
    rng: random.Random,
) -> float:
    rating = 4.0 + ability / 50.0 + rng.gauss(0, 0.3)
    rating += 1.0 * goals
    if goals_for > goals_against:
        rating += 0.5
    elif goals_for < goals_against:
        rating -= 0.5
    if position in DEFENSE_POSITIONS:
        rating -= 0.3 * goals_against
    rating -= 0.3 * yellow_cards
    if sent_off:
        rating -= 1.5
    return round(_clamp(rating, 1.0, 10.0), 1)


def _rate_side(
    team_id: str,
    appearances: Sequence[_Appearance],
    goals: Dict[str, int],
    goals_for: int,
    goals_against: int,
    rng: random.Random,
) -> List[PlayerMatchRating]:
    ratings = []
    for app in appearances:
        p = app.player
        ability = effective_ability(position_rating(p, app.position), p.condition)
        ratings.append(
            PlayerMatchRating(
                player_id=p.id,
                team_id=team_id,
                name=p.name,
                position=app.position,
                rating=_player_rating(
                    ability, app.position, goals.get(p.id, 0), goals_for, goals_against,
                    app.yellow_cards, app.sent_off, rng,
                ),
                minutes_played=app.minutes,
                goals=goals.get(p.id, 0),
            )
        )
    return ratings


# ===================================================================
# Quick mode
# ===================================================================

def _simulate_quick(context: MatchContext, rng: random.Random, cfg: EngineConfig) -> MatchResult:
    home, away = context.home, context.away
    home_by_id = {p.id: p for p in context.home_players}
    away_by_id = {p.id: p for p in context.away_players}

    modifier = tactic_clash(home.tactic, away.tactic, cfg)
    home_str, away_str = apply_modifier(
        team_strength(home, context.home_players),
        team_strength(away, context.away_players),
        modifier,
    )

    events: List[MatchEvent] = []
    home_score = away_score = 0
    for minute, home_scored, away_scored in _quick_rounds(home_str, away_str, rng, cfg):
        if home_scored:
            home_score += 1
            events.append(Goal(home.id, _pick_scorer(home.starters, home_by_id, rng), minute))
        if away_scored:
            away_score += 1
            events.append(Goal(away.id, _pick_scorer(away.starters, away_by_id, rng), minute))

    def _appearances(team: Team, by_id: Dict[str, Player]) -> List[_Appearance]:
        return [
            _Appearance(by_id[s.player_id], s.position, cfg.match_minutes)
            for s in team.starters
            if s.player_id in by_id
        ]

    goals = _goals_by_player(events)
    ratings = _rate_side(home.id, _appearances(home, home_by_id), goals, home_score, away_score, rng)
    ratings += _rate_side(away.id, _appearances(away, away_by_id), goals, away_score, home_score, rng)

    return MatchResult(
        home_team_id=home.id,
        away_team_id=away.id,
        home_score=home_score,
        away_score=away_score,
        mode=MatchMode.QUICK,
        events=tuple(events),
        statistics=derive_statistics(home_str, away_str, home_score, away_score, home.id, away.id, events),
        player_ratings=tuple(ratings),
    )


# ===================================================================
# Live mode
# ===================================================================

@dataclass(frozen=True)
class LiveStep:
    """What happened at one clock step, plus the running score."""

    minute: int
    events: Tuple[MatchEvent, ...]
    home_score: int
    away_score: int


class _SideState:
    """Mutable bookkeeping for one side during a live match."""

    def __init__(self, team: Team, players: Iterable[Player]) -> None:
        self.team = team
        self.players: Dict[str, Player] = {p.id: p for p in players}
        self.on_pitch: List[LineupSlot] = list(team.starters)
        self.bench: List[LineupSlot] = list(team.bench)
        self.conditions: Dict[str, Condition] = {pid: p.condition for pid, p in self.players.items()}
        self.entered: Dict[str, int] = {s.player_id: 0 for s in team.starters}
        self.positions: Dict[str, str] = {s.player_id: s.position for s in team.starters}
        self.left: Dict[str, int] = {}
        self.yellows: Dict[str, int] = {}
        self.sent_off: List[str] = []
        self.substituted_off: List[str] = []
        self.subs_used = 0
        self.pending: List[str] = []
        self.goals = 0
        self.strength = TeamStrength()

    def slot_of(self, player_id: str) -> Optional[LineupSlot]:
        for slot in self.on_pitch:
            if slot.player_id == player_id:
                return slot
        return None

    def active(self) -> List[LineupSlot]:
        return [s for s in self.on_pitch if s.player_id in self.players]

    def live_conditions(self, minute: int) -> Dict[str, Condition]:
        out = {}
        for slot in self.active():
            p = self.players[slot.player_id]
            on_for = minute - self.entered.get(p.id, 0)
            out[p.id] = in_match_condition(self.conditions[p.id], on_for, p.stamina)
        return out

    def send_off(self, player_id: str, minute: int) -> None:
        self.on_pitch = [s for s in self.on_pitch if s.player_id != player_id]
        self.left[player_id] = minute
        self.sent_off.append(player_id)

    def substitute(self, out_id: str, in_id: str, minute: int) -> None:
        idx = next(i for i, s in enumerate(self.on_pitch) if s.player_id == out_id)
        old = self.on_pitch[idx]
        self.on_pitch[idx] = LineupSlot(in_id, old.position, old.role, old.duty)
        self.bench = [s for s in self.bench if s.player_id != in_id]
        self.entered[in_id] = minute
        self.positions[in_id] = old.position
        self.left[out_id] = minute
        self.substituted_off.append(out_id)
        self.subs_used += 1


class LiveMatch:
    """Step-by-step match for an external renderer.

    Iterate ``steps()`` to advance the clock (it resumes where it left off), query
    ``lineup_view()`` / ``suggestions()`` between steps, then call ``result()``.
    """

    def __init__(
        self,
        context: MatchContext,
        *,
        rng: random.Random | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.context = context
        self.config = config or DEFAULT_CONFIG
        self._rng = rng if rng is not None else random.Random(context.seed)
        self._home = _SideState(context.home, context.home_players)
        self._away = _SideState(context.away, context.away_players)
        self._modifier = tactic_clash(context.home.tactic, context.away.tactic, self.config)
        self._events: List[MatchEvent] = []
        self._minute = 0
        self._next_minute = 1
        self._result: Optional[MatchResult] = None
        self._refresh_strengths()
        self._kickoff = (self._home.strength, self._away.strength)

    # --- read-only state ---

    @property
    def minute(self) -> int:
        return self._minute

    @property
    def score(self) -> Tuple[int, int]:
        return self._home.goals, self._away.goals

    @property
    def finished(self) -> bool:
        return self._next_minute >= self.config.match_minutes

    @property
    def events(self) -> Tuple[MatchEvent, ...]:
        return tuple(self._events)

    def _side(self, side: str) -> _SideState:
        if side == HOME:
            return self._home
        if side == AWAY:
            return self._away
        raise ValueError(f"side must be {HOME!r} or {AWAY!r}, got {side!r}")

    def strength(self, side: str) -> TeamStrength:
        return self._side(side).strength

    def lineup_view(self, side: str) -> LineupView:
        s = self._side(side)
        return LineupView.from_slots(
            s.team.id, s.team.tactic, s.on_pitch, s.bench,
            s.players.values(), s.live_conditions(self._minute),
        )

    def remaining_substitutions(self, side: str) -> int:
        return max(0, self.config.max_substitutions - self._side(side).subs_used)

    def substituted_off(self, side: str) -> Tuple[str, ...]:
        return tuple(self._side(side).substituted_off)

    def goal_difference(self, side: str) -> int:
        home_goals, away_goals = self.score
        return home_goals - away_goals if side == HOME else away_goals - home_goals

    def suggestions(self, side: str) -> List[SubstitutionSuggestion]:
        """Advisor output for *side* at the current minute. Nothing is applied."""
        return advise(
            self._minute,
            self.lineup_view(side),
            self.goal_difference(side),
            self.remaining_substitutions(side),
            self.substituted_off(side),
            self.config,
        )

    # --- clock ---

    def steps(self) -> Iterator[LiveStep]:
        cfg = self.config
        while self._next_minute < cfg.match_minutes:
            minute = self._next_minute
            self._minute = minute
            self._refresh_strengths()
            step_events: List[MatchEvent] = []
            for side in (self._home, self._away):
                step_events.extend(self._forced_substitutions(side, minute))
            for side, opponent in ((self._home, self._away), (self._away, self._home)):
                step_events.extend(self._roll(side, opponent, minute))
            self._events.extend(step_events)
            self._next_minute = minute + cfg.minute_step
            yield LiveStep(minute, tuple(step_events), self._home.goals, self._away.goals)
        self._minute = cfg.match_minutes

    def _refresh_strengths(self) -> None:
        home_raw = lineup_strength(
            self._home.on_pitch, self._home.players.values(), self._home.live_conditions(self._minute),
        )
        away_raw = lineup_strength(
            self._away.on_pitch, self._away.players.values(), self._away.live_conditions(self._minute),
        )
        self._home.strength, self._away.strength = apply_modifier(home_raw, away_raw, self._modifier)

    def _roll(self, side: _SideState, opponent: _SideState, minute: int) -> List[MatchEvent]:
        """One roll walked through the cumulative event bands."""
        cfg = self.config
        p_goal = goal_probability(side.strength.attack, opponent.strength.defense, self._rng, cfg)
        roll = self._rng.random()

        threshold = cfg.own_goal_chance
        if roll < threshold:
            return [self._own_goal(side, opponent, minute)]
        threshold += cfg.penalty_chance
        if roll < threshold:
            return [self._penalty(side, minute)]
        threshold += cfg.yellow_card_chance
        if roll < threshold:
            return self._booking(side, minute)
        threshold += cfg.live_injury_chance
        if roll < threshold:
            return self._injury(side, minute)
        threshold += p_goal
        if roll < threshold:
            side.goals += 1
            return [Goal(side.team.id, _pick_scorer(side.on_pitch, side.players, self._rng), minute)]
        return []

    def _own_goal(self, side: _SideState, opponent: _SideState, minute: int) -> MatchEvent:
        side.goals += 1
        candidates = opponent.active()
        defenders = [s for s in candidates if s.position in DEFENSE_POSITIONS] or candidates
        culprit = self._rng.choice(defenders).player_id if defenders else None
        return OwnGoal(side.team.id, culprit, minute)

    def _penalty(self, side: _SideState, minute: int) -> MatchEvent:
        taker = _pick_scorer(side.on_pitch, side.players, self._rng)
        scored = self._rng.random() < self.config.penalty_conversion
        if scored:
            side.goals += 1
        return Penalty(side.team.id, taker, minute, scored=scored)

    def _booking(self, side: _SideState, minute: int) -> List[MatchEvent]:
        candidates = side.active()
        if not candidates:
            return []
        pid = self._rng.choice(candidates).player_id
        events: List[MatchEvent] = [YellowCard(side.team.id, pid, minute)]
        side.yellows[pid] = side.yellows.get(pid, 0) + 1
        if side.yellows[pid] >= 2:
            events.append(RedCard(side.team.id, pid, minute))
            side.send_off(pid, minute)
            side.pending = [p for p in side.pending if p != pid]
            self._refresh_strengths()
            _log.debug("minute %d: %s sent off for %s", minute, pid, side.team.id)
        return events

    def _injury(self, side: _SideState, minute: int) -> List[MatchEvent]:
        candidates = [s for s in side.active() if not side.conditions[s.player_id].is_injured]
        if not candidates:
            return []
        pid = self._rng.choice(candidates).player_id
        severity = self._rng.choices((1, 2, 3), weights=self.config.injury_severity_weights)[0]
        side.conditions[pid] = replace(side.conditions[pid], status=HealthStatus.INJURED)
        side.pending.append(pid)
        self._refresh_strengths()
        _log.debug("minute %d: %s injured (severity %d)", minute, pid, severity)
        return [Injury(side.team.id, pid, minute, severity=severity)]

    def _forced_substitutions(self, side: _SideState, minute: int) -> List[MatchEvent]:
        pending, side.pending = side.pending, []
        events: List[MatchEvent] = []
        for pid in pending:
            slot = side.slot_of(pid)
            if slot is None or side.subs_used >= self.config.max_substitutions:
                continue
            bench = LineupView.from_slots(
                side.team.id, side.team.tactic, (), side.bench, side.players.values(),
            ).bench
            replacement = pick_replacement(slot.position, bench, exclude=side.substituted_off)
            if replacement is None:
                _log.debug("minute %d: no replacement for injured %s, plays on", minute, pid)
                continue
            side.substitute(pid, replacement.player_id, minute)
            events.append(Substitution(side.team.id, pid, minute, player_in=replacement.player_id))
        if events:
            self._refresh_strengths()
        return events

    # --- final ---

    def _appearances(self, side: _SideState) -> List[_Appearance]:
        apps = []
        for pid, entered in side.entered.items():
            player = side.players.get(pid)
            if player is None:
                continue
            apps.append(
                _Appearance(
                    player=player,
                    position=side.positions[pid],
                    minutes=max(0, side.left.get(pid, self.config.match_minutes) - entered),
                    yellow_cards=side.yellows.get(pid, 0),
                    sent_off=pid in side.sent_off,
                )
            )
        return apps

    def result(self) -> MatchResult:
        """Final result; plays out any remaining steps first."""
        if self._result is not None:
            return self._result
        for _ in self.steps():
            pass

        home, away = self._home, self._away
        goals = _goals_by_player(self._events)
        ratings = _rate_side(home.team.id, self._appearances(home), goals, home.goals, away.goals, self._rng)
        ratings += _rate_side(away.team.id, self._appearances(away), goals, away.goals, home.goals, self._rng)
        home_k, away_k = self._kickoff

        self._result = MatchResult(
            home_team_id=home.team.id,
            away_team_id=away.team.id,
            home_score=home.goals,
            away_score=away.goals,
            mode=MatchMode.LIVE,
            events=tuple(self._events),
            statistics=derive_statistics(
                home_k, away_k, home.goals, away.goals, home.team.id, away.team.id, self._events,
            ),
            player_ratings=tuple(ratings),
        )
        _log.debug(
            "live %s %d-%d %s (%d events)",
            home.team.id, home.goals, away.goals, away.team.id, len(self._events),
        )
        return self._result


# ===================================================================
# Public API
# ===================================================================

def simulate(
    context: MatchContext,
    *,
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> MatchResult:
    """Simulate *context* in its mode. Same seed (or same rng state) gives the same result."""
    cfg = config or DEFAULT_CONFIG
    rng = rng if rng is not None else random.Random(context.seed)
    if context.mode == MatchMode.LIVE:
        return LiveMatch(context, rng=rng, config=cfg).result()
    result = _simulate_quick(context, rng, cfg)
    _log.debug(
        "quick %s %d-%d %s",
        result.home_team_id, result.home_score, result.away_score, result.away_team_id,
    )
    return result


def simulate_match(
    home: Team,
    away: Team,
    home_players: Iterable[Player] = (),
    away_players: Iterable[Player] = (),
    mode: MatchMode | str = MatchMode.QUICK,
    *,
    seed: int | None = None,
    rng: random.Random | None = None,
    config: EngineConfig | None = None,
) -> MatchResult:
    """Simulate a single match between two teams.

    Parameters
    ----------
    home, away : Team
        Lineups and tactics. Slots reference players by id.
    home_players, away_players : iterable of Player
        Player snapshots for each side; unknown slot ids are ignored.
    mode : MatchMode | str
        ``"Quick"`` or ``"Live"``. Anything else raises ValueError.
    seed : int | None
        RNG seed for reproducible results (ignored when *rng* is given).
    rng : random.Random | None
        Caller-owned generator.
    config : EngineConfig | None
        Tuning; ``DEFAULT_CONFIG`` when omitted.

    Returns
    -------
    MatchResult
    """
    context = MatchContext(
        home=home,
        away=away,
        home_players=tuple(home_players),
        away_players=tuple(away_players),
        mode=mode,
        seed=seed,
    )
    return simulate(context, rng=rng, config=config)
