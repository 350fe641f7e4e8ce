"""
Integration tests for the match engine.

Builds two full squads (eleven starters plus a bench), simulates quick and live
matches, and validates internal consistency of the result: score vs goal events,
clock, statistics, minutes played and substitution quota.
"""
import random

import pytest

from models.match_result import (
    Goal,
    Injury,
    MatchContext,
    MatchMode,
    MatchResult,
    RedCard,
    Substitution,
    YellowCard,
)
from models.player import Player
from models.tactics import Formation, Tactic
from models.team import LineupSlot, Team
from simulation.config import EngineConfig
from simulation.engine import (
    LiveMatch,
    derive_statistics,
    goal_probability,
    quick_score,
    simulate,
    simulate_match,
)
from simulation.strength import TeamStrength, team_strength

LIVE_MINUTES = set(range(1, 90, 2))
BENCH_POSITIONS = ("GK", "CB", "LB", "DM", "CM", "LW", "ST")

def make_player(pid: str, position: str, ability: int = 100, **kwargs) -> Player:
    return Player(
        id=pid,
        name=pid.upper(),
        age=kwargs.pop("age", 25),
        position=position,
        current_ability=ability,
        potential_ability=max(ability, 120),
        **kwargs,
    )

def make_team(prefix: str, ability: int = 100, tactic: Tactic | None = None):
    """Return (team, players) with a 4-4-2 (or the tactic's formation) and a seven-man bench."""
    tactic = tactic or Tactic(formation=Formation.FOUR_FOUR_TWO)
    starters = [make_player(f"{prefix}{i}", pos, ability) for i, pos in enumerate(tactic.formation.positions)]
    bench = [make_player(f"{prefix}b{i}", pos, ability) for i, pos in enumerate(BENCH_POSITIONS)]
    team = Team(
        id=prefix,
        name=f"{prefix.title()} FC",
        starters=[LineupSlot(p.id, p.position) for p in starters],
        bench=[LineupSlot(p.id, p.position) for p in bench],
        tactic=tactic,
    )
    return team, starters + bench

def make_context(mode=MatchMode.QUICK, seed=7, home_ability=100, away_ability=100) -> MatchContext:
    home, home_players = make_team("home", home_ability)
    away, away_players = make_team("away", away_ability)
    return MatchContext(home, away, home_players, away_players, mode=mode, seed=seed)

def goals_for(result: MatchResult, team_id: str) -> int:
    return sum(1 for e in result.events if e.is_goal and e.team == team_id)

# ---------------------------------------------------------------------------
# Goal model
# ---------------------------------------------------------------------------

def test_goal_probability_is_clamped():
    rng = random.Random(1)
    for attack, defense in [(0, 230), (230, 0), (100, 100), (0, 0)]:
        for _ in range(200):
            p = goal_probability(attack, defense, rng)
            assert 0.005 <= p <= 0.10

def test_quick_kernel_is_symmetric_for_equal_sides():
    rng = random.Random(2024)
    even = TeamStrength(attack=100, defense=100, midfield=100)
    trials = 10_000
    home_goals = away_goals = home_wins = away_wins = 0
    for _ in range(trials):
        h, a = quick_score(even, even, rng)
        home_goals += h
        away_goals += a
        home_wins += h > a
        away_wins += a > h
    assert abs(home_goals - away_goals) / trials < 0.08
    assert abs(home_wins - away_wins) / trials < 0.03

def test_stronger_side_wins_more_often():
    rng = random.Random(99)
    strong = TeamStrength(attack=150, defense=120, midfield=100)
    weak = TeamStrength(attack=100, defense=100, midfield=100)
    strong_goals = weak_goals = strong_wins = weak_wins = 0
    for _ in range(1000):
        h, a = quick_score(strong, weak, rng)
        strong_goals += h
        weak_goals += a
        strong_wins += h > a
        weak_wins += a > h
    assert strong_goals / 1000 > weak_goals / 1000 + 0.1
    assert strong_wins > weak_wins

# ---------------------------------------------------------------------------
# Quick mode
# ---------------------------------------------------------------------------

def test_quick_match_is_internally_consistent():
    ctx = make_context(MatchMode.QUICK, seed=123)
    result = simulate(ctx)

    assert result.mode == MatchMode.QUICK
    assert result.home_score == goals_for(result, "home")
    assert result.away_score == goals_for(result, "away")
    assert all(isinstance(e, Goal) for e in result.events)
    assert all(e.minute in LIVE_MINUTES for e in result.events)
    assert len(result.player_ratings) == 22
    for r in result.player_ratings:
        assert r.minutes_played == 90
        assert 1.0 <= r.rating <= 10.0
    scored = sum(r.goals for r in result.player_ratings)
    assert scored == result.home_score + result.away_score

def test_quick_scorers_come_from_the_scoring_side():
    ctx = make_context(MatchMode.QUICK, seed=5)
    home_ids = {s.player_id for s in ctx.home.starters}
    for seed in range(20):
        result = simulate(ctx, rng=random.Random(seed))
        for e in result.events:
            if e.team == "home":
                assert e.player_id in home_ids
            else:
                assert e.player_id not in home_ids

def test_same_seed_same_result():
    for mode in (MatchMode.QUICK, MatchMode.LIVE):
        first = simulate(make_context(mode, seed=42))
        second = simulate(make_context(mode, seed=42))
        assert first.to_dict() == second.to_dict()

def test_simulate_match_wrapper_accepts_mode_string():
    home, home_players = make_team("home")
    away, away_players = make_team("away")
    result = simulate_match(home, away, home_players, away_players, "Live", seed=3)
    assert result.mode == MatchMode.LIVE

def test_unknown_mode_is_rejected():
    home, home_players = make_team("home")
    away, away_players = make_team("away")
    with pytest.raises(ValueError):
        simulate_match(home, away, home_players, away_players, "Turbo", seed=3)

def test_empty_lineups_still_produce_a_result():
    empty_home = Team(id="h", name="Nobody")
    empty_away = Team(id="a", name="No One")
    for mode in (MatchMode.QUICK, MatchMode.LIVE):
        result = simulate_match(empty_home, empty_away, mode=mode, seed=11)
        assert result.home_score >= 0 and result.away_score >= 0
        assert result.player_ratings == ()
        assert all(e.player_id is None for e in result.events)
        assert result.statistics.home_possession == 50.0

# ---------------------------------------------------------------------------
# Live mode
# ---------------------------------------------------------------------------

def test_live_events_stay_on_the_clock():
    for seed in range(25):
        result = simulate(make_context(MatchMode.LIVE, seed=seed))
        assert {e.minute for e in result.events} <= LIVE_MINUTES
        assert result.home_score == goals_for(result, "home")
        assert result.away_score == goals_for(result, "away")

def test_live_steps_walk_the_clock():
    match = LiveMatch(make_context(MatchMode.LIVE, seed=8))
    minutes = [step.minute for step in match.steps()]
    assert minutes == list(range(1, 90, 2))
    assert match.finished
    result = match.result()
    assert result is match.result()
    assert (result.home_score, result.away_score) == match.score

def test_live_step_scores_are_running_totals():
    match = LiveMatch(make_context(MatchMode.LIVE, seed=31))
    home = away = 0
    for step in match.steps():
        home += sum(1 for e in step.events if e.is_goal and e.team == "home")
        away += sum(1 for e in step.events if e.is_goal and e.team == "away")
        assert (step.home_score, step.away_score) == (home, away)

def test_result_plays_out_remaining_steps():
    match = LiveMatch(make_context(MatchMode.LIVE, seed=4))
    steps = match.steps()
    next(steps)
    next(steps)
    result = match.result()
    assert match.finished
    assert {e.minute for e in result.events} <= LIVE_MINUTES

def test_lineup_view_between_steps():
    match = LiveMatch(make_context(MatchMode.LIVE, seed=4))
    view = match.lineup_view("home")
    assert view.team_id == "home"
    assert len(view.starters) == 11
    assert len(view.bench) == len(BENCH_POSITIONS)
    with pytest.raises(ValueError):
        match.lineup_view("middle")

def test_live_suggestions_respect_quota():
    match = LiveMatch(make_context(MatchMode.LIVE, seed=4))
    for step in match.steps():
        for side in ("home", "away"):
            assert len(match.suggestions(side)) <= match.remaining_substitutions(side)

QUIET = EngineConfig(own_goal_chance=0.0, penalty_chance=0.0, yellow_card_chance=0.0, live_injury_chance=0.0)

def test_live_strength_follows_in_match_fatigue():
    match = LiveMatch(make_context(MatchMode.LIVE, seed=6), config=QUIET)
    kickoff = match.strength("home")
    for step in match.steps():
        if step.minute >= 81:
            break
    late = match.strength("home")
    assert late.attack < kickoff.attack
    assert late.defense < kickoff.defense
    assert match.lineup_view("home").starters[0].condition.fatigue > 0

EVENTFUL = EngineConfig(yellow_card_chance=0.25, live_injury_chance=0.15)

def test_second_yellow_sends_player_off():
    for seed in range(10):
        result = simulate(make_context(MatchMode.LIVE, seed=seed), config=EVENTFUL)
        yellows: dict = {}
        for e in result.events:
            if isinstance(e, YellowCard):
                yellows[e.player_id] = yellows.get(e.player_id, 0) + 1
        for e in result.events:
            if isinstance(e, RedCard):
                assert yellows[e.player_id] == 2
        minutes = result.minutes_played()
        for e in result.events:
            if isinstance(e, RedCard):
                assert minutes[e.player_id] <= e.minute
                later = [x for x in result.events if x.player_id == e.player_id and x.minute > e.minute]
                assert later == []

def test_forced_substitutions_follow_injuries_within_quota():
    saw_substitution = False
    for seed in range(10):
        result = simulate(make_context(MatchMode.LIVE, seed=seed), config=EVENTFUL)
        injured_at = {}
        for e in result.events:
            if isinstance(e, Injury):
                injured_at.setdefault(e.player_id, e.minute)
        for team_id in ("home", "away"):
            subs = [e for e in result.events if isinstance(e, Substitution) and e.team == team_id]
            assert len(subs) <= 3
            for sub in subs:
                saw_substitution = True
                assert sub.player_id in injured_at
                assert sub.minute == injured_at[sub.player_id] + 2
        minutes = result.minutes_played()
        for e in result.events:
            if isinstance(e, Substitution):
                assert minutes[e.player_id] <= e.minute
                assert minutes[e.player_in] <= 90 - e.minute
    assert saw_substitution

def test_no_substitutions_when_quota_is_zero():
    cfg = EngineConfig(live_injury_chance=0.2, max_substitutions=0)
    result = simulate(make_context(MatchMode.LIVE, seed=2), config=cfg)
    assert not any(isinstance(e, Substitution) for e in result.events)

# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def test_statistics_are_consistent():
    for seed in range(10):
        for mode in (MatchMode.QUICK, MatchMode.LIVE):
            result = simulate(make_context(mode, seed=seed))
            s = result.statistics
            assert s.home_possession + s.away_possession == pytest.approx(100.0)
            assert 25.0 <= s.home_possession <= 75.0
            assert result.home_score <= s.home_shots_on_target <= s.home_shots
            assert result.away_score <= s.away_shots_on_target <= s.away_shots
            assert s.home_yellow_cards == sum(
                1 for e in result.events if isinstance(e, YellowCard) and e.team == "home"
            )

def test_stronger_attack_has_more_of_the_ball():
    home, home_players = make_team("home", 160)
    away, away_players = make_team("away", 90)
    result = simulate_match(home, away, home_players, away_players, seed=1)
    assert result.statistics.home_possession > 50.0
    assert result.statistics.home_shots > result.statistics.away_shots

def test_shots_grow_with_attack_share():
    even = TeamStrength(attack=100, defense=100, midfield=100)
    stronger = TeamStrength(attack=150, defense=100, midfield=100)
    base = derive_statistics(even, even, 0, 0, "h", "a")
    more = derive_statistics(stronger, even, 0, 0, "h", "a")
    assert base.home_possession == 50.0
    assert more.home_shots >= base.home_shots
    assert more.away_shots <= base.away_shots

def test_possession_is_clamped():
    huge = TeamStrength(attack=200, defense=100, midfield=100)
    nothing = TeamStrength()
    stats = derive_statistics(huge, nothing, 9, 0, "h", "a")
    assert stats.home_possession == 75.0
    assert stats.away_possession == 25.0
    assert stats.home_shots >= 9

# ---------------------------------------------------------------------------
# Strength
# ---------------------------------------------------------------------------

def test_team_strength_buckets():
    home, players = make_team("home", 120)
    s = team_strength(home, players)
    assert s.attack == pytest.approx(120 * 0.975, abs=1)
    assert s.defense > 0 and s.midfield > 0

def test_empty_bucket_is_zero():
    player = make_player("gk", "GK", 150)
    team = Team(id="t", starters=[LineupSlot("gk", "GK")])
    s = team_strength(team, [player])
    assert s.attack == 0.0
    assert s.midfield == 0.0
    assert s.defense > 0

def test_out_of_position_player_is_weaker():
    striker = make_player("st", "ST", 150)
    natural = team_strength(Team(id="t", starters=[LineupSlot("st", "ST")]), [striker])
    misplaced = team_strength(Team(id="t", starters=[LineupSlot("st", "CB")]), [striker])
    assert misplaced.defense < natural.attack
