"""
Substitution advisor.

Given a frozen snapshot of one side's lineup, recommends substitutions ranked by urgency.
It never executes anything: the caller (or the live engine) decides what to act on.

Rules, in discovery order:
  * injured starter                              -> Critical
  * match fitness below threshold late on        -> High
  * fatigue above threshold late on              -> Medium
  * trailing / leading by a clear margin late on -> Low (tactical swap)

A starter gets at most one suggestion (the most urgent) and a bench player is proposed
at most once. Output is truncated to the remaining substitution quota.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from models.constants import TACTICAL_ATTACKING_POSITIONS, TACTICAL_DEFENSIVE_POSITIONS
from models.player import Condition, Player, can_play, position_rating
from models.suggestion import SubstitutionReason, SubstitutionSuggestion, SuggestionUrgency
from models.tactics import Tactic
from models.team import LineupSlot, Team

from .config import DEFAULT_CONFIG, EngineConfig

_log = logging.getLogger("matchday.substitution")


# ===================================================================
# Read-only lineup snapshot
# ===================================================================

@dataclass(frozen=True)
class PlayerView:
    """Frozen copy of what the advisor may look at for one player.

    ``position`` is the natural position, so ``can_play`` / ``position_rating``
    accept a view the same way they accept a Player.
    """

    player_id: str
    name: str
    position: str
    slot_position: str
    secondary_positions: Tuple[str, ...] = ()
    current_ability: int = 100
    condition: Condition = Condition()

    @classmethod
    def from_player(
        cls,
        player: Player,
        slot: LineupSlot,
        condition: Optional[Condition] = None,
    ) -> "PlayerView":
        return cls(
            player_id=player.id,
            name=player.name,
            position=player.position,
            slot_position=slot.position,
            secondary_positions=tuple(player.secondary_positions),
            current_ability=player.current_ability,
            condition=player.condition if condition is None else condition,
        )


@dataclass(frozen=True)
class LineupView:
    """Snapshot of one side: tactic, players on the pitch and unused bench."""

    team_id: str
    tactic: Tactic
    starters: Tuple[PlayerView, ...] = ()
    bench: Tuple[PlayerView, ...] = ()

    @classmethod
    def from_team(
        cls,
        team: Team,
        players: Iterable[Player],
        conditions: Optional[Mapping[str, Condition]] = None,
    ) -> "LineupView":
        return cls.from_slots(team.id, team.tactic, team.starters, team.bench, players, conditions)

    @classmethod
    def from_slots(
        cls,
        team_id: str,
        tactic: Tactic,
        starters: Sequence[LineupSlot],
        bench: Sequence[LineupSlot],
        players: Iterable[Player],
        conditions: Optional[Mapping[str, Condition]] = None,
    ) -> "LineupView":
        by_id = {p.id: p for p in players}
        conditions = conditions or {}

        def _views(slots: Sequence[LineupSlot]) -> Tuple[PlayerView, ...]:
            return tuple(
                PlayerView.from_player(by_id[s.player_id], s, conditions.get(s.player_id))
                for s in slots
                if s.player_id in by_id
            )

        return cls(team_id=team_id, tactic=tactic, starters=_views(starters), bench=_views(bench))


# ===================================================================
# Replacement selection
# ===================================================================

def pick_replacement(
    position: str,
    bench: Sequence[PlayerView],
    exclude: Iterable[str] = (),
    min_fitness: int = 0,
) -> Optional[PlayerView]:
    """Best eligible bench option for *position*; ties keep bench order."""
    excluded = set(exclude)
    best: Optional[PlayerView] = None
    best_rating = -1
    for candidate in bench:
        if candidate.player_id in excluded:
            continue
        if not candidate.condition.is_available:
            continue
        if candidate.condition.match_fitness < min_fitness:
            continue
        if not can_play(candidate, position):
            continue
        rating = position_rating(candidate, position)
        if rating > best_rating:
            best, best_rating = candidate, rating
    return best


def _pick_by_natural_position(
    positions: Sequence[str],
    bench: Sequence[PlayerView],
    exclude: Iterable[str],
    min_fitness: int,
) -> Optional[PlayerView]:
    excluded = set(exclude)
    best: Optional[PlayerView] = None
    for candidate in bench:
        if candidate.player_id in excluded or candidate.position not in positions:
            continue
        if not candidate.condition.is_available or candidate.condition.match_fitness < min_fitness:
            continue
        if best is None or candidate.current_ability > best.current_ability:
            best = candidate
    return best


# ===================================================================
# Advisor
# ===================================================================

class SubstitutionAdvisor:
    """Stateless rule evaluator; holds only its tuning."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def suggest(
        self,
        minute: int,
        lineup: LineupView,
        goal_difference: int,
        remaining_quota: int,
        substituted_off: Iterable[str] = (),
    ) -> List[SubstitutionSuggestion]:
        if remaining_quota <= 0:
            return []

        cfg = self.config
        gone = set(substituted_off)
        proposed_in: set[str] = set()
        covered_out: set[str] = set()
        suggestions: List[SubstitutionSuggestion] = []

        def _propose(
            starter: PlayerView,
            replacement: Optional[PlayerView],
            reason: SubstitutionReason,
            urgency: SuggestionUrgency,
            detail: Optional[int] = None,
        ) -> None:
            if replacement is None:
                return
            suggestions.append(
                SubstitutionSuggestion(
                    player_out_id=starter.player_id,
                    player_in_id=replacement.player_id,
                    reason=reason,
                    urgency=urgency,
                    player_out_name=starter.name,
                    player_in_name=replacement.name,
                    detail=detail,
                )
            )
            covered_out.add(starter.player_id)
            proposed_in.add(replacement.player_id)

        on_pitch = [s for s in lineup.starters if s.player_id not in gone]

        def _replacement_for(starter: PlayerView) -> Optional[PlayerView]:
            return pick_replacement(
                starter.slot_position,
                lineup.bench,
                exclude=gone | proposed_in,
                min_fitness=cfg.replacement_min_fitness,
            )

        # --- Condition rules, most urgent first ---
        for starter in on_pitch:
            if starter.condition.is_injured:
                _propose(starter, _replacement_for(starter),
                         SubstitutionReason.INJURED, SuggestionUrgency.CRITICAL)

        if minute > cfg.low_fitness_after_minute:
            for starter in on_pitch:
                fitness = starter.condition.match_fitness
                if starter.player_id in covered_out or fitness >= cfg.low_fitness_threshold:
                    continue
                _propose(starter, _replacement_for(starter),
                         SubstitutionReason.LOW_FITNESS, SuggestionUrgency.HIGH, fitness)

        if minute > cfg.high_fatigue_after_minute:
            for starter in on_pitch:
                fatigue = starter.condition.fatigue
                if starter.player_id in covered_out or fatigue <= cfg.high_fatigue_threshold:
                    continue
                _propose(starter, _replacement_for(starter),
                         SubstitutionReason.HIGH_FATIGUE, SuggestionUrgency.MEDIUM, fatigue)

        # --- Tactical swap ---
        if len(suggestions) < remaining_quota:
            margin = cfg.tactical_goal_margin
            if minute > cfg.trailing_after_minute and goal_difference <= -margin:
                self._tactical(on_pitch, lineup.bench, TACTICAL_DEFENSIVE_POSITIONS,
                               TACTICAL_ATTACKING_POSITIONS, SubstitutionReason.TACTICAL_ATTACKING,
                               covered_out, gone | proposed_in, _propose)
            elif minute > cfg.leading_after_minute and goal_difference >= margin:
                self._tactical(on_pitch, lineup.bench, TACTICAL_ATTACKING_POSITIONS,
                               TACTICAL_DEFENSIVE_POSITIONS, SubstitutionReason.TACTICAL_DEFENSIVE,
                               covered_out, gone | proposed_in, _propose)

        # sorted() is stable, so equal urgencies keep discovery order
        ranked = sorted(suggestions, key=lambda s: s.urgency, reverse=True)[:remaining_quota]
        if ranked:
            _log.debug(
                "minute %d, %s: %d suggestion(s), top %s -> %s (%s)",
                minute, lineup.team_id, len(ranked),
                ranked[0].player_out_id, ranked[0].player_in_id, ranked[0].reason.value,
            )
        return ranked

    def _tactical(
        self,
        on_pitch: Sequence[PlayerView],
        bench: Sequence[PlayerView],
        out_positions: Tuple[str, ...],
        in_positions: Tuple[str, ...],
        reason: SubstitutionReason,
        covered_out: AbstractSet[str],
        exclude: AbstractSet[str],
        propose: Callable[[PlayerView, Optional[PlayerView], SubstitutionReason, SuggestionUrgency], None],
    ) -> None:
        """Swap the most fatigued starter in *out_positions* for a bench player from *in_positions*."""
        candidates = [
            s for s in on_pitch
            if s.slot_position in out_positions and s.player_id not in covered_out
        ]
        if not candidates:
            return
        # most fatigued first; ties keep lineup order
        starter = max(candidates, key=lambda s: s.condition.fatigue)
        replacement = _pick_by_natural_position(
            in_positions, bench, exclude, self.config.replacement_min_fitness,
        )
        propose(starter, replacement, reason, SuggestionUrgency.LOW)


def advise(
    minute: int,
    lineup: LineupView,
    goal_difference: int,
    remaining_quota: int,
    substituted_off: Iterable[str] = (),
    config: Optional[EngineConfig] = None,
) -> List[SubstitutionSuggestion]:
    """Module-level shortcut for ``SubstitutionAdvisor(config).suggest(...)``."""
    return SubstitutionAdvisor(config).suggest(
        minute, lineup, goal_difference, remaining_quota, substituted_off,
    )
