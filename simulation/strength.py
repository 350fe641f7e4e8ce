"""
Team strength aggregator.

Reduces a lineup to three scalars: attack, defense and midfield, each the mean effective
ability of the starters whose assigned slot falls in that bucket. An empty bucket is 0,
so a short-handed or empty lineup still produces a (lopsided) strength instead of failing.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from models.constants import ATTACK_POSITIONS, DEFENSE_POSITIONS, MIDFIELD_POSITIONS
from models.player import Condition, Player, position_rating
from models.team import LineupSlot, Team

from .condition import effective_ability


@dataclass(frozen=True)
class TeamStrength:
    """Condensed strength for one side (effective-ability scale)."""

    attack: float = 0.0
    defense: float = 0.0
    midfield: float = 0.0

    def scaled(self, attack_mult: float, defense_mult: float) -> "TeamStrength":
        return TeamStrength(
            attack=max(0.0, self.attack * attack_mult),
            defense=max(0.0, self.defense * defense_mult),
            midfield=self.midfield,
        )


def _safe_mean(values: list[float], default: float = 0.0) -> float:
    return sum(values) / len(values) if values else default


def bucket_of(position: str) -> str | None:
    if position in ATTACK_POSITIONS:
        return "attack"
    if position in DEFENSE_POSITIONS:
        return "defense"
    if position in MIDFIELD_POSITIONS:
        return "midfield"
    return None


def strength_from_abilities(entries: Iterable[tuple[str, float]]) -> TeamStrength:
    """Aggregate already-resolved (slot position, effective ability) pairs."""
    buckets: dict[str, list[float]] = {"attack": [], "defense": [], "midfield": []}
    for position, ability in entries:
        bucket = bucket_of(position)
        if bucket is not None:
            buckets[bucket].append(float(ability))
    return TeamStrength(
        attack=_safe_mean(buckets["attack"]),
        defense=_safe_mean(buckets["defense"]),
        midfield=_safe_mean(buckets["midfield"]),
    )


def slot_ability(slot: LineupSlot, player: Player, condition: Condition | None = None) -> int:
    """Effective ability of *player* in *slot*: position fit first, then condition."""
    cond = player.condition if condition is None else condition
    return effective_ability(position_rating(player, slot.position), cond)


def lineup_strength(
    slots: Sequence[LineupSlot],
    players: Iterable[Player],
    conditions: Mapping[str, Condition] | None = None,
) -> TeamStrength:
    """Strength of *slots*; *conditions* overrides a player's stored condition by id."""
    by_id = {p.id: p for p in players}
    conditions = conditions or {}
    entries = []
    for slot in slots:
        player = by_id.get(slot.player_id)
        if player is None:
            continue
        entries.append((slot.position, slot_ability(slot, player, conditions.get(player.id))))
    return strength_from_abilities(entries)


def team_strength(
    team: Team,
    players: Iterable[Player],
    conditions: Mapping[str, Condition] | None = None,
) -> TeamStrength:
    """Strength of *team*'s starting lineup."""
    return lineup_strength(team.starters, players, conditions)
