"""
Match result DTOs for the matchday engine.

MatchEvent and its variants are the timeline entries (goals, cards, injuries, substitutions).
MatchStatistics holds the derived team-level numbers.
PlayerMatchRating holds one player's rating line for a single match.
MatchResult wraps all of the above and is frozen once produced.
"""
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from .player import Player
from .team import Team


class MatchMode(str, Enum):
    QUICK = "Quick"
    LIVE = "Live"


@dataclass(frozen=True)
class MatchEvent:
    """Base timeline entry. ``team`` is the side the event belongs to (for goals: credited to)."""

    team: str
    player_id: Optional[str]
    minute: int

    kind = "Event"

    @property
    def is_goal(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"kind": self.kind}
        for f in fields(self):
            d[f.name] = getattr(self, f.name)
        return d


@dataclass(frozen=True)
class Goal(MatchEvent):
    kind = "Goal"

    @property
    def is_goal(self) -> bool:
        return True


@dataclass(frozen=True)
class OwnGoal(MatchEvent):
    """Credited to ``team``; ``player_id`` belongs to the other side."""

    kind = "OwnGoal"

    @property
    def is_goal(self) -> bool:
        return True


@dataclass(frozen=True)
class Penalty(MatchEvent):
    scored: bool = True

    kind = "Penalty"

    @property
    def is_goal(self) -> bool:
        return self.scored


@dataclass(frozen=True)
class YellowCard(MatchEvent):
    kind = "YellowCard"


@dataclass(frozen=True)
class RedCard(MatchEvent):
    kind = "RedCard"


@dataclass(frozen=True)
class Injury(MatchEvent):
    severity: int = 1  # 1 minor .. 3 severe

    kind = "Injury"


@dataclass(frozen=True)
class Substitution(MatchEvent):
    """``player_id`` leaves, ``player_in`` comes on."""

    player_in: str = ""

    kind = "Substitution"


@dataclass(frozen=True)
class MatchContext:
    """Everything one simulation needs: both teams, their player snapshots and the mode."""

    home: Team
    away: Team
    home_players: Tuple[Player, ...] = ()
    away_players: Tuple[Player, ...] = ()
    mode: MatchMode = MatchMode.QUICK
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", MatchMode(self.mode))
        object.__setattr__(self, "home_players", tuple(self.home_players))
        object.__setattr__(self, "away_players", tuple(self.away_players))


@dataclass(frozen=True)
class MatchStatistics:
    """Team-level numbers derived after the score is known."""

    home_possession: float = 50.0
    away_possession: float = 50.0
    home_shots: int = 0
    away_shots: int = 0
    home_shots_on_target: int = 0
    away_shots_on_target: int = 0
    home_corners: int = 0
    away_corners: int = 0
    home_yellow_cards: int = 0
    away_yellow_cards: int = 0
    home_red_cards: int = 0
    away_red_cards: int = 0

    def home_shot_accuracy(self) -> float:
        return 100.0 * self.home_shots_on_target / self.home_shots if self.home_shots else 0.0

    def away_shot_accuracy(self) -> float:
        return 100.0 * self.away_shots_on_target / self.away_shots if self.away_shots else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PlayerMatchRating:
    """One player's line for a single match."""

    player_id: str
    team_id: str
    name: str = ""
    position: str = ""
    rating: float = 6.0
    minutes_played: int = 0
    goals: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class MatchResult:
    """Full result of a simulated match. Frozen; events and ratings are tuples."""

    home_team_id: str
    away_team_id: str
    home_score: int = 0
    away_score: int = 0
    mode: MatchMode = MatchMode.QUICK
    events: Tuple[MatchEvent, ...] = ()
    statistics: MatchStatistics = field(default_factory=MatchStatistics)
    player_ratings: Tuple[PlayerMatchRating, ...] = ()

    def home_won(self) -> bool:
        return self.home_score > self.away_score

    def away_won(self) -> bool:
        return self.away_score > self.home_score

    def is_draw(self) -> bool:
        return self.home_score == self.away_score

    def winner(self) -> Optional[str]:
        if self.home_won():
            return self.home_team_id
        if self.away_won():
            return self.away_team_id
        return None

    def goal_difference_for(self, team_id: str) -> int:
        diff = self.home_score - self.away_score
        return diff if team_id == self.home_team_id else -diff

    def minutes_played(self) -> Dict[str, int]:
        return {r.player_id: r.minutes_played for r in self.player_ratings}

    def sent_off(self) -> List[str]:
        return [e.player_id for e in self.events if isinstance(e, RedCard) and e.player_id]

    def man_of_the_match(self) -> Optional[PlayerMatchRating]:
        if not self.player_ratings:
            return None
        return max(self.player_ratings, key=lambda r: r.rating)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "mode": self.mode.value,
            "events": [e.to_dict() for e in self.events],
            "statistics": self.statistics.to_dict(),
            "player_ratings": [r.to_dict() for r in self.player_ratings],
        }
