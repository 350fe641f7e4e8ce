"""
Position, attribute and formation constants for the matchday engine.
All player attributes share one 0-200 scale; condition values are 0-100 percentages.
"""
from typing import Dict, Tuple

ATTRIBUTE_MAX = 200
CONDITION_MAX = 100

# Positions (same list everywhere; a player has one natural position plus optional secondaries)
POSITIONS = [
    "GK",
    "CB", "LB", "RB", "WB",
    "DM", "CM", "AM",
    "LW", "RW", "ST", "CF",
]

# Strength buckets used by the team strength aggregator
ATTACK_POSITIONS = ("ST", "CF", "LW", "RW")
DEFENSE_POSITIONS = ("GK", "CB", "LB", "RB", "WB")
MIDFIELD_POSITIONS = ("DM", "CM", "AM")

# Where goals come from when a scorer has to be picked
SCORING_POSITIONS = ("ST", "CF", "LW", "RW", "AM")

# Substitution advisor: which starters count as "defensive" / "attacking" for tactical swaps
TACTICAL_DEFENSIVE_POSITIONS = ("CB", "LB", "RB", "WB", "DM")
TACTICAL_ATTACKING_POSITIONS = ("ST", "CF", "AM", "LW", "RW")

# Attribute groups (0-200)
TECHNICAL_ATTRIBUTES = [
    "crossing", "dribbling", "finishing", "heading",
    "marking", "passing", "tackling", "technique",
]
MENTAL_ATTRIBUTES = [
    "anticipation", "composure", "decisions", "off_the_ball",
    "positioning", "teamwork", "vision", "work_rate",
]
PHYSICAL_ATTRIBUTES = [
    "acceleration", "agility", "balance", "pace", "stamina", "strength",
]
GOALKEEPING_ATTRIBUTES = [
    "aerial_reach", "handling", "kicking", "one_on_ones", "reflexes",
]
ALL_ATTRIBUTES = (
    TECHNICAL_ATTRIBUTES + MENTAL_ATTRIBUTES + PHYSICAL_ATTRIBUTES + GOALKEEPING_ATTRIBUTES
)

# Position suitability: rating multiplier by how well a player fits the slot
SUITABILITY_NATURAL = 1.00
SUITABILITY_SECONDARY = 0.90
SUITABILITY_COMPATIBLE = 0.75
SUITABILITY_INCOMPATIBLE = 0.50

# Natural position -> positions it can cover without being a listed secondary.
# GK is compatible with nothing and nothing is compatible with GK.
POSITION_COMPATIBILITY: Dict[str, Tuple[str, ...]] = {
    "GK": (),
    "CB": ("DM",),
    "LB": ("RB", "WB"),
    "RB": ("LB", "WB"),
    "WB": ("LB", "RB"),
    "DM": ("CM", "CB"),
    "CM": ("DM", "AM"),
    "AM": ("CM", "LW", "RW"),
    "LW": ("RW", "AM", "ST", "CF"),
    "RW": ("LW", "AM", "ST", "CF"),
    "ST": ("CF",),
    "CF": ("ST", "AM"),
}

# Formation -> the eleven positions it fields (GK first)
FORMATIONS: Dict[str, Tuple[str, ...]] = {
    "4-4-2": ("GK", "LB", "CB", "CB", "RB", "LW", "CM", "CM", "RW", "ST", "ST"),
    "4-3-3": ("GK", "LB", "CB", "CB", "RB", "CM", "CM", "CM", "LW", "ST", "RW"),
    "4-2-3-1": ("GK", "LB", "CB", "CB", "RB", "DM", "DM", "LW", "AM", "RW", "ST"),
    "4-1-4-1": ("GK", "LB", "CB", "CB", "RB", "DM", "LW", "CM", "CM", "RW", "ST"),
    "4-5-1": ("GK", "LB", "CB", "CB", "RB", "DM", "CM", "CM", "LW", "RW", "ST"),
    "3-5-2": ("GK", "CB", "CB", "CB", "WB", "DM", "CM", "DM", "WB", "ST", "ST"),
    "3-4-2-1": ("GK", "CB", "CB", "CB", "LW", "CM", "CM", "RW", "AM", "AM", "ST"),
    "5-3-2": ("GK", "WB", "CB", "CB", "CB", "WB", "DM", "CM", "DM", "ST", "ST"),
    "5-2-2-1": ("GK", "WB", "CB", "CB", "CB", "WB", "DM", "DM", "AM", "AM", "ST"),
}

# Player roles (FM-style) -> positions the role suits
ROLE_POSITIONS: Dict[str, Tuple[str, ...]] = {
    "Goalkeeper": ("GK",),
    "SweeperKeeper": ("GK",),
    "CentralDefender": ("CB",),
    "BallPlayingDefender": ("CB",),
    "NoNonsenseDefender": ("CB",),
    "Libero": ("CB",),
    "FullBack": ("LB", "RB", "WB"),
    "WingBack": ("LB", "RB", "WB"),
    "InvertedWingBack": ("LB", "RB", "WB"),
    "DefensiveMidfielder": ("DM", "CM"),
    "BallWinningMidfielder": ("DM", "CM"),
    "DeepLyingPlaymaker": ("DM", "CM"),
    "CentralMidfielder": ("CM", "DM", "AM"),
    "BoxToBox": ("CM",),
    "AdvancedPlaymaker": ("AM", "CM"),
    "Winger": ("LW", "RW"),
    "InsideForward": ("LW", "RW"),
    "AdvancedForward": ("ST", "CF"),
    "Poacher": ("ST", "CF"),
    "TargetMan": ("ST", "CF"),
    "FalseNine": ("ST", "CF"),
}

DUTIES = ["Attack", "Support", "Defend"]

# Default role per position when a lineup slot does not name one
DEFAULT_ROLE_FOR_POSITION: Dict[str, str] = {
    "GK": "Goalkeeper",
    "CB": "CentralDefender",
    "LB": "FullBack", "RB": "FullBack", "WB": "WingBack",
    "DM": "DefensiveMidfielder",
    "CM": "CentralMidfielder",
    "AM": "AdvancedPlaymaker",
    "LW": "Winger", "RW": "Winger",
    "ST": "AdvancedForward", "CF": "AdvancedForward",
}
