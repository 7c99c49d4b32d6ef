"""Group standings and knockout draw generation."""

from .draw import DrawReport, Matchup, draw, generate_matchups, has_group_structure
from .standings import GroupStanding, QualifiedTeam, compute_standings, qualify

__all__ = [
    "DrawReport",
    "GroupStanding",
    "Matchup",
    "QualifiedTeam",
    "compute_standings",
    "draw",
    "generate_matchups",
    "has_group_structure",
    "qualify",
]
