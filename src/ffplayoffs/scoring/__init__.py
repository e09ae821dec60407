"""Fantasy point scoring for raw player stats."""

from .engine import ScoreBreakdown, calculate_score, round_points, score_breakdown
from .stats import StatLine, normalize_stats

__all__ = [
    "ScoreBreakdown",
    "StatLine",
    "calculate_score",
    "normalize_stats",
    "round_points",
    "score_breakdown",
]
