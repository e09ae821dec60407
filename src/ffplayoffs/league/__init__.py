"""League workflows: lineup submission, week scoring and standings."""

from .service import (
    LineupScore,
    PlayerPoints,
    WeekScoring,
    check_lineup,
    fetch_week_scores,
    get_week_or_404,
    remove_lineup,
    save_week_scores,
    score_lineup,
    set_week_lock,
    submit_lineup,
    week_lineup_scores,
)
from .standings import LeaderboardEntry, build_leaderboard, rank_totals

__all__ = [
    "LeaderboardEntry",
    "LineupScore",
    "PlayerPoints",
    "WeekScoring",
    "build_leaderboard",
    "check_lineup",
    "fetch_week_scores",
    "get_week_or_404",
    "rank_totals",
    "remove_lineup",
    "save_week_scores",
    "score_lineup",
    "set_week_lock",
    "submit_lineup",
    "week_lineup_scores",
]
