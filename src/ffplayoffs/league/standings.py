"""Season leaderboard: weekly lineup totals summed per manager."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

from ffplayoffs.models import Lineup, Manager
from ffplayoffs.persistence import LeagueStore
from ffplayoffs.scoring import round_points

from .service import score_lineup


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    manager_id: str
    name: str
    week_scores: Mapping[int, float]
    total: float


def rank_totals(
    week_numbers: Sequence[int],
    lineups: Iterable[Lineup],
    points_by_week: Mapping[int, Mapping[str, float]],
    managers: Iterable[Manager] = (),
) -> List[LeaderboardEntry]:
    """Rank managers by season total; tied totals share a rank (1, 1, 3)."""

    names = {manager.manager_id: manager.name for manager in managers}
    weekly: Dict[str, Dict[int, float]] = {
        manager_id: {number: 0.0 for number in week_numbers} for manager_id in names
    }
    for lineup in lineups:
        per_week = weekly.setdefault(lineup.manager_id, {number: 0.0 for number in week_numbers})
        points = points_by_week.get(lineup.week_number, {})
        per_week[lineup.week_number] = score_lineup(lineup, points).total

    totals = {
        manager_id: round_points(sum(scores.values())) for manager_id, scores in weekly.items()
    }
    ordered = sorted(
        weekly,
        key=lambda manager_id: (-totals[manager_id], names.get(manager_id, manager_id).lower()),
    )

    entries: List[LeaderboardEntry] = []
    previous_total: float | None = None
    rank = 0
    for position, manager_id in enumerate(ordered, start=1):
        if totals[manager_id] != previous_total:
            rank = position
            previous_total = totals[manager_id]
        entries.append(
            LeaderboardEntry(
                rank=rank,
                manager_id=manager_id,
                name=names.get(manager_id, manager_id),
                week_scores=dict(sorted(weekly[manager_id].items())),
                total=totals[manager_id],
            )
        )
    return entries


def build_leaderboard(store: LeagueStore) -> List[LeaderboardEntry]:
    week_numbers = [week.number for week in store.list_weeks()]
    return rank_totals(
        week_numbers,
        store.list_lineups(),
        store.score_lookup(),
        store.list_managers(),
    )
