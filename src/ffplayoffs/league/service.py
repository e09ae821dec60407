"""Service layer joining storage, lock state, validation and scoring."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ffplayoffs.errors import LineupRejected, LockedError, NotFoundError, WeekOpenError
from ffplayoffs.ingest.stats import StatsFetchResult, StatsProvider, fetch_week_stats
from ffplayoffs.models import Lineup, LineupSlots, Player, Week
from ffplayoffs.persistence import LeagueStore
from ffplayoffs.scoring import calculate_score, round_points
from ffplayoffs.validation import LineupIssue, validate_lineup
from ffplayoffs.weeks import is_week_locked


logger = logging.getLogger("uvicorn.error")

_UNSET = object()


def get_week_or_404(store: LeagueStore, week_number: int) -> Week:
    week = store.get_week(week_number)
    if week is None:
        raise NotFoundError("Week", week_number)
    return week


def _ensure_unlocked(week: Week, now: Optional[datetime]) -> None:
    if is_week_locked(week, now):
        raise LockedError(week.number)


def check_lineup(
    store: LeagueStore,
    manager_id: str,
    week_number: int,
    slots: LineupSlots,
) -> List[LineupIssue]:
    """Validate without writing; the week must exist but may be locked."""

    get_week_or_404(store, week_number)
    players = store.get_players(slots.player_ids())
    history = store.find_lineups_for_manager_before_week(manager_id, week_number)
    return validate_lineup(week_number, slots, players, history)


def submit_lineup(
    store: LeagueStore,
    manager_id: str,
    week_number: int,
    slots: LineupSlots,
    *,
    now: Optional[datetime] = None,
) -> Lineup:
    """Validate and upsert a lineup for an unlocked week."""

    week = get_week_or_404(store, week_number)
    _ensure_unlocked(week, now)
    issues = check_lineup(store, manager_id, week_number, slots)
    if issues:
        raise LineupRejected(issues)
    lineup = store.upsert_lineup(manager_id, week_number, slots)
    logger.info("Saved week %s lineup for manager %s", week_number, manager_id)
    return lineup


def remove_lineup(
    store: LeagueStore,
    manager_id: str,
    week_number: int,
    *,
    now: Optional[datetime] = None,
) -> None:
    week = get_week_or_404(store, week_number)
    _ensure_unlocked(week, now)
    if not store.delete_lineup(manager_id, week_number):
        raise NotFoundError("Lineup", (manager_id, week_number))


def set_week_lock(
    store: LeagueStore,
    week_number: int,
    *,
    is_locked: bool | None = None,
    deadline: Any = _UNSET,
) -> Week:
    """Admin update of the manual flag and/or deadline.

    Clearing the flag does not reopen a week whose deadline has passed.
    """

    get_week_or_404(store, week_number)
    if deadline is _UNSET:
        return store.update_week(week_number, is_locked=is_locked)
    return store.update_week(week_number, is_locked=is_locked, deadline=deadline)


@dataclass(frozen=True)
class LineupScore:
    lineup: Lineup
    slot_points: Mapping[str, float]

    @property
    def total(self) -> float:
        return round_points(sum(self.slot_points.values()))


def score_lineup(lineup: Lineup, points: Mapping[str, float]) -> LineupScore:
    """Per-slot points for a lineup; players without a score count as zero."""

    slot_points = {slot: float(points.get(player_id, 0.0)) for slot, player_id in lineup.slots.items()}
    return LineupScore(lineup=lineup, slot_points=slot_points)


@dataclass
class PlayerPoints:
    player: Player
    points: float
    stats: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class WeekScoring:
    week_number: int
    source: str
    scores: List[PlayerPoints]
    unmapped: List[str]
    errors: Dict[str, str]
    saved: bool = False

    @property
    def fetched_count(self) -> int:
        return len(self.scores) - len(self.unmapped)

    @property
    def message(self) -> str:
        text = f"Fetched stats for {self.fetched_count} players"
        if self.unmapped:
            text += f", {len(self.unmapped)} not found"
        return text


def week_players(store: LeagueStore, week_number: int) -> List[Player]:
    """Distinct players used in any lineup of the week."""

    player_ids = {
        player_id
        for lineup in store.list_lineups(week_number)
        for player_id in lineup.slots.player_ids()
    }
    players = store.get_players(player_ids)
    return sorted(players.values(), key=lambda player: (player.team, player.name))


def score_fetched_stats(players: List[Player], fetched: StatsFetchResult) -> List[PlayerPoints]:
    return [
        PlayerPoints(
            player=player,
            points=calculate_score(fetched.stats.get(player.player_id)),
            stats=dict(fetched.stats.get(player.player_id) or {}),
        )
        for player in players
    ]


async def fetch_week_scores(
    store: LeagueStore,
    provider: StatsProvider,
    week_number: int,
    *,
    save: bool = False,
    concurrency: int | None = None,
) -> WeekScoring:
    """Fetch stats for every player in the week's lineups and score them.

    Players whose stats could not be fetched score zero and are listed as
    unmapped. Scores are written only when ``save`` is set.
    """

    get_week_or_404(store, week_number)
    players = week_players(store, week_number)
    fetched = await fetch_week_stats(provider, week_number, players, concurrency=concurrency)
    scores = score_fetched_stats(players, fetched)
    result = WeekScoring(
        week_number=week_number,
        source=fetched.source,
        scores=scores,
        unmapped=list(fetched.unmapped),
        errors=dict(fetched.errors),
    )
    if save:
        store.save_player_scores(week_number, {item.player.player_id: item.points for item in scores})
        result.saved = True
        logger.info("Saved %d player scores for week %s", len(scores), week_number)
    return result


def save_week_scores(store: LeagueStore, week_number: int, points: Mapping[str, float]) -> int:
    """Manual admin score entry; unknown players are rejected."""

    get_week_or_404(store, week_number)
    known = store.get_players(points.keys())
    missing = sorted(set(points) - set(known))
    if missing:
        raise NotFoundError("Player", missing[0])
    return store.save_player_scores(week_number, points)


def week_lineup_scores(
    store: LeagueStore, week_number: int, *, now: Optional[datetime] = None
) -> List[LineupScore]:
    week = get_week_or_404(store, week_number)
    if not is_week_locked(week, now):
        raise WeekOpenError(week_number)
    points = store.score_lookup([week_number]).get(week_number, {})
    return [score_lineup(lineup, points) for lineup in store.list_lineups(week_number)]
