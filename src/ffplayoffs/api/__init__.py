"""REST API for the playoff league."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from fastapi import Body, FastAPI, HTTPException, Query

from ffplayoffs.api.schemas import (
    LeaderboardEntryResponse,
    LineupCheckResponse,
    LineupIssueResponse,
    LineupRequest,
    LineupResponse,
    LineupScoreResponse,
    PlayerPointsResponse,
    ScoreEntryRequest,
    ScorePreviewResponse,
    WeekResponse,
    WeekScoringResponse,
    WeekUpdateRequest,
)
from ffplayoffs.errors import LineupRejected, LockedError, NotFoundError, WeekOpenError
from ffplayoffs.ingest.stats import EspnStatsProvider, SleeperStatsProvider, StatsProvider
from ffplayoffs.league import (
    LineupScore,
    WeekScoring,
    build_leaderboard,
    check_lineup,
    fetch_week_scores,
    get_week_or_404,
    remove_lineup,
    save_week_scores,
    set_week_lock,
    submit_lineup,
    week_lineup_scores,
)
from ffplayoffs.models import Lineup, Player, Week
from ffplayoffs.persistence import LeagueStore
from ffplayoffs.scoring import normalize_stats, score_breakdown
from ffplayoffs.validation import LineupIssue
from ffplayoffs.weeks import current_week, is_week_locked


logger = logging.getLogger("uvicorn.error")

ProviderFactory = Callable[[], StatsProvider]

DEFAULT_PROVIDERS: Dict[str, ProviderFactory] = {
    "sleeper": SleeperStatsProvider,
    "espn": EspnStatsProvider,
}


def week_to_response(week: Week) -> WeekResponse:
    return WeekResponse(
        number=week.number,
        label=week.label,
        deadline=week.deadline,
        is_locked=week.is_locked,
        locked=is_week_locked(week),
    )


def lineup_to_response(lineup: Lineup) -> LineupResponse:
    return LineupResponse(
        manager_id=lineup.manager_id,
        week_number=lineup.week_number,
        updated_at=lineup.updated_at,
        **lineup.slots.model_dump(),
    )


def _issues_payload(issues: list[LineupIssue]) -> list[LineupIssueResponse]:
    return [LineupIssueResponse(field=issue.field, message=issue.message) for issue in issues]


def _scoring_to_response(result: WeekScoring) -> WeekScoringResponse:
    return WeekScoringResponse(
        week=result.week_number,
        source=result.source,
        scores=[
            PlayerPointsResponse(
                player_id=item.player.player_id,
                name=item.player.name,
                team=item.player.team,
                points=item.points,
                stats=dict(item.stats),
            )
            for item in result.scores
        ],
        fetched_count=result.fetched_count,
        not_found_count=len(result.unmapped),
        unmapped=result.unmapped,
        errors=result.errors,
        saved=result.saved,
        message=result.message,
    )


def _lineup_score_to_response(score: LineupScore) -> LineupScoreResponse:
    return LineupScoreResponse(
        lineup=lineup_to_response(score.lineup),
        slot_points=dict(score.slot_points),
        total=score.total,
    )


def create_app(
    store: LeagueStore | None = None,
    *,
    providers: Mapping[str, ProviderFactory] | None = None,
) -> FastAPI:
    app = FastAPI(title="ffplayoffs league")
    store = store or LeagueStore(Path(__file__).resolve().parent.parent / "ffplayoffs.sqlite")
    provider_factories = dict(providers or DEFAULT_PROVIDERS)
    app.state.league_store = store
    app.state.providers = provider_factories

    def _week_or_404(week_number: int) -> Week:
        try:
            return get_week_or_404(store, week_number)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail="Week not found") from exc

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/weeks", response_model=list[WeekResponse])
    async def list_weeks():
        return [week_to_response(week) for week in store.list_weeks()]

    @app.get("/weeks/current", response_model=WeekResponse)
    async def get_current_week():
        week = current_week(store.list_weeks())
        if week is None:
            raise HTTPException(status_code=404, detail="No weeks configured")
        return week_to_response(week)

    @app.put("/weeks/{week_number}", response_model=WeekResponse)
    async def update_week(week_number: int, request: WeekUpdateRequest):
        _week_or_404(week_number)
        changes: dict[str, Any] = {"is_locked": request.is_locked}
        if "deadline" in request.model_fields_set:
            changes["deadline"] = request.deadline
        week = set_week_lock(store, week_number, **changes)
        logger.info("Week %s updated: %s", week_number, changes)
        return week_to_response(week)

    @app.get("/players", response_model=list[Player])
    async def list_players(team: str | None = None, position: str | None = None):
        return store.list_players(team=team, position=position)

    @app.post("/lineups", response_model=LineupResponse)
    async def post_lineup(request: LineupRequest):
        try:
            lineup = submit_lineup(store, request.manager_id, request.week_number, request.slots())
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail="Week not found") from exc
        except LockedError as exc:
            raise HTTPException(status_code=423, detail=str(exc)) from exc
        except LineupRejected as exc:
            payload = [issue.model_dump() for issue in _issues_payload(exc.issues)]
            raise HTTPException(status_code=400, detail={"errors": payload}) from exc
        return lineup_to_response(lineup)

    @app.post("/lineups/check", response_model=LineupCheckResponse)
    async def post_lineup_check(request: LineupRequest):
        _week_or_404(request.week_number)
        issues = check_lineup(store, request.manager_id, request.week_number, request.slots())
        return LineupCheckResponse(valid=not issues, errors=_issues_payload(issues))

    @app.delete("/lineups/{week_number}/{manager_id}")
    async def delete_lineup(week_number: int, manager_id: str):
        _week_or_404(week_number)
        try:
            remove_lineup(store, manager_id, week_number)
        except LockedError as exc:
            raise HTTPException(status_code=423, detail=str(exc)) from exc
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail="Lineup not found") from exc
        return {"deleted": True}

    @app.get("/weeks/{week_number}/lineups", response_model=list[LineupScoreResponse])
    async def get_week_lineups(week_number: int):
        _week_or_404(week_number)
        try:
            scores = week_lineup_scores(store, week_number)
        except WeekOpenError as exc:
            raise HTTPException(status_code=403, detail=str(exc)) from exc
        return [_lineup_score_to_response(score) for score in scores]

    @app.get("/scores/{week_number}")
    async def get_scores(week_number: int):
        _week_or_404(week_number)
        return [score.model_dump() for score in store.get_player_scores(week_number)]

    @app.post("/scores/{week_number}")
    async def post_scores(week_number: int, request: ScoreEntryRequest):
        _week_or_404(week_number)
        points = {item.player_id: item.points for item in request.scores}
        try:
            saved = save_week_scores(store, week_number, points)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"success": True, "saved": saved}

    @app.post("/scores/{week_number}/fetch", response_model=WeekScoringResponse)
    async def fetch_scores(
        week_number: int,
        source: str = Query("sleeper"),
        save: bool = Query(False),
    ):
        _week_or_404(week_number)
        factory = provider_factories.get(source.lower())
        if factory is None:
            raise HTTPException(status_code=400, detail=f"Unknown stat source {source!r}")
        provider = factory()
        try:
            result = await fetch_week_scores(store, provider, week_number, save=save)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        finally:
            closer = getattr(provider, "aclose", None)
            if closer is not None:
                await closer()
        return _scoring_to_response(result)

    @app.post("/scoring/preview", response_model=ScorePreviewResponse)
    async def preview_score(stats: dict[str, Any] = Body(...)):
        breakdown = score_breakdown(stats)
        return ScorePreviewResponse(
            points=breakdown.total,
            breakdown=breakdown.as_dict(),
            normalized=normalize_stats(stats).as_dict(),
        )

    @app.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
    async def leaderboard():
        return [
            LeaderboardEntryResponse(
                rank=entry.rank,
                manager_id=entry.manager_id,
                name=entry.name,
                week_scores=dict(entry.week_scores),
                total=entry.total,
            )
            for entry in build_leaderboard(store)
        ]

    return app
