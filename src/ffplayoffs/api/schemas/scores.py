from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class PlayerScoreInput(BaseModel):
    player_id: str = Field(..., min_length=1)
    points: float


class ScoreEntryRequest(BaseModel):
    scores: List[PlayerScoreInput] = Field(default_factory=list)


class PlayerPointsResponse(BaseModel):
    player_id: str
    name: str
    team: str
    points: float
    stats: Dict[str, Any] = Field(default_factory=dict)


class WeekScoringResponse(BaseModel):
    week: int
    source: str
    scores: List[PlayerPointsResponse]
    fetched_count: int
    not_found_count: int
    unmapped: List[str]
    errors: Dict[str, str] = Field(default_factory=dict)
    saved: bool
    message: str


class ScorePreviewResponse(BaseModel):
    points: float
    breakdown: Dict[str, float]
    normalized: Dict[str, float]


class LeaderboardEntryResponse(BaseModel):
    rank: int
    manager_id: str
    name: str
    week_scores: Dict[int, float]
    total: float
