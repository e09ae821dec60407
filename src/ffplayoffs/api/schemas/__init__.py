"""Pydantic models for API I/O."""

from .lineup import (
    LineupCheckResponse,
    LineupIssueResponse,
    LineupRequest,
    LineupResponse,
    LineupScoreResponse,
)
from .scores import (
    LeaderboardEntryResponse,
    PlayerPointsResponse,
    PlayerScoreInput,
    ScoreEntryRequest,
    ScorePreviewResponse,
    WeekScoringResponse,
)
from .week import WeekResponse, WeekUpdateRequest

__all__ = [
    "LeaderboardEntryResponse",
    "LineupCheckResponse",
    "LineupIssueResponse",
    "LineupRequest",
    "LineupResponse",
    "LineupScoreResponse",
    "PlayerPointsResponse",
    "PlayerScoreInput",
    "ScoreEntryRequest",
    "ScorePreviewResponse",
    "WeekResponse",
    "WeekScoringResponse",
    "WeekUpdateRequest",
]
