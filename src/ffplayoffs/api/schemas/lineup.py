from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, Field

from ffplayoffs.models import LineupSlots


class LineupRequest(BaseModel):
    manager_id: str = Field(..., min_length=1)
    week_number: int = Field(..., ge=1)
    qb: str = ""
    rb: str = ""
    wr: str = ""
    te: str = ""
    flex: str = ""

    def slots(self) -> LineupSlots:
        return LineupSlots(qb=self.qb, rb=self.rb, wr=self.wr, te=self.te, flex=self.flex)


class LineupIssueResponse(BaseModel):
    field: str
    message: str


class LineupCheckResponse(BaseModel):
    valid: bool
    errors: List[LineupIssueResponse] = Field(default_factory=list)


class LineupResponse(BaseModel):
    manager_id: str
    week_number: int
    qb: str
    rb: str
    wr: str
    te: str
    flex: str
    updated_at: datetime | None = None


class LineupScoreResponse(BaseModel):
    lineup: LineupResponse
    slot_points: Dict[str, float]
    total: float
