from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class WeekResponse(BaseModel):
    number: int
    label: str
    deadline: datetime | None
    is_locked: bool
    locked: bool


class WeekUpdateRequest(BaseModel):
    """Omitted fields are left alone; an explicit ``deadline: null`` clears the deadline."""

    is_locked: bool | None = None
    deadline: datetime | None = None
