"""Player and team records."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


Position = Literal["QB", "RB", "WR", "TE", "K", "DST"]


class Team(BaseModel):
    """NFL team keyed by its short code (e.g. ``BUF``)."""

    code: str = Field(..., min_length=1)
    name: str

    model_config = ConfigDict(frozen=True)


class Player(BaseModel):
    """Selectable player; ``team`` holds the team short code."""

    player_id: str = Field(..., min_length=1)
    name: str
    position: Position
    team: str = Field(..., min_length=1)
    external_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)
