"""Week, lineup and score records."""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from ffplayoffs.config import SLOT_ORDER


class Week(BaseModel):
    """A playoff round. ``is_locked`` is the manual admin flag only."""

    number: int = Field(..., ge=1)
    label: str
    deadline: Optional[datetime] = None
    is_locked: bool = False

    model_config = ConfigDict(frozen=True)


class LineupSlots(BaseModel):
    """Player ids for the five lineup slots; an empty string is an unfilled slot."""

    qb: str = ""
    rb: str = ""
    wr: str = ""
    te: str = ""
    flex: str = ""

    model_config = ConfigDict(frozen=True)

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(slot, player_id)`` pairs in lineup order."""

        for slot in SLOT_ORDER:
            yield slot, getattr(self, slot.lower())

    def player_ids(self) -> Tuple[str, ...]:
        return tuple(player_id for _, player_id in self.items())


class Lineup(BaseModel):
    manager_id: str = Field(..., min_length=1)
    week_number: int = Field(..., ge=1)
    slots: LineupSlots
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class PlayerScore(BaseModel):
    week_number: int = Field(..., ge=1)
    player_id: str = Field(..., min_length=1)
    points: float


class Manager(BaseModel):
    manager_id: str = Field(..., min_length=1)
    name: str
