"""Lineup slot eligibility and per-week team distribution rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Tuple


SLOT_ORDER: Tuple[str, ...] = ("QB", "RB", "WR", "TE", "FLEX")

FLEX_POSITIONS: FrozenSet[str] = frozenset({"RB", "WR", "TE"})

SLOT_POSITIONS: Mapping[str, FrozenSet[str]] = {
    "QB": frozenset({"QB"}),
    "RB": frozenset({"RB"}),
    "WR": frozenset({"WR"}),
    "TE": frozenset({"TE"}),
    "FLEX": FLEX_POSITIONS,
}

# Positions a player record may carry; K and DST exist in the player pool
# but never fit a lineup slot.
PLAYER_POSITIONS: Tuple[str, ...] = ("QB", "RB", "WR", "TE", "K", "DST")


@dataclass(frozen=True)
class WeekRules:
    number: int
    label: str
    team_shape: Tuple[int, ...]
    team_count_message: str
    team_shape_message: str

    @property
    def team_count(self) -> int:
        return len(self.team_shape)


_ONE_PER_TEAM = (1, 1, 1, 1, 1)

_WEEK_RULES: Dict[int, WeekRules] = {
    1: WeekRules(
        number=1,
        label="Wild Card",
        team_shape=_ONE_PER_TEAM,
        team_count_message=(
            "For Wild Card round, you must select players from 5 different teams "
            "(max 1 player per team)."
        ),
        team_shape_message=(
            "For Wild Card round, you must select players from 5 different teams "
            "(max 1 player per team)."
        ),
    ),
    2: WeekRules(
        number=2,
        label="Divisional",
        team_shape=_ONE_PER_TEAM,
        team_count_message=(
            "For Divisional round, you must select players from 5 different teams "
            "(max 1 player per team)."
        ),
        team_shape_message=(
            "For Divisional round, you must select players from 5 different teams "
            "(max 1 player per team)."
        ),
    ),
    3: WeekRules(
        number=3,
        label="Conference Championship",
        team_shape=(2, 1, 1, 1),
        team_count_message=(
            "Conference Championship lineup must include players from exactly 4 different teams."
        ),
        team_shape_message=(
            "Conference Championship lineup must be 2-1-1-1 "
            "(one team with 2 players, three teams with 1 player each)."
        ),
    ),
    4: WeekRules(
        number=4,
        label="Super Bowl",
        team_shape=(3, 2),
        team_count_message="Super Bowl lineup must include players from exactly 2 different teams.",
        team_shape_message="Super Bowl lineup must be a 3-2 split between the two teams.",
    ),
}


def iter_week_rules() -> Iterable[WeekRules]:
    """Return the configured weeks in round order."""

    return (_WEEK_RULES[number] for number in sorted(_WEEK_RULES))


def get_week_rules(week_number: int) -> WeekRules:
    """Fetch rules for a week number, raising KeyError if missing."""

    if week_number not in _WEEK_RULES:
        raise KeyError(f"No lineup rules configured for week={week_number!r}")
    return _WEEK_RULES[week_number]
