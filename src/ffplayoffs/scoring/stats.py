"""Normalize raw provider stats into one canonical stat line.

Two providers report the same counters under different names: Sleeper uses
compact keys (``pass_yd``, ``rec``) and ESPN uses descriptive keys
(``passingYards``, ``receivingReceptions``). Each concept below is resolved
once, preferring the compact key whenever it holds a usable number (an
explicit zero included), then the descriptive key, then zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple


# concept -> (compact key, descriptive key)
STAT_ALIASES: Mapping[str, Tuple[str, Optional[str]]] = {
    "pass_yd": ("pass_yd", "passingYards"),
    "pass_td": ("pass_td", "passingTouchdowns"),
    "pass_int": ("pass_int", "interceptions"),
    "pass_sack": ("pass_sack", "sacks"),
    "pass_2pt": ("pass_2pt", None),
    "pass_td_40p": ("pass_td_40p", None),
    "pass_td_50p": ("pass_td_50p", None),
    "rush_yd": ("rush_yd", "rushingYards"),
    "rush_td": ("rush_td", "rushingTouchdowns"),
    "rush_2pt": ("rush_2pt", None),
    "rush_td_40p": ("rush_td_40p", None),
    "rush_td_50p": ("rush_td_50p", None),
    "rec": ("rec", "receivingReceptions"),
    "rec_yd": ("rec_yd", "receivingYards"),
    "rec_td": ("rec_td", "receivingTouchdowns"),
    "rec_2pt": ("rec_2pt", None),
    "rec_td_40p": ("rec_td_40p", None),
    "rec_td_50p": ("rec_td_50p", None),
    "fum": ("fum", None),
    "fum_lost": ("fum_lost", "fumblesLost"),
    "fum_rec_td": ("fum_rec_td", "defensiveTouchdowns"),
}

SACK_YARDS_KEY = "pass_sack_yds"
YARDS_PER_SACK = 5.5


@dataclass(frozen=True)
class StatLine:
    """Canonical per-player counters for one week."""

    pass_yd: float = 0.0
    pass_td: float = 0.0
    pass_int: float = 0.0
    pass_sack: float = 0.0
    pass_2pt: float = 0.0
    pass_td_40p: float = 0.0
    pass_td_50p: float = 0.0
    rush_yd: float = 0.0
    rush_td: float = 0.0
    rush_2pt: float = 0.0
    rush_td_40p: float = 0.0
    rush_td_50p: float = 0.0
    rec: float = 0.0
    rec_yd: float = 0.0
    rec_td: float = 0.0
    rec_2pt: float = 0.0
    rec_td_40p: float = 0.0
    rec_td_50p: float = 0.0
    fum: float = 0.0
    fum_lost: float = 0.0
    fum_rec_td: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {field.name: getattr(self, field.name) for field in fields(self)}


def _as_number(value: Any) -> float | None:
    """Return ``value`` as a finite float, or None when it is not a usable number."""

    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float, Decimal)):
            number = float(value)
        elif isinstance(value, str):
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _resolve(stats: Mapping[str, Any], compact: str, descriptive: Optional[str]) -> float | None:
    value = _as_number(stats.get(compact))
    if value is None and descriptive is not None:
        value = _as_number(stats.get(descriptive))
    return value


def _estimate_sacks(sack_yards: float) -> float:
    # Whole sacks, halves rounded up.
    return float(math.floor(sack_yards / YARDS_PER_SACK + 0.5))


def normalize_stats(stats: Mapping[str, Any] | None) -> StatLine:
    """Build a :class:`StatLine` from either provider's field names."""

    if not stats:
        return StatLine()

    values: dict[str, float] = {}
    for concept, (compact, descriptive) in STAT_ALIASES.items():
        resolved = _resolve(stats, compact, descriptive)
        if resolved is None and concept == "pass_sack":
            sack_yards = _as_number(stats.get(SACK_YARDS_KEY))
            if sack_yards:
                resolved = _estimate_sacks(sack_yards)
        values[concept] = resolved if resolved is not None else 0.0
    return StatLine(**values)
