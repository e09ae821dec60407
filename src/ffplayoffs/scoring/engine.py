"""Fantasy point schedule applied to a normalized stat line."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping, Tuple

from .stats import StatLine, normalize_stats

logger = logging.getLogger(__name__)


PASS_YARDS_PER_POINT = 25
RUSH_YARDS_PER_POINT = 10
REC_YARDS_PER_POINT = 10

PASS_TD_POINTS = 4.0
RUSH_TD_POINTS = 6.0
REC_TD_POINTS = 6.0
INTERCEPTION_POINTS = -2.0
SACK_POINTS = -0.5
RECEPTION_POINTS = 0.5
FUMBLE_POINTS = -1.0
FUMBLE_LOST_POINTS = -1.0
FUMBLE_REC_TD_POINTS = 6.0
TWO_POINT_CONVERSION_POINTS = 2.0

TD_50_PLUS_BONUS = 2.0
TD_40_49_BONUS = 1.0

# (min yards, bonus), highest tier first; only the first tier reached applies.
PASS_YARDAGE_TIERS: Tuple[Tuple[int, float], ...] = ((400, 4.0), (300, 2.0))
RUSH_YARDAGE_TIERS: Tuple[Tuple[int, float], ...] = ((200, 2.0), (100, 1.0))
REC_YARDAGE_TIERS: Tuple[Tuple[int, float], ...] = ((200, 2.0), (100, 1.0))

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class ScoreBreakdown:
    """Unrounded points per scoring category."""

    passing: float = 0.0
    rushing: float = 0.0
    receiving: float = 0.0
    misc: float = 0.0
    distance_bonus: float = 0.0

    @property
    def total(self) -> float:
        return round_points(
            self.passing + self.rushing + self.receiving + self.misc + self.distance_bonus
        )

    def as_dict(self) -> dict[str, float]:
        payload = asdict(self)
        payload["total"] = self.total
        return payload


def round_points(value: float) -> float:
    """Round to cents, halves away from zero. Non-finite values round to 0.0."""

    if not math.isfinite(value):
        logger.warning("Non-finite point total %r scored as 0.0", value)
        return 0.0
    try:
        return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Too many digits to quantize; floats this large have no fractional part.
        return value


def _yardage_points(yards: float, per_point: int, tiers: Tuple[Tuple[int, float], ...]) -> float:
    points = float(math.floor(yards / per_point))
    for threshold, bonus in tiers:
        if yards >= threshold:
            return points + bonus
    return points


def _distance_bonus(forty_plus: float, fifty_plus: float) -> float:
    # The 40+ count includes the 50+ touchdowns; only the 40-49 band earns the
    # smaller bonus. Inconsistent feeds (40+ below 50+) contribute nothing.
    forty_to_forty_nine = max(0.0, forty_plus - fifty_plus)
    return fifty_plus * TD_50_PLUS_BONUS + forty_to_forty_nine * TD_40_49_BONUS


def _finite(points: float, category: str) -> float:
    if math.isfinite(points):
        return points
    logger.warning("Non-finite %s points %r scored as 0.0", category, points)
    return 0.0


def breakdown_stat_line(line: StatLine) -> ScoreBreakdown:
    passing = (
        _yardage_points(line.pass_yd, PASS_YARDS_PER_POINT, PASS_YARDAGE_TIERS)
        + line.pass_td * PASS_TD_POINTS
        + line.pass_int * INTERCEPTION_POINTS
        + line.pass_sack * SACK_POINTS
        + line.pass_2pt * TWO_POINT_CONVERSION_POINTS
    )
    rushing = (
        _yardage_points(line.rush_yd, RUSH_YARDS_PER_POINT, RUSH_YARDAGE_TIERS)
        + line.rush_td * RUSH_TD_POINTS
        + line.rush_2pt * TWO_POINT_CONVERSION_POINTS
    )
    receiving = (
        line.rec * RECEPTION_POINTS
        + _yardage_points(line.rec_yd, REC_YARDS_PER_POINT, REC_YARDAGE_TIERS)
        + line.rec_td * REC_TD_POINTS
        + line.rec_2pt * TWO_POINT_CONVERSION_POINTS
    )
    misc = (
        line.fum * FUMBLE_POINTS
        + line.fum_lost * FUMBLE_LOST_POINTS
        + line.fum_rec_td * FUMBLE_REC_TD_POINTS
    )
    distance_bonus = (
        _distance_bonus(line.pass_td_40p, line.pass_td_50p)
        + _distance_bonus(line.rush_td_40p, line.rush_td_50p)
        + _distance_bonus(line.rec_td_40p, line.rec_td_50p)
    )
    return ScoreBreakdown(
        passing=_finite(passing, "passing"),
        rushing=_finite(rushing, "rushing"),
        receiving=_finite(receiving, "receiving"),
        misc=_finite(misc, "misc"),
        distance_bonus=_finite(distance_bonus, "distance bonus"),
    )


def score_breakdown(stats: Mapping[str, Any] | None) -> ScoreBreakdown:
    """Points per category for raw stats in either provider format."""

    return breakdown_stat_line(normalize_stats(stats))


def calculate_score(stats: Mapping[str, Any] | None) -> float:
    """Fantasy points for one player-week, rounded to two decimals.

    Never raises: missing or malformed counters score as zero.
    """

    return score_breakdown(stats).total
