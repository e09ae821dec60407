"""Week lock state and current-week resolution.

Lock state is always derived from the clock; nothing here caches it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from ffplayoffs.models import Week


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _now(now: Optional[datetime]) -> datetime:
    return _aware(now) if now is not None else datetime.now(timezone.utc)


def deadline_passed(deadline: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True once ``now`` is past ``deadline``; a missing deadline never passes."""

    if deadline is None:
        return False
    return _now(now) > _aware(deadline)


def is_week_locked(week: Week, now: Optional[datetime] = None) -> bool:
    """A week is locked when the admin flag is set or its deadline has passed."""

    if week.is_locked:
        return True
    return deadline_passed(week.deadline, now)


def current_week(weeks: Iterable[Week], now: Optional[datetime] = None) -> Optional[Week]:
    """First week still open by deadline, else the last week, else None."""

    ordered = sorted(weeks, key=lambda week: week.number)
    moment = _now(now)
    for week in ordered:
        if not deadline_passed(week.deadline, moment):
            return week
    return ordered[-1] if ordered else None
