from datetime import datetime, timedelta, timezone

from ffplayoffs.models import Week
from ffplayoffs.weeks import current_week, deadline_passed, is_week_locked


NOW = datetime(2025, 1, 12, 18, 0, tzinfo=timezone.utc)


def _week(number: int, deadline: datetime | None = None, is_locked: bool = False) -> Week:
    return Week(number=number, label=f"Week {number}", deadline=deadline, is_locked=is_locked)


def test_passed_deadline_locks_without_flag():
    week = _week(1, deadline=NOW - timedelta(minutes=1))
    assert is_week_locked(week, NOW)


def test_flag_locks_with_future_or_missing_deadline():
    assert is_week_locked(_week(1, deadline=NOW + timedelta(days=3), is_locked=True), NOW)
    assert is_week_locked(_week(1, is_locked=True), NOW)


def test_open_week():
    assert not is_week_locked(_week(1, deadline=NOW + timedelta(hours=1)), NOW)
    assert not is_week_locked(_week(1), NOW)


def test_deadline_instant_itself_is_still_open():
    assert not deadline_passed(NOW, NOW)


def test_naive_deadline_treated_as_utc():
    naive = datetime(2025, 1, 12, 17, 0)
    assert deadline_passed(naive, NOW)
    assert not deadline_passed(naive, datetime(2025, 1, 12, 16, 59))


def test_current_week_is_first_open_round():
    weeks = [
        _week(2, deadline=NOW + timedelta(days=7)),
        _week(1, deadline=NOW - timedelta(days=1)),
        _week(3, deadline=NOW + timedelta(days=14)),
    ]
    assert current_week(weeks, NOW).number == 2


def test_current_week_falls_back_to_last():
    weeks = [_week(1, deadline=NOW - timedelta(days=2)), _week(2, deadline=NOW - timedelta(days=1))]
    assert current_week(weeks, NOW).number == 2
    assert current_week([], NOW) is None
