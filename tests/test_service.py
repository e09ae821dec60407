from datetime import datetime, timedelta, timezone

import pytest

from ffplayoffs.errors import LineupRejected, LockedError, NotFoundError, WeekOpenError
from ffplayoffs.league import (
    check_lineup,
    remove_lineup,
    save_week_scores,
    score_lineup,
    set_week_lock,
    submit_lineup,
    week_lineup_scores,
)
from ffplayoffs.models import LineupSlots
from ffplayoffs.persistence import LeagueStore
from ffplayoffs.weeks import is_week_locked


WEEK_ONE = LineupSlots(qb="qb1", rb="rb2", wr="wr1", te="te2", flex="wr3")
WEEK_TWO = LineupSlots(qb="qb2", rb="rb1", wr="wr2", te="te1", flex="wr5")


def test_submit_and_resubmit_same_week(store: LeagueStore):
    lineup = submit_lineup(store, "m1", 1, WEEK_ONE)
    assert lineup.slots == WEEK_ONE

    changed = WEEK_ONE.model_copy(update={"flex": "rb3"})
    submit_lineup(store, "m1", 1, changed)
    assert store.get_lineup("m1", 1).slots.flex == "rb3"
    assert len(store.list_lineups(1)) == 1


def test_burned_player_rejected_in_later_week(store: LeagueStore):
    submit_lineup(store, "m1", 1, WEEK_ONE)
    reuse = WEEK_TWO.model_copy(update={"flex": "wr1"})

    with pytest.raises(LineupRejected) as excinfo:
        submit_lineup(store, "m1", 2, reuse)
    assert "Amon-Ra St. Brown (DET)" in str(excinfo.value)
    assert store.get_lineup("m1", 2) is None

    # another manager is unaffected
    assert submit_lineup(store, "m2", 2, reuse).manager_id == "m2"


def test_check_lineup_does_not_write(store: LeagueStore):
    assert check_lineup(store, "m1", 1, WEEK_ONE) == []
    assert store.get_lineup("m1", 1) is None


def test_unknown_week(store: LeagueStore):
    with pytest.raises(NotFoundError):
        submit_lineup(store, "m1", 9, WEEK_ONE)


def test_locked_week_refuses_writes(store: LeagueStore):
    submit_lineup(store, "m1", 1, WEEK_ONE)
    set_week_lock(store, 1, is_locked=True)

    with pytest.raises(LockedError):
        submit_lineup(store, "m1", 1, WEEK_ONE)
    with pytest.raises(LockedError):
        remove_lineup(store, "m1", 1)
    # validation still answers for a locked week
    assert check_lineup(store, "m1", 1, WEEK_ONE) == []


def test_passed_deadline_locks_before_validation(store: LeagueStore):
    deadline = datetime(2025, 1, 11, 18, 0, tzinfo=timezone.utc)
    set_week_lock(store, 1, deadline=deadline)
    bad = LineupSlots(qb="qb1")

    with pytest.raises(LockedError):
        submit_lineup(store, "m1", 1, bad, now=deadline + timedelta(seconds=1))
    with pytest.raises(LineupRejected):
        submit_lineup(store, "m1", 1, bad, now=deadline - timedelta(seconds=1))


def test_unlocking_flag_keeps_passed_deadline_locked(store: LeagueStore):
    past = datetime.now(timezone.utc) - timedelta(days=1)
    set_week_lock(store, 2, is_locked=True, deadline=past)
    week = set_week_lock(store, 2, is_locked=False)
    assert week.is_locked is False
    assert is_week_locked(week)

    week = set_week_lock(store, 2, deadline=None)
    assert not is_week_locked(week)


def test_remove_lineup(store: LeagueStore):
    submit_lineup(store, "m1", 1, WEEK_ONE)
    remove_lineup(store, "m1", 1)
    with pytest.raises(NotFoundError):
        remove_lineup(store, "m1", 1)


def test_score_lineup_missing_players_score_zero(store: LeagueStore):
    lineup = submit_lineup(store, "m1", 1, WEEK_ONE)
    scored = score_lineup(lineup, {"qb1": 20.5, "te2": 9.25})
    assert scored.slot_points == {"QB": 20.5, "RB": 0.0, "WR": 0.0, "TE": 9.25, "FLEX": 0.0}
    assert scored.total == pytest.approx(29.75)


def test_manual_scores_and_week_totals(store: LeagueStore):
    submit_lineup(store, "m1", 1, WEEK_ONE)
    assert save_week_scores(store, 1, {"qb1": 18.1, "rb2": 11.2, "wr3": 0.0}) == 3

    set_week_lock(store, 1, is_locked=True)
    [scored] = week_lineup_scores(store, 1)
    assert scored.total == pytest.approx(29.3)

    with pytest.raises(NotFoundError):
        save_week_scores(store, 1, {"ghost": 3.0})


def test_week_lineups_hidden_until_lock(store: LeagueStore):
    submit_lineup(store, "m1", 1, WEEK_ONE)
    with pytest.raises(WeekOpenError):
        week_lineup_scores(store, 1)

    deadline = datetime(2025, 1, 11, 18, 0, tzinfo=timezone.utc)
    set_week_lock(store, 1, deadline=deadline)
    with pytest.raises(WeekOpenError):
        week_lineup_scores(store, 1, now=deadline - timedelta(minutes=5))
    [scored] = week_lineup_scores(store, 1, now=deadline + timedelta(seconds=1))
    assert scored.lineup.manager_id == "m1"

    with pytest.raises(NotFoundError):
        week_lineup_scores(store, 9)
