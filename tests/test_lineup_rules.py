import pytest

from ffplayoffs.config import SLOT_ORDER, SLOT_POSITIONS, get_week_rules, iter_week_rules


def test_week_rules_in_round_order():
    labels = [rules.label for rules in iter_week_rules()]
    assert labels == ["Wild Card", "Divisional", "Conference Championship", "Super Bowl"]


def test_team_shapes():
    assert get_week_rules(1).team_count == 5
    assert get_week_rules(3).team_shape == (2, 1, 1, 1)
    assert get_week_rules(4).team_shape == (3, 2)


def test_flex_accepts_skill_positions_only():
    assert SLOT_ORDER[-1] == "FLEX"
    assert SLOT_POSITIONS["FLEX"] == {"RB", "WR", "TE"}
    assert "QB" not in SLOT_POSITIONS["FLEX"]


def test_get_week_rules_missing_raises():
    with pytest.raises(KeyError):
        get_week_rules(5)
