import pytest
from pydantic import ValidationError

from ffplayoffs.models import LineupSlots, Player, Week


def test_player_is_frozen():
    player = Player(player_id="p1", name="Test Player", position="WR", team="BUF")
    assert player.external_id is None

    with pytest.raises((TypeError, ValidationError)):
        player.team = "KC"  # type: ignore[misc]


def test_player_rejects_unknown_position():
    with pytest.raises(ValidationError):
        Player(player_id="p1", name="Lineman", position="OL", team="BUF")


def test_lineup_slots_in_slot_order():
    slots = LineupSlots(qb="a", rb="b", wr="c", te="d", flex="e")
    assert list(slots.items()) == [("QB", "a"), ("RB", "b"), ("WR", "c"), ("TE", "d"), ("FLEX", "e")]
    assert slots.player_ids() == ("a", "b", "c", "d", "e")


def test_week_number_must_be_positive():
    with pytest.raises(ValidationError):
        Week(number=0, label="Preseason")
