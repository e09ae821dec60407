"""Lineup legality checks over already-fetched players and lineup history."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Set

from ffplayoffs.config import SLOT_POSITIONS, get_week_rules
from ffplayoffs.models import Lineup, LineupSlots, Player


logger = logging.getLogger(__name__)

LINEUP_FIELD = "lineup"


@dataclass(frozen=True)
class LineupIssue:
    """One validation problem; ``field`` is a slot name or ``lineup``."""

    field: str
    message: str


def validate_completeness(slots: LineupSlots) -> List[LineupIssue]:
    if all(player_id for player_id in slots.player_ids()):
        return []
    return [LineupIssue(LINEUP_FIELD, "All positions must be filled.")]


def validate_positions(slots: LineupSlots, players: Mapping[str, Player]) -> List[LineupIssue]:
    """Each slot must hold an existing player of an eligible position."""

    issues: List[LineupIssue] = []
    for slot, player_id in slots.items():
        player = players.get(player_id)
        allowed = SLOT_POSITIONS[slot]
        if player is not None and player.position in allowed:
            continue
        if slot == "FLEX":
            message = "FLEX slot must have a RB, WR, or TE."
        else:
            message = f"{slot} slot must have a {slot}."
        issues.append(LineupIssue(slot, message))
    return issues


def validate_distinct_players(slots: LineupSlots, players: Mapping[str, Player]) -> List[LineupIssue]:
    """A player may fill only one slot; later repeats are reported."""

    issues: List[LineupIssue] = []
    seen: dict[str, str] = {}
    for slot, player_id in slots.items():
        first_slot = seen.get(player_id)
        if first_slot is None:
            seen[player_id] = slot
            continue
        player = players.get(player_id)
        name = player.name if player else player_id
        issues.append(
            LineupIssue(slot, f"{name} is already in your {first_slot} slot - pick a different player.")
        )
    return issues


def used_player_ids(previous_lineups: Iterable[Lineup], week_number: int) -> Set[str]:
    """Every player id used in lineups from weeks before ``week_number``."""

    used: Set[str] = set()
    for lineup in previous_lineups:
        if lineup.week_number >= week_number:
            continue
        used.update(player_id for player_id in lineup.slots.player_ids() if player_id)
    return used


def validate_burn_rule(
    week_number: int,
    slots: LineupSlots,
    players: Mapping[str, Player],
    previous_lineups: Iterable[Lineup],
) -> List[LineupIssue]:
    """A manager may not reuse a player from any earlier week."""

    used = used_player_ids(previous_lineups, week_number)
    issues: List[LineupIssue] = []
    for slot, player_id in slots.items():
        if player_id not in used:
            continue
        player = players.get(player_id)
        label = f"{player.name} ({player.team})" if player else player_id
        issues.append(
            LineupIssue(
                slot,
                f"You already used {label} in a previous week - cannot use them again.",
            )
        )
    return issues


def team_counts(slots: LineupSlots, players: Mapping[str, Player]) -> List[int]:
    """Players per team, largest first."""

    counter = Counter(
        players[player_id].team for player_id in slots.player_ids() if player_id in players
    )
    return sorted(counter.values(), reverse=True)


def validate_team_constraints(
    week_number: int,
    slots: LineupSlots,
    players: Mapping[str, Player],
) -> List[LineupIssue]:
    """Check the week's required split of lineup players across teams."""

    try:
        rules = get_week_rules(week_number)
    except KeyError:
        return [LineupIssue(LINEUP_FIELD, "Invalid week number.")]

    counts = team_counts(slots, players)
    if len(counts) != rules.team_count:
        return [LineupIssue(LINEUP_FIELD, rules.team_count_message)]
    if tuple(counts) != rules.team_shape:
        return [LineupIssue(LINEUP_FIELD, rules.team_shape_message)]
    return []


def validate_lineup(
    week_number: int,
    slots: LineupSlots,
    players: Mapping[str, Player],
    previous_lineups: Optional[Iterable[Lineup]] = None,
) -> List[LineupIssue]:
    """Return every issue from the first failing rule family, or an empty list.

    Families run in order: completeness, positions, distinct players, burn
    rule, team distribution. Later families assume the earlier ones passed,
    so checking stops at the first family that reports anything.
    """

    history = list(previous_lineups or ())
    checks = (
        lambda: validate_completeness(slots),
        lambda: validate_positions(slots, players),
        lambda: validate_distinct_players(slots, players),
        lambda: validate_burn_rule(week_number, slots, players, history),
        lambda: validate_team_constraints(week_number, slots, players),
    )
    for check in checks:
        issues = check()
        if issues:
            logger.debug("Lineup for week %s rejected: %s", week_number, issues)
            return issues
    return []
