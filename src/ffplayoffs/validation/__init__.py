"""Lineup validation rules."""

from .lineup import (
    LineupIssue,
    team_counts,
    used_player_ids,
    validate_burn_rule,
    validate_completeness,
    validate_distinct_players,
    validate_lineup,
    validate_positions,
    validate_team_constraints,
)

__all__ = [
    "LineupIssue",
    "team_counts",
    "used_player_ids",
    "validate_burn_rule",
    "validate_completeness",
    "validate_distinct_players",
    "validate_lineup",
    "validate_positions",
    "validate_team_constraints",
]
