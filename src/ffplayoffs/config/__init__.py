"""Configuration helpers for lineup slots and weekly rules."""

from .lineup import (
    FLEX_POSITIONS,
    SLOT_ORDER,
    SLOT_POSITIONS,
    WeekRules,
    get_week_rules,
    iter_week_rules,
)

__all__ = [
    "FLEX_POSITIONS",
    "SLOT_ORDER",
    "SLOT_POSITIONS",
    "WeekRules",
    "get_week_rules",
    "iter_week_rules",
]
