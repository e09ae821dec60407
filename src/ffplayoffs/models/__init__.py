"""Canonical league records shared across storage, services and the API."""

from .league import Lineup, LineupSlots, Manager, PlayerScore, Week
from .player import Player, Position, Team

__all__ = [
    "Lineup",
    "LineupSlots",
    "Manager",
    "Player",
    "PlayerScore",
    "Position",
    "Team",
    "Week",
]
