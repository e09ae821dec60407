"""Playoff fantasy league: lineup validation, scoring and standings."""

__version__ = "0.1.0"
