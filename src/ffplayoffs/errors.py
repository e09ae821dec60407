"""Exceptions raised by the league service layer and stat providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ffplayoffs.validation import LineupIssue


class LeagueError(Exception):
    """Base class for league errors surfaced to callers."""


class NotFoundError(LeagueError):
    def __init__(self, kind: str, key: object):
        super().__init__(f"{kind} {key!r} not found")
        self.kind = kind
        self.key = key


class LockedError(LeagueError):
    def __init__(self, week_number: int):
        super().__init__(f"Week {week_number} is locked. No more submissions allowed.")
        self.week_number = week_number


class LineupRejected(LeagueError):
    """Lineup failed validation; ``issues`` holds every problem of the failing rule family."""

    def __init__(self, issues: Sequence["LineupIssue"]):
        self.issues = list(issues)
        message = "; ".join(issue.message for issue in self.issues) or "Lineup rejected"
        super().__init__(message)


class UpstreamStatError(LeagueError):
    """Stat provider was unreachable or returned something unusable."""


class WeekOpenError(LeagueError):
    """Lineups of a week stay hidden until the week locks."""

    def __init__(self, week_number: int):
        super().__init__(f"Lineups for week {week_number} are hidden until the week locks.")
        self.week_number = week_number
