"""Persist and load league seed profiles (teams, weeks, managers)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ffplayoffs.config import iter_week_rules
from ffplayoffs.models import Manager, Team, Week


def default_weeks() -> List[Week]:
    return [Week(number=rules.number, label=rules.label) for rules in iter_week_rules()]


@dataclass
class SeedProfile:
    teams: List[Team]
    weeks: List[Week] = field(default_factory=default_weeks)
    managers: List[Manager] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "SeedProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        weeks = [Week.model_validate(item) for item in data.get("weeks", [])]
        return cls(
            teams=[Team.model_validate(item) for item in data.get("teams", [])],
            weeks=weeks or default_weeks(),
            managers=[Manager.model_validate(item) for item in data.get("managers", [])],
        )

    def save(self, path: Path) -> None:
        payload = {
            "teams": [team.model_dump() for team in self.teams],
            "weeks": [week.model_dump(mode="json") for week in self.weeks],
            "managers": [manager.model_dump() for manager in self.managers],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
