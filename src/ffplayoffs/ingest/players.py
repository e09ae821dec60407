"""Load player pools from CSV and canonicalize team codes and positions."""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from pydantic import BaseModel

from ffplayoffs.config.lineup import PLAYER_POSITIONS
from ffplayoffs.models import Player


logger = logging.getLogger(__name__)

# code -> (city, nickname, other spellings seen in feeds)
NFL_TEAMS: dict[str, tuple[str, str, tuple[str, ...]]] = {
    "ARI": ("Arizona", "Cardinals", ()),
    "ATL": ("Atlanta", "Falcons", ()),
    "BAL": ("Baltimore", "Ravens", ()),
    "BUF": ("Buffalo", "Bills", ()),
    "CAR": ("Carolina", "Panthers", ()),
    "CHI": ("Chicago", "Bears", ()),
    "CIN": ("Cincinnati", "Bengals", ()),
    "CLE": ("Cleveland", "Browns", ()),
    "DAL": ("Dallas", "Cowboys", ()),
    "DEN": ("Denver", "Broncos", ()),
    "DET": ("Detroit", "Lions", ()),
    "GB": ("Green Bay", "Packers", ("GNB",)),
    "HOU": ("Houston", "Texans", ()),
    "IND": ("Indianapolis", "Colts", ()),
    "JAX": ("Jacksonville", "Jaguars", ("JAC",)),
    "KC": ("Kansas City", "Chiefs", ("KAN",)),
    "LAC": ("Los Angeles", "Chargers", ("LA Chargers", "San Diego Chargers")),
    "LAR": ("Los Angeles", "Rams", ("LA", "LA Rams", "St Louis Rams")),
    "LV": ("Las Vegas", "Raiders", ("LVR", "Oakland Raiders")),
    "MIA": ("Miami", "Dolphins", ()),
    "MIN": ("Minnesota", "Vikings", ()),
    "NE": ("New England", "Patriots", ("NWE",)),
    "NO": ("New Orleans", "Saints", ("NOR",)),
    "NYG": ("New York", "Giants", ("NY Giants",)),
    "NYJ": ("New York", "Jets", ("NY Jets",)),
    "PHI": ("Philadelphia", "Eagles", ()),
    "PIT": ("Pittsburgh", "Steelers", ()),
    "SEA": ("Seattle", "Seahawks", ()),
    "SF": ("San Francisco", "49ers", ("SFO",)),
    "TB": ("Tampa Bay", "Buccaneers", ("TAM", "Bucs")),
    "TEN": ("Tennessee", "Titans", ()),
    "WAS": ("Washington", "Commanders", ("WSH", "Washington Football Team")),
}

# Cities shared by two franchises cannot identify a team on their own.
_SHARED_CITIES = {"LOSANGELES", "NEWYORK"}

_POSITION_ALIASES = {"D/ST": "DST", "DEF": "DST", "D": "DST", "DEFENSE": "DST", "PK": "K"}


def _team_token(value: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", value.upper())


def _build_alias_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for code, (city, nickname, extras) in NFL_TEAMS.items():
        variants = [code, nickname, f"{city} {nickname}", *extras]
        if _team_token(city) not in _SHARED_CITIES:
            variants.append(city)
        for variant in variants:
            lookup.setdefault(_team_token(variant), code)
    return lookup


TEAM_ALIAS_LOOKUP = _build_alias_lookup()


def canonical_team(team: str) -> str:
    """Map a team name or abbreviation to its short code."""

    token = _team_token(team)
    return TEAM_ALIAS_LOOKUP.get(token, team.strip().upper())


def canonical_position(position: str) -> Optional[str]:
    token = position.strip().upper()
    token = _POSITION_ALIASES.get(token, token)
    return token if token in PLAYER_POSITIONS else None


class PlayerRow(BaseModel):
    raw_id: Optional[str] = None
    raw_name: str
    raw_position: str
    raw_team: str
    raw_external_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "PlayerRow":
        def extract(key: str, *, default: Optional[str] = None) -> Optional[str]:
            column = mapping.get(key)
            if column is None:
                return default
            value = row.get(column)
            if value is None or not value.strip():
                return default
            return value.strip()

        return cls(
            raw_id=extract("player_id"),
            raw_name=extract("name", default="") or "",
            raw_position=extract("position", default="") or "",
            raw_team=extract("team", default="") or "",
            raw_external_id=extract("external_id"),
        )


DEFAULT_PLAYERS_MAPPING = {
    "player_id": "player_id",
    "name": "name",
    "position": "position",
    "team": "team",
    "external_id": "sleeper_id",
}


@dataclass
class ImportReport:
    total_rows: int = 0
    imported: int = 0
    skipped: List[str] = field(default_factory=list)


def load_player_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[PlayerRow]:
    mapping = mapping or DEFAULT_PLAYERS_MAPPING
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [PlayerRow.from_mapping(row, mapping) for row in reader]
    return rows


def rows_to_players(
    rows: Sequence[PlayerRow],
    *,
    known_teams: Optional[Iterable[str]] = None,
) -> Tuple[List[Player], ImportReport]:
    """Convert CSV rows to players, skipping rows with unknown teams or positions."""

    allowed_teams = {code.upper() for code in known_teams} if known_teams is not None else None
    report = ImportReport(total_rows=len(rows))
    players: List[Player] = []
    for row in rows:
        if not row.raw_name or not row.raw_position or not row.raw_team:
            report.skipped.append(f"{row.raw_name or '?'}: missing name, position or team")
            continue
        position = canonical_position(row.raw_position)
        if position is None:
            report.skipped.append(f"{row.raw_name}: unsupported position {row.raw_position!r}")
            continue
        team = canonical_team(row.raw_team)
        if allowed_teams is not None and team not in allowed_teams:
            logger.warning("Team %s not found for player %s", row.raw_team, row.raw_name)
            report.skipped.append(f"{row.raw_name}: team {row.raw_team!r} not found")
            continue
        players.append(
            Player(
                player_id=row.raw_id or uuid4().hex,
                name=row.raw_name,
                position=position,
                team=team,
                external_id=row.raw_external_id,
            )
        )
    report.imported = len(players)
    return players, report


_NAME_SUFFIX_TOKENS = {"jr", "sr", "ii", "iii", "iv", "v"}


def normalize_name(name: str) -> str:
    """Lowercase alphanumeric name with generational suffixes dropped."""

    cleaned = re.sub(r"[^a-z0-9]+", " ", name.lower())
    tokens = [tok for tok in cleaned.split() if tok and tok not in _NAME_SUFFIX_TOKENS]
    return "".join(tokens)


def player_key(name: str, team: str) -> str:
    return f"{normalize_name(name)}::{canonical_team(team)}"
