from __future__ import annotations

from pathlib import Path

import pytest

from ffplayoffs.config_loader import default_weeks
from ffplayoffs.models import Manager, Player, Team
from ffplayoffs.persistence import LeagueStore


TEAMS = [
    Team(code="BUF", name="Buffalo Bills"),
    Team(code="KC", name="Kansas City Chiefs"),
    Team(code="BAL", name="Baltimore Ravens"),
    Team(code="PHI", name="Philadelphia Eagles"),
    Team(code="SF", name="San Francisco 49ers"),
    Team(code="DET", name="Detroit Lions"),
]

PLAYERS = [
    Player(player_id="qb1", name="Josh Allen", position="QB", team="BUF", external_id="4984"),
    Player(player_id="qb2", name="Patrick Mahomes", position="QB", team="KC", external_id="4046"),
    Player(player_id="rb1", name="Saquon Barkley", position="RB", team="PHI", external_id="4866"),
    Player(player_id="rb2", name="Derrick Henry", position="RB", team="BAL", external_id="3198"),
    Player(player_id="rb3", name="Christian McCaffrey", position="RB", team="SF"),
    Player(player_id="wr1", name="Amon-Ra St. Brown", position="WR", team="DET"),
    Player(player_id="wr2", name="Khalil Shakir", position="WR", team="BUF"),
    Player(player_id="wr3", name="A.J. Brown", position="WR", team="PHI"),
    Player(player_id="wr4", name="Xavier Worthy", position="WR", team="KC"),
    Player(player_id="wr5", name="Zay Flowers", position="WR", team="BAL"),
    Player(player_id="te1", name="George Kittle", position="TE", team="SF"),
    Player(player_id="te2", name="Travis Kelce", position="TE", team="KC"),
    Player(player_id="k1", name="Harrison Butker", position="K", team="KC"),
]

MANAGERS = [
    Manager(manager_id="m1", name="Alice"),
    Manager(manager_id="m2", name="Bob"),
]


@pytest.fixture
def players() -> dict[str, Player]:
    return {player.player_id: player for player in PLAYERS}


@pytest.fixture
def store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> LeagueStore:
    monkeypatch.delenv("FFP_DB_PATH", raising=False)
    league_store = LeagueStore(tmp_path / "league.sqlite")
    for team in TEAMS:
        league_store.upsert_team(team)
    for week in default_weeks():
        league_store.upsert_week(week)
    league_store.add_players(PLAYERS)
    for manager in MANAGERS:
        league_store.upsert_manager(manager)
    return league_store


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
