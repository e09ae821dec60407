import json
from pathlib import Path

import pytest

from ffplayoffs.cli import main
from ffplayoffs.config_loader import SeedProfile
from ffplayoffs.ingest import SleeperStatsProvider
from ffplayoffs.models import Manager, Team
from ffplayoffs.persistence import LeagueStore


@pytest.fixture(autouse=True)
def _no_env_db(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("FFP_DB_PATH", raising=False)


def test_score_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    stats = tmp_path / "stats.json"
    stats.write_text(json.dumps({"rec": 7}), encoding="utf-8")

    main(["score", str(stats)])
    assert capsys.readouterr().out.strip() == "3.50"

    main(["score", str(stats), "--breakdown"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["breakdown"]["total"] == 3.5
    assert payload["normalized"]["rec"] == 7


def test_seed_import_and_validate(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    db = tmp_path / "league.sqlite"
    profile = tmp_path / "profile.json"
    SeedProfile(
        teams=[Team(code="BUF", name="Buffalo Bills"), Team(code="KC", name="Kansas City Chiefs")],
        managers=[Manager(manager_id="m1", name="Alice")],
    ).save(profile)

    main(["--db", str(db), "seed", "--profile", str(profile)])
    assert "Seeded 2 teams, 4 weeks, 1 managers" in capsys.readouterr().out

    players_csv = tmp_path / "players.csv"
    players_csv.write_text(
        "player_id,name,position,team,sleeper_id\n"
        "qb1,Josh Allen,QB,BUF,4984\n"
        "te2,Travis Kelce,TE,KC,\n"
        "x1,Somebody,WR,DAL,\n",
        encoding="utf-8",
    )
    main(["--db", str(db), "import-players", str(players_csv)])
    out = capsys.readouterr().out
    assert "Imported 2/3 players" in out
    assert "DAL" in out

    store = LeagueStore(db)
    assert {player.player_id for player in store.list_players()} == {"qb1", "te2"}

    with pytest.raises(SystemExit) as excinfo:
        main(["--db", str(db), "validate", "--manager", "m1", "--week", "1", "--qb", "qb1"])
    assert "All positions must be filled." in str(excinfo.value)


def test_default_seed_and_empty_leaderboard(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    db = tmp_path / "league.sqlite"
    main(["--db", str(db), "seed"])
    assert "Seeded 32 teams, 4 weeks, 0 managers" in capsys.readouterr().out

    main(["--db", str(db), "leaderboard"])
    assert "No managers yet" in capsys.readouterr().out


def test_unknown_week_exits(tmp_path: Path):
    db = tmp_path / "league.sqlite"
    with pytest.raises(SystemExit) as excinfo:
        main(["--db", str(db), "validate", "--manager", "m1", "--week", "3"])
    assert "not found" in str(excinfo.value)


@pytest.fixture
def sleeper_directory(monkeypatch: pytest.MonkeyPatch):
    async def fake_directory(self):
        return {
            "4034": {"full_name": "Christian McCaffrey", "team": "SF", "player_id": "4034"},
            "1466": {"full_name": "Travis Kelce", "team": "KC", "player_id": "1466"},
        }

    monkeypatch.setattr(SleeperStatsProvider, "player_directory", fake_directory)


def test_map_ids_dry_run_leaves_store_untouched(
    store: LeagueStore, sleeper_directory, capsys: pytest.CaptureFixture[str]
):
    main(["--db", str(store.db_path), "map-ids", "--dry-run"])
    out = capsys.readouterr().out
    assert "Matched 2/9 players" in out
    assert "Unmatched: " in out
    assert store.get_player("rb3").external_id is None


def test_map_ids_saves_matches(store: LeagueStore, sleeper_directory, capsys: pytest.CaptureFixture[str]):
    main(["--db", str(store.db_path), "map-ids"])
    assert "Matched 2/9 players" in capsys.readouterr().out
    assert store.get_player("rb3").external_id == "4034"
    assert store.get_player("te2").external_id == "1466"
    assert store.get_player("wr1").external_id is None
