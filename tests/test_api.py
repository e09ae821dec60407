from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from ffplayoffs.api import create_app
from ffplayoffs.persistence import LeagueStore


WEEK_ONE = {"qb": "qb1", "rb": "rb2", "wr": "wr1", "te": "te2", "flex": "wr3"}


class StaticProvider:
    name = "static"

    def __init__(self):
        self.closed = False

    async def fetch_raw_stats(self, week_number, player):
        return {"qb1": {"pass_yd": 325, "pass_td": 2}, "te2": {"rec": 7}}.get(player.player_id)

    async def aclose(self):
        self.closed = True


@pytest.fixture
async def client(store: LeagueStore):
    app = create_app(store, providers={"static": StaticProvider})
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


async def _submit(client: AsyncClient, manager_id: str = "m1", week_number: int = 1, **slots):
    payload = {"manager_id": manager_id, "week_number": week_number, **(slots or WEEK_ONE)}
    return await client.post("/lineups", json=payload)


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_weeks_and_current_week(client: AsyncClient):
    resp = await client.get("/weeks")
    assert resp.status_code == 200
    weeks = resp.json()
    assert [week["label"] for week in weeks][0] == "Wild Card"
    assert all(week["locked"] is False for week in weeks)

    resp = await client.get("/weeks/current")
    assert resp.json()["number"] == 1


@pytest.mark.anyio
async def test_submit_lineup_and_list(client: AsyncClient):
    resp = await _submit(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["qb"] == "qb1"
    assert body["updated_at"]

    resp = await client.get("/weeks/1/lineups")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Lineups for week 1 are hidden until the week locks."

    await client.put("/weeks/1", json={"is_locked": True})
    resp = await client.get("/weeks/1/lineups")
    assert resp.status_code == 200
    [entry] = resp.json()
    assert entry["lineup"]["manager_id"] == "m1"
    assert entry["total"] == 0.0


@pytest.mark.anyio
async def test_invalid_lineup_returns_issues(client: AsyncClient):
    resp = await _submit(client, qb="qb1", rb="rb2", wr="wr2", te="te2", flex="wr3")
    assert resp.status_code == 400
    errors = resp.json()["detail"]["errors"]
    assert errors == [
        {
            "field": "lineup",
            "message": (
                "For Wild Card round, you must select players from 5 different teams "
                "(max 1 player per team)."
            ),
        }
    ]


@pytest.mark.anyio
async def test_check_endpoint_reports_without_saving(client: AsyncClient):
    payload = {"manager_id": "m1", "week_number": 1, "qb": "qb1"}
    resp = await client.post("/lineups/check", json=payload)
    assert resp.status_code == 200
    assert resp.json() == {
        "valid": False,
        "errors": [{"field": "lineup", "message": "All positions must be filled."}],
    }
    assert client.app.state.league_store.list_lineups() == []


@pytest.mark.anyio
async def test_unknown_week_is_404(client: AsyncClient):
    resp = await _submit(client, week_number=9)
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_locked_week_is_423(client: AsyncClient):
    resp = await client.put("/weeks/1", json={"is_locked": True})
    assert resp.status_code == 200
    assert resp.json()["locked"] is True

    resp = await _submit(client)
    assert resp.status_code == 423
    assert resp.json()["detail"] == "Week 1 is locked. No more submissions allowed."


@pytest.mark.anyio
async def test_passed_deadline_stays_locked_after_unflagging(client: AsyncClient):
    past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
    resp = await client.put("/weeks/2", json={"is_locked": True, "deadline": past})
    assert resp.status_code == 200

    resp = await client.put("/weeks/2", json={"is_locked": False})
    body = resp.json()
    assert body["is_locked"] is False
    assert body["locked"] is True
    assert body["deadline"] is not None

    resp = await client.put("/weeks/2", json={"deadline": None})
    assert resp.json()["locked"] is False


@pytest.mark.anyio
async def test_delete_lineup(client: AsyncClient):
    await _submit(client)
    resp = await client.delete("/lineups/1/m1")
    assert resp.status_code == 200
    resp = await client.delete("/lineups/1/m1")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_players_filter(client: AsyncClient):
    resp = await client.get("/players", params={"team": "KC", "position": "WR"})
    assert resp.status_code == 200
    assert [player["player_id"] for player in resp.json()] == ["wr4"]


@pytest.mark.anyio
async def test_manual_scores_feed_leaderboard(client: AsyncClient):
    await _submit(client)
    resp = await client.post(
        "/scores/1", json={"scores": [{"player_id": "qb1", "points": 21.4}, {"player_id": "wr3", "points": 8.0}]}
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "saved": 2}

    resp = await client.get("/scores/1")
    assert {item["player_id"] for item in resp.json()} == {"qb1", "wr3"}

    resp = await client.get("/leaderboard")
    board = resp.json()
    assert board[0]["name"] == "Alice"
    assert board[0]["total"] == pytest.approx(29.4)
    assert board[1]["total"] == 0.0

    resp = await client.post("/scores/1", json={"scores": [{"player_id": "ghost", "points": 1}]})
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_fetch_scores_with_provider(client: AsyncClient):
    await _submit(client)
    resp = await client.post("/scores/1/fetch", params={"source": "static", "save": True})
    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "static"
    assert body["fetched_count"] == 2
    assert body["not_found_count"] == 3
    assert body["saved"] is True
    points = {item["player_id"]: item["points"] for item in body["scores"]}
    assert points["qb1"] == pytest.approx(23.0)
    assert points["te2"] == pytest.approx(3.5)

    resp = await client.post("/scores/1/fetch", params={"source": "nope"})
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_scoring_preview(client: AsyncClient):
    resp = await client.post("/scoring/preview", json={"rec": 7, "passingYards": 310})
    assert resp.status_code == 200
    body = resp.json()
    assert body["points"] == pytest.approx(3.5 + 12 + 2)
    assert body["breakdown"]["receiving"] == pytest.approx(3.5)
    assert body["normalized"]["pass_yd"] == 310


@pytest.mark.anyio
async def test_scoring_preview_with_overflowing_stats(client: AsyncClient):
    resp = await client.post("/scoring/preview", json={"rec_td": 1e308, "rush_yd": 50})
    assert resp.status_code == 200
    body = resp.json()
    assert body["points"] == pytest.approx(5.0)
    assert body["breakdown"]["receiving"] == 0.0
