"""SQLite persistence for teams, players, weeks, lineups and scores."""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence

from ffplayoffs.models import Lineup, LineupSlots, Manager, Player, PlayerScore, Team, Week


_UNSET = object()


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_ts(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class LeagueStore:
    """SQLite-backed store implementing the lookups the league services need."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        env_db = os.getenv("FFP_DB_PATH")
        target = env_db or db_path
        if isinstance(target, str) and target.startswith("file:"):
            self.db_path: Path | str = target
            self._use_uri = True
        else:
            self.db_path = Path(target)
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS teams (
                code TEXT PRIMARY KEY,
                name TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                position TEXT NOT NULL,
                team_code TEXT NOT NULL REFERENCES teams(code),
                external_id TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS managers (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS weeks (
                number INTEGER PRIMARY KEY,
                label TEXT NOT NULL,
                deadline TEXT,
                is_locked INTEGER NOT NULL DEFAULT 0
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS lineups (
                week_number INTEGER NOT NULL REFERENCES weeks(number),
                manager_id TEXT NOT NULL,
                qb_id TEXT NOT NULL,
                rb_id TEXT NOT NULL,
                wr_id TEXT NOT NULL,
                te_id TEXT NOT NULL,
                flex_id TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (week_number, manager_id)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS player_scores (
                week_number INTEGER NOT NULL REFERENCES weeks(number),
                player_id TEXT NOT NULL,
                points REAL NOT NULL,
                PRIMARY KEY (week_number, player_id)
            )
            """
        )

    # Teams ----------------------------------------------------------------

    def upsert_team(self, team: Team) -> Team:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO teams (code, name) VALUES (?, ?)
                ON CONFLICT(code) DO UPDATE SET name = excluded.name
                """,
                (team.code, team.name),
            )
        return team

    def get_team(self, code: str) -> Optional[Team]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM teams WHERE code = ?", (code.upper(),)).fetchone()
        return Team(code=row["code"], name=row["name"]) if row else None

    def list_teams(self) -> List[Team]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM teams ORDER BY code").fetchall()
        return [Team(code=row["code"], name=row["name"]) for row in rows]

    # Players --------------------------------------------------------------

    def add_player(self, player: Player) -> Player:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO players (id, name, position, team_code, external_id)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE
                SET external_id = COALESCE(excluded.external_id, players.external_id)
                """,
                (player.player_id, player.name, player.position, player.team, player.external_id),
            )
        return player

    def add_players(self, players: Iterable[Player]) -> int:
        count = 0
        for player in players:
            self.add_player(player)
            count += 1
        return count

    def set_player_external_id(self, player_id: str, external_id: Optional[str]) -> Player:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE players SET external_id = ? WHERE id = ?",
                (external_id, player_id),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"Player {player_id} not found")
        player = self.get_player(player_id)
        if player is None:  # pragma: no cover
            raise KeyError(f"Player {player_id} not found after update")
        return player

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        return self._row_to_player(row) if row else None

    def get_players(self, player_ids: Iterable[str]) -> dict[str, Player]:
        ids = sorted({player_id for player_id in player_ids if player_id})
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM players WHERE id IN ({placeholders})",
                tuple(ids),
            ).fetchall()
        return {row["id"]: self._row_to_player(row) for row in rows}

    def list_players(self, *, team: str | None = None, position: str | None = None) -> List[Player]:
        query = "SELECT * FROM players"
        conditions: list[str] = []
        params: list[str] = []
        if team:
            conditions.append("team_code = ?")
            params.append(team.upper())
        if position:
            conditions.append("position = ?")
            params.append(position.upper())
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY team_code, position, name"
        with self._connect() as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_player(row) for row in rows]

    # Managers -------------------------------------------------------------

    def upsert_manager(self, manager: Manager) -> Manager:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO managers (id, name) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET name = excluded.name
                """,
                (manager.manager_id, manager.name),
            )
        return manager

    def list_managers(self) -> List[Manager]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM managers ORDER BY name").fetchall()
        return [Manager(manager_id=row["id"], name=row["name"]) for row in rows]

    # Weeks ----------------------------------------------------------------

    def upsert_week(self, week: Week) -> Week:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO weeks (number, label, deadline, is_locked) VALUES (?, ?, ?, ?)
                ON CONFLICT(number) DO UPDATE SET
                    label = excluded.label,
                    deadline = excluded.deadline,
                    is_locked = excluded.is_locked
                """,
                (week.number, week.label, _format_ts(week.deadline), int(week.is_locked)),
            )
        return week

    def get_week(self, number: int) -> Optional[Week]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM weeks WHERE number = ?", (number,)).fetchone()
        return self._row_to_week(row) if row else None

    def list_weeks(self) -> List[Week]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM weeks ORDER BY number").fetchall()
        return [self._row_to_week(row) for row in rows]

    def update_week(
        self,
        number: int,
        *,
        is_locked: bool | None = None,
        deadline: datetime | None | object = _UNSET,
    ) -> Week:
        """Change the manual lock flag and/or deadline; ``deadline=None`` clears it."""

        week = self.get_week(number)
        if week is None:
            raise KeyError(f"Week {number} not found")
        updates: dict[str, object] = {}
        if is_locked is not None:
            updates["is_locked"] = is_locked
        if deadline is not _UNSET:
            updates["deadline"] = deadline
        if not updates:
            return week
        return self.upsert_week(week.model_copy(update=updates))

    # Lineups --------------------------------------------------------------

    def upsert_lineup(self, manager_id: str, week_number: int, slots: LineupSlots) -> Lineup:
        """Create or replace the manager's lineup for the week (last write wins)."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO lineups (
                    week_number, manager_id, qb_id, rb_id, wr_id, te_id, flex_id, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(week_number, manager_id) DO UPDATE SET
                    qb_id = excluded.qb_id,
                    rb_id = excluded.rb_id,
                    wr_id = excluded.wr_id,
                    te_id = excluded.te_id,
                    flex_id = excluded.flex_id,
                    updated_at = excluded.updated_at
                """,
                (
                    week_number,
                    manager_id,
                    slots.qb,
                    slots.rb,
                    slots.wr,
                    slots.te,
                    slots.flex,
                    now.isoformat(),
                ),
            )
        return Lineup(manager_id=manager_id, week_number=week_number, slots=slots, updated_at=now)

    def get_lineup(self, manager_id: str, week_number: int) -> Optional[Lineup]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM lineups WHERE manager_id = ? AND week_number = ?",
                (manager_id, week_number),
            ).fetchone()
        return self._row_to_lineup(row) if row else None

    def delete_lineup(self, manager_id: str, week_number: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM lineups WHERE manager_id = ? AND week_number = ?",
                (manager_id, week_number),
            )
        return cursor.rowcount > 0

    def list_lineups(self, week_number: int | None = None) -> List[Lineup]:
        query = "SELECT * FROM lineups"
        params: tuple[int, ...] = ()
        if week_number is not None:
            query += " WHERE week_number = ?"
            params = (week_number,)
        query += " ORDER BY week_number, manager_id"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_lineup(row) for row in rows]

    def find_lineups_for_manager_before_week(self, manager_id: str, week_number: int) -> List[Lineup]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM lineups
                WHERE manager_id = ? AND week_number < ?
                ORDER BY week_number
                """,
                (manager_id, week_number),
            ).fetchall()
        return [self._row_to_lineup(row) for row in rows]

    # Scores ---------------------------------------------------------------

    def save_player_scores(self, week_number: int, points: Mapping[str, float]) -> int:
        rows = [(week_number, player_id, float(value)) for player_id, value in points.items()]
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO player_scores (week_number, player_id, points) VALUES (?, ?, ?)
                ON CONFLICT(week_number, player_id) DO UPDATE SET points = excluded.points
                """,
                rows,
            )
        return len(rows)

    def get_player_scores(self, week_number: int) -> List[PlayerScore]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM player_scores WHERE week_number = ? ORDER BY player_id",
                (week_number,),
            ).fetchall()
        return [
            PlayerScore(week_number=row["week_number"], player_id=row["player_id"], points=row["points"])
            for row in rows
        ]

    def score_lookup(self, week_numbers: Sequence[int] | None = None) -> dict[int, dict[str, float]]:
        """``{week_number: {player_id: points}}`` for the requested (or all) weeks."""

        query = "SELECT * FROM player_scores"
        params: tuple[int, ...] = ()
        if week_numbers:
            placeholders = ", ".join("?" for _ in week_numbers)
            query += f" WHERE week_number IN ({placeholders})"
            params = tuple(week_numbers)
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        lookup: dict[int, dict[str, float]] = {}
        for row in rows:
            lookup.setdefault(row["week_number"], {})[row["player_id"]] = row["points"]
        return lookup

    # Row mapping ----------------------------------------------------------

    def _row_to_player(self, row: sqlite3.Row) -> Player:
        return Player(
            player_id=row["id"],
            name=row["name"],
            position=row["position"],
            team=row["team_code"],
            external_id=row["external_id"],
        )

    def _row_to_week(self, row: sqlite3.Row) -> Week:
        return Week(
            number=row["number"],
            label=row["label"],
            deadline=_parse_ts(row["deadline"]),
            is_locked=bool(row["is_locked"]),
        )

    def _row_to_lineup(self, row: sqlite3.Row) -> Lineup:
        return Lineup(
            manager_id=row["manager_id"],
            week_number=row["week_number"],
            slots=LineupSlots(
                qb=row["qb_id"],
                rb=row["rb_id"],
                wr=row["wr_id"],
                te=row["te_id"],
                flex=row["flex_id"],
            ),
            updated_at=_parse_ts(row["updated_at"]),
        )


__all__ = ["LeagueStore"]
