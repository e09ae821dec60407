"""Stat providers and the concurrent weekly stat fetch.

Providers turn a (week, player) pair into a raw stat mapping in whichever
naming convention the upstream API uses; the scoring engine normalizes it.
A provider raises :class:`UpstreamStatError` when the upstream call fails and
returns None when the player simply is not in the data.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import httpx

from ffplayoffs.config import get_week_rules
from ffplayoffs.errors import UpstreamStatError
from ffplayoffs.models import Player

from .players import player_key


logger = logging.getLogger(__name__)

SLEEPER_API = "https://api.sleeper.app/v1"
ESPN_API = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

# Playoff rounds 1-4 as Sleeper numbers them.
SLEEPER_WEEK_MAP: Mapping[int, int] = {1: 18, 2: 19, 3: 20, 4: 21}
# ESPN postseason weeks; week 4 is the Pro Bowl, so the Super Bowl is week 5.
ESPN_WEEK_MAP: Mapping[int, int] = {1: 1, 2: 2, 3: 3, 4: 5}

_CONCURRENCY_ENV = "FFP_STATS_CONCURRENCY"
_TIMEOUT_ENV = "FFP_STATS_TIMEOUT"
_SEASON_ENV = "FFP_SLEEPER_SEASON"

_CONCURRENCY_DEFAULT = 8
_TIMEOUT_DEFAULT = 10.0


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def stats_concurrency() -> int:
    return _env_int(_CONCURRENCY_ENV, _CONCURRENCY_DEFAULT, min_value=1)


def stats_timeout() -> float:
    return _env_float(_TIMEOUT_ENV, _TIMEOUT_DEFAULT, clamp_min=0.1)


def default_season(now: Optional[datetime] = None) -> int:
    """NFL season whose playoffs are current; January games belong to the prior year."""

    moment = now or datetime.now(timezone.utc)
    fallback = moment.year if moment.month >= 9 else moment.year - 1
    return _env_int(_SEASON_ENV, fallback)


def _ensure_playoff_week(week_number: int) -> None:
    try:
        get_week_rules(week_number)
    except KeyError:
        raise ValueError(
            f"Invalid week number {week_number}. Must be 1-4 (playoff weeks)"
        ) from None


class StatsProvider(Protocol):
    name: str

    async def fetch_raw_stats(self, week_number: int, player: Player) -> Optional[Mapping[str, Any]]:
        ...


async def _get_json(client: httpx.AsyncClient, url: str, *, params: Mapping[str, Any] | None = None) -> Any:
    try:
        response = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise UpstreamStatError(f"Request to {url} failed: {exc}") from exc
    if response.status_code != 200:
        raise UpstreamStatError(f"{url} returned HTTP {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamStatError(f"{url} returned malformed JSON") from exc


class _ClientOwner:
    """Shares an httpx client or owns one created on demand."""

    base_url: str

    def __init__(self, client: httpx.AsyncClient | None, base_url: str, timeout: float | None):
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout if timeout is not None else stats_timeout()
        self._week_locks: Dict[int, asyncio.Lock] = {}

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    def _week_lock(self, week_number: int) -> asyncio.Lock:
        return self._week_locks.setdefault(week_number, asyncio.Lock())

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class SleeperStatsProvider(_ClientOwner):
    """Weekly stat dump keyed by Sleeper player id (compact field names)."""

    name = "sleeper"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        season: int | None = None,
        base_url: str = SLEEPER_API,
        timeout: float | None = None,
    ):
        super().__init__(client, base_url, timeout)
        self.season = season if season is not None else default_season()
        self._weeks: Dict[int, Mapping[str, Any]] = {}

    async def week_stats(self, week_number: int) -> Mapping[str, Any]:
        async with self._week_lock(week_number):
            if week_number not in self._weeks:
                provider_week = SLEEPER_WEEK_MAP[week_number]
                url = f"{self.base_url}/stats/nfl/regular/{self.season}/{provider_week}"
                payload = await _get_json(self.client, url)
                if not isinstance(payload, dict):
                    raise UpstreamStatError(f"{url} did not return a stat mapping")
                self._weeks[week_number] = payload
                logger.info(
                    "Loaded Sleeper stats for week %s (%d players)", week_number, len(payload)
                )
            return self._weeks[week_number]

    async def fetch_raw_stats(self, week_number: int, player: Player) -> Optional[Mapping[str, Any]]:
        if not player.external_id:
            return None
        stats = (await self.week_stats(week_number)).get(player.external_id)
        if not isinstance(stats, Mapping):
            return None
        return stats

    async def player_directory(self) -> Mapping[str, Any]:
        payload = await _get_json(self.client, f"{self.base_url}/players/nfl")
        if not isinstance(payload, dict):
            raise UpstreamStatError("Sleeper player directory is not a mapping")
        return payload


# ESPN boxscore column key -> descriptive stat name used by the scoring engine.
_ESPN_KEY_MAP: Mapping[str, str] = {
    "passingYards": "passingYards",
    "passingTouchdowns": "passingTouchdowns",
    "interceptions": "interceptions",
    "sacks-sackYardsLost": "sacks",
    "rushingYards": "rushingYards",
    "rushingTouchdowns": "rushingTouchdowns",
    "receptions": "receivingReceptions",
    "receivingYards": "receivingYards",
    "receivingTouchdowns": "receivingTouchdowns",
    "fumbles": "fum",
    "fumblesLost": "fumblesLost",
}


_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def _espn_value(raw: Any) -> Optional[float]:
    # Compound cells such as "2-14" (sacks-yards) or "18/27" keep their first number.
    match = _LEADING_NUMBER.match(str(raw))
    return float(match.group(1)) if match else None


def parse_espn_boxscore(summary: Mapping[str, Any]) -> Dict[str, Dict[str, float]]:
    """Flatten an ESPN game summary into ``{player_key: stats}``."""

    players: Dict[str, Dict[str, float]] = {}
    boxscore = summary.get("boxscore") or {}
    for team_block in boxscore.get("players") or []:
        team_code = str((team_block.get("team") or {}).get("abbreviation") or "")
        for category in team_block.get("statistics") or []:
            keys = category.get("keys") or []
            for entry in category.get("athletes") or []:
                athlete = entry.get("athlete") or {}
                name = athlete.get("displayName")
                if not name:
                    continue
                stats = players.setdefault(player_key(name, team_code), {})
                for key, raw in zip(keys, entry.get("stats") or []):
                    target = _ESPN_KEY_MAP.get(key)
                    value = _espn_value(raw)
                    if target is not None and value is not None:
                        stats[target] = value
    return players


class EspnStatsProvider(_ClientOwner):
    """Per-game boxscores matched by player name and team (descriptive field names)."""

    name = "espn"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str = ESPN_API,
        timeout: float | None = None,
    ):
        super().__init__(client, base_url, timeout)
        self._weeks: Dict[int, Dict[str, Dict[str, float]]] = {}

    async def week_stats(self, week_number: int) -> Mapping[str, Dict[str, float]]:
        async with self._week_lock(week_number):
            if week_number not in self._weeks:
                scoreboard = await _get_json(
                    self.client,
                    f"{self.base_url}/scoreboard",
                    params={"week": ESPN_WEEK_MAP[week_number], "seasontype": 3},
                )
                if not isinstance(scoreboard, dict):
                    raise UpstreamStatError("ESPN scoreboard is not a mapping")
                merged: Dict[str, Dict[str, float]] = {}
                for event in scoreboard.get("events") or []:
                    event_id = event.get("id")
                    if not event_id:
                        continue
                    try:
                        summary = await _get_json(
                            self.client, f"{self.base_url}/summary", params={"event": event_id}
                        )
                    except UpstreamStatError as exc:
                        logger.warning("Skipping ESPN game %s: %s", event_id, exc)
                        continue
                    if isinstance(summary, dict):
                        merged.update(parse_espn_boxscore(summary))
                self._weeks[week_number] = merged
                logger.info("Loaded ESPN boxscores for week %s (%d players)", week_number, len(merged))
            return self._weeks[week_number]

    async def fetch_raw_stats(self, week_number: int, player: Player) -> Optional[Mapping[str, Any]]:
        stats = (await self.week_stats(week_number)).get(player_key(player.name, player.team))
        return dict(stats) if stats is not None else None


@dataclass
class StatsFetchResult:
    week_number: int
    source: str
    stats: Dict[str, Mapping[str, Any]] = field(default_factory=dict)
    unmapped: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def fetched_count(self) -> int:
        return len(self.stats)

    @property
    def not_found_count(self) -> int:
        return len(self.unmapped)


async def fetch_week_stats(
    provider: StatsProvider,
    week_number: int,
    players: Sequence[Player],
    *,
    concurrency: int | None = None,
) -> StatsFetchResult:
    """Fetch raw stats for every player with bounded parallelism.

    A failure for one player marks only that player unmapped.
    """

    _ensure_playoff_week(week_number)
    semaphore = asyncio.Semaphore(concurrency or stats_concurrency())

    async def fetch_one(player: Player) -> Optional[Mapping[str, Any]]:
        async with semaphore:
            return await provider.fetch_raw_stats(week_number, player)

    logger.info("Fetching %s stats for %d players (week %s)", provider.name, len(players), week_number)
    results = await asyncio.gather(*(fetch_one(player) for player in players), return_exceptions=True)

    outcome = StatsFetchResult(week_number=week_number, source=provider.name)
    for player, result in zip(players, results):
        if isinstance(result, UpstreamStatError):
            logger.warning("Stats unavailable for %s (%s): %s", player.name, player.team, result)
            outcome.errors[player.player_id] = str(result)
            outcome.unmapped.append(player.player_id)
        elif isinstance(result, BaseException):
            raise result
        elif result is None:
            logger.debug("No %s stats for %s (%s)", provider.name, player.name, player.team)
            outcome.unmapped.append(player.player_id)
        else:
            outcome.stats[player.player_id] = result

    logger.info(
        "Fetched stats for %d players, %d not found", outcome.fetched_count, outcome.not_found_count
    )
    return outcome


def map_external_ids(
    players: Sequence[Player],
    directory: Mapping[str, Mapping[str, Any]],
) -> Tuple[Dict[str, str], List[str]]:
    """Match players to provider ids by name and team.

    Returns ``({player_id: external_id}, [unmatched player ids])``.
    """

    by_key: Dict[str, str] = {}
    for external_id, entry in directory.items():
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("full_name") or " ".join(
            part for part in (entry.get("first_name"), entry.get("last_name")) if part
        )
        team = entry.get("team")
        if not name or not team:
            continue
        by_key.setdefault(player_key(str(name), str(team)), str(entry.get("player_id") or external_id))

    matched: Dict[str, str] = {}
    unmatched: List[str] = []
    for player in players:
        external_id = by_key.get(player_key(player.name, player.team))
        if external_id is None:
            unmatched.append(player.player_id)
        else:
            matched[player.player_id] = external_id
    logger.info("Mapped %d players, %d unmapped", len(matched), len(unmatched))
    return matched, unmatched


__all__ = [
    "EspnStatsProvider",
    "SleeperStatsProvider",
    "StatsFetchResult",
    "StatsProvider",
    "fetch_week_stats",
    "map_external_ids",
    "parse_espn_boxscore",
]
