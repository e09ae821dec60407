"""Command-line interface for league administration and scoring."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Sequence

from ffplayoffs.config_loader import SeedProfile
from ffplayoffs.errors import LeagueError, LineupRejected
from ffplayoffs.ingest import (
    EspnStatsProvider,
    SleeperStatsProvider,
    load_player_csv,
    map_external_ids,
    rows_to_players,
)
from ffplayoffs.ingest.players import DEFAULT_PLAYERS_MAPPING, NFL_TEAMS
from ffplayoffs.league import build_leaderboard, check_lineup, fetch_week_scores, submit_lineup
from ffplayoffs.models import LineupSlots, Team
from ffplayoffs.persistence import LeagueStore
from ffplayoffs.scoring import normalize_stats, score_breakdown


DEFAULT_DB = Path("ffplayoffs.sqlite")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage a playoff fantasy league")
    parser.add_argument("--db", type=Path, default=DEFAULT_DB, help="SQLite database path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    score = sub.add_parser("score", help="Score a raw stat JSON object")
    score.add_argument("stats", type=Path, help="Path to a JSON file with one player's stats")
    score.add_argument("--breakdown", action="store_true", help="Print points per category")

    seed = sub.add_parser("seed", help="Create teams, weeks and managers")
    seed.add_argument("--profile", type=Path, default=None, help="Seed profile JSON")
    seed.add_argument("--save-profile", type=Path, default=None, help="Write the seed profile used")

    players = sub.add_parser("import-players", help="Import players from CSV")
    players.add_argument("csv", type=Path, help="Players CSV")
    players.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for CSV columns (e.g., name=Player Name)",
    )

    validate = sub.add_parser("validate", help="Check (and optionally submit) a lineup")
    validate.add_argument("--manager", required=True, help="Manager id")
    validate.add_argument("--week", type=int, required=True, help="Playoff week 1-4")
    for slot in ("qb", "rb", "wr", "te", "flex"):
        validate.add_argument(f"--{slot}", default="", help=f"{slot.upper()} player id")
    validate.add_argument("--submit", action="store_true", help="Save the lineup when valid")

    fetch = sub.add_parser("fetch-stats", help="Fetch and score stats for a week's players")
    fetch.add_argument("week", type=int, help="Playoff week 1-4")
    fetch.add_argument("--source", choices=("sleeper", "espn"), default="sleeper")
    fetch.add_argument("--season", type=int, default=None, help="Sleeper season year")
    fetch.add_argument("--concurrency", type=int, default=None, help="Parallel requests")
    fetch.add_argument("--save", action="store_true", help="Store the computed scores")

    map_ids = sub.add_parser("map-ids", help="Back-fill Sleeper ids by name and team")
    map_ids.add_argument("--dry-run", action="store_true", help="Report matches without saving")

    sub.add_parser("leaderboard", help="Print season standings")
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _cmd_score(args: argparse.Namespace) -> None:
    try:
        stats = json.loads(args.stats.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SystemExit(f"Could not read stats from {args.stats}: {exc}") from exc
    if not isinstance(stats, dict):
        raise SystemExit("Stats file must contain a JSON object")
    breakdown = score_breakdown(stats)
    if args.breakdown:
        payload = {"breakdown": breakdown.as_dict(), "normalized": normalize_stats(stats).as_dict()}
        print(json.dumps(payload, indent=2))
    else:
        print(f"{breakdown.total:.2f}")


def _cmd_seed(store: LeagueStore, args: argparse.Namespace) -> None:
    if args.profile:
        profile = SeedProfile.load(args.profile)
    else:
        profile = SeedProfile(
            teams=[Team(code=code, name=f"{city} {nickname}") for code, (city, nickname, _) in NFL_TEAMS.items()]
        )
    for team in profile.teams:
        store.upsert_team(team)
    for week in profile.weeks:
        store.upsert_week(week)
    for manager in profile.managers:
        store.upsert_manager(manager)
    print(
        f"Seeded {len(profile.teams)} teams, {len(profile.weeks)} weeks, "
        f"{len(profile.managers)} managers"
    )
    if args.save_profile:
        profile.save(args.save_profile)
        print(f"Saved seed profile to {args.save_profile}")


def _cmd_import_players(store: LeagueStore, args: argparse.Namespace) -> None:
    mapping = DEFAULT_PLAYERS_MAPPING | _parse_mapping(args.column)
    rows = load_player_csv(args.csv, mapping=mapping)
    known = [team.code for team in store.list_teams()]
    players, report = rows_to_players(rows, known_teams=known)
    store.add_players(players)
    print(f"Imported {report.imported}/{report.total_rows} players")
    if report.skipped:
        preview = ", ".join(report.skipped[:5])
        more = len(report.skipped) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Skipped: {preview}{suffix}")


def _cmd_validate(store: LeagueStore, args: argparse.Namespace) -> None:
    slots = LineupSlots(qb=args.qb, rb=args.rb, wr=args.wr, te=args.te, flex=args.flex)
    if args.submit:
        try:
            submit_lineup(store, args.manager, args.week, slots)
        except LineupRejected as exc:
            raise SystemExit("\n".join(issue.message for issue in exc.issues)) from exc
        print(f"Saved week {args.week} lineup for {args.manager}")
        return
    issues = check_lineup(store, args.manager, args.week, slots)
    if issues:
        raise SystemExit("\n".join(issue.message for issue in issues))
    print("Lineup is valid")


async def _run_fetch(store: LeagueStore, args: argparse.Namespace) -> None:
    if args.source == "espn":
        provider = EspnStatsProvider()
    else:
        provider = SleeperStatsProvider(season=args.season)
    async with provider:
        result = await fetch_week_scores(
            store, provider, args.week, save=args.save, concurrency=args.concurrency
        )
    for item in sorted(result.scores, key=lambda entry: -entry.points):
        print(f"{item.points:7.2f}  {item.player.name} ({item.player.team})")
    print(result.message)
    if result.unmapped:
        print(f"Not found: {', '.join(result.unmapped)}")
    if result.saved:
        print(f"Saved {len(result.scores)} scores for week {args.week}")


async def _run_map_ids(store: LeagueStore, args: argparse.Namespace) -> None:
    async with SleeperStatsProvider() as provider:
        directory = await provider.player_directory()
    players = [player for player in store.list_players() if not player.external_id]
    matched, unmatched = map_external_ids(players, directory)
    if not args.dry_run:
        for player_id, external_id in matched.items():
            store.set_player_external_id(player_id, external_id)
    print(f"Matched {len(matched)}/{len(players)} players")
    if unmatched:
        print(f"Unmatched: {', '.join(unmatched)}")


def _cmd_leaderboard(store: LeagueStore) -> None:
    entries = build_leaderboard(store)
    if not entries:
        print("No managers yet")
        return
    for entry in entries:
        weeks = " ".join(f"W{number}:{points:.2f}" for number, points in entry.week_scores.items())
        print(f"{entry.rank:>3}. {entry.name:<24} {entry.total:8.2f}  {weeks}")


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.command == "score":
        _cmd_score(args)
        return

    store = LeagueStore(args.db)
    try:
        if args.command == "seed":
            _cmd_seed(store, args)
        elif args.command == "import-players":
            _cmd_import_players(store, args)
        elif args.command == "validate":
            _cmd_validate(store, args)
        elif args.command == "fetch-stats":
            asyncio.run(_run_fetch(store, args))
        elif args.command == "map-ids":
            asyncio.run(_run_map_ids(store, args))
        elif args.command == "leaderboard":
            _cmd_leaderboard(store)
    except (LeagueError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
