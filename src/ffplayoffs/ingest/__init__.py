"""Input adapters: player pool CSVs and provider stat feeds."""

from .players import (
    ImportReport,
    PlayerRow,
    canonical_team,
    load_player_csv,
    rows_to_players,
)
from .stats import (
    EspnStatsProvider,
    SleeperStatsProvider,
    StatsFetchResult,
    StatsProvider,
    fetch_week_stats,
    map_external_ids,
)

__all__ = [
    "EspnStatsProvider",
    "ImportReport",
    "PlayerRow",
    "SleeperStatsProvider",
    "StatsFetchResult",
    "StatsProvider",
    "canonical_team",
    "fetch_week_stats",
    "load_player_csv",
    "map_external_ids",
    "rows_to_players",
]
