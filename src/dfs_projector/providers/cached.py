"""Read-through caching wrappers around the stat and schedule providers.

Entries are JSON strings in a :class:`~dfs_projector.cache.protocol.CacheStore`.
``None`` and empty results are never cached so a player or date without
data is retried on the next run. Store calls run in a worker thread so
SQLite I/O never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dfs_projector.cache.serialization import (
    HANDEDNESS_FIELDS,
    DataclassSerializer,
    DataclassTupleSerializer,
    GameListSerializer,
)
from dfs_projector.domain.environment import BallparkFactor, EnvironmentContext
from dfs_projector.domain.matchup import MatchupRecord
from dfs_projector.domain.player import PlayerIdentity
from dfs_projector.domain.stats import BatterSeasonStats, CatcherDefense, PitcherSeasonStats, TeamSeasonStats

if TYPE_CHECKING:
    import datetime
    from collections.abc import Awaitable, Callable

    from dfs_projector.cache.protocol import CacheStore
    from dfs_projector.cache.serialization import Serializer
    from dfs_projector.domain.game import GameContext
    from dfs_projector.providers.protocols import ScheduleProvider, StatProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheTtls:
    player: int = 6 * 3600
    environment: int = 30 * 60
    ballpark: int = 7 * 86400
    schedule: int = 3600


_IDENTITY = DataclassSerializer(PlayerIdentity, converters=HANDEDNESS_FIELDS)
_BATTER = DataclassSerializer(BatterSeasonStats)
_HISTORY = DataclassTupleSerializer(_BATTER)
_PITCHER = DataclassSerializer(PitcherSeasonStats)
_BALLPARK = DataclassSerializer(BallparkFactor)
_ENVIRONMENT = DataclassSerializer(EnvironmentContext)
_MATCHUP = DataclassSerializer(MatchupRecord)
_TEAM = DataclassSerializer(TeamSeasonStats)
_CATCHER = DataclassSerializer(CatcherDefense)
_SCHEDULE = GameListSerializer()


async def read_through[T](
    store: CacheStore,
    namespace: str,
    key: str,
    ttl_seconds: int,
    serializer: Serializer[T],
    fetch: Callable[[], Awaitable[T | None]],
) -> T | None:
    cached_value = await asyncio.to_thread(store.get, namespace, key)
    if cached_value is not None:
        try:
            value = serializer.deserialize(cached_value)
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("Discarding unreadable cached %s/%s: %s", namespace, key, e)
        else:
            logger.debug("Cache hit for %s/%s", namespace, key)
            return value
    logger.debug("Cache miss for %s/%s", namespace, key)
    value = await fetch()
    if value:
        await asyncio.to_thread(store.put, namespace, key, serializer.serialize(value), ttl_seconds)
    return value


class CachedStatProvider:
    def __init__(self, inner: StatProvider, store: CacheStore, ttls: CacheTtls | None = None) -> None:
        self._inner = inner
        self._store = store
        self._ttls = ttls or CacheTtls()

    async def player(self, player_id: int) -> PlayerIdentity | None:
        return await read_through(
            self._store, "player", str(player_id), self._ttls.player, _IDENTITY, lambda: self._inner.player(player_id)
        )

    async def batter_stats(self, player_id: int, season: int) -> BatterSeasonStats | None:
        return await read_through(
            self._store,
            "batter_stats",
            f"{player_id}:{season}",
            self._ttls.player,
            _BATTER,
            lambda: self._inner.batter_stats(player_id, season),
        )

    async def batter_history(self, player_id: int) -> tuple[BatterSeasonStats, ...]:
        history = await read_through(
            self._store,
            "batter_history",
            str(player_id),
            self._ttls.player,
            _HISTORY,
            lambda: self._inner.batter_history(player_id),
        )
        return history or ()

    async def pitcher_stats(self, player_id: int, season: int) -> PitcherSeasonStats | None:
        return await read_through(
            self._store,
            "pitcher_stats",
            f"{player_id}:{season}",
            self._ttls.player,
            _PITCHER,
            lambda: self._inner.pitcher_stats(player_id, season),
        )

    async def ballpark_factors(self, venue_id: int, season: int) -> BallparkFactor | None:
        return await read_through(
            self._store,
            "ballpark",
            f"{venue_id}:{season}",
            self._ttls.ballpark,
            _BALLPARK,
            lambda: self._inner.ballpark_factors(venue_id, season),
        )

    async def game_environment(self, game_pk: int) -> EnvironmentContext | None:
        return await read_through(
            self._store,
            "environment",
            str(game_pk),
            self._ttls.environment,
            _ENVIRONMENT,
            lambda: self._inner.game_environment(game_pk),
        )

    async def matchup(self, batter_id: int, pitcher_id: int) -> MatchupRecord | None:
        return await read_through(
            self._store,
            "matchup",
            f"{batter_id}:{pitcher_id}",
            self._ttls.player,
            _MATCHUP,
            lambda: self._inner.matchup(batter_id, pitcher_id),
        )

    async def team_stats(self, team_id: int, season: int) -> TeamSeasonStats | None:
        return await read_through(
            self._store,
            "team_stats",
            f"{team_id}:{season}",
            self._ttls.player,
            _TEAM,
            lambda: self._inner.team_stats(team_id, season),
        )

    async def catcher_defense(self, catcher_id: int, season: int) -> CatcherDefense | None:
        return await read_through(
            self._store,
            "catcher_defense",
            f"{catcher_id}:{season}",
            self._ttls.player,
            _CATCHER,
            lambda: self._inner.catcher_defense(catcher_id, season),
        )


class CachedScheduleProvider:
    def __init__(self, inner: ScheduleProvider, store: CacheStore, ttls: CacheTtls | None = None) -> None:
        self._inner = inner
        self._store = store
        self._ttls = ttls or CacheTtls()

    async def games(self, date: datetime.date) -> list[GameContext]:
        games = await read_through(
            self._store,
            "schedule",
            date.isoformat(),
            self._ttls.schedule,
            _SCHEDULE,
            lambda: self._inner.games(date),
        )
        return games or []

    async def game(self, game_pk: int) -> GameContext | None:
        games = await read_through(
            self._store,
            "schedule",
            f"game:{game_pk}",
            self._ttls.schedule,
            _SCHEDULE,
            lambda: self._single(game_pk),
        )
        return games[0] if games else None

    async def _single(self, game_pk: int) -> list[GameContext]:
        game = await self._inner.game(game_pk)
        return [game] if game is not None else []
