from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import AsyncExitStack, asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from dfs_projector.cache.sqlite_store import SqliteCacheStore
from dfs_projector.exceptions import ConfigError
from dfs_projector.pipeline.batter import BatterProjector
from dfs_projector.pipeline.orchestrator import SlateOrchestrator
from dfs_projector.pipeline.pitcher import PitcherProjector
from dfs_projector.providers.cached import CachedScheduleProvider, CachedStatProvider, CacheTtls
from dfs_projector.providers.fantasy_site import SalaryFileMapper
from dfs_projector.providers.mlb_api import MlbStatsApiClient
from dfs_projector.providers.savant import SavantStatcastClient, StatcastStatProvider

if TYPE_CHECKING:
    from pathlib import Path

    from dfs_projector.config import Settings
    from dfs_projector.providers.protocols import FantasySiteMapper, ScheduleProvider, StatProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionContext:
    schedule: ScheduleProvider
    stats: StatProvider
    batters: BatterProjector
    pitchers: PitcherProjector
    orchestrator: SlateOrchestrator


def build_fantasy_site(salary_file: Path | None) -> FantasySiteMapper | None:
    if salary_file is None:
        return None
    try:
        mapper = SalaryFileMapper.from_file(salary_file)
    except OSError as e:
        raise ConfigError(f"cannot read salary file {salary_file}: {e}") from e
    return mapper


def cache_ttls(settings: Settings) -> CacheTtls:
    return CacheTtls(
        player=settings.player_ttl,
        environment=settings.environment_ttl,
        ballpark=settings.ballpark_ttl,
        schedule=settings.schedule_ttl,
    )


@contextmanager
def build_cache_store(settings: Settings) -> Iterator[SqliteCacheStore]:
    store = SqliteCacheStore(settings.cache_db_path)
    try:
        yield store
    finally:
        store.close()


@asynccontextmanager
async def build_projection_context(
    settings: Settings,
    *,
    salary_file: Path | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[ProjectionContext]:
    """Composition root: wires the MLB client, Statcast, cache, salary mapper and projectors."""
    fantasy_site = build_fantasy_site(salary_file or settings.salary_file)
    async with AsyncExitStack() as stack:
        client = await stack.enter_async_context(
            MlbStatsApiClient(
                http_client,
                base_url=settings.base_url,
                timeout=settings.timeout,
                connect_timeout=settings.connect_timeout,
            )
        )
        stats: StatProvider = client
        schedule: ScheduleProvider = client
        if settings.statcast_enabled:
            savant = await stack.enter_async_context(
                SavantStatcastClient(
                    http_client,
                    base_url=settings.statcast_base_url,
                    timeout=settings.statcast_timeout,
                )
            )
            stats = StatcastStatProvider(stats, savant)
        if settings.cache_enabled:
            store = stack.enter_context(build_cache_store(settings))
            logger.debug("Caching provider responses in %s", settings.cache_db_path)
            ttls = cache_ttls(settings)
            stats = CachedStatProvider(stats, store, ttls)
            schedule = CachedScheduleProvider(client, store, ttls)
        batters = BatterProjector(stats, fantasy_site)
        pitchers = PitcherProjector(stats, fantasy_site, fallback_penalty=settings.fallback_penalty)
        yield ProjectionContext(
            schedule=schedule,
            stats=stats,
            batters=batters,
            pitchers=pitchers,
            orchestrator=SlateOrchestrator(schedule, batters, pitchers, max_concurrency=settings.max_concurrency),
        )
