"""Project every batter and starting pitcher on a date's slate."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dfs_projector.exceptions import SlateUnavailableError
from dfs_projector.pipeline.ranking import rank_by_expected_points

if TYPE_CHECKING:
    import datetime
    from collections.abc import Awaitable

    from dfs_projector.domain.analysis import BatterAnalysis, PitcherAnalysis
    from dfs_projector.domain.game import GameContext
    from dfs_projector.pipeline.batter import BatterProjector
    from dfs_projector.pipeline.pitcher import PitcherProjector
    from dfs_projector.providers.protocols import ScheduleProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 16


@dataclass(frozen=True)
class SlateProjection:
    date: datetime.date
    games: tuple[GameContext, ...]
    batters: tuple[BatterAnalysis, ...]
    pitchers: tuple[PitcherAnalysis, ...]

    @property
    def player_count(self) -> int:
        return len(self.batters) + len(self.pitchers)

    @property
    def defaulted_count(self) -> int:
        return sum(1 for a in (*self.batters, *self.pitchers) if a.is_default)


class SlateOrchestrator:
    """Fan out one projection task per player across every game of a date.

    Each player task is independent and never raises, so one bad player
    never sinks the slate. Only an unavailable schedule is surfaced, as
    :class:`SlateUnavailableError`.
    """

    def __init__(
        self,
        schedule: ScheduleProvider,
        batters: BatterProjector,
        pitchers: PitcherProjector,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self._schedule = schedule
        self._batters = batters
        self._pitchers = pitchers
        self._max_concurrency = max_concurrency

    async def _games(self, date: datetime.date) -> list[GameContext]:
        try:
            games = await self._schedule.games(date)
        except Exception as e:
            raise SlateUnavailableError(f"schedule for {date.isoformat()} could not be fetched: {e}") from e
        if not games:
            raise SlateUnavailableError(f"no games scheduled on {date.isoformat()}")
        return games

    async def project(self, date: datetime.date, season: int | None = None) -> SlateProjection:
        games = await self._games(date)
        logger.info("Projecting %d games for %s", len(games), date.isoformat())

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded[T](work: Awaitable[T]) -> T:
            async with semaphore:
                return await work

        batter_tasks: list[asyncio.Task[BatterAnalysis]] = []
        pitcher_tasks: list[asyncio.Task[PitcherAnalysis]] = []
        async with asyncio.TaskGroup() as tg:
            for game in games:
                for is_home in (True, False):
                    pitcher = game.home_pitcher if is_home else game.away_pitcher
                    if pitcher is not None:
                        pitcher_tasks.append(
                            tg.create_task(
                                bounded(self._pitchers.analyze(game, pitcher, is_home=is_home, season=season))
                            )
                        )
                    lineup = game.home_lineup if is_home else game.away_lineup
                    for entry in lineup:
                        batter_tasks.append(
                            tg.create_task(bounded(self._batters.analyze(game, entry, is_home=is_home, season=season)))
                        )
            logger.info("Queued %d batters and %d pitchers", len(batter_tasks), len(pitcher_tasks))

        projection = SlateProjection(
            date=date,
            games=tuple(games),
            batters=tuple(rank_by_expected_points(t.result() for t in batter_tasks)),
            pitchers=tuple(rank_by_expected_points(t.result() for t in pitcher_tasks)),
        )
        logger.info(
            "Projected %d players for %s (%d defaulted)",
            projection.player_count,
            date.isoformat(),
            projection.defaulted_count,
        )
        return projection
