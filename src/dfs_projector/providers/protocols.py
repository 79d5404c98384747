from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import datetime

    from dfs_projector.domain.analysis import FantasySiteLink
    from dfs_projector.domain.environment import BallparkFactor, EnvironmentContext
    from dfs_projector.domain.game import GameContext
    from dfs_projector.domain.matchup import MatchupRecord
    from dfs_projector.domain.player import PlayerIdentity
    from dfs_projector.domain.stats import (
        BatterSeasonStats,
        BatterStatcast,
        CatcherDefense,
        PitcherSeasonStats,
        PitcherStatcast,
        TeamSeasonStats,
    )


class StatProvider(Protocol):
    """Source of per-player and per-game statistics.

    ``None`` means the source answered but has nothing for the request. Any
    method may also raise; callers catch at the pipeline boundary.
    """

    async def player(self, player_id: int) -> PlayerIdentity | None: ...

    async def batter_stats(self, player_id: int, season: int) -> BatterSeasonStats | None: ...

    async def batter_history(self, player_id: int) -> tuple[BatterSeasonStats, ...]: ...

    async def pitcher_stats(self, player_id: int, season: int) -> PitcherSeasonStats | None: ...

    async def ballpark_factors(self, venue_id: int, season: int) -> BallparkFactor | None: ...

    async def game_environment(self, game_pk: int) -> EnvironmentContext | None: ...

    async def matchup(self, batter_id: int, pitcher_id: int) -> MatchupRecord | None: ...

    async def team_stats(self, team_id: int, season: int) -> TeamSeasonStats | None: ...

    async def catcher_defense(self, catcher_id: int, season: int) -> CatcherDefense | None: ...


class ScheduleProvider(Protocol):
    async def games(self, date: datetime.date) -> list[GameContext]: ...

    async def game(self, game_pk: int) -> GameContext | None: ...


class StatcastSource(Protocol):
    """Season Statcast leaderboards keyed by MLB player id."""

    async def batter_metrics(self, season: int) -> dict[int, BatterStatcast]: ...

    async def pitcher_metrics(self, season: int) -> dict[int, PitcherStatcast]: ...


class FantasySiteMapper(Protocol):
    def lookup(self, player_id: int, name: str, team_id: int | None = None) -> FantasySiteLink | None: ...
