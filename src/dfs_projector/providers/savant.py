"""Baseball Savant season leaderboards and the provider that merges them into MLB stats.

The MLB Stats API carries no batted-ball quality data. Savant's custom
leaderboard CSV supplies barrel rate, hard-hit rate and exit velocity for
batters, whiff rate and hard-hit rate allowed for pitchers. Savant reports
rates as percents; they are stored here as fractions.
"""

from __future__ import annotations

import asyncio
import csv
import dataclasses
import io
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx

from dfs_projector.domain.stats import BatterStatcast, PitcherStatcast
from dfs_projector.exceptions import ProviderError, ShapeMismatchError
from dfs_projector.providers._retry import http_retry
from dfs_projector.result import capture_async, unwrap_or

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from types import TracebackType

    from dfs_projector.domain.environment import BallparkFactor, EnvironmentContext
    from dfs_projector.domain.matchup import MatchupRecord
    from dfs_projector.domain.player import PlayerIdentity
    from dfs_projector.domain.stats import (
        BatterSeasonStats,
        CatcherDefense,
        PitcherSeasonStats,
        TeamSeasonStats,
    )
    from dfs_projector.providers.protocols import StatcastSource, StatProvider

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://baseballsavant.mlb.com"
_SOURCE = "baseball_savant"
_LEADERBOARD_PATH = "/leaderboard/custom"
_BATTER_SELECTIONS = "barrel_batted_rate,hard_hit_percent,exit_velocity_avg"
_PITCHER_SELECTIONS = "whiff_percent,hard_hit_percent"


def _strip_bom(text: str) -> str:
    return text.removeprefix("\ufeff")


def _number(row: dict[str, Any], key: str) -> float | None:
    value = row.get(key)
    if value is None or str(value).strip() == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _percent(row: dict[str, Any], key: str) -> float | None:
    value = _number(row, key)
    return value / 100.0 if value is not None else None


def _rows(text: str) -> list[dict[str, Any]]:
    """Parse a leaderboard CSV; an HTML error page has no ``player_id`` header."""
    reader = csv.DictReader(io.StringIO(_strip_bom(text)))
    if reader.fieldnames is None or "player_id" not in reader.fieldnames:
        raise ShapeMismatchError(_SOURCE, "player_id")
    return list(reader)


def _player_id(row: dict[str, Any]) -> int | None:
    try:
        return int(str(row.get("player_id", "")).strip())
    except ValueError:
        return None


def parse_batter_leaderboard(text: str) -> dict[int, BatterStatcast]:
    metrics: dict[int, BatterStatcast] = {}
    for row in _rows(text):
        player_id = _player_id(row)
        if player_id is None:
            continue
        metrics[player_id] = BatterStatcast(
            barrel_rate=_percent(row, "barrel_batted_rate"),
            hard_hit_rate=_percent(row, "hard_hit_percent"),
            exit_velocity=_number(row, "exit_velocity_avg"),
        )
    return metrics


def parse_pitcher_leaderboard(text: str) -> dict[int, PitcherStatcast]:
    metrics: dict[int, PitcherStatcast] = {}
    for row in _rows(text):
        player_id = _player_id(row)
        if player_id is None:
            continue
        metrics[player_id] = PitcherStatcast(
            whiff_rate=_percent(row, "whiff_percent"),
            hard_hit_rate=_percent(row, "hard_hit_percent"),
        )
    return metrics


class SavantStatcastClient:
    """Downloads one season leaderboard per call; callers memoize."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        min_pa: int = 25,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=connect_timeout))
        self._base_url = base_url.rstrip("/")
        self._min_pa = min_pa

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @http_retry("Baseball Savant leaderboard")
    async def _fetch(self, params: dict[str, Any]) -> str:
        url = f"{self._base_url}{_LEADERBOARD_PATH}"
        logger.debug("GET %s %s", url, params)
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        logger.debug("Baseball Savant responded %d", response.status_code)
        return response.text

    async def _leaderboard(self, season: int, player_type: str, selections: str) -> str:
        params = {
            "year": season,
            "type": player_type,
            "min": self._min_pa,
            "selections": selections,
            "csv": "true",
        }
        try:
            return await self._fetch(params)
        except httpx.HTTPError as e:
            raise ProviderError(_SOURCE, f"{player_type} leaderboard {season} failed: {e}") from e

    async def batter_metrics(self, season: int) -> dict[int, BatterStatcast]:
        metrics = parse_batter_leaderboard(await self._leaderboard(season, "batter", _BATTER_SELECTIONS))
        logger.info("Parsed %d batter Statcast rows for %s", len(metrics), season)
        return metrics

    async def pitcher_metrics(self, season: int) -> dict[int, PitcherStatcast]:
        metrics = parse_pitcher_leaderboard(await self._leaderboard(season, "pitcher", _PITCHER_SELECTIONS))
        logger.info("Parsed %d pitcher Statcast rows for %s", len(metrics), season)
        return metrics


def _fill[S](stats: S, metrics: BatterStatcast | PitcherStatcast | None) -> S:
    """Copy non-None metric fields onto ``stats`` where ``stats`` has none."""
    if metrics is None:
        return stats
    changes = {
        field.name: value
        for field in dataclasses.fields(metrics)
        if (value := getattr(metrics, field.name)) is not None and getattr(stats, field.name) is None
    }
    return dataclasses.replace(stats, **changes) if changes else stats


class StatcastStatProvider:
    """StatProvider that adds Statcast metrics to season lines from ``inner``.

    Each season's leaderboard is downloaded at most once, shared by every
    concurrent caller. A failed download is logged and treated as an empty
    board, so stats come back unenriched rather than missing.
    """

    def __init__(self, inner: StatProvider, savant: StatcastSource) -> None:
        self._inner = inner
        self._savant = savant
        self._batter_boards: dict[int, asyncio.Task[dict[int, BatterStatcast]]] = {}
        self._pitcher_boards: dict[int, asyncio.Task[dict[int, PitcherStatcast]]] = {}

    async def _batter_board(self, season: int) -> dict[int, BatterStatcast]:
        task = self._batter_boards.get(season)
        if task is None:
            task = asyncio.create_task(self._load(self._savant.batter_metrics(season), f"batter_statcast {season}"))
            self._batter_boards[season] = task
        return await asyncio.shield(task)

    async def _pitcher_board(self, season: int) -> dict[int, PitcherStatcast]:
        task = self._pitcher_boards.get(season)
        if task is None:
            task = asyncio.create_task(self._load(self._savant.pitcher_metrics(season), f"pitcher_statcast {season}"))
            self._pitcher_boards[season] = task
        return await asyncio.shield(task)

    @staticmethod
    async def _load[M](fetch: Awaitable[dict[int, M]], label: str) -> dict[int, M]:
        return unwrap_or(await capture_async(fetch, label=label), {})

    async def player(self, player_id: int) -> PlayerIdentity | None:
        return await self._inner.player(player_id)

    async def batter_stats(self, player_id: int, season: int) -> BatterSeasonStats | None:
        stats = await self._inner.batter_stats(player_id, season)
        if stats is None:
            return None
        board = await self._batter_board(season)
        return _fill(stats, board.get(player_id))

    async def batter_history(self, player_id: int) -> tuple[BatterSeasonStats, ...]:
        return await self._inner.batter_history(player_id)

    async def pitcher_stats(self, player_id: int, season: int) -> PitcherSeasonStats | None:
        stats = await self._inner.pitcher_stats(player_id, season)
        if stats is None:
            return None
        board = await self._pitcher_board(season)
        return _fill(stats, board.get(player_id))

    async def ballpark_factors(self, venue_id: int, season: int) -> BallparkFactor | None:
        return await self._inner.ballpark_factors(venue_id, season)

    async def game_environment(self, game_pk: int) -> EnvironmentContext | None:
        return await self._inner.game_environment(game_pk)

    async def matchup(self, batter_id: int, pitcher_id: int) -> MatchupRecord | None:
        return await self._inner.matchup(batter_id, pitcher_id)

    async def team_stats(self, team_id: int, season: int) -> TeamSeasonStats | None:
        return await self._inner.team_stats(team_id, season)

    async def catcher_defense(self, catcher_id: int, season: int) -> CatcherDefense | None:
        return await self._inner.catcher_defense(catcher_id, season)
