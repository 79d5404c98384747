"""Async client for the public MLB Stats API.

Implements both :class:`~dfs_projector.providers.protocols.StatProvider`
and :class:`~dfs_projector.providers.protocols.ScheduleProvider`. Payloads
are parsed into domain objects here and nowhere else.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Any, Self

import httpx

from dfs_projector.domain.environment import EnvironmentContext
from dfs_projector.domain.game import GameContext, LineupEntry, TeamRef
from dfs_projector.domain.matchup import MatchupRecord
from dfs_projector.domain.player import Handedness, PlayerIdentity
from dfs_projector.domain.stats import (
    BatterSeasonStats,
    CatcherDefense,
    PitcherSeasonStats,
    TeamSeasonStats,
    parse_innings,
)
from dfs_projector.exceptions import ProviderError, ShapeMismatchError
from dfs_projector.providers._retry import http_retry
from dfs_projector.providers.ballparks import StaticBallparkFactors

if TYPE_CHECKING:
    import datetime
    from types import TracebackType

    from dfs_projector.domain.environment import BallparkFactor

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://statsapi.mlb.com/api"
_SOURCE = "mlb_api"

_WIND_PATTERN = re.compile(r"(\d+)\s*mph,\s*(.+)", re.IGNORECASE)
_INDOOR_MARKERS = ("dome", "roof", "indoor")
_PRECIPITATION_MARKERS = ("rain", "drizzle", "snow", "storm")


def _require(payload: dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise ShapeMismatchError(_SOURCE, key)
    return payload[key]


def _int(stat: dict[str, Any], key: str) -> int:
    value = stat.get(key)
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _float(stat: dict[str, Any], key: str) -> float | None:
    """Parse MLB rate strings like ``".289"``; placeholders such as ``"-.--"`` become ``None``."""
    value = stat.get(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_wind(wind: str | None) -> tuple[float, str]:
    """Split ``"12 mph, Out To CF"`` into ``(12.0, "Out To CF")``."""
    if not wind:
        return 0.0, "None"
    match = _WIND_PATTERN.search(wind)
    if match is None:
        return 0.0, "None"
    return float(match.group(1)), match.group(2).strip()


def _batter_from_stat(season: int, stat: dict[str, Any]) -> BatterSeasonStats:
    return BatterSeasonStats(
        season=season,
        games=_int(stat, "gamesPlayed"),
        plate_appearances=_int(stat, "plateAppearances"),
        at_bats=_int(stat, "atBats"),
        runs=_int(stat, "runs"),
        hits=_int(stat, "hits"),
        doubles=_int(stat, "doubles"),
        triples=_int(stat, "triples"),
        home_runs=_int(stat, "homeRuns"),
        rbi=_int(stat, "rbi"),
        walks=_int(stat, "baseOnBalls"),
        strikeouts=_int(stat, "strikeOuts"),
        hit_by_pitch=_int(stat, "hitByPitch"),
        stolen_bases=_int(stat, "stolenBases"),
        caught_stealing=_int(stat, "caughtStealing"),
        sac_flies=_int(stat, "sacFlies"),
        avg=_float(stat, "avg"),
        obp=_float(stat, "obp"),
        slg=_float(stat, "slg"),
    )


def _pitcher_from_stat(season: int, stat: dict[str, Any]) -> PitcherSeasonStats:
    return PitcherSeasonStats(
        season=season,
        games=_int(stat, "gamesPlayed"),
        games_started=_int(stat, "gamesStarted"),
        innings_pitched=parse_innings(stat.get("inningsPitched")),
        wins=_int(stat, "wins"),
        losses=_int(stat, "losses"),
        era=_float(stat, "era"),
        whip=_float(stat, "whip"),
        strikeouts=_int(stat, "strikeOuts"),
        walks=_int(stat, "baseOnBalls"),
        hits_allowed=_int(stat, "hits"),
        home_runs_allowed=_int(stat, "homeRuns"),
        hit_batsmen=_int(stat, "hitBatsmen"),
        earned_runs=_int(stat, "earnedRuns"),
        batters_faced=_int(stat, "battersFaced"),
        complete_games=_int(stat, "completeGames"),
        shutouts=_int(stat, "shutouts"),
    )


def _season_splits(person: dict[str, Any], group: str) -> dict[int, dict[str, Any]]:
    """Map season to stat line from a yearByYear hydration.

    A traded player has one split per club plus a combined split without a
    ``team`` key; the combined line wins.
    """
    by_season: dict[int, dict[str, Any]] = {}
    combined: set[int] = set()
    for block in person.get("stats", []):
        if block.get("group", {}).get("displayName") != group:
            continue
        for split in block.get("splits", []):
            if split.get("sport", {}).get("id", 1) != 1:
                continue
            season = int(_require(split, "season"))
            stat = _require(split, "stat")
            if "team" not in split:
                by_season[season] = stat
                combined.add(season)
            elif season not in combined and season not in by_season:
                by_season[season] = stat
    return by_season


def _first_split(payload: dict[str, Any], type_name: str | None = None) -> dict[str, Any] | None:
    for block in _require(payload, "stats"):
        if type_name is not None and block.get("type", {}).get("displayName") != type_name:
            continue
        splits = block.get("splits", [])
        if splits:
            return splits[0]
    return None


def parse_player(payload: dict[str, Any]) -> PlayerIdentity | None:
    people = _require(payload, "people")
    if not people:
        return None
    person = people[0]
    team = person.get("currentTeam", {})
    return PlayerIdentity(
        player_id=int(_require(person, "id")),
        name=_require(person, "fullName"),
        team_id=team.get("id"),
        team_name=team.get("name", ""),
        bats=Handedness.parse(person.get("batSide", {}).get("code")),
        throws=Handedness.parse(person.get("pitchHand", {}).get("code")),
        position=person.get("primaryPosition", {}).get("abbreviation", ""),
    )


def parse_environment(game_pk: int, payload: dict[str, Any], ballparks: StaticBallparkFactors) -> EnvironmentContext:
    game_data = _require(payload, "gameData")
    venue = game_data.get("venue", {})
    weather = game_data.get("weather", {})
    venue_id = int(venue.get("id", 0))
    condition = str(weather.get("condition", "")).lower()
    wind_speed, wind_direction = parse_wind(weather.get("wind"))
    temperature = _float(weather, "temp")
    indoor = any(marker in condition for marker in _INDOOR_MARKERS)
    return EnvironmentContext(
        game_pk=game_pk,
        venue_id=venue_id,
        venue_name=venue.get("name", ""),
        temperature=temperature if temperature is not None else 70.0,
        wind_speed=0.0 if indoor else wind_speed,
        wind_direction="None" if indoor else wind_direction,
        is_outdoor=not indoor,
        has_roof=ballparks.has_roof(venue_id),
        precipitation=any(marker in condition for marker in _PRECIPITATION_MARKERS),
    )


def _lineup(players: list[dict[str, Any]]) -> tuple[LineupEntry, ...]:
    return tuple(
        LineupEntry(
            player_id=int(player["id"]),
            name=player.get("fullName", ""),
            batting_order=slot,
            position=player.get("primaryPosition", {}).get("abbreviation", ""),
        )
        for slot, player in enumerate(players, start=1)
    )


def _probable(side: dict[str, Any]) -> LineupEntry | None:
    pitcher = side.get("probablePitcher")
    if not pitcher:
        return None
    return LineupEntry(player_id=int(pitcher["id"]), name=pitcher.get("fullName", ""), position="P")


def parse_schedule(payload: dict[str, Any]) -> list[GameContext]:
    games: list[GameContext] = []
    for day in _require(payload, "dates"):
        for game in day.get("games", []):
            teams = _require(game, "teams")
            home, away = teams["home"], teams["away"]
            lineups = game.get("lineups", {})
            venue = game.get("venue", {})
            games.append(
                GameContext(
                    game_pk=int(_require(game, "gamePk")),
                    game_date=game.get("officialDate") or str(game.get("gameDate", ""))[:10],
                    venue_id=int(venue.get("id", 0)),
                    venue_name=venue.get("name", ""),
                    home_team=TeamRef(team_id=int(home["team"]["id"]), name=home["team"].get("name", "")),
                    away_team=TeamRef(team_id=int(away["team"]["id"]), name=away["team"].get("name", "")),
                    home_pitcher=_probable(home),
                    away_pitcher=_probable(away),
                    home_lineup=_lineup(lineups.get("homePlayers", [])),
                    away_lineup=_lineup(lineups.get("awayPlayers", [])),
                )
            )
    return games


class MlbStatsApiClient:
    """MLB Stats API provider.

    A player's yearByYear payload is fetched once per stat group for the
    life of the client; concurrent callers share the in-flight request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        connect_timeout: float = 5.0,
        ballparks: StaticBallparkFactors | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=connect_timeout))
        self._base_url = base_url.rstrip("/")
        self._ballparks = ballparks or StaticBallparkFactors()
        self._people: dict[tuple[int, str], asyncio.Task[dict[str, Any] | None]] = {}

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
        for task in self._people.values():
            task.cancel()
        self._people.clear()
        await self._client.aclose()

    @http_retry("MLB API request")
    async def _fetch(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s %s", url, params or {})
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        logger.debug("MLB API responded %d", response.status_code)
        return response.json()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            return await self._fetch(path, params)
        except httpx.HTTPError as e:
            raise ProviderError(_SOURCE, f"GET {path} failed: {e}") from e

    async def _person(self, player_id: int, group: str) -> dict[str, Any] | None:
        key = (player_id, group)
        task = self._people.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch_person(player_id, group))
            self._people[key] = task
        return await asyncio.shield(task)

    async def _fetch_person(self, player_id: int, group: str) -> dict[str, Any] | None:
        payload = await self._get(
            f"/v1/people/{player_id}",
            {"hydrate": f"stats(group=[{group}],type=[yearByYear])"},
        )
        people = _require(payload, "people")
        return people[0] if people else None

    async def player(self, player_id: int) -> PlayerIdentity | None:
        return parse_player(await self._get(f"/v1/people/{player_id}", {"hydrate": "currentTeam"}))

    async def batter_stats(self, player_id: int, season: int) -> BatterSeasonStats | None:
        person = await self._person(player_id, "hitting")
        if person is None:
            return None
        stat = _season_splits(person, "hitting").get(season)
        return _batter_from_stat(season, stat) if stat is not None else None

    async def batter_history(self, player_id: int) -> tuple[BatterSeasonStats, ...]:
        person = await self._person(player_id, "hitting")
        if person is None:
            return ()
        splits = _season_splits(person, "hitting")
        return tuple(_batter_from_stat(season, splits[season]) for season in sorted(splits))

    async def pitcher_stats(self, player_id: int, season: int) -> PitcherSeasonStats | None:
        person = await self._person(player_id, "pitching")
        if person is None:
            return None
        stat = _season_splits(person, "pitching").get(season)
        return _pitcher_from_stat(season, stat) if stat is not None else None

    async def ballpark_factors(self, venue_id: int, season: int) -> BallparkFactor | None:
        return self._ballparks.factors(venue_id, season)

    async def game_environment(self, game_pk: int) -> EnvironmentContext | None:
        payload = await self._get(f"/v1.1/game/{game_pk}/feed/live")
        return parse_environment(game_pk, payload, self._ballparks)

    async def matchup(self, batter_id: int, pitcher_id: int) -> MatchupRecord | None:
        payload = await self._get(
            f"/v1/people/{batter_id}/stats",
            {"stats": "vsPlayer", "opposingPlayerId": pitcher_id, "group": "hitting"},
        )
        split = _first_split(payload, "vsPlayerTotal") or _first_split(payload)
        if split is None:
            return None
        stat = split.get("stat", {})
        return MatchupRecord(
            batter_id=batter_id,
            pitcher_id=pitcher_id,
            at_bats=_int(stat, "atBats"),
            hits=_int(stat, "hits"),
            home_runs=_int(stat, "homeRuns"),
            strikeouts=_int(stat, "strikeOuts"),
            walks=_int(stat, "baseOnBalls"),
            avg=_float(stat, "avg"),
            ops=_float(stat, "ops"),
        )

    async def team_stats(self, team_id: int, season: int) -> TeamSeasonStats | None:
        payload = await self._get(
            f"/v1/teams/{team_id}/stats",
            {"stats": "season", "group": "hitting,pitching", "season": season},
        )
        lines: dict[str, dict[str, Any]] = {}
        for block in _require(payload, "stats"):
            splits = block.get("splits", [])
            if splits:
                lines[block.get("group", {}).get("displayName", "")] = splits[0].get("stat", {})
        hitting, pitching = lines.get("hitting"), lines.get("pitching")
        if hitting is None and pitching is None:
            return None
        hitting = hitting or {}
        pitching = pitching or {}
        return TeamSeasonStats(
            team_id=team_id,
            season=season,
            games=_int(hitting, "gamesPlayed") or _int(pitching, "gamesPlayed"),
            wins=_int(pitching, "wins"),
            losses=_int(pitching, "losses"),
            runs=_int(hitting, "runs"),
            strikeouts=_int(hitting, "strikeOuts"),
            walks=_int(hitting, "baseOnBalls"),
            plate_appearances=_int(hitting, "plateAppearances"),
            ops=_float(hitting, "ops"),
            era=_float(pitching, "era"),
            whip=_float(pitching, "whip"),
        )

    async def catcher_defense(self, catcher_id: int, season: int) -> CatcherDefense | None:
        payload = await self._get(
            f"/v1/people/{catcher_id}/stats",
            {"stats": "season", "group": "fielding", "season": season},
        )
        for block in _require(payload, "stats"):
            for split in block.get("splits", []):
                if split.get("position", {}).get("abbreviation") != "C":
                    continue
                stat = split.get("stat", {})
                caught = _int(stat, "caughtStealing")
                stolen = _int(stat, "stolenBases")
                innings = parse_innings(stat.get("innings"))
                attempts = caught + stolen
                return CatcherDefense(
                    catcher_id=catcher_id,
                    caught_stealing_pct=caught / attempts if attempts else 0.25,
                    attempts_per_9=attempts * 9.0 / innings if innings else 0.8,
                )
        return None

    async def games(self, date: datetime.date) -> list[GameContext]:
        payload = await self._get(
            "/v1/schedule",
            {"sportId": 1, "date": date.isoformat(), "hydrate": "probablePitcher,lineups"},
        )
        games = parse_schedule(payload)
        logger.info("Fetched %d games for %s", len(games), date.isoformat())
        return games

    async def game(self, game_pk: int) -> GameContext | None:
        payload = await self._get("/v1/schedule", {"gamePk": game_pk, "hydrate": "probablePitcher,lineups"})
        games = parse_schedule(payload)
        return games[0] if games else None
