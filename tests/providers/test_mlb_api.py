import asyncio
import datetime
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import pytest
from tenacity import wait_none

from dfs_projector.domain.player import Handedness
from dfs_projector.exceptions import ProviderError, ShapeMismatchError
from dfs_projector.providers.ballparks import StaticBallparkFactors
from dfs_projector.providers.mlb_api import (
    MlbStatsApiClient,
    parse_environment,
    parse_player,
    parse_schedule,
    parse_wind,
)

JUDGE = 592450
COLE = 543037
WELLS = 676694


def _person(group: str, splits: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "people": [
            {
                "id": JUDGE,
                "fullName": "Aaron Judge",
                "currentTeam": {"id": 147, "name": "New York Yankees"},
                "batSide": {"code": "R"},
                "pitchHand": {"code": "R"},
                "primaryPosition": {"abbreviation": "RF"},
                "stats": [{"group": {"displayName": group}, "splits": splits}],
            }
        ]
    }


HITTING_SPLITS = [
    {"season": "2023", "team": {"id": 147}, "stat": {"gamesPlayed": 106, "atBats": 367, "homeRuns": 37}},
    {"season": "2024", "team": {"id": 147}, "stat": {"gamesPlayed": 60, "atBats": 210, "homeRuns": 15}},
    {"season": "2024", "team": {"id": 135}, "stat": {"gamesPlayed": 90, "atBats": 340, "homeRuns": 23}},
    {
        "season": "2024",
        "stat": {
            "gamesPlayed": 150,
            "plateAppearances": 620,
            "atBats": 550,
            "hits": 165,
            "homeRuns": 38,
            "baseOnBalls": 60,
            "avg": ".300",
            "obp": "-.--",
        },
    },
    {"season": "2024", "sport": {"id": 11}, "stat": {"gamesPlayed": 5}},
]

SCHEDULE = {
    "dates": [
        {
            "date": "2024-07-04",
            "games": [
                {
                    "gamePk": 745000,
                    "officialDate": "2024-07-04",
                    "venue": {"id": 3313, "name": "Yankee Stadium"},
                    "teams": {
                        "home": {
                            "team": {"id": 147, "name": "New York Yankees"},
                            "probablePitcher": {"id": COLE, "fullName": "Gerrit Cole"},
                        },
                        "away": {"team": {"id": 111, "name": "Boston Red Sox"}},
                    },
                    "lineups": {
                        "homePlayers": [
                            {"id": WELLS, "fullName": "Austin Wells", "primaryPosition": {"abbreviation": "C"}},
                            {"id": JUDGE, "fullName": "Aaron Judge", "primaryPosition": {"abbreviation": "RF"}},
                        ]
                    },
                }
            ],
        }
    ]
}


class FakeTransport(httpx.AsyncBaseTransport):
    """Serves canned JSON by URL path; the first ``failures`` requests get a 503."""

    def __init__(self, routes: dict[str, Any], *, failures: int = 0) -> None:
        self._routes = routes
        self._failures = failures
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.requests) <= self._failures:
            return httpx.Response(503, content=b"Service Unavailable")
        payload = self._routes.get(request.url.path)
        if payload is None:
            return httpx.Response(404, json={"message": "not found"})
        return httpx.Response(200, json=payload)


@pytest.fixture(autouse=True)
def _no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(MlbStatsApiClient._fetch.retry, "wait", wait_none())  # type: ignore[attr-defined]


def _call[T](transport: FakeTransport, fn: Callable[[MlbStatsApiClient], Awaitable[T]]) -> T:
    async def run() -> T:
        async with MlbStatsApiClient(httpx.AsyncClient(transport=transport)) as client:
            return await fn(client)

    return asyncio.run(run())


class TestParsers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("12 mph, Out To CF", (12.0, "Out To CF")),
            ("3 mph, In From LF", (3.0, "In From LF")),
            ("0 mph, None", (0.0, "None")),
            ("Calm", (0.0, "None")),
            (None, (0.0, "None")),
        ],
    )
    def test_parse_wind(self, raw: str | None, expected: tuple[float, str]) -> None:
        assert parse_wind(raw) == expected

    def test_parse_player(self) -> None:
        identity = parse_player(_person("hitting", []))
        assert identity is not None
        assert identity.name == "Aaron Judge"
        assert identity.team_id == 147
        assert identity.bats is Handedness.RIGHT
        assert identity.position == "RF"

    def test_parse_player_not_found(self) -> None:
        assert parse_player({"people": []}) is None

    def test_parse_environment_outdoors(self) -> None:
        payload = {
            "gameData": {
                "venue": {"id": 3313, "name": "Yankee Stadium"},
                "weather": {"condition": "Partly Cloudy", "temp": "78", "wind": "12 mph, Out To CF"},
            }
        }
        env = parse_environment(745000, payload, StaticBallparkFactors())
        assert env.venue_id == 3313
        assert env.temperature == 78.0
        assert env.wind_speed == 12.0
        assert env.wind_blowing_out
        assert env.is_outdoor
        assert not env.has_roof
        assert not env.precipitation

    def test_parse_environment_dome(self) -> None:
        payload = {
            "gameData": {
                "venue": {"id": 12, "name": "Tropicana Field"},
                "weather": {"condition": "Dome", "temp": "72", "wind": "8 mph, Out To CF"},
            }
        }
        env = parse_environment(745001, payload, StaticBallparkFactors())
        assert not env.is_outdoor
        assert env.has_roof
        assert env.wind_speed == 0.0
        assert env.wind_direction == "None"

    def test_parse_environment_without_weather(self) -> None:
        env = parse_environment(745002, {"gameData": {"venue": {"id": 15}}}, StaticBallparkFactors())
        assert env.temperature == 70.0
        assert env.wind_speed == 0.0

    def test_parse_environment_requires_game_data(self) -> None:
        with pytest.raises(ShapeMismatchError, match="gameData"):
            parse_environment(745000, {"liveData": {}}, StaticBallparkFactors())

    def test_parse_schedule(self) -> None:
        (game,) = parse_schedule(SCHEDULE)
        assert game.game_pk == 745000
        assert game.game_date == "2024-07-04"
        assert game.season == 2024
        assert game.home_team.team_id == 147
        assert game.home_pitcher is not None and game.home_pitcher.name == "Gerrit Cole"
        assert game.away_pitcher is None
        assert [(e.player_id, e.batting_order) for e in game.home_lineup] == [(WELLS, 1), (JUDGE, 2)]
        assert game.away_lineup == ()
        assert game.opposing_catcher(is_home=False) is not None

    def test_parse_schedule_requires_dates(self) -> None:
        with pytest.raises(ShapeMismatchError):
            parse_schedule({"totalGames": 0})


class TestMlbStatsApiClient:
    def test_player(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}": _person("hitting", HITTING_SPLITS)})
        identity = _call(transport, lambda c: c.player(JUDGE))
        assert identity is not None
        assert identity.name == "Aaron Judge"
        assert transport.requests[0].url.params["hydrate"] == "currentTeam"

    def test_batter_stats_prefers_combined_line_for_traded_player(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}": _person("hitting", HITTING_SPLITS)})
        stats = _call(transport, lambda c: c.batter_stats(JUDGE, 2024))
        assert stats is not None
        assert stats.games == 150
        assert stats.home_runs == 38
        assert stats.avg == pytest.approx(0.3)
        assert stats.obp is None

    def test_batter_stats_missing_season(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}": _person("hitting", HITTING_SPLITS)})
        assert _call(transport, lambda c: c.batter_stats(JUDGE, 2019)) is None

    def test_batter_history(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}": _person("hitting", HITTING_SPLITS)})
        history = _call(transport, lambda c: c.batter_history(JUDGE))
        assert [s.season for s in history] == [2023, 2024]
        assert history[0].home_runs == 37

    def test_season_and_history_share_one_request(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}": _person("hitting", HITTING_SPLITS)})

        async def lookups(client: MlbStatsApiClient) -> list[object]:
            return list(
                await asyncio.gather(
                    client.batter_stats(JUDGE, 2024),
                    client.batter_history(JUDGE),
                    client.batter_stats(JUDGE, 2023),
                )
            )

        results = _call(transport, lookups)
        assert all(results)
        assert len(transport.requests) == 1

    def test_stat_groups_are_fetched_separately(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}": _person("hitting", HITTING_SPLITS)})

        async def lookups(client: MlbStatsApiClient) -> None:
            await client.batter_stats(JUDGE, 2024)
            await client.pitcher_stats(JUDGE, 2024)

        _call(transport, lookups)
        hydrates = [r.url.params["hydrate"] for r in transport.requests]
        assert hydrates == [
            "stats(group=[hitting],type=[yearByYear])",
            "stats(group=[pitching],type=[yearByYear])",
        ]

    def test_pitcher_stats(self) -> None:
        splits = [
            {
                "season": "2024",
                "stat": {
                    "gamesPlayed": 17,
                    "gamesStarted": 17,
                    "inningsPitched": "95.0",
                    "strikeOuts": 99,
                    "era": "3.41",
                    "hitBatsmen": 3,
                },
            }
        ]
        transport = FakeTransport({f"/api/v1/people/{COLE}": _person("pitching", splits)})
        stats = _call(transport, lambda c: c.pitcher_stats(COLE, 2024))
        assert stats is not None
        assert stats.innings_pitched == 95.0
        assert stats.era == pytest.approx(3.41)
        assert stats.strikeouts == 99

    def test_game_environment(self) -> None:
        payload = {"gameData": {"venue": {"id": 3313}, "weather": {"condition": "Rain", "temp": "61"}}}
        transport = FakeTransport({"/api/v1.1/game/745000/feed/live": payload})
        env = _call(transport, lambda c: c.game_environment(745000))
        assert env is not None
        assert env.precipitation
        assert env.temperature == 61.0

    def test_matchup_uses_total_split(self) -> None:
        payload = {
            "stats": [
                {"type": {"displayName": "vsPlayer"}, "splits": [{"stat": {"atBats": 4}}]},
                {
                    "type": {"displayName": "vsPlayerTotal"},
                    "splits": [{"stat": {"atBats": 15, "hits": 5, "homeRuns": 2, "avg": ".333"}}],
                },
            ]
        }
        transport = FakeTransport({f"/api/v1/people/{JUDGE}/stats": payload})
        record = _call(transport, lambda c: c.matchup(JUDGE, COLE))
        assert record is not None
        assert record.at_bats == 15
        assert record.home_runs == 2
        assert transport.requests[0].url.params["opposingPlayerId"] == str(COLE)

    def test_matchup_without_history(self) -> None:
        transport = FakeTransport({f"/api/v1/people/{JUDGE}/stats": {"stats": []}})
        assert _call(transport, lambda c: c.matchup(JUDGE, COLE)) is None

    def test_team_stats_merges_groups(self) -> None:
        payload = {
            "stats": [
                {
                    "group": {"displayName": "hitting"},
                    "splits": [{"stat": {"gamesPlayed": 150, "runs": 700, "strikeOuts": 1300}}],
                },
                {
                    "group": {"displayName": "pitching"},
                    "splits": [{"stat": {"wins": 85, "losses": 65, "era": "3.95"}}],
                },
            ]
        }
        transport = FakeTransport({"/api/v1/teams/147/stats": payload})
        team = _call(transport, lambda c: c.team_stats(147, 2024))
        assert team is not None
        assert (team.games, team.runs, team.wins, team.losses) == (150, 700, 85, 65)
        assert team.era == pytest.approx(3.95)

    def test_catcher_defense(self) -> None:
        payload = {
            "stats": [
                {
                    "splits": [
                        {"position": {"abbreviation": "1B"}, "stat": {"caughtStealing": 0}},
                        {
                            "position": {"abbreviation": "C"},
                            "stat": {"caughtStealing": 15, "stolenBases": 45, "innings": "900.0"},
                        },
                    ]
                }
            ]
        }
        transport = FakeTransport({f"/api/v1/people/{WELLS}/stats": payload})
        defense = _call(transport, lambda c: c.catcher_defense(WELLS, 2024))
        assert defense is not None
        assert defense.caught_stealing_pct == pytest.approx(0.25)
        assert defense.attempts_per_9 == pytest.approx(0.6)

    def test_games(self) -> None:
        transport = FakeTransport({"/api/v1/schedule": SCHEDULE})
        games = _call(transport, lambda c: c.games(datetime.date(2024, 7, 4)))
        assert [g.game_pk for g in games] == [745000]
        params = transport.requests[0].url.params
        assert params["date"] == "2024-07-04"
        assert params["sportId"] == "1"

    def test_single_game(self) -> None:
        transport = FakeTransport({"/api/v1/schedule": SCHEDULE})
        game = _call(transport, lambda c: c.game(745000))
        assert game is not None
        assert transport.requests[0].url.params["gamePk"] == "745000"

    def test_retries_server_errors(self) -> None:
        transport = FakeTransport({"/api/v1/schedule": SCHEDULE}, failures=2)
        games = _call(transport, lambda c: c.games(datetime.date(2024, 7, 4)))
        assert len(games) == 1
        assert len(transport.requests) == 3

    def test_gives_up_after_three_attempts(self) -> None:
        transport = FakeTransport({"/api/v1/schedule": SCHEDULE}, failures=5)
        with pytest.raises(ProviderError, match="/v1/schedule") as excinfo:
            _call(transport, lambda c: c.games(datetime.date(2024, 7, 4)))
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)
        assert excinfo.value.source == "mlb_api"
        assert len(transport.requests) == 3

    def test_missing_resource_is_not_retried(self) -> None:
        transport = FakeTransport({})
        with pytest.raises(ProviderError, match="404"):
            _call(transport, lambda c: c.team_stats(147, 2024))
        assert len(transport.requests) == 1

    def test_ballpark_factors_do_not_hit_the_network(self) -> None:
        transport = FakeTransport({})
        factors = _call(transport, lambda c: c.ballpark_factors(15, 2024))
        assert factors is not None
        assert factors.triples > 1.0
        assert transport.requests == []
