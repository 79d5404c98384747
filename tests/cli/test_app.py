from __future__ import annotations

import json
import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import pytest
from typer.testing import CliRunner

from dfs_projector.cache.sqlite_store import SqliteCacheStore
from dfs_projector.cli import _output
from dfs_projector.cli.app import app
from dfs_projector.cli.factory import ProjectionContext
from dfs_projector.domain.analysis import FantasySiteLink
from dfs_projector.domain.game import LineupEntry
from dfs_projector.exceptions import ProviderError
from dfs_projector.pipeline.batter import BatterProjector
from dfs_projector.pipeline.orchestrator import SlateOrchestrator
from dfs_projector.pipeline.pitcher import PitcherProjector
from tests.fakes import FakeFantasySiteMapper, FakeScheduleProvider, FakeStatProvider
from tests.helpers import (
    GAME_PK,
    SEASON,
    make_batter_stats,
    make_environment,
    make_game,
    make_identity,
    make_pitcher_stats,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from dfs_projector.config import Settings

runner = CliRunner()

HOME_LINEUP = (
    LineupEntry(player_id=1, name="Leadoff", batting_order=1, position="CF"),
    LineupEntry(player_id=2, name="Slugger", batting_order=4, position="RF"),
)
AWAY_LINEUP = (LineupEntry(player_id=11, name="Visitor", batting_order=1, position="SS"),)
HOME_STARTER = LineupEntry(player_id=50, name="Home Ace", position="P")
AWAY_STARTER = LineupEntry(player_id=60, name="Road Arm", position="P")


def _schedule(**kwargs: Any) -> FakeScheduleProvider:
    game = make_game(
        home_lineup=HOME_LINEUP,
        away_lineup=AWAY_LINEUP,
        home_pitcher=HOME_STARTER,
        away_pitcher=AWAY_STARTER,
    )
    return FakeScheduleProvider([game], **kwargs)


def _stats() -> FakeStatProvider:
    return FakeStatProvider(
        players={
            2: make_identity(2, name="Slugger"),
            60: make_identity(60, name="Road Arm", team_id=111, team_name="Boston Red Sox", position="P"),
            77: make_identity(77, name="Bench Bat"),
            88: make_identity(88, name="Elsewhere", team_id=119, team_name="Los Angeles Dodgers"),
        },
        batter_stats={
            (1, SEASON): make_batter_stats(home_runs=8),
            (2, SEASON): make_batter_stats(home_runs=38, hits=140),
            (11, SEASON): make_batter_stats(),
            (77, SEASON): make_batter_stats(),
        },
        pitcher_stats={
            (50, SEASON): make_pitcher_stats(),
            (60, SEASON): make_pitcher_stats(strikeouts=120, earned_runs=90),
        },
        environments={GAME_PK: make_environment()},
    )


def _install_context(
    monkeypatch: pytest.MonkeyPatch,
    schedule: FakeScheduleProvider,
    stats: FakeStatProvider,
    fantasy_site: FakeFantasySiteMapper | None = None,
) -> None:
    @asynccontextmanager
    async def build(settings: Settings, *, salary_file: Path | None = None) -> AsyncIterator[ProjectionContext]:
        batters = BatterProjector(stats, fantasy_site)
        pitchers = PitcherProjector(stats, fantasy_site)
        yield ProjectionContext(
            schedule=schedule,
            stats=stats,
            batters=batters,
            pitchers=pitchers,
            orchestrator=SlateOrchestrator(schedule, batters, pitchers, max_concurrency=settings.max_concurrency),
        )

    monkeypatch.setattr("dfs_projector.cli.app.build_projection_context", build)


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every command in an empty directory with only the cache path configured."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    for key in list(os.environ):
        if key.startswith("DFS__"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DFS__CACHE__DB_PATH", str(tmp_path / "cache.db"))
    monkeypatch.setattr(_output.console, "width", 200)
    yield
    root.handlers[:] = handlers
    logging.getLogger("dfs_projector").setLevel(logging.NOTSET)


class TestSlateCommand:
    def test_json_ranks_players(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["date"] == "2024-07-04"
        assert payload["games"][0]["game_pk"] == GAME_PK
        assert [p["player_id"] for p in payload["pitchers"]] == [50, 60]
        assert {b["player_id"] for b in payload["batters"]} == {1, 2, 11}
        points = [b["expected_points"] for b in payload["batters"]]
        assert points == sorted(points, reverse=True)

    def test_top_limits_each_table(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04", "--json", "--top", "1"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert len(payload["batters"]) == 1
        assert len(payload["pitchers"]) == 1

    def test_by_value_orders_by_points_per_salary(self, monkeypatch: pytest.MonkeyPatch) -> None:
        site = FakeFantasySiteMapper(
            {
                1: FantasySiteLink(site_id="a", salary=2000),
                2: FantasySiteLink(site_id="b", salary=9000),
                11: FantasySiteLink(site_id="c", salary=5000),
            }
        )
        _install_context(monkeypatch, _schedule(), _stats(), site)
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04", "--json", "--by-value"])
        assert result.exit_code == 0, result.output
        values = [b["value"] for b in json.loads(result.stdout)["batters"]]
        assert values == sorted(values, reverse=True)

    def test_min_k_filters_pitchers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04", "--json", "--min-k", "50"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["pitchers"] == []

    def test_team_filter(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04", "--json", "--team", "Red Sox"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [b["player_id"] for b in payload["batters"]] == [11]
        assert [p["player_id"] for p in payload["pitchers"]] == [60]

    def test_unknown_team(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--team", "New York"])
        assert result.exit_code == 1
        assert "unknown or ambiguous team" in result.output

    def test_table_output(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04"])
        assert result.exit_code == 0, result.output
        assert "Slate 2024-07-04: 1 games, 5 players (0 defaulted)" in result.stdout
        assert "Slugger" in result.stdout
        assert "Home Ace" in result.stdout

    def test_unavailable_schedule_exits_with_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(error=ProviderError("schedule", "HTTP 503")), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04"])
        assert result.exit_code == 1
        assert "could not be fetched" in result.output

    def test_empty_date_exits_with_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-12-25"])
        assert result.exit_code == 1
        assert "no games scheduled" in result.output

    def test_invalid_config_exits_with_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DFS__PROJECTION__MAX_CONCURRENCY", "zero")
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "slate", "--date", "2024-07-04"])
        assert result.exit_code == 1
        assert "must be an integer" in result.output


class TestPlayerCommands:
    def test_batter_in_lineup(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "batter", "2", "--game", str(GAME_PK), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["player_id"] == 2
        assert payload["is_home"] is True
        assert payload["lineup_slot"] == 4
        assert payload["is_default"] is False
        assert "home_runs" in payload["categories"]

    def test_batter_off_lineup_uses_team(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "batter", "77", "--game", str(GAME_PK), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["name"] == "Bench Bat"
        assert payload["is_home"] is True

    def test_pitcher_detail_table(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "pitcher", "60", "--game", str(GAME_PK)])
        assert result.exit_code == 0, result.output
        assert "Road Arm (60)" in result.stdout
        assert "Quality" in result.stdout
        assert "HR vulnerability" in result.stdout
        assert "strikeouts" in result.stdout

    def test_pitcher_json_includes_hr_vulnerability(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "pitcher", "60", "--game", str(GAME_PK), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert 1.0 <= payload["hr_vulnerability"] <= 10.0

    def test_unknown_game(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "batter", "2", "--game", "1"])
        assert result.exit_code == 1
        assert "game 1 not found" in result.output

    def test_player_from_another_team(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "batter", "88", "--game", str(GAME_PK)])
        assert result.exit_code == 1
        assert "does not play in game" in result.output

    def test_unknown_player(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_context(monkeypatch, _schedule(), _stats())
        result = runner.invoke(app, ["--quiet", "pitcher", "999", "--game", str(GAME_PK)])
        assert result.exit_code == 1
        assert "player 999 not found" in result.output


def _seed_cache(tmp_path: Path) -> None:
    store = SqliteCacheStore(tmp_path / "cache.db")
    store.put("player", "1", "{}", ttl_seconds=3600)
    store.put("player", "2", "{}", ttl_seconds=3600)
    store.put("schedule", "2024-07-04", "[]", ttl_seconds=3600)
    store.put("environment", str(GAME_PK), "{}", ttl_seconds=0)
    store.close()


class TestCacheCommands:
    def test_clear(self, tmp_path: Path) -> None:
        _seed_cache(tmp_path)
        result = runner.invoke(app, ["--quiet", "cache", "clear"])
        assert result.exit_code == 0, result.output
        assert "Cleared 4 cache entries" in result.stdout

    def test_clear_namespace(self, tmp_path: Path) -> None:
        _seed_cache(tmp_path)
        result = runner.invoke(app, ["--quiet", "cache", "clear", "--namespace", "player"])
        assert result.exit_code == 0, result.output
        assert "Cleared namespace 'player'" in result.stdout
        store = SqliteCacheStore(tmp_path / "cache.db")
        try:
            assert store.namespaces() == {"schedule": 1}
        finally:
            store.close()

    def test_stats(self, tmp_path: Path) -> None:
        _seed_cache(tmp_path)
        result = runner.invoke(app, ["--quiet", "cache", "stats"])
        assert result.exit_code == 0, result.output
        assert "player" in result.stdout
        assert "3 live entries, 1 expired entries purged" in result.stdout

    def test_stats_empty(self) -> None:
        result = runner.invoke(app, ["--quiet", "cache", "stats"])
        assert result.exit_code == 0, result.output
        assert "Cache is empty (0 expired entries purged)" in result.stdout
