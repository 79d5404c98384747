"""Builders for the stat snapshots and games used across the test suite."""

from __future__ import annotations

from typing import Any

from dfs_projector.calculators.inputs import BatterInputs, PitcherInputs
from dfs_projector.domain.environment import EnvironmentContext
from dfs_projector.domain.game import GameContext, LineupEntry, TeamRef
from dfs_projector.domain.player import Handedness, PlayerIdentity
from dfs_projector.domain.stats import BatterSeasonStats, Observed, PitcherSeasonStats, TeamSeasonStats

SEASON = 2024
GAME_PK = 745000
VENUE_ID = 3313
HOME = TeamRef(team_id=147, name="New York Yankees")
AWAY = TeamRef(team_id=111, name="Boston Red Sox")


def make_batter_stats(**overrides: Any) -> BatterSeasonStats:
    defaults: dict[str, Any] = {
        "season": SEASON,
        "games": 120,
        "plate_appearances": 520,
        "at_bats": 460,
        "runs": 70,
        "hits": 124,
        "doubles": 25,
        "triples": 2,
        "home_runs": 20,
        "rbi": 72,
        "walks": 48,
        "strikeouts": 105,
        "hit_by_pitch": 6,
        "stolen_bases": 10,
        "caught_stealing": 3,
        "sac_flies": 4,
    }
    defaults.update(overrides)
    return BatterSeasonStats(**defaults)


def make_pitcher_stats(**overrides: Any) -> PitcherSeasonStats:
    defaults: dict[str, Any] = {
        "season": SEASON,
        "games": 28,
        "games_started": 28,
        "innings_pitched": 165.0,
        "wins": 11,
        "losses": 8,
        "strikeouts": 170,
        "walks": 50,
        "hits_allowed": 150,
        "home_runs_allowed": 20,
        "hit_batsmen": 7,
        "earned_runs": 70,
        "batters_faced": 690,
    }
    defaults.update(overrides)
    return PitcherSeasonStats(**defaults)


def make_team_stats(team_id: int = HOME.team_id, **overrides: Any) -> TeamSeasonStats:
    defaults: dict[str, Any] = {
        "team_id": team_id,
        "season": SEASON,
        "games": 150,
        "wins": 80,
        "losses": 70,
        "runs": 675,
        "strikeouts": 1275,
        "walks": 480,
        "plate_appearances": 5900,
        "era": 4.0,
    }
    defaults.update(overrides)
    return TeamSeasonStats(**defaults)


def make_identity(player_id: int = 1, **overrides: Any) -> PlayerIdentity:
    defaults: dict[str, Any] = {
        "player_id": player_id,
        "name": f"Player {player_id}",
        "team_id": HOME.team_id,
        "team_name": HOME.name,
        "bats": Handedness.RIGHT,
        "throws": Handedness.RIGHT,
        "position": "RF",
    }
    defaults.update(overrides)
    return PlayerIdentity(**defaults)


def make_environment(**overrides: Any) -> EnvironmentContext:
    defaults: dict[str, Any] = {
        "game_pk": GAME_PK,
        "venue_id": VENUE_ID,
        "venue_name": "Yankee Stadium",
    }
    defaults.update(overrides)
    return EnvironmentContext(**defaults)


def make_game(
    *,
    home_lineup: tuple[LineupEntry, ...] = (),
    away_lineup: tuple[LineupEntry, ...] = (),
    home_pitcher: LineupEntry | None = None,
    away_pitcher: LineupEntry | None = None,
    game_pk: int = GAME_PK,
    game_date: str = f"{SEASON}-07-04",
) -> GameContext:
    return GameContext(
        game_pk=game_pk,
        game_date=game_date,
        venue_id=VENUE_ID,
        venue_name="Yankee Stadium",
        home_team=HOME,
        away_team=AWAY,
        home_pitcher=home_pitcher,
        away_pitcher=away_pitcher,
        home_lineup=home_lineup,
        away_lineup=away_lineup,
    )


def batter_inputs(stats: BatterSeasonStats | None = None, /, **overrides: Any) -> BatterInputs:
    defaults: dict[str, Any] = {
        "identity": make_identity(),
        "stats": Observed(stats or make_batter_stats()),
    }
    defaults.update(overrides)
    return BatterInputs(**defaults)


def pitcher_inputs(stats: PitcherSeasonStats | None = None, /, **overrides: Any) -> PitcherInputs:
    defaults: dict[str, Any] = {
        "identity": make_identity(position="P"),
        "stats": Observed(stats or make_pitcher_stats()),
    }
    defaults.update(overrides)
    return PitcherInputs(**defaults)
