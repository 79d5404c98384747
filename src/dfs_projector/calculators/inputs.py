"""Input bundles handed to the category calculators.

The pipelines assemble one bundle per player after every fetch has joined;
calculators only ever read from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dfs_projector.confidence import clamp
from dfs_projector.domain.environment import NEUTRAL_BALLPARK, UNKNOWN_ENVIRONMENT
from dfs_projector.domain.player import Handedness, platoon_advantage
from dfs_projector.domain.stats import BatterSeasonStats, Missing, stats_or_none
from dfs_projector.exceptions import MissingDataError

if TYPE_CHECKING:
    from dfs_projector.domain.environment import BallparkFactor, EnvironmentContext
    from dfs_projector.domain.matchup import MatchupRecord
    from dfs_projector.domain.player import PlayerIdentity
    from dfs_projector.domain.stats import CatcherDefense, PitcherSeasonStats, PlayerStats, TeamSeasonStats

MIN_START_INNINGS = 3.0
MAX_START_INNINGS = 8.0
DEFAULT_START_INNINGS = 5.0


@dataclass(frozen=True)
class BatterInputs:
    identity: PlayerIdentity
    stats: PlayerStats[BatterSeasonStats] = Missing()
    history: tuple[BatterSeasonStats, ...] = ()
    environment: EnvironmentContext = UNKNOWN_ENVIRONMENT
    ballpark: BallparkFactor = NEUTRAL_BALLPARK
    matchup: MatchupRecord | None = None
    opposing_pitcher: PitcherSeasonStats | None = None
    opposing_pitcher_hand: Handedness = Handedness.UNKNOWN
    team_stats: TeamSeasonStats | None = None
    catcher: CatcherDefense | None = None
    lineup_slot: int | None = None
    is_home: bool = False

    @property
    def season_stats(self) -> BatterSeasonStats:
        stats = stats_or_none(self.stats)
        if stats is None:
            raise MissingDataError(f"no season stats for batter {self.identity.player_id}")
        return stats

    @property
    def career(self) -> BatterSeasonStats | None:
        return combine_seasons(self.history)

    @property
    def platoon(self) -> bool | None:
        return platoon_advantage(self.identity.bats, self.opposing_pitcher_hand)


@dataclass(frozen=True)
class PitcherInputs:
    identity: PlayerIdentity
    stats: PlayerStats[PitcherSeasonStats] = Missing()
    environment: EnvironmentContext = UNKNOWN_ENVIRONMENT
    ballpark: BallparkFactor = NEUTRAL_BALLPARK
    team_stats: TeamSeasonStats | None = None
    opponent_stats: TeamSeasonStats | None = None
    is_home: bool = False

    @property
    def season_stats(self) -> PitcherSeasonStats:
        stats = stats_or_none(self.stats)
        if stats is None:
            raise MissingDataError(f"no season stats for pitcher {self.identity.player_id}")
        return stats


def combine_seasons(history: tuple[BatterSeasonStats, ...]) -> BatterSeasonStats | None:
    """Sum counting stats across seasons into one career line."""
    if not history:
        return None
    return BatterSeasonStats(
        season=max(s.season for s in history),
        games=sum(s.games for s in history),
        plate_appearances=sum(s.pa for s in history),
        at_bats=sum(s.at_bats for s in history),
        runs=sum(s.runs for s in history),
        hits=sum(s.hits for s in history),
        doubles=sum(s.doubles for s in history),
        triples=sum(s.triples for s in history),
        home_runs=sum(s.home_runs for s in history),
        rbi=sum(s.rbi for s in history),
        walks=sum(s.walks for s in history),
        strikeouts=sum(s.strikeouts for s in history),
        hit_by_pitch=sum(s.hit_by_pitch for s in history),
        stolen_bases=sum(s.stolen_bases for s in history),
        caught_stealing=sum(s.caught_stealing for s in history),
        sac_flies=sum(s.sac_flies for s in history),
    )


def blend(season: float, career: float | None) -> float:
    """Weight the current season twice as heavily as the career line."""
    if career is None:
        return season
    return (2.0 * season + career) / 3.0


def expected_start_length(stats: PitcherSeasonStats) -> float:
    per_start = stats.innings_per_start
    if per_start is None:
        return DEFAULT_START_INNINGS
    return clamp(per_start, MIN_START_INNINGS, MAX_START_INNINGS)


def range_factors(expected: float, low: float, high: float) -> dict[str, float]:
    return {"range_low": expected * low, "range_high": expected * high}
