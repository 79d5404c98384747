"""Complete game, shutout and no-hitter bonuses.

Probabilities are computed as percentages and scored as stacked bonuses
(``CG·2.5 + SHO·2.5 + NH·5`` on fractions). Perfect-game and quality-start
odds are reported in ``factors`` but carry no points.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.innings_pitched import durability_rating
from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category, rare_event_points

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import PitcherInputs
    from dfs_projector.domain.stats import PitcherSeasonStats, TeamSeasonStats

BASE_COMPLETE_GAME_PCT = 1.0
BASE_QUALITY_START_PCT = 50.0
MAX_COMPLETE_GAME_PCT = 15.0
MAX_SHUTOUT_PCT = 5.0
MAX_NO_HITTER_PCT = 1.0

DEFAULT_POINTS = 0.05
DEFAULT_CONFIDENCE = 30.0


def default() -> CategoryResult:
    return CategoryResult(
        category=Category.RARE_EVENTS,
        expected_value=BASE_COMPLETE_GAME_PCT / 100.0,
        points=DEFAULT_POINTS,
        confidence=DEFAULT_CONFIDENCE,
        factors={"complete_game_pct": BASE_COMPLETE_GAME_PCT, "risk_reward": 5.0},
        is_default=True,
    )


def complete_game_pct(stats: PitcherSeasonStats) -> float:
    pct = BASE_COMPLETE_GAME_PCT
    whip = stats.walks_hits_per_inning
    era = stats.earned_run_average
    if whip is not None and whip < 1.1:
        pct *= 1.5
    if era is not None and era < 3.0:
        pct *= 1.5
    if (stats.innings_per_start or 0.0) > 6.0:
        pct *= 1.5
    durability = durability_rating(stats)
    if durability >= 8:
        pct *= 2.0
    elif durability >= 6:
        pct *= 1.25
    elif durability <= 3:
        pct *= 0.25
    return min(pct, MAX_COMPLETE_GAME_PCT)


def shutout_pct(stats: PitcherSeasonStats, complete_game: float) -> float:
    pct = complete_game * 0.5
    era = stats.earned_run_average
    whip = stats.walks_hits_per_inning
    if era is not None and era < 2.5:
        pct *= 1.5
    if whip is not None and whip < 1.0:
        pct *= 1.5
    return min(pct, MAX_SHUTOUT_PCT)


def no_hitter_pct(stats: PitcherSeasonStats, shutout: float) -> float:
    pct = shutout * 0.2
    whip = stats.walks_hits_per_inning
    if whip is not None:
        if whip < 1.0:
            pct *= 2.0
        elif whip < 1.2:
            pct *= 1.5
    return min(pct, MAX_NO_HITTER_PCT)


def perfect_game_pct(stats: PitcherSeasonStats, no_hitter: float) -> float:
    pct = no_hitter * 0.1
    bb9 = stats.bb_per_9
    if bb9 is not None and bb9 < 2.0:
        pct *= 2.0
    return pct


def quality_start_pct(stats: PitcherSeasonStats, opponent: TeamSeasonStats | None) -> float:
    pct = BASE_QUALITY_START_PCT
    era = stats.earned_run_average
    whip = stats.walks_hits_per_inning
    if era is not None and era < 3.5:
        pct *= 1.2
    if whip is not None and whip < 1.2:
        pct *= 1.2
    runs_per_game = opponent.runs_per_game if opponent is not None else None
    if runs_per_game is not None:
        if runs_per_game > 5:
            pct *= 0.8
        elif runs_per_game < 4:
            pct *= 1.2
    return clamp(pct, 0.0, 100.0)


def risk_reward(stats: PitcherSeasonStats) -> float:
    rating = 5.0
    if stats.innings_pitched > 0:
        era = stats.earned_run_average
        whip = stats.walks_hits_per_inning
        if era is not None and era < 3.0:
            rating += 1
        if whip is not None and whip < 1.1:
            rating += 1
        if (stats.k_per_inning or 0.0) > 1.0:
            rating += 1
    return clamp(rating, 1.0, 10.0)


def calculate(inputs: PitcherInputs) -> CategoryResult:
    stats = inputs.season_stats
    complete_game = complete_game_pct(stats)
    shutout = shutout_pct(stats, complete_game)
    no_hitter = no_hitter_pct(stats, shutout)
    points = rare_event_points(complete_game / 100.0, shutout / 100.0, no_hitter / 100.0)

    confidence = 50.0
    if stats.innings_pitched > 30:
        confidence += 20
    elif stats.innings_pitched > 15:
        confidence += 10
    if inputs.opponent_stats is not None:
        confidence += 10
    if inputs.environment.is_known:
        confidence += 10
    confidence = penalized(clamp(confidence, 0.0, 100.0), inputs.stats)

    return CategoryResult(
        category=Category.RARE_EVENTS,
        expected_value=complete_game / 100.0,
        points=points,
        confidence=confidence,
        factors={
            "complete_game_pct": complete_game,
            "shutout_pct": shutout,
            "no_hitter_pct": no_hitter,
            "perfect_game_pct": perfect_game_pct(stats, no_hitter),
            "quality_start_pct": quality_start_pct(stats, inputs.opponent_stats),
            "risk_reward": risk_reward(stats),
        },
    )
