from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.inputs import expected_start_length, range_factors
from dfs_projector.confidence import boosted, clamp, from_ten_point, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import PitcherInputs
    from dfs_projector.domain.environment import EnvironmentContext
    from dfs_projector.domain.stats import TeamSeasonStats

LEAGUE_K_PER_INNING = 1.0
LEAGUE_TEAM_K_PER_GAME = 8.5
MIN_RATE = 0.3
MAX_RATE = 2.0
MAX_STRIKEOUTS = 15.0

DEFAULT_STRIKEOUTS = 5.0
DEFAULT_CONFIDENCE = 30.0


def default() -> CategoryResult:
    return CategoryResult.linear(Category.STRIKEOUTS, DEFAULT_STRIKEOUTS, DEFAULT_CONFIDENCE, is_default=True)


def opponent_vulnerability(opponent: TeamSeasonStats | None) -> float:
    """How strikeout-prone the opposing lineup is, 1-10 with 5 as league average."""
    if opponent is None:
        return 5.0
    per_game = opponent.strikeouts_per_game
    if per_game is None:
        return 5.0
    return clamp(5.0 + ((per_game - LEAGUE_TEAM_K_PER_GAME) / LEAGUE_TEAM_K_PER_GAME) * 5.0, 1.0, 10.0)


def weather_factor(environment: EnvironmentContext) -> float:
    if not environment.is_outdoor:
        return 1.0
    if environment.temperature > 90:
        return 1.05
    if environment.temperature < 40:
        return 1.1
    return 1.0


def calculate(inputs: PitcherInputs) -> CategoryResult:
    stats = inputs.season_stats
    k_per_inning = stats.k_per_inning
    if k_per_inning is None:
        k_per_inning = LEAGUE_K_PER_INNING
    vulnerability = opponent_vulnerability(inputs.opponent_stats)
    factors = {
        "k_per_inning": k_per_inning,
        "opponent": vulnerability / 5.0,
        "park": inputs.ballpark.strikeouts,
        "weather": weather_factor(inputs.environment),
    }
    rate = clamp(k_per_inning * factors["opponent"] * factors["park"] * factors["weather"], MIN_RATE, MAX_RATE)
    innings = expected_start_length(stats)
    expected = clamp(rate * innings, 0.0, MAX_STRIKEOUTS)

    sample = 0.0
    if stats.innings_pitched > 100:
        sample += 2
    elif stats.innings_pitched > 50:
        sample += 1
    elif stats.innings_pitched < 20:
        sample -= 1
    score = boosted(5.0, sample, has_advanced_metric=stats.whiff_rate is not None)
    confidence = penalized(from_ten_point(score), inputs.stats)

    return CategoryResult.linear(
        Category.STRIKEOUTS,
        expected,
        confidence,
        {**factors, "rate": rate, "innings": innings, **range_factors(expected, 0.7, 1.3)},
    )
