"""Expected innings for a starting pitcher.

The durability rating computed here is shared with the rare-event
calculator, which scales complete-game odds by it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import PitcherInputs
    from dfs_projector.domain.environment import EnvironmentContext
    from dfs_projector.domain.stats import PitcherSeasonStats, TeamSeasonStats

DEFAULT_INNINGS = 5.0
DEFAULT_CONFIDENCE = 30.0
MIN_INNINGS = 1.0
MAX_INNINGS = 9.0


def default() -> CategoryResult:
    return CategoryResult.linear(
        Category.INNINGS_PITCHED,
        DEFAULT_INNINGS,
        DEFAULT_CONFIDENCE,
        {"range_low": DEFAULT_INNINGS - 1, "range_high": DEFAULT_INNINGS + 1},
        is_default=True,
    )


def quality_start_share(era: float | None) -> float:
    """Estimated share of starts that end as quality starts."""
    if era is None:
        return 0.5
    if era < 3.0:
        return 0.65
    if era < 3.75:
        return 0.55
    if era > 5.0:
        return 0.35
    return 0.5


def pitch_efficiency(stats: PitcherSeasonStats) -> float:
    """Approximate pitches per inning; lower is more efficient."""
    if stats.innings_pitched <= 0:
        return 16.0
    return 15.0 + (stats.walks / stats.innings_pitched) * 6.0 + (stats.strikeouts / stats.innings_pitched) * 2.0


def durability_rating(stats: PitcherSeasonStats) -> float:
    """How deep the pitcher tends to work, 1-10 with 5 as average."""
    rating = 5.0
    per_start = stats.innings_per_start or 0.0
    if per_start >= 6.5:
        rating += 2.5
    elif per_start >= 6.0:
        rating += 1.5
    elif per_start >= 5.5:
        rating += 0.75
    elif per_start < 4.5:
        rating -= 2
    elif per_start < 5.0:
        rating -= 1

    efficiency = pitch_efficiency(stats)
    if efficiency < 15:
        rating += 1
    elif efficiency > 18:
        rating -= 0.75

    quality_starts = quality_start_share(stats.earned_run_average)
    if quality_starts > 0.6:
        rating += 0.75
    elif quality_starts < 0.4:
        rating -= 0.75
    return clamp(rating, 1.0, 10.0)


def hook_tendency(team: TeamSeasonStats | None) -> float:
    """How quickly the pitcher's club goes to the bullpen, 1-10."""
    if team is None or team.era is None:
        return 5.0
    return clamp(5.0 + (team.era - 4.0) * 1.5, 1.0, 10.0)


def game_context_factor(environment: EnvironmentContext, win_probability: float | None) -> float:
    factor = 1.0
    if win_probability is not None:
        if win_probability > 0.6:
            factor *= 1.1
        elif win_probability < 0.4:
            factor *= 0.9
    if environment.is_outdoor:
        if environment.temperature > 90:
            factor *= 0.9
        elif environment.temperature < 40:
            factor *= 0.95
        if environment.wind_speed > 15:
            factor *= 0.95
    return clamp(factor, 0.8, 1.2)


def calculate(inputs: PitcherInputs, win_probability: float | None = None) -> CategoryResult:
    stats = inputs.season_stats
    base = stats.innings_per_start or DEFAULT_INNINGS
    hook = hook_tendency(inputs.team_stats)
    factors = {
        "durability": durability_rating(stats),
        "efficiency": pitch_efficiency(stats),
        "hook_tendency": hook,
        "hook": 1.0 - (hook - 5.0) * 0.02,
        "game_context": game_context_factor(inputs.environment, win_probability),
    }
    expected = clamp(base * factors["hook"] * factors["game_context"], MIN_INNINGS, MAX_INNINGS)
    factors["range_low"] = max(2.0, expected - 1)
    factors["range_high"] = min(MAX_INNINGS, expected + 1)

    confidence = 50.0
    if stats.games_started > 10:
        confidence += 20
    elif stats.games_started > 5:
        confidence += 10
    quality_starts = quality_start_share(stats.earned_run_average)
    if quality_starts > 0.6:
        confidence += 15
    elif quality_starts < 0.4:
        confidence -= 10
    if inputs.environment.is_outdoor:
        confidence -= 5
    confidence = penalized(clamp(confidence, 0.0, 100.0), inputs.stats)

    return CategoryResult.linear(Category.INNINGS_PITCHED, expected, confidence, factors)
