"""Home-run probability for one batter in one game.

Five factors are blended with fixed weights rather than multiplied, so a
single extreme input cannot run the probability away:

    batter .40, pitcher .25, park .20, weather .10, situational .05
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.confidence import boosted, clamp, from_ten_point, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import BatterInputs
    from dfs_projector.domain.environment import EnvironmentContext
    from dfs_projector.domain.stats import BatterSeasonStats, PitcherSeasonStats

LEAGUE_HR_PER_AB = 0.03
LEAGUE_BARREL_RATE = 0.065
LEAGUE_HARD_HIT_RATE = 0.38
# Phantom league-average at-bats added before computing a batter's HR rate.
REGRESSION_AT_BATS = 90.0
AT_BATS_PER_GAME = 4

MIN_GAME_PROBABILITY = 0.001
MAX_GAME_PROBABILITY = 0.30
MIN_PITCHER_INNINGS = 20.0

WEIGHTS: dict[str, float] = {
    "batter": 0.40,
    "pitcher": 0.25,
    "park": 0.20,
    "weather": 0.10,
    "situational": 0.05,
}

DEFAULT_CONFIDENCE = 30.0


def per_game_probability(per_at_bat: float) -> float:
    return 1.0 - (1.0 - per_at_bat) ** AT_BATS_PER_GAME


def default() -> CategoryResult:
    return CategoryResult.linear(
        Category.HOME_RUNS,
        per_game_probability(LEAGUE_HR_PER_AB),
        DEFAULT_CONFIDENCE,
        is_default=True,
    )


def batter_factor(stats: BatterSeasonStats) -> float:
    """Batter power relative to league, 1.0 being average."""
    if stats.barrel_rate is not None:
        factor = stats.barrel_rate / LEAGUE_BARREL_RATE
    else:
        regressed = (stats.home_runs + LEAGUE_HR_PER_AB * REGRESSION_AT_BATS) / (stats.at_bats + REGRESSION_AT_BATS)
        factor = regressed / LEAGUE_HR_PER_AB
    if stats.hard_hit_rate is not None:
        factor *= (stats.hard_hit_rate / LEAGUE_HARD_HIT_RATE) * 0.5 + 0.5
    return factor


def pitcher_vulnerability(stats: PitcherSeasonStats | None) -> float:
    """HR vulnerability of the opposing starter on 1-10, 5 being average."""
    if stats is None or stats.innings_pitched < MIN_PITCHER_INNINGS:
        return 5.0
    vulnerability = 5.0
    hr9 = stats.hr_per_9 or 0.0
    if hr9 > 2.0:
        vulnerability += 3
    elif hr9 > 1.6:
        vulnerability += 2
    elif hr9 > 1.3:
        vulnerability += 1
    elif hr9 < 0.4:
        vulnerability -= 3
    elif hr9 < 0.7:
        vulnerability -= 2
    elif hr9 < 1.0:
        vulnerability -= 1
    if stats.hard_hit_rate is not None:
        if stats.hard_hit_rate > 0.45:
            vulnerability += 1
        elif stats.hard_hit_rate < 0.30:
            vulnerability -= 1
    return clamp(vulnerability, 1.0, 10.0)


def pitcher_factor(stats: PitcherSeasonStats | None) -> float:
    factor = pitcher_vulnerability(stats) / 5.0
    if stats is not None and stats.hard_hit_rate is not None:
        factor *= (stats.hard_hit_rate / LEAGUE_HARD_HIT_RATE) * 0.3 + 0.7
    return factor


def weather_factor(environment: EnvironmentContext) -> float:
    if not environment.is_outdoor:
        return 1.0
    factor = 1.0
    if environment.temperature > 85:
        factor += 0.2
    elif environment.temperature > 75:
        factor += 0.1
    elif environment.temperature < 40:
        factor -= 0.2
    elif environment.temperature < 50:
        factor -= 0.1
    if environment.wind_speed > 10:
        if environment.wind_blowing_out:
            factor += 0.2
        elif environment.wind_blowing_in:
            factor -= 0.2
    return factor


def situational_factor(platoon: bool | None, is_home: bool) -> float:
    if platoon is None:
        factor = 1.0
    else:
        factor = 1.1 if platoon else 0.95
    if is_home:
        factor *= 1.15
    return factor


def calculate(inputs: BatterInputs) -> CategoryResult:
    stats = inputs.season_stats
    pitcher = inputs.opposing_pitcher
    factors = {
        "batter": batter_factor(stats),
        "pitcher": pitcher_factor(pitcher),
        "park": inputs.ballpark.home_runs,
        "weather": weather_factor(inputs.environment),
        "situational": situational_factor(inputs.platoon, inputs.is_home),
    }
    blended = sum(WEIGHTS[name] * value for name, value in factors.items())
    per_at_bat = clamp(LEAGUE_HR_PER_AB * blended, 0.0, 1.0)
    probability = clamp(per_game_probability(per_at_bat), MIN_GAME_PROBABILITY, MAX_GAME_PROBABILITY)

    sample = 0.0
    if stats.at_bats >= 300:
        sample += 1
    elif stats.at_bats < 100:
        sample -= 1
    if pitcher is not None and pitcher.innings_pitched >= MIN_PITCHER_INNINGS:
        sample += 1
        if pitcher.hard_hit_rate is not None:
            sample += 1
    has_statcast = stats.barrel_rate is not None or stats.hard_hit_rate is not None
    score = boosted(5.0, sample, has_advanced_metric=has_statcast)
    confidence = penalized(from_ten_point(score), inputs.stats)

    return CategoryResult.linear(
        Category.HOME_RUNS,
        probability,
        confidence,
        {**factors, "blend": blended, "per_at_bat": per_at_bat},
    )
