"""Expected singles, doubles and triples for one batter in one game.

Home runs are projected separately by :mod:`dfs_projector.calculators.home_runs`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.inputs import blend
from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.matchup import MatchupAdvantage, SampleSize
from dfs_projector.domain.scoring import Category
from dfs_projector.exceptions import MissingDataError

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import BatterInputs
    from dfs_projector.domain.environment import EnvironmentContext

AT_BATS_PER_GAME = 4.0
MIN_AVERAGE = 0.100
MAX_AVERAGE = 0.450

# League hit mix used when the batter has no hits to learn from.
LEAGUE_HIT_SHARE: dict[str, float] = {
    "singles": 0.64,
    "doubles": 0.20,
    "triples": 0.02,
    "home_runs": 0.14,
}

DEFAULT_SINGLES = 0.5
DEFAULT_DOUBLES = 0.15
DEFAULT_TRIPLES = 0.05
DEFAULT_CONFIDENCE = 30.0

type HitResults = tuple[CategoryResult, CategoryResult, CategoryResult]


def default() -> HitResults:
    return (
        CategoryResult.linear(Category.SINGLES, DEFAULT_SINGLES, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.DOUBLES, DEFAULT_DOUBLES, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.TRIPLES, DEFAULT_TRIPLES, DEFAULT_CONFIDENCE, is_default=True),
    )


def pitcher_vulnerability(hits_per_9: float | None) -> float:
    """Hit vulnerability of the opposing starter on 1-10, 5 being average."""
    if hits_per_9 is None:
        return 5.0
    return clamp(5.0 * (hits_per_9 / 9.0), 1.0, 10.0)


def matchup_factor(advantage: MatchupAdvantage) -> float:
    match advantage:
        case MatchupAdvantage.BATTER:
            return 1.1
        case MatchupAdvantage.PITCHER:
            return 0.9
        case _:
            return 1.0


def platoon_factor(advantage: bool | None) -> float:
    if advantage is None:
        return 1.0
    return 1.1 if advantage else 0.9


def weather_factors(environment: EnvironmentContext) -> dict[str, float]:
    """Per-hit-type multipliers from temperature and wind."""
    if not environment.is_outdoor:
        return {"singles": 1.0, "doubles": 1.0, "triples": 1.0}
    temperature = 1.0
    if environment.temperature > 80:
        temperature = 1.1
    elif environment.temperature < 50:
        temperature = 0.9
    wind = 1.0
    if environment.wind_speed > 15:
        wind = 1.2
    elif environment.wind_speed > 5:
        wind = 1.1
    return {
        "singles": temperature,
        "doubles": temperature * wind,
        "triples": temperature * wind * 1.1,
    }


def calculate(inputs: BatterInputs) -> HitResults:
    stats = inputs.season_stats
    season_avg = stats.batting_average
    if season_avg is None:
        raise MissingDataError(f"no batting average for batter {inputs.identity.player_id}")
    career = inputs.career
    baseline = blend(season_avg, career.batting_average if career is not None else None)

    pitcher = inputs.opposing_pitcher
    vulnerability = pitcher_vulnerability(pitcher.h_per_9 if pitcher is not None else None)
    matchup = inputs.matchup
    advantage = matchup.advantage if matchup is not None else MatchupAdvantage.NEUTRAL
    platoon = inputs.platoon

    factors: dict[str, float] = {
        "baseline_avg": baseline,
        "pitcher": vulnerability / 5.0,
        "matchup": matchup_factor(advantage),
        "platoon": platoon_factor(platoon),
        "home": 1.05 if inputs.is_home else 0.95,
        "ballpark": inputs.ballpark.handedness_factor(inputs.identity.bats),
    }
    adjusted = baseline
    for name in ("pitcher", "matchup", "platoon", "home", "ballpark"):
        adjusted *= factors[name]
    adjusted = clamp(adjusted, MIN_AVERAGE, MAX_AVERAGE)
    factors["adjusted_avg"] = adjusted

    hits_per_game = adjusted * AT_BATS_PER_GAME
    share = stats.hit_type_share() or LEAGUE_HIT_SHARE
    weather = weather_factors(inputs.environment)
    park = {
        "singles": inputs.ballpark.singles,
        "doubles": inputs.ballpark.doubles,
        "triples": inputs.ballpark.triples,
    }
    expected = {kind: hits_per_game * share[kind] * park[kind] * weather[kind] for kind in park}

    confidence = 70.0
    if matchup is not None and matchup.sample_size is not SampleSize.NONE:
        confidence += 10
    if pitcher is not None and pitcher.innings_pitched > 0:
        confidence += 5
    if platoon is not None:
        confidence += 5
    confidence = penalized(clamp(confidence, 30.0, 95.0), inputs.stats)

    return (
        CategoryResult.linear(
            Category.SINGLES,
            expected["singles"],
            confidence,
            {**factors, "park": park["singles"], "weather": weather["singles"]},
        ),
        CategoryResult.linear(
            Category.DOUBLES,
            expected["doubles"],
            confidence,
            {**factors, "park": park["doubles"], "weather": weather["doubles"]},
        ),
        CategoryResult.linear(
            Category.TRIPLES,
            expected["triples"],
            confidence,
            {**factors, "park": park["triples"], "weather": weather["triples"]},
        ),
    )
