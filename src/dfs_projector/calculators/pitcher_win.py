from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import PitcherInputs
    from dfs_projector.domain.environment import EnvironmentContext

LEAGUE_ERA = 4.5
LEAGUE_RUNS_PER_GAME = 4.5
HOME_EDGE = 0.08
MIN_PROBABILITY = 0.20
MAX_PROBABILITY = 0.80

DEFAULT_PROBABILITY = 0.5
DEFAULT_CONFIDENCE = 20.0


def default() -> CategoryResult:
    return CategoryResult.linear(Category.WIN, DEFAULT_PROBABILITY, DEFAULT_CONFIDENCE, is_default=True)


def _rating(value: float) -> float:
    return clamp(value, 1.0, 10.0)


def weather_offense_impact(environment: EnvironmentContext) -> float:
    """Positive when conditions favour hitters: heat or wind blowing out."""
    if not environment.is_outdoor:
        return 0.0
    impact = 0.0
    if environment.temperature > 85:
        impact += 1
    elif environment.temperature < 50:
        impact -= 1
    if environment.wind_speed > 10:
        if environment.wind_blowing_out:
            impact += 1
        elif environment.wind_blowing_in:
            impact -= 1
    return impact


def calculate(inputs: PitcherInputs) -> CategoryResult:
    stats = inputs.season_stats
    team = inputs.team_stats
    opponent = inputs.opponent_stats

    team_win_pct = team.win_pct if team is not None and team.win_pct is not None else 0.5
    era = stats.earned_run_average
    pitcher_quality = _rating((LEAGUE_ERA / max(1.0, era)) * 5.0) if era is not None else 5.0
    runs_per_game = team.runs_per_game if team is not None else None
    run_support = _rating((runs_per_game / LEAGUE_RUNS_PER_GAME) * 5.0) if runs_per_game is not None else 5.0
    team_era = team.era if team is not None else None
    bullpen = _rating((LEAGUE_ERA / max(1.0, team_era)) * 5.0) if team_era is not None else 5.0
    opponent_win_pct = opponent.win_pct if opponent is not None else None
    opponent_quality = _rating(opponent_win_pct * 10.0) if opponent_win_pct is not None else 5.0
    weather = weather_offense_impact(inputs.environment)

    probability = team_win_pct + (HOME_EDGE if inputs.is_home else -HOME_EDGE)
    pitcher_win_pct = stats.win_pct if stats.win_pct is not None else 0.5
    probability += (pitcher_win_pct - probability) * 0.5
    probability -= (opponent_quality / 10.0 - 0.5) * 0.2
    probability += (bullpen / 10.0 - 0.5) * 0.1
    probability += (run_support / 10.0 - 0.5) * 0.15
    probability -= weather * 0.02
    probability = clamp(probability, MIN_PROBABILITY, MAX_PROBABILITY)

    confidence = 50.0
    if stats.games_started > 5:
        confidence += 15
    if opponent is not None:
        confidence += 10
    if team is not None:
        confidence += 15
    confidence = penalized(clamp(confidence, 0.0, 100.0), inputs.stats)

    return CategoryResult.linear(
        Category.WIN,
        probability,
        confidence,
        {
            "team_win_pct": team_win_pct,
            "pitcher_win_pct": pitcher_win_pct,
            "pitcher_quality": pitcher_quality,
            "run_support": run_support,
            "bullpen": bullpen,
            "opponent_quality": opponent_quality,
            "weather_offense": weather,
        },
    )
