"""Runs scored and runs batted in, shaped by lineup slot and team context."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.inputs import blend
from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import BatterInputs

LEAGUE_RUNS_PER_GAME = 4.5
LEAGUE_PER_PLAYER = 0.5
LEAGUE_SLUGGING = 0.400
MAX_PER_GAME = 2.0
UNKNOWN_SLOT = 5

RUN_WEIGHTS: dict[int, float] = {1: 1.4, 2: 1.3, 3: 1.2, 4: 1.1, 5: 1.0, 6: 0.9, 7: 0.8, 8: 0.7, 9: 0.6}
RBI_WEIGHTS: dict[int, float] = {1: 0.7, 2: 0.9, 3: 1.4, 4: 1.5, 5: 1.3, 6: 1.1, 7: 0.9, 8: 0.8, 9: 0.7}

DEFAULT_RUNS = 0.5
DEFAULT_RBI = 0.5
DEFAULT_CONFIDENCE = 30.0


def default() -> tuple[CategoryResult, CategoryResult]:
    return (
        CategoryResult.linear(Category.RUNS, DEFAULT_RUNS, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.RBI, DEFAULT_RBI, DEFAULT_CONFIDENCE, is_default=True),
    )


def lineup_slot(slot: int | None) -> int:
    if slot is None or slot not in RUN_WEIGHTS:
        return UNKNOWN_SLOT
    return slot


def _variance(season: float | None, career: float | None) -> float:
    """Relative gap between season and career rates, 1.0 when either is unknown."""
    if season is None or not career:
        return 1.0
    return clamp(abs(season - career) / career, 0.0, 1.0)


def calculate(inputs: BatterInputs) -> tuple[CategoryResult, CategoryResult]:
    stats = inputs.season_stats
    career = inputs.career

    season_runs = stats.runs_per_game
    season_rbi = stats.rbi_per_game
    career_runs = career.runs_per_game if career is not None else None
    career_rbi = career.rbi_per_game if career is not None else None
    base_runs = blend(season_runs, career_runs) if season_runs is not None else LEAGUE_PER_PLAYER
    base_rbi = blend(season_rbi, career_rbi) if season_rbi is not None else LEAGUE_PER_PLAYER

    slot = lineup_slot(inputs.lineup_slot)
    team_rpg = inputs.team_stats.runs_per_game if inputs.team_stats is not None else None
    team = clamp(team_rpg / LEAGUE_RUNS_PER_GAME, 0.7, 1.3) if team_rpg is not None else 1.0
    era = inputs.opposing_pitcher.earned_run_average if inputs.opposing_pitcher is not None else None
    pitcher = clamp(era / LEAGUE_RUNS_PER_GAME, 0.6, 1.5) if era is not None else 1.0
    park = inputs.ballpark.runs
    slugging = stats.slugging
    skill = (slugging / LEAGUE_SLUGGING) * 0.7 + 0.3 if slugging is not None else 1.0

    shared = {"team": team, "pitcher": pitcher, "park": park, "lineup_slot": float(slot)}
    runs = clamp(base_runs * RUN_WEIGHTS[slot] * team * pitcher * park, 0.0, MAX_PER_GAME)
    rbi = clamp(base_rbi * RBI_WEIGHTS[slot] * team * pitcher * park * skill, 0.0, MAX_PER_GAME)

    confidence = 70.0
    if inputs.lineup_slot is not None:
        confidence += 10
    runs_confidence = confidence + (1.0 - _variance(season_runs, career_runs)) * 10
    rbi_confidence = confidence + (1.0 - _variance(season_rbi, career_rbi)) * 10

    return (
        CategoryResult.linear(
            Category.RUNS,
            runs,
            penalized(clamp(runs_confidence, 0.0, 100.0), inputs.stats),
            {**shared, "baseline": base_runs, "slot_weight": RUN_WEIGHTS[slot]},
        ),
        CategoryResult.linear(
            Category.RBI,
            rbi,
            penalized(clamp(rbi_confidence, 0.0, 100.0), inputs.stats),
            {**shared, "baseline": base_rbi, "slot_weight": RBI_WEIGHTS[slot], "skill": skill},
        ),
    )
