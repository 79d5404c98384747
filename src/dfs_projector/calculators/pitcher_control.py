"""Negative pitcher categories: earned runs, hits, walks and hit batsmen allowed."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.inputs import expected_start_length
from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import PitcherInputs
    from dfs_projector.domain.stats import PitcherSeasonStats, TeamSeasonStats

LEAGUE_HR_PER_9 = 1.25
LEAGUE_ER_PER_9 = 4.0
LEAGUE_RUNS_PER_GAME = 4.5
LEAGUE_K_RATE = 0.22
LEAGUE_BB_RATE = 0.08
LEAGUE_H_PER_9 = 8.5
LEAGUE_BB_PER_9 = 3.0
LEAGUE_HBP_PER_9 = 0.4

DEFAULT_EARNED_RUNS = 3.0
DEFAULT_HITS = 5.5
DEFAULT_WALKS = 2.0
DEFAULT_HBP = 0.25
DEFAULT_CONFIDENCE = 30.0

type ControlResults = tuple[CategoryResult, CategoryResult, CategoryResult, CategoryResult]


def default() -> ControlResults:
    return (
        CategoryResult.linear(Category.EARNED_RUNS, DEFAULT_EARNED_RUNS, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.HITS_ALLOWED, DEFAULT_HITS, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.WALKS_ALLOWED, DEFAULT_WALKS, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.HIT_BATSMEN, DEFAULT_HBP, DEFAULT_CONFIDENCE, is_default=True),
    )


def hr_vulnerability(hr_per_9: float | None) -> float:
    if hr_per_9 is None:
        return 1.0
    return clamp(hr_per_9 / LEAGUE_HR_PER_9, 0.5, 2.0)


def opponent_offense(opponent: TeamSeasonStats | None) -> float:
    runs_per_game = opponent.runs_per_game if opponent is not None else None
    if runs_per_game is None:
        return 1.0
    return clamp(runs_per_game / LEAGUE_RUNS_PER_GAME, 0.8, 1.2)


def contact_factor(opponent: TeamSeasonStats | None) -> float:
    """Opposing lineup's ability to put the ball in play relative to league."""
    k_rate = opponent.k_rate if opponent is not None else None
    if k_rate is None:
        return 1.0
    return clamp((1.0 - k_rate) / (1.0 - LEAGUE_K_RATE), 0.7, 1.3)


def eye_factor(opponent: TeamSeasonStats | None) -> float:
    bb_rate = opponent.bb_rate if opponent is not None else None
    if bb_rate is None:
        return 1.0
    return clamp(bb_rate / LEAGUE_BB_RATE, 0.7, 1.3)


def control_rating(stats: PitcherSeasonStats) -> float:
    whip = stats.walks_hits_per_inning
    rating = 5.0 * (1.3 / max(0.8, whip)) if whip is not None else 5.0
    k_to_bb = stats.k_to_bb
    if k_to_bb is not None:
        if k_to_bb > 3:
            rating += 1
        elif k_to_bb < 1.5:
            rating -= 1
    return clamp(rating, 1.0, 10.0)


def calculate(inputs: PitcherInputs) -> ControlResults:
    stats = inputs.season_stats
    opponent = inputs.opponent_stats
    innings = expected_start_length(stats)

    hr_factor = hr_vulnerability(stats.hr_per_9)
    era = stats.earned_run_average
    er_per_9 = 0.5 * era + 0.5 * LEAGUE_ER_PER_9 * hr_factor if era is not None else LEAGUE_ER_PER_9 * hr_factor
    offense = opponent_offense(opponent)
    earned_runs = er_per_9 / 9.0 * innings * offense * inputs.ballpark.runs

    h_per_9 = stats.h_per_9 if stats.h_per_9 is not None else LEAGUE_H_PER_9
    contact = contact_factor(opponent)
    hits = h_per_9 / 9.0 * innings * contact

    bb_per_9 = stats.bb_per_9 if stats.bb_per_9 is not None else LEAGUE_BB_PER_9
    eye = eye_factor(opponent)
    walks = bb_per_9 / 9.0 * innings * eye

    # A zero HBP count is usually a missing field rather than pinpoint control.
    hbp_per_9 = stats.hbp_per_9 if stats.hit_batsmen else None
    hit_batsmen = (hbp_per_9 if hbp_per_9 is not None else LEAGUE_HBP_PER_9) / 9.0 * innings

    confidence = 70.0
    if stats.innings_pitched > 50:
        confidence += 10
    if opponent is not None:
        confidence += 5
    confidence = penalized(clamp(confidence, 0.0, 100.0), inputs.stats)

    shared = {"innings": innings, "control_rating": control_rating(stats)}
    return (
        CategoryResult.linear(
            Category.EARNED_RUNS,
            max(0.0, earned_runs),
            confidence,
            {**shared, "hr_factor": hr_factor, "er_per_9": er_per_9, "opponent": offense, "park": inputs.ballpark.runs},
        ),
        CategoryResult.linear(Category.HITS_ALLOWED, max(0.0, hits), confidence, {**shared, "contact": contact}),
        CategoryResult.linear(Category.WALKS_ALLOWED, max(0.0, walks), confidence, {**shared, "eye": eye}),
        CategoryResult.linear(Category.HIT_BATSMEN, max(0.0, hit_batsmen), confidence, shared),
    )
