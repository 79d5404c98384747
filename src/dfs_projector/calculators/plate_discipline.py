"""Walks and hit-by-pitch for one batter against the opposing starter's control."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.inputs import blend
from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.matchup import SampleSize
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import BatterInputs
    from dfs_projector.domain.matchup import MatchupRecord

PLATE_APPEARANCES_PER_GAME = 4.2
LEAGUE_BB_RATE = 0.08
LEAGUE_HBP_RATE = 0.008
LEAGUE_BB_PER_9 = 3.0
MAX_WALKS = 2.0
MAX_HBP = 0.5

DEFAULT_WALKS = 0.4
DEFAULT_HBP = 0.04
DEFAULT_CONFIDENCE = 30.0


def default() -> tuple[CategoryResult, CategoryResult]:
    return (
        CategoryResult.linear(Category.WALKS, DEFAULT_WALKS, DEFAULT_CONFIDENCE, is_default=True),
        CategoryResult.linear(Category.HIT_BY_PITCH, DEFAULT_HBP, DEFAULT_CONFIDENCE, is_default=True),
    )


def control_rating(bb_per_9: float | None) -> float:
    """Pitcher control on 1-10 where 5 is a league-average walk rate."""
    if bb_per_9 is None:
        return 5.0
    return clamp(5.0 * (LEAGUE_BB_PER_9 / max(0.5, bb_per_9)), 1.0, 10.0)


def control_factor(rating: float) -> float:
    return clamp(5.0 / rating, 0.5, 2.0)


def matchup_factor(matchup: MatchupRecord | None, season_rate: float) -> float:
    if matchup is None or season_rate <= 0:
        return 1.0
    walk_rate = matchup.walk_rate
    if walk_rate is None:
        return 1.0
    relative = walk_rate / season_rate
    match matchup.sample_size:
        case SampleSize.LARGE:
            return relative * 0.6 + 0.4
        case SampleSize.MEDIUM:
            return relative * 0.4 + 0.6
        case SampleSize.SMALL:
            return relative * 0.2 + 0.8
        case _:
            return 1.0


def hbp_factor(hbp_per_9: float | None) -> float:
    if hbp_per_9 is None:
        return 1.0
    if hbp_per_9 >= 0.6:
        return 1.5
    if hbp_per_9 <= 0.2:
        return 0.5
    return 1.0


def calculate(inputs: BatterInputs) -> tuple[CategoryResult, CategoryResult]:
    stats = inputs.season_stats
    career = inputs.career
    bb_rate = blend(
        stats.bb_rate if stats.bb_rate is not None else LEAGUE_BB_RATE,
        career.bb_rate if career is not None else None,
    )
    hbp_rate = blend(
        stats.hbp_rate if stats.hbp_rate is not None else LEAGUE_HBP_RATE,
        career.hbp_rate if career is not None else None,
    )

    pitcher = inputs.opposing_pitcher
    rating = control_rating(pitcher.bb_per_9 if pitcher is not None else None)
    factors = {
        "bb_rate": bb_rate,
        "control_rating": rating,
        "control": control_factor(rating),
        "matchup": matchup_factor(inputs.matchup, bb_rate),
        "platoon": 1.1 if inputs.platoon else 1.0,
    }
    walks = PLATE_APPEARANCES_PER_GAME * bb_rate * factors["control"] * factors["matchup"] * factors["platoon"]
    walks = clamp(walks, 0.0, MAX_WALKS)
    hbp = hbp_factor(pitcher.hbp_per_9 if pitcher is not None else None)
    hit_by_pitch = clamp(PLATE_APPEARANCES_PER_GAME * hbp_rate * hbp, 0.0, MAX_HBP)

    confidence = 70.0
    if career is not None:
        confidence += 10
    if inputs.matchup is not None and inputs.matchup.sample_size is not SampleSize.NONE:
        confidence += 10
    confidence = clamp(confidence, 0.0, 100.0)
    hbp_confidence = max(40.0, confidence - 20)

    return (
        CategoryResult.linear(Category.WALKS, walks, penalized(confidence, inputs.stats), factors),
        CategoryResult.linear(
            Category.HIT_BY_PITCH,
            hit_by_pitch,
            penalized(hbp_confidence, inputs.stats),
            {"hbp_rate": hbp_rate, "pitcher_hbp": hbp},
        ),
    )
