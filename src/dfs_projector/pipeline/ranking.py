"""Ordering, salary value and filtering over finished analyses."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dfs_projector.domain.analysis import PitcherAnalysis, PlayerAnalysis

DEFAULT_SALARY = 8000
HIGH_VALUE_RATIO = 1.25
MEDIUM_VALUE_RATIO = 0.9


class ValueTier(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RankedPlayer[A]:
    analysis: A
    value: float
    tier: ValueTier


def rank_by_expected_points[A: PlayerAnalysis](analyses: Iterable[A]) -> list[A]:
    """Sort by expected points, highest first; ties fall back to player id."""
    return sorted(analyses, key=lambda a: (-a.expected_points, a.identity.player_id))


def salary_of(analysis: PlayerAnalysis) -> int:
    link = analysis.fantasy_site
    if link is None or not link.salary:
        return DEFAULT_SALARY
    return link.salary


def value_score(analysis: PlayerAnalysis) -> float:
    """Projected points per $1000 of salary."""
    return analysis.expected_points / salary_of(analysis) * 1000.0


def tier_for(value: float, average: float) -> ValueTier:
    if average <= 0:
        return ValueTier.MEDIUM
    if value >= average * HIGH_VALUE_RATIO:
        return ValueTier.HIGH
    if value >= average * MEDIUM_VALUE_RATIO:
        return ValueTier.MEDIUM
    return ValueTier.LOW


def rank_by_value[A: PlayerAnalysis](analyses: Iterable[A]) -> list[RankedPlayer[A]]:
    scored = [(analysis, value_score(analysis)) for analysis in analyses]
    if not scored:
        return []
    average = math.fsum(value for _, value in scored) / len(scored)
    ranked = [RankedPlayer(analysis=a, value=v, tier=tier_for(v, average)) for a, v in scored]
    return sorted(ranked, key=lambda r: (-r.value, r.analysis.identity.player_id))


def filter_pitchers(
    analyses: Iterable[PitcherAnalysis],
    *,
    min_win_probability: float = 0.0,
    min_strikeouts: float = 0.0,
) -> list[PitcherAnalysis]:
    kept = [
        a for a in analyses if a.win_probability >= min_win_probability and a.expected_strikeouts >= min_strikeouts
    ]
    return rank_by_expected_points(kept)
