"""Descriptive quality scores for batters and the pitcher quality rating.

Batter scores sit on 0-1 except ``consistency``, which is 0-100. None of
these feed the point projection; they are reported alongside it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.confidence import clamp
from dfs_projector.domain.analysis import DEFAULT_QUALITY_METRICS, QualityMetrics
from dfs_projector.domain.stats import stats_or_none

if TYPE_CHECKING:
    from dfs_projector.domain.stats import BatterSeasonStats, PitcherSeasonStats, PlayerStats

DEFAULT_K_RATE = 0.2
DEFAULT_PITCHER_RATING = 5.0


def _unit(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def quality_metrics(player_stats: PlayerStats[BatterSeasonStats]) -> QualityMetrics:
    stats = stats_or_none(player_stats)
    if stats is None or stats.at_bats <= 0:
        return DEFAULT_QUALITY_METRICS

    babip = stats.babip or 0.0
    iso = stats.iso or 0.0
    iso_score = _unit((iso - 0.1) / 0.15)
    k_rate = stats.k_rate
    avg = stats.batting_average or 0.0
    bb_rate = stats.bb_rate or 0.0
    obp = stats.on_base or 0.0
    success = stats.sb_success_rate or 0.0
    triples_per_game = stats.triples / stats.games if stats.games else 0.0

    return QualityMetrics(
        batted_ball_quality=0.6 * _unit((babip - 0.25) / 0.1) + 0.4 * iso_score,
        power=0.7 * _unit(((stats.hr_rate or 0.0) - 0.01) / 0.07) + 0.3 * iso_score,
        contact_rate=0.6 * _unit(1 - ((k_rate or 0.0) - 0.1) / 0.2) + 0.4 * _unit((avg - 0.22) / 0.1),
        plate_approach=0.5 * _unit((bb_rate - 0.05) / 0.1) + 0.5 * _unit((obp - 0.3) / 0.1),
        speed=0.7 * _unit((success - 0.6) / 0.3) + 0.3 * _unit(triples_per_game / 0.05),
        consistency=round(
            min(stats.games / 100, 1.0) * 80 + (1 - (k_rate if k_rate is not None else DEFAULT_K_RATE)) * 20
        ),
    )


def pitcher_quality_rating(player_stats: PlayerStats[PitcherSeasonStats]) -> float:
    """Mean of strikeout, durability and HR-suppression scores, each on 1-10."""
    stats = stats_or_none(player_stats)
    if stats is None or stats.innings_pitched <= 0:
        return DEFAULT_PITCHER_RATING
    strikeouts = clamp((stats.k_per_9 or 0.0) / 10.0 * 10.0, 1.0, 10.0)
    durability = clamp((stats.innings_per_start or 0.0) / 7.0 * 10.0, 1.0, 10.0)
    hr_suppression = clamp(10.0 - (stats.hr_per_9 or 0.0) / 2.5 * 10.0, 1.0, 10.0)
    return (strikeouts + durability + hr_suppression) / 3.0
