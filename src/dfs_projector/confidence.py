"""Confidence scale helpers.

Every calculator reports confidence on 0-100. Calculators that reason in
the 1-10 convention convert through :func:`from_ten_point` and nothing else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.domain.stats import confidence_penalty

if TYPE_CHECKING:
    from dfs_projector.domain.stats import PlayerStats

MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 100.0

# Combined sample-size and advanced-metric boosts stop here on the 1-10 scale.
TEN_POINT_BOOST_CAP = 8.0

DEFAULT_ANALYSIS_CONFIDENCE = 10.0
FALLBACK_CONFIDENCE_PENALTY = 15.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_confidence(value: float) -> float:
    return clamp(value, MIN_CONFIDENCE, MAX_CONFIDENCE)


def from_ten_point(score: float) -> float:
    return clamp_confidence(clamp(score, 1.0, 10.0) * 10.0)


def to_ten_point(confidence: float) -> float:
    return clamp(clamp_confidence(confidence) / 10.0, 1.0, 10.0)


def boosted(base: float, sample_boost: float, *, has_advanced_metric: bool, advanced_boost: float = 1.0) -> float:
    """Add sample-size and advanced-metric boosts on the 1-10 scale.

    Boosts add up, but a positive total can only lift ``base`` as far as
    :data:`TEN_POINT_BOOST_CAP`. Negative sample adjustments are never capped.
    """
    raw = base + sample_boost + (advanced_boost if has_advanced_metric else 0.0)
    if raw > base:
        return min(raw, max(base, TEN_POINT_BOOST_CAP))
    return clamp(raw, 1.0, 10.0)


def penalized(confidence: float, stats: PlayerStats[object]) -> float:
    """Apply the penalty carried by an ``Estimated`` stats variant."""
    return clamp_confidence(confidence - confidence_penalty(stats))
