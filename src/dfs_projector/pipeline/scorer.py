from __future__ import annotations

import math
from typing import TYPE_CHECKING

from dfs_projector.confidence import DEFAULT_ANALYSIS_CONFIDENCE, clamp_confidence
from dfs_projector.domain.analysis import Projection
from dfs_projector.domain.scoring import FLOOR_MULTIPLIER, UPSIDE_MULTIPLIER

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dfs_projector.domain.category import CategoryResult
    from dfs_projector.domain.player import PlayerType


class AggregateScorer:
    """Collapse category results into one :class:`Projection`.

    Confidence is the mean of category confidences weighted by each
    category's absolute points, so a shaky estimate of a minor category
    barely moves it. Sums use :func:`math.fsum`, which makes the result
    independent of the order results arrive in.
    """

    def score(self, results: Iterable[CategoryResult], player_type: PlayerType) -> Projection:
        ordered = sorted(results, key=lambda r: r.category.value)
        if not ordered:
            return Projection(total=0.0, floor=0.0, upside=0.0, confidence=DEFAULT_ANALYSIS_CONFIDENCE)

        breakdown: dict[str, float] = {}
        for result in ordered:
            key = result.category.value
            breakdown[key] = math.fsum((breakdown.get(key, 0.0), result.points))

        total = max(0.0, math.fsum(r.points for r in ordered))
        weight = math.fsum(abs(r.points) for r in ordered)
        if weight > 0:
            confidence = math.fsum(r.confidence * abs(r.points) for r in ordered) / weight
        else:
            confidence = math.fsum(r.confidence for r in ordered) / len(ordered)

        return Projection(
            total=total,
            floor=max(0.0, total * FLOOR_MULTIPLIER[player_type]),
            upside=max(0.0, total * UPSIDE_MULTIPLIER[player_type]),
            confidence=clamp_confidence(confidence),
            breakdown=breakdown,
        )
