from __future__ import annotations

from dfs_projector.domain.environment import BallparkFactor

# MLB Stats API venue ids of parks with a roof, retractable or fixed.
ROOF_VENUE_IDS: frozenset[int] = frozenset({5325, 2889, 2392, 2287, 305, 12, 3191, 4169, 3312})

_FACTORS: dict[int, BallparkFactor] = {
    5325: BallparkFactor(
        venue_id=5325,
        overall=0.98,
        vs_right=0.97,
        vs_left=0.99,
        singles=1.02,
        doubles=0.95,
        triples=0.85,
        home_runs=0.92,
        runs=0.96,
    ),
    15: BallparkFactor(
        venue_id=15,
        overall=1.05,
        vs_right=1.04,
        vs_left=1.06,
        singles=1.03,
        doubles=1.08,
        triples=1.15,
        home_runs=1.02,
        runs=1.05,
    ),
    12: BallparkFactor(
        venue_id=12,
        overall=0.96,
        vs_right=0.95,
        vs_left=0.97,
        singles=0.99,
        doubles=0.97,
        triples=0.9,
        home_runs=0.95,
        runs=0.96,
    ),
}


class StaticBallparkFactors:
    """Built-in per-venue factors; venues outside the table are neutral."""

    def __init__(self, factors: dict[int, BallparkFactor] | None = None) -> None:
        self._factors = dict(_FACTORS if factors is None else factors)

    def factors(self, venue_id: int, season: int) -> BallparkFactor:
        known = self._factors.get(venue_id)
        if known is not None:
            return known
        return BallparkFactor(venue_id=venue_id)

    def has_roof(self, venue_id: int) -> bool:
        return venue_id in ROOF_VENUE_IDS
