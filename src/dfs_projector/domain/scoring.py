"""DraftKings MLB classic scoring table.

These weights are the external contract every calculator and the
aggregate scorer reproduce exactly.
"""

from enum import StrEnum

from dfs_projector.domain.player import PlayerType


class Category(StrEnum):
    SINGLES = "singles"
    DOUBLES = "doubles"
    TRIPLES = "triples"
    HOME_RUNS = "home_runs"
    RUNS = "runs"
    RBI = "rbi"
    WALKS = "walks"
    HIT_BY_PITCH = "hit_by_pitch"
    STOLEN_BASES = "stolen_bases"
    STRIKEOUTS = "strikeouts"
    INNINGS_PITCHED = "innings_pitched"
    WIN = "win"
    RARE_EVENTS = "rare_events"
    EARNED_RUNS = "earned_runs"
    HITS_ALLOWED = "hits_allowed"
    WALKS_ALLOWED = "walks_allowed"
    HIT_BATSMEN = "hit_batsmen"


POINT_WEIGHTS: dict[Category, float] = {
    Category.SINGLES: 3.0,
    Category.DOUBLES: 5.0,
    Category.TRIPLES: 8.0,
    Category.HOME_RUNS: 10.0,
    Category.RUNS: 2.0,
    Category.RBI: 2.0,
    Category.WALKS: 2.0,
    Category.HIT_BY_PITCH: 2.0,
    Category.STOLEN_BASES: 5.0,
    Category.STRIKEOUTS: 2.0,
    Category.INNINGS_PITCHED: 2.25,
    Category.WIN: 4.0,
    Category.EARNED_RUNS: -2.0,
    Category.HITS_ALLOWED: -0.6,
    Category.WALKS_ALLOWED: -0.6,
    Category.HIT_BATSMEN: -0.6,
}

# Pitcher bonuses stack: a no-hitter shutout earns all three.
COMPLETE_GAME_BONUS = 2.5
SHUTOUT_BONUS = 2.5
NO_HITTER_BONUS = 5.0

BATTER_CATEGORIES: tuple[Category, ...] = (
    Category.SINGLES,
    Category.DOUBLES,
    Category.TRIPLES,
    Category.HOME_RUNS,
    Category.RUNS,
    Category.RBI,
    Category.WALKS,
    Category.HIT_BY_PITCH,
    Category.STOLEN_BASES,
)

PITCHER_CATEGORIES: tuple[Category, ...] = (
    Category.STRIKEOUTS,
    Category.INNINGS_PITCHED,
    Category.WIN,
    Category.RARE_EVENTS,
    Category.EARNED_RUNS,
    Category.HITS_ALLOWED,
    Category.WALKS_ALLOWED,
    Category.HIT_BATSMEN,
)

NEGATIVE_CATEGORIES = frozenset(c for c, w in POINT_WEIGHTS.items() if w < 0)

FLOOR_MULTIPLIER: dict[PlayerType, float] = {
    PlayerType.BATTER: 0.6,
    PlayerType.PITCHER: 0.75,
}

UPSIDE_MULTIPLIER: dict[PlayerType, float] = {
    PlayerType.BATTER: 1.5,
    PlayerType.PITCHER: 1.2,
}


def points_for(category: Category, expected_value: float) -> float:
    return expected_value * POINT_WEIGHTS[category]


def hit_points(singles: float, doubles: float, triples: float, home_runs: float) -> float:
    return (
        points_for(Category.SINGLES, singles)
        + points_for(Category.DOUBLES, doubles)
        + points_for(Category.TRIPLES, triples)
        + points_for(Category.HOME_RUNS, home_runs)
    )


def rare_event_points(complete_game: float, shutout: float, no_hitter: float) -> float:
    """Expected bonus points from event probabilities expressed as fractions."""
    return complete_game * COMPLETE_GAME_BONUS + shutout * SHUTOUT_BONUS + no_hitter * NO_HITTER_BONUS
