from __future__ import annotations

from typing import TYPE_CHECKING

from dfs_projector.calculators.inputs import blend
from dfs_projector.confidence import clamp, penalized
from dfs_projector.domain.category import CategoryResult
from dfs_projector.domain.player import Handedness
from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.calculators.inputs import BatterInputs
    from dfs_projector.domain.stats import BatterSeasonStats, CatcherDefense

LEAGUE_SUCCESS_RATE = 0.75
LEAGUE_CAUGHT_STEALING_PCT = 0.25
MAX_SUCCESS_RATE = 0.95
MAX_PER_GAME = 0.6
# Seasons with fewer games are ignored when reading a career trend.
QUALIFYING_GAMES = 20

DEFAULT_EXPECTED = 0.08
DEFAULT_CONFIDENCE = 30.0


def default() -> CategoryResult:
    return CategoryResult.linear(Category.STOLEN_BASES, DEFAULT_EXPECTED, DEFAULT_CONFIDENCE, is_default=True)


def catcher_factor(catcher: CatcherDefense | None) -> float:
    if catcher is None:
        return 1.0
    return clamp(1.0 - (catcher.caught_stealing_pct - LEAGUE_CAUGHT_STEALING_PCT) * 2.0, 0.7, 1.3)


def trend_factor(history: tuple[BatterSeasonStats, ...]) -> float:
    """Compare the latest qualified season's attempt rate with the one before it."""
    qualified = sorted((s for s in history if s.games >= QUALIFYING_GAMES), key=lambda s: s.season)
    if len(qualified) < 2:
        return 1.0
    latest = qualified[-1].sb_attempt_rate
    previous = qualified[-2].sb_attempt_rate
    if latest is None or not previous:
        return 1.0
    if latest > previous * 1.2:
        return 1.1
    if latest < previous * 0.8:
        return 0.9
    return 1.0


def calculate(inputs: BatterInputs) -> CategoryResult:
    stats = inputs.season_stats
    career = inputs.career
    attempts = blend(stats.sb_attempt_rate or 0.0, career.sb_attempt_rate if career is not None else None)
    success = stats.sb_success_rate
    if success is None and career is not None:
        success = career.sb_success_rate
    if success is None:
        success = LEAGUE_SUCCESS_RATE
    success = clamp(success, 0.0, MAX_SUCCESS_RATE)

    factors = {
        "attempts_per_game": attempts,
        "success_rate": success,
        "catcher": catcher_factor(inputs.catcher),
        "pitcher_hand": 0.9 if inputs.opposing_pitcher_hand is Handedness.LEFT else 1.0,
        "home": 0.95 if inputs.is_home else 1.0,
        "trend": trend_factor(inputs.history),
    }
    expected = attempts * success
    for name in ("catcher", "pitcher_hand", "home", "trend"):
        expected *= factors[name]
    expected = clamp(expected, 0.0, MAX_PER_GAME)

    confidence = 50.0
    if stats.games >= 50:
        confidence += 20
    elif stats.games >= 20:
        confidence += 10
    if len(inputs.history) >= 2:
        confidence += 10
    if inputs.catcher is not None:
        confidence += 10
    confidence = penalized(clamp(confidence, 0.0, 100.0), inputs.stats)

    return CategoryResult.linear(Category.STOLEN_BASES, expected, confidence, factors)
