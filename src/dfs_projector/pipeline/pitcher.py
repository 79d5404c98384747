"""Per-pitcher projection pipeline.

Same shape as the batter pipeline, with a two-season fallback: when the
requested season has no games the prior season is used as ``Estimated``
stats, which lowers every category confidence by the fallback penalty.
Quality rating and home-run vulnerability are read from whichever season
was selected.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dfs_projector.calculators import home_runs, innings_pitched, pitcher_control, pitcher_win, rare_events, strikeouts
from dfs_projector.calculators.inputs import PitcherInputs
from dfs_projector.confidence import DEFAULT_ANALYSIS_CONFIDENCE, FALLBACK_CONFIDENCE_PENALTY
from dfs_projector.domain.analysis import PitcherAnalysis, Projection
from dfs_projector.domain.environment import NEUTRAL_BALLPARK
from dfs_projector.domain.player import Handedness, PlayerIdentity, PlayerType
from dfs_projector.domain.scoring import Category
from dfs_projector.domain.stats import Estimated, Missing, Observed, stats_or_none
from dfs_projector.pipeline.scorer import AggregateScorer
from dfs_projector.quality import pitcher_quality_rating
from dfs_projector.result import capture, capture_async, recover, unwrap_or

if TYPE_CHECKING:
    from dfs_projector.domain.analysis import FantasySiteLink
    from dfs_projector.domain.category import CategoryResult
    from dfs_projector.domain.game import GameContext, LineupEntry
    from dfs_projector.domain.stats import PitcherSeasonStats, PlayerStats
    from dfs_projector.providers.protocols import FantasySiteMapper, StatProvider

logger = logging.getLogger(__name__)


def select_season_stats(
    current: PitcherSeasonStats | None,
    prior: PitcherSeasonStats | None,
    *,
    penalty: float = FALLBACK_CONFIDENCE_PENALTY,
) -> PlayerStats[PitcherSeasonStats]:
    """Pick the current season when it has games, else the prior one as an estimate."""
    if current is not None and current.games > 0:
        return Observed(current)
    if prior is not None and prior.games > 0:
        return Estimated(prior, penalty)
    return Missing("no games in current or prior season")


@dataclass
class _PitcherBuilder:
    identity: PlayerIdentity
    game_pk: int
    opponent: str
    is_home: bool
    stats: PlayerStats[PitcherSeasonStats] = field(default_factory=Missing)
    categories: dict[Category, CategoryResult] = field(default_factory=dict)
    quality_rating: float = 5.0
    hr_vulnerability: float = 5.0
    stats_season: int | None = None
    fantasy_site: FantasySiteLink | None = None

    def add(self, *results: CategoryResult) -> None:
        for result in results:
            self.categories[result.category] = result

    def freeze(self, projection: Projection, *, is_default: bool = False) -> PitcherAnalysis:
        return PitcherAnalysis(
            identity=self.identity,
            game_pk=self.game_pk,
            opponent=self.opponent,
            is_home=self.is_home,
            stats=self.stats,
            categories=dict(self.categories),
            projection=projection,
            quality_rating=self.quality_rating,
            hr_vulnerability=self.hr_vulnerability,
            stats_season=self.stats_season,
            fantasy_site=self.fantasy_site,
            is_default=is_default,
        )


class PitcherProjector:
    def __init__(
        self,
        stats: StatProvider,
        fantasy_site: FantasySiteMapper | None = None,
        scorer: AggregateScorer | None = None,
        *,
        fallback_penalty: float = FALLBACK_CONFIDENCE_PENALTY,
    ) -> None:
        self._stats = stats
        self._fantasy_site = fantasy_site
        self._scorer = scorer or AggregateScorer()
        self._fallback_penalty = fallback_penalty

    def _builder(self, game: GameContext, entry: LineupEntry, is_home: bool) -> _PitcherBuilder:
        team = game.team(is_home)
        return _PitcherBuilder(
            identity=PlayerIdentity(
                player_id=entry.player_id,
                name=entry.name,
                team_id=team.team_id,
                team_name=team.name,
                throws=Handedness.UNKNOWN,
                position="P",
            ),
            game_pk=game.game_pk,
            opponent=game.opponent(is_home).name,
            is_home=is_home,
        )

    def default_analysis(self, game: GameContext, entry: LineupEntry, is_home: bool) -> PitcherAnalysis:
        return self._defaulted(self._builder(game, entry, is_home))

    def _defaulted(self, builder: _PitcherBuilder) -> PitcherAnalysis:
        builder.categories.clear()
        builder.add(
            strikeouts.default(),
            innings_pitched.default(),
            pitcher_win.default(),
            rare_events.default(),
            *pitcher_control.default(),
        )
        scored = self._scorer.score(builder.categories.values(), PlayerType.PITCHER)
        projection = Projection(
            total=scored.total,
            floor=scored.floor,
            upside=scored.upside,
            confidence=DEFAULT_ANALYSIS_CONFIDENCE,
            breakdown=scored.breakdown,
        )
        return builder.freeze(projection, is_default=True)

    async def analyze(
        self,
        game: GameContext,
        entry: LineupEntry,
        *,
        is_home: bool,
        season: int | None = None,
    ) -> PitcherAnalysis:
        """Project one starting pitcher; never raises."""
        try:
            return await self._analyze(game, entry, is_home, season or game.season)
        except Exception:
            logger.exception("Pitcher %d projection failed, using defaults", entry.player_id)
            return self.default_analysis(game, entry, is_home)

    async def _analyze(self, game: GameContext, entry: LineupEntry, is_home: bool, season: int) -> PitcherAnalysis:
        builder = self._builder(game, entry, is_home)
        player_id = entry.player_id

        environment = unwrap_or(
            await capture_async(self._stats.game_environment(game.game_pk), label=f"environment {game.game_pk}"),
            None,
        )
        if environment is None:
            logger.warning("No environment for game %d, defaulting pitcher %d", game.game_pk, player_id)
            return self._defaulted(builder)

        team = game.team(is_home)
        opponent = game.opponent(is_home)
        async with asyncio.TaskGroup() as tg:
            identity_task = tg.create_task(capture_async(self._stats.player(player_id), label=f"player {player_id}"))
            current_task = tg.create_task(
                capture_async(self._stats.pitcher_stats(player_id, season), label=f"pitcher_stats {player_id}")
            )
            prior_task = tg.create_task(
                capture_async(
                    self._stats.pitcher_stats(player_id, season - 1), label=f"pitcher_stats {player_id} prior"
                )
            )
            ballpark_task = tg.create_task(
                capture_async(self._stats.ballpark_factors(game.venue_id, season), label=f"ballpark {game.venue_id}")
            )
            team_task = tg.create_task(
                capture_async(self._stats.team_stats(team.team_id, season), label=f"team_stats {team.team_id}")
            )
            opponent_task = tg.create_task(
                capture_async(self._stats.team_stats(opponent.team_id, season), label=f"team_stats {opponent.team_id}")
            )

        identity = unwrap_or(identity_task.result(), None)
        if identity is not None:
            builder.identity = identity
        mapper = self._fantasy_site
        if mapper is not None:
            name, team_id = builder.identity.name, builder.identity.team_id
            builder.fantasy_site = unwrap_or(capture(lambda: mapper.lookup(player_id, name, team_id)), None)

        builder.stats = select_season_stats(
            unwrap_or(current_task.result(), None),
            unwrap_or(prior_task.result(), None),
            penalty=self._fallback_penalty,
        )
        match builder.stats:
            case Observed(stats):
                builder.stats_season = stats.season
            case Estimated(stats, _):
                logger.info("Pitcher %d has no %d games, falling back to %d", player_id, season, stats.season)
                builder.stats_season = stats.season
            case _:
                logger.warning("No stats for pitcher %d in %d or %d, using defaults", player_id, season, season - 1)
                return self._defaulted(builder)
        builder.quality_rating = pitcher_quality_rating(builder.stats)
        builder.hr_vulnerability = home_runs.pitcher_vulnerability(stats_or_none(builder.stats))

        inputs = PitcherInputs(
            identity=builder.identity,
            stats=builder.stats,
            environment=environment,
            ballpark=unwrap_or(ballpark_task.result(), None) or NEUTRAL_BALLPARK,
            team_stats=unwrap_or(team_task.result(), None),
            opponent_stats=unwrap_or(opponent_task.result(), None),
            is_home=is_home,
        )

        label = f"pitcher {player_id}"
        win = recover(lambda: pitcher_win.calculate(inputs), pitcher_win.default, label=f"{label} win")
        builder.add(win)
        win_probability = None if win.is_default else win.expected_value
        builder.add(
            recover(
                lambda: innings_pitched.calculate(inputs, win_probability),
                innings_pitched.default,
                label=f"{label} innings_pitched",
            )
        )
        builder.add(recover(lambda: strikeouts.calculate(inputs), strikeouts.default, label=f"{label} strikeouts"))
        builder.add(recover(lambda: rare_events.calculate(inputs), rare_events.default, label=f"{label} rare_events"))
        builder.add(
            *recover(lambda: pitcher_control.calculate(inputs), pitcher_control.default, label=f"{label} control")
        )

        projection = self._scorer.score(builder.categories.values(), PlayerType.PITCHER)
        logger.debug("Pitcher %d projected %.2f points", player_id, projection.total)
        return builder.freeze(projection)
