"""Per-batter projection pipeline.

    Start -> FetchEnvironment -> FetchPlayerData -> calculators -> Merge -> Done

Any failure before the calculators run yields a fully defaulted analysis.
A failing calculator only defaults its own categories.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dfs_projector.calculators import hits, home_runs, plate_discipline, run_production, stolen_bases
from dfs_projector.calculators.inputs import BatterInputs
from dfs_projector.confidence import DEFAULT_ANALYSIS_CONFIDENCE
from dfs_projector.domain.analysis import DEFAULT_QUALITY_METRICS, BatterAnalysis, Projection
from dfs_projector.domain.environment import NEUTRAL_BALLPARK
from dfs_projector.domain.matchup import no_history
from dfs_projector.domain.player import Handedness, PlayerIdentity, PlayerType
from dfs_projector.domain.stats import Missing, Observed
from dfs_projector.pipeline.scorer import AggregateScorer
from dfs_projector.quality import quality_metrics
from dfs_projector.result import capture, capture_async, recover, unwrap_or

if TYPE_CHECKING:
    from dfs_projector.domain.analysis import FantasySiteLink, QualityMetrics
    from dfs_projector.domain.category import CategoryResult
    from dfs_projector.domain.game import GameContext, LineupEntry
    from dfs_projector.domain.scoring import Category
    from dfs_projector.domain.stats import BatterSeasonStats, PlayerStats
    from dfs_projector.providers.protocols import FantasySiteMapper, StatProvider

logger = logging.getLogger(__name__)


@dataclass
class _BatterBuilder:
    identity: PlayerIdentity
    game_pk: int
    opponent: str
    is_home: bool
    lineup_slot: int | None
    stats: PlayerStats[BatterSeasonStats] = field(default_factory=Missing)
    categories: dict[Category, CategoryResult] = field(default_factory=dict)
    quality: QualityMetrics = DEFAULT_QUALITY_METRICS
    fantasy_site: FantasySiteLink | None = None

    def add(self, *results: CategoryResult) -> None:
        for result in results:
            self.categories[result.category] = result

    def freeze(self, projection: Projection, *, is_default: bool = False) -> BatterAnalysis:
        return BatterAnalysis(
            identity=self.identity,
            game_pk=self.game_pk,
            opponent=self.opponent,
            is_home=self.is_home,
            stats=self.stats,
            categories=dict(self.categories),
            projection=projection,
            quality=self.quality,
            lineup_slot=self.lineup_slot,
            fantasy_site=self.fantasy_site,
            is_default=is_default,
        )


class BatterProjector:
    def __init__(
        self,
        stats: StatProvider,
        fantasy_site: FantasySiteMapper | None = None,
        scorer: AggregateScorer | None = None,
    ) -> None:
        self._stats = stats
        self._fantasy_site = fantasy_site
        self._scorer = scorer or AggregateScorer()

    def _builder(self, game: GameContext, entry: LineupEntry, is_home: bool) -> _BatterBuilder:
        team = game.team(is_home)
        return _BatterBuilder(
            identity=PlayerIdentity(
                player_id=entry.player_id,
                name=entry.name,
                team_id=team.team_id,
                team_name=team.name,
                position=entry.position,
            ),
            game_pk=game.game_pk,
            opponent=game.opponent(is_home).name,
            is_home=is_home,
            lineup_slot=entry.batting_order,
        )

    def default_analysis(self, game: GameContext, entry: LineupEntry, is_home: bool) -> BatterAnalysis:
        """Every category at its calculator default, flagged ``is_default``."""
        return self._defaulted(self._builder(game, entry, is_home))

    def _defaulted(self, builder: _BatterBuilder) -> BatterAnalysis:
        builder.categories.clear()
        builder.add(*hits.default(), home_runs.default(), stolen_bases.default())
        builder.add(*run_production.default(), *plate_discipline.default())
        scored = self._scorer.score(builder.categories.values(), PlayerType.BATTER)
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
    ) -> BatterAnalysis:
        """Project one batter; never raises."""
        try:
            return await self._analyze(game, entry, is_home, season or game.season)
        except Exception:
            logger.exception("Batter %d projection failed, using defaults", entry.player_id)
            return self.default_analysis(game, entry, is_home)

    async def _analyze(self, game: GameContext, entry: LineupEntry, is_home: bool, season: int) -> BatterAnalysis:
        builder = self._builder(game, entry, is_home)
        player_id = entry.player_id

        environment = unwrap_or(
            await capture_async(self._stats.game_environment(game.game_pk), label=f"environment {game.game_pk}"),
            None,
        )
        if environment is None:
            logger.warning("No environment for game %d, defaulting batter %d", game.game_pk, player_id)
            return self._defaulted(builder)

        pitcher = game.opposing_pitcher(is_home)
        catcher = game.opposing_catcher(is_home)
        team = game.team(is_home)
        async with asyncio.TaskGroup() as tg:
            identity_task = tg.create_task(capture_async(self._stats.player(player_id), label=f"player {player_id}"))
            stats_task = tg.create_task(
                capture_async(self._stats.batter_stats(player_id, season), label=f"batter_stats {player_id}")
            )
            history_task = tg.create_task(
                capture_async(self._stats.batter_history(player_id), label=f"batter_history {player_id}")
            )
            ballpark_task = tg.create_task(
                capture_async(self._stats.ballpark_factors(game.venue_id, season), label=f"ballpark {game.venue_id}")
            )
            team_task = tg.create_task(
                capture_async(self._stats.team_stats(team.team_id, season), label=f"team_stats {team.team_id}")
            )
            if pitcher is not None:
                matchup_task = tg.create_task(
                    capture_async(
                        self._stats.matchup(player_id, pitcher.player_id),
                        label=f"matchup {player_id} vs {pitcher.player_id}",
                    )
                )
                pitcher_stats_task = tg.create_task(
                    capture_async(
                        self._stats.pitcher_stats(pitcher.player_id, season),
                        label=f"pitcher_stats {pitcher.player_id}",
                    )
                )
                pitcher_identity_task = tg.create_task(
                    capture_async(self._stats.player(pitcher.player_id), label=f"player {pitcher.player_id}")
                )
            if catcher is not None:
                catcher_task = tg.create_task(
                    capture_async(
                        self._stats.catcher_defense(catcher.player_id, season),
                        label=f"catcher_defense {catcher.player_id}",
                    )
                )

        identity = unwrap_or(identity_task.result(), None)
        if identity is not None:
            builder.identity = identity
        mapper = self._fantasy_site
        if mapper is not None:
            name, team_id = builder.identity.name, builder.identity.team_id
            builder.fantasy_site = unwrap_or(capture(lambda: mapper.lookup(player_id, name, team_id)), None)

        season_stats = unwrap_or(stats_task.result(), None)
        if season_stats is None or season_stats.games <= 0:
            logger.warning("No %d stats for batter %d, using defaults", season, player_id)
            return self._defaulted(builder)
        builder.stats = Observed(season_stats)
        builder.quality = quality_metrics(builder.stats)

        pitcher_stats = None
        pitcher_hand = Handedness.UNKNOWN
        matchup = None
        if pitcher is not None:
            pitcher_stats = unwrap_or(pitcher_stats_task.result(), None)
            pitcher_identity = unwrap_or(pitcher_identity_task.result(), None)
            if pitcher_identity is not None:
                pitcher_hand = pitcher_identity.throws
            matchup = unwrap_or(matchup_task.result(), None) or no_history(player_id, pitcher.player_id)
        catcher_defense = unwrap_or(catcher_task.result(), None) if catcher is not None else None

        inputs = BatterInputs(
            identity=builder.identity,
            stats=builder.stats,
            history=unwrap_or(history_task.result(), ()),
            environment=environment,
            ballpark=unwrap_or(ballpark_task.result(), None) or NEUTRAL_BALLPARK,
            matchup=matchup,
            opposing_pitcher=pitcher_stats,
            opposing_pitcher_hand=pitcher_hand,
            team_stats=unwrap_or(team_task.result(), None),
            catcher=catcher_defense,
            lineup_slot=entry.batting_order,
            is_home=is_home,
        )

        label = f"batter {player_id}"
        builder.add(*recover(lambda: hits.calculate(inputs), hits.default, label=f"{label} hits"))
        builder.add(recover(lambda: home_runs.calculate(inputs), home_runs.default, label=f"{label} home_runs"))
        builder.add(
            recover(lambda: stolen_bases.calculate(inputs), stolen_bases.default, label=f"{label} stolen_bases")
        )
        builder.add(
            *recover(lambda: run_production.calculate(inputs), run_production.default, label=f"{label} run_production")
        )
        builder.add(
            *recover(
                lambda: plate_discipline.calculate(inputs), plate_discipline.default, label=f"{label} plate_discipline"
            )
        )

        projection = self._scorer.score(builder.categories.values(), PlayerType.BATTER)
        logger.debug("Batter %d projected %.2f points", player_id, projection.total)
        return builder.freeze(projection)
