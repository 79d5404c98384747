from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dfs_projector.domain.scoring import Category

if TYPE_CHECKING:
    from dfs_projector.domain.category import CategoryResult
    from dfs_projector.domain.player import PlayerIdentity
    from dfs_projector.domain.stats import BatterSeasonStats, PitcherSeasonStats, PlayerStats


@dataclass(frozen=True)
class Projection:
    total: float
    floor: float
    upside: float
    confidence: float
    breakdown: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class FantasySiteLink:
    site_id: str
    salary: int | None = None
    positions: tuple[str, ...] = ()
    avg_points_per_game: float = 0.0


@dataclass(frozen=True)
class QualityMetrics:
    batted_ball_quality: float
    power: float
    contact_rate: float
    plate_approach: float
    speed: float
    consistency: float


DEFAULT_QUALITY_METRICS = QualityMetrics(
    batted_ball_quality=0.3,
    power=0.3,
    contact_rate=0.3,
    plate_approach=0.3,
    speed=0.3,
    consistency=30,
)


def _expected(categories: dict[Category, CategoryResult], category: Category) -> float:
    result = categories.get(category)
    return result.expected_value if result is not None else 0.0


@dataclass(frozen=True)
class BatterAnalysis:
    identity: PlayerIdentity
    game_pk: int
    opponent: str
    is_home: bool
    stats: PlayerStats[BatterSeasonStats]
    categories: dict[Category, CategoryResult]
    projection: Projection
    quality: QualityMetrics = DEFAULT_QUALITY_METRICS
    lineup_slot: int | None = None
    fantasy_site: FantasySiteLink | None = None
    is_default: bool = False

    @property
    def expected_points(self) -> float:
        return self.projection.total

    @property
    def confidence(self) -> float:
        return self.projection.confidence

    @property
    def expected_hits(self) -> float:
        return sum(
            _expected(self.categories, c)
            for c in (Category.SINGLES, Category.DOUBLES, Category.TRIPLES, Category.HOME_RUNS)
        )

    @property
    def home_run_probability(self) -> float:
        return _expected(self.categories, Category.HOME_RUNS)

    @property
    def stolen_base_expectation(self) -> float:
        return _expected(self.categories, Category.STOLEN_BASES)


@dataclass(frozen=True)
class PitcherAnalysis:
    identity: PlayerIdentity
    game_pk: int
    opponent: str
    is_home: bool
    stats: PlayerStats[PitcherSeasonStats]
    categories: dict[Category, CategoryResult]
    projection: Projection
    quality_rating: float = 5.0
    hr_vulnerability: float = 5.0
    stats_season: int | None = None
    fantasy_site: FantasySiteLink | None = None
    is_default: bool = False

    @property
    def expected_points(self) -> float:
        return self.projection.total

    @property
    def confidence(self) -> float:
        return self.projection.confidence

    @property
    def win_probability(self) -> float:
        return _expected(self.categories, Category.WIN)

    @property
    def expected_strikeouts(self) -> float:
        return _expected(self.categories, Category.STRIKEOUTS)

    @property
    def expected_innings(self) -> float:
        return _expected(self.categories, Category.INNINGS_PITCHED)


type PlayerAnalysis = BatterAnalysis | PitcherAnalysis
