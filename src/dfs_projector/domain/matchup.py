from dataclasses import dataclass
from enum import StrEnum


class SampleSize(StrEnum):
    NONE = "none"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class MatchupAdvantage(StrEnum):
    BATTER = "batter"
    PITCHER = "pitcher"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class MatchupRecord:
    """Career head-to-head line for one batter against one pitcher."""

    batter_id: int
    pitcher_id: int
    at_bats: int = 0
    hits: int = 0
    home_runs: int = 0
    strikeouts: int = 0
    walks: int = 0
    avg: float | None = None
    ops: float | None = None

    @property
    def sample_size(self) -> SampleSize:
        if self.at_bats >= 20:
            return SampleSize.LARGE
        if self.at_bats >= 10:
            return SampleSize.MEDIUM
        if self.at_bats > 0:
            return SampleSize.SMALL
        return SampleSize.NONE

    @property
    def batting_average(self) -> float | None:
        if self.avg is not None:
            return self.avg
        if self.at_bats <= 0:
            return None
        return self.hits / self.at_bats

    @property
    def walk_rate(self) -> float | None:
        plate_appearances = self.at_bats + self.walks
        if plate_appearances <= 0:
            return None
        return self.walks / plate_appearances

    @property
    def advantage(self) -> MatchupAdvantage:
        avg = self.batting_average
        if self.sample_size is SampleSize.NONE or avg is None:
            return MatchupAdvantage.NEUTRAL
        if avg > 0.300:
            return MatchupAdvantage.BATTER
        if avg < 0.200:
            return MatchupAdvantage.PITCHER
        return MatchupAdvantage.NEUTRAL


def no_history(batter_id: int, pitcher_id: int) -> MatchupRecord:
    return MatchupRecord(batter_id=batter_id, pitcher_id=pitcher_id)
