"""Season statistics snapshots and the tagged ``PlayerStats`` variants.

Counting stats default to zero; derived rates return ``None`` when their
denominator is zero so callers can tell "0 HR in 400 AB" (a real 0.0 rate)
apart from "nothing to compute from".
"""

from __future__ import annotations

from dataclasses import dataclass


def parse_innings(value: str | float | int | None) -> float:
    """Convert MLB innings notation (``"123.1"`` = 123 1/3) into true innings."""
    if value is None or value == "":
        return 0.0
    text = str(value)
    whole, _, outs = text.partition(".")
    innings = float(whole or 0)
    if outs:
        innings += int(outs[0]) / 3.0
    return innings


def _ratio(numerator: float, denominator: float) -> float | None:
    if denominator <= 0:
        return None
    return numerator / denominator


@dataclass(frozen=True)
class BatterSeasonStats:
    """One batter season. Statcast rates are fractions of batted-ball events, exit velocity is mph."""

    season: int
    games: int = 0
    plate_appearances: int = 0
    at_bats: int = 0
    runs: int = 0
    hits: int = 0
    doubles: int = 0
    triples: int = 0
    home_runs: int = 0
    rbi: int = 0
    walks: int = 0
    strikeouts: int = 0
    hit_by_pitch: int = 0
    stolen_bases: int = 0
    caught_stealing: int = 0
    sac_flies: int = 0
    avg: float | None = None
    obp: float | None = None
    slg: float | None = None
    barrel_rate: float | None = None
    hard_hit_rate: float | None = None
    exit_velocity: float | None = None

    @property
    def singles(self) -> int:
        return max(0, self.hits - self.doubles - self.triples - self.home_runs)

    @property
    def batting_average(self) -> float | None:
        if self.avg is not None:
            return self.avg
        return _ratio(self.hits, self.at_bats)

    @property
    def slugging(self) -> float | None:
        if self.slg is not None:
            return self.slg
        total_bases = self.singles + 2 * self.doubles + 3 * self.triples + 4 * self.home_runs
        return _ratio(total_bases, self.at_bats)

    @property
    def on_base(self) -> float | None:
        if self.obp is not None:
            return self.obp
        return _ratio(
            self.hits + self.walks + self.hit_by_pitch,
            self.at_bats + self.walks + self.hit_by_pitch + self.sac_flies,
        )

    @property
    def ops(self) -> float | None:
        obp, slg = self.on_base, self.slugging
        if obp is None or slg is None:
            return None
        return obp + slg

    @property
    def iso(self) -> float | None:
        avg, slg = self.batting_average, self.slugging
        if avg is None or slg is None:
            return None
        return slg - avg

    @property
    def babip(self) -> float | None:
        return _ratio(
            self.hits - self.home_runs,
            self.at_bats - self.strikeouts - self.home_runs + self.sac_flies,
        )

    @property
    def pa(self) -> int:
        if self.plate_appearances:
            return self.plate_appearances
        return self.at_bats + self.walks + self.hit_by_pitch + self.sac_flies

    @property
    def k_rate(self) -> float | None:
        return _ratio(self.strikeouts, self.pa)

    @property
    def bb_rate(self) -> float | None:
        return _ratio(self.walks, self.pa)

    @property
    def hbp_rate(self) -> float | None:
        return _ratio(self.hit_by_pitch, self.pa)

    @property
    def hr_rate(self) -> float | None:
        return _ratio(self.home_runs, self.at_bats)

    @property
    def sb_attempts(self) -> int:
        return self.stolen_bases + self.caught_stealing

    @property
    def sb_attempt_rate(self) -> float | None:
        return _ratio(self.sb_attempts, self.games)

    @property
    def sb_success_rate(self) -> float | None:
        return _ratio(self.stolen_bases, self.sb_attempts)

    @property
    def runs_per_game(self) -> float | None:
        return _ratio(self.runs, self.games)

    @property
    def rbi_per_game(self) -> float | None:
        return _ratio(self.rbi, self.games)

    def hit_type_share(self) -> dict[str, float] | None:
        """Share of hits by type, or ``None`` for a batter without a hit."""
        if self.hits <= 0:
            return None
        return {
            "singles": self.singles / self.hits,
            "doubles": self.doubles / self.hits,
            "triples": self.triples / self.hits,
            "home_runs": self.home_runs / self.hits,
        }


@dataclass(frozen=True)
class PitcherSeasonStats:
    """One pitcher season. ``whiff_rate`` is per swing and ``hard_hit_rate`` per batted ball, both fractions."""

    season: int
    games: int = 0
    games_started: int = 0
    innings_pitched: float = 0.0
    wins: int = 0
    losses: int = 0
    era: float | None = None
    whip: float | None = None
    strikeouts: int = 0
    walks: int = 0
    hits_allowed: int = 0
    home_runs_allowed: int = 0
    hit_batsmen: int = 0
    earned_runs: int = 0
    batters_faced: int = 0
    complete_games: int = 0
    shutouts: int = 0
    whiff_rate: float | None = None
    hard_hit_rate: float | None = None

    def _per_9(self, count: float) -> float | None:
        return _ratio(count * 9.0, self.innings_pitched)

    @property
    def earned_run_average(self) -> float | None:
        if self.era is not None:
            return self.era
        return self._per_9(self.earned_runs)

    @property
    def walks_hits_per_inning(self) -> float | None:
        if self.whip is not None:
            return self.whip
        return _ratio(self.walks + self.hits_allowed, self.innings_pitched)

    @property
    def k_per_9(self) -> float | None:
        return self._per_9(self.strikeouts)

    @property
    def bb_per_9(self) -> float | None:
        return self._per_9(self.walks)

    @property
    def h_per_9(self) -> float | None:
        if self.hits_allowed:
            return self._per_9(self.hits_allowed)
        whip = self.whip
        if whip is None or self.innings_pitched <= 0:
            return None
        walks = self.walks if self.walks else self.innings_pitched * 3.5 / 9.0
        return self._per_9(max(0.0, whip * self.innings_pitched - walks))

    @property
    def hr_per_9(self) -> float | None:
        return self._per_9(self.home_runs_allowed)

    @property
    def hbp_per_9(self) -> float | None:
        return self._per_9(self.hit_batsmen)

    @property
    def k_per_inning(self) -> float | None:
        return _ratio(self.strikeouts, self.innings_pitched)

    @property
    def innings_per_start(self) -> float | None:
        return _ratio(self.innings_pitched, self.games_started or self.games)

    @property
    def win_pct(self) -> float | None:
        return _ratio(self.wins, self.wins + self.losses)

    @property
    def k_to_bb(self) -> float | None:
        return _ratio(self.strikeouts, self.walks)


@dataclass(frozen=True)
class TeamSeasonStats:
    team_id: int
    season: int
    games: int = 0
    wins: int = 0
    losses: int = 0
    runs: int = 0
    strikeouts: int = 0
    walks: int = 0
    plate_appearances: int = 0
    ops: float | None = None
    era: float | None = None
    whip: float | None = None

    @property
    def runs_per_game(self) -> float | None:
        return _ratio(self.runs, self.games)

    @property
    def strikeouts_per_game(self) -> float | None:
        return _ratio(self.strikeouts, self.games)

    @property
    def k_rate(self) -> float | None:
        return _ratio(self.strikeouts, self.plate_appearances)

    @property
    def bb_rate(self) -> float | None:
        return _ratio(self.walks, self.plate_appearances)

    @property
    def win_pct(self) -> float | None:
        return _ratio(self.wins, self.wins + self.losses)


@dataclass(frozen=True)
class BatterStatcast:
    barrel_rate: float | None = None
    hard_hit_rate: float | None = None
    exit_velocity: float | None = None


@dataclass(frozen=True)
class PitcherStatcast:
    whiff_rate: float | None = None
    hard_hit_rate: float | None = None


@dataclass(frozen=True)
class CatcherDefense:
    catcher_id: int
    caught_stealing_pct: float = 0.25
    attempts_per_9: float = 0.8
    defensive_rating: float = 50.0


@dataclass(frozen=True, slots=True)
class Observed[T]:
    stats: T


@dataclass(frozen=True, slots=True)
class Estimated[T]:
    """Stats standing in for the ones asked for, e.g. a prior season."""

    stats: T
    confidence_penalty: float


@dataclass(frozen=True, slots=True)
class Missing:
    reason: str = "no data"


type PlayerStats[T] = Observed[T] | Estimated[T] | Missing


def stats_or_none[T](player_stats: PlayerStats[T]) -> T | None:
    match player_stats:
        case Observed(stats) | Estimated(stats, _):
            return stats
        case _:
            return None


def confidence_penalty(player_stats: PlayerStats[object]) -> float:
    match player_stats:
        case Estimated(_, penalty):
            return penalty
        case _:
            return 0.0
