from dataclasses import dataclass

from dfs_projector.domain.player import Handedness

NEUTRAL_TEMPERATURE = 70.0


@dataclass(frozen=True)
class EnvironmentContext:
    """Game-time conditions, built once per game and shared read-only."""

    game_pk: int
    venue_id: int = 0
    venue_name: str = ""
    temperature: float = NEUTRAL_TEMPERATURE
    wind_speed: float = 0.0
    wind_direction: str = "None"
    is_outdoor: bool = True
    has_roof: bool = False
    precipitation: bool = False

    @property
    def wind_blowing_out(self) -> bool:
        direction = self.wind_direction.lower()
        return direction.startswith("out") or "to center" in direction or "to cf" in direction

    @property
    def wind_blowing_in(self) -> bool:
        return self.wind_direction.lower().startswith("in")

    @property
    def is_known(self) -> bool:
        return self.venue_id != 0


def unknown_environment(game_pk: int = 0) -> EnvironmentContext:
    return EnvironmentContext(game_pk=game_pk)


UNKNOWN_ENVIRONMENT = unknown_environment()


@dataclass(frozen=True)
class BallparkFactor:
    """Per-venue multipliers where 1.0 is neutral and above 1.0 favours hitters."""

    venue_id: int
    overall: float = 1.0
    singles: float = 1.0
    doubles: float = 1.0
    triples: float = 1.0
    home_runs: float = 1.0
    runs: float = 1.0
    strikeouts: float = 1.0
    vs_left: float = 1.0
    vs_right: float = 1.0

    def handedness_factor(self, bats: Handedness) -> float:
        if bats is Handedness.LEFT:
            return self.vs_left
        if bats is Handedness.RIGHT:
            return self.vs_right
        if bats is Handedness.SWITCH:
            return (self.vs_left + self.vs_right) / 2.0
        return 1.0


NEUTRAL_BALLPARK = BallparkFactor(venue_id=0)
