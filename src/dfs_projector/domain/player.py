from dataclasses import dataclass
from enum import StrEnum


class Handedness(StrEnum):
    LEFT = "L"
    RIGHT = "R"
    SWITCH = "S"
    UNKNOWN = "U"

    @classmethod
    def parse(cls, code: str | None) -> "Handedness":
        if not code:
            return cls.UNKNOWN
        try:
            return cls(code.strip().upper()[:1])
        except ValueError:
            return cls.UNKNOWN


class PlayerType(StrEnum):
    BATTER = "batter"
    PITCHER = "pitcher"


@dataclass(frozen=True)
class PlayerIdentity:
    player_id: int
    name: str
    team_id: int | None = None
    team_name: str = ""
    bats: Handedness = Handedness.UNKNOWN
    throws: Handedness = Handedness.UNKNOWN
    position: str = ""

    @property
    def is_pitcher(self) -> bool:
        return self.position in ("P", "SP", "RP")


def platoon_advantage(batter: Handedness, pitcher: Handedness) -> bool | None:
    """Return whether the batter holds the platoon edge.

    ``None`` means the edge cannot be determined because one of the hands
    is unknown. Switch hitters always take the favourable side.
    """
    if batter is Handedness.UNKNOWN or pitcher in (Handedness.UNKNOWN, Handedness.SWITCH):
        return None
    if batter is Handedness.SWITCH:
        return True
    return batter is not pitcher
