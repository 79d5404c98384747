from dataclasses import dataclass


@dataclass(frozen=True)
class LineupEntry:
    player_id: int
    name: str
    batting_order: int | None = None
    position: str = ""


@dataclass(frozen=True)
class TeamRef:
    team_id: int
    name: str


@dataclass(frozen=True)
class GameContext:
    """One scheduled game with its probable starters and posted lineups."""

    game_pk: int
    game_date: str
    venue_id: int
    venue_name: str
    home_team: TeamRef
    away_team: TeamRef
    home_pitcher: LineupEntry | None = None
    away_pitcher: LineupEntry | None = None
    home_lineup: tuple[LineupEntry, ...] = ()
    away_lineup: tuple[LineupEntry, ...] = ()

    @property
    def season(self) -> int:
        return int(self.game_date[:4])

    def team(self, is_home: bool) -> TeamRef:
        return self.home_team if is_home else self.away_team

    def opponent(self, is_home: bool) -> TeamRef:
        return self.away_team if is_home else self.home_team

    def opposing_pitcher(self, is_home: bool) -> LineupEntry | None:
        return self.away_pitcher if is_home else self.home_pitcher

    def opposing_lineup(self, is_home: bool) -> tuple[LineupEntry, ...]:
        return self.away_lineup if is_home else self.home_lineup

    def opposing_catcher(self, is_home: bool) -> LineupEntry | None:
        for entry in self.opposing_lineup(is_home):
            if entry.position == "C":
                return entry
        return None

    @property
    def matchup_label(self) -> str:
        return f"{self.away_team.name} @ {self.home_team.name}"
