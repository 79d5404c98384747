"""The thirty MLB clubs with their Stats API ids, abbreviations and aliases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Team:
    team_id: int
    abbreviation: str
    name: str
    aliases: tuple[str, ...] = ()

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        if not needle:
            return False
        if needle in (self.abbreviation.lower(), self.name.lower()):
            return True
        if any(needle == alias.lower() for alias in self.aliases):
            return True
        return needle in self.name.lower()


TEAMS: tuple[Team, ...] = (
    Team(108, "LAA", "Los Angeles Angels", ("ANA", "Angels")),
    Team(109, "ARI", "Arizona Diamondbacks", ("AZ", "Diamondbacks", "D-backs")),
    Team(110, "BAL", "Baltimore Orioles", ("Orioles",)),
    Team(111, "BOS", "Boston Red Sox", ("Red Sox",)),
    Team(112, "CHC", "Chicago Cubs", ("Cubs",)),
    Team(113, "CIN", "Cincinnati Reds", ("Reds",)),
    Team(114, "CLE", "Cleveland Guardians", ("Guardians",)),
    Team(115, "COL", "Colorado Rockies", ("Rockies",)),
    Team(116, "DET", "Detroit Tigers", ("Tigers",)),
    Team(117, "HOU", "Houston Astros", ("Astros",)),
    Team(118, "KC", "Kansas City Royals", ("KCR", "Royals")),
    Team(119, "LAD", "Los Angeles Dodgers", ("Dodgers",)),
    Team(120, "WSH", "Washington Nationals", ("WAS", "WSN", "Nationals")),
    Team(121, "NYM", "New York Mets", ("Mets",)),
    Team(133, "OAK", "Athletics", ("ATH", "Oakland Athletics", "A's")),
    Team(134, "PIT", "Pittsburgh Pirates", ("Pirates",)),
    Team(135, "SD", "San Diego Padres", ("SDP", "Padres")),
    Team(136, "SEA", "Seattle Mariners", ("Mariners",)),
    Team(137, "SF", "San Francisco Giants", ("SFG", "Giants")),
    Team(138, "STL", "St. Louis Cardinals", ("Cardinals",)),
    Team(139, "TB", "Tampa Bay Rays", ("TBR", "Rays")),
    Team(140, "TEX", "Texas Rangers", ("Rangers",)),
    Team(141, "TOR", "Toronto Blue Jays", ("Blue Jays",)),
    Team(142, "MIN", "Minnesota Twins", ("Twins",)),
    Team(143, "PHI", "Philadelphia Phillies", ("Phillies",)),
    Team(144, "ATL", "Atlanta Braves", ("Braves",)),
    Team(145, "CWS", "Chicago White Sox", ("CHW", "White Sox")),
    Team(146, "MIA", "Miami Marlins", ("Marlins",)),
    Team(147, "NYY", "New York Yankees", ("Yankees",)),
    Team(158, "MIL", "Milwaukee Brewers", ("Brewers",)),
)

_BY_ID: dict[int, Team] = {team.team_id: team for team in TEAMS}
_BY_ABBREVIATION: dict[str, Team] = {}
for _team in TEAMS:
    _BY_ABBREVIATION[_team.abbreviation] = _team
    for _alias in _team.aliases:
        if _alias.isupper() and len(_alias) <= 3:
            _BY_ABBREVIATION[_alias] = _team


def by_id(team_id: int | None) -> Team | None:
    if team_id is None:
        return None
    return _BY_ID.get(team_id)


def by_abbreviation(abbreviation: str) -> Team | None:
    return _BY_ABBREVIATION.get(abbreviation.strip().upper())


def lookup(query: str | int) -> Team | None:
    """Find a team by id, abbreviation, full name, alias or partial name.

    Exact matches win over partial ones; an ambiguous partial name
    ("New York", "Chicago") returns ``None``.
    """
    if isinstance(query, int):
        return by_id(query)
    text = query.strip()
    if text.isdigit():
        return by_id(int(text))
    exact = by_abbreviation(text)
    if exact is not None:
        return exact
    candidates = [team for team in TEAMS if team.matches(text)]
    if len(candidates) == 1:
        return candidates[0]
    lowered = text.lower()
    for team in candidates:
        if lowered == team.name.lower() or any(lowered == a.lower() for a in team.aliases):
            return team
    return None


def abbreviation_for(team_id: int | None) -> str:
    team = by_id(team_id)
    return team.abbreviation if team is not None else ""
