from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dfs_projector.domain.analysis import FantasySiteLink
from dfs_projector.providers.names import name_similarity, normalize_name
from dfs_projector.teams import by_abbreviation

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# Fuzzy matches below this similarity are treated as different players.
MATCH_THRESHOLD = 0.85


@dataclass(frozen=True)
class SalaryRow:
    site_id: str
    name: str
    positions: tuple[str, ...]
    salary: int | None
    game_info: str
    avg_points_per_game: float
    team_abbreviation: str

    def to_link(self) -> FantasySiteLink:
        return FantasySiteLink(
            site_id=self.site_id,
            salary=self.salary,
            positions=self.positions,
            avg_points_per_game=self.avg_points_per_game,
        )


def _salary(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value.replace("$", "").replace(",", "").strip())
    except ValueError:
        return None


def _points(value: str | None) -> float:
    if not value:
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0


def _same_team(row: SalaryRow, team_id: int | None) -> bool:
    """A row is compatible unless both sides name a club and the clubs differ."""
    if team_id is None:
        return True
    team = by_abbreviation(row.team_abbreviation) if row.team_abbreviation else None
    return team is None or team.team_id == team_id


def read_salary_file(path: Path) -> list[SalaryRow]:
    """Parse a DraftKings salary export (``ID,Name,Position,Salary,...``)."""
    rows: list[SalaryRow] = []
    with path.open(newline="", encoding="utf-8-sig") as f:
        for row in csv.DictReader(f):
            site_id = (row.get("ID") or "").strip()
            name = (row.get("Name") or "").strip()
            if not site_id or not name:
                continue
            rows.append(
                SalaryRow(
                    site_id=site_id,
                    name=name,
                    positions=tuple(p for p in (row.get("Position") or "").split("/") if p),
                    salary=_salary(row.get("Salary")),
                    game_info=(row.get("Game Info") or "").strip(),
                    avg_points_per_game=_points(row.get("AvgPointsPerGame")),
                    team_abbreviation=(row.get("TeamAbbrev") or "").strip(),
                )
            )
    logger.info("Loaded %d salary rows from %s", len(rows), path)
    return rows


class SalaryFileMapper:
    """Links MLB players to a fantasy-site salary file by normalized name.

    Exact normalized-name matches are preferred; otherwise the closest name
    at or above :data:`MATCH_THRESHOLD` is used. When the caller knows the
    player's club, rows from a different club never match. Matches are
    remembered per MLB player id.
    """

    def __init__(self, rows: list[SalaryRow]) -> None:
        self._rows = rows
        self._by_name: dict[str, list[SalaryRow]] = {}
        for row in rows:
            self._by_name.setdefault(normalize_name(row.name), []).append(row)
        self._matched: dict[int, SalaryRow | None] = {}

    @classmethod
    def from_file(cls, path: Path) -> SalaryFileMapper:
        return cls(read_salary_file(path))

    def __len__(self) -> int:
        return len(self._rows)

    def _find(self, name: str, team_id: int | None) -> SalaryRow | None:
        for row in self._by_name.get(normalize_name(name), []):
            if _same_team(row, team_id):
                return row
        best: SalaryRow | None = None
        best_score = MATCH_THRESHOLD
        for row in self._rows:
            if not _same_team(row, team_id):
                continue
            score = name_similarity(name, row.name)
            if score >= best_score:
                best, best_score = row, score
        if best is not None:
            logger.debug("Fuzzy matched %r to %r (%.2f)", name, best.name, best_score)
        return best

    def lookup(self, player_id: int, name: str, team_id: int | None = None) -> FantasySiteLink | None:
        if player_id not in self._matched:
            self._matched[player_id] = self._find(name, team_id)
        row = self._matched[player_id]
        return row.to_link() if row is not None else None
