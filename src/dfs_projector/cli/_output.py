import json
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from dfs_projector.domain.analysis import BatterAnalysis, PitcherAnalysis, PlayerAnalysis
from dfs_projector.pipeline.orchestrator import SlateProjection
from dfs_projector.pipeline.ranking import rank_by_value, value_score
from dfs_projector.teams import abbreviation_for

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def _salary(analysis: PlayerAnalysis) -> str:
    link = analysis.fantasy_site
    if link is None or link.salary is None:
        return "—"
    return f"${link.salary:,}"


def _team(analysis: PlayerAnalysis) -> str:
    return abbreviation_for(analysis.identity.team_id) or analysis.identity.team_name


def _value_columns(analyses: Sequence[PlayerAnalysis]) -> dict[int, tuple[str, str]]:
    return {
        r.analysis.identity.player_id: (f"{r.value:.2f}", r.tier.value) for r in rank_by_value(analyses)
    }


def _flag(analysis: PlayerAnalysis) -> str:
    return "[yellow]default[/yellow]" if analysis.is_default else ""


def print_batter_table(batters: Sequence[BatterAnalysis], top: int | None = None) -> None:
    rows = batters[:top] if top else batters
    values = _value_columns(batters)
    table = Table(title="Batters", show_edge=False, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("Player")
    table.add_column("Team")
    table.add_column("Opp")
    table.add_column("Slot", justify="right")
    table.add_column("Pts", justify="right")
    table.add_column("Floor", justify="right")
    table.add_column("Upside", justify="right")
    table.add_column("HR%", justify="right")
    table.add_column("Conf", justify="right")
    table.add_column("Salary", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Tier")
    table.add_column("")
    for rank, a in enumerate(rows, start=1):
        p = a.projection
        table.add_row(
            str(rank),
            a.identity.name,
            _team(a),
            a.opponent,
            str(a.lineup_slot) if a.lineup_slot else "—",
            f"{p.total:.2f}",
            f"{p.floor:.2f}",
            f"{p.upside:.2f}",
            f"{a.home_run_probability * 100:.1f}",
            f"{p.confidence:.0f}",
            _salary(a),
            *values[a.identity.player_id],
            _flag(a),
        )
    console.print(table)


def print_pitcher_table(pitchers: Sequence[PitcherAnalysis], top: int | None = None) -> None:
    rows = pitchers[:top] if top else pitchers
    values = _value_columns(pitchers)
    table = Table(title="Pitchers", show_edge=False, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("Player")
    table.add_column("Team")
    table.add_column("Opp")
    table.add_column("Pts", justify="right")
    table.add_column("K", justify="right")
    table.add_column("IP", justify="right")
    table.add_column("Win%", justify="right")
    table.add_column("Quality", justify="right")
    table.add_column("HR Vuln", justify="right")
    table.add_column("Conf", justify="right")
    table.add_column("Salary", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Tier")
    table.add_column("")
    for rank, a in enumerate(rows, start=1):
        table.add_row(
            str(rank),
            a.identity.name,
            _team(a),
            a.opponent,
            f"{a.expected_points:.2f}",
            f"{a.expected_strikeouts:.1f}",
            f"{a.expected_innings:.1f}",
            f"{a.win_probability * 100:.0f}",
            f"{a.quality_rating:.1f}",
            f"{a.hr_vulnerability:.1f}",
            f"{a.confidence:.0f}",
            _salary(a),
            *values[a.identity.player_id],
            _flag(a),
        )
    console.print(table)


def print_slate(
    slate: SlateProjection,
    batters: Sequence[BatterAnalysis],
    pitchers: Sequence[PitcherAnalysis],
    top: int | None = None,
) -> None:
    console.print(
        f"[bold]Slate {slate.date.isoformat()}[/bold]: {len(slate.games)} games, "
        f"{slate.player_count} players ({slate.defaulted_count} defaulted)"
    )
    print_pitcher_table(pitchers, top)
    console.print()
    print_batter_table(batters, top)


def print_analysis_detail(analysis: PlayerAnalysis) -> None:
    header = Table(show_header=False, box=None, pad_edge=False)
    header.add_column("Key", style="bold")
    header.add_column("Value")
    header.add_row("Player", f"{analysis.identity.name} ({analysis.identity.player_id})")
    header.add_row("Team", analysis.identity.team_name or "—")
    header.add_row("Opponent", analysis.opponent)
    header.add_row("Home", "yes" if analysis.is_home else "no")
    header.add_row("Projected", f"{analysis.projection.total:.2f}")
    header.add_row("Range", f"{analysis.projection.floor:.2f} – {analysis.projection.upside:.2f}")
    header.add_row("Confidence", f"{analysis.projection.confidence:.0f}")
    header.add_row("Salary", _salary(analysis))
    if analysis.fantasy_site is not None:
        header.add_row("Value", f"{value_score(analysis):.2f} pts/$1K")
    if isinstance(analysis, PitcherAnalysis):
        header.add_row("Quality", f"{analysis.quality_rating:.1f}")
        header.add_row("HR vulnerability", f"{analysis.hr_vulnerability:.1f}")
        if analysis.stats_season is not None:
            header.add_row("Stats season", str(analysis.stats_season))
    if analysis.is_default:
        header.add_row("Note", "[yellow]projected from defaults[/yellow]")
    console.print(header)
    console.print()

    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Category")
    table.add_column("Expected", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Conf", justify="right")
    table.add_column("Factors")
    for category in sorted(analysis.categories, key=lambda c: c.value):
        result = analysis.categories[category]
        factors = ", ".join(f"{k}={v:.3f}" for k, v in sorted(result.factors.items()))
        table.add_row(
            category.value,
            f"{result.expected_value:.3f}",
            f"{result.points:+.2f}",
            f"{result.confidence:.0f}",
            "default" if result.is_default else factors,
        )
    console.print(table)


def analysis_to_dict(analysis: PlayerAnalysis) -> dict[str, Any]:
    data: dict[str, Any] = {
        "player_id": analysis.identity.player_id,
        "name": analysis.identity.name,
        "team": analysis.identity.team_name,
        "team_abbreviation": abbreviation_for(analysis.identity.team_id),
        "opponent": analysis.opponent,
        "game_pk": analysis.game_pk,
        "is_home": analysis.is_home,
        "expected_points": round(analysis.projection.total, 3),
        "floor": round(analysis.projection.floor, 3),
        "upside": round(analysis.projection.upside, 3),
        "confidence": round(analysis.projection.confidence, 1),
        "salary": analysis.fantasy_site.salary if analysis.fantasy_site is not None else None,
        "value": round(value_score(analysis), 3),
        "is_default": analysis.is_default,
        "categories": {
            c.value: {
                "expected": round(r.expected_value, 4),
                "points": round(r.points, 3),
                "confidence": round(r.confidence, 1),
            }
            for c, r in sorted(analysis.categories.items(), key=lambda item: item[0].value)
        },
    }
    if isinstance(analysis, BatterAnalysis):
        data["lineup_slot"] = analysis.lineup_slot
    else:
        data["quality_rating"] = round(analysis.quality_rating, 2)
        data["hr_vulnerability"] = round(analysis.hr_vulnerability, 1)
        data["stats_season"] = analysis.stats_season
    return data


def print_json(payload: object) -> None:
    console.print_json(json.dumps(payload))


def slate_to_dict(
    slate: SlateProjection,
    batters: Sequence[BatterAnalysis],
    pitchers: Sequence[PitcherAnalysis],
    top: int | None = None,
) -> dict[str, Any]:
    batters = batters[:top] if top else batters
    pitchers = pitchers[:top] if top else pitchers
    return {
        "date": slate.date.isoformat(),
        "games": [
            {"game_pk": g.game_pk, "matchup": g.matchup_label, "venue": g.venue_name} for g in slate.games
        ],
        "pitchers": [analysis_to_dict(a) for a in pitchers],
        "batters": [analysis_to_dict(a) for a in batters],
    }


def print_cache_stats(counts: dict[str, int], purged: int) -> None:
    if not counts:
        console.print(f"Cache is empty ({purged} expired entries purged)")
        return
    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Namespace")
    table.add_column("Entries", justify="right")
    for namespace, count in counts.items():
        table.add_row(namespace, str(count))
    console.print(table)
    console.print(f"{sum(counts.values())} live entries, {purged} expired entries purged")
