from __future__ import annotations

import asyncio
import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from dfs_projector.cli._logging import configure_logging
from dfs_projector.cli._output import (
    analysis_to_dict,
    console,
    print_analysis_detail,
    print_cache_stats,
    print_error,
    print_json,
    print_slate,
    slate_to_dict,
)
from dfs_projector.cli.factory import build_cache_store, build_projection_context
from dfs_projector.config import Settings, create_config, load_settings
from dfs_projector.domain.game import LineupEntry
from dfs_projector.exceptions import DfsException
from dfs_projector.pipeline.ranking import filter_pitchers, rank_by_value
from dfs_projector.teams import lookup as lookup_team

if TYPE_CHECKING:
    from dfs_projector.cli.factory import ProjectionContext
    from dfs_projector.domain.analysis import BatterAnalysis, PlayerAnalysis
    from dfs_projector.domain.game import GameContext
    from dfs_projector.pipeline.orchestrator import SlateProjection
    from dfs_projector.teams import Team

app = typer.Typer(name="dfsp", help="Daily fantasy baseball projections from live MLB data")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")] = False,
) -> None:
    """Daily fantasy baseball projections from live MLB data."""
    configure_logging(verbose=verbose, quiet=quiet)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


_DateOpt = Annotated[
    datetime.datetime | None, typer.Option("--date", formats=["%Y-%m-%d"], help="Slate date (default: today)")
]
_SeasonOpt = Annotated[int | None, typer.Option("--season", help="Season whose stats feed the projections")]
_TopOpt = Annotated[int | None, typer.Option("--top", help="Show only the top N players of each table")]
_SalariesOpt = Annotated[Path | None, typer.Option("--salaries", help="DraftKings salary CSV to link players")]
_JsonOpt = Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")]
_GameOpt = Annotated[int, typer.Option("--game", help="MLB game primary key (gamePk)")]
_PlayerArg = Annotated[int, typer.Argument(help="MLB player id")]


def _resolve_team(query: str | None) -> Team | None:
    if query is None:
        return None
    club = lookup_team(query)
    if club is None:
        print_error(f"unknown or ambiguous team '{query}'")
        raise typer.Exit(code=1)
    return club


def _load_settings(season: int | None) -> Settings:
    overrides: dict[str, object] = {}
    if season is not None:
        overrides["projection"] = {"season": season}
    try:
        return load_settings(create_config(overrides=overrides))
    except DfsException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


async def _project_slate(settings: Settings, date: datetime.date, salaries: Path | None) -> SlateProjection:
    async with build_projection_context(settings, salary_file=salaries) as ctx:
        return await ctx.orchestrator.project(date, settings.season)


@app.command()
def slate(
    date: _DateOpt = None,
    season: _SeasonOpt = None,
    top: _TopOpt = None,
    salaries: _SalariesOpt = None,
    by_value: Annotated[bool, typer.Option("--by-value", help="Sort by points per $1K of salary")] = False,
    min_win: Annotated[float, typer.Option("--min-win", help="Hide pitchers below this win probability")] = 0.0,
    min_k: Annotated[float, typer.Option("--min-k", help="Hide pitchers below this many strikeouts")] = 0.0,
    team: Annotated[str | None, typer.Option("--team", help="Only show one club (id, abbreviation or name)")] = None,
    json_output: _JsonOpt = False,
) -> None:
    """Project every batter and starting pitcher on a date's slate."""
    settings = _load_settings(season)
    club = _resolve_team(team)
    slate_date = date.date() if date is not None else datetime.date.today()
    try:
        projection = asyncio.run(_project_slate(settings, slate_date, salaries))
    except DfsException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    batters: list[BatterAnalysis] = list(projection.batters)
    pitchers = filter_pitchers(projection.pitchers, min_win_probability=min_win, min_strikeouts=min_k)
    if club is not None:
        batters = [a for a in batters if a.identity.team_id == club.team_id]
        pitchers = [a for a in pitchers if a.identity.team_id == club.team_id]
    if by_value:
        batters = [r.analysis for r in rank_by_value(batters)]
        pitchers = [r.analysis for r in rank_by_value(pitchers)]
    if json_output:
        print_json(slate_to_dict(projection, batters, pitchers, top))
    else:
        print_slate(projection, batters, pitchers, top)


def _find_batter(game: GameContext, player_id: int) -> tuple[LineupEntry, bool] | None:
    for is_home in (True, False):
        lineup = game.home_lineup if is_home else game.away_lineup
        for entry in lineup:
            if entry.player_id == player_id:
                return entry, is_home
    return None


def _find_pitcher(game: GameContext, player_id: int) -> tuple[LineupEntry, bool] | None:
    for is_home in (True, False):
        entry = game.home_pitcher if is_home else game.away_pitcher
        if entry is not None and entry.player_id == player_id:
            return entry, is_home
    return None


async def _side_from_team(ctx: ProjectionContext, game: GameContext, player_id: int) -> tuple[LineupEntry, bool]:
    identity = await ctx.stats.player(player_id)
    if identity is None:
        raise DfsException(f"player {player_id} not found")
    if identity.team_id == game.home_team.team_id:
        is_home = True
    elif identity.team_id == game.away_team.team_id:
        is_home = False
    else:
        raise DfsException(f"{identity.name} does not play in game {game.game_pk} ({game.matchup_label})")
    return LineupEntry(player_id=player_id, name=identity.name, position=identity.position), is_home


async def _project_player(
    settings: Settings, player_id: int, game_pk: int, salaries: Path | None, *, pitcher: bool
) -> PlayerAnalysis:
    async with build_projection_context(settings, salary_file=salaries) as ctx:
        game = await ctx.schedule.game(game_pk)
        if game is None:
            raise DfsException(f"game {game_pk} not found")
        found = _find_pitcher(game, player_id) if pitcher else _find_batter(game, player_id)
        entry, is_home = found if found is not None else await _side_from_team(ctx, game, player_id)
        if pitcher:
            return await ctx.pitchers.analyze(game, entry, is_home=is_home, season=settings.season)
        return await ctx.batters.analyze(game, entry, is_home=is_home, season=settings.season)


def _run_player(
    player_id: int, game_pk: int, season: int | None, salaries: Path | None, json_output: bool, *, pitcher: bool
) -> None:
    settings = _load_settings(season)
    try:
        analysis = asyncio.run(_project_player(settings, player_id, game_pk, salaries, pitcher=pitcher))
    except DfsException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    if json_output:
        print_json(analysis_to_dict(analysis))
    else:
        print_analysis_detail(analysis)


@app.command()
def batter(
    player_id: _PlayerArg,
    game: _GameOpt,
    season: _SeasonOpt = None,
    salaries: _SalariesOpt = None,
    json_output: _JsonOpt = False,
) -> None:
    """Project one batter in one game with a per-category breakdown."""
    _run_player(player_id, game, season, salaries, json_output, pitcher=False)


@app.command()
def pitcher(
    player_id: _PlayerArg,
    game: _GameOpt,
    season: _SeasonOpt = None,
    salaries: _SalariesOpt = None,
    json_output: _JsonOpt = False,
) -> None:
    """Project one starting pitcher in one game with a per-category breakdown."""
    _run_player(player_id, game, season, salaries, json_output, pitcher=True)


# --- cache subcommand group ---

cache_app = typer.Typer(name="cache", help="Manage the local response cache")
app.add_typer(cache_app, name="cache")


@cache_app.command("clear")
def cache_clear(
    namespace: Annotated[str | None, typer.Option("--namespace", help="Only clear this namespace")] = None,
) -> None:
    """Delete cached provider responses."""
    settings = _load_settings(None)
    with build_cache_store(settings) as store:
        if namespace is None:
            removed = store.clear()
            console.print(f"Cleared {removed} cache entries")
        else:
            store.invalidate(namespace)
            console.print(f"Cleared namespace '{namespace}'")


@cache_app.command("stats")
def cache_stats() -> None:
    """Purge expired entries and show live entry counts per namespace."""
    settings = _load_settings(None)
    with build_cache_store(settings) as store:
        purged = store.purge_expired()
        counts = store.namespaces()
    print_cache_stats(counts, purged)
