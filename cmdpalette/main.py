#!/usr/bin/env python3
"""
Main CLI entry point for cmdpalette
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from cmdpalette import __version__
from cmdpalette.config import ui_config
from cmdpalette.exceptions import ConfigurationError
from cmdpalette.palette.palette_commands import CallbackCommand
from cmdpalette.palette.palette_matcher import highlight_title, rank
from cmdpalette.palette.palette_presenter import parse_input
from cmdpalette.utils.logging import setup_logging
from cmdpalette.utils.output import console

app = typer.Typer(help="Fuzzy command palette")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    """
    cmdpalette - fuzzy command palette

    [bold]Examples:[/bold]

    Open the palette over some assets:
        [cyan]cmdpalette open Assets/Player.prefab Assets/Enemy.prefab[/cyan]

    See how titles rank for a query:
        [cyan]cmdpalette rank cam "Main Camera" "Camera Rig" "Player"[/cyan]
    """
    setup_logging(verbose=verbose)


def _run_app(start: str, paths: List[Path], initial_input: str, debug: Optional[bool]) -> None:
    from cmdpalette.ui.palette_app import PaletteApp

    try:
        PaletteApp(asset_paths=paths, start=start, initial_input=initial_input, debug=debug).run()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        raise typer.Exit(1) from e


@app.command("open")
def open_(
    paths: List[Path] = typer.Argument(None, help="Asset files to offer"),
    initial_input: str = typer.Option("", "--input", "-i", help="Prefill the search field"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Show match scores"),
):
    """Open the palette over scene objects and the given assets."""
    _run_app("open", paths or [], initial_input, debug)


@app.command()
def palette(
    initial_input: str = typer.Option("", "--input", "-i", help="Prefill the search field"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Show match scores"),
):
    """Open the palette over the editor's own commands."""
    _run_app("commands", [], initial_input, debug)


@app.command("rank")
def rank_titles(
    query: str = typer.Argument(..., help="Search input, as typed in the palette"),
    titles: List[str] = typer.Argument(..., help="Candidate titles"),
    limit: int = typer.Option(0, "--limit", "-n", help="Show only the top N (0 = all)"),
):
    """Rank titles against a query the way the palette does."""
    search_term = parse_input(query).search_term
    commands = [CallbackCommand(title, action=lambda: None) for title in titles]
    ranked = rank(commands, search_term)
    if limit > 0:
        ranked = ranked[:limit]

    table = Table(title=f"Results for {search_term!r}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Score", justify="right")
    table.add_column("Title")
    for i, result in enumerate(ranked, 1):
        table.add_row(
            str(i),
            f"{result.score:.2f}",
            highlight_title(result.command.title, search_term, ui_config.get_dim_color()),
        )
    console.print(table)


@app.command()
def parse(raw: str = typer.Argument(..., help="Raw palette input")):
    """Show how palette input splits into search term and arguments."""
    parsed = parse_input(raw)
    console.print(f"search term: {parsed.search_term!r}", markup=False)
    if parsed.arguments is None:
        console.print("arguments: none")
    else:
        console.print(f"arguments: {parsed.arguments!r}", markup=False)


@app.command()
def config(
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Show match scores"),
    skin: Optional[str] = typer.Option(None, "--skin", help="dark or light"),
    max_rows: Optional[int] = typer.Option(None, "--max-rows", help="Rows shown"),
):
    """Show or change palette settings."""
    try:
        if debug is not None:
            ui_config.set_debug(debug)
        if skin is not None:
            ui_config.set_skin(skin)
        if max_rows is not None:
            ui_config.set_max_rows(max_rows)
    except ConfigurationError as e:
        console.print(f"❌ {e}", style="red", markup=False)
        raise typer.Exit(1) from e

    console.print(f"debug: {ui_config.is_debug_enabled()}")
    console.print(f"skin: {ui_config.get_skin()}")
    console.print(f"max_rows: {ui_config.get_max_rows()}")
    console.print(f"file: {ui_config.get_ui_config_path()}", markup=False)


@app.command()
def version():
    """Show cmdpalette version"""
    typer.echo(f"cmdpalette version {__version__}")


def run():
    app()


if __name__ == "__main__":
    run()
