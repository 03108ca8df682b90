"""Root callback: global options shared by every command."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..exceptions import ConfigurationError
from ..logging_config import setup_logging
from . import __version__, app
from ._common import console


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=32,
        hidden=True,
    ),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file", hidden=True),
    version: bool = typer.Option(False, "--version", help="Show version and exit", is_eager=True),
):
    """
    Migrate visual tests from Percy, Applitools or Sauce Labs Visual to SmartUI.

    [bold cyan]Examples:[/bold cyan]

      smartui-migrator detect

      smartui-migrator analyze --json

      smartui-migrator migrate --confirm

      smartui-migrator rollback checkpoint_1718000000000_ab12cd34e
    """
    if version:
        console.print(f"[bold cyan]SmartUI Migrator[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    try:
        settings = load_config(config_file=config, workers=workers, verbose=verbose, quiet=quiet)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    setup_logging(
        verbose=settings.verbosity == "verbose",
        quiet=settings.verbosity == "quiet",
        log_file=str(log_file) if log_file else None,
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = settings

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
