"""Analyze command: dry-run preview of a migration."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..analysis import DryRunAnalyzer
from ..exceptions import MigratorError
from ..models import AnalysisResult
from . import app
from ._common import (
    PLATFORM_CHOICE,
    abort,
    console,
    get_config,
    parse_platform,
    print_changes,
    print_detection,
    print_warnings,
    resolve_detection,
)


@app.command()
def analyze(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."),
        help="Project root",
        exists=True, file_okay=False, dir_okay=True,
    ),
    platform: Optional[str] = typer.Option(
        None, "--platform", "-p",
        help="Pick this platform when several are detected",
        click_type=PLATFORM_CHOICE,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Preview the migration without changing any file."""
    config = get_config(ctx)
    try:
        detection = resolve_detection(path, config, parse_platform(platform))
        result = DryRunAnalyzer(config).analyze(detection)
    except MigratorError as e:
        abort(e)

    if json_output:
        print(json.dumps({"detection": detection.to_dict(), "analysis": result.to_dict()}, indent=2))
        return
    print_detection(detection)
    console.print()
    print_analysis(result)


def print_analysis(result: AnalysisResult) -> None:
    print_changes(result.changes)
    console.print(
        f"\n[bold]{result.files_to_create}[/bold] to create, [bold]{result.files_to_modify}[/bold] to modify, "
        f"[bold]{result.snapshot_count}[/bold] snapshot(s) migrated"
    )
    print_warnings(result.warnings)
