"""Detect command."""

import json
from pathlib import Path
from typing import Optional

import typer

from ..detection import Detector
from ..exceptions import MigratorError
from . import app
from ._common import PLATFORM_CHOICE, abort, console, get_config, parse_platform, print_candidates, print_detection, resolve_detection


@app.command()
def detect(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."),
        help="Project root",
        exists=True, file_okay=False, dir_okay=True,
    ),
    show_all: bool = typer.Option(
        False, "--all",
        help="List every platform/framework candidate instead of resolving one",
    ),
    platform: Optional[str] = typer.Option(
        None, "--platform", "-p",
        help="Pick this platform when several are detected",
        click_type=PLATFORM_CHOICE,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """Detect the visual testing platform, framework and language in use."""
    config = get_config(ctx)
    try:
        if show_all:
            candidates = Detector(config).scan_candidates(path)
            if json_output:
                print(json.dumps([_candidate_dict(c) for c in candidates], indent=2))
            elif not candidates:
                console.print("[yellow]No visual testing platform evidence found.[/yellow]")
            else:
                print_candidates(candidates)
            return
        result = resolve_detection(path, config, parse_platform(platform))
    except MigratorError as e:
        abort(e)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_detection(result)


def _candidate_dict(candidate) -> dict:
    return {
        "platform": candidate.platform.value,
        "framework": candidate.framework.value,
        "language": candidate.language.value,
        "confidence": candidate.confidence.value,
        "files": candidate.files,
        "evidence": [e.to_dict() for e in candidate.evidence],
    }
