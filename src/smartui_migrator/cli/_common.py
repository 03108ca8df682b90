"""Shared CLI helpers."""

from pathlib import Path
from typing import NoReturn, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import MigrationConfig, default_config
from ..detection import Detector
from ..exceptions import MigratorError, MultiplePlatformsDetectedError, PlatformNotDetectedError
from ..models import ChangeType, DetectionCandidate, DetectionResult, Platform, ProposedChange, TransformationWarning

console = Console()

_CHANGE_STYLES = {ChangeType.CREATE: "green", ChangeType.MODIFY: "yellow", ChangeType.INFO: "dim"}
PLATFORM_CHOICE = click.Choice([p.name.lower() for p in Platform], case_sensitive=False)


def get_config(ctx: typer.Context) -> MigrationConfig:
    """Config resolved by the root callback."""
    obj = ctx.find_root().obj or {}
    return obj.get("config", default_config)


def parse_platform(value: Optional[str]) -> Optional[Platform]:
    return Platform[value.upper()] if value else None


def resolve_detection(path: Path, config: MigrationConfig, platform: Optional[Platform] = None) -> DetectionResult:
    """Detect, letting `platform` pick among candidates when evidence is ambiguous.

    Raises:
        MultiplePlatformsDetectedError: Ambiguous and no platform chosen
        PlatformNotDetectedError: No evidence, or none for the chosen platform
    """
    detector = Detector(config)
    if platform is None:
        return detector.detect(path)
    try:
        result = detector.detect(path)
    except MultiplePlatformsDetectedError:
        result = None
    if result is not None and result.platform is platform:
        return result
    for candidate in detector.scan_candidates(path):
        if candidate.platform is platform:
            return detector.result_from_candidate(path, candidate)
    raise PlatformNotDetectedError(Path(path).resolve())


def print_detection(result: DetectionResult) -> None:
    console.print(f"[bold cyan]Platform:[/bold cyan]  {result.platform.value}")
    console.print(f"[bold cyan]Framework:[/bold cyan] {result.framework.value}")
    console.print(f"[bold cyan]Language:[/bold cyan]  {result.language.value}")
    files = result.files
    console.print(
        f"[bold cyan]Files:[/bold cyan]     {len(files.config)} config, {len(files.source)} source, "
        f"{len(files.ci)} CI, {len(files.package)} package"
    )
    for ev in result.evidence:
        console.print(f"  [dim]{ev.source.value}[/dim] {escape(ev.match)} [dim]({ev.confidence.value})[/dim]")


def print_candidates(candidates: list[DetectionCandidate]) -> None:
    table = Table(title="Detected candidates", show_lines=False, pad_edge=True)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Platform", style="cyan")
    table.add_column("Framework")
    table.add_column("Language")
    table.add_column("Confidence", style="yellow")
    table.add_column("Evidence", style="dim")
    for i, c in enumerate(candidates, start=1):
        table.add_row(
            str(i), c.platform.value, c.framework.value, c.language.value, c.confidence.value, ", ".join(c.files)
        )
    console.print(table)


def print_changes(changes: list[ProposedChange]) -> None:
    structural = [c for c in changes if c.type is not ChangeType.INFO]
    if not structural:
        console.print("[dim]No file changes.[/dim]")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Type")
    table.add_column("File", style="cyan")
    table.add_column("Change")
    for change in structural:
        style = _CHANGE_STYLES[change.type]
        table.add_row(f"[{style}]{change.type.value}[/{style}]", escape(change.file_path), escape(change.description))
    console.print(table)


def print_warnings(warnings: list[TransformationWarning]) -> None:
    if not warnings:
        return
    console.print(f"\n[bold yellow]Warnings ({len(warnings)})[/bold yellow]")
    for w in warnings:
        where = w.file or ""
        if w.file and w.line:
            where = f"{w.file}:{w.line}"
        prefix = f"[cyan]{escape(where)}[/cyan] " if where else ""
        console.print(f"  {prefix}{escape(w.message)}", highlight=False)
        if w.details:
            console.print(f"    [dim]{escape(w.details)}[/dim]")


def abort(error: MigratorError) -> NoReturn:
    """Print a migrator error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    if isinstance(error, MultiplePlatformsDetectedError) and error.candidates:
        print_candidates(error.candidates)
        console.print("Re-run with [bold]--platform[/bold] to choose one.")
    raise typer.Exit(1)
