"""Migrate command: apply the previewed changes."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..analysis import DryRunAnalyzer
from ..apply import TransformationManager, TransformationOptions, TransformationResult
from ..exceptions import MigratorError
from ..models import ChangeType, PlannedWrite
from . import app
from ._common import PLATFORM_CHOICE, abort, console, get_config, parse_platform, print_detection, resolve_detection
from .analyze import print_analysis


@app.command()
def migrate(
    ctx: typer.Context,
    path: Path = typer.Argument(
        Path("."),
        help="Project root",
        exists=True, file_okay=False, dir_okay=True,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the preview and stop"),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not create a checkpoint before writing"),
    confirm: bool = typer.Option(False, "--confirm", help="Ask before writing each file"),
    platform: Optional[str] = typer.Option(
        None, "--platform", "-p",
        help="Pick this platform when several are detected",
        click_type=PLATFORM_CHOICE,
    ),
):
    """Migrate the project to SmartUI, with a checkpoint for rollback."""
    config = get_config(ctx)
    try:
        detection = resolve_detection(path, config, parse_platform(platform))
        preview = DryRunAnalyzer(config).analyze(detection)
    except MigratorError as e:
        abort(e)

    print_detection(detection)
    console.print()
    print_analysis(preview)
    if dry_run:
        console.print("\n[yellow]Dry run: no files were changed.[/yellow]")
        return

    options = TransformationOptions(
        create_backup=config.create_backup and not no_backup,
        confirm_each_file=confirm,
        confirm=_ask,
    )
    manager = TransformationManager(config)
    try:
        result = manager.execute_transformation(detection, preview, options)
    except KeyboardInterrupt:
        if options.create_backup:
            console.print("\n[red]Interrupted.[/red] Files written so far were restored from the checkpoint.")
        else:
            console.print("\n[red]Interrupted.[/red] No checkpoint was taken; files written so far were kept.")
        raise typer.Exit(130)

    _print_result(result)
    if not result.success:
        raise typer.Exit(1)


def _ask(write: PlannedWrite) -> bool:
    verb = "Create" if write.type is ChangeType.CREATE else "Modify"
    return typer.confirm(f"{verb} {write.path}?", default=True)


def _print_result(result: TransformationResult) -> None:
    console.print()
    for rel in result.files_created:
        console.print(f"  [green]created[/green]  {escape(rel)}")
    for rel in result.files_modified:
        console.print(f"  [yellow]modified[/yellow] {escape(rel)}")
    for rel in result.skipped_files:
        console.print(f"  [dim]skipped[/dim]  {escape(rel)}")

    if result.success:
        console.print(
            f"\n[green]Migration complete:[/green] {len(result.files_created)} created, "
            f"{len(result.files_modified)} modified"
        )
        if result.checkpoint_id:
            console.print(f"Undo with: [bold]smartui-migrator rollback {result.checkpoint_id}[/bold]")
        return

    for error in result.errors:
        console.print(f"[red]Error:[/red] {escape(error)}")
    if result.rolled_back and result.rollback is not None:
        status = "[green]restored[/green]" if result.rollback.success else "[red]partially restored[/red]"
        console.print(f"Rolled back to {result.checkpoint_id}: {len(result.rollback.restored_files)} file(s) {status}")
    elif result.files_written:
        console.print("[yellow]No checkpoint was taken; these files were already changed:[/yellow]")
        for rel in result.files_written:
            console.print(f"  {escape(rel)}")
