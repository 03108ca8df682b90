"""Checkpoint commands: list, rollback, delete."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from ..checkpoint import CheckpointManager
from ..exceptions import MigratorError
from . import app
from ._common import abort, console, get_config

_PATH_OPTION = typer.Option(
    Path("."),
    "--path", "-C",
    help="Project root",
    exists=True, file_okay=False, dir_okay=True,
)


@app.command()
def checkpoints(ctx: typer.Context, path: Path = _PATH_OPTION):
    """List stored checkpoints, newest first."""
    manager = CheckpointManager(path, get_config(ctx))
    stored = manager.list_checkpoints()
    if not stored:
        console.print("[yellow]No checkpoints found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Checkpoints", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold")
    table.add_column("Created", style="green")
    table.add_column("Status", style="cyan")
    table.add_column("Platform")
    table.add_column("Files", justify="right")
    table.add_column("Description", style="dim")
    for cp in stored:
        ts = cp.timestamp.replace("T", " ")
        if "." in ts:
            ts = ts[: ts.index(".")]
        table.add_row(
            cp.id, ts, cp.status.value, cp.metadata.platform, str(cp.metadata.files_count), escape(cp.description)
        )
    console.print()
    console.print(table)
    console.print()


@app.command()
def rollback(
    ctx: typer.Context,
    checkpoint_id: str = typer.Argument(..., help="Checkpoint id (see `checkpoints`)"),
    path: Path = _PATH_OPTION,
    cleanup: bool = typer.Option(
        False, "--cleanup",
        help="Also remove generated SmartUI files and retire the checkpoint",
    ),
):
    """Restore every file backed up in a checkpoint."""
    manager = CheckpointManager(path, get_config(ctx))
    try:
        result = manager.rollback_to_checkpoint(checkpoint_id)
        for rel in result.restored_files:
            console.print(f"  [green]restored[/green] {escape(rel)}")
        for rel in result.removed_files:
            console.print(f"  [yellow]removed[/yellow]  {escape(rel)}")
        for error in result.errors:
            console.print(f"  [red]failed[/red]   {escape(error)}")
        console.print(f"{escape(result.message)} ({result.duration:.2f}s)")
        if not result.success:
            raise typer.Exit(1)
        if cleanup:
            cleaned = manager.cleanup_after_rollback(checkpoint_id)
            for rel in cleaned.removed_files:
                console.print(f"  [yellow]removed[/yellow]  {escape(rel)}")
            for error in cleaned.errors:
                console.print(f"  [red]failed[/red]   {escape(error)}")
            console.print(cleaned.message)
            if not cleaned.success:
                raise typer.Exit(1)
    except MigratorError as e:
        abort(e)


@app.command()
def delete_checkpoint(
    ctx: typer.Context,
    checkpoint_id: str = typer.Argument(..., help="Checkpoint id (see `checkpoints`)"),
    path: Path = _PATH_OPTION,
):
    """Delete a checkpoint's stored contents."""
    manager = CheckpointManager(path, get_config(ctx))
    try:
        manager.delete_checkpoint(checkpoint_id)
    except MigratorError as e:
        abort(e)
    console.print(f"[green]Deleted checkpoint {checkpoint_id}[/green]")
