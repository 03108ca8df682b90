"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="smartui-migrator",
    help="Migrate Percy, Applitools and Sauce Labs Visual suites to LambdaTest SmartUI",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


# Import subcommands to register them
from .main import main as _main_callback  # noqa: F401, E402
from .detect import detect as _detect  # noqa: F401, E402
from .analyze import analyze as _analyze  # noqa: F401, E402
from .migrate import migrate as _migrate  # noqa: F401, E402
from .checkpoints import checkpoints as _checkpoints, rollback as _rollback, delete_checkpoint as _delete_checkpoint  # noqa: F401, E402
