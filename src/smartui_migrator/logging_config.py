"""Log setup for the migrator.

Everything the tool logs goes to stderr through rich, so ``--json`` output on
stdout stays machine-readable. An optional plain-text file log receives the
same records with timestamps.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "smartui_migrator"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    return logging.DEBUG if verbose else logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Install the stderr handler (and the file handler, if asked for).

    Calling it again replaces the previous handlers, so a second CLI
    invocation in the same process picks up its own flags.

    Args:
        verbose: Log at DEBUG and show source paths and locals in tracebacks
        quiet: Only log errors; wins over verbose
        log_file: Append records to this file as well

    Returns:
        The package logger
    """
    level = _level(verbose, quiet)
    # Paths and messages are printed literally, never as rich markup
    stderr_handler = RichHandler(
        console=Console(stderr=True),
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        show_path=verbose,
    )
    handlers: list[logging.Handler] = [stderr_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    return package_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the package namespace; bare names are prefixed."""
    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
