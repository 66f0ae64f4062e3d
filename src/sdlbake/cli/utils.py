"""
sdlbake CLI utilities.

Shared helpers used across CLI modules.
"""

from __future__ import annotations

import logging
import platform

import typer
from rich.console import Console
from rich.logging import RichHandler

from sdlbake._version import get_version

err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        import graphql

        typer.echo(f"sdlbake {get_version()}")
        typer.echo(f"graphql-core {graphql.__version__}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route sdlbake's loggers to stderr through rich."""
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    handler = RichHandler(console=err_console, show_time=False, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("sdlbake")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
