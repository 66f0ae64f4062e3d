"""
sdlbake CLI package.

- commands.py: generate and merge commands
- utils.py: version callback and logging setup
"""

from __future__ import annotations

import sys

import typer

from sdlbake.cli.commands import generate_command, merge_command
from sdlbake.cli.utils import version_callback

app = typer.Typer(
    help="sdlbake - generate an executable graphql-core schema from SDL files",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """sdlbake CLI main callback for global options."""


app.command(name="generate")(generate_command)
app.command(name="merge")(merge_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "main"]


if __name__ == "__main__":
    main(sys.argv[1:])
