from __future__ import annotations

import os
from pathlib import Path

import typer

from promu import __version__
from promu.cli.commands.crossbuild_cmd import crossbuild
from promu.cli.commands.info_cmd import info
from promu.cli.commands.release_cmd import release
from promu.cli.context import CONFIG_ENV, VERBOSE_ENV


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(crossbuild)
app.command()(release)
app.command()(info)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: ./.promu.toml)",
        show_default=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print external commands"),
) -> None:
    del version
    if config is not None:
        os.environ[CONFIG_ENV] = str(config)
    if verbose:
        os.environ[VERBOSE_ENV] = "1"


def main() -> None:
    app()
