"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from promu.core.errors import ErrorCode
from promu.core.result import Ok, Result
from promu.output.console import Style

if TYPE_CHECKING:
    from promu.cli.context import CLIContext


T = TypeVar("T")
E = TypeVar("E")


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode,
) -> T:
    """Return the Ok value, or print the error and exit with `error_code`.

    Expects error objects to have a 'message' and an optional 'hint'.
    """
    if isinstance(result, Ok):
        return result.value

    error = result.error
    message: str = getattr(error, "message", str(error))
    hint: str | None = getattr(error, "hint", None)
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(error_code))


def parse_platforms(value: str) -> list[str]:
    """Split a `--platforms` value on whitespace and commas."""
    return value.replace(",", " ").split()
