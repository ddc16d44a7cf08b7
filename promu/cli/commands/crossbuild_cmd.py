"""Crossbuild command - build a Go project for many platforms in builder containers."""

from __future__ import annotations

import typer

from promu.cli.commands._helpers import exit_on_error, parse_platforms
from promu.cli.context import build_context
from promu.core.config import require_repository_path
from promu.core.errors import ErrorCode
from promu.core.result import Err
from promu.services.crossbuild import CrossbuildService, Toolchain
from promu.services.platforms import DEFAULT_PLATFORM_SETS


def crossbuild(
    go: str | None = typer.Option(
        None, "--go", help="Golang builder version to use", show_default=False
    ),
    cgo: bool | None = typer.Option(
        None,
        "--cgo/--no-cgo",
        help="Enable CGO using several docker images with different crossbuild toolchains.",
        show_default=False,
    ),
    platforms: str | None = typer.Option(
        None,
        "--platforms",
        "-p",
        help="Platforms to build (space or comma separated)",
        show_default=False,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print docker commands without running"),
) -> None:
    """Crossbuild a Go project using Golang builder Docker images."""
    ctx = build_context()
    repository_path = exit_on_error(
        require_repository_path(ctx.config), ctx, ErrorCode.CONFIG_ERROR
    )

    if platforms is not None:
        requested = parse_platforms(platforms)
    elif ctx.config.crossbuild.platforms is not None:
        requested = list(ctx.config.crossbuild.platforms)
    else:
        requested = list(DEFAULT_PLATFORM_SETS.all_platforms())

    toolchain = Toolchain(
        version=go or ctx.config.go.version,
        cgo=ctx.config.go.cgo if cgo is None else cgo,
    )

    service = CrossbuildService(console=ctx.console, cwd=ctx.root, verbose=ctx.verbose)
    result = service.crossbuild(
        platforms=requested,
        repository_path=repository_path,
        toolchain=toolchain,
        image_name=ctx.config.crossbuild.builder_image,
        dry_run=dry_run,
    )
    if isinstance(result, Err) and result.error.kind == "invalid_version":
        exit_on_error(result, ctx, ErrorCode.USER_ERROR)
    exit_on_error(result, ctx, ErrorCode.BUILD_ERROR)
