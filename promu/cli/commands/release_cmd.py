"""Release command - upload tarballs to the GitHub release."""

from __future__ import annotations

from pathlib import Path

import typer

from promu.cli.commands._helpers import exit_on_error
from promu.cli.context import build_context
from promu.core.errors import ErrorCode
from promu.core.result import Err, Ok
from promu.services.project import resolve_project_info
from promu.services.release import ReleaseService


def release(
    location: Path = typer.Argument(Path("."), help="Tarballs location"),
    retry: int | None = typer.Option(
        None,
        "--retry",
        min=0,
        help="Number of retries to perform when upload fails [default: 2]",
        show_default=False,
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print uploads without running"),
) -> None:
    """Upload tarballs to the Github release."""
    ctx = build_context()
    info = exit_on_error(resolve_project_info(ctx.config, ctx.root), ctx, ErrorCode.CONFIG_ERROR)

    tarballs = location if location.is_absolute() else ctx.root / location
    retries = ctx.config.release.retries if retry is None else retry

    service = ReleaseService(console=ctx.console, cwd=ctx.root, verbose=ctx.verbose)
    result = service.release(location=tarballs, info=info, retries=retries, dry_run=dry_run)
    match result:
        case Ok(uploaded):
            if not uploaded:
                ctx.console.warning(f"no tarballs matching {info.tarball_pattern} in {tarballs}")
                return
            ctx.console.success(
                f"uploaded {len(uploaded)} tarball(s) to {info.owner}/{info.name} {info.tag}"
            )
        case Err(error):
            code = {
                "invalid_input": ErrorCode.USER_ERROR,
                "walk_failed": ErrorCode.IO_ERROR,
                "upload_failed": ErrorCode.UPLOAD_ERROR,
            }[error.kind]
            exit_on_error(result, ctx, code)
