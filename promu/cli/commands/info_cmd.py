from __future__ import annotations

from promu.cli.commands._helpers import exit_on_error
from promu.cli.context import build_context
from promu.core.errors import ErrorCode
from promu.output.console import Style
from promu.services.project import resolve_project_info


def info() -> None:
    """Print the release identity promu resolved for this project."""
    ctx = build_context()
    project = exit_on_error(
        resolve_project_info(ctx.config, ctx.root), ctx, ErrorCode.CONFIG_ERROR
    )
    ctx.console.print(f"name:    {project.name}")
    ctx.console.print(f"owner:   {project.owner}")
    ctx.console.print(f"version: {project.version}")
    ctx.console.print(f"tag:     {project.tag}", Style.DIM)
