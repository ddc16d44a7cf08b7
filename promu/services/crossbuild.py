"""Crossbuild dispatch to golang-builder containers.

Without CGO one generic `base` image builds every platform in a single run.
With CGO each platform family needs its own cross toolchain, so the main,
ARM, PowerPC and MIPS groups each get their own image and their own run, in
that order.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from promu.core.config import DEFAULT_BUILDER_IMAGE
from promu.core.result import Err, Ok, Result
from promu.output.console import ConsoleProtocol, Style
from promu.platform.process import format_command, run_live

from .errors import CrossbuildError
from .platforms import DEFAULT_PLATFORM_SETS, Classification, PlatformSets, classify_platforms
from .version import parse_toolchain_version

CGO_ENV_VAR = "CGO_ENABLED"


@dataclass(frozen=True, slots=True)
class Toolchain:
    version: str
    cgo: bool = False


@dataclass(frozen=True, slots=True)
class PlatformGroup:
    name: str
    image: str
    platforms: tuple[str, ...]

    @property
    def platforms_param(self) -> str:
        return " ".join(self.platforms)


def builder_image_ref(image_name: str, go_version: str, variant: str) -> str:
    return f"{image_name}:{go_version}-{variant}"


def plan_groups(
    classification: Classification,
    *,
    cgo: bool,
    go_version: str,
    image_name: str = DEFAULT_BUILDER_IMAGE,
) -> list[PlatformGroup]:
    """Builder runs for a classification, in dispatch order. Groups may be empty."""
    if not cgo:
        return [
            PlatformGroup(
                "base",
                builder_image_ref(image_name, go_version, "base"),
                classification.all_buildable,
            )
        ]

    return [
        PlatformGroup(name, builder_image_ref(image_name, go_version, variant), platforms)
        for name, variant, platforms in (
            ("main", "main", classification.main),
            ("ARM", "arm", classification.arm),
            ("PowerPC", "powerpc", classification.powerpc),
            ("MIPS", "mips", classification.mips),
        )
    ]


def docker_command(
    group: PlatformGroup,
    *,
    repository_path: str,
    mount_dir: Path,
    cgo: bool,
) -> list[str]:
    cmd = ["docker", "run", "--rm", "-t", "-v", f"{mount_dir}:/app"]
    if cgo:
        # Forward the host value set by cgo_enabled().
        cmd += ["-e", CGO_ENV_VAR]
    cmd += [group.image, "-i", repository_path, "-p", group.platforms_param]
    return cmd


@contextmanager
def cgo_enabled() -> Iterator[None]:
    """Set CGO_ENABLED=1 for the duration of the block, then restore the previous value."""
    previous = os.environ.get(CGO_ENV_VAR)
    os.environ[CGO_ENV_VAR] = "1"
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop(CGO_ENV_VAR, None)
        else:
            os.environ[CGO_ENV_VAR] = previous


class CrossbuildService:
    """Classify requested platforms and run one builder container per group."""

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        cwd: Path,
        verbose: bool = False,
    ) -> None:
        self._console = console
        self._cwd = cwd
        self._verbose = verbose

    def crossbuild(
        self,
        *,
        platforms: Sequence[str],
        repository_path: str,
        toolchain: Toolchain,
        image_name: str = DEFAULT_BUILDER_IMAGE,
        sets: PlatformSets = DEFAULT_PLATFORM_SETS,
        dry_run: bool = False,
    ) -> Result[None, CrossbuildError]:
        version = parse_toolchain_version(toolchain.version)
        if version is None:
            return Err(
                CrossbuildError(
                    kind="invalid_version",
                    message=f"invalid Go version: {toolchain.version!r}",
                    hint="Use a dotted version such as 1.7.1 (--go or go.version)",
                )
            )

        classification = classify_platforms(platforms, version, sets)
        self._report_skipped(classification, sets)

        groups = plan_groups(
            classification,
            cgo=toolchain.cgo,
            go_version=toolchain.version,
            image_name=image_name,
        )

        if not toolchain.cgo:
            return self._dispatch(
                groups, repository_path=repository_path, cgo=False, dry_run=dry_run
            )

        with cgo_enabled():
            return self._dispatch(
                groups, repository_path=repository_path, cgo=True, dry_run=dry_run
            )

    def _report_skipped(self, classification: Classification, sets: PlatformSets) -> None:
        for _ in classification.mips_unsupported:
            self._console.warning(
                f"MIPS architectures are only available with Go {sets.mips_min_version}+"
            )
        if classification.unknown:
            self._console.warning(
                f"unknown/unhandled platforms: {' '.join(classification.unknown)}"
            )

    def _dispatch(
        self,
        groups: list[PlatformGroup],
        *,
        repository_path: str,
        cgo: bool,
        dry_run: bool,
    ) -> Result[None, CrossbuildError]:
        for group in groups:
            result = self._build_group(
                group, repository_path=repository_path, cgo=cgo, dry_run=dry_run
            )
            if isinstance(result, Err):
                return result
        return Ok(None)

    def _build_group(
        self,
        group: PlatformGroup,
        *,
        repository_path: str,
        cgo: bool,
        dry_run: bool,
    ) -> Result[None, CrossbuildError]:
        if not group.platforms:
            return Ok(None)

        self._console.print(f"> running the {group.name} builder docker image")
        cmd = docker_command(
            group, repository_path=repository_path, mount_dir=self._cwd, cgo=cgo
        )
        if self._verbose or dry_run:
            self._console.print(format_command(cmd), Style.DIM)
        if dry_run:
            return Ok(None)

        result = run_live(cmd, cwd=self._cwd)
        if isinstance(result, Err):
            return Err(
                CrossbuildError(
                    kind="build_failed",
                    message=f"The {group.name} builder docker image exited unexpectedly",
                    hint=result.error.stderr or str(result.error),
                    group=group.name,
                )
            )
        return Ok(None)
