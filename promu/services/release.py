"""Upload release tarballs to GitHub with `github-release`.

Every file under the tarballs location whose name matches
`<name>-<version>.*.tar.gz` is uploaded to the `v<version>` release. An upload
is retried a fixed number of times with a fixed delay; once a file exhausts
its retries the whole release stops.
"""

from __future__ import annotations

import glob
from collections.abc import Iterator
from fnmatch import fnmatchcase
from pathlib import Path
from time import sleep

from promu.core.result import Err, Ok, Result
from promu.output.console import ConsoleProtocol, Style
from promu.platform.process import ProcessError, format_command
from promu.platform.process import run as run_process

from .errors import ReleaseError
from .project import ProjectInfo

UPLOAD_RETRY_DELAY_SECONDS = 2.0
UPLOAD_TIMEOUT_SECONDS = 10 * 60.0


def tarball_matches(filename: str, info: ProjectInfo) -> bool:
    """Match a base filename against `<name>-<version>.*.tar.gz`."""
    pattern = glob.escape(f"{info.name}-{info.version}") + ".*.tar.gz"
    return fnmatchcase(filename, pattern)


def _walk_files(root: Path) -> Iterator[Path]:
    # A file root is visited on its own. Directories are walked in lexical
    # order, descending into subdirectories where they sort.
    if root.is_file():
        yield root
        return
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir() and not entry.is_symlink():
            yield from _walk_files(entry)
        elif entry.is_file():
            yield entry


def upload_command(path: Path, info: ProjectInfo) -> list[str]:
    return [
        "github-release",
        "upload",
        "--user",
        info.owner,
        "--repo",
        info.name,
        "--tag",
        info.tag,
        "--name",
        path.name,
        "--file",
        str(path),
    ]


class ReleaseService:
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

    def release(
        self,
        *,
        location: Path,
        info: ProjectInfo,
        retries: int,
        dry_run: bool = False,
    ) -> Result[list[Path], ReleaseError]:
        """Upload every matching tarball under `location`.

        Returns:
            Ok(uploaded paths, in walk order)
            Err(ReleaseError) on the first walk error or exhausted upload
        """
        if retries < 0:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"retry count must be >= 0 (got {retries})",
                )
            )

        if not location.exists():
            return Err(
                ReleaseError(
                    kind="walk_failed",
                    message=f"tarballs location does not exist: {location}",
                )
            )

        uploaded: list[Path] = []
        try:
            for path in _walk_files(location):
                if not tarball_matches(path.name, info):
                    continue
                result = self.upload_with_retry(path, info, retries=retries, dry_run=dry_run)
                if isinstance(result, Err):
                    return result
                uploaded.append(path)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="walk_failed",
                    message=f"Failed to upload all tarballs: {e}",
                )
            )

        return Ok(uploaded)

    def upload_with_retry(
        self,
        path: Path,
        info: ProjectInfo,
        *,
        retries: int,
        dry_run: bool = False,
    ) -> Result[None, ReleaseError]:
        """Upload one tarball, making at most `retries + 1` attempts."""
        attempts = retries + 1
        last_error: ProcessError | None = None

        for attempt in range(1, attempts + 1):
            result = self._upload(path, info, dry_run=dry_run)
            if isinstance(result, Ok):
                self._console.print(f" > uploaded {path.name}")
                return Ok(None)

            last_error = result.error
            if attempt < attempts:
                self._console.warning(
                    f"upload of {path.name} failed (attempt {attempt}/{attempts}), "
                    f"retrying in {UPLOAD_RETRY_DELAY_SECONDS:g}s"
                )
                sleep(UPLOAD_RETRY_DELAY_SECONDS)

        self._console.error(f"Upload failed after {attempts} attempts")
        hint = None
        if last_error is not None:
            hint = last_error.stderr.strip() or str(last_error)
        return Err(
            ReleaseError(
                kind="upload_failed",
                message=f"Failed to upload all tarballs: {path.name}",
                hint=hint,
            )
        )

    def _upload(
        self, path: Path, info: ProjectInfo, *, dry_run: bool
    ) -> Result[str, ProcessError]:
        cmd = upload_command(path, info)
        if self._verbose or dry_run:
            self._console.print(format_command(cmd), Style.DIM)
        if dry_run:
            return Ok("")
        return run_process(cmd, cwd=self._cwd, timeout=UPLOAD_TIMEOUT_SECONDS)
