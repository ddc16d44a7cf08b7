"""Release identity of the project being built.

Explicit `[release]` values win. Otherwise name and owner come from
`repository.path` (`github.com/<owner>/<name>`) and the version from the
`VERSION` file at the project root.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from promu.core.config import CONFIG_FILENAME, Config, ConfigError
from promu.core.result import Err, Ok, Result

VERSION_FILENAME = "VERSION"


@dataclass(frozen=True, slots=True)
class ProjectInfo:
    name: str
    owner: str
    version: str

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def tarball_pattern(self) -> str:
        return f"{self.name}-{self.version}.*.tar.gz"


def _split_repository_path(path: str | None) -> tuple[str | None, str | None]:
    if path is None:
        return (None, None)
    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) < 2:
        return (None, parts[-1] if parts else None)
    return (parts[-2], parts[-1])


def _read_version_file(root: Path) -> Result[str | None, ConfigError]:
    path = root / VERSION_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading {VERSION_FILENAME}: {e}", path=path))
    return Ok(text.strip() or None)


def resolve_project_info(config: Config, root: Path) -> Result[ProjectInfo, ConfigError]:
    repo_owner, repo_name = _split_repository_path(config.repository.path)

    name = config.release.name or repo_name
    owner = config.release.owner or repo_owner

    version = config.release.version
    if version is None:
        read = _read_version_file(root)
        if isinstance(read, Err):
            return read
        version = read.value

    if name is None or owner is None or version is None:
        missing = [
            key
            for key, value in (("name", name), ("owner", owner), ("version", version))
            if value is None
        ]
        return Err(
            ConfigError(
                f"cannot determine release {', '.join(missing)}",
                hint=(
                    f"Set repository.path or [release] {'/'.join(missing)} in {CONFIG_FILENAME}"
                    + (f", or add a {VERSION_FILENAME} file" if "version" in missing else "")
                ),
            )
        )

    return Ok(ProjectInfo(name=name, owner=owner, version=version))
