"""Typed configuration loaded from `.promu.toml`.

Example:

    [repository]
    path = "github.com/prometheus/promu"

    [go]
    version = "1.7.1"
    cgo = false

    [crossbuild]
    platforms = ["linux/amd64", "linux/arm"]

    [release]
    retries = 2
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_BUILDER_IMAGE",
    "DEFAULT_GO_VERSION",
    "DEFAULT_UPLOAD_RETRIES",
    "Config",
    "ConfigError",
    "CrossbuildConfig",
    "GoConfig",
    "ReleaseConfig",
    "RepositoryConfig",
    "load_config",
    "require_repository_path",
]

CONFIG_FILENAME = ".promu.toml"

DEFAULT_BUILDER_IMAGE = "quay.io/prometheus/golang-builder"
DEFAULT_GO_VERSION = "1.7.1"
DEFAULT_UPLOAD_RETRIES = 2


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded, parsed, or lacks a required key."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    # e.g. "github.com/prometheus/promu"; passed to the builder image as `-i`.
    path: str | None = None


@dataclass(frozen=True, slots=True)
class GoConfig:
    version: str = DEFAULT_GO_VERSION
    cgo: bool = False


@dataclass(frozen=True, slots=True)
class CrossbuildConfig:
    """Crossbuild settings.

    `platforms` is None when the config does not list any; callers then build
    every known reference platform.
    """

    platforms: tuple[str, ...] | None = None
    builder_image: str = DEFAULT_BUILDER_IMAGE


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release identity overrides and upload retry budget."""

    name: str | None = None
    owner: str | None = None
    version: str | None = None
    retries: int = DEFAULT_UPLOAD_RETRIES


def _typed_str(table: StrDict, section: str, key: str) -> str | None:
    # A present key of the wrong type is an error, not a silent default.
    if key in table and not isinstance(table[key], str):
        raise ValueError(f"{section}.{key} must be a string (got {table[key]!r})")
    return get_str(table, key)


def _typed_bool(table: StrDict, section: str, key: str) -> bool | None:
    if key in table and not isinstance(table[key], bool):
        raise ValueError(f"{section}.{key} must be true or false (got {table[key]!r})")
    return get_bool(table, key)


@dataclass(frozen=True, slots=True)
class Config:
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    go: GoConfig = field(default_factory=GoConfig)
    crossbuild: CrossbuildConfig = field(default_factory=CrossbuildConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: a known key holds a value of the wrong shape.
        """
        repository: StrDict = get_table(data, "repository") or {}
        go: StrDict = get_table(data, "go") or {}
        crossbuild: StrDict = get_table(data, "crossbuild") or {}
        release: StrDict = get_table(data, "release") or {}

        platforms: tuple[str, ...] | None = None
        if "platforms" in crossbuild:
            items = get_str_list(crossbuild, "platforms")
            if items is None:
                raise ValueError("crossbuild.platforms must be a list of strings")
            platforms = tuple(items)

        retries = get_int(release, "retries")
        if "retries" in release and (retries is None or retries < 0):
            raise ValueError("release.retries must be a non-negative integer")

        return cls(
            repository=RepositoryConfig(path=_typed_str(repository, "repository", "path")),
            go=GoConfig(
                version=_typed_str(go, "go", "version") or DEFAULT_GO_VERSION,
                cgo=bool(_typed_bool(go, "go", "cgo")),
            ),
            crossbuild=CrossbuildConfig(
                platforms=platforms,
                builder_image=(
                    _typed_str(crossbuild, "crossbuild", "builder_image") or DEFAULT_BUILDER_IMAGE
                ),
            ),
            release=ReleaseConfig(
                name=_typed_str(release, "release", "name"),
                owner=_typed_str(release, "release", "owner"),
                version=_typed_str(release, "release", "version"),
                retries=DEFAULT_UPLOAD_RETRIES if retries is None else retries,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def require_repository_path(config: Config) -> Result[str, ConfigError]:
    """Return `repository.path`, which crossbuild and release cannot run without."""
    if config.repository.path is None:
        return Err(
            ConfigError(
                "missing required configuration: repository.path",
                hint=f'Add [repository] path = "github.com/<owner>/<name>" to {CONFIG_FILENAME}',
            )
        )
    return Ok(config.repository.path)
