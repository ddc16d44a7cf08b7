from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class CrossbuildError:
    kind: Literal[
        "invalid_version",
        "build_failed",
    ]
    message: str
    hint: str | None = None
    group: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: Literal[
        "invalid_input",
        "walk_failed",
        "upload_failed",
    ]
    message: str
    hint: str | None = None
