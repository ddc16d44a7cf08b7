from __future__ import annotations

import re
from dataclasses import dataclass, field


# "1.6", "1.7.1", "v1.10", "1.8rc1", "1.9-beta.2"
_VERSION_RE = re.compile(
    r"^v?(?P<release>\d+(?:\.\d+)*)(?:[-.]?(?P<pre>alpha|beta|rc)\.?(?P<pre_num>\d+)?)?$",
    re.IGNORECASE,
)

_PRE_RANK = {"alpha": 0, "beta": 1, "rc": 2}
_STABLE_RANK = 3


@dataclass(frozen=True, slots=True, order=True)
class ToolchainVersion:
    """A Go toolchain version ordered numerically, component by component.

    Trailing zero components are dropped so `1.6 == 1.6.0`. A pre-release
    sorts before the release it precedes (`1.8rc1 < 1.8`).
    """

    release: tuple[int, ...]
    pre_rank: int = _STABLE_RANK
    pre_num: int = 0
    text: str = field(default="", compare=False)

    @property
    def is_prerelease(self) -> bool:
        return self.pre_rank != _STABLE_RANK

    def __str__(self) -> str:
        return self.text or ".".join(str(n) for n in self.release)


def parse_toolchain_version(text: str) -> ToolchainVersion | None:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None

    release = [int(part) for part in m.group("release").split(".")]
    while len(release) > 1 and release[-1] == 0:
        release.pop()

    pre = m.group("pre")
    if pre is None:
        return ToolchainVersion(tuple(release), text=text.strip())

    pre_num = m.group("pre_num")
    return ToolchainVersion(
        tuple(release),
        pre_rank=_PRE_RANK[pre.lower()],
        pre_num=int(pre_num) if pre_num else 0,
        text=text.strip(),
    )


def version_at_least(version: ToolchainVersion, minimum: ToolchainVersion) -> bool:
    return version >= minimum
