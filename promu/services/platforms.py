"""Platform classification for crossbuilds.

Each golang-builder image variant ships the cross toolchains for one family
of platforms. `classify_platforms` splits a requested `os/arch` list into
those families so every platform is handed to the image that can build it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations

from .version import ToolchainVersion, parse_toolchain_version, version_at_least

__all__ = [
    "DEFAULT_PLATFORM_SETS",
    "Classification",
    "PlatformSets",
    "classify_platforms",
]


@dataclass(frozen=True, slots=True)
class PlatformSets:
    """Known-good platforms per builder image family.

    The four sets must be disjoint. MIPS platforms additionally need a
    toolchain of at least `mips_min_version`.
    """

    main: frozenset[str]
    arm: frozenset[str]
    powerpc: frozenset[str]
    mips: frozenset[str]
    mips_min_version: str = "1.6"

    def __post_init__(self) -> None:
        named = (
            ("main", self.main),
            ("arm", self.arm),
            ("powerpc", self.powerpc),
            ("mips", self.mips),
        )
        for (a_name, a), (b_name, b) in combinations(named, 2):
            shared = a & b
            if shared:
                raise ValueError(
                    f"platform sets {a_name} and {b_name} overlap: {', '.join(sorted(shared))}"
                )
        if parse_toolchain_version(self.mips_min_version) is None:
            raise ValueError(f"invalid mips_min_version: {self.mips_min_version!r}")

    @property
    def mips_minimum(self) -> ToolchainVersion:
        parsed = parse_toolchain_version(self.mips_min_version)
        assert parsed is not None  # checked in __post_init__
        return parsed

    def all_platforms(self) -> tuple[str, ...]:
        """Every known platform, family by family (main, ARM, PowerPC, MIPS)."""
        return (
            *sorted(self.main),
            *sorted(self.arm),
            *sorted(self.powerpc),
            *sorted(self.mips),
        )


DEFAULT_PLATFORM_SETS = PlatformSets(
    main=frozenset(
        {
            "linux/amd64",
            "linux/386",
            "darwin/amd64",
            "darwin/386",
            "windows/amd64",
            "windows/386",
            "freebsd/amd64",
            "freebsd/386",
            "openbsd/amd64",
            "openbsd/386",
            "netbsd/amd64",
            "netbsd/386",
            "dragonfly/amd64",
        }
    ),
    arm=frozenset({"linux/arm", "linux/arm64", "freebsd/arm", "openbsd/arm", "netbsd/arm"}),
    powerpc=frozenset({"linux/ppc64", "linux/ppc64le"}),
    mips=frozenset({"linux/mips64", "linux/mips64le"}),
)


@dataclass(frozen=True, slots=True)
class Classification:
    """Requested platforms split by builder family, input order preserved.

    `mips_unsupported` holds MIPS platforms dropped because the toolchain is
    older than the MIPS minimum; `unknown` holds platforms in no family.
    Neither is ever built.
    """

    main: tuple[str, ...] = ()
    arm: tuple[str, ...] = ()
    powerpc: tuple[str, ...] = ()
    mips: tuple[str, ...] = ()
    unknown: tuple[str, ...] = ()
    mips_unsupported: tuple[str, ...] = ()

    @property
    def all_buildable(self) -> tuple[str, ...]:
        return (*self.main, *self.arm, *self.powerpc, *self.mips)


def classify_platforms(
    platforms: Sequence[str],
    toolchain_version: ToolchainVersion,
    sets: PlatformSets = DEFAULT_PLATFORM_SETS,
) -> Classification:
    """Partition `platforms` into builder families.

    Duplicates are kept as-is and end up in the same family twice.
    """
    main: list[str] = []
    arm: list[str] = []
    powerpc: list[str] = []
    mips: list[str] = []
    unknown: list[str] = []
    mips_unsupported: list[str] = []

    mips_ok = version_at_least(toolchain_version, sets.mips_minimum)

    for platform in platforms:
        if platform in sets.main:
            main.append(platform)
        elif platform in sets.arm:
            arm.append(platform)
        elif platform in sets.powerpc:
            powerpc.append(platform)
        elif platform in sets.mips:
            if mips_ok:
                mips.append(platform)
            else:
                mips_unsupported.append(platform)
        else:
            unknown.append(platform)

    return Classification(
        main=tuple(main),
        arm=tuple(arm),
        powerpc=tuple(powerpc),
        mips=tuple(mips),
        unknown=tuple(unknown),
        mips_unsupported=tuple(mips_unsupported),
    )
