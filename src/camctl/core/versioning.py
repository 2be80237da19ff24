"""
Semantic versions of upstream schema snapshots and build-time snapshot resolution.

Exposes the immutable Version triple used to name generated snapshots, the
compatibility modes, and ``resolve`` which picks exactly one snapshot for the
linked runtime. This module is zero-IO.

Notes:
    - Build metadata (``+...``) is accepted and ignored; pre-release tags are kept
      for ordering but compatibility only looks at major.minor.patch.
    - Caret compatibility treats each candidate as the requirement ``^candidate``
      and checks the linked version against it (cargo semantics).
    - The linked version is always an explicit argument; discovery lives in
      camctl.build.

Examples:
    >>> from camctl.core.versioning import Version, CompatMode, resolve
    >>> available = [Version.parse(v) for v in ("0.4.0", "1.0.0", "1.2.0")]
    >>> str(resolve(available, Version.parse("1.1.5"), CompatMode.CARET))
    '1.0.0'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .errors import VersionMismatch

__all__ = [
    "Version",
    "CompatMode",
    "parse_tag",
    "is_compatible",
    "resolve",
]

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


@dataclass(frozen=True)
class Version:
    """
    Immutable semantic version of an upstream release.

    Attributes:
        major (int): Non-negative major component.
        minor (int): Non-negative minor component.
        patch (int): Non-negative patch component.
        pre (tuple[str, ...]): Dot-separated pre-release identifiers, empty for releases.

    Raises:
        ValueError: If any numeric component is negative.
    """

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            if getattr(self, name) < 0:
                raise ValueError(f"Version {name} must be non-negative, got {getattr(self, name)}")

    @classmethod
    def parse(cls, text: str) -> Version:
        """
        Parse ``MAJOR.MINOR.PATCH[-pre][+build]``.

        Raises:
            ValueError: If text is not a semantic version.
        """
        match = _SEMVER_RE.match(text.strip())
        if match is None:
            raise ValueError(f"not a semantic version: {text!r}")
        major, minor, patch, pre = match.groups()
        return cls(int(major), int(minor), int(patch), tuple(pre.split(".")) if pre else ())

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def is_zero(self) -> bool:
        return self.triple == (0, 0, 0)

    def _sort_key(self) -> tuple:
        # Releases sort after their pre-releases; numeric identifiers before alphanumeric.
        pre_key = tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in self.pre)
        return (self.triple, not self.pre, pre_key)

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __le__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() > other._sort_key()

    def __ge__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() >= other._sort_key()

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{'.'.join(self.pre)}" if self.pre else base


class CompatMode(Enum):
    """
    How a generated snapshot may match the linked runtime.

    EXACT requires equal major.minor.patch. CARET admits any linked version that
    satisfies ``^candidate``.
    """

    EXACT = "exact"
    CARET = "caret"

    @classmethod
    def from_value(cls, value: str | CompatMode) -> CompatMode:
        if isinstance(value, CompatMode):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError as exc:
            allowed = sorted(m.value for m in cls)
            raise ValueError(f"compat mode must be one of {allowed} (got {value!r})") from exc


def parse_tag(tag: str) -> Version | None:
    """
    Parse an upstream release tag of the form ``v<semver>``.

    Only the last ``/`` segment is considered (``refs/tags/v0.4.0`` works).

    Returns:
        Version | None: Parsed version, or None if the tag is not a release tag.

    Examples:
        >>> str(parse_tag("refs/tags/v0.5.2"))
        '0.5.2'
        >>> parse_tag("android-v1") is None
        True
    """
    name = tag.rsplit("/", 1)[-1]
    if not name.startswith("v"):
        return None
    try:
        return Version.parse(name[1:])
    except ValueError:
        return None


def is_compatible(candidate: Version, linked: Version, mode: CompatMode) -> bool:
    """
    Check whether snapshot ``candidate`` may be used with runtime ``linked``.

    Args:
        candidate (Version): Version of a generated snapshot.
        linked (Version): Version of the linked runtime.
        mode (CompatMode): Matching rule.

    Returns:
        bool: True if compatible under ``mode``.
    """
    if mode is CompatMode.EXACT:
        return candidate.triple == linked.triple
    if linked.triple < candidate.triple or linked.major != candidate.major:
        return False
    if candidate.major == 0:
        if linked.minor != candidate.minor:
            return False
        if candidate.minor == 0:
            return linked.patch == candidate.patch
    return True


def resolve(available: Iterable[Version], linked: Version, mode: CompatMode) -> Version:
    """
    Select the greatest snapshot version compatible with the linked runtime.

    Args:
        available (Iterable[Version]): Versions of every generated snapshot.
        linked (Version): Version of the linked runtime.
        mode (CompatMode): Matching rule.

    Returns:
        Version: The maximum compatible candidate.

    Raises:
        VersionMismatch: If no candidate is compatible; lists every candidate.
    """
    candidates = sorted(available)
    matching = [c for c in candidates if is_compatible(c, linked, mode)]
    if not matching:
        raise VersionMismatch(linked, mode.value, candidates)
    return max(matching)
