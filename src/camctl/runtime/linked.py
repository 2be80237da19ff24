"""
The linked runtime: integer values of every control and property constant.

Generated modules never invent discriminant values. Each catalogue member is a
reference such as ``_ids.AE_ENABLE`` that is resolved here, at import time, against
the constants the linked runtime was compiled with. Those constants are read from
the runtime's C header (``LIBCAMERA_CONTROL_ID_AE_ENABLE = 1,``) or, for a runtime
built from one of our own snapshots, derived from that snapshot.

Responsibilities
- Parse linkage constants (and the version, when present) from a C header.
- Hold the process-wide active LinkedRuntime.
- Hand generated modules a LinkageTable whose attribute lookups fail with LinkError
  when the runtime lacks a constant.

Examples
--------
>>> rt = LinkedRuntime.from_header("enum libcamera_control_id { LIBCAMERA_CONTROL_ID_AE_ENABLE = 1, };")
>>> rt.table("controls").AE_ENABLE
1
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from camctl.core.errors import LinkError
from camctl.core.schema import Category, Snapshot
from camctl.core.versioning import Version

__all__ = [
    "LinkedRuntime",
    "LinkageTable",
    "activate",
    "active",
    "linkage",
    "reset",
]

logger = logging.getLogger(__name__)

_CONSTANT_RE: Final[re.Pattern[str]] = re.compile(
    r"\b(LIBCAMERA_CONTROL_ID|LIBCAMERA_PROPERTY_ID)_([A-Z0-9_]+)\s*=\s*(0[xX][0-9a-fA-F]+|\d+)"
)
_VERSION_RE: Final[re.Pattern[str]] = re.compile(
    r"#define\s+LIBCAMERA_VERSION_(MAJOR|MINOR|PATCH)\s+(\d+)"
)


@dataclass(frozen=True)
class LinkedRuntime:
    """
    Linkage constants of one runtime build.

    Attributes:
        version (Version | None): Runtime version, if known.
        control_ids (Mapping[str, int]): Control linkage name to integer id.
        property_ids (Mapping[str, int]): Property linkage name to integer id.
    """

    version: Version | None = None
    control_ids: Mapping[str, int] = field(default_factory=dict)
    property_ids: Mapping[str, int] = field(default_factory=dict)

    def ids(self, category: Category | str) -> Mapping[str, int]:
        category = Category.from_value(category)
        return self.control_ids if category is Category.CONTROLS else self.property_ids

    def table(self, category: Category | str) -> LinkageTable:
        category = Category.from_value(category)
        return LinkageTable(category.value, self.ids(category))

    @classmethod
    def from_header(cls, source: str | os.PathLike[str], version: Version | None = None) -> LinkedRuntime:
        """
        Parse linkage constants from C header text or a header path.

        Args:
            source: Header text, or a path to a header file.
            version: Runtime version; read from ``LIBCAMERA_VERSION_*`` defines when None.

        Returns:
            LinkedRuntime
        """
        text = str(source)
        if isinstance(source, os.PathLike) or (
            "\n" not in text and "{" not in text and Path(text).is_file()
        ):
            text = Path(source).read_text(encoding="utf-8")

        controls: dict[str, int] = {}
        properties: dict[str, int] = {}
        for prefix, name, value in _CONSTANT_RE.findall(text):
            target = controls if prefix == "LIBCAMERA_CONTROL_ID" else properties
            target[name] = int(value, 16) if value[:2] in ("0x", "0X") else int(value)

        if version is None:
            parts = dict(_VERSION_RE.findall(text))
            if {"MAJOR", "MINOR", "PATCH"} <= parts.keys():
                version = Version(int(parts["MAJOR"]), int(parts["MINOR"]), int(parts["PATCH"]))

        logger.debug(
            "parsed linked runtime %s: %d controls, %d properties",
            version,
            len(controls),
            len(properties),
        )
        return cls(version=version, control_ids=controls, property_ids=properties)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> LinkedRuntime:
        """Runtime whose constants are numbered exactly as the snapshot's generated header."""
        return cls(
            version=snapshot.version,
            control_ids=snapshot.linkage_ids(Category.CONTROLS),
            property_ids=snapshot.linkage_ids(Category.PROPERTIES),
        )


class LinkageTable:
    """
    Attribute view over one category's linkage constants.

    ``table.AE_ENABLE`` returns the runtime's integer id, or raises LinkError when the
    runtime does not define the constant.
    """

    __slots__ = ("_category", "_ids")

    def __init__(self, category: str, ids: Mapping[str, int]) -> None:
        self._category = category
        self._ids = dict(ids)

    def __getattr__(self, name: str) -> int:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._ids[name]
        except KeyError:
            raise LinkError(self._category, name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def names(self) -> list[str]:
        return sorted(self._ids)

    def __repr__(self) -> str:
        return f"LinkageTable({self._category!r}, {len(self._ids)} constants)"


_active: LinkedRuntime | None = None


def activate(runtime: LinkedRuntime) -> LinkedRuntime:
    """Make ``runtime`` the process-wide linked runtime."""
    global _active
    _active = runtime
    logger.debug("linked runtime activated (version %s)", runtime.version)
    return runtime


def active() -> LinkedRuntime:
    """
    The process-wide linked runtime.

    When nothing was activated, the header named by ``runtime_header`` in
    CamctlSettings is parsed.

    Raises:
        LinkError: If no runtime was activated and none is configured.
    """
    if _active is not None:
        return _active
    from camctl.io.config import CamctlSettings

    header = CamctlSettings.load().runtime_header
    if not header:
        raise LinkError(
            "controls",
            "",
            "no linked runtime is active; call camctl.build.load_modules() or set runtime_header",
        )
    return activate(LinkedRuntime.from_header(Path(header)))


def linkage(category: Category | str) -> LinkageTable:
    """Linkage table of the active runtime for ``category`` (used by generated modules)."""
    return active().table(category)


def reset() -> None:
    global _active
    _active = None
