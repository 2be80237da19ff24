"""
Core exception types raised by schema parsing, code generation, and version resolution.

Provides typed exceptions for build-time failures:
- SchemaError for unparseable documents, duplicate names, and invalid entries.
- TypeMappingError for unknown scalar type aliases.
- DimensionalityError for invalid ``size`` specs.
- GrammarError for identifier/naming violations.
- GenerationError when emitted source fails to compile.
- VersionMismatch when no generated snapshot matches the linked runtime.
- LinkError when the linked runtime lacks a constant referenced by generated code.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - All of these are fatal at build time; runtime conversion failures live in
      camctl.runtime.errors and are recoverable.

Examples:
    Catch an unknown type alias.

    >>> from camctl.core.errors import TypeMappingError
    >>> from camctl.core.types import map_type
    >>> try:
    ...     map_type("quaternion")
    ... except TypeMappingError as e:
    ...     msg = str(e)
    >>> "quaternion" in msg
    True
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

__all__ = [
    "SchemaError",
    "TypeMappingError",
    "DimensionalityError",
    "GrammarError",
    "GenerationError",
    "VersionMismatch",
    "LinkError",
]


class SchemaError(ValueError):
    """Schema document failure (parse error, missing field, duplicate control)."""


class TypeMappingError(SchemaError):
    """Schema type name that does not map to a known scalar kind."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown control type {name!r}")
        self.name = name


class DimensionalityError(SchemaError):
    """Invalid ``size`` specification (empty, non-positive, or misplaced ``n``)."""

    def __init__(self, spec: Any, reason: str) -> None:
        super().__init__(f"invalid size spec {spec!r}: {reason}")
        self.spec = spec
        self.reason = reason


class GrammarError(ValueError):
    """Identifier/naming failure (e.g., control name is not a valid identifier)."""


class GenerationError(RuntimeError):
    """Emitted source failed to compile; no artifact is written."""


class VersionMismatch(RuntimeError):
    """No generated snapshot is compatible with the linked runtime version."""

    def __init__(self, linked: Any, mode: Any, available: Iterable[Any]) -> None:
        self.linked = linked
        self.mode = mode
        self.available = list(available)
        listing = "\n".join(f"\t{v}" for v in self.available) or "\t<none>"
        super().__init__(
            f"Unsupported version of libcamera detected: {linked} (mode={mode})\n"
            f"supported versions are: \n{listing}"
        )


class LinkError(RuntimeError):
    """Generated code referenced a constant the linked runtime does not define."""

    def __init__(self, category: str, name: str, reason: str | None = None) -> None:
        super().__init__(reason or f"linked runtime defines no {category} constant {name!r}")
        self.category = category
        self.name = name
