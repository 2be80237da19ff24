"""
Runtime conversion and lookup errors.

Everything here is recoverable: the external runtime is untrusted relative to this
layer, so a tag or arity mismatch is an expected condition surfaced as a typed
exception carrying the expected/found context. Callers decide whether to propagate,
log, or fall back to raw display (see camctl.runtime.registry).

Notes:
    - ControlValueError subclasses ValueError so callers may catch either.
    - Unknown discriminant values are not errors; only ControlList/PropertyList
      lookups of a missing id raise ControlNotFound.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "ControlValueError",
    "InvalidType",
    "InvalidLength",
    "UnknownType",
    "UnknownVariant",
    "InvalidData",
    "ControlError",
    "ControlNotFound",
]


class ControlValueError(ValueError):
    """Base class for tagged-value conversion failures."""


class InvalidType(ControlValueError):
    """The value's tag differs from the extraction target's kind."""

    def __init__(self, expected: Any, found: Any) -> None:
        super().__init__(f"Expected type {_label(expected)}, found {_label(found)}")
        self.expected = expected
        self.found = found


class InvalidLength(ControlValueError):
    """The value holds a different number of elements than the target requires."""

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(f"Expected {expected} elements, found {found}")
        self.expected = expected
        self.found = found


class UnknownType(ControlValueError):
    """A native cell carried a tag this layer does not know."""

    def __init__(self, tag: int) -> None:
        super().__init__(f"Unknown control type {tag}")
        self.tag = tag


class UnknownVariant(ControlValueError):
    """An enum control held a value outside its closed set; carries the original value."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unknown enum variant {value!r}")
        self.value = value


class InvalidData(ControlValueError):
    """Malformed payload (invalid UTF-8, null data pointer, out-of-range element)."""


class ControlError(RuntimeError):
    """Base class for control collection failures."""


class ControlNotFound(ControlError):
    """A collection holds no value for the requested id."""

    def __init__(self, id: int) -> None:
        super().__init__(f"Control id {id} not found")
        self.id = id


def _label(kind: Any) -> str:
    return getattr(kind, "label", None) or str(kind)
