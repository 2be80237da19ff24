"""
ControlValue: the runtime tagged union exchanged with the camera runtime.

A ControlValue carries its ControlType tag next to its data. Every kind except
String holds an ordered tuple of elements (one element in the common scalar case);
String holds a ``str``. Values are immutable once built and never reference native
memory: camctl.runtime.codec copies out of a cell on decode.

Extraction
----------
Typed extraction always checks the tag first, then the element count, and only then
touches the data, so a mismatched value never gets reinterpreted:

- ``to_scalar(kind)``: tag match and exactly one element.
- ``to_array(kind, n)``: tag match and exactly ``n`` elements.
- ``to_matrix(kind, rows, cols)``: tag match and ``rows * cols`` elements, row-major.
- ``to_list(kind)``: tag match, any count (including zero).
- ``to_string()``: String tag.

Failures raise InvalidType(expected, found) or InvalidLength(expected, found).

Examples
--------
>>> from camctl.core.types import ControlType
>>> v = ControlValue.of(ControlType.INT32, [1, 2, 3, 4, 5, 6])
>>> v.to_matrix(ControlType.INT32, 2, 3)
((1, 2, 3), (4, 5, 6))
>>> ControlValue.of(ControlType.BOOL, True).to_scalar(ControlType.INT32)
Traceback (most recent call last):
...
camctl.runtime.errors.InvalidType: Expected type Int32, found Bool
"""

from __future__ import annotations

import ctypes
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Final

from camctl.core.geometry import Point, Rectangle, Size
from camctl.core.types import ControlType, TypeDescriptor

from .errors import InvalidData, InvalidLength, InvalidType, UnknownType
from .native import ELEMENT_CTYPES, to_native

__all__ = ["ControlValue"]

_GEOMETRY: Final[dict[ControlType, type]] = {
    ControlType.RECTANGLE: Rectangle,
    ControlType.SIZE: Size,
    ControlType.POINT: Point,
}

_INT32: Final = (-(2**31), 2**31 - 1)
_UINT32: Final = (0, 2**32 - 1)

# Field -> inclusive range of the native struct member it is stored in.
_GEOMETRY_FIELDS: Final[dict[ControlType, tuple[tuple[str, tuple[int, int]], ...]]] = {
    ControlType.RECTANGLE: (("x", _INT32), ("y", _INT32), ("width", _UINT32), ("height", _UINT32)),
    ControlType.SIZE: (("width", _UINT32), ("height", _UINT32)),
    ControlType.POINT: (("x", _INT32), ("y", _INT32)),
}


def _coerce_element(kind: ControlType, element: Any) -> Any:
    if kind is ControlType.BOOL:
        if not isinstance(element, bool):
            raise TypeError(f"Bool element must be bool, got {type(element).__name__}")
        return element
    if kind.is_integer:
        if isinstance(element, bool) or not isinstance(element, int):
            raise TypeError(f"{kind.label} element must be int, got {type(element).__name__}")
        lo, hi = kind.int_range
        if not lo <= element <= hi:
            raise InvalidData(f"{element} out of range for {kind.label}")
        return int(element)
    if kind is ControlType.FLOAT:
        if isinstance(element, bool) or not isinstance(element, (int, float)):
            raise TypeError(f"Float element must be a number, got {type(element).__name__}")
        # Stored at single precision so values survive a native round trip unchanged.
        return ctypes.c_float(float(element)).value
    cls = _GEOMETRY[kind]
    if not isinstance(element, cls):
        raise TypeError(f"{kind.label} element must be {cls.__name__}, got {type(element).__name__}")
    for field_name, (lo, hi) in _GEOMETRY_FIELDS[kind]:
        v = getattr(element, field_name)
        if isinstance(v, bool) or not isinstance(v, int):
            raise TypeError(f"{kind.label}.{field_name} must be int, got {type(v).__name__}")
        if not lo <= v <= hi:
            raise InvalidData(f"{kind.label}.{field_name} {v} out of range")
    return element


def _flatten(obj: Any) -> list[Any]:
    if isinstance(obj, (list, tuple)):
        out: list[Any] = []
        for item in obj:
            out.extend(_flatten(item))
        return out
    return [obj]


@dataclass(frozen=True)
class ControlValue:
    """
    Tagged value over {None, Bool, Byte, Int32, Int64, Float, String, Rectangle, Size, Point}.

    Attributes:
        type (ControlType): Tag.
        data (tuple | str): Elements in storage order, or the text of a String value.

    Raises:
        UnknownType: If ``type`` is not a known tag.
        TypeError: If an element has the wrong Python type for the tag.
        InvalidData: If an integer element or geometry field is out of range for the tag.
    """

    type: ControlType
    data: tuple[Any, ...] | str = ()

    def __post_init__(self) -> None:
        try:
            kind = ControlType(self.type)
        except ValueError:
            raise UnknownType(int(self.type)) from None
        object.__setattr__(self, "type", kind)

        if kind is ControlType.STRING:
            if not isinstance(self.data, str):
                raise TypeError(f"String value must hold str, got {type(self.data).__name__}")
            return
        if isinstance(self.data, (str, bytes)):
            raise TypeError(f"{kind.label} value must hold a sequence of elements")
        data = tuple(self.data)
        if kind is ControlType.NONE:
            if data:
                raise InvalidData("None value cannot hold elements")
        else:
            data = tuple(_coerce_element(kind, e) for e in data)
        object.__setattr__(self, "data", data)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def none(cls) -> ControlValue:
        return cls(ControlType.NONE, ())

    @classmethod
    def of(cls, kind: ControlType, value: Any) -> ControlValue:
        """
        Build a value from a Python object.

        Scalars become one element, nested lists/tuples are flattened row-major, and
        String takes a ``str``.

        Examples:
            >>> ControlValue.of(ControlType.INT32, 3)
            ControlValue.Int32([3])
            >>> ControlValue.of(ControlType.FLOAT, [[1.0, 0.0], [0.0, 1.0]]).element_count
            4
        """
        kind = ControlType(kind)
        if kind is ControlType.STRING:
            return cls(kind, value)
        if kind is ControlType.NONE:
            return cls.none()
        return cls(kind, tuple(_flatten(value)))

    @classmethod
    def pack(cls, descriptor: TypeDescriptor, obj: Any) -> ControlValue:
        """
        Build a value from the Python shape described by ``descriptor``.

        Raises:
            InvalidLength: If a fixed-shape object holds the wrong number of elements.
        """
        kind = descriptor.kind
        shape = descriptor.shape
        if kind is ControlType.STRING:
            return cls(kind, obj)
        if shape.is_scalar:
            return cls(kind, (obj,))
        if shape.dynamic:
            return cls(kind, tuple(obj))
        flat = _flatten(obj)
        expected = shape.element_count or 0
        if len(flat) != expected:
            raise InvalidLength(expected, len(flat))
        return cls(kind, tuple(flat))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def element_count(self) -> int:
        """Number of native elements (UTF-8 byte length for String)."""
        if isinstance(self.data, str):
            return len(self.data.encode("utf-8"))
        return len(self.data)

    @property
    def is_array(self) -> bool:
        """String is always an array; any other kind is an array unless it holds one element."""
        return self.type is ControlType.STRING or self.element_count != 1

    @cached_property
    def _native(self) -> ctypes.Array | None:
        """Native storage referenced by encoded cells; built once per value."""
        n = self.element_count
        if n == 0:
            return None
        if isinstance(self.data, str):
            return (ctypes.c_char * n).from_buffer_copy(self.data.encode("utf-8"))
        ctype = ELEMENT_CTYPES[self.type]
        return (ctype * n)(*(to_native(self.type, e) for e in self.data))

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def _check_type(self, kind: ControlType) -> None:
        if self.type is not kind:
            raise InvalidType(kind, self.type)

    def _check_length(self, expected: int) -> None:
        if len(self.data) != expected:
            raise InvalidLength(expected, len(self.data))

    def to_scalar(self, kind: ControlType) -> Any:
        self._check_type(kind)
        if kind is ControlType.STRING:
            return self.data
        self._check_length(1)
        return self.data[0]

    def to_array(self, kind: ControlType, n: int) -> tuple[Any, ...]:
        self._check_type(kind)
        self._check_length(n)
        return tuple(self.data)

    def to_matrix(self, kind: ControlType, rows: int, cols: int) -> tuple[tuple[Any, ...], ...]:
        """Extract ``rows`` rows of ``cols`` elements, consuming storage row-major."""
        return self.to_nested(kind, (cols, rows))

    def to_nested(self, kind: ControlType, dims: Sequence[int]) -> Any:
        """
        Extract a fixed N-D array; ``dims[0]`` is the innermost dimension.

        Examples:
            >>> ControlValue.of(ControlType.BYTE, [0, 1, 2, 3, 4, 5]).to_nested(ControlType.BYTE, (2, 3))
            ((0, 1), (2, 3), (4, 5))
        """
        self._check_type(kind)
        total = 1
        for d in dims:
            total *= d
        self._check_length(total)
        items: list[Any] = list(self.data)
        for d in dims:
            items = [tuple(items[i : i + d]) for i in range(0, len(items), d)]
        return items[0] if items else ()

    def to_list(self, kind: ControlType) -> list[Any]:
        self._check_type(kind)
        if isinstance(self.data, str):
            return list(self.data.encode("utf-8"))
        return list(self.data)

    def to_string(self) -> str:
        self._check_type(ControlType.STRING)
        return self.data  # type: ignore[return-value]

    def extract(self, descriptor: TypeDescriptor) -> Any:
        """Extract the Python shape described by ``descriptor`` (inverse of ``pack``)."""
        kind = descriptor.kind
        shape = descriptor.shape
        if kind is ControlType.STRING:
            return self.to_string()
        if shape.is_scalar:
            return self.to_scalar(kind)
        if shape.dynamic:
            return self.to_list(kind)
        return self.to_nested(kind, shape.dims)

    def __repr__(self) -> str:
        if self.type is ControlType.NONE:
            return "ControlValue.None()"
        if isinstance(self.data, str):
            return f"ControlValue.String({self.data!r})"
        return f"ControlValue.{self.type.label}({list(self.data)!r})"
