"""
Canonical scalar kinds, dimensionality specs, and the schema type mapper.

ControlType doubles as the wire tag: its integer values are the runtime's
``libcamera_control_type`` enumerators, so a decoded cell's tag converts to a
ControlType directly.

Responsibilities
- Normalize alias-tolerant schema type names (``map_type``).
- Validate ``size`` specs into Dimensionality (``map_dimensionality``).
- Describe the Python shape of a control's value (TypeDescriptor), used by
  generated code and by the schema interpreter.

Examples
--------
>>> map_type("UINT8_T") is ControlType.BYTE
True
>>> map_dimensionality([3, 3])
Dimensionality(dims=(3, 3), dynamic=False)
>>> TypeDescriptor(ControlType.FLOAT, map_dimensionality([3, 3])).python_hint()
'tuple[tuple[float, float, float], tuple[float, float, float], tuple[float, float, float]]'
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Final

from .constants import DYNAMIC_SIZE_MARKER
from .errors import DimensionalityError, TypeMappingError
from .geometry import Point, Rectangle, Size

__all__ = [
    "ControlType",
    "Dimensionality",
    "TypeDescriptor",
    "map_type",
    "map_dimensionality",
]


class ControlType(IntEnum):
    """
    Scalar kind of a control, and the native tag of a tagged cell.

    Values match ``enum libcamera_control_type`` of the runtime C API.
    """

    NONE = 0
    BOOL = 1
    BYTE = 2
    INT32 = 3
    INT64 = 4
    FLOAT = 5
    STRING = 6
    RECTANGLE = 7
    SIZE = 8
    POINT = 9

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_integer(self) -> bool:
        return self in (ControlType.BYTE, ControlType.INT32, ControlType.INT64)

    @property
    def python_type(self) -> type | None:
        return _PYTHON_TYPES[self]

    @property
    def int_range(self) -> tuple[int, int] | None:
        """Inclusive (min, max) of an integer kind, or None for other kinds."""
        return _INT_RANGES.get(self)


_LABELS: Final[dict[ControlType, str]] = {
    ControlType.NONE: "None",
    ControlType.BOOL: "Bool",
    ControlType.BYTE: "Byte",
    ControlType.INT32: "Int32",
    ControlType.INT64: "Int64",
    ControlType.FLOAT: "Float",
    ControlType.STRING: "String",
    ControlType.RECTANGLE: "Rectangle",
    ControlType.SIZE: "Size",
    ControlType.POINT: "Point",
}

_INT_RANGES: Final[dict[ControlType, tuple[int, int]]] = {
    ControlType.BYTE: (0, 2**8 - 1),
    ControlType.INT32: (-(2**31), 2**31 - 1),
    ControlType.INT64: (-(2**63), 2**63 - 1),
}

_PYTHON_TYPES: Final[dict[ControlType, type | None]] = {
    ControlType.NONE: None,
    ControlType.BOOL: bool,
    ControlType.BYTE: int,
    ControlType.INT32: int,
    ControlType.INT64: int,
    ControlType.FLOAT: float,
    ControlType.STRING: str,
    ControlType.RECTANGLE: Rectangle,
    ControlType.SIZE: Size,
    ControlType.POINT: Point,
}

# Lower-case alias -> kind. Schema documents use "int32", "Rectangle", "string", ...
_TYPE_ALIASES: Final[dict[str, ControlType]] = {
    "bool": ControlType.BOOL,
    "boolean": ControlType.BOOL,
    "byte": ControlType.BYTE,
    "uint8": ControlType.BYTE,
    "uint8_t": ControlType.BYTE,
    "u8": ControlType.BYTE,
    "int32": ControlType.INT32,
    "int32_t": ControlType.INT32,
    "i32": ControlType.INT32,
    "int64": ControlType.INT64,
    "int64_t": ControlType.INT64,
    "i64": ControlType.INT64,
    "float": ControlType.FLOAT,
    "float32": ControlType.FLOAT,
    "f32": ControlType.FLOAT,
    "string": ControlType.STRING,
    "str": ControlType.STRING,
    "rectangle": ControlType.RECTANGLE,
    "size": ControlType.SIZE,
    "point": ControlType.POINT,
}


def map_type(name: str) -> ControlType:
    """
    Map a schema type name to its ControlType (case-insensitive, alias tolerant).

    Args:
        name (str): Schema ``type`` value, e.g. "int32", "uint8_t", "Rectangle".

    Returns:
        ControlType: Canonical kind.

    Raises:
        TypeMappingError: If the name is not a known alias.
    """
    try:
        return _TYPE_ALIASES[str(name).strip().lower()]
    except KeyError as exc:
        raise TypeMappingError(str(name)) from exc


@dataclass(frozen=True, slots=True)
class Dimensionality:
    """
    Shape of a control value.

    Attributes:
        dims (tuple[int, ...]): Fixed dimensions; empty for scalars and dynamic arrays.
        dynamic (bool): True for a variable-length 1-D array.

    Notes:
        Multi-dimensional storage is flat; ``dims[0]`` is the innermost (fastest
        varying) dimension, so ``size: [3, 3]`` is three rows of three.
    """

    dims: tuple[int, ...] = ()
    dynamic: bool = False

    @classmethod
    def scalar(cls) -> Dimensionality:
        return cls()

    @classmethod
    def fixed(cls, *dims: int) -> Dimensionality:
        return map_dimensionality(list(dims))

    @classmethod
    def variable(cls) -> Dimensionality:
        return cls(dynamic=True)

    @property
    def is_scalar(self) -> bool:
        return not self.dims and not self.dynamic

    @property
    def element_count(self) -> int | None:
        """Total number of elements, or None for dynamic arrays."""
        if self.dynamic:
            return None
        count = 1
        for d in self.dims:
            count *= d
        return count

    def source(self, prefix: str = "") -> str:
        """Python expression recreating this value (used by the code generator)."""
        if self.dynamic:
            return f"{prefix}Dimensionality.variable()"
        if not self.dims:
            return f"{prefix}Dimensionality.scalar()"
        return f"{prefix}Dimensionality.fixed({', '.join(str(d) for d in self.dims)})"


def map_dimensionality(size_spec: Sequence[Any] | None) -> Dimensionality:
    """
    Validate a schema ``size`` list.

    Args:
        size_spec: None (scalar) or a list of positive ints and/or the marker "n".

    Returns:
        Dimensionality: Scalar, fixed N-D, or dynamic 1-D.

    Raises:
        DimensionalityError: Empty list, non-positive/non-integer entry, or "n"
            combined with any other dimension.

    Examples:
        >>> map_dimensionality(None).is_scalar
        True
        >>> map_dimensionality(["n"]).dynamic
        True
    """
    if size_spec is None:
        return Dimensionality.scalar()
    if isinstance(size_spec, (str, bytes)) or not isinstance(size_spec, Sequence):
        raise DimensionalityError(size_spec, "expected a list of dimensions")
    spec = list(size_spec)
    if not spec:
        raise DimensionalityError(size_spec, "array-like datatype with zero dimensions")

    dims: list[int] = []
    dynamic = False
    for entry in spec:
        if isinstance(entry, str) and entry.strip().lower() == DYNAMIC_SIZE_MARKER:
            dynamic = True
            continue
        if isinstance(entry, bool) or not isinstance(entry, int):
            raise DimensionalityError(size_spec, f"dimension {entry!r} is not an integer")
        if entry <= 0:
            raise DimensionalityError(size_spec, f"dimension {entry!r} is not positive")
        dims.append(entry)

    if dynamic:
        if len(spec) > 1:
            raise DimensionalityError(
                size_spec, "dynamic length with more than 1 dimension is not supported"
            )
        return Dimensionality.variable()
    return Dimensionality(dims=tuple(dims))


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """
    Kind plus shape of a control's value.

    Attributes:
        kind (ControlType): Element kind.
        shape (Dimensionality): Scalar, fixed, or dynamic.

    Notes:
        Strings are always a single ``str``; a dynamic size on a string control is
        accepted and means the same thing.
    """

    kind: ControlType
    shape: Dimensionality = Dimensionality()

    def python_hint(self) -> str:
        """
        Type annotation text for the Python value of this descriptor.

        Examples:
            >>> TypeDescriptor(ControlType.RECTANGLE, Dimensionality.variable()).python_hint()
            'list[Rectangle]'
        """
        inner = self.kind.python_type.__name__ if self.kind.python_type else "None"
        if self.kind is ControlType.STRING or self.shape.is_scalar:
            return inner
        if self.shape.dynamic:
            return f"list[{inner}]"
        hint = inner
        for d in self.shape.dims:
            hint = f"tuple[{', '.join([hint] * d)}]" if d <= 4 else f"tuple[{hint}, ...]"
        return hint

    def source(self, prefix: str = "") -> str:
        """
        Python expression recreating this descriptor (used by the code generator).

        Args:
            prefix (str): Qualifier for the names, e.g. "_types." when the module is
                imported under an alias.
        """
        return (
            f"{prefix}TypeDescriptor({prefix}ControlType.{self.kind.name}, {self.shape.source(prefix)})"
        )
