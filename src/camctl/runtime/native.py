"""
ctypes mirrors of the runtime's C structures.

The layouts follow the C API headers (``libcamera_point``, ``libcamera_size``,
``libcamera_rectangle``) and the tagged cell exchanged at the runtime boundary:

    struct control_cell {
        uint32_t type;          /* enum libcamera_control_type */
        bool     is_array;
        size_t   num_elements;
        const void *data;
    };

Geometry conversions live here so that camctl.core.geometry stays free of any
native layout.
"""

from __future__ import annotations

import ctypes
from typing import Any, Final

from camctl.core.geometry import Point, Rectangle, Size
from camctl.core.types import ControlType

__all__ = [
    "NativePoint",
    "NativeSize",
    "NativeRectangle",
    "ControlCell",
    "ELEMENT_CTYPES",
    "to_native",
    "from_native",
]


class NativePoint(ctypes.Structure):
    _fields_ = [("x", ctypes.c_int32), ("y", ctypes.c_int32)]


class NativeSize(ctypes.Structure):
    _fields_ = [("width", ctypes.c_uint32), ("height", ctypes.c_uint32)]


class NativeRectangle(ctypes.Structure):
    _fields_ = [
        ("x", ctypes.c_int32),
        ("y", ctypes.c_int32),
        ("width", ctypes.c_uint32),
        ("height", ctypes.c_uint32),
    ]


class ControlCell(ctypes.Structure):
    """A tagged cell: tag, array flag, element count, and a borrowed data pointer."""

    _fields_ = [
        ("type", ctypes.c_uint32),
        ("is_array", ctypes.c_bool),
        ("num_elements", ctypes.c_size_t),
        ("data", ctypes.c_void_p),
    ]


# Native element type per tag. STRING is carried as raw UTF-8 bytes and NONE has no payload.
ELEMENT_CTYPES: Final[dict[ControlType, Any]] = {
    ControlType.BOOL: ctypes.c_bool,
    ControlType.BYTE: ctypes.c_uint8,
    ControlType.INT32: ctypes.c_int32,
    ControlType.INT64: ctypes.c_int64,
    ControlType.FLOAT: ctypes.c_float,
    ControlType.RECTANGLE: NativeRectangle,
    ControlType.SIZE: NativeSize,
    ControlType.POINT: NativePoint,
}


def to_native(kind: ControlType, element: Any) -> Any:
    """Convert one Python element into the initializer ctypes expects for ``kind``."""
    if kind is ControlType.RECTANGLE:
        return NativeRectangle(element.x, element.y, element.width, element.height)
    if kind is ControlType.SIZE:
        return NativeSize(element.width, element.height)
    if kind is ControlType.POINT:
        return NativePoint(element.x, element.y)
    return element


def from_native(kind: ControlType, native: Any) -> Any:
    """Copy one native element out into its Python value."""
    if kind is ControlType.RECTANGLE:
        return Rectangle(native.x, native.y, native.width, native.height)
    if kind is ControlType.SIZE:
        return Size(native.width, native.height)
    if kind is ControlType.POINT:
        return Point(native.x, native.y)
    return native
