"""
Decode and encode tagged native cells.

``decode`` dispatches on the tag, views ``address`` as an array of the tag's native
element type and copies every element out; the returned ControlValue never keeps a
reference to native memory. ``encode`` writes the tag, array flag, element count, and
a pointer to the value's own storage into a ControlCell.

Notes:
    - The caller holds the destination cell exclusively for the duration of ``encode``
      and keeps the encoded ControlValue alive for as long as the cell is read.
    - A zero element count never dereferences ``address``.

Examples:
    >>> from camctl.core.types import ControlType
    >>> from camctl.runtime.native import ControlCell
    >>> v = ControlValue.of(ControlType.INT64, [7, -7])
    >>> cell = ControlCell()
    >>> encode(v, cell)
    >>> decode_cell(cell) == v
    True
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any

from camctl.core.types import ControlType

from .errors import InvalidData, UnknownType
from .native import ELEMENT_CTYPES, ControlCell, from_native
from .value import ControlValue

__all__ = ["decode", "decode_cell", "encode"]

logger = logging.getLogger(__name__)


def _address(pointer: Any) -> int:
    if pointer is None:
        return 0
    if isinstance(pointer, int):
        return pointer
    if isinstance(pointer, ctypes.c_void_p):
        return pointer.value or 0
    # ctypes arrays, structures and pointers
    return ctypes.cast(pointer, ctypes.c_void_p).value or 0


def decode(tag: int, element_count: int, address: Any) -> ControlValue:
    """
    Copy a native payload into a ControlValue.

    Args:
        tag (int): ``libcamera_control_type`` value.
        element_count (int): Number of native elements (bytes for String).
        address: Data pointer as an int, ``c_void_p``, or ctypes object.

    Returns:
        ControlValue: Self-contained copy of the payload.

    Raises:
        UnknownType: If ``tag`` is not a known control type.
        InvalidData: On invalid UTF-8, a negative count, or a null pointer with a
            non-zero count.
    """
    try:
        kind = ControlType(tag)
    except ValueError:
        raise UnknownType(tag) from None

    if kind is ControlType.NONE:
        return ControlValue.none()

    n = int(element_count)
    if n < 0:
        raise InvalidData(f"negative element count {n}")
    if n == 0:
        return ControlValue(kind, "" if kind is ControlType.STRING else ())

    addr = _address(address)
    if not addr:
        raise InvalidData(f"null data pointer for {n} {kind.label} elements")

    if kind is ControlType.STRING:
        raw = ctypes.string_at(addr, n)
        try:
            return ControlValue(kind, raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise InvalidData(f"string payload is not valid UTF-8: {exc}") from exc

    array = (ELEMENT_CTYPES[kind] * n).from_address(addr)
    return ControlValue(kind, tuple(from_native(kind, e) for e in array))


def decode_cell(cell: ControlCell) -> ControlValue:
    """Decode the payload a ControlCell points at."""
    return decode(cell.type, cell.num_elements, cell.data)


def encode(value: ControlValue, cell: ControlCell) -> None:
    """
    Point ``cell`` at ``value``'s storage.

    String is always flagged as an array; every other kind is an array unless it holds
    exactly one element.
    """
    storage = value._native
    cell.type = int(value.type)
    cell.is_array = value.is_array
    cell.num_elements = value.element_count
    cell.data = ctypes.cast(storage, ctypes.c_void_p).value if storage is not None else None
    logger.debug("encoded %s into cell (%d elements)", value.type.label, cell.num_elements)
