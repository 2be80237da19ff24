"""
Typed control entries and the collections that carry them.

Generated modules build on the classes here:

- ``DiscriminantEnum``: base of the per-category ``ControlId`` / ``PropertyId`` catalogue.
- ``ControlWrapper``: single-field wrapper (``.value``) over a scalar, array, or struct.
- ``ControlEnum``: closed IntEnum for controls declaring ``enum``.
- ``Control`` / ``Property``: marker bases separating the two categories.
- ``bind``: decorator attaching a class to its discriminant and TypeDescriptor.

Every entry converts from a ControlValue (``from_value``, fallible) and back
(``to_value``). ControlList and PropertyList keep encoded native cells keyed by
numeric id and hand values back as copies.

Examples
--------
>>> from camctl.core.types import ControlType, TypeDescriptor
>>> @bind(1, TypeDescriptor(ControlType.BOOL))
... class AeEnable(Control, ControlWrapper):
...     value: bool
>>> AeEnable.from_value(AeEnable(True).to_value())
AeEnable(True)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

import polars as pl

from camctl.core.types import TypeDescriptor

from .codec import decode_cell, encode
from .errors import ControlNotFound, UnknownVariant
from .native import ControlCell
from .value import ControlValue

if TYPE_CHECKING:
    from .registry import DynRegistry

__all__ = [
    "ControlEntry",
    "Control",
    "Property",
    "ControlWrapper",
    "ControlEnum",
    "DiscriminantEnum",
    "DynControlEntry",
    "bind",
    "make_dyn",
    "ControlInfo",
    "ControlInfoMap",
    "ControlList",
    "PropertyList",
]

E = TypeVar("E", bound="ControlEntry")


class ControlEntry:
    """Base of every generated control type."""

    __slots__ = ()

    ID: ClassVar[int]
    TYPE: ClassVar[TypeDescriptor]

    @classmethod
    def from_value(cls: type[E], value: ControlValue) -> E:
        raise NotImplementedError

    def to_value(self) -> ControlValue:
        raise NotImplementedError


class Control(ControlEntry):
    """Marker for entries of the controls category."""

    __slots__ = ()


class Property(ControlEntry):
    """Marker for entries of the properties category."""

    __slots__ = ()


class ControlWrapper(ControlEntry):
    """
    Single-field wrapper over the control's Python value.

    ``from_value`` extracts the shape described by the class's TypeDescriptor and
    fails with InvalidType/InvalidLength on a mismatch.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    @classmethod
    def from_value(cls, value: ControlValue) -> ControlWrapper:
        return cls(value.extract(cls.TYPE))

    def to_value(self) -> ControlValue:
        return ControlValue.pack(self.TYPE, self.value)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class ControlEnum(ControlEntry, IntEnum):
    """
    Closed enumeration over an integer control.

    ``from_value`` first extracts the underlying scalar, then maps it to a member;
    a value outside the closed set raises UnknownVariant carrying the original value.
    """

    @classmethod
    def from_value(cls, value: ControlValue) -> ControlEnum:
        raw = value.to_scalar(cls.TYPE.kind)
        try:
            return cls(raw)
        except ValueError:
            raise UnknownVariant(value) from None

    def to_value(self) -> ControlValue:
        return ControlValue(self.TYPE.kind, (int(self),))

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


class DiscriminantEnum(IntEnum):
    """Numeric id catalogue of one category; member values come from the linked runtime."""

    @classmethod
    def lookup(cls, raw: int) -> DiscriminantEnum | None:
        """Member for ``raw``, or None when the id is unknown to this catalogue."""
        try:
            return cls(raw)
        except ValueError:
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


def bind(id: int, descriptor: TypeDescriptor) -> Callable[[type[E]], type[E]]:
    """Class decorator attaching ``ID`` (the discriminant) and ``TYPE`` to a control class."""

    def deco(cls: type[E]) -> type[E]:
        cls.ID = id
        cls.TYPE = descriptor
        return cls

    return deco


@dataclass(frozen=True)
class DynControlEntry:
    """
    Type-erased handle over a typed entry.

    ``value()`` round-trips through the concrete generated type.
    """

    entry: Any

    @property
    def name(self) -> str:
        return type(self.entry).__name__

    def id(self) -> int:
        return int(type(self.entry).ID)

    def value(self) -> ControlValue:
        return self.entry.to_value()

    def __repr__(self) -> str:
        return repr(self.entry)


def make_dyn(table: Mapping[int, type[ControlEntry]], id: int, value: ControlValue) -> DynControlEntry:
    """
    Dispatch ``value`` to the class bound to ``id`` in ``table``.

    Raises:
        ControlNotFound: If ``id`` is not in ``table`` (e.g., its vendor is compiled out).
        ControlValueError: If the typed conversion fails.
    """
    try:
        cls = table[id]
    except KeyError:
        raise ControlNotFound(int(id)) from None
    return DynControlEntry(cls.from_value(value))


@dataclass(frozen=True)
class ControlInfo:
    """Limits advertised for one control: minimum, maximum, default, and allowed values."""

    min: ControlValue
    max: ControlValue
    default: ControlValue
    values: tuple[ControlValue, ...] = ()


class ControlInfoMap(Mapping[int, ControlInfo]):
    """Per-camera control limits keyed by numeric id."""

    def __init__(self, infos: Mapping[int, ControlInfo], registry: DynRegistry | None = None) -> None:
        self._infos = {int(k): v for k, v in infos.items()}
        self._registry = registry

    def __getitem__(self, key: int) -> ControlInfo:
        return self._infos[int(key)]

    def __iter__(self) -> Iterator[int]:
        return iter(self._infos)

    def __len__(self) -> int:
        return len(self._infos)

    def at(self, key: int) -> ControlInfo:
        try:
            return self._infos[int(key)]
        except KeyError:
            raise ControlNotFound(int(key)) from None

    def __repr__(self) -> str:
        parts = []
        for key, info in self._infos.items():
            member = self._registry.lookup(key) if self._registry is not None else None
            parts.append(f"{member!r}: {info!r}" if member is not None else f"{key}: {info!r}")
        return "{" + ", ".join(parts) + "}"


class _CellList:
    _marker: ClassVar[type[ControlEntry]] = ControlEntry

    def __init__(self, registry: DynRegistry | None = None) -> None:
        # id -> (cell, value owning the cell's storage)
        self._cells: dict[int, tuple[ControlCell, ControlValue]] = {}
        self._registry = registry

    @classmethod
    def from_cells(cls, cells: Iterable[tuple[int, ControlCell]], registry: DynRegistry | None = None):
        """Copy runtime-owned cells into a new list."""
        out = cls(registry)
        for id, cell in cells:
            out.set_raw(id, decode_cell(cell))
        return out

    def set(self, entry: ControlEntry) -> None:
        if not isinstance(entry, self._marker):
            raise TypeError(f"{type(self).__name__} accepts {self._marker.__name__} entries, got {type(entry).__name__}")
        self.set_raw(type(entry).ID, entry.to_value())

    def set_raw(self, id: int, value: ControlValue) -> None:
        cell = ControlCell()
        encode(value, cell)
        self._cells[int(id)] = (cell, value)

    def get(self, cls: type[E]) -> E:
        """
        Typed value of ``cls``.

        Raises:
            ControlNotFound: If the list holds no value for ``cls.ID``.
            ControlValueError: If the stored value does not convert to ``cls``.
        """
        return cls.from_value(self.get_raw(cls.ID))

    def get_raw(self, id: int) -> ControlValue:
        try:
            cell, _ = self._cells[int(id)]
        except KeyError:
            raise ControlNotFound(int(id)) from None
        return decode_cell(cell)

    def cell(self, id: int) -> ControlCell:
        """Native cell for ``id``; valid while this list holds the value."""
        try:
            return self._cells[int(id)][0]
        except KeyError:
            raise ControlNotFound(int(id)) from None

    def __contains__(self, id: object) -> bool:
        return isinstance(id, int) and int(id) in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[tuple[int, ControlValue]]:
        for id, (cell, _) in self._cells.items():
            yield id, decode_cell(cell)

    def describe(self) -> list[Any]:
        if self._registry is None:
            raise ValueError(f"{type(self).__name__} has no registry")
        return self._registry.describe_all(self)

    def to_frame(self) -> pl.DataFrame:
        if self._registry is None:
            raise ValueError(f"{type(self).__name__} has no registry")
        return self._registry.to_frame(self)

    def __repr__(self) -> str:
        if self._registry is not None:
            return self._registry.format(self)
        return "{" + ", ".join(f"{id}: {value!r}" for id, value in self) + "}"


class ControlList(_CellList):
    """Controls to submit with, or read back from, a capture request."""

    _marker = Control


class PropertyList(_CellList):
    """Static camera properties."""

    _marker = Property
