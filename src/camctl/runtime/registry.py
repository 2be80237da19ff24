"""
Dynamic (type-erased) registry used for collection-level introspection.

A DynRegistry wraps one category's discriminant catalogue and its ``make_dyn``
dispatcher. ``describe(raw_id, value)`` first interprets ``raw_id`` as a known
discriminant, then attempts the typed conversion; when either step fails it falls
back to a RawEntry holding the original (id, value) pair, so walking a collection
never aborts on one bad entry.

Unknown ids are the normal case for vendor controls compiled out of this build, or
for controls a newer runtime knows and this snapshot does not; they are logged at
debug level and never raised.

Examples
--------
>>> from camctl.core.types import ControlType
>>> from camctl.runtime.value import ControlValue
>>> class Ids(DiscriminantEnum):
...     Brightness = 1
>>> reg = DynRegistry("controls", Ids, lambda id, v: v)
>>> reg.describe(99, ControlValue.of(ControlType.INT32, 3))
RawEntry(99, ControlValue.Int32([3]))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import polars as pl

from .control import DiscriminantEnum
from .errors import ControlNotFound, ControlValueError
from .value import ControlValue

__all__ = ["DynEntry", "RawEntry", "DynRegistry"]

logger = logging.getLogger(__name__)


@runtime_checkable
class DynEntry(Protocol):
    """Anything exposing a numeric id and a ControlValue."""

    def id(self) -> int: ...

    def value(self) -> ControlValue: ...


@dataclass(frozen=True)
class RawEntry:
    """
    Untyped fallback for an (id, value) pair that could not be interpreted.

    Attributes:
        raw_id (int): Numeric id as delivered by the runtime.
        raw_value (ControlValue): Value as decoded.
        name (str | None): Catalogue name when the id is known but conversion failed.
        error (str | None): Conversion failure message, if any.
    """

    raw_id: int
    raw_value: ControlValue
    name: str | None = None
    error: str | None = None

    def id(self) -> int:
        return self.raw_id

    def value(self) -> ControlValue:
        return self.raw_value

    def __repr__(self) -> str:
        return f"RawEntry({self.name or self.raw_id}, {self.raw_value!r})"


class DynRegistry:
    """
    Introspection over one category.

    Args:
        category (str): "controls" or "properties".
        ids (type[DiscriminantEnum]): Catalogue used to recognise raw ids.
        make_dyn (Callable): ``make_dyn(id, value) -> DynEntry``; raises on failure.
    """

    def __init__(
        self,
        category: str,
        ids: type[DiscriminantEnum],
        make_dyn: Callable[[Any, ControlValue], DynEntry],
    ) -> None:
        self.category = category
        self.ids = ids
        self._make_dyn = make_dyn

    def lookup(self, raw_id: int) -> DiscriminantEnum | None:
        return self.ids.lookup(int(raw_id))

    def describe(self, raw_id: int, value: ControlValue) -> DynEntry:
        """Typed handle for (raw_id, value), or a RawEntry when it cannot be interpreted."""
        key = self.lookup(raw_id)
        if key is None:
            logger.debug("%s: unknown id %s", self.category, raw_id)
            return RawEntry(int(raw_id), value)
        try:
            return self._make_dyn(key, value)
        except (ControlValueError, ControlNotFound) as exc:
            logger.debug("%s: %s did not convert: %s", self.category, key.name, exc)
            return RawEntry(int(raw_id), value, name=key.name, error=str(exc))

    def describe_all(self, items: Iterable[tuple[int, ControlValue]]) -> list[DynEntry]:
        return [self.describe(raw_id, value) for raw_id, value in items]

    def _label(self, raw_id: int, entry: DynEntry) -> str:
        if isinstance(entry, RawEntry):
            return entry.name or str(raw_id)
        key = self.lookup(raw_id)
        return key.name if key is not None else str(raw_id)

    def format(self, items: Iterable[tuple[int, ControlValue]]) -> str:
        """Debug rendering ``{Name: entry, ...}``; unknown ids render by number."""
        parts = []
        for raw_id, value in items:
            entry = self.describe(raw_id, value)
            shown = entry.raw_value if isinstance(entry, RawEntry) else entry
            parts.append(f"{self._label(raw_id, entry)}: {shown!r}")
        return "{" + ", ".join(parts) + "}"

    def to_frame(self, items: Iterable[tuple[int, ControlValue]]) -> pl.DataFrame:
        """
        One row per entry.

        Columns: id (Int64), name (Utf8, null for unknown ids), type (Utf8),
        typed (Boolean, False for raw fallbacks), value (Utf8 repr).
        """
        rows: dict[str, list[Any]] = {"id": [], "name": [], "type": [], "typed": [], "value": []}
        for raw_id, value in items:
            entry = self.describe(raw_id, value)
            raw = isinstance(entry, RawEntry)
            key = self.lookup(raw_id)
            rows["id"].append(int(raw_id))
            rows["name"].append(key.name if key is not None else None)
            rows["type"].append(value.type.label)
            rows["typed"].append(not raw)
            rows["value"].append(repr(entry.value() if raw else entry))
        return pl.DataFrame(
            rows,
            schema={
                "id": pl.Int64,
                "name": pl.Utf8,
                "type": pl.Utf8,
                "typed": pl.Boolean,
                "value": pl.Utf8,
            },
        )
