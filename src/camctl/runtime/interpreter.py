"""
Schema interpreter: the runtime lookup-table alternative to generated modules.

Generated modules dispatch over a closed, per-release set of classes. The
SchemaInterpreter instead builds an ``id -> decoder`` table from a Snapshot loaded
at runtime, so one program can serve several runtime versions without regenerating
code. It gives up static per-control types: decoded entries are InterpretedEntry
handles carrying the definition alongside the Python value.

Both expose the same ``make_dyn(id, value)`` contract and plug into DynRegistry.

Examples
--------
>>> from camctl.core.schema import ControlDefinition, Snapshot
>>> from camctl.core.types import ControlType
>>> from camctl.core.versioning import Version
>>> snap = Snapshot(version=Version(0, 4, 0), controls=(
...     ControlDefinition.from_schema_entry("Brightness", {"type": "float"}),
... ))
>>> interp = SchemaInterpreter(snap, "controls", features=())
>>> interp.make_dyn(1, ControlValue.of(ControlType.FLOAT, 0.5))
Brightness(0.5)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from functools import partial
from typing import Any

from camctl.core.errors import LinkError
from camctl.core.schema import Category, ControlDefinition, Snapshot

from . import features as _features
from .control import DiscriminantEnum
from .errors import ControlNotFound, UnknownVariant
from .linked import LinkedRuntime
from .registry import DynRegistry
from .value import ControlValue

__all__ = ["InterpretedEntry", "SchemaInterpreter"]

logger = logging.getLogger(__name__)


class InterpretedEntry:
    """Type-erased entry decoded against a ControlDefinition."""

    __slots__ = ("definition", "raw_id", "payload")

    def __init__(self, definition: ControlDefinition, raw_id: int, payload: Any) -> None:
        self.definition = definition
        self.raw_id = raw_id
        self.payload = payload

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def variant(self) -> str | None:
        """Generated variant name for enum controls."""
        if not self.definition.is_enum:
            return None
        for v, py_name in zip(self.definition.enumeration or (), self.definition.variant_names()):
            if v.value == self.payload:
                return py_name
        return None

    def id(self) -> int:
        return self.raw_id

    def value(self) -> ControlValue:
        return ControlValue.pack(self.definition.descriptor, self.payload)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InterpretedEntry):
            return NotImplemented
        return (self.raw_id, self.name, self.payload) == (other.raw_id, other.name, other.payload)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        variant = self.variant
        if variant is not None:
            return f"{self.name}.{variant}"
        return f"{self.name}({self.payload!r})"


def _decode(definition: ControlDefinition, raw_id: int, allowed: frozenset[int] | None, value: ControlValue) -> InterpretedEntry:
    payload = value.extract(definition.descriptor)
    if allowed is not None and payload not in allowed:
        raise UnknownVariant(value)
    return InterpretedEntry(definition, raw_id, payload)


class SchemaInterpreter:
    """
    Lookup table of decoders for one category of a Snapshot.

    Args:
        snapshot (Snapshot): Definitions to interpret.
        category (Category | str): "controls" or "properties".
        runtime (LinkedRuntime | None): Linkage constants; numbered from the snapshot
            when None.
        features (Iterable[str] | None): Enabled vendor features; the process-wide
            set when None.

    Raises:
        LinkError: If the runtime lacks a constant for an enabled definition.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        category: Category | str,
        runtime: LinkedRuntime | None = None,
        features: Iterable[str] | None = None,
    ) -> None:
        self.category = Category.from_value(category)
        self.snapshot = snapshot
        runtime = runtime or LinkedRuntime.from_snapshot(snapshot)
        enabled = frozenset(features) if features is not None else _features.active()
        ids = runtime.ids(self.category)

        members: list[tuple[str, int]] = []
        self._definitions: dict[int, ControlDefinition] = {}
        self._decoders: dict[int, Callable[[ControlValue], InterpretedEntry]] = {}
        for d in snapshot.definitions(self.category):
            if d.feature is not None and d.feature not in enabled:
                continue
            try:
                raw_id = ids[d.linkage_name]
            except KeyError:
                raise LinkError(self.category.value, d.linkage_name) from None
            allowed = frozenset(v.value for v in d.enumeration) if d.enumeration is not None else None
            members.append((d.name, raw_id))
            self._definitions[raw_id] = d
            self._decoders[raw_id] = partial(_decode, d, raw_id, allowed)

        self.ids: type[DiscriminantEnum] = DiscriminantEnum(  # type: ignore[call-overload]
            self.category.id_enum, names=members, module=__name__
        )
        logger.debug(
            "interpreting %d %s of %s", len(self._decoders), self.category.value, snapshot.version
        )

    def definition(self, raw_id: int) -> ControlDefinition | None:
        return self._definitions.get(int(raw_id))

    def decoder(self, raw_id: int) -> Callable[[ControlValue], InterpretedEntry]:
        try:
            return self._decoders[int(raw_id)]
        except KeyError:
            raise ControlNotFound(int(raw_id)) from None

    def make_dyn(self, raw_id: int, value: ControlValue) -> InterpretedEntry:
        """
        Decode ``value`` for ``raw_id``.

        Raises:
            ControlNotFound: If ``raw_id`` is not interpreted (unknown or gated out).
            ControlValueError: If the value does not match the definition.
        """
        return self.decoder(raw_id)(value)

    def registry(self) -> DynRegistry:
        return DynRegistry(self.category.value, self.ids, self.make_dyn)

    def __len__(self) -> int:
        return len(self._decoders)
