"""
Pydantic v2 models for schema snapshots: control definitions, enum variants, and snapshots.

A Snapshot is the complete set of control and property definitions declared by one
upstream release. Definitions are created by parsing one schema entry and are
immutable thereafter.

Responsibilities
- Define the canonical models consumed by the code generator and the schema interpreter.
- Normalize alias-tolerant type names and ``size`` specs (via camctl.core.types).
- Enforce per-entry rules (valid names, enum on integer kinds, unique variant names)
  and per-category rules (unique control names).

Style
- Zero-IO (stdlib + pydantic only). YAML parsing lives in camctl.io.loader.
- Typed errors from the type mapper propagate unchanged from ``from_schema_entry``;
  direct construction reports violations as pydantic.ValidationError.

Examples
--------
>>> from camctl.core.schema import ControlDefinition
>>> d = ControlDefinition.from_schema_entry(
...     "AeMeteringMode",
...     {"type": "int32", "description": "Metering.", "enum": [
...         {"name": "MeteringCentreWeighted", "value": 0, "description": "Centre."},
...     ]},
... )
>>> d.linkage_name, d.variant_names()
('AE_METERING_MODE', ['MeteringCentreWeighted'])
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import CORE_VENDOR, CONTROLS_FILE_PREFIX, DRAFT_VENDOR, PROPERTIES_FILE_PREFIX
from .constants import VENDOR_FEATURE_PREFIX
from .errors import SchemaError
from .naming import assert_schema_name, is_lower_snake, linkage_name, transform_identifier
from .naming import variant_name
from .types import ControlType, Dimensionality, TypeDescriptor, map_dimensionality, map_type
from .versioning import Version

__all__ = [
    "Category",
    "EnumVariant",
    "ControlDefinition",
    "Snapshot",
]


class Category(Enum):
    """
    The two control surfaces of the runtime.

    Controls are typically settable per request; properties are static and
    read-only. Each gets its own discriminant catalogue and generated module.
    """

    CONTROLS = "controls"
    PROPERTIES = "properties"

    @property
    def id_enum(self) -> str:
        return "ControlId" if self is Category.CONTROLS else "PropertyId"

    @property
    def marker(self) -> str:
        """Name of the runtime marker base class (camctl.runtime.control)."""
        return "Control" if self is Category.CONTROLS else "Property"

    @property
    def file_prefix(self) -> str:
        return CONTROLS_FILE_PREFIX if self is Category.CONTROLS else PROPERTIES_FILE_PREFIX

    @property
    def c_enum(self) -> str:
        return "libcamera_control_id" if self is Category.CONTROLS else "libcamera_property_id"

    @property
    def c_prefix(self) -> str:
        return "LIBCAMERA_CONTROL_ID_" if self is Category.CONTROLS else "LIBCAMERA_PROPERTY_ID_"

    @classmethod
    def from_value(cls, value: str | Category) -> Category:
        if isinstance(value, Category):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError as exc:
            raise ValueError(
                f"category must be one of {sorted(c.value for c in cls)} (got {value!r})"
            ) from exc


class EnumVariant(BaseModel):
    """
    One enumerator of an ``enum`` control.

    Attributes:
        name (str): Schema name, usually prefixed by the owning control's name.
        value (int): Signed integer value.
        description (str): Human description.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    value: int
    description: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: Any) -> str:
        return assert_schema_name(str(v or ""), "enumerator name")


class ControlDefinition(BaseModel):
    """
    A single control or property as declared by one schema entry.

    Attributes:
        name (str): PascalCase schema name (e.g., "AeEnable").
        vendor (str): Owning vendor; CORE_VENDOR entries are never feature-gated.
        kind (ControlType): Scalar kind of each element.
        description (str): Human description (becomes the generated docstring).
        dimensionality (Dimensionality): Scalar, fixed N-D, or dynamic 1-D.
        enumeration (tuple[EnumVariant, ...] | None): Closed set of values, if any.

    Raises:
        pydantic.ValidationError: On invalid names, vendor tags, enumerations on a
            non-integer kind, or duplicate generated variant names.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    vendor: str = CORE_VENDOR
    kind: ControlType
    description: str = ""
    dimensionality: Dimensionality = Field(default_factory=Dimensionality.scalar)
    enumeration: tuple[EnumVariant, ...] | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: Any) -> str:
        return assert_schema_name(str(v or ""))

    @field_validator("vendor", mode="before")
    @classmethod
    def _check_vendor(cls, v: Any) -> str:
        s = str(v or "").strip()
        if not is_lower_snake(s):
            raise ValueError(f"vendor must be lower_snake, got {v!r}")
        return s

    @field_validator("kind", mode="before")
    @classmethod
    def _map_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return map_type(v)
        return v

    @model_validator(mode="after")
    def _check_enumeration(self) -> ControlDefinition:
        if self.enumeration is None:
            return self
        if not self.kind.is_integer:
            raise SchemaError(f"{self.name}: enum requires an integer type, got {self.kind.label}")
        if not self.dimensionality.is_scalar:
            raise SchemaError(f"{self.name}: enum controls must be scalar")
        lo, hi = self.kind.int_range
        out_of_range = [v.name for v in self.enumeration if not lo <= v.value <= hi]
        if out_of_range:
            raise SchemaError(f"{self.name}: enum values of {out_of_range} out of range for {self.kind.label}")
        names = self.variant_names()
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SchemaError(f"{self.name}: duplicate enum variant names {duplicates}")
        return self

    # ------------------------------------------------------------------
    # Derived names
    # ------------------------------------------------------------------

    @property
    def is_core(self) -> bool:
        return self.vendor == CORE_VENDOR

    @property
    def is_enum(self) -> bool:
        return self.enumeration is not None

    @property
    def feature(self) -> str | None:
        """Feature gating this definition, or None for core controls."""
        return None if self.is_core else f"{VENDOR_FEATURE_PREFIX}{self.vendor}"

    @property
    def linkage_name(self) -> str:
        return linkage_name(self.name)

    @property
    def c_name(self) -> str:
        return transform_identifier(self.name)

    @property
    def descriptor(self) -> TypeDescriptor:
        return TypeDescriptor(self.kind, self.dimensionality)

    def variant_names(self) -> list[str]:
        """Generated member names, in schema order."""
        return [variant_name(v.name, self.name) for v in self.enumeration or ()]

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def from_schema_entry(
        cls, name: str, entry: Mapping[str, Any], vendor: str | None = None
    ) -> ControlDefinition:
        """
        Build a definition from one ``{Name: {...}}`` schema entry.

        Args:
            name (str): Control name (the entry's key).
            entry (Mapping[str, Any]): Entry body with ``type``, ``description``, and
                optional ``size``, ``enum``, ``draft``.
            vendor (str | None): Vendor declared by the enclosing document, if any.

        Returns:
            ControlDefinition

        Raises:
            SchemaError: If the entry is not a mapping or lacks ``type``.
            TypeMappingError: If ``type`` is not a known alias.
            DimensionalityError: If ``size`` is invalid.
        """
        if not isinstance(entry, Mapping):
            raise SchemaError(f"{name}: entry must be a mapping, got {type(entry).__name__}")
        if "type" not in entry:
            raise SchemaError(f"{name}: missing 'type'")
        if vendor is None:
            vendor = DRAFT_VENDOR if entry.get("draft") is True else CORE_VENDOR

        enumeration = entry.get("enum")
        if enumeration is not None and not isinstance(enumeration, list):
            raise SchemaError(f"{name}: 'enum' must be a list")

        return cls(
            name=name,
            vendor=vendor,
            kind=map_type(entry["type"]),
            description=str(entry.get("description") or "").strip(),
            dimensionality=map_dimensionality(entry.get("size")),
            enumeration=tuple(EnumVariant.model_validate(e) for e in enumeration)
            if enumeration is not None
            else None,
        )


class Snapshot(BaseModel):
    """
    Every control and property definition of one upstream release.

    Attributes:
        version (Version): Upstream release version.
        controls (tuple[ControlDefinition, ...]): Controls in schema order.
        properties (tuple[ControlDefinition, ...]): Properties in schema order.

    Raises:
        pydantic.ValidationError: If a category declares the same name twice.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    version: Version
    controls: tuple[ControlDefinition, ...] = ()
    properties: tuple[ControlDefinition, ...] = ()

    @model_validator(mode="after")
    def _check_unique_names(self) -> Snapshot:
        for category in Category:
            seen: set[str] = set()
            for d in self.definitions(category):
                if d.name in seen:
                    raise SchemaError(f"duplicate {category.value} entry {d.name!r} in {self.version}")
                seen.add(d.name)
        return self

    def definitions(self, category: Category) -> tuple[ControlDefinition, ...]:
        return self.controls if category is Category.CONTROLS else self.properties

    def linkage_ids(self, category: Category) -> dict[str, int]:
        """
        Linkage constant values as numbered in generated headers.

        Ids are sequential in schema order starting at 1, vendor entries included.
        """
        return {d.linkage_name: i for i, d in enumerate(self.definitions(category), start=1)}

    def vendors(self) -> list[str]:
        """Vendors present in this snapshot, core first."""
        found = {d.vendor for c in Category for d in self.definitions(c)}
        return sorted(found, key=lambda v: (v != CORE_VENDOR, v))
