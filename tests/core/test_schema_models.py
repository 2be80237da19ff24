from __future__ import annotations

import pytest
from pydantic import ValidationError

from camctl.core.errors import DimensionalityError, SchemaError, TypeMappingError
from camctl.core.schema import Category, ControlDefinition, EnumVariant, Snapshot
from camctl.core.types import ControlType, Dimensionality
from camctl.core.versioning import Version


def _enum_entry(kind: str = "int32", **extra) -> dict:
    return {
        "type": kind,
        "description": "Metering.",
        "enum": [
            {"name": "MeteringCentreWeighted", "value": 0, "description": "Centre."},
            {"name": "MeteringSpot", "value": 1, "description": "Spot."},
        ],
        **extra,
    }


def test_from_schema_entry_scalar() -> None:
    d = ControlDefinition.from_schema_entry(
        "AeEnable", {"type": "bool", "description": "Enable AE.\n", "direction": "inout"}
    )
    assert d.kind is ControlType.BOOL
    assert d.dimensionality.is_scalar
    assert d.description == "Enable AE."
    assert d.is_core and d.feature is None
    assert d.linkage_name == "AE_ENABLE"
    assert d.c_name == "ae_enable"


def test_from_schema_entry_array_and_enum() -> None:
    ccm = ControlDefinition.from_schema_entry("ColourCorrectionMatrix", {"type": "float", "size": [3, 3]})
    assert ccm.dimensionality == Dimensionality(dims=(3, 3))
    assert ccm.descriptor.kind is ControlType.FLOAT

    mode = ControlDefinition.from_schema_entry("AeMeteringMode", _enum_entry())
    assert mode.is_enum
    assert [v.value for v in mode.enumeration] == [0, 1]
    assert mode.variant_names() == ["MeteringCentreWeighted", "MeteringSpot"]


def test_vendor_assignment() -> None:
    core = ControlDefinition.from_schema_entry("Brightness", {"type": "float"})
    draft = ControlDefinition.from_schema_entry("PipelineDepth", {"type": "int32", "draft": True})
    rpi = ControlDefinition.from_schema_entry("PipelineDepth", {"type": "int32", "draft": True}, "rpi")
    assert core.vendor == "libcamera"
    assert draft.vendor == "draft" and draft.feature == "vendor_draft"
    assert rpi.vendor == "rpi" and rpi.feature == "vendor_rpi"


def test_entry_structure_errors() -> None:
    with pytest.raises(SchemaError, match="entry must be a mapping"):
        ControlDefinition.from_schema_entry("AeEnable", ["bool"])  # type: ignore[arg-type]
    with pytest.raises(SchemaError, match="missing 'type'"):
        ControlDefinition.from_schema_entry("AeEnable", {"description": "x"})
    with pytest.raises(SchemaError, match="'enum' must be a list"):
        ControlDefinition.from_schema_entry("AeEnable", {"type": "int32", "enum": {"a": 1}})


def test_type_and_size_errors_propagate_typed() -> None:
    with pytest.raises(TypeMappingError):
        ControlDefinition.from_schema_entry("Foo", {"type": "double"})
    with pytest.raises(DimensionalityError):
        ControlDefinition.from_schema_entry("Foo", {"type": "int32", "size": []})


def test_enum_rules() -> None:
    with pytest.raises(ValidationError, match="enum requires an integer type"):
        ControlDefinition.from_schema_entry("Foo", _enum_entry("float"))
    with pytest.raises(ValidationError, match="must be scalar"):
        ControlDefinition.from_schema_entry("Foo", _enum_entry(size=[2]))

    dup = {
        "type": "int32",
        "enum": [
            {"name": "FooManual", "value": 0},
            {"name": "Manual", "value": 1},
        ],
    }
    with pytest.raises(ValidationError, match="duplicate enum variant names"):
        ControlDefinition.from_schema_entry("Foo", dup)

    wide = {"type": "byte", "enum": [{"name": "FooLow", "value": 0}, {"name": "FooHigh", "value": 300}]}
    with pytest.raises(ValidationError, match=r"\['FooHigh'\] out of range for Byte"):
        ControlDefinition.from_schema_entry("Foo", wide)
    negative = {"type": "int32", "enum": [{"name": "FooMin", "value": -(2**31)}]}
    assert ControlDefinition.from_schema_entry("Foo", negative).enumeration[0].value == -(2**31)


def test_invalid_names_rejected() -> None:
    with pytest.raises(ValidationError):
        ControlDefinition.from_schema_entry("ae-enable", {"type": "bool"})
    with pytest.raises(ValidationError):
        ControlDefinition(name="Foo", vendor="Not Snake", kind=ControlType.BOOL)
    with pytest.raises(ValidationError):
        EnumVariant(name="", value=0)


def test_models_are_frozen() -> None:
    d = ControlDefinition.from_schema_entry("Brightness", {"type": "float"})
    with pytest.raises(ValidationError):
        d.name = "Contrast"  # type: ignore[misc]


def test_snapshot_linkage_ids_and_vendors() -> None:
    controls = (
        ControlDefinition.from_schema_entry("AeEnable", {"type": "bool"}),
        ControlDefinition.from_schema_entry("StatsOutputEnable", {"type": "bool"}, "rpi"),
        ControlDefinition.from_schema_entry("Brightness", {"type": "float"}),
    )
    snap = Snapshot(version=Version(0, 4, 0), controls=controls)
    assert snap.linkage_ids(Category.CONTROLS) == {
        "AE_ENABLE": 1,
        "STATS_OUTPUT_ENABLE": 2,
        "BRIGHTNESS": 3,
    }
    assert snap.linkage_ids(Category.PROPERTIES) == {}
    assert snap.vendors() == ["libcamera", "rpi"]


def test_snapshot_rejects_duplicate_names() -> None:
    d = ControlDefinition.from_schema_entry("AeEnable", {"type": "bool"})
    with pytest.raises(ValidationError, match="duplicate controls entry"):
        Snapshot(version=Version(0, 4, 0), controls=(d, d))
    # the same name in both categories is fine
    Snapshot(version=Version(0, 4, 0), controls=(d,), properties=(d,))


def test_category_from_value() -> None:
    assert Category.from_value("Controls") is Category.CONTROLS
    assert Category.PROPERTIES.id_enum == "PropertyId"
    assert Category.PROPERTIES.c_prefix == "LIBCAMERA_PROPERTY_ID_"
    with pytest.raises(ValueError, match="category must be one of"):
        Category.from_value("metadata")
