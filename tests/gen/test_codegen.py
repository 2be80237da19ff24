from __future__ import annotations

import ast

import pytest

from camctl.core.errors import GenerationError, SchemaError
from camctl.core.schema import Category, ControlDefinition, Snapshot
from camctl.core.versioning import Version
from camctl.gen import codegen
from camctl.gen.codegen import gating_map, generate
from camctl.runtime import features, linked


def _snapshot(*definitions: ControlDefinition) -> Snapshot:
    return Snapshot(version=Version(0, 4, 0), controls=definitions)


def test_generated_controls_parse_and_carry_expected_pieces(snapshot_040) -> None:
    source = generate(snapshot_040, "controls")
    ast.parse(source)

    assert "SNAPSHOT_VERSION = Version(0, 4, 0)" in source
    assert "CATEGORY = 'controls'" in source
    assert "class ControlId(_control.DiscriminantEnum):" in source
    assert "    AeEnable = _ids.AE_ENABLE" in source
    assert "class AeEnable(_control.Control, _control.ControlWrapper):" in source
    assert "    value: bool" in source
    assert "    value: tuple[float, float]" in source
    assert "    value: list[Rectangle]" in source
    assert (
        "@_control.bind(ControlId.ColourCorrectionMatrix, _types.TypeDescriptor("
        "_types.ControlType.FLOAT, _types.Dimensionality.fixed(3, 3)))"
    ) in source
    assert "class AeMeteringMode(_control.Control, _control.ControlEnum):" in source
    assert "    #: Spot metering mode." in source
    assert "    MeteringSpot = 1" in source
    assert "    None_ = 0" in source
    assert "registry = DynRegistry(CATEGORY, ControlId, make_dyn)" in source


def test_generated_properties_use_property_markers(snapshot_040) -> None:
    source = generate(snapshot_040, Category.PROPERTIES)

    assert "class PropertyId(_control.DiscriminantEnum):" in source
    assert "class Location(_control.Property, _control.ControlEnum):" in source
    assert "    CameraLocationFront = 0" in source
    assert "class Model(_control.Property, _control.ControlWrapper):" in source
    assert "    value: str" in source
    assert "ControlId" not in source


def test_gating_map_is_consistent_per_vendor(snapshot_040) -> None:
    gates = gating_map(generate(snapshot_040, "controls"), "controls")

    assert set(gates) == {d.name for d in snapshot_040.controls}
    assert gates["AeEnable"] == {"catalogue": None, "class": None, "dispatch": None}
    assert set(gates["AePrecaptureTrigger"].values()) == {"vendor_draft"}
    assert set(gates["PipelineDepth"].values()) == {"vendor_draft"}
    assert set(gates["StatsOutputEnable"].values()) == {"vendor_rpi"}


def test_vendor_pieces_are_wrapped_in_feature_guards(snapshot_040) -> None:
    source = generate(snapshot_040, "controls")
    assert "if _features.enabled('vendor_draft'):" in source
    assert "        AePrecaptureTrigger = _ids.AE_PRECAPTURE_TRIGGER" in source
    assert "    class StatsOutputEnable(_control.Control, _control.ControlWrapper):" in source
    assert "            ControlId.StatsOutputEnable: StatsOutputEnable," in source


@pytest.mark.parametrize("name", ["CATEGORY", "ControlId", "None", "registry"])
def test_reserved_control_names_rejected(name: str) -> None:
    snap = _snapshot(ControlDefinition.from_schema_entry(name, {"type": "bool"}))
    with pytest.raises(SchemaError, match="reserved"):
        generate(snap, "controls")


def test_reserved_variant_names_rejected() -> None:
    entry = {"type": "int32", "enum": [{"name": "ID", "value": 0}, {"name": "FooOn", "value": 1}]}
    snap = _snapshot(ControlDefinition.from_schema_entry("Foo", entry))
    with pytest.raises(SchemaError, match="enum variant 'ID' is reserved"):
        generate(snap, "controls")


def test_inconsistent_guards_refused(snapshot_040, monkeypatch) -> None:
    def _ungated(definitions, category):
        lines = ["_DYN_TABLE: dict[int, type[_control.ControlEntry]] = {"]
        lines.extend(f"    {category.id_enum}.{d.name}: {d.name}," for d in definitions)
        lines.append("}")
        return lines

    monkeypatch.setattr(codegen, "_dispatch", _ungated)
    with pytest.raises(GenerationError, match="AePrecaptureTrigger"):
        generate(snapshot_040, "controls")


def test_gating_map_rejects_unparseable_source() -> None:
    with pytest.raises(GenerationError, match="does not parse"):
        gating_map("def (:", "controls")


def test_docstring_escaping(import_source) -> None:
    entry = {"type": "bool", "description": 'Uses \\sa and """triple""" quotes "here"'}
    snap = _snapshot(ControlDefinition.from_schema_entry("Quoted", entry))

    features.activate(())
    linked.activate(linked.LinkedRuntime.from_snapshot(snap))
    mod = import_source(generate(snap, "controls"))

    assert mod.Quoted.__doc__ == 'Uses \\sa and """triple""" quotes "here"'


def test_empty_snapshot_generates_importable_module(import_source) -> None:
    snap = _snapshot()
    features.activate(())
    linked.activate(linked.LinkedRuntime.from_snapshot(snap))
    mod = import_source(generate(snap, "controls"))

    assert list(mod.ControlId) == []
    assert mod.registry.category == "controls"
