from __future__ import annotations

from pathlib import Path

import pytest

from camctl.core.errors import LinkError
from camctl.core.schema import Category
from camctl.core.types import ControlType
from camctl.runtime.errors import ControlNotFound, InvalidType, UnknownVariant
from camctl.runtime.interpreter import InterpretedEntry, SchemaInterpreter
from camctl.runtime.linked import LinkedRuntime
from camctl.runtime.registry import RawEntry
from camctl.runtime.value import ControlValue

T = ControlType


def test_interpreter_decodes_core_controls(snapshot_040) -> None:
    interp = SchemaInterpreter(snapshot_040, "controls", features=())

    assert len(interp) == 9
    entry = interp.make_dyn(1, ControlValue.of(T.BOOL, True))
    assert isinstance(entry, InterpretedEntry)
    assert repr(entry) == "AeEnable(True)"
    assert entry.value() == ControlValue.of(T.BOOL, True)

    mode = interp.make_dyn(2, ControlValue.of(T.INT32, 1))
    assert mode.variant == "MeteringSpot"
    assert repr(mode) == "AeMeteringMode.MeteringSpot"

    ccm = interp.make_dyn(5, ControlValue.of(T.FLOAT, [1.0] * 9))
    assert ccm.payload == ((1.0, 1.0, 1.0),) * 3


def test_interpreter_failures(snapshot_040) -> None:
    interp = SchemaInterpreter(snapshot_040, "controls", features=())

    with pytest.raises(UnknownVariant):
        interp.make_dyn(2, ControlValue.of(T.INT32, 5))
    with pytest.raises(InvalidType):
        interp.make_dyn(1, ControlValue.of(T.INT32, 1))
    # gated out
    with pytest.raises(ControlNotFound):
        interp.make_dyn(10, ControlValue.of(T.INT32, 1))


def test_interpreter_respects_features(snapshot_040) -> None:
    interp = SchemaInterpreter(snapshot_040, Category.CONTROLS, features=("vendor_draft",))

    assert len(interp) == 11
    assert repr(interp.make_dyn(10, ControlValue.of(T.INT32, 1))) == "AePrecaptureTrigger.Start"
    assert interp.definition(12) is None
    assert interp.definition(11).vendor == "draft"


def test_interpreter_uses_process_features_by_default(snapshot_040, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CAMCTL_FEATURES", "vendor_rpi")

    interp = SchemaInterpreter(snapshot_040, "controls")

    assert len(interp) == 10
    assert interp.ids.StatsOutputEnable == 12


def test_interpreter_registry(snapshot_040) -> None:
    registry = SchemaInterpreter(snapshot_040, "properties", features=()).registry()

    model = registry.describe(2, ControlValue.of(T.STRING, "imx477"))
    assert repr(model) == "Model('imx477')"
    assert isinstance(registry.describe(9, ControlValue.of(T.INT32, 0)), RawEntry)
    assert registry.format([(1, ControlValue.of(T.INT32, 2))]) == "{Location: Location.CameraLocationExternal}"


def test_interpreter_with_linked_ids(snapshot_040) -> None:
    ids = {name: n * 10 for name, n in snapshot_040.linkage_ids(Category.CONTROLS).items()}
    interp = SchemaInterpreter(snapshot_040, "controls", LinkedRuntime(control_ids=ids), features=())

    assert interp.make_dyn(30, ControlValue.of(T.FLOAT, 0.5)).id() == 30
    with pytest.raises(ControlNotFound):
        interp.make_dyn(3, ControlValue.of(T.FLOAT, 0.5))

    del ids["BRIGHTNESS"]
    with pytest.raises(LinkError):
        SchemaInterpreter(snapshot_040, "controls", LinkedRuntime(control_ids=ids), features=())
