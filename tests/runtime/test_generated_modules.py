from __future__ import annotations

import inspect

import pytest

from camctl.core.errors import LinkError
from camctl.core.geometry import Rectangle, Size
from camctl.core.schema import Category
from camctl.core.types import ControlType
from camctl.runtime.control import ControlInfo, ControlInfoMap, ControlList, DynControlEntry, PropertyList
from camctl.runtime.errors import ControlNotFound, InvalidLength, InvalidType, UnknownVariant
from camctl.runtime.linked import LinkedRuntime
from camctl.runtime.registry import RawEntry
from camctl.runtime.value import ControlValue

T = ControlType


def test_module_metadata(load_generated) -> None:
    mod = load_generated()

    assert mod.__doc__.startswith("Generated controls catalogue for libcamera 0.4.0.")
    assert str(mod.SNAPSHOT_VERSION) == "0.4.0"
    assert mod.CATEGORY == "controls"
    assert [m.name for m in mod.ControlId][:3] == ["AeEnable", "AeMeteringMode", "Brightness"]
    assert inspect.getdoc(mod.AeEnable).startswith("Enable or disable the AE.")
    assert "\\sa ExposureTime" in mod.AeEnable.__doc__


def test_wrapper_round_trip(load_generated) -> None:
    mod = load_generated()

    value = mod.AeEnable(True).to_value()
    assert value == ControlValue.of(T.BOOL, True)
    assert mod.AeEnable.from_value(value) == mod.AeEnable(True)
    assert mod.AeEnable.ID is mod.ControlId.AeEnable
    assert int(mod.ControlId.AeEnable) == 1
    assert repr(mod.AeEnable(False)) == "AeEnable(False)"


def test_wrapper_shapes(load_generated) -> None:
    mod = load_generated()

    gains = mod.ColourGains((1.5, 2.0))
    assert gains.to_value().element_count == 2
    assert mod.ColourGains.from_value(gains.to_value()) == gains

    identity = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))
    assert mod.ColourCorrectionMatrix.from_value(mod.ColourCorrectionMatrix(identity).to_value()).value == identity

    limits = mod.FrameDurationLimits.from_value(ControlValue.of(T.INT64, [33333, 66666]))
    assert limits.value == (33333, 66666)

    crop = mod.ScalerCrop(Rectangle(0, 0, 4056, 3040))
    assert crop.to_value() == ControlValue.of(T.RECTANGLE, Rectangle(0, 0, 4056, 3040))

    windows = mod.AfWindows.from_value(ControlValue.of(T.RECTANGLE, []))
    assert windows.value == []


def test_wrapper_conversion_failures(load_generated) -> None:
    mod = load_generated()

    with pytest.raises(InvalidLength):
        mod.ColourGains.from_value(ControlValue.of(T.FLOAT, [1.0]))
    with pytest.raises(InvalidType):
        mod.AeEnable.from_value(ControlValue.of(T.INT32, 1))
    with pytest.raises(InvalidLength):
        mod.ColourGains((1.0, 2.0, 3.0)).to_value()


def test_enum_controls(load_generated) -> None:
    mod = load_generated()

    assert mod.AeMeteringMode.from_value(ControlValue.of(T.INT32, 1)) is mod.AeMeteringMode.MeteringSpot
    assert mod.AeMeteringMode.MeteringMatrix.to_value() == ControlValue.of(T.INT32, 2)
    assert mod.HdrChannel.None_ == 0
    assert repr(mod.HdrChannel.Long) == "HdrChannel.Long"
    assert mod.HdrChannel.ID is mod.ControlId.HdrChannel

    raw = ControlValue.of(T.INT32, 3)
    with pytest.raises(UnknownVariant) as info:
        mod.AeMeteringMode.from_value(raw)
    assert info.value.value == raw


def test_make_dyn_dispatch(load_generated) -> None:
    mod = load_generated()

    entry = mod.make_dyn(mod.ControlId.Brightness, ControlValue.of(T.FLOAT, 0.5))
    assert isinstance(entry, DynControlEntry)
    assert entry.id() == 3
    assert entry.name == "Brightness"
    assert entry.value() == ControlValue.of(T.FLOAT, 0.5)
    assert repr(entry) == "Brightness(0.5)"

    # plain integers dispatch too
    assert mod.make_dyn(2, ControlValue.of(T.INT32, 0)).entry is mod.AeMeteringMode.MeteringCentreWeighted

    with pytest.raises(ControlNotFound):
        mod.make_dyn(99, ControlValue.of(T.INT32, 0))


def test_registry_falls_back_to_raw_entries(load_generated) -> None:
    mod = load_generated()
    registry = mod.registry

    unknown = registry.describe(99, ControlValue.of(T.INT32, 5))
    assert unknown == RawEntry(99, ControlValue.of(T.INT32, 5))
    assert repr(unknown) == "RawEntry(99, ControlValue.Int32([5]))"

    wrong_type = registry.describe(1, ControlValue.of(T.INT32, 1))
    assert isinstance(wrong_type, RawEntry)
    assert wrong_type.name == "AeEnable"
    assert wrong_type.error == "Expected type Bool, found Int32"

    bad_variant = registry.describe(2, ControlValue.of(T.INT32, 7))
    assert isinstance(bad_variant, RawEntry) and "Unknown enum variant" in bad_variant.error

    typed = registry.describe(12, ControlValue.of(T.BOOL, True))
    assert repr(typed) == "StatsOutputEnable(True)"


def test_vendors_compiled_out(load_generated) -> None:
    mod = load_generated(enabled=())

    assert not hasattr(mod, "StatsOutputEnable")
    assert not hasattr(mod, "AePrecaptureTrigger")
    assert "StatsOutputEnable" not in mod.ControlId.__members__
    assert len(mod.ControlId) == 9

    with pytest.raises(ControlNotFound):
        mod.make_dyn(12, ControlValue.of(T.BOOL, True))
    entry = mod.registry.describe(12, ControlValue.of(T.BOOL, True))
    assert isinstance(entry, RawEntry) and entry.name is None


def test_single_vendor_enabled(load_generated) -> None:
    mod = load_generated(enabled=("vendor_rpi",))

    assert hasattr(mod, "StatsOutputEnable")
    assert not hasattr(mod, "PipelineDepth")
    assert mod.StatsOutputEnable.ID == 12


def test_missing_linkage_constant_fails_import(load_generated, snapshot_040) -> None:
    ids = dict(snapshot_040.linkage_ids(Category.CONTROLS))
    del ids["BRIGHTNESS"]

    with pytest.raises(LinkError) as info:
        load_generated(runtime=LinkedRuntime(control_ids=ids))
    assert info.value.name == "BRIGHTNESS"


def test_ids_come_from_the_linked_runtime(load_generated, snapshot_040) -> None:
    ids = {name: 0x1000 + n for name, n in snapshot_040.linkage_ids(Category.CONTROLS).items()}
    mod = load_generated(runtime=LinkedRuntime(control_ids=ids))

    assert int(mod.ControlId.Brightness) == 0x1003
    assert mod.Brightness.ID == 0x1003
    assert mod.make_dyn(0x1003, ControlValue.of(T.FLOAT, 1.0)).entry == mod.Brightness(1.0)
    assert isinstance(mod.registry.describe(3, ControlValue.of(T.FLOAT, 1.0)), RawEntry)


def test_control_list(load_generated) -> None:
    mod = load_generated()
    controls = ControlList(mod.registry)

    controls.set(mod.AeEnable(True))
    controls.set(mod.AeMeteringMode.MeteringMatrix)
    controls.set(mod.ColourGains((1.5, 2.0)))

    assert controls.get(mod.AeEnable) == mod.AeEnable(True)
    assert controls.get(mod.AeMeteringMode) is mod.AeMeteringMode.MeteringMatrix
    assert controls.get(mod.ColourGains).value == (1.5, 2.0)
    assert len(controls) == 3 and 1 in controls and 3 not in controls
    assert controls.cell(1).type == int(T.BOOL)
    assert repr(controls).startswith(
        "{AeEnable: AeEnable(True), AeMeteringMode: AeMeteringMode.MeteringMatrix"
    )

    with pytest.raises(ControlNotFound):
        controls.get(mod.Brightness)

    copy = ControlList.from_cells(((id, controls.cell(id)) for id, _ in controls), mod.registry)
    assert copy.get(mod.ColourGains) == controls.get(mod.ColourGains)


def test_control_list_frame_and_describe(load_generated) -> None:
    mod = load_generated()
    controls = ControlList(mod.registry)
    controls.set(mod.Brightness(0.25))
    controls.set_raw(99, ControlValue.of(T.INT32, 4))

    frame = controls.to_frame()
    assert frame.columns == ["id", "name", "type", "typed", "value"]
    assert frame["id"].to_list() == [3, 99]
    assert frame["name"].to_list() == ["Brightness", None]
    assert frame["typed"].to_list() == [True, False]

    described = controls.describe()
    assert isinstance(described[1], RawEntry)
    assert "99: ControlValue.Int32([4])" in repr(controls)


def test_lists_keep_categories_apart(load_generated) -> None:
    props = load_generated("properties")
    properties = PropertyList(props.registry)

    properties.set(props.Model("imx477"))
    properties.set(props.Location.CameraLocationBack)
    properties.set(props.PixelArraySize(Size(4056, 3040)))

    assert properties.get(props.Model).value == "imx477"
    assert properties.get(props.Location) is props.Location.CameraLocationBack
    assert properties.get(props.PixelArraySize).value == Size(4056, 3040)

    with pytest.raises(TypeError, match="ControlList accepts Control entries"):
        ControlList().set(props.Model("imx477"))


def test_control_info_map(load_generated) -> None:
    mod = load_generated()
    info = ControlInfo(
        min=ControlValue.of(T.FLOAT, -1.0),
        max=ControlValue.of(T.FLOAT, 1.0),
        default=ControlValue.of(T.FLOAT, 0.0),
    )
    infos = ControlInfoMap({mod.ControlId.Brightness: info}, mod.registry)

    assert infos.at(3) is info
    assert infos[mod.ControlId.Brightness] is info
    assert list(infos) == [3] and len(infos) == 1
    assert repr(infos).startswith("{ControlId.Brightness: ControlInfo(")
    with pytest.raises(ControlNotFound):
        infos.at(99)
