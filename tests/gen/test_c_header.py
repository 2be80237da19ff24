from __future__ import annotations

from camctl.core.schema import Category
from camctl.gen.c_header import generate_header
from camctl.runtime.linked import LinkedRuntime


def test_header_layout(snapshot_040) -> None:
    header = generate_header(snapshot_040)

    assert header.startswith("/* Generated for libcamera 0.4.0.")
    assert "#ifndef __LIBCAMERA_CONTROL_IDS_H__" in header
    assert header.endswith("#endif /* __LIBCAMERA_CONTROL_IDS_H__ */\n")
    assert "#define LIBCAMERA_VERSION_MINOR 4" in header
    assert "enum libcamera_control_id {" in header
    assert "    LIBCAMERA_CONTROL_ID_AE_ENABLE = 1," in header
    assert "    LIBCAMERA_CONTROL_ID_STATS_OUTPUT_ENABLE = 12," in header
    assert "enum libcamera_property_id {" in header
    assert "    LIBCAMERA_PROPERTY_ID_PIXEL_ARRAY_ACTIVE_AREAS = 4," in header


def test_header_enum_blocks(snapshot_040) -> None:
    header = generate_header(snapshot_040)

    assert " * \\brief Supported values for LIBCAMERA_CONTROL_ID_AE_METERING_MODE control" in header
    assert "enum libcamera_ae_metering_mode {" in header
    assert "    LIBCAMERA_METERING_SPOT = 1," in header
    assert "    LIBCAMERA_HDR_CHANNEL_NONE = 0," in header
    assert " * \\brief Supported values for LIBCAMERA_PROPERTY_ID_LOCATION control" in header
    assert "    LIBCAMERA_CAMERA_LOCATION_EXTERNAL = 2," in header
    # non-enum controls get no block
    assert "enum libcamera_brightness" not in header


def test_header_descriptions_are_doc_comments(snapshot_040) -> None:
    header = generate_header(snapshot_040)
    assert "     * \\brief Enable or disable the AE." in header
    assert "     * \\sa ExposureTime AnalogueGain" in header


def test_header_reads_back_as_linked_runtime(snapshot_040) -> None:
    rt = LinkedRuntime.from_header(generate_header(snapshot_040))
    expected = LinkedRuntime.from_snapshot(snapshot_040)

    assert rt.version == snapshot_040.version
    assert dict(rt.ids(Category.CONTROLS)) == dict(expected.ids(Category.CONTROLS))
    assert dict(rt.ids(Category.PROPERTIES)) == dict(expected.ids(Category.PROPERTIES))
