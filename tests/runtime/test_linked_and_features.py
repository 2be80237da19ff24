from __future__ import annotations

from pathlib import Path

import pytest

from camctl.core.errors import LinkError
from camctl.core.versioning import Version
from camctl.runtime import features, linked
from camctl.runtime.linked import LinkedRuntime

HEADER = """
#define LIBCAMERA_VERSION_MAJOR 0
#define LIBCAMERA_VERSION_MINOR 5
#define LIBCAMERA_VERSION_PATCH 2

enum libcamera_control_id {
    LIBCAMERA_CONTROL_ID_AE_ENABLE = 1,
    LIBCAMERA_CONTROL_ID_BRIGHTNESS = 0x20,
};

enum libcamera_property_id {
    LIBCAMERA_PROPERTY_ID_MODEL = 2,
};

/**
 * \\brief Supported values for LIBCAMERA_CONTROL_ID_AE_METERING_MODE control
 */
enum libcamera_ae_metering_mode {
    LIBCAMERA_METERING_SPOT = 1,
};
"""


def test_from_header_text() -> None:
    rt = LinkedRuntime.from_header(HEADER)

    assert rt.version == Version(0, 5, 2)
    assert dict(rt.control_ids) == {"AE_ENABLE": 1, "BRIGHTNESS": 0x20}
    assert dict(rt.ids("properties")) == {"MODEL": 2}


def test_from_header_path_and_explicit_version(tmp_path: Path) -> None:
    p = tmp_path / "control_ids.h"
    p.write_text(HEADER)

    assert LinkedRuntime.from_header(p).control_ids["BRIGHTNESS"] == 32
    assert LinkedRuntime.from_header(str(p)).version == Version(0, 5, 2)
    assert LinkedRuntime.from_header(p, Version(9, 9, 9)).version == Version(9, 9, 9)


def test_header_without_version_defines() -> None:
    rt = LinkedRuntime.from_header("enum x { LIBCAMERA_CONTROL_ID_AE_ENABLE = 1, };")
    assert rt.version is None


def test_linkage_table() -> None:
    table = LinkedRuntime(control_ids={"AE_ENABLE": 1}).table("controls")

    assert table.AE_ENABLE == 1
    assert "AE_ENABLE" in table and len(table) == 1
    assert table.names() == ["AE_ENABLE"]
    with pytest.raises(LinkError, match="defines no controls constant 'BRIGHTNESS'"):
        table.BRIGHTNESS
    with pytest.raises(AttributeError):
        table._private


def test_active_runtime_requires_activation(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(LinkError, match="no linked runtime is active"):
        linked.active()


def test_active_runtime_from_configured_header(tmp_path: Path, monkeypatch) -> None:
    p = tmp_path / "control_ids.h"
    p.write_text(HEADER)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CAMCTL_RUNTIME_HEADER", str(p))

    assert linked.linkage("controls").BRIGHTNESS == 0x20
    # cached once parsed
    p.unlink()
    assert linked.active().version == Version(0, 5, 2)


def test_features_activate_and_enabled() -> None:
    active = features.activate([" vendor_rpi ", "", "vendor_draft"])

    assert active == frozenset({"vendor_rpi", "vendor_draft"})
    assert features.enabled("vendor_rpi")
    assert not features.enabled("vendor_ipu3")


def test_features_default_from_settings(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert features.active() == frozenset({"vendor_draft", "vendor_rpi"})

    features.reset()
    monkeypatch.setenv("CAMCTL_FEATURES", "")
    assert features.active() == frozenset()
