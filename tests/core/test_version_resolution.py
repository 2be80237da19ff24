"""Tests for `camctl.core.versioning` tag parsing and snapshot resolution."""

from __future__ import annotations

import pytest

from camctl.core.errors import VersionMismatch
from camctl.core.versioning import CompatMode, Version, is_compatible, parse_tag, resolve

V = Version.parse


def test_version_parse_and_order() -> None:
    assert V("0.4.0") == Version(0, 4, 0)
    assert V("1.0.0-rc.1").pre == ("rc", "1")
    assert V("1.0.0-rc.1") < V("1.0.0")
    assert V("0.10.0") > V("0.9.9")
    assert sorted([V("1.2.0"), V("0.4.0"), V("1.0.0")]) == [V("0.4.0"), V("1.0.0"), V("1.2.0")]
    assert str(V("0.5.2")) == "0.5.2"


@pytest.mark.parametrize("text", ["1.2", "v1.2.3", "01.2.3", "", "a.b.c"])
def test_version_parse_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        V(text)


def test_version_rejects_negative_components() -> None:
    with pytest.raises(ValueError, match="must be non-negative"):
        Version(-1, 0, 0)


@pytest.mark.parametrize(
    "tag,expected",
    [
        ("v0.4.0", "0.4.0"),
        ("refs/tags/v0.5.2", "0.5.2"),
        ("v1.0.0-rc.2", "1.0.0-rc.2"),
        ("0.4.0", None),
        ("vfoo", None),
        ("android-v1", None),
        ("v1.2", None),
    ],
)
def test_parse_tag(tag: str, expected: str | None) -> None:
    parsed = parse_tag(tag)
    assert (str(parsed) if parsed is not None else None) == expected


@pytest.mark.parametrize(
    "candidate,linked,ok",
    [
        ("1.0.0", "1.1.5", True),
        ("1.2.0", "1.1.5", False),
        ("1.0.0", "2.0.0", False),
        ("0.4.0", "0.4.7", True),
        ("0.4.0", "0.5.0", False),
        ("0.4.3", "0.4.1", False),
        ("0.0.3", "0.0.3", True),
        ("0.0.3", "0.0.4", False),
    ],
)
def test_caret_compatibility(candidate: str, linked: str, ok: bool) -> None:
    assert is_compatible(V(candidate), V(linked), CompatMode.CARET) is ok


def test_exact_compatibility_ignores_nothing() -> None:
    assert is_compatible(V("1.1.5"), V("1.1.5"), CompatMode.EXACT)
    assert not is_compatible(V("1.1.4"), V("1.1.5"), CompatMode.EXACT)


def test_resolve_caret_picks_greatest_compatible() -> None:
    available = [V("0.4.0"), V("1.0.0"), V("1.2.0")]
    assert resolve(available, V("1.1.5"), CompatMode.CARET) == V("1.0.0")
    assert resolve(available, V("1.2.3"), CompatMode.CARET) == V("1.2.0")
    assert resolve(available, V("0.4.9"), CompatMode.CARET) == V("0.4.0")


def test_resolve_exact_mismatch_lists_every_candidate() -> None:
    available = [V("1.2.0"), V("0.4.0"), V("1.0.0")]
    with pytest.raises(VersionMismatch) as info:
        resolve(available, V("1.1.5"), CompatMode.EXACT)
    err = info.value
    assert err.linked == V("1.1.5")
    assert err.available == [V("0.4.0"), V("1.0.0"), V("1.2.0")]
    msg = str(err)
    assert msg.startswith("Unsupported version of libcamera detected: 1.1.5")
    for v in ("0.4.0", "1.0.0", "1.2.0"):
        assert f"\t{v}" in msg


def test_resolve_with_no_snapshots() -> None:
    with pytest.raises(VersionMismatch, match="<none>"):
        resolve([], V("0.4.0"), CompatMode.CARET)


def test_compat_mode_from_value() -> None:
    assert CompatMode.from_value("CARET") is CompatMode.CARET
    assert CompatMode.from_value(CompatMode.EXACT) is CompatMode.EXACT
    with pytest.raises(ValueError, match="compat mode must be one of"):
        CompatMode.from_value("loose")
