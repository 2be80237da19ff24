from __future__ import annotations

import importlib.util
import itertools
import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from types import ModuleType

import pytest

from camctl.core.schema import Category, Snapshot
from camctl.gen.codegen import generate
from camctl.io.loader import DirectoryReleaseSource, RawSnapshot, load_snapshots, parse_snapshot
from camctl.runtime import features, linked

SCHEMAS = Path(__file__).parent / "fixtures" / "schemas"

_counter = itertools.count()


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch) -> Iterator[None]:
    """Every test starts without CAMCTL_* env, active features, or a linked runtime."""
    for key in list(os.environ):
        if key.startswith("CAMCTL_"):
            monkeypatch.delenv(key, raising=False)
    features.reset()
    linked.reset()
    yield
    features.reset()
    linked.reset()


@pytest.fixture
def schemas_dir() -> Path:
    return SCHEMAS


@pytest.fixture
def raw_040() -> RawSnapshot:
    (raw,) = load_snapshots(DirectoryReleaseSource(SCHEMAS), ["v0.4.0"])
    return raw


@pytest.fixture
def snapshot_040(raw_040: RawSnapshot) -> Snapshot:
    return parse_snapshot(raw_040)


@pytest.fixture
def import_source(tmp_path: Path) -> Iterator[Callable[[str], ModuleType]]:
    """Write module source to tmp_path and import it under a unique name."""
    names: list[str] = []

    def _import(source: str) -> ModuleType:
        name = f"camctl_test_generated_{next(_counter)}"
        path = tmp_path / f"{name}.py"
        path.write_text(source, encoding="utf-8")
        spec = importlib.util.spec_from_file_location(name, path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        names.append(name)
        spec.loader.exec_module(module)
        return module

    yield _import
    for name in names:
        sys.modules.pop(name, None)


@pytest.fixture
def load_generated(
    snapshot_040: Snapshot, import_source: Callable[[str], ModuleType]
) -> Callable[..., ModuleType]:
    """
    Import the generated module of snapshot 0.4.0 for a category.

    The linked runtime defaults to the snapshot's own numbering; features default
    to every vendor in the snapshot.
    """

    def _load(
        category: str = "controls",
        enabled: tuple[str, ...] = ("vendor_draft", "vendor_rpi"),
        runtime: linked.LinkedRuntime | None = None,
    ) -> ModuleType:
        features.activate(enabled)
        linked.activate(runtime or linked.LinkedRuntime.from_snapshot(snapshot_040))
        return import_source(generate(snapshot_040, Category.from_value(category)))

    return _load
