"""
Build step: pick the one generated snapshot that matches the linked runtime.

Responsibilities
- Enumerate the generated snapshots under ``versioned_dir``.
- Discover the linked runtime's version: ``linked_version`` from settings, then the
  ``LIBCAMERA_VERSION_*`` defines of ``runtime_header``, then ``pkg-config``.
- Resolve with camctl.core.versioning.resolve under the configured compat mode.
- Install (copy) the selected generated modules, or import them in-process after
  activating the linked runtime and the enabled features.

Notes
- Resolution failures are fatal: VersionMismatch lists every available snapshot.
- Features and the linked runtime are process-wide and must be activated before a
  generated module is imported; load_modules does both.

Examples
--------
```python
from camctl.build import load_modules

mods = load_modules()  # doctest: +SKIP
mods.controls.AeEnable(True).to_value()  # doctest: +SKIP
```
"""

from __future__ import annotations

import importlib.util
import logging
import os
import subprocess
import sys
from pathlib import Path
from types import ModuleType
from typing import NamedTuple

from camctl.core.constants import HEADER_NAME
from camctl.core.errors import GenerationError
from camctl.core.schema import Category
from camctl.core.versioning import Version, resolve
from camctl.gen.snapshot import MODULE_NAMES, snapshot_dir, verify_snapshot
from camctl.io.config import CamctlSettings
from camctl.io.errors import ArtifactError, IoConfigError
from camctl.io.fs import listdir, makedirs, write_text
from camctl.runtime import features as _features
from camctl.runtime import linked as _linked

__all__ = [
    "LoadedModules",
    "available_versions",
    "discover_linked_version",
    "select_snapshot",
    "install",
    "load_modules",
]

logger = logging.getLogger(__name__)

# pkg-config package names tried in order.
_PKG_CONFIG_NAMES = ("libcamera", "camera")


class LoadedModules(NamedTuple):
    version: Version
    controls: ModuleType
    properties: ModuleType


def available_versions(versioned_dir: str | os.PathLike[str]) -> list[Version]:
    """
    Versions of every generated snapshot under ``versioned_dir``.

    Directories whose name is not a version are ignored.

    Returns:
        list[Version]: Sorted ascending; [] if the directory does not exist.
    """
    out: list[Version] = []
    root = os.fspath(versioned_dir)
    for name in listdir(root):
        if not os.path.isdir(os.path.join(root, name)):
            continue
        try:
            out.append(Version.parse(name))
        except ValueError:
            logger.debug("ignoring %s: not a version directory", name)
    return sorted(out)


def _pkg_config_version() -> Version | None:
    for name in _PKG_CONFIG_NAMES:
        try:
            r = subprocess.run(
                ["pkg-config", "--modversion", name], check=True, capture_output=True, text=True
            )
        except FileNotFoundError:
            logger.debug("pkg-config not found")
            return None
        except subprocess.CalledProcessError:
            logger.debug("pkg-config does not know %s", name)
            continue
        text = (r.stdout or "").strip()
        try:
            return Version.parse(text)
        except ValueError:
            logger.warning("pkg-config reported an unparseable %s version: %r", name, text)
    return None


def discover_linked_version(settings: CamctlSettings) -> Version:
    """
    Version of the runtime being linked against.

    Raises:
        IoConfigError: If ``linked_version`` is invalid, or no source yields a version.
    """
    if settings.linked_version:
        try:
            return Version.parse(settings.linked_version)
        except ValueError as exc:
            raise IoConfigError(f"invalid linked_version {settings.linked_version!r}") from exc

    if settings.runtime_header:
        header = _linked.LinkedRuntime.from_header(Path(settings.runtime_header))
        if header.version is not None:
            return header.version

    version = _pkg_config_version()
    if version is None:
        raise IoConfigError(
            "cannot determine the linked libcamera version; "
            "set linked_version (CAMCTL_LINKED_VERSION) or install pkg-config metadata"
        )
    return version


def select_snapshot(settings: CamctlSettings) -> tuple[Version, str]:
    """
    Resolve the snapshot to build against.

    Returns:
        tuple[Version, str]: Selected version and its directory.

    Raises:
        VersionMismatch: If no generated snapshot is compatible.
        IoConfigError: If the linked version cannot be determined.
    """
    linked = discover_linked_version(settings)
    available = available_versions(settings.versioned_dir)
    selected = resolve(available, linked, settings.compat)
    logger.info(
        "selected snapshot %s for linked libcamera %s (mode=%s)", selected, linked, settings.compat_mode
    )
    return selected, snapshot_dir(settings.versioned_dir, selected)


def _check_intact(path: str) -> None:
    bad = verify_snapshot(path)
    if bad:
        raise ArtifactError(f"snapshot {path} does not match its manifest: {', '.join(bad)}")


def install(settings: CamctlSettings, dest: str | os.PathLike[str]) -> list[str]:
    """
    Copy the selected snapshot's generated modules and header into ``dest``.

    Returns:
        list[str]: Written paths.

    Raises:
        VersionMismatch, IoConfigError: From selection.
        ArtifactError: If the snapshot is damaged or cannot be copied.
    """
    _, src = select_snapshot(settings)
    _check_intact(src)
    makedirs(os.fspath(dest))
    written: list[str] = []
    for name in (*MODULE_NAMES.values(), HEADER_NAME):
        target = os.path.join(os.fspath(dest), name)
        try:
            with open(os.path.join(src, name), encoding="utf-8", newline="") as fh:
                write_text(target, fh.read())
        except OSError as exc:
            raise ArtifactError(f"cannot install {name} from {src}: {exc}") from exc
        written.append(target)
    return written


def _import_file(module_name: str, path: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ArtifactError(f"cannot import {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except SyntaxError as exc:
        del sys.modules[module_name]
        raise GenerationError(f"{path} does not compile: {exc}") from exc
    except Exception:
        del sys.modules[module_name]
        raise
    return module


def load_modules(settings: CamctlSettings | None = None) -> LoadedModules:
    """
    Import the selected snapshot's generated modules into this process.

    The enabled features are activated from settings, and the linked runtime from
    ``runtime_header`` when set, otherwise from the snapshot's own header.

    Returns:
        LoadedModules: (version, controls module, properties module).

    Raises:
        VersionMismatch, IoConfigError: From selection.
        LinkError: If the linked runtime lacks a constant a module references.
    """
    settings = settings or CamctlSettings.load()
    version, path = select_snapshot(settings)

    _features.activate(settings.features)
    header = Path(settings.runtime_header) if settings.runtime_header else Path(path) / HEADER_NAME
    runtime = _linked.LinkedRuntime.from_header(header)
    if runtime.version is not None and runtime.version.triple != version.triple:
        logger.warning("linked header %s reports version %s, snapshot is %s", header, runtime.version, version)
    _linked.activate(runtime)

    tag = "v" + "_".join(str(n) for n in version.triple)
    modules = {
        c: _import_file(f"camctl_generated_{tag}_{c.value}", os.path.join(path, MODULE_NAMES[c]))
        for c in Category
    }
    return LoadedModules(version, modules[Category.CONTROLS], modules[Category.PROPERTIES])
