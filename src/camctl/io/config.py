"""
Configuration for camctl.

Defines CamctlSettings, a frozen dataclass carrying build and runtime configuration:
where generated snapshots live, how the linked runtime is discovered, the snapshot
compatibility mode, and which vendor features are enabled.

Source of truth
- camctl.core.constants.VERSIONED_DIR, UPSTREAM_GIT_URL, UPSTREAM_SCHEMA_DIR
- camctl.core.versioning.CompatMode for the allowed compat modes

Import DAG discipline
- Depends only on stdlib and camctl.core.
- Does not import camctl.gen, camctl.runtime, or camctl.cli.

Notes
- compat_mode defaults to "exact"; "caret" must be requested explicitly.
- features defaults to the upstream default set (vendor_draft, vendor_rpi).
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from camctl.core.constants import UPSTREAM_GIT_URL, UPSTREAM_SCHEMA_DIR, VERSIONED_DIR
from camctl.core.versioning import CompatMode

__all__ = ["CamctlSettings", "DEFAULT_FEATURES"]

DEFAULT_FEATURES: tuple[str, ...] = ("vendor_draft", "vendor_rpi")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class CamctlSettings:
    """
    Runtime settings for camctl.

    Attributes:
        versioned_dir (str): Directory holding one generated snapshot per upstream version.
        compat_mode (str): Snapshot matching rule, "exact" or "caret".
        linked_version (str | None): Version of the linked runtime; discovered with
            pkg-config when None.
        runtime_header (str | None): C header of the linked runtime whose
            ``LIBCAMERA_CONTROL_ID_*`` constants back generated discriminants. When
            None, the selected snapshot's own header is used.
        features (tuple[str, ...]): Enabled vendor features (``vendor_<name>``).
        git_url (str): Upstream repository cloned by ``camctl generate``.
        git_dir (str): Local clone location.
        schema_dir (str): Directory of schema documents inside the upstream tree.
        log_level (str): Logging level configured by the CLI.

    Examples:
        >>> from camctl.io.config import CamctlSettings
        >>> CamctlSettings(compat_mode="caret").compat
        <CompatMode.CARET: 'caret'>
    """

    versioned_dir: str = VERSIONED_DIR
    compat_mode: str = CompatMode.EXACT.value
    linked_version: str | None = None
    runtime_header: str | None = None
    features: tuple[str, ...] = DEFAULT_FEATURES
    git_url: str = UPSTREAM_GIT_URL
    git_dir: str = ".cache/libcamera"
    schema_dir: str = UPSTREAM_SCHEMA_DIR
    log_level: str = "INFO"

    @property
    def compat(self) -> CompatMode:
        return CompatMode.from_value(self.compat_mode)

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: CamctlSettings, cfg: dict[str, Any] | None) -> CamctlSettings:
        """Apply a loose config mapping onto CamctlSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("versioned_dir", "git_url", "git_dir", "schema_dir"):
            if key in cfg and isinstance(cfg[key], str) and cfg[key].strip():
                s = replace(s, **{key: cfg[key].strip()})

        # optional strings; empty disables
        for key in ("linked_version", "runtime_header"):
            if key in cfg and isinstance(cfg[key], str):
                s = replace(s, **{key: cfg[key].strip() or None})

        if "compat_mode" in cfg and isinstance(cfg["compat_mode"], str):
            mode = cfg["compat_mode"].strip().lower()
            if mode in {m.value for m in CompatMode}:
                s = replace(s, compat_mode=mode)

        if "features" in cfg:
            raw = cfg["features"]
            if isinstance(raw, str):
                items = [f.strip() for f in raw.split(",")]
            elif isinstance(raw, (list, tuple)):
                items = [str(f).strip() for f in raw]
            else:
                items = None
            if items is not None:
                s = replace(s, features=tuple(f for f in items if f))

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            level = cfg["log_level"].strip().upper()
            if level in _LOG_LEVELS:
                s = replace(s, log_level=level)

        return s

    @classmethod
    def from_env(cls, base: CamctlSettings | None = None, prefix: str = "CAMCTL_") -> CamctlSettings:
        """
        Build CamctlSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - CAMCTL_VERSIONED_DIR
            - CAMCTL_COMPAT_MODE ("exact" | "caret")
            - CAMCTL_LINKED_VERSION
            - CAMCTL_RUNTIME_HEADER
            - CAMCTL_FEATURES (comma-separated; empty string disables every vendor)
            - CAMCTL_GIT_URL
            - CAMCTL_GIT_DIR
            - CAMCTL_SCHEMA_DIR
            - CAMCTL_LOG_LEVEL
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in (
            "versioned_dir",
            "compat_mode",
            "linked_version",
            "runtime_header",
            "git_url",
            "git_dir",
            "schema_dir",
            "log_level",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        # FEATURES may legitimately be set to "" to compile out every vendor.
        v = os.getenv(prefix + "FEATURES")
        if v is not None:
            mapping["features"] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> CamctlSettings:
        """
        Build CamctlSettings from a TOML file.

        Search order when `path` is None:
            1) ./camctl.toml (with either a [camctl] table or direct keys)
            2) ./pyproject.toml under [tool.camctl]

        Returns defaults if no file is present or none of them can be parsed.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "camctl.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("camctl", {}) if isinstance(tool, dict) else None
            else:
                top = data
                if "camctl" in top and isinstance(top["camctl"], dict):
                    cfg = top["camctl"]
                else:
                    cfg = top
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> CamctlSettings:
        """
        Load CamctlSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (camctl.toml, pyproject.toml).

        Returns:
            CamctlSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
