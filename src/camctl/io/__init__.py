"""
camctl.io: configuration and schema sources.

## Responsibilities
- CamctlSettings: configuration with precedence env > TOML > defaults.
- Release sources (git clone or directory tree) and the loader that turns release
  tags into RawSnapshot/Snapshot objects.
- Filesystem helpers for atomic snapshot writes.

## Public API
- CamctlSettings: Configuration (defaults sourced from camctl.core.constants).
- GitReleaseSource, DirectoryReleaseSource: where schema documents come from.
- load_snapshots, parse_snapshot: tags to raw documents to parsed snapshots.

## Import DAG discipline
- Depends only on stdlib, PyYAML, pydantic, and camctl.core.*.
- MUST NOT import camctl.gen, camctl.runtime, or camctl.cli.

## Examples
```python
from camctl.io import DirectoryReleaseSource, load_snapshots, parse_snapshot

raws = load_snapshots(DirectoryReleaseSource("schemas"))  # doctest: +SKIP
snapshots = [parse_snapshot(r) for r in raws]  # doctest: +SKIP
```
"""

from __future__ import annotations

from .config import CamctlSettings
from .loader import DirectoryReleaseSource, GitReleaseSource, load_snapshots, parse_snapshot

__all__ = [
    "CamctlSettings",
    "DirectoryReleaseSource",
    "GitReleaseSource",
    "load_snapshots",
    "parse_snapshot",
]
