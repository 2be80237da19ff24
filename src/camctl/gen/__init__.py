"""
camctl.gen: build-time emitters.

## Responsibilities
- codegen: one Python module per snapshot and category (catalogue, typed classes,
  bindings, ``make_dyn``), with feature guards on every vendor piece.
- c_header: the C header of linkage constants and enum variants.
- snapshot: the versioned snapshot directory and its manifest.

## Import DAG discipline
- Depends on camctl.core and camctl.io (for writing); never imports camctl.runtime.
  Generated modules import camctl.runtime, the generator does not.

## Examples
```python
from camctl.gen import generate, generate_header

source = generate(snapshot, "controls")  # doctest: +SKIP
header = generate_header(snapshot)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .c_header import generate_header
from .codegen import gating_map, generate
from .snapshot import read_manifest, verify_snapshot, write_snapshot

__all__ = [
    "generate",
    "gating_map",
    "generate_header",
    "write_snapshot",
    "read_manifest",
    "verify_snapshot",
]
