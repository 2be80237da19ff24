"""
camctl.runtime: tagged values, native cells, typed entries, and dynamic dispatch.

## Responsibilities
- ControlValue: the immutable tagged union exchanged with the camera runtime.
- decode/encode: copy between ControlValue and native ControlCell payloads.
- Typed entries: base classes and ``bind`` used by generated modules.
- DynRegistry: introspection of (id, value) collections with raw fallback.
- SchemaInterpreter: runtime lookup-table alternative to generated modules.
- linked/features: process-wide linkage constants and vendor feature gates read by
  generated modules at import time.

## Notes
- Conversion failures are recoverable ControlValueError subclasses; unknown ids are
  never errors.
- Nothing here owns native memory: decode copies, encode points at the value's own
  storage.

## Examples
```python
from camctl.core.types import ControlType
from camctl.runtime import ControlValue, ControlCell, decode_cell, encode

v = ControlValue.of(ControlType.FLOAT, [1.0, 0.5, 0.25])
cell = ControlCell()
encode(v, cell)
decode_cell(cell) == v  # True
```
"""

from __future__ import annotations

from .codec import decode, decode_cell, encode
from .native import ControlCell
from .registry import DynRegistry, RawEntry
from .value import ControlValue

__all__ = [
    "ControlValue",
    "ControlCell",
    "decode",
    "decode_cell",
    "encode",
    "DynRegistry",
    "RawEntry",
]
