"""
Core package aggregator for camctl contracts (types, naming, schema models, versioning, hashing).

## Contracts (single source of truth)
- Types: ControlType (also the wire tag), Dimensionality, TypeDescriptor, the type mapper.
- Naming: identifier transform binding schema names to the runtime's linkage constants.
- Schema: pydantic models for control definitions, enum variants, and snapshots.
- Versioning: Version, CompatMode, and the pure snapshot resolver.
- Geometry: Point, Size, Rectangle value types.
- Hashing: canonical JSON and SHA-256 helpers for manifests.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Every error raised here is fatal at build time (see camctl.core.errors).

## Downstream usage
- camctl.io: loads schema documents into core models.
- camctl.gen: emits Python modules and C headers from a Snapshot.
- camctl.runtime: uses ControlType/TypeDescriptor to convert tagged values.

## Examples
```python
from camctl.core.naming import transform_identifier
transform_identifier("AeExposureMode")  # 'ae_exposure_mode'

from camctl.core.versioning import CompatMode, Version, resolve
resolve([Version.parse("0.4.0")], Version.parse("0.4.0"), CompatMode.EXACT)  # Version(0, 4, 0)
```
"""
