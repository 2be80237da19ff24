"""
Versioned snapshot writer and manifest helpers.

Layout
- <versioned_dir>/<version>/control_ids_*.yaml, property_ids_*.yaml  (sources, verbatim)
- <versioned_dir>/<version>/controls.py, properties.py                (generated modules)
- <versioned_dir>/<version>/controls.h                               (generated C header)
- <versioned_dir>/<version>/manifest.json

Manifest (JSON)
{
  "version": 1,
  "libcamera_version": "0.4.0",
  "tag": "v0.4.0",
  "generator": "camctl.gen",
  "created_at": "ISO-8601",
  "sources": {"control_ids_core.yaml": "<sha256>", ...},
  "outputs": {"controls.py": "<sha256>", ...},
  "digest": "<sha256 of the canonical JSON of every field except created_at and digest>"
}

Notes
- Every file is generated in memory first; nothing touches disk if generation fails.
- The directory is written beside its destination and renamed into place, so a
  reader never observes a partially written snapshot.
- The manifest is written as canonical JSON; its digest identifies the snapshot
  independently of when it was generated.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from camctl.core.constants import HEADER_NAME, MANIFEST_NAME
from camctl.core.hashing import hash_documents, hash_mapping, hash_text, json_dumps_canonical
from camctl.core.schema import Category, Snapshot
from camctl.core.versioning import Version
from camctl.io.errors import ArtifactError
from camctl.io.fs import listdir, remove_tree, rename_atomic, temp_dir_beside, write_text
from camctl.io.loader import RawSnapshot

from .c_header import generate_header
from .codegen import generate

__all__ = [
    "SnapshotManifest",
    "MODULE_NAMES",
    "snapshot_dir",
    "render_snapshot",
    "write_snapshot",
    "read_manifest",
    "verify_snapshot",
]

logger = logging.getLogger(__name__)

GENERATOR = "camctl.gen"
MANIFEST_VERSION = 1

# Category -> generated module filename.
MODULE_NAMES: dict[Category, str] = {
    Category.CONTROLS: "controls.py",
    Category.PROPERTIES: "properties.py",
}


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True)
class SnapshotManifest:
    """
    Manifest persisted at <versioned_dir>/<version>/manifest.json.

    Attributes:
        libcamera_version (str): Upstream release the snapshot was generated from.
        tag (str): Tag the sources were read from.
        sources (dict[str, str]): Source filename to SHA-256 of its text.
        outputs (dict[str, str]): Generated filename to SHA-256 of its text.
        generator (str): Generator identifier.
        created_at (str): ISO-8601 creation timestamp.
        version (int): Manifest layout version.
        digest (str): SHA-256 of the canonical JSON of the other fields, minus
            created_at; empty until sealed.
    """

    libcamera_version: str
    tag: str
    sources: dict[str, str] = field(default_factory=dict)
    outputs: dict[str, str] = field(default_factory=dict)
    generator: str = GENERATOR
    created_at: str = ""
    version: int = MANIFEST_VERSION
    digest: str = ""

    def identity(self) -> str:
        """Digest of the manifest content that does not depend on generation time."""
        body = self.to_json_obj()
        del body["created_at"], body["digest"]
        return hash_mapping(body)

    def to_json_obj(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> SnapshotManifest:
        return cls(
            libcamera_version=str(obj["libcamera_version"]),
            tag=str(obj.get("tag", "")),
            sources=dict(obj.get("sources") or {}),
            outputs=dict(obj.get("outputs") or {}),
            generator=str(obj.get("generator", GENERATOR)),
            created_at=str(obj.get("created_at", "")),
            version=int(obj.get("version", MANIFEST_VERSION)),
            digest=str(obj.get("digest", "")),
        )


def snapshot_dir(versioned_dir: str | os.PathLike[str], version: Version) -> str:
    """Path of the snapshot directory for ``version``."""
    return os.path.join(os.fspath(versioned_dir), str(version))


def render_snapshot(raw: RawSnapshot, snapshot: Snapshot) -> dict[str, str]:
    """
    Render every file of a snapshot directory, in memory.

    Args:
        raw (RawSnapshot): Source documents (copied verbatim).
        snapshot (Snapshot): Parsed form of ``raw``.

    Returns:
        dict[str, str]: Filename to text; includes the manifest.

    Raises:
        SchemaError: On reserved or duplicate names.
        GenerationError: If a generated module fails to compile.
    """
    sources = raw.all_documents()
    outputs = {MODULE_NAMES[c]: generate(snapshot, c) for c in Category}
    outputs[HEADER_NAME] = generate_header(snapshot)

    manifest = SnapshotManifest(
        libcamera_version=str(snapshot.version),
        tag=raw.tag,
        sources=hash_documents(sources),
        outputs=hash_documents(outputs),
        created_at=_utc_now_iso(),
    )
    manifest.digest = manifest.identity()
    files = {**sources, **outputs}
    files[MANIFEST_NAME] = json_dumps_canonical(manifest.to_json_obj()) + "\n"
    return files


def write_snapshot(
    raw: RawSnapshot, snapshot: Snapshot, versioned_dir: str | os.PathLike[str]
) -> str:
    """
    Generate and atomically write one snapshot directory.

    An existing directory for the same version is replaced.

    Returns:
        str: Path of the written directory.

    Raises:
        SchemaError, GenerationError: From generation; nothing is written.
        ArtifactError: If writing or renaming fails.
    """
    files = render_snapshot(raw, snapshot)
    final = snapshot_dir(versioned_dir, snapshot.version)
    tmp: str | None = None
    try:
        tmp = temp_dir_beside(final)
        for name in sorted(files):
            write_text(os.path.join(tmp, name), files[name])
        rename_atomic(tmp, final)
    except OSError as exc:
        if tmp is not None:
            remove_tree(tmp)
        raise ArtifactError(f"failed to write snapshot {snapshot.version} to {final}: {exc}") from exc
    logger.info("wrote snapshot %s (%d files) to %s", snapshot.version, len(files), final)
    return final


def read_manifest(path: str | os.PathLike[str]) -> SnapshotManifest | None:
    """
    Load the manifest of a snapshot directory.

    Returns:
        SnapshotManifest | None: None if the directory has no manifest.

    Raises:
        ArtifactError: If the manifest exists but cannot be parsed.
    """
    p = os.path.join(os.fspath(path), MANIFEST_NAME)
    if not os.path.exists(p):
        return None
    try:
        with open(p, encoding="utf-8") as fh:
            return SnapshotManifest.from_json_obj(json.load(fh))
    except (OSError, ValueError, KeyError, TypeError) as exc:
        raise ArtifactError(f"invalid manifest {p}: {exc}") from exc


def verify_snapshot(path: str | os.PathLike[str]) -> list[str]:
    """
    Compare a snapshot directory against its manifest.

    Returns:
        list[str]: Names of files that are missing or whose digest differs; [] when
        the directory is intact. The manifest itself is listed when its recorded digest
        no longer matches its content.

    Raises:
        ArtifactError: If the directory has no readable manifest.
    """
    manifest = read_manifest(path)
    if manifest is None:
        raise ArtifactError(f"{path} has no {MANIFEST_NAME}")
    present = set(listdir(os.fspath(path)))
    bad: list[str] = []
    if manifest.digest != manifest.identity():
        bad.append(MANIFEST_NAME)
    for name, digest in sorted({**manifest.sources, **manifest.outputs}.items()):
        if name not in present:
            bad.append(name)
            continue
        with open(os.path.join(os.fspath(path), name), encoding="utf-8", newline="") as fh:
            if hash_text(fh.read()) != digest:
                bad.append(name)
    return sorted(bad)
