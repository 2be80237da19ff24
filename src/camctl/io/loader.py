"""
Schema source loader: release tags in, raw and parsed snapshots out.

Layout (upstream baseline)
- <repo>/src/libcamera/control_ids_*.yaml   -> controls
- <repo>/src/libcamera/property_ids_*.yaml  -> properties

Sources
- GitReleaseSource: reads tags and blobs with the ``git`` CLI, without a checkout.
- DirectoryReleaseSource: one ``v<semver>/`` subdirectory per release (tests, vendored corpora).

Rules
- Only the last ``/`` segment of a tag is considered and it must read ``v<semver>``;
  anything else is skipped (most upstream tags are unrelated).
- ``0.0.0`` is skipped; a version seen twice keeps its first tag.
- Documents are keyed by filename and ordered by filename within a category.
- Any failure to parse a document of an accepted release is fatal (SchemaError naming
  the file): generation never silently drops controls.

Import DAG discipline
- Depends on stdlib, PyYAML, pydantic, and camctl.core.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from camctl.core.constants import SCHEMA_FILE_SUFFIX, UPSTREAM_SCHEMA_DIR
from camctl.core.errors import SchemaError
from camctl.core.schema import Category, ControlDefinition, Snapshot
from camctl.core.versioning import Version, parse_tag

from .errors import SourceError

__all__ = [
    "RawSnapshot",
    "ReleaseSource",
    "GitReleaseSource",
    "DirectoryReleaseSource",
    "ensure_clone",
    "load_snapshots",
    "read_snapshot_dir",
    "parse_documents",
    "parse_snapshot",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawSnapshot:
    """
    Raw schema text of one release.

    Attributes:
        version (Version): Release version.
        tag (str): Tag the documents were read from.
        controls (dict[str, str]): ``control_ids*.yaml`` filename to text.
        properties (dict[str, str]): ``property_ids*.yaml`` filename to text.
    """

    version: Version
    tag: str
    controls: dict[str, str] = field(default_factory=dict)
    properties: dict[str, str] = field(default_factory=dict)

    def documents(self, category: Category) -> dict[str, str]:
        return self.controls if category is Category.CONTROLS else self.properties

    def all_documents(self) -> dict[str, str]:
        return {**self.controls, **self.properties}


class ReleaseSource(Protocol):
    def tags(self) -> list[str]: ...

    def list_files(self, tag: str) -> list[str]: ...

    def read_file(self, tag: str, name: str) -> str: ...


def _run_git(args: list[str], cwd: str | os.PathLike[str] | None = None) -> str:
    try:
        r = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise SourceError(f"cannot run git in {cwd or os.getcwd()}: {exc}") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise SourceError(f"git {' '.join(args)} failed: {stderr}") from exc
    return r.stdout or ""


class GitReleaseSource:
    """
    Release source backed by a git repository.

    Args:
        repo_dir: Repository (clone) directory.
        schema_dir (str): Directory of schema documents inside each tagged tree.
    """

    def __init__(self, repo_dir: str | os.PathLike[str], schema_dir: str = UPSTREAM_SCHEMA_DIR) -> None:
        self.repo_dir = Path(repo_dir)
        self.schema_dir = schema_dir.strip("/")

    def tags(self) -> list[str]:
        return [t.strip() for t in _run_git(["tag", "--list"], cwd=self.repo_dir).splitlines() if t.strip()]

    def list_files(self, tag: str) -> list[str]:
        try:
            out = _run_git(["ls-tree", "--name-only", f"{tag}:{self.schema_dir}"], cwd=self.repo_dir)
        except SourceError as exc:
            logger.warning("tag %s has no %s: %s", tag, self.schema_dir, exc)
            return []
        return sorted(n.strip() for n in out.splitlines() if n.strip())

    def read_file(self, tag: str, name: str) -> str:
        return _run_git(["show", f"{tag}:{self.schema_dir}/{name}"], cwd=self.repo_dir)


class DirectoryReleaseSource:
    """
    Release source backed by a directory of ``<tag>/`` subdirectories.

    Each subdirectory name is treated as a tag (``v0.4.0/control_ids_core.yaml``).
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)
        if not self.root.is_dir():
            raise SourceError(f"release directory not found: {self.root}")

    def tags(self) -> list[str]:
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def list_files(self, tag: str) -> list[str]:
        d = self.root / tag
        if not d.is_dir():
            return []
        return sorted(p.name for p in d.iterdir() if p.is_file())

    def read_file(self, tag: str, name: str) -> str:
        try:
            return (self.root / tag / name).read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceError(f"cannot read {self.root / tag / name}: {exc}") from exc


def ensure_clone(url: str, git_dir: str | os.PathLike[str]) -> Path:
    """
    Clone ``url`` into ``git_dir`` (no checkout), or fetch every tag if it already exists.

    Raises:
        SourceError: If git fails.
    """
    path = Path(git_dir)
    if (path / ".git").exists() or (path / "HEAD").exists():
        logger.info("fetching tags in %s", path)
        _run_git(["fetch", "--tags", "--force", "origin"], cwd=path)
    else:
        logger.info("cloning %s into %s", url, path)
        path.parent.mkdir(parents=True, exist_ok=True)
        _run_git(["clone", "--no-checkout", url, str(path)])
    return path


def _is_schema_file(name: str, category: Category) -> bool:
    return name.startswith(category.file_prefix) and name.endswith(SCHEMA_FILE_SUFFIX)


def load_snapshots(source: ReleaseSource, tags: Iterable[str] | None = None) -> list[RawSnapshot]:
    """
    Read the raw schema documents of every release tag.

    Args:
        source (ReleaseSource): Where tags and documents come from.
        tags (Iterable[str] | None): Tags to consider; all of the source's tags when None.

    Returns:
        list[RawSnapshot]: One per accepted release, ordered by version.
    """
    by_version: dict[Version, RawSnapshot] = {}
    for tag in list(tags) if tags is not None else source.tags():
        version = parse_tag(tag)
        if version is None:
            logger.debug("skipping tag %s: not a release tag", tag)
            continue
        if version.is_zero():
            logger.debug("skipping tag %s: zero version", tag)
            continue
        if version in by_version:
            logger.warning("skipping tag %s: version %s already read from %s", tag, version, by_version[version].tag)
            continue

        files = source.list_files(tag)
        docs: dict[Category, dict[str, str]] = {}
        for category in Category:
            docs[category] = {
                name: source.read_file(tag, name) for name in sorted(files) if _is_schema_file(name, category)
            }
        if not docs[Category.CONTROLS] and not docs[Category.PROPERTIES]:
            logger.info("skipping tag %s: no schema documents", tag)
            continue

        logger.info(
            "read %s: %d control and %d property documents",
            version,
            len(docs[Category.CONTROLS]),
            len(docs[Category.PROPERTIES]),
        )
        by_version[version] = RawSnapshot(
            version=version,
            tag=tag,
            controls=docs[Category.CONTROLS],
            properties=docs[Category.PROPERTIES],
        )
    return [by_version[v] for v in sorted(by_version)]


def read_snapshot_dir(path: str | os.PathLike[str], version: Version | None = None) -> RawSnapshot:
    """
    Read the schema documents stored in a generated snapshot directory.

    Args:
        path: ``<versioned_dir>/<version>`` directory.
        version (Version | None): Snapshot version; parsed from the directory name when None.

    Raises:
        SourceError: If the directory is missing, unnamed by a version, or holds no documents.
    """
    root = Path(path)
    if not root.is_dir():
        raise SourceError(f"snapshot directory not found: {root}")
    if version is None:
        try:
            version = Version.parse(root.name)
        except ValueError as exc:
            raise SourceError(f"{root} is not named by a version") from exc
    docs: dict[Category, dict[str, str]] = {c: {} for c in Category}
    for p in sorted(root.iterdir()):
        for category in Category:
            if p.is_file() and _is_schema_file(p.name, category):
                docs[category][p.name] = p.read_text(encoding="utf-8")
    if not any(docs.values()):
        raise SourceError(f"{root} holds no schema documents")
    return RawSnapshot(
        version=version,
        tag=f"v{version}",
        controls=docs[Category.CONTROLS],
        properties=docs[Category.PROPERTIES],
    )


def _entries(filename: str, root: Any) -> Iterable[tuple[str, Any]]:
    if not isinstance(root, Mapping):
        raise SchemaError(f"{filename}: document must be a mapping")
    controls = root.get("controls")
    if not isinstance(controls, list):
        raise SchemaError(f"{filename}: missing 'controls' list")
    for item in controls:
        if not isinstance(item, Mapping) or len(item) != 1:
            raise SchemaError(f"{filename}: each control must be a single-key mapping, got {item!r}")
        ((name, body),) = item.items()
        yield str(name), body


def parse_documents(documents: Mapping[str, str]) -> tuple[ControlDefinition, ...]:
    """
    Parse every document of one category, in filename order.

    Raises:
        SchemaError: If any document fails to parse; the message (or note) names the file.
    """
    out: list[ControlDefinition] = []
    for filename in sorted(documents):
        try:
            roots = [r for r in yaml.safe_load_all(documents[filename]) if r is not None]
        except yaml.YAMLError as exc:
            raise SchemaError(f"{filename}: invalid YAML: {exc}") from exc
        for root in roots:
            vendor = root.get("vendor") if isinstance(root, Mapping) else None
            for name, body in _entries(filename, root):
                try:
                    out.append(ControlDefinition.from_schema_entry(name, body, vendor))
                except ValidationError as exc:
                    raise SchemaError(f"{filename}: {name}: {exc}") from exc
                except SchemaError as exc:
                    exc.add_note(f"in {filename}")
                    raise
    return tuple(out)


def parse_snapshot(raw: RawSnapshot) -> Snapshot:
    """
    Parse a RawSnapshot into a Snapshot.

    Raises:
        SchemaError: On any document failure or duplicate name within a category.
    """
    controls = parse_documents(raw.controls)
    properties = parse_documents(raw.properties)
    try:
        return Snapshot(version=raw.version, controls=controls, properties=properties)
    except ValidationError as exc:
        raise SchemaError(f"{raw.version}: {exc}") from exc
