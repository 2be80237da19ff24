"""
Filesystem helpers for camctl.io and camctl.gen.

Responsibilities
- Provide a minimal stdlib-only abstraction for the filesystem operations used when
  writing snapshots: directory creation, fsync'd text writes, atomic renames, and
  tree removal.
- Establish the atomic write path for snapshots: write into a temporary sibling
  directory, fsync each file, then rename the directory into place.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem;
  temporary directories are therefore always created next to their destination.
"""

from __future__ import annotations

import os
import shutil
import tempfile


def makedirs(path: str, exist_ok: bool = True) -> None:
    """
    Create directories recursively.

    Args:
        path (str): Directory path to create.
        exist_ok (bool): Do not error if the directory already exists.
    """
    os.makedirs(path, exist_ok=exist_ok)


def write_text(path: str, text: str) -> None:
    """
    Write UTF-8 text and fsync it before returning.

    Args:
        path (str): Destination file.
        text (str): Contents; newlines are written verbatim.
    """
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(text)
        fh.flush()
        os.fsync(fh.fileno())


def temp_dir_beside(path: str) -> str:
    """
    Create an empty temporary directory next to ``path`` (same filesystem).

    Returns:
        str: Temporary directory path; the caller renames or removes it.
    """
    parent = os.path.dirname(os.path.abspath(path))
    makedirs(parent)
    return tempfile.mkdtemp(prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=parent)


def rename_atomic(src: str, dst: str) -> None:
    """
    Atomically rename src -> dst on the same filesystem.

    Notes:
        An existing ``dst`` directory is removed first; the removal and the rename are
        two steps, so readers may briefly observe ``dst`` missing but never partial.
    """
    if os.path.isdir(dst):
        shutil.rmtree(dst)
    os.replace(src, dst)


def remove_tree(path: str) -> None:
    """Remove a directory tree if it exists."""
    shutil.rmtree(path, ignore_errors=True)


def listdir(path: str) -> list[str]:
    """
    List entry names in a directory (non-recursive).

    Returns:
        list[str]: Sorted entry names; [] if the directory does not exist.
    """
    try:
        return sorted(os.listdir(path))
    except FileNotFoundError:
        return []
