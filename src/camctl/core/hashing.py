"""
Canonical JSON serialization and hashing helpers for snapshot manifests.

Provides a single canonical JSON policy and SHA-256 helpers so that a snapshot's
manifest (and therefore its identity) is stable across runs and machines. This
module is zero-IO and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Text is hashed over its UTF-8 encoding; documents are hashed exactly as read.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_text",
    "hash_documents",
    "hash_mapping",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_text(text: str) -> str:
    """
    SHA-256 hex digest of a text document.

    Examples:
        >>> hash_text("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        True
    """
    return _sha256_hexdigest(text)


def hash_documents(documents: Mapping[str, str]) -> dict[str, str]:
    """
    Digest every document of a snapshot.

    Args:
        documents (Mapping[str, str]): Filename to document text.

    Returns:
        dict[str, str]: Filename to SHA-256 hex digest, ordered by filename.
    """
    return {name: hash_text(documents[name]) for name in sorted(documents)}


def hash_mapping(obj: Mapping[str, Any]) -> str:
    """
    Compute a stable hash for a mapping by hashing its canonical JSON.

    Notes:
        Re-ordering keys in the mapping does not change the result.

    Examples:
        >>> hash_mapping({"a": 1, "b": 2}) == hash_mapping({"b": 2, "a": 1})
        True
    """
    return _sha256_hexdigest(json_dumps_canonical(dict(obj)))
