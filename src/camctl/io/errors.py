"""
Custom exceptions for the camctl.io module.

Purpose
- Provide IO-layer specific error types that map cleanly to responsibilities in camctl.io.
- Keep camctl.core as the source of truth for schema/naming/versioning errors (see camctl.core.errors).

Source of truth and boundaries
- camctl.core.errors.SchemaError is raised for unparseable or invalid schema documents.
- camctl.io raises Io* errors for configuration, release-source, and artifact concerns:
  - IoConfigError: invalid or unsupported configuration.
  - SourceError: a git or directory release source could not be read.
  - ArtifactError: a generated snapshot could not be written or read back.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

__all__ = ["IoError", "IoConfigError", "SourceError", "ArtifactError"]


class IoError(Exception):
    """
    Base class for IO-related errors in camctl.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from camctl.core errors.
    """


class IoConfigError(IoError):
    """
    Raised when configuration is invalid or unsupported.

    Examples:
        - Unknown compat mode
        - Linked version that is not a semantic version
    """


class SourceError(IoError):
    """
    Raised when a release source cannot be read.

    Notes:
        Wraps failures of the ``git`` CLI (missing binary, unknown ref, failed clone)
        and missing schema directories.
    """


class ArtifactError(IoError):
    """
    Raised when a generated snapshot cannot be written, found, or loaded.

    Notes:
        Snapshot writes go to a temporary directory that is renamed into place, so a
        failure never leaves a partial snapshot behind.
    """
