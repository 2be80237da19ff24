"""
camctl core defaults.

Names and markers shared by the loader, the code generator and the runtime. This
module is zero-IO and uses only the Python standard library.

Notes:
    - CORE_VENDOR entries are compiled unconditionally; every other vendor is gated
      behind the feature ``VENDOR_FEATURE_PREFIX + vendor``.
    - File prefixes follow the upstream layout (``src/libcamera/control_ids_*.yaml``).
"""

from __future__ import annotations

__all__ = [
    "CORE_VENDOR",
    "DRAFT_VENDOR",
    "VENDOR_FEATURE_PREFIX",
    "DYNAMIC_SIZE_MARKER",
    "CONTROLS_FILE_PREFIX",
    "PROPERTIES_FILE_PREFIX",
    "SCHEMA_FILE_SUFFIX",
    "UPSTREAM_SCHEMA_DIR",
    "UPSTREAM_GIT_URL",
    "VERSIONED_DIR",
    "MANIFEST_NAME",
    "HEADER_NAME",
]

# Vendor of the upstream core control set (never feature-gated).
CORE_VENDOR: str = "libcamera"

# Vendor assigned to entries flagged ``draft: true`` in a document without a vendor.
DRAFT_VENDOR: str = "draft"

VENDOR_FEATURE_PREFIX: str = "vendor_"

# Sentinel in a ``size`` list marking a variable-length dimension.
DYNAMIC_SIZE_MARKER: str = "n"

CONTROLS_FILE_PREFIX: str = "control_ids"
PROPERTIES_FILE_PREFIX: str = "property_ids"
SCHEMA_FILE_SUFFIX: str = ".yaml"

UPSTREAM_SCHEMA_DIR: str = "src/libcamera"
UPSTREAM_GIT_URL: str = "https://git.libcamera.org/libcamera/libcamera.git"

# Default directory holding one generated snapshot per upstream version.
VERSIONED_DIR: str = "versioned_files"
MANIFEST_NAME: str = "manifest.json"
HEADER_NAME: str = "controls.h"
