"""
C header emitter for a snapshot.

The header mirrors the runtime's C API: one ``enum libcamera_control_id`` and one
``enum libcamera_property_id`` numbering every definition sequentially from 1 in
schema order, then one enum per ``enum`` definition listing its variants. The same
numbering is what LinkedRuntime.from_snapshot produces, and LinkedRuntime.from_header
reads these constants back.

Layout::

    #define LIBCAMERA_VERSION_MAJOR 0
    ...
    enum libcamera_control_id {
        /**
         * \\brief Enable or disable the AE.
         */
        LIBCAMERA_CONTROL_ID_AE_ENABLE = 1,
    };

    /**
     * \\brief Supported values for LIBCAMERA_CONTROL_ID_AE_METERING_MODE control
     */
    enum libcamera_ae_metering_mode {
        LIBCAMERA_METERING_CENTRE_WEIGHTED = 0,
    };
"""

from __future__ import annotations

from camctl.core.naming import linkage_name
from camctl.core.schema import Category, ControlDefinition, Snapshot

__all__ = ["generate_header"]

_INDENT = "    "


def _doc(text: str, indent: str) -> list[str]:
    lines = (text or "").strip().replace("*/", "* /").splitlines()
    if not lines:
        return []
    out = [f"{indent}/**", f"{indent} * \\brief {lines[0]}".rstrip()]
    out.extend(f"{indent} * {line}".rstrip() for line in lines[1:])
    out.append(f"{indent} */")
    return out


def _id_enum(snapshot: Snapshot, category: Category) -> list[str]:
    ids = snapshot.linkage_ids(category)
    lines = [f"enum {category.c_enum} {{"]
    for d in snapshot.definitions(category):
        lines.extend(_doc(d.description, _INDENT))
        lines.append(f"{_INDENT}{category.c_prefix}{d.linkage_name} = {ids[d.linkage_name]},")
    lines.append("};")
    return lines


def _variant_enum(d: ControlDefinition, category: Category) -> list[str]:
    lines = _doc(f"Supported values for {category.c_prefix}{d.linkage_name} control", "")
    lines.append(f"enum libcamera_{d.c_name} {{")
    for variant in d.enumeration or ():
        lines.extend(_doc(variant.description, _INDENT))
        lines.append(f"{_INDENT}LIBCAMERA_{linkage_name(variant.name)} = {variant.value},")
    lines.append("};")
    return lines


def generate_header(snapshot: Snapshot) -> str:
    """
    Emit the C header for ``snapshot``.

    Args:
        snapshot (Snapshot): Parsed release.

    Returns:
        str: Header text (newline-terminated).
    """
    v = snapshot.version
    guard = "__LIBCAMERA_CONTROL_IDS_H__"
    lines = [
        f"/* Generated for libcamera {v}. Do not edit: regenerate with camctl generate. */",
        f"#ifndef {guard}",
        f"#define {guard}",
        "",
        f"#define LIBCAMERA_VERSION_MAJOR {v.major}",
        f"#define LIBCAMERA_VERSION_MINOR {v.minor}",
        f"#define LIBCAMERA_VERSION_PATCH {v.patch}",
    ]
    for category in Category:
        lines.append("")
        lines.extend(_id_enum(snapshot, category))
    for category in Category:
        for d in snapshot.definitions(category):
            if d.is_enum:
                lines.append("")
                lines.extend(_variant_enum(d, category))
    lines.extend(["", f"#endif /* {guard} */", ""])
    return "\n".join(lines)
