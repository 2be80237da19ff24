"""
Identifier transforms between schema names, linkage constants, and generated Python names.

Schema control names are PascalCase (``AeEnable``, ``ColourCorrectionMatrix``,
``Jpeg2000Quality``). The runtime's compiled constants use the UPPER_SNAKE form of
the same name (``AE_ENABLE``), so the transform below must be deterministic: it is
what binds every generated discriminant to the runtime's true integer value.

Naming standard
---------------
- Control/type names in generated code: schema name verbatim (PascalCase).
- Linkage constants: ``linkage_name(name)`` (UPPER_SNAKE).
- C identifiers: ``transform_identifier(name)`` (lower_snake).
- Enum variants: schema variant name with the owning control's prefix removed.

Split rules (``transform_identifier``)
--------------------------------------
A word boundary is inserted before character ``i`` (never before the first) when:
  1) it is uppercase and the previous character is lowercase   (``AeEnable`` → ae|enable)
  2) it is uppercase and the next character is lowercase        (``AWBMode``  → awb|mode)
  3) it is not a digit and the previous character is a digit    (``Hdr10Mode`` → hdr10|mode)

Examples
--------
>>> transform_identifier("AeEnable")
'ae_enable'
>>> transform_identifier("AwbMode")
'awb_mode'
>>> linkage_name("ColourCorrectionMatrix")
'COLOUR_CORRECTION_MATRIX'
>>> variant_name("AfModeManual", "AfMode")
'Manual'
"""

from __future__ import annotations

import keyword
import re
from typing import Final

from .errors import GrammarError

__all__ = [
    "transform_identifier",
    "linkage_name",
    "variant_name",
    "python_identifier",
    "is_schema_name",
    "assert_schema_name",
    "is_lower_snake",
]

_SCHEMA_NAME_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")
_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_schema_name(value: str) -> bool:
    """
    Check whether a string is a valid schema control name (ASCII alnum, leading letter).

    Examples:
        >>> is_schema_name("AeEnable")
        True
        >>> is_schema_name("ae-enable")
        False
    """
    return bool(_SCHEMA_NAME_RE.match(value or ""))


def assert_schema_name(value: str, what: str = "control name") -> str:
    """
    Validate a schema control name.

    Raises:
        GrammarError: If value is not a valid schema name.
    """
    if not is_schema_name(value):
        raise GrammarError(f"{what} must be an ASCII identifier starting with a letter (got: {value!r})")
    return value


def is_lower_snake(value: str) -> bool:
    """Check whether a string is lower_snake."""
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def transform_identifier(name: str) -> str:
    """
    Convert a mixed-case schema name to lower_snake using the three split rules.

    Args:
        name (str): Schema name (e.g., "AeExposureMode").

    Returns:
        str: lower_snake name (e.g., "ae_exposure_mode").

    Examples:
        >>> transform_identifier("AeExposureMode")
        'ae_exposure_mode'
        >>> transform_identifier("Jpeg2000Quality")
        'jpeg2000_quality'
        >>> transform_identifier("FrameDurationLimits")
        'frame_duration_limits'
    """
    out: list[str] = []
    for i, ch in enumerate(name):
        if i > 0:
            prev = name[i - 1]
            nxt = name[i + 1] if i + 1 < len(name) else ""
            split = (
                (ch.isupper() and prev.islower())
                or (ch.isupper() and nxt.islower())
                or (not ch.isdigit() and prev.isdigit())
            )
            if split:
                out.append("_")
        out.append(ch.lower())
    return "".join(out)


def linkage_name(name: str) -> str:
    """
    Name of the runtime constant backing a schema control (UPPER_SNAKE).

    Examples:
        >>> linkage_name("AeEnable")
        'AE_ENABLE'
    """
    return transform_identifier(name).upper()


def python_identifier(name: str) -> str:
    """Append an underscore to names that are Python keywords (``None`` → ``None_``)."""
    return f"{name}_" if keyword.iskeyword(name) else name


def variant_name(enumerator: str, control: str) -> str:
    """
    Generated enum member name for a schema enumerator.

    The owning control's name is removed when the enumerator starts with it. If
    the remainder is not a valid identifier (empty, or starts with a digit) the
    full enumerator name is kept. Python keywords get a trailing underscore.

    Examples:
        >>> variant_name("HdrChannelNone", "HdrChannel")
        'None_'
        >>> variant_name("MeteringSpot", "AeMeteringMode")
        'MeteringSpot'
    """
    stripped = enumerator[len(control):] if enumerator.startswith(control) else enumerator
    if not stripped.isidentifier() or stripped.startswith("_"):
        stripped = enumerator
    if not stripped.isidentifier():
        raise GrammarError(f"enumerator {enumerator!r} of {control!r} is not a valid identifier")
    return python_identifier(stripped)
