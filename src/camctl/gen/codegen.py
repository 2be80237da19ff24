"""
Python code generator: one module per snapshot and category.

For every definition, in schema order, the emitted module contains:

1. a member of the ``ControlId`` / ``PropertyId`` catalogue whose value is a linkage
   reference (``_ids.AE_ENABLE``) resolved against the linked runtime at import time;
2. a class: ``ControlEnum`` subclass when the schema declares ``enum``, otherwise a
   ``ControlWrapper`` subclass annotated with the value's Python type;
3. a ``@_control.bind(id, descriptor)`` binding;
4. an entry in ``_DYN_TABLE``, the table behind the module's ``make_dyn``.

Definitions of a non-core vendor get the same ``if _features.enabled("vendor_<name>"):``
guard on all four pieces. ``gating_map`` reads the guards back from the emitted source
and ``generate`` refuses to return a module whose pieces disagree.

Generated module skeleton::

    _ids = _linked.linkage("controls")

    class ControlId(_control.DiscriminantEnum):
        AeEnable = _ids.AE_ENABLE
        if _features.enabled("vendor_draft"):
            AePrecaptureTrigger = _ids.AE_PRECAPTURE_TRIGGER

    @_control.bind(ControlId.AeEnable, _types.TypeDescriptor(...))
    class AeEnable(_control.Control, _control.ControlWrapper):
        value: bool

    _DYN_TABLE = {ControlId.AeEnable: AeEnable}

    def make_dyn(id, value):
        return _control.make_dyn(_DYN_TABLE, id, value)

    registry = DynRegistry(CATEGORY, ControlId, make_dyn)
"""

from __future__ import annotations

import ast
import keyword
import logging
from collections.abc import Iterable
from itertools import groupby

from camctl.core.errors import GenerationError, SchemaError
from camctl.core.schema import Category, ControlDefinition, Snapshot

__all__ = ["generate", "gating_map", "GatingMap"]

logger = logging.getLogger(__name__)

GatingMap = dict[str, dict[str, str | None]]

# Module-level names a control may not shadow.
_RESERVED_NAMES = frozenset(
    {
        "ControlId",
        "PropertyId",
        "SNAPSHOT_VERSION",
        "CATEGORY",
        "DynRegistry",
        "make_dyn",
        "registry",
        "annotations",
    }
)
# Class attributes an enum variant may not shadow.
_RESERVED_VARIANTS = frozenset({"ID", "TYPE", "from_value", "to_value", "mro", "name", "value"})

_PIECES = ("catalogue", "class", "dispatch")


def _docstring(text: str, indent: str) -> list[str]:
    body = (text or "").strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if not body:
        return []
    if body.endswith('"'):
        body = body[:-1] + '\\"'
    lines = body.splitlines()
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    out = [f'{indent}"""']
    out.extend(f"{indent}{line}".rstrip() for line in lines)
    out.append(f'{indent}"""')
    return out


def _comment(text: str, indent: str) -> list[str]:
    return [f"{indent}#: {line}".rstrip() for line in (text or "").strip().splitlines()]


def _guard(feature: str) -> str:
    return f"if _features.enabled({feature!r}):"


def _check_names(definitions: Iterable[ControlDefinition]) -> None:
    seen: set[str] = set()
    for d in definitions:
        if d.name in seen:
            raise SchemaError(f"duplicate control name {d.name!r}")
        seen.add(d.name)
        if keyword.iskeyword(d.name) or d.name in _RESERVED_NAMES:
            raise SchemaError(f"control name {d.name!r} is reserved in generated modules")
        for variant in d.variant_names():
            if variant in _RESERVED_VARIANTS:
                raise SchemaError(f"{d.name}: enum variant {variant!r} is reserved")


def _catalogue(definitions: list[ControlDefinition], category: Category) -> list[str]:
    lines = [
        f"class {category.id_enum}(_control.DiscriminantEnum):",
        f'    """Numeric ids of the {category.value} in this snapshot, as linked."""',
    ]
    for feature, group in groupby(definitions, key=lambda d: d.feature):
        members = [f"{d.name} = _ids.{d.linkage_name}" for d in group]
        if feature is None:
            lines.extend(f"    {m}" for m in members)
        else:
            lines.append(f"    {_guard(feature)}")
            lines.extend(f"        {m}" for m in members)
    return lines


def _control_class(d: ControlDefinition, category: Category, indent: str) -> list[str]:
    base = "_control.ControlEnum" if d.is_enum else "_control.ControlWrapper"
    lines = [
        f"{indent}@_control.bind({category.id_enum}.{d.name}, {d.descriptor.source('_types.')})",
        f"{indent}class {d.name}(_control.{category.marker}, {base}):",
    ]
    inner = indent + "    "
    doc = _docstring(d.description, inner)
    lines.extend(doc)
    if d.is_enum:
        variants = list(zip(d.enumeration or (), d.variant_names()))
        if variants and doc:
            lines.append("")
        for i, (variant, py_name) in enumerate(variants):
            if i and variant.description:
                lines.append("")
            lines.extend(_comment(variant.description, inner))
            lines.append(f"{inner}{py_name} = {variant.value}")
        if not variants and not doc:
            lines.append(f"{inner}pass")
    else:
        if doc:
            lines.append("")
        lines.append(f"{inner}value: {d.descriptor.python_hint()}")
    return lines


def _dispatch(definitions: list[ControlDefinition], category: Category) -> list[str]:
    core = [d for d in definitions if d.feature is None]
    lines = ["_DYN_TABLE: dict[int, type[_control.ControlEntry]] = {"]
    lines.extend(f"    {category.id_enum}.{d.name}: {d.name}," for d in core)
    lines.append("}")

    gated: dict[str, list[ControlDefinition]] = {}
    for d in definitions:
        if d.feature is not None:
            gated.setdefault(d.feature, []).append(d)
    for feature, group in gated.items():
        lines.append(_guard(feature))
        lines.append("    _DYN_TABLE.update(")
        lines.append("        {")
        lines.extend(f"            {category.id_enum}.{d.name}: {d.name}," for d in group)
        lines.append("        }")
        lines.append("    )")
    return lines


def generate(snapshot: Snapshot, category: Category | str) -> str:
    """
    Emit the Python module for one category of a snapshot.

    Args:
        snapshot (Snapshot): Parsed release.
        category (Category | str): "controls" or "properties".

    Returns:
        str: Module source.

    Raises:
        SchemaError: On duplicate or reserved names.
        GenerationError: If the emitted source does not parse, or its feature guards
            disagree between catalogue, class, and dispatch table.
    """
    category = Category.from_value(category)
    definitions = list(snapshot.definitions(category))
    _check_names(definitions)
    v = snapshot.version
    title = "controls" if category is Category.CONTROLS else "properties"

    lines: list[str] = [
        f'"""Generated {title} catalogue for libcamera {v}.',
        "",
        "Do not edit: regenerate with ``camctl generate``.",
        '"""',
        "",
        "# fmt: off",
        "from __future__ import annotations",
        "",
        "from typing import TYPE_CHECKING",
        "",
        "from camctl.core import types as _types",
        "from camctl.core.versioning import Version",
        "from camctl.runtime import control as _control",
        "from camctl.runtime import features as _features",
        "from camctl.runtime import linked as _linked",
        "from camctl.runtime.registry import DynRegistry",
        "from camctl.runtime.value import ControlValue",
        "",
        "if TYPE_CHECKING:",
        "    from camctl.core.geometry import Point, Rectangle, Size",
        "",
        f"SNAPSHOT_VERSION = Version({v.major}, {v.minor}, {v.patch})",
        f"CATEGORY = {category.value!r}",
        "",
        "_ids = _linked.linkage(CATEGORY)",
        "",
        "",
    ]
    lines.extend(_catalogue(definitions, category))

    for d in definitions:
        lines.extend(["", ""])
        if d.feature is None:
            lines.extend(_control_class(d, category, ""))
        else:
            lines.append(_guard(d.feature))
            lines.append("")
            lines.extend(_control_class(d, category, "    "))

    lines.extend(["", ""])
    lines.extend(_dispatch(definitions, category))
    lines.extend(
        [
            "",
            "",
            "def make_dyn(id: int, value: ControlValue) -> _control.DynControlEntry:",
            '    """Type-erased entry for ``id``; raises ControlNotFound or ControlValueError."""',
            "    return _control.make_dyn(_DYN_TABLE, id, value)",
            "",
            "",
            f"registry = DynRegistry(CATEGORY, {category.id_enum}, make_dyn)",
            "",
        ]
    )
    source = "\n".join(lines)

    mismatched = {
        name: pieces
        for name, pieces in gating_map(source, category).items()
        if set(pieces) != set(_PIECES) or len(set(pieces.values())) != 1
    }
    if mismatched:
        raise GenerationError(f"inconsistent feature guards in generated {title}: {mismatched}")

    logger.debug("generated %s for %s (%d definitions)", title, v, len(definitions))
    return source


def _feature_of(test: ast.expr) -> str | None:
    # Matches ``_features.enabled("vendor_x")``.
    if (
        isinstance(test, ast.Call)
        and isinstance(test.func, ast.Attribute)
        and test.func.attr == "enabled"
        and isinstance(test.func.value, ast.Name)
        and test.func.value.id == "_features"
        and len(test.args) == 1
        and isinstance(test.args[0], ast.Constant)
    ):
        return str(test.args[0].value)
    return None


def _guarded(body: list[ast.stmt], feature: str | None = None) -> Iterable[tuple[ast.stmt, str | None]]:
    for node in body:
        if isinstance(node, ast.If):
            inner = _feature_of(node.test)
            if inner is not None:
                yield from _guarded(node.body, inner)
                continue
        yield node, feature


def _dict_keys(node: ast.expr | None) -> list[str]:
    if not isinstance(node, ast.Dict):
        return []
    return [k.attr for k in node.keys if isinstance(k, ast.Attribute)]


def gating_map(source: str, category: Category | str) -> GatingMap:
    """
    Feature guard of each control's catalogue member, class, and dispatch entry.

    Args:
        source (str): Generated module source.
        category (Category | str): Category the module was generated for.

    Returns:
        GatingMap: ``{name: {"catalogue": f, "class": f, "dispatch": f}}`` where ``f`` is
        the guarding feature or None.

    Raises:
        GenerationError: If ``source`` does not parse.
    """
    category = Category.from_value(category)
    try:
        tree = ast.parse(source)
    except SyntaxError as exc:
        raise GenerationError(f"generated source does not parse: {exc}") from exc

    out: GatingMap = {}
    for node, feature in _guarded(tree.body):
        if isinstance(node, ast.ClassDef) and node.name == category.id_enum:
            for member, member_feature in _guarded(node.body):
                if isinstance(member, ast.Assign):
                    for target in member.targets:
                        if isinstance(target, ast.Name):
                            out.setdefault(target.id, {})["catalogue"] = member_feature
        elif isinstance(node, ast.ClassDef) and node.decorator_list:
            out.setdefault(node.name, {})["class"] = feature
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name) and node.target.id == "_DYN_TABLE":
            for name in _dict_keys(node.value):
                out.setdefault(name, {})["dispatch"] = feature
        elif (
            isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Call)
            and isinstance(node.value.func, ast.Attribute)
            and node.value.func.attr == "update"
            and node.value.args
        ):
            for name in _dict_keys(node.value.args[0]):
                out.setdefault(name, {})["dispatch"] = feature
    return out
