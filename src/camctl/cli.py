from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import polars as pl
from dotenv import load_dotenv

from camctl.build import available_versions, install, select_snapshot
from camctl.core.errors import GenerationError, SchemaError, VersionMismatch
from camctl.core.schema import Category, Snapshot
from camctl.core.versioning import Version
from camctl.gen.c_header import generate_header
from camctl.gen.snapshot import snapshot_dir, write_snapshot
from camctl.io.config import CamctlSettings
from camctl.io.errors import IoError
from camctl.io.loader import (
    DirectoryReleaseSource,
    GitReleaseSource,
    ensure_clone,
    load_snapshots,
    parse_snapshot,
    read_snapshot_dir,
)

logger = logging.getLogger("camctl")

_FATAL = (SchemaError, GenerationError, VersionMismatch, IoError)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(levelname)s %(name)s: %(message)s")


def _settings(args: argparse.Namespace) -> CamctlSettings:
    """Settings from env/TOML, with command-line overrides applied last."""
    s = CamctlSettings.load(getattr(args, "config", None) or None)
    overrides = {
        "versioned_dir": getattr(args, "versioned_dir", None),
        "compat_mode": getattr(args, "compat_mode", None),
        "linked_version": getattr(args, "linked_version", None),
    }
    return CamctlSettings._apply_mapping(s, {k: v for k, v in overrides.items() if v})


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=str, default="", help="Explicit camctl TOML file.")
    p.add_argument("--versioned-dir", type=str, default="", help="Directory of generated snapshots.")


def _load_version(settings: CamctlSettings, version: str) -> Snapshot:
    v = Version.parse(version)
    return parse_snapshot(read_snapshot_dir(snapshot_dir(settings.versioned_dir, v), v))


def catalogue_frame(snapshot: Snapshot, category: Category) -> pl.DataFrame:
    """One row per definition: id, name, vendor, feature, type, shape, variants."""
    ids = snapshot.linkage_ids(category)
    rows = [
        {
            "id": ids[d.linkage_name],
            "name": d.name,
            "vendor": d.vendor,
            "feature": d.feature,
            "type": d.kind.label,
            "shape": d.descriptor.python_hint(),
            "variants": len(d.enumeration) if d.enumeration is not None else None,
        }
        for d in snapshot.definitions(category)
    ]
    schema = {
        "id": pl.Int64,
        "name": pl.Utf8,
        "vendor": pl.Utf8,
        "feature": pl.Utf8,
        "type": pl.Utf8,
        "shape": pl.Utf8,
        "variants": pl.Int64,
    }
    return pl.DataFrame(rows, schema=schema)


def _cmd_generate(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="camctl generate",
        description="Read upstream schema releases and write one generated snapshot per version.",
    )
    _add_common(p)
    p.add_argument(
        "--source-dir",
        type=str,
        default="",
        help="Directory of v<semver>/ schema folders (default: clone git_url into git_dir).",
    )
    p.add_argument("--tag", dest="tags", action="append", default=None, help="Only this tag (repeatable).")
    args = p.parse_args(argv)
    settings = _settings(args)

    if args.source_dir:
        source = DirectoryReleaseSource(args.source_dir)
    else:
        repo = ensure_clone(settings.git_url, settings.git_dir)
        source = GitReleaseSource(repo, settings.schema_dir)

    raws = load_snapshots(source, args.tags)
    if not raws:
        print("[INFO] No release tags with schema documents found")
        return 0
    for raw in raws:
        snapshot = parse_snapshot(raw)
        path = write_snapshot(raw, snapshot, settings.versioned_dir)
        print(f"[ok] {snapshot.version}: {len(snapshot.controls)} controls, {len(snapshot.properties)} properties -> {path}")
    return 0


def _cmd_versions(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="camctl versions", description="List generated snapshot versions.")
    _add_common(p)
    args = p.parse_args(argv)
    settings = _settings(args)

    versions = available_versions(settings.versioned_dir)
    if not versions:
        print(f"[INFO] No snapshots under {os.path.abspath(settings.versioned_dir)}")
        return 0
    for v in versions:
        print(v)
    return 0


def _cmd_select(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="camctl select", description="Resolve the snapshot matching the linked libcamera."
    )
    _add_common(p)
    p.add_argument("--linked-version", type=str, default="", help="Linked libcamera version.")
    p.add_argument("--compat-mode", choices=["exact", "caret"], default=None, help="Matching rule.")
    p.add_argument("--install", dest="dest", type=str, default="", help="Copy the selected modules here.")
    args = p.parse_args(argv)
    settings = _settings(args)

    version, path = select_snapshot(settings)
    print(f"[ok] selected {version} ({path})")
    if args.dest:
        for written in install(settings, args.dest):
            print(f"[INFO] Wrote {written}")
    return 0


def _cmd_header(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="camctl header", description="Print the C header of a snapshot.")
    _add_common(p)
    p.add_argument("version", type=str, help="Snapshot version, e.g. 0.4.0.")
    p.add_argument("--out", type=str, default="", help="Write to this file instead of stdout.")
    args = p.parse_args(argv)
    settings = _settings(args)

    header = generate_header(_load_version(settings, args.version))
    if args.out:
        Path(args.out).write_text(header, encoding="utf-8")
        print(f"[INFO] Wrote {args.out}")
    else:
        sys.stdout.write(header)
    return 0


def _cmd_catalogue(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="camctl catalogue", description="Show the definitions of a snapshot.")
    _add_common(p)
    p.add_argument("version", type=str, help="Snapshot version, e.g. 0.4.0.")
    p.add_argument("--category", choices=[c.value for c in Category], default=Category.CONTROLS.value)
    p.add_argument("--n", type=int, default=50, help="Rows to display.")
    args = p.parse_args(argv)
    settings = _settings(args)

    df = catalogue_frame(_load_version(settings, args.version), Category(args.category))
    with pl.Config(tbl_rows=args.n, tbl_width_chars=160, fmt_str_lengths=60):
        print(df.head(args.n))
    return 0


_COMMANDS = {
    "generate": _cmd_generate,
    "versions": _cmd_versions,
    "select": _cmd_select,
    "header": _cmd_header,
    "catalogue": _cmd_catalogue,
}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="camctl", description="libcamera control schema compiler.")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in _COMMANDS:
        sub.add_parser(name)
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    load_dotenv()
    _configure_logging(CamctlSettings.load().log_level)

    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = handler(rest)
    except _FATAL as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        code = 1
    except ValueError as exc:
        # Version.parse on a command-line argument
        print(f"[ERROR] {exc}", file=sys.stderr)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
