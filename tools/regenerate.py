"""
Regenerate every snapshot from upstream, or check committed snapshots for drift.

Usage:
    python tools/regenerate.py            # clone/fetch upstream, rewrite versioned_files/
    python tools/regenerate.py --check    # fail if any committed snapshot differs

The check compares the digests of freshly rendered outputs with the ones recorded in
each committed manifest, so it catches both generator changes and hand edits.
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from camctl.core.hashing import hash_documents
from camctl.gen.snapshot import read_manifest, render_snapshot, snapshot_dir, verify_snapshot, write_snapshot
from camctl.io.config import CamctlSettings
from camctl.io.loader import DirectoryReleaseSource, GitReleaseSource, ensure_clone, load_snapshots, parse_snapshot

# Files whose digests are compared; the manifest itself carries a timestamp.
SKIP = {"manifest.json"}


def main() -> int:
    p = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    p.add_argument("--check", action="store_true", help="Compare instead of writing.")
    p.add_argument("--source-dir", default="", help="Directory of v<semver>/ folders instead of git.")
    args = p.parse_args()

    load_dotenv()
    settings = CamctlSettings.load()
    logging.basicConfig(level=settings.log_level)

    if args.source_dir:
        source = DirectoryReleaseSource(args.source_dir)
    else:
        source = GitReleaseSource(ensure_clone(settings.git_url, settings.git_dir), settings.schema_dir)

    drift: list[str] = []
    for raw in load_snapshots(source):
        snapshot = parse_snapshot(raw)
        path = snapshot_dir(settings.versioned_dir, snapshot.version)
        if not args.check:
            write_snapshot(raw, snapshot, settings.versioned_dir)
            bad = verify_snapshot(path)
            if bad:
                drift.append(f"{snapshot.version}: unreadable after write: {bad}")
            continue

        manifest = read_manifest(path) if os.path.isdir(path) else None
        if manifest is None:
            drift.append(f"{snapshot.version}: not generated")
            continue
        files = {k: v for k, v in render_snapshot(raw, snapshot).items() if k not in SKIP}
        expected = {**manifest.sources, **manifest.outputs}
        for name, digest in hash_documents(files).items():
            if expected.get(name) != digest:
                drift.append(f"{snapshot.version}: {name} differs")
        bad = verify_snapshot(path)
        drift.extend(f"{snapshot.version}: {name} modified on disk" for name in bad)

    for line in drift:
        print(f"[ERROR] {line}", file=sys.stderr)
    if not drift:
        print("[ok] snapshots up to date" if args.check else "[ok] snapshots regenerated")
    return 1 if drift else 0


if __name__ == "__main__":
    raise SystemExit(main())
