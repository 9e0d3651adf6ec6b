#!/usr/bin/env python3
"""
Browser Bookmark Snapshot Sync Tool
Exports the bookmarks bar to an editable YAML snapshot and applies an edited
snapshot back, preserving bookmark ids, GUIDs and dates wherever possible.
"""

import argparse
import copy
import json
import os
import shutil
import sys
from datetime import datetime
from typing import Dict, List, Optional

from bookmark_backend import ChromeBookmarksBackend, BookmarkBackendError, ROOT_KEYS
from snapshot_format import (
    DesiredNode,
    SnapshotError,
    dump_snapshot,
    load_snapshot,
    parse_snapshot,
    snapshot_from_native,
)
from snapshot_reconciler import ReconcileResult, SnapshotReconciler, setup_sync_logger
from sync_config import SyncConfig


class BookmarkManager:
    def __init__(self, bookmark_file: str):
        self.bookmark_file = bookmark_file
        self.bookmarks = None

    def load_bookmarks(self) -> Dict:
        """Load bookmarks from Chrome/Edge bookmark file"""
        with open(self.bookmark_file, 'r', encoding='utf-8') as f:
            self.bookmarks = json.load(f)
        return self.bookmarks

    def create_backup(self, backup_file: Optional[str] = None) -> str:
        """Create a backup of the original bookmark file"""
        if not backup_file:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            backup_file = f"{self.bookmark_file}.backup_{timestamp}"
        shutil.copy2(self.bookmark_file, backup_file)
        return backup_file

    def save_bookmarks(self, output_file: Optional[str] = None):
        """Save bookmarks back to the bookmark file, or to output_file"""
        with open(output_file or self.bookmark_file, 'w', encoding='utf-8') as f:
            json.dump(self.bookmarks, f, indent=3, ensure_ascii=False)

    def export_snapshot(self, yaml_file: str, anchor: str = 'bookmark_bar') -> int:
        """Write the anchor subtree to a YAML snapshot; returns the node count"""
        backend = ChromeBookmarksBackend(self.bookmarks)
        tree = backend.get_subtree(backend.root_id(anchor))
        snapshot = snapshot_from_native(tree)

        with open(yaml_file, 'w', encoding='utf-8') as f:
            f.write(dump_snapshot(snapshot))
        return self._count_snapshot_nodes(snapshot['children'])

    def _count_snapshot_nodes(self, children: List[Dict]) -> int:
        return sum(1 + self._count_snapshot_nodes(child.get('children', [])) for child in children)

    def apply_snapshot(self, desired_children: List[DesiredNode], anchor: str = 'bookmark_bar',
                       logger=None, show_progress: bool = False) -> ReconcileResult:
        """Reconcile the loaded bookmarks against the desired tree, in memory"""
        backend = ChromeBookmarksBackend(self.bookmarks)
        reconciler = SnapshotReconciler(backend, logger=logger, show_progress=show_progress)
        return reconciler.run(desired_children, backend.root_id(anchor))


def read_snapshot_file(yaml_file: str) -> List[DesiredNode]:
    """Load and validate a snapshot file; raises SnapshotError on bad input"""
    try:
        with open(yaml_file, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise SnapshotError(f"Snapshot is not valid UTF-8: {e}") from e
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot: {e}") from e
    raw = load_snapshot(text)
    return parse_snapshot(raw)


def print_summary(result: ReconcileResult):
    print(f"\n📊 Summary:")
    print(f"  Existing bookmarks indexed: {result.indexed}")
    print(f"  Reused: {result.reused}")
    print(f"  Moved: {result.moved}")
    print(f"  Created: {result.created}")
    print(f"  Renamed/retargeted: {result.updated}")
    print(f"  Removed: {result.deleted}")


def run_export(config: SyncConfig) -> int:
    if not os.path.exists(config.bookmarks_file):
        print(f"❌ Error: Bookmark file '{config.bookmarks_file}' not found.")
        return 1

    manager = BookmarkManager(config.bookmarks_file)
    try:
        manager.load_bookmarks()
        count = manager.export_snapshot(config.yaml_file, config.anchor)
    except (json.JSONDecodeError, BookmarkBackendError) as e:
        print(f"❌ Error reading bookmarks: {e}")
        return 1

    print(f"✅ Successfully exported {count} bookmarks to {config.yaml_file}")
    print(f"You can now edit this YAML file, and run the import command to apply changes.")
    return 0


def run_import(config: SyncConfig, output_file: Optional[str] = None, dry_run: bool = False,
               backup: bool = True, show_progress: bool = True) -> int:
    if not os.path.exists(config.yaml_file):
        print(f"❌ Error: Snapshot '{config.yaml_file}' not found. Please run export first or create it.")
        return 1
    if not os.path.exists(config.bookmarks_file):
        print(f"❌ Error: Bookmark file '{config.bookmarks_file}' not found.")
        return 1

    # Validate the whole snapshot before touching anything
    try:
        desired = read_snapshot_file(config.yaml_file)
    except SnapshotError as e:
        print(f"❌ Snapshot error: {e}")
        return 1

    manager = BookmarkManager(config.bookmarks_file)
    try:
        manager.load_bookmarks()
    except json.JSONDecodeError as e:
        print(f"❌ Error reading bookmarks: {e}")
        return 1

    if dry_run:
        manager.bookmarks = copy.deepcopy(manager.bookmarks)
    elif backup:
        backup_file = manager.create_backup(config.backup_file)
        print(f"📄 Backup created: {backup_file}")

    logger = setup_sync_logger(config.log_dir)
    try:
        result = manager.apply_snapshot(desired, config.anchor, logger=logger, show_progress=show_progress)
    except BookmarkBackendError as e:
        print(f"❌ Import error: {e}")
        return 1

    print_summary(result)

    if dry_run:
        print(f"\n🔍 Dry run: no changes written")
        return 0

    manager.save_bookmarks(output_file)
    print(f"\n✅ Successfully imported changes into {output_file or config.bookmarks_file}")
    if not output_file:
        print("IMPORTANT: Please ensure the browser was completely closed before doing this. "
              "If it was open, it may overwrite these changes when it next saves or syncs.")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Browser Bookmark Snapshot Sync Tool")
    parser.add_argument("command", choices=["export", "import"],
                        help="export: write bookmarks to YAML; import: apply edited YAML to bookmarks")
    parser.add_argument("--bookmarks-file", help="Path to browser bookmark file (default: Chrome Default profile)")
    parser.add_argument("--yaml-file", help="Path to the YAML snapshot (default: bookmarks.yaml)")
    parser.add_argument("--anchor", choices=ROOT_KEYS, help="Bookmark root to sync (default: bookmark_bar)")
    parser.add_argument("--output", "-o", help="Write imported bookmarks here instead of the bookmark file")
    parser.add_argument("--backup-file", help="Backup path used before import")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before import")
    parser.add_argument("--dry-run", action="store_true", help="Reconcile in memory and report, without saving")
    parser.add_argument("--quiet", "-q", action="store_true", help="Hide progress bars")

    args = parser.parse_args()

    try:
        config = SyncConfig.from_env(
            bookmarks_file=args.bookmarks_file,
            yaml_file=args.yaml_file,
            anchor=args.anchor,
            backup_file=args.backup_file,
        )
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    if args.command == "export":
        code = run_export(config)
    else:
        code = run_import(config, output_file=args.output, dry_run=args.dry_run,
                          backup=not args.no_backup, show_progress=not args.quiet)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
