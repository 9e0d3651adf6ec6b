#!/usr/bin/env python3

"""
Apply an edited YAML snapshot to a bookmarks file without prompts
"""

import sys

from bookmark_backend import BookmarkBackendError
from bookmark_manager import BookmarkManager, print_summary, read_snapshot_file
from snapshot_format import SnapshotError

def main():
    if len(sys.argv) != 4:
        print("Usage: python apply_snapshot.py <bookmarks_file> <snapshot.yaml> <output_file>")
        print("Example: python apply_snapshot.py Bookmarks bookmarks.yaml Bookmarks.new")
        sys.exit(1)
    
    bookmarks_file = sys.argv[1]
    snapshot_file = sys.argv[2]
    output_file = sys.argv[3]
    
    # Load the snapshot first so a bad edit never produces output
    print(f"📄 Loading snapshot from: {snapshot_file}")
    try:
        desired = read_snapshot_file(snapshot_file)
    except (OSError, SnapshotError) as e:
        print(f"❌ Failed to load snapshot: {e}")
        sys.exit(1)
    
    print(f"📚 Loading bookmarks from: {bookmarks_file}")
    manager = BookmarkManager(bookmarks_file)
    try:
        manager.load_bookmarks()
    except (OSError, ValueError) as e:
        print(f"❌ Failed to load bookmarks from {bookmarks_file}: {e}")
        sys.exit(1)
    
    print("🔧 Reconciling bookmarks with snapshot...")
    try:
        result = manager.apply_snapshot(desired)
    except BookmarkBackendError as e:
        print(f"❌ Error applying snapshot: {e}")
        sys.exit(1)
    
    print(f"💾 Saving bookmarks to: {output_file}")
    manager.save_bookmarks(output_file)
    print_summary(result)
    print("✅ Successfully applied snapshot!")

if __name__ == "__main__":
    main()
