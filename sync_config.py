"""
Configuration for Bookmark Snapshot Sync
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

from bookmark_backend import ROOT_KEYS

# Load .env file
from dotenv import load_dotenv
load_dotenv()  # This will load .env from current directory or parent directories


def default_bookmarks_path() -> str:
    """Location of Chrome's Default profile Bookmarks file on this platform"""
    if sys.platform.startswith('win'):
        local_app_data = os.environ.get('LOCALAPPDATA', os.path.expanduser('~\\AppData\\Local'))
        return os.path.join(local_app_data, 'Google', 'Chrome', 'User Data', 'Default', 'Bookmarks')
    if sys.platform == 'darwin':
        return os.path.expanduser('~/Library/Application Support/Google/Chrome/Default/Bookmarks')
    return os.path.expanduser('~/.config/google-chrome/Default/Bookmarks')


@dataclass
class SyncConfig:
    """Paths and options for export/import runs"""
    bookmarks_file: str
    yaml_file: str = "bookmarks.yaml"
    backup_file: Optional[str] = None  # defaults to a timestamped copy next to bookmarks_file
    anchor: str = "bookmark_bar"
    log_dir: str = "./logs"

    def __post_init__(self):
        if self.anchor not in ROOT_KEYS:
            raise ValueError(f"Unsupported anchor: {self.anchor}. Supported: {', '.join(ROOT_KEYS)}")

    @classmethod
    def from_env(cls, **overrides) -> 'SyncConfig':
        """Create config from environment variables; non-None overrides win"""
        values = {
            'bookmarks_file': os.environ.get('BOOKMARK_SYNC_FILE') or default_bookmarks_path(),
            'yaml_file': os.environ.get('BOOKMARK_SYNC_YAML') or "bookmarks.yaml",
            'backup_file': os.environ.get('BOOKMARK_SYNC_BACKUP') or None,
            'anchor': os.environ.get('BOOKMARK_SYNC_ANCHOR', 'bookmark_bar').strip() or 'bookmark_bar',
            'log_dir': os.environ.get('BOOKMARK_SYNC_LOG_DIR') or "./logs",
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
