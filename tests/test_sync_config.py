"""Unit tests for sync_config module."""

import pytest

import sync_config
from sync_config import SyncConfig, default_bookmarks_path


class TestSyncConfig:
    """Test SyncConfig dataclass."""

    def test_defaults(self):
        """Should default to the bookmarks bar and a local YAML file."""
        config = SyncConfig(bookmarks_file="Bookmarks")
        assert config.anchor == "bookmark_bar"
        assert config.yaml_file == "bookmarks.yaml"
        assert config.backup_file is None

    def test_invalid_anchor(self):
        """Should reject unknown roots."""
        with pytest.raises(ValueError, match="Unsupported anchor"):
            SyncConfig(bookmarks_file="Bookmarks", anchor="menu")

    def test_from_env(self, monkeypatch):
        """Should read every setting from the environment."""
        monkeypatch.setenv("BOOKMARK_SYNC_FILE", "/data/Bookmarks")
        monkeypatch.setenv("BOOKMARK_SYNC_YAML", "/data/bar.yaml")
        monkeypatch.setenv("BOOKMARK_SYNC_BACKUP", "/data/Bookmarks.bak")
        monkeypatch.setenv("BOOKMARK_SYNC_ANCHOR", "other")
        monkeypatch.setenv("BOOKMARK_SYNC_LOG_DIR", "/data/logs")

        config = SyncConfig.from_env()
        assert config.bookmarks_file == "/data/Bookmarks"
        assert config.yaml_file == "/data/bar.yaml"
        assert config.backup_file == "/data/Bookmarks.bak"
        assert config.anchor == "other"
        assert config.log_dir == "/data/logs"

    def test_from_env_fallbacks(self, monkeypatch):
        """Should fall back to platform defaults when unset."""
        for name in ("BOOKMARK_SYNC_FILE", "BOOKMARK_SYNC_YAML", "BOOKMARK_SYNC_BACKUP",
                     "BOOKMARK_SYNC_ANCHOR", "BOOKMARK_SYNC_LOG_DIR"):
            monkeypatch.delenv(name, raising=False)
        config = SyncConfig.from_env()
        assert config.bookmarks_file == default_bookmarks_path()
        assert config.anchor == "bookmark_bar"
        assert config.log_dir == "./logs"

    def test_from_env_overrides(self, monkeypatch):
        """Should apply overrides before validating the anchor."""
        monkeypatch.setenv("BOOKMARK_SYNC_ANCHOR", "bar")
        monkeypatch.setenv("BOOKMARK_SYNC_YAML", "/data/bar.yaml")
        config = SyncConfig.from_env(anchor="other", yaml_file=None)
        assert config.anchor == "other"
        assert config.yaml_file == "/data/bar.yaml"

    def test_from_env_bad_anchor(self, monkeypatch):
        """Should reject an unknown anchor from the environment."""
        monkeypatch.setenv("BOOKMARK_SYNC_ANCHOR", "bar")
        with pytest.raises(ValueError, match="Unsupported anchor"):
            SyncConfig.from_env()


class TestDefaultBookmarksPath:
    """Test default_bookmarks_path function."""

    def test_windows(self, monkeypatch):
        monkeypatch.setattr(sync_config.sys, "platform", "win32")
        monkeypatch.setenv("LOCALAPPDATA", "C:\\Users\\me\\AppData\\Local")
        path = default_bookmarks_path()
        assert path.startswith("C:\\Users\\me\\AppData\\Local")
        assert path.endswith("Bookmarks")
        assert "User Data" in path

    def test_macos(self, monkeypatch):
        monkeypatch.setattr(sync_config.sys, "platform", "darwin")
        assert "Library/Application Support/Google/Chrome/Default/Bookmarks" in default_bookmarks_path()

    def test_linux(self, monkeypatch):
        monkeypatch.setattr(sync_config.sys, "platform", "linux")
        assert default_bookmarks_path().endswith(".config/google-chrome/Default/Bookmarks")
