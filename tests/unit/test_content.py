"""
Unit tests for the content store.
"""

import os
from pathlib import Path

import pytest

from vsws.handlers.content import ContentReadError, ContentStore, FileStatus


class TestFileStatus:
    def test_servable(self):
        """Test only existing non-directories are servable."""
        assert FileStatus(exists=True).is_servable
        assert not FileStatus(exists=True, is_dir=True).is_servable
        assert not FileStatus(exists=False).is_servable


class TestContentStore:
    """Tests for ContentStore."""

    def test_root_must_exist(self, tmp_path: Path):
        """Test a missing root is rejected at construction."""
        with pytest.raises(ValueError):
            ContentStore(str(tmp_path / "missing"))

    def test_root_must_be_directory(self, tmp_path: Path):
        """Test a file root is rejected at construction."""
        f = tmp_path / "file.txt"
        f.write_text("x")

        with pytest.raises(ValueError):
            ContentStore(str(f))

    def test_lookup_file(self, content_root: Path):
        """Test an existing file."""
        status = ContentStore(str(content_root)).lookup("index.html")

        assert status == FileStatus(exists=True, is_dir=False)

    def test_lookup_nested_file(self, content_root: Path):
        """Test a file in a subdirectory."""
        assert ContentStore(str(content_root)).lookup("docs/readme.txt").is_servable

    def test_lookup_directory(self, content_root: Path):
        """Test a directory exists but is not servable."""
        status = ContentStore(str(content_root)).lookup("music")

        assert status.exists
        assert status.is_dir
        assert not status.is_servable

    def test_lookup_missing(self, content_root: Path):
        """Test a missing file."""
        assert ContentStore(str(content_root)).lookup("nope.html") == FileStatus(exists=False)

    def test_read(self, content_root: Path):
        """Test reading the whole file."""
        store = ContentStore(str(content_root))

        assert store.read("style.css") == (content_root / "style.css").read_bytes()

    def test_read_directory_raises(self, content_root: Path):
        """Test read failures surface as ContentReadError."""
        store = ContentStore(str(content_root))

        with pytest.raises(ContentReadError) as exc_info:
            store.read("music")

        assert exc_info.value.path == "music"
        assert isinstance(exc_info.value.cause, OSError)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlink_escape_is_not_found(self, tmp_path: Path):
        """Test a symlink pointing outside the root is reported missing."""
        root = tmp_path / "root"
        root.mkdir()
        secret = tmp_path / "secret.txt"
        secret.write_text("secret")
        (root / "leak.txt").symlink_to(secret)

        assert ContentStore(str(root)).lookup("leak.txt") == FileStatus(exists=False)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlink_inside_root_allowed(self, content_root: Path):
        """Test a symlink that stays inside the root is served."""
        (content_root / "alias.html").symlink_to(content_root / "index.html")

        assert ContentStore(str(content_root)).lookup("alias.html").is_servable
