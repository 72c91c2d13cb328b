"""Tests for filesystem helpers."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from crawlindex.models import EntryKind
from crawlindex.utils.files import entry_for, iter_lines, list_children


class TestEntryFor:
    """Test entry_for."""

    def test_regular_file(self, tmp_path: Path) -> None:
        path = tmp_path / "Main.java"
        path.write_text("class Main {}")

        entry = entry_for(path)

        assert entry.kind is EntryKind.FILE
        assert entry.path == str(path)
        assert entry.name == "Main.java"
        assert entry.ext == ".java"
        assert entry.last_modified == path.stat().st_mtime_ns // 1_000_000

    def test_directory(self, tmp_path: Path) -> None:
        entry = entry_for(tmp_path)

        assert entry.kind is EntryKind.DIRECTORY

    def test_missing_path_is_other(self, tmp_path: Path) -> None:
        entry = entry_for(tmp_path / "vanished.yml")

        assert entry.kind is EntryKind.OTHER
        assert entry.last_modified == 0
        assert entry.ext == ".yml"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_is_not_followed(self, tmp_path: Path) -> None:
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        assert entry_for(link).kind is EntryKind.OTHER

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_followed_on_request(self, tmp_path: Path) -> None:
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        entry = entry_for(link, follow_dir_links=True)

        assert entry.kind is EntryKind.DIRECTORY
        assert entry.path == str(link)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_file_is_followed(self, tmp_path: Path) -> None:
        real = tmp_path / "app.yml"
        real.write_text("a: 1")
        link = tmp_path / "alias.yml"
        link.symlink_to(real)

        assert entry_for(link).kind is EntryKind.FILE


class TestListChildren:
    """Test list_children."""

    def test_lists_immediate_children_only(self, tmp_path: Path) -> None:
        (tmp_path / "a.java").write_text("a")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.java").write_text("b")

        children = list_children(tmp_path)

        assert sorted(child.name for child in children) == ["a.java", "sub"]
        kinds = {child.name: child.kind for child in children}
        assert kinds["sub"] is EntryKind.DIRECTORY
        assert kinds["a.java"] is EntryKind.FILE

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert list_children(tmp_path) == []

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            list_children(tmp_path / "missing")


class TestIterLines:
    """Test iter_lines."""

    def test_strips_line_terminators(self, tmp_path: Path) -> None:
        path = tmp_path / "lines.txt"
        path.write_bytes(b"one\r\ntwo\nthree")

        assert list(iter_lines(path, "utf-8")) == ["one", "two", "three"]

    def test_is_lazy(self, tmp_path: Path) -> None:
        """Opening happens on first iteration, not on call."""
        lines = iter_lines(tmp_path / "missing.txt")

        with pytest.raises(FileNotFoundError):
            next(lines)

    def test_decode_error_surfaces(self, tmp_path: Path) -> None:
        path = tmp_path / "binary.yml"
        path.write_bytes(b"\xff\xfe\xfa\xfb")

        with pytest.raises(UnicodeDecodeError):
            list(iter_lines(path, "utf-8"))
