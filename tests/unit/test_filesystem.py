"""
Unit tests for the local and in-memory filesystem adapters.
"""

import logging
import os
from pathlib import Path as FSPath

import pytest

from buildfiles.core.file_list import Paths
from buildfiles.core.filesystem import LocalFileSystem, get_default_filesystem
from buildfiles.core.path import Path
from buildfiles.infrastructure.fakes import InMemoryFileSystem


@pytest.fixture
def filesystem() -> LocalFileSystem:
    return LocalFileSystem()


class TestLocalFileSystem:
    """Test the disk-backed adapter."""

    def test_default_is_shared(self):
        assert get_default_filesystem() is get_default_filesystem()

    def test_write_read_append(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        path = Path(str(tmp_path / "file.txt"))

        filesystem.write(path, "hello")
        filesystem.append(path, " world")

        assert filesystem.read_text(path) == "hello world"
        assert filesystem.read(path) == b"hello world"
        assert filesystem.is_file(path)
        assert filesystem.is_readable(path)

    def test_write_bytes(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        path = tmp_path / "data.bin"

        filesystem.write(path, b"\x00\x01")

        assert filesystem.read(path) == b"\x00\x01"

    def test_touch_creates_and_updates(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        path = tmp_path / "touched"

        filesystem.touch(path)
        assert filesystem.exists(path)

        os.utime(path, (1, 1))
        filesystem.touch(path)
        assert filesystem.modified_time(path) > 1

    def test_create_and_delete_tree(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        directory = tmp_path / "a" / "b" / "c"

        filesystem.create(directory)
        assert filesystem.is_directory(directory)

        filesystem.delete(tmp_path / "a")
        assert not filesystem.exists(tmp_path / "a")

    def test_delete_missing_is_ignored(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        filesystem.delete(tmp_path / "missing")

    def test_copy_file_creates_parents(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        source = tmp_path / "source.txt"
        source.write_text("content")

        destination = tmp_path / "out" / "copy.txt"
        filesystem.copy(source, destination)

        assert destination.read_text() == "content"

    def test_copy_directory(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        (tmp_path / "src" / "sub").mkdir(parents=True)
        (tmp_path / "src" / "sub" / "x").write_text("x")

        filesystem.copy(tmp_path / "src", tmp_path / "dst")

        assert (tmp_path / "dst" / "sub" / "x").read_text() == "x"

    def test_symlink(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        target = tmp_path / "target"
        target.write_text("t")
        link = tmp_path / "link"
        link.symlink_to(target)

        assert filesystem.is_symlink(link)
        assert not filesystem.is_symlink(target)

    def test_enumerate_missing_root_is_quiet(
        self, filesystem: LocalFileSystem, tmp_path: FSPath, caplog
    ):
        with caplog.at_level(logging.WARNING):
            assert list(filesystem.enumerate_directory(tmp_path / "missing")) == []

        assert caplog.records == []

    def test_enumerate_includes_hidden(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        (tmp_path / ".hidden").write_text("h")
        (tmp_path / "visible").write_text("v")

        entries = list(filesystem.enumerate_directory(tmp_path))

        assert entries == [str(tmp_path / ".hidden"), str(tmp_path / "visible")]

    def test_list_helpers(self, filesystem: LocalFileSystem, tmp_path: FSPath):
        files = Paths.directory(str(tmp_path), ["a", "b"])

        assert not filesystem.all_exist(files)

        filesystem.touch_all(files)
        assert filesystem.all_exist(files)

        filesystem.delete_all(files)
        assert not any(filesystem.exists(path) for path in files)

        directories = Paths.directory(str(tmp_path), ["x/y", "z"])
        filesystem.create_all(directories)
        assert all(filesystem.is_directory(path) for path in directories)


class TestInMemoryFileSystem:
    """Test the in-memory test double."""

    def test_add_file_creates_parents(self):
        filesystem = InMemoryFileSystem()

        filesystem.add_file("/a/b/c.txt")

        assert filesystem.is_directory("/a")
        assert filesystem.is_directory("/a/b")
        assert filesystem.exists("/a/b/c.txt")
        assert not filesystem.is_directory("/a/b/c.txt")

    def test_clock_increases(self):
        filesystem = InMemoryFileSystem()

        filesystem.add_file("/a")
        filesystem.add_file("/b")

        assert filesystem.modified_time("/b") > filesystem.modified_time("/a")

    def test_missing_entry_raises(self):
        filesystem = InMemoryFileSystem()

        with pytest.raises(FileNotFoundError):
            filesystem.modified_time("/missing")
        with pytest.raises(FileNotFoundError):
            filesystem.set_mtime("/missing", 1.0)

    def test_remove_directory_removes_contents(self):
        filesystem = InMemoryFileSystem()
        filesystem.add_file("/a/b/c.txt")
        filesystem.add_file("/ab")

        filesystem.remove("/a")

        assert not filesystem.exists("/a/b/c.txt")
        assert not filesystem.exists("/a/b")
        assert filesystem.exists("/ab")

    def test_enumerate_missing_root(self):
        assert list(InMemoryFileSystem().enumerate_directory("/missing")) == []

    def test_expand_glob(self):
        filesystem = InMemoryFileSystem()
        filesystem.add_file("/src/a.c")
        filesystem.add_file("/src/sub/b.c")

        assert list(filesystem.expand_glob("/src/**/*.c")) == ["/src/a.c", "/src/sub/b.c"]
