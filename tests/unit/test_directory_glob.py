"""
Unit tests for Directory and Glob lists against real and in-memory trees.
"""

from pathlib import Path as FSPath

import pytest

from buildfiles.core.directory import Directory
from buildfiles.core.glob import Glob
from buildfiles.core.path import Path
from buildfiles.infrastructure.fakes import InMemoryFileSystem


@pytest.fixture
def tree(tmp_path: FSPath) -> FSPath:
    """A small source tree with a hidden file and a subdirectory."""
    (tmp_path / "a.rb").write_text("a")
    (tmp_path / "b.rb").write_text("b")
    (tmp_path / ".hidden.rb").write_text("hidden")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.txt").write_text("c")
    return tmp_path


class TestDirectory:
    """Test recursive directory listings."""

    def test_lists_every_descendant(self, tree: FSPath):
        directory = Directory(str(tree))

        relative_paths = sorted(path.relative_path for path in directory)

        assert relative_paths == [".hidden.rb", "a.rb", "b.rb", "sub", "sub/c.txt"]

    def test_paths_are_rooted_at_directory(self, tree: FSPath):
        directory = Directory(str(tree))

        assert all(path.root == str(tree) for path in directory)
        assert directory.roots == [str(tree)]

    def test_missing_directory_is_empty(self, tmp_path: FSPath):
        directory = Directory(str(tmp_path / "missing"))

        assert directory.is_empty()
        assert directory.count() == 0

    def test_includes_is_prefix_test_with_boundary(self):
        directory = Directory("/foo/bar")

        assert directory.includes("/foo/bar/x/y")
        assert directory.includes("/foo/bar")
        assert not directory.includes("/foo/barbaz")
        assert not directory.includes("/foo")

    def test_rebase(self):
        directory = Directory(Path("/a/b", "/a"))

        rebased = directory.rebase("/c")

        assert rebased.path == Path("/c/b", "/c")

    def test_join(self):
        assert Directory.join("/a", "b").path.full_path == "/a/b"

    def test_equality_and_hash(self):
        assert Directory("/a/b") == Directory("/a/b")
        assert hash(Directory("/a/b")) == hash(Directory("/a/b"))
        assert str(Directory("/a/b")) == "/a/b"

    def test_in_memory_filesystem(self):
        filesystem = InMemoryFileSystem()
        filesystem.add_file("/src/main.c")
        filesystem.add_file("/src/lib/util.c")
        filesystem.add_file("/other/x.c")

        directory = Directory("/src", filesystem)

        assert [path.relative_path for path in directory] == ["lib", "lib/util.c", "main.c"]


class TestGlob:
    """Test pattern lists."""

    def test_matches_hidden_files(self, tree: FSPath):
        glob = Glob(str(tree), "*.rb")

        assert glob.count() == 3
        assert sorted(path.relative_path for path in glob) == [".hidden.rb", "a.rb", "b.rb"]

    def test_paths_are_rooted_at_glob_root(self, tree: FSPath):
        glob = Glob(str(tree), "*.rb")

        first = glob.first()

        assert isinstance(first, Path)
        assert first.root == str(tree)

    def test_recursive_pattern(self, tree: FSPath):
        glob = Glob(str(tree), "**/*.txt")

        assert [path.relative_path for path in glob] == ["sub/c.txt"]

    def test_double_star_excludes_root(self, tree: FSPath):
        glob = Glob(str(tree), "**")

        paths = [path.relative_path for path in glob]

        assert "" not in paths
        assert "sub/c.txt" in paths

    def test_includes_does_not_require_existence(self):
        glob = Glob("/src", "**/*.c")

        assert glob.includes("/src/a/b/new.c")
        assert glob.includes("/src/top.c")
        assert not glob.includes("/src/a/new.h")
        assert not glob.includes("/other/a.c")

    def test_includes_own_members(self, tree: FSPath):
        glob = Glob(str(tree), "*.rb")

        assert glob.includes(str(tree / "a.rb"))
        assert glob.intersects(glob)

    def test_usable_as_dict_key(self):
        cache = {Glob("/src", "*.rb"): True}

        assert Glob("/src", "*.rb") in cache

    def test_repr(self):
        assert repr(Glob(".", "*.rb")) == "Glob('.', '*.rb')"

    def test_rebase_keeps_pattern(self):
        rebased = Glob("/src", "*.c").rebase("/out")

        assert rebased.root == "/out"
        assert rebased.pattern == "*.c"
        assert rebased.full_pattern == "/out/*.c"

    def test_map_preserves_roots(self, tree: FSPath):
        glob = Glob(str(tree), "*.rb")

        mapped = glob.map(lambda path: path.append(".txt"))

        assert mapped.roots == glob.roots
        assert mapped.first().full_path.endswith(".rb.txt")

    def test_with_extension(self, tree: FSPath):
        glob = Glob(str(tree), "*.rb")

        paths = glob.with_(extension=".txt")

        assert paths.first() == glob.first().append(".txt")

    def test_difference_with_glob(self, tree: FSPath):
        files = Glob(str(tree), "*.rb") - Glob(str(tree), ".*")

        assert sorted(path.relative_path for path in files) == ["a.rb", "b.rb"]

    def test_in_memory_filesystem(self):
        filesystem = InMemoryFileSystem()
        filesystem.add_file("/src/a.c")
        filesystem.add_file("/src/.b.c")
        filesystem.add_file("/src/lib/c.c")

        glob = Glob("/src", "*.c", filesystem)

        assert [path.relative_path for path in glob] == [".b.c", "a.c"]

    @pytest.mark.parametrize("pattern", ["sub/**", "**/", "**", "sub/"])
    def test_directory_matches_are_members(self, tree: FSPath, pattern: str):
        glob = Glob(str(tree), pattern)

        members = list(glob)

        assert members
        assert all(glob.includes(path) for path in members)
        assert list(glob - glob) == []

    def test_trailing_double_star_yields_its_directory(self, tree: FSPath):
        glob = Glob(str(tree), "sub/**")

        assert [path.relative_path for path in glob] == ["sub", "sub/c.txt"]
        assert glob.includes(str(tree / "sub"))
        assert not glob.includes(str(tree / "subway"))

    def test_root_is_not_a_member(self):
        glob = Glob("/src", "**")

        assert not glob.includes("/src")
        assert not glob.includes("/src/")
        assert glob.includes("/src/a.c")

    def test_wildcards_in_root_are_literal(self, tmp_path: FSPath):
        root = tmp_path / "a[b]*"
        root.mkdir()
        (root / "x.c").write_text("x")
        (tmp_path / "ab").mkdir()
        (tmp_path / "ab" / "y.c").write_text("y")

        glob = Glob(str(root), "*.c")

        assert [path.relative_path for path in glob] == ["x.c"]
        assert glob.includes(str(root / "x.c"))
        assert not glob.includes(str(tmp_path / "ab" / "y.c"))

    def test_wildcards_in_root_in_memory(self):
        filesystem = InMemoryFileSystem()
        filesystem.add_file("/src[1]/a.c")
        filesystem.add_file("/src1/b.c")

        glob = Glob("/src[1]", "*.c", filesystem)

        assert [path.full_path for path in glob] == ["/src[1]/a.c"]
