"""
Path value type for build file lists.

A Path is an absolute location split into a root directory and an offset
relative to that root. Keeping the root alongside the full path is what
lets a list of sources be rebased onto an output tree while preserving the
layout underneath the root.
"""

import functools
import os
from typing import Any

from buildfiles.core.pattern import fnmatch


def join_path(head: str, tail: str | None) -> str:
    """Join two path strings with exactly one separator between them."""
    if not tail:
        return head
    return head.rstrip(os.sep) + os.sep + tail.lstrip(os.sep)


def _relative_path(root: str, full_path: str) -> str:
    """Strip root and one separator from full_path."""
    offset = len(root)

    # The root may or may not end with the separator:
    if not root.endswith(os.sep):
        offset += 1

    return full_path[offset:]


def is_within(root: str, full_path: str) -> bool:
    """Check whether full_path is root itself or lies underneath it."""
    if full_path == root:
        return True
    if not root.endswith(os.sep):
        root += os.sep
    return full_path.startswith(root)


@functools.total_ordering
class Path:
    """
    An absolute path with a root and a relative offset.

    Equality and hashing use both the root and the full path: two paths to
    the same location with different roots rebase differently, so they are
    not interchangeable. Ordering only considers the full path.

    Attributes:
        full_path: Absolute path string
        root: Root directory string, full_path is root or lies underneath it
        relative_path: full_path with root and one separator removed
    """

    __slots__ = ("_full_path", "_root", "_enclosing", "_relative", "_components")

    def __init__(
        self,
        full_path: "str | os.PathLike[str]",
        root: "str | os.PathLike[str] | None" = None,
        relative_path: str | None = None,
    ):
        """
        Create a path.

        Args:
            full_path: Absolute path
            root: Root directory; if omitted the dirname of full_path is used.
                A Path root is remembered so that `parent` can step back out
                of it
            relative_path: Precomputed relative path (must agree with root)

        Raises:
            ValueError: If full_path does not lie underneath root
        """
        full_path = os.fspath(full_path)
        enclosing = root if isinstance(root, Path) else None

        if root is None:
            # Effectively dirname and basename:
            root, _, relative_path = full_path.rpartition(os.sep)
        else:
            root = os.fspath(root)
            if not is_within(root, full_path):
                raise ValueError(f"Root {root!r} is not a prefix of {full_path!r}")

        self._full_path = full_path
        self._root = root
        self._enclosing = enclosing
        self._relative = relative_path
        self._components: list[str] | None = None

    @classmethod
    def join(cls, root: "str | os.PathLike[str]", relative_path: str | None) -> "Path":
        """Join a relative path onto root, keeping root as the path's root."""
        root = os.fspath(root)
        return cls(join_path(root, relative_path), root)

    @classmethod
    def coerce(cls, path: "str | os.PathLike[str]") -> "Path":
        """Return path unchanged if it is a Path, otherwise wrap it."""
        if isinstance(path, Path):
            return path
        return cls(os.fspath(path))

    @classmethod
    def current(cls) -> "Path":
        """The current working directory."""
        return cls(os.getcwd())

    @classmethod
    def expand(cls, path: str, root: "str | os.PathLike[str] | None" = None) -> "Path":
        """
        Expand path relative to root (default: the working directory).

        The result keeps root as its root when it lies underneath it.
        """
        root = os.fspath(root) if root is not None else os.getcwd()
        full_path = os.path.normpath(os.path.join(root, path))

        if is_within(root, full_path):
            return cls(full_path, root)
        return cls(full_path)

    @staticmethod
    def prefix_length(a: list[str], b: list[str]) -> int:
        """Length of the common prefix of two sequences."""
        for index, (x, y) in enumerate(zip(a, b)):
            if x != y:
                return index
        return min(len(a), len(b))

    @staticmethod
    def split_components(path: "Path | str") -> list[str]:
        """Split a path (Path or string) into separator-delimited components."""
        if isinstance(path, Path):
            return path.components

        components = os.fspath(path).split(os.sep)
        while components and components[-1] == "":
            components.pop()
        return components

    @classmethod
    def shortest_path_between(cls, path: "Path | str", root: "Path | str") -> str:
        """
        Return the shortest relative path that reaches path from root.

        Args:
            path: Target location
            root: Directory the result is relative to

        Returns:
            A relative path using ".." to climb out of root, or "." when
            both locations are the same
        """
        path_components = cls.split_components(path)
        root_components = cls.split_components(root)

        common = cls.prefix_length(path_components, root_components)
        up = len(root_components) - common

        parts = [".."] * up + path_components[common:]
        if not parts:
            return "."
        return os.path.join(*parts)

    @property
    def full_path(self) -> str:
        return self._full_path

    @property
    def root(self) -> str:
        return self._root

    @property
    def relative_path(self) -> str:
        if self._relative is None:
            self._relative = _relative_path(self._root, self._full_path)
        return self._relative

    @property
    def components(self) -> list[str]:
        if self._components is None:
            self._components = Path.split_components(self._full_path)
        return list(self._components)

    @property
    def parts(self) -> list[str]:
        return self.components

    @property
    def basename(self) -> str:
        components = self.components
        return components[-1] if components else ""

    @property
    def relative_parts(self) -> tuple[str, str]:
        """The relative path split into (directory, filename)."""
        directory, _, filename = self.relative_path.rpartition(os.sep)
        return directory, filename

    @property
    def parent(self) -> "Path":
        """
        The containing directory, keeping the root when still inside it.

        Climbing out of a root that was itself a Path (see `/`) returns
        that Path, with its own root.
        """
        directory = os.path.dirname(self._full_path)

        if self._enclosing is not None and directory == self._enclosing.full_path:
            return self._enclosing
        if is_within(self._root, directory):
            return self._rerooted(directory)
        return Path(directory)

    def start_with(self, prefix: "str | os.PathLike[str]") -> bool:
        return self._full_path.startswith(os.fspath(prefix))

    def to_absolute(self, root: "str | os.PathLike[str]") -> "Path":
        """Rebase onto root if this path is relative to the current directory."""
        if self._root == ".":
            return self.rebase(root)
        return self

    def rebase(self, root: "str | os.PathLike[str]") -> "Path":
        """Move this path under a new root, keeping the relative offset."""
        root = os.fspath(root)
        return Path(join_path(root, self.relative_path), root)

    def with_(
        self,
        root: "str | os.PathLike[str] | None" = None,
        extension: str | None = None,
        basename: str | bool | None = None,
    ) -> "Path":
        """
        Rewrite the relative path, optionally under a new root.

        Args:
            root: New root (default: keep the current root)
            extension: Suffix appended to the (possibly new) basename
            basename: True keeps the current basename without its extension;
                a string replaces it

        Returns:
            The rewritten path
        """
        root = self._root if root is None else os.fspath(root)
        relative_path = self.relative_path

        if basename is not None and basename is not False:
            directory, _, filename = relative_path.rpartition(os.sep)
            if basename is True:
                basename = os.path.splitext(filename)[0]
            relative_path = join_path(directory, basename) if directory else basename

        if extension:
            relative_path += extension

        return Path.join(root, relative_path)

    def append(self, suffix: str) -> "Path":
        """Concatenate suffix onto the full path (e.g. ".o"); the root is unchanged."""
        return self._rerooted(self._full_path + suffix)

    def shortest_path(self, root: "Path | str") -> str:
        return Path.shortest_path_between(self, root)

    def match(self, pattern: "str | os.PathLike[str]", case_sensitive: bool = True) -> bool:
        """
        Match against a shell-style pattern.

        Absolute patterns are matched against the full path, relative ones
        against the relative path.
        """
        pattern = os.fspath(pattern)
        if os.path.isabs(pattern):
            return fnmatch(pattern, self._full_path, case_sensitive)
        return fnmatch(pattern, self.relative_path, case_sensitive)

    def for_reading(self) -> tuple[str, int]:
        return self._full_path, os.O_RDONLY

    def for_writing(self) -> tuple[str, int]:
        return self._full_path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY

    def for_appending(self) -> tuple[str, int]:
        return self._full_path, os.O_CREAT | os.O_APPEND | os.O_WRONLY

    def __add__(self, path: str | None) -> "Path":
        # Descend below the full path, the root stays where it was.
        if path is None:
            return self
        return self._rerooted(join_path(self._full_path, os.fspath(path)))

    def __truediv__(self, path: str | None) -> "Path":
        # Descend below the full path, which becomes the new root.
        if path is None:
            return self
        return Path(join_path(self._full_path, os.fspath(path)), self)

    def _rerooted(self, full_path: str) -> "Path":
        # Same root, including the Path it came from.
        root = self._enclosing if self._enclosing is not None else self._root
        return Path(full_path, root)

    def __fspath__(self) -> str:
        return self._full_path

    def __str__(self) -> str:
        return self._full_path

    def __repr__(self) -> str:
        return f"Path({self._full_path!r}, root={self._root!r})"

    def __len__(self) -> int:
        return len(self._full_path)

    def __hash__(self) -> int:
        return hash((self._root, self._full_path))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._root == other._root and self._full_path == other._full_path

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._full_path < other._full_path
