"""
Glob pattern lists.
"""

import os
import re
from collections.abc import Iterator
from glob import escape

from buildfiles.core.file_list import FileList, PathLike
from buildfiles.core.filesystem import FileSystemInterface, get_default_filesystem
from buildfiles.core.path import Path, join_path
from buildfiles.core.pattern import fnmatch

# Matches "." and ".." entries at the end of an expanded path.
_DOT_ENTRY = re.compile(re.escape(os.sep) + r"\.\.?\Z")


class Glob(FileList):
    """
    Paths under a root matching a shell-style pattern.

    Expansion includes hidden files and treats "**" as any number of
    directories. Membership is a pattern test, so a path matches whether
    or not it exists yet.

    Attributes:
        root: Root directory the pattern is relative to
        pattern: Wildcard pattern, e.g. "*.py" or "**/*.txt"
    """

    def __init__(
        self,
        root: "str | os.PathLike[str]",
        pattern: str,
        filesystem: FileSystemInterface | None = None,
    ):
        self._root = os.fspath(root)
        self._pattern = pattern
        self._filesystem = filesystem or get_default_filesystem()

    @property
    def root(self) -> str:
        return self._root

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def roots(self) -> list[str]:
        return [self._root]

    @property
    def full_pattern(self) -> str:
        """The pattern joined onto the root, with wildcards in the root escaped."""
        return join_path(escape(self._root), self._pattern)

    def __iter__(self) -> Iterator[Path]:
        root = self._root.rstrip(os.sep) or os.sep

        for full_path in self._filesystem.expand_glob(self.full_pattern):
            # Ignore "." and ".." entries, and the root matched by "**":
            if _DOT_ENTRY.search(full_path) or full_path == root:
                continue

            yield Path(full_path, self._root)

    def includes(self, path: PathLike) -> bool:
        path = os.fspath(path)

        # The root itself is never a member, as in iteration:
        if (path.rstrip(os.sep) or os.sep) == (self._root.rstrip(os.sep) or os.sep):
            return False

        return fnmatch(self.full_pattern, path)

    def rebase(self, root: "str | os.PathLike[str]") -> "Glob":
        return Glob(root, self._pattern, self._filesystem)

    def _key(self) -> tuple:
        return (self._root, self._pattern)

    def __repr__(self) -> str:
        return f"Glob({self._root!r}, {self._pattern!r})"
