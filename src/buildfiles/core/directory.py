"""
Recursive directory listing.
"""

import os
from collections.abc import Iterator

from buildfiles.core.file_list import FileList, PathLike
from buildfiles.core.filesystem import FileSystemInterface, get_default_filesystem
from buildfiles.core.path import Path


class Directory(FileList):
    """
    Every descendant of a directory, files and subdirectories alike.

    Yielded paths are rooted at the directory itself, so their relative
    paths describe the layout inside it.
    """

    def __init__(
        self,
        path: PathLike,
        filesystem: FileSystemInterface | None = None,
    ):
        """
        Initialize the listing.

        Args:
            path: Directory to enumerate
            filesystem: Adapter used for enumeration (default: local disk)
        """
        self._path = Path.coerce(path)
        self._filesystem = filesystem or get_default_filesystem()

    @classmethod
    def join(cls, root: "str | os.PathLike[str]", relative_path: str | None) -> "Directory":
        return cls(Path.join(root, relative_path))

    @property
    def path(self) -> Path:
        return self._path

    @property
    def root(self) -> Path:
        return self._path

    @property
    def roots(self) -> list[str]:
        return [self._path.full_path]

    def __iter__(self) -> Iterator[Path]:
        root = self._path.full_path
        for full_path in self._filesystem.enumerate_directory(root):
            yield Path(full_path, root)

    def includes(self, path: PathLike) -> bool:
        # A textual test: the path need not exist, it only has to lie below
        # the directory. The separator check keeps "/foo/barbaz" out of "/foo/bar".
        target = os.fspath(path)
        root = self._path.full_path.rstrip(os.sep)
        return target == root or target.startswith(root + os.sep)

    def rebase(self, root: "str | os.PathLike[str]") -> "Directory":
        return Directory(self._path.rebase(root), self._filesystem)

    def _key(self) -> tuple:
        return (self._path,)

    def __str__(self) -> str:
        return self._path.full_path

    def __repr__(self) -> str:
        return f"Directory({self._path!r})"
