"""
List subtraction.
"""

import os
from collections.abc import Iterable, Iterator

from buildfiles.core.file_list import Composite, FileList, PathLike
from buildfiles.core.path import Path


class Difference(FileList):
    """
    A base list with the members of an exclusion list removed.

    Subtracting again accumulates exclusions in a Composite instead of
    nesting differences.

    Attributes:
        files: The base list
        excludes: The exclusion list
    """

    def __init__(self, files: FileList, excludes: FileList):
        self._files = files
        self._excludes = excludes

    @property
    def files(self) -> FileList:
        return self._files

    @property
    def excludes(self) -> FileList:
        return self._excludes

    @property
    def roots(self) -> list[str]:
        return self._files.roots

    def __iter__(self) -> Iterator[Path]:
        for path in self._files:
            if not self._excludes.includes(path):
                yield path

    def __sub__(self, other: "FileList | Iterable[PathLike]") -> "Difference":
        return Difference(self._files, Composite([self._excludes, other]))

    def includes(self, path: PathLike) -> bool:
        return self._files.includes(path) and not self._excludes.includes(path)

    def rebase(self, root: "str | os.PathLike[str]") -> "Difference":
        return Difference(self._files.rebase(root), self._excludes.rebase(root))

    def _key(self) -> tuple:
        return (self._files, self._excludes)

    def __repr__(self) -> str:
        return f"Difference({self._files!r}, {self._excludes!r})"
