"""
Composable, lazily evaluated lists of paths.

FileList is the contract every list kind implements: iterating yields Path
instances, and `roots` reports the directories the list is anchored to.
The combinators defined here (union, difference, rebase, mapping) are
built purely on iteration and per-variant membership tests, so globs and
directories are only enumerated when something actually consumes them.

Variants:
- Paths: an explicit, materialized list
- Composite: an ordered union of lists (duplicates preserved)
- Directory, Glob, Difference: see their own modules
- State: see buildfiles.core.state
"""

import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Union

from buildfiles.core.path import Path

PathLike = Union[Path, str, "os.PathLike[str]"]


class FileList(ABC):
    """
    Abstract list of paths.

    Subclasses implement `__iter__` and `_key` (the structural identity
    used for equality and hashing), and override `includes` with a cheaper
    membership test where one exists.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[Path]:
        """Yield each path in the list."""
        ...

    @abstractmethod
    def _key(self) -> tuple:
        """Structural identity of this list."""
        ...

    @classmethod
    def coerce(cls, files: "FileList | Iterable[PathLike]") -> "FileList":
        """Return files unchanged if it is a FileList, otherwise wrap it in Paths."""
        if isinstance(files, FileList):
            return files
        return Paths(files)

    def each(self, callback: Callable[[Path], Any] | None = None) -> "FileList | None":
        """
        Visit every path.

        Without a callback the list itself is returned, which can be
        iterated any number of times. With a callback, it is invoked for
        each path in order.
        """
        if callback is None:
            return self

        for path in self:
            callback(path)
        return None

    @property
    def roots(self) -> list[str]:
        """Unique roots of all paths in the list."""
        return sorted({path.root for path in self})

    def includes(self, path: PathLike) -> bool:
        """Check whether the list yields a path at the same location."""
        target = os.fspath(path)
        return any(member.full_path == target for member in self)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (Path, str, os.PathLike)):
            return False
        return self.includes(path)

    def intersects(self, other: Iterable[PathLike]) -> bool:
        """Check whether this list includes any path of other."""
        return any(self.includes(path) for path in other)

    def is_empty(self) -> bool:
        for _ in self:
            return False
        return True

    def first(self) -> Path | None:
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)

    def with_(
        self,
        root: "str | os.PathLike[str] | None" = None,
        extension: str | None = None,
        basename: str | bool | None = None,
        callback: Callable[[Path, Path], Any] | None = None,
    ) -> "Paths":
        """
        Rewrite every path with Path.with_ and collect the results.

        Args:
            root: New root for every path
            extension: Extension appended to each path
            basename: Basename rewrite, see Path.with_
            callback: Called with (original, updated) for each path

        Returns:
            Paths of the updated paths
        """
        paths = []

        for path in self:
            updated_path = path.with_(root=root, extension=extension, basename=basename)

            if callback is not None:
                callback(path, updated_path)

            paths.append(updated_path)

        return Paths(paths)

    def rebase(self, root: "str | os.PathLike[str]") -> "FileList":
        root = os.fspath(root)
        return Paths([path.rebase(root) for path in self], roots=[root])

    def map(self, function: Callable[[Path], Path]) -> "Paths":
        return Paths([function(path) for path in self])

    def to_paths(self) -> "FileList":
        return Paths(list(self))

    def __add__(self, other: "FileList | Iterable[PathLike]") -> "Composite":
        return Composite([self, other])

    def __sub__(self, other: "FileList | Iterable[PathLike]") -> "FileList":
        from buildfiles.core.difference import Difference

        return Difference(self, FileList.coerce(other))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FileList):
            return NotImplemented

        if type(self) is type(other):
            return self._key() == other._key()

        # Related list kinds compare by content:
        if isinstance(other, type(self)) or isinstance(self, type(other)):
            return sorted(self) == sorted(other)

        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self), self._key()))


class Paths(FileList):
    """
    An explicit list of paths.

    Membership is fixed at construction, so roots are computed once and
    cached.

    Attributes:
        paths: Tuple of the contained paths
    """

    def __init__(
        self,
        paths: "Iterable[PathLike] | PathLike" = (),
        roots: Iterable["str | os.PathLike[str]"] | None = None,
    ):
        if isinstance(paths, (Path, str, os.PathLike)):
            paths = [paths]

        self._list: tuple[Path, ...] = tuple(Path.coerce(path) for path in paths)
        self._roots = [os.fspath(root) for root in roots] if roots is not None else None

    @classmethod
    def directory(cls, root: "str | os.PathLike[str]", relative_paths: Iterable[str]) -> "Paths":
        """Create a list of paths below root."""
        root = os.fspath(root)
        return cls([Path.join(root, path) for path in relative_paths], roots=[root])

    @property
    def paths(self) -> tuple[Path, ...]:
        return self._list

    @property
    def roots(self) -> list[str]:
        if self._roots is None:
            self._roots = super().roots
        return list(self._roots)

    def __iter__(self) -> Iterator[Path]:
        return iter(self._list)

    def __len__(self) -> int:
        return len(self._list)

    def count(self) -> int:
        return len(self._list)

    def is_empty(self) -> bool:
        return not self._list

    def to_paths(self) -> "Paths":
        return self

    def _key(self) -> tuple:
        return self._list

    def __repr__(self) -> str:
        return f"Paths({list(self._list)!r})"


class Composite(FileList):
    """
    Ordered union of several lists.

    Composite children passed to the constructor are spliced in (one level
    of flattening); anything that is not a FileList is coerced into Paths.
    Iteration visits children in order and keeps duplicates.

    Attributes:
        files: Tuple of child lists
    """

    def __init__(
        self,
        files: "Iterable[FileList | Iterable[PathLike]]" = (),
        roots: Iterable["str | os.PathLike[str]"] | None = None,
    ):
        children: list[FileList] = []

        for files_list in files:
            if isinstance(files_list, Composite):
                children.extend(files_list.files)
            elif isinstance(files_list, FileList):
                children.append(files_list)
            else:
                # Try to convert into an explicit paths list:
                children.append(Paths(files_list))

        self._files: tuple[FileList, ...] = tuple(children)
        self._roots = [os.fspath(root) for root in roots] if roots is not None else None

    @property
    def files(self) -> tuple[FileList, ...]:
        return self._files

    @property
    def roots(self) -> list[str]:
        if self._roots is None:
            roots: list[str] = []
            for files_list in self._files:
                for root in files_list.roots:
                    if root not in roots:
                        roots.append(root)
            self._roots = roots
        return list(self._roots)

    def __iter__(self) -> Iterator[Path]:
        for files_list in self._files:
            yield from files_list

    def __add__(self, other: "FileList | Iterable[PathLike]") -> "Composite":
        if isinstance(other, Composite):
            return Composite(self._files + other.files)
        return Composite(list(self._files) + [other])

    def includes(self, path: PathLike) -> bool:
        return any(files_list.includes(path) for files_list in self._files)

    def rebase(self, root: "str | os.PathLike[str]") -> "Composite":
        root = os.fspath(root)
        return Composite([files_list.rebase(root) for files_list in self._files], roots=[root])

    def to_paths(self) -> "Composite":
        return Composite([files_list.to_paths() for files_list in self._files], roots=self._roots)

    def _key(self) -> tuple:
        return self._files

    def __repr__(self) -> str:
        return f"Composite({list(self._files)!r})"


# The empty list:
NONE = Composite([])
