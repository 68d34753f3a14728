"""
Filesystem adapter used by lists and states.

Paths and lists never touch the disk themselves; enumeration and stat
calls go through a FileSystemInterface so tests can substitute an
in-memory implementation (see buildfiles.infrastructure.fakes).
"""

import glob
import logging
import os
import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path as FSPath
from typing import Protocol, Union

logger = logging.getLogger(__name__)

PathArg = Union[str, "os.PathLike[str]"]


class FileSystemInterface(Protocol):
    """Protocol for the filesystem operations the core consumes."""

    def exists(self, path: PathArg) -> bool:
        """Check if a file or directory exists."""
        ...

    def is_directory(self, path: PathArg) -> bool:
        """Check if the path refers to a directory."""
        ...

    def modified_time(self, path: PathArg) -> float:
        """
        Get the last modification time of a path.

        Raises:
            FileNotFoundError: If the path vanished
        """
        ...

    def enumerate_directory(self, root: PathArg) -> Iterator[str]:
        """
        Yield every descendant of root as an absolute path string.

        Includes dotfiles and subdirectories; never yields "." or "..".
        A missing root yields nothing.
        """
        ...

    def expand_glob(self, pattern: str) -> Iterator[str]:
        """
        Yield paths matching a glob pattern (hidden files included).

        "**" matches any number of directories.
        """
        ...


class LocalFileSystem:
    """
    FileSystemInterface backed by the local operating system.

    Also offers the read/write helpers a build tool needs for outputs.
    """

    def __init__(self, follow_symlinks: bool = False):
        """
        Initialize the adapter.

        Args:
            follow_symlinks: Whether directory enumeration descends into
                symlinked directories (default: False, avoids cycles)
        """
        self._follow_symlinks = follow_symlinks

    def exists(self, path: PathArg) -> bool:
        return os.path.exists(path)

    def is_directory(self, path: PathArg) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: PathArg) -> bool:
        return os.path.isfile(path)

    def is_symlink(self, path: PathArg) -> bool:
        return os.path.islink(path)

    def is_readable(self, path: PathArg) -> bool:
        return os.access(path, os.R_OK)

    def stat(self, path: PathArg) -> os.stat_result:
        return os.stat(path)

    def modified_time(self, path: PathArg) -> float:
        return os.stat(path).st_mtime

    def read(self, path: PathArg) -> bytes:
        with open(path, "rb") as file:
            return file.read()

    def read_text(self, path: PathArg, encoding: str = "utf-8") -> str:
        with open(path, encoding=encoding) as file:
            return file.read()

    def write(self, path: PathArg, data: bytes | str) -> None:
        """Write data, creating or truncating the file."""
        mode = "wb" if isinstance(data, bytes) else "w"
        with open(path, mode) as file:
            file.write(data)

    def append(self, path: PathArg, data: bytes | str) -> None:
        mode = "ab" if isinstance(data, bytes) else "a"
        with open(path, mode) as file:
            file.write(data)

    def touch(self, path: PathArg) -> None:
        """Create the file if needed and bump its modification time."""
        FSPath(path).touch()

    def create(self, path: PathArg) -> None:
        """Recursively create a directory hierarchy."""
        os.makedirs(path, exist_ok=True)

    def delete(self, path: PathArg) -> None:
        """Recursively delete a path. Missing paths are ignored."""
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass

    def copy(self, source: PathArg, destination: PathArg) -> None:
        """Copy a file (with metadata) or a whole directory tree."""
        if os.path.isdir(source):
            shutil.copytree(source, destination, dirs_exist_ok=True)
        else:
            parent = os.path.dirname(os.fspath(destination))
            if parent:
                os.makedirs(parent, exist_ok=True)
            shutil.copy2(source, destination)

    def enumerate_directory(self, root: PathArg) -> Iterator[str]:
        root = os.fspath(root)

        def _on_error(error: OSError) -> None:
            if isinstance(error, FileNotFoundError) and error.filename == root:
                return
            logger.warning(f"Error accessing directory: {error.filename} - {error}")

        for directory, dirnames, filenames in os.walk(
            root, onerror=_on_error, followlinks=self._follow_symlinks
        ):
            dirnames.sort()
            for name in sorted(dirnames + filenames):
                yield os.path.join(directory, name)

    def expand_glob(self, pattern: str) -> Iterator[str]:
        for match in sorted(glob.glob(pattern, recursive=True, include_hidden=True)):
            # Directory matches may carry a trailing separator:
            match = match.rstrip(os.sep) or os.sep
            if os.path.basename(match) in (".", ".."):
                continue
            yield match

    def touch_all(self, paths: Iterable[PathArg]) -> None:
        for path in paths:
            self.touch(path)

    def all_exist(self, paths: Iterable[PathArg]) -> bool:
        return all(self.exists(path) for path in paths)

    def create_all(self, paths: Iterable[PathArg]) -> None:
        for path in paths:
            self.create(path)

    def delete_all(self, paths: Iterable[PathArg]) -> None:
        for path in paths:
            self.delete(path)


_default_filesystem = LocalFileSystem()


def get_default_filesystem() -> LocalFileSystem:
    """Get the shared local filesystem adapter."""
    return _default_filesystem
