"""
Fake implementations for testing.

Provides in-memory implementations of infrastructure interfaces
for use in unit and integration tests without touching the disk or
the operating system's change notifications.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Iterator

from buildfiles.core.filesystem import PathArg
from buildfiles.core.pattern import fnmatch
from buildfiles.infrastructure.watch_drivers import WatchDriverInterface, WatchTarget


class InMemoryFileSystem:
    """
    In-memory filesystem for testing.

    Implements FileSystemInterface over a dictionary of entries. Adding a
    file creates its parent directories. Modification times are set
    explicitly, or taken from a counter that increases on every write so
    later writes are always newer.
    """

    def __init__(self, start_time: float = 1000.0):
        """
        Initialize an empty filesystem.

        Args:
            start_time: First modification time handed out by the clock
        """
        self._files: dict[str, float] = {}
        self._directories: dict[str, float] = {}
        self._clock = start_time

    def _tick(self) -> float:
        self._clock += 1.0
        return self._clock

    def add_directory(self, path: PathArg, mtime: float | None = None) -> None:
        """Create a directory and any missing parents."""
        path = os.fspath(path).rstrip(os.sep) or os.sep
        self._ensure_parents(path)
        if path not in self._directories:
            self._directories[path] = mtime if mtime is not None else self._tick()
        elif mtime is not None:
            self._directories[path] = mtime

    def add_file(self, path: PathArg, mtime: float | None = None) -> None:
        """Create or touch a file, creating missing parent directories."""
        path = os.fspath(path)
        self._ensure_parents(path)
        self._files[path] = mtime if mtime is not None else self._tick()

    def set_mtime(self, path: PathArg, mtime: float) -> None:
        """
        Change the modification time of an existing entry.

        Raises:
            FileNotFoundError: If the entry does not exist
        """
        path = os.fspath(path)
        if path in self._files:
            self._files[path] = mtime
        elif path in self._directories:
            self._directories[path] = mtime
        else:
            raise FileNotFoundError(path)

    def remove(self, path: PathArg) -> None:
        """Remove an entry; directories are removed with their contents."""
        path = os.fspath(path)
        self._files.pop(path, None)
        if self._directories.pop(path, None) is not None:
            prefix = path.rstrip(os.sep) + os.sep
            for entries in (self._files, self._directories):
                for entry in [entry for entry in entries if entry.startswith(prefix)]:
                    del entries[entry]

    def _ensure_parents(self, path: str) -> None:
        parent = os.path.dirname(path)
        if parent and parent != path and parent not in self._directories:
            self._ensure_parents(parent)
            self._directories[parent] = self._clock

    def exists(self, path: PathArg) -> bool:
        path = os.fspath(path)
        return path in self._files or path in self._directories

    def is_directory(self, path: PathArg) -> bool:
        return os.fspath(path) in self._directories

    def modified_time(self, path: PathArg) -> float:
        path = os.fspath(path)
        if path in self._files:
            return self._files[path]
        if path in self._directories:
            return self._directories[path]
        raise FileNotFoundError(path)

    def _entries(self) -> list[str]:
        return sorted(list(self._files) + list(self._directories))

    def enumerate_directory(self, root: PathArg) -> Iterator[str]:
        root = os.fspath(root)
        if root not in self._directories:
            return

        prefix = root.rstrip(os.sep) + os.sep
        for entry in self._entries():
            if entry.startswith(prefix):
                yield entry

    def expand_glob(self, pattern: str) -> Iterator[str]:
        for entry in self._entries():
            if fnmatch(pattern, entry):
                yield entry


class FakeWatchDriver(WatchDriverInterface):
    """
    Fake watch driver for testing.

    Delivers a scripted sequence of batches instead of watching the
    operating system. Each batch is a list of root directories handed to
    the monitor, followed by a callback invocation, just as a real driver
    does after an event.
    """

    def __init__(
        self,
        batches: Iterable[Iterable[str]] = (),
        before_batch: Callable[[int], None] | None = None,
    ):
        """
        Initialize the fake driver.

        Args:
            batches: Root directories to deliver, one list per batch
            before_batch: Called with the batch index before each delivery,
                e.g. to modify an InMemoryFileSystem
        """
        self._batches = [list(batch) for batch in batches]
        self._before_batch = before_batch
        self._running = False
        self._stopped = False
        self._delivered: list[list[str]] = []

    def run(self, monitor: WatchTarget, callback: Callable[[], None]) -> None:
        if self._running:
            raise RuntimeError("Watch driver is already running")

        self._running = True
        self._stopped = False

        try:
            for index, batch in enumerate(self._batches):
                if self._stopped:
                    break

                if self._before_batch is not None:
                    self._before_batch(index)

                monitor.clear_updated()
                monitor.update(batch)
                self._delivered.append(batch)

                callback()
        finally:
            self._running = False

    def stop(self) -> None:
        self._stopped = True

    def is_running(self) -> bool:
        return self._running

    def get_delivered_batches(self) -> list[list[str]]:
        """Get all batches that have been delivered to the monitor."""
        return list(self._delivered)
