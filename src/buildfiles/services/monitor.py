"""
Directory monitor for incremental re-evaluation of file lists.

A Monitor keeps a registry from watched root directory to the handles
tracking lists under that root. When a watch driver reports that a root
changed, every handle registered there re-snapshots its State and calls
its callback if anything was added, changed, removed or is missing.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

from buildfiles.core.config import MonitorConfig
from buildfiles.core.file_list import FileList, PathLike
from buildfiles.core.filesystem import FileSystemInterface
from buildfiles.core.state import State
from buildfiles.infrastructure.watch_drivers import (
    WatchDriverInterface,
    create_watch_driver,
)

logger = logging.getLogger(__name__)


class Interrupt(Exception):
    """
    Raised from a run callback to end the monitor loop.

    Monitor.run catches it and returns normally.
    """

    pass


class Handle:
    """
    A tracked list bound to a monitor and a change callback.

    Attributes:
        monitor: The monitor the handle is registered with
        state: Snapshot of the tracked list
    """

    def __init__(
        self,
        monitor: "Monitor",
        files: FileList | Iterable[PathLike],
        callback: Callable[[State], None],
        filesystem: FileSystemInterface | None = None,
    ):
        """
        Initialize the handle and take the first snapshot.

        Args:
            monitor: Owning monitor
            files: List to track
            callback: Called with the State whenever a re-snapshot finds changes
            filesystem: Adapter used for stat calls (default: local disk)
        """
        self._monitor = monitor
        self._state = State(FileList.coerce(files), filesystem)
        self._callback = callback

    @property
    def monitor(self) -> "Monitor":
        return self._monitor

    @property
    def state(self) -> State:
        return self._state

    @property
    def directories(self) -> list[str]:
        """Roots this handle is registered under."""
        return self._state.files.roots

    def commit(self) -> bool:
        """Re-snapshot without notifying the callback."""
        return self._state.update()

    def remove(self) -> None:
        """Unregister from the monitor."""
        self._monitor.delete(self)

    def changed(self) -> bool:
        """
        Re-snapshot and notify the callback if anything changed.

        Returns:
            True if the callback was invoked
        """
        if self._state.update():
            self._callback(self._state)
            return True
        return False

    def __repr__(self) -> str:
        return f"<Handle directories={self.directories!r}>"


class Monitor:
    """
    Registry of tracked lists keyed by root directory.

    The monitor owns no threads: a watch driver calls `update` with the
    roots that changed and the monitor re-evaluates the handles registered
    there. Handles removed while an update is in progress (including from
    their own callback) are purged once the update finishes.
    """

    def __init__(self, filesystem: FileSystemInterface | None = None):
        """
        Initialize an empty monitor.

        Args:
            filesystem: Adapter passed to the States of tracked handles
        """
        self._filesystem = filesystem
        self._directories: dict[str, set[Handle]] = {}
        self._updated = False
        self._deletions: list[Handle] | None = None

    @property
    def updated(self) -> bool:
        """True when a root was added or dropped since the last clear."""
        return self._updated

    def clear_updated(self) -> None:
        self._updated = False

    @property
    def roots(self) -> list[str]:
        return list(self._directories)

    def handles(self, directory: str) -> set[Handle]:
        """Handles registered under a root (empty if none)."""
        return set(self._directories.get(directory, ()))

    def update(self, directories: Iterable[str]) -> None:
        """
        Notify the monitor that files in these directories have changed.

        Args:
            directories: Root directories reported by a watch driver; roots
                without handles are ignored
        """
        with self._delay_deletions():
            for directory in directories:
                handles = self._directories.get(directory)
                if not handles:
                    continue

                logger.debug(f"Checking {len(handles)} handle(s) under {directory}")

                # Callbacks may add handles, so iterate a copy.
                for handle in list(handles):
                    handle.changed()

    def delete(self, handle: Handle) -> None:
        if self._deletions is not None:
            self._deletions.append(handle)
        else:
            self._purge(handle)

    def track_changes(
        self,
        files: FileList | Iterable[PathLike],
        callback: Callable[[State], None],
    ) -> Handle:
        """
        Start tracking a list.

        Args:
            files: List to track
            callback: Called with the handle's State when it changes

        Returns:
            The registered handle
        """
        handle = Handle(self, files, callback, self._filesystem)
        return self.add(handle)

    def add(self, handle: Handle) -> Handle:
        for directory in handle.directories:
            handles = self._directories.setdefault(directory, set())
            handles.add(handle)

            # We just added the first handle:
            if len(handles) == 1:
                logger.debug(f"Watching new root: {directory}")
                self._updated = True

        return handle

    def run(
        self,
        callback: Callable[[], None],
        driver: WatchDriverInterface | str | None = None,
        config: MonitorConfig | None = None,
    ) -> None:
        """
        Watch the registered roots until interrupted.

        Args:
            callback: Called after each batch of changes has been processed;
                raise Interrupt from it to stop
            driver: Driver instance or name (default: config.driver)
            config: Monitor configuration for driver selection and timings

        Raises:
            WatchDriverError: If the driver cannot watch the roots
        """
        if driver is None or isinstance(driver, str):
            driver = create_watch_driver(driver, config)

        logger.info(f"Running monitor with {type(driver).__name__} on {len(self._directories)} root(s)")

        try:
            driver.run(self, callback)
        except Interrupt:
            logger.info("Monitor interrupted")

    @contextmanager
    def _delay_deletions(self) -> Iterator[None]:
        # Nested updates share the outer deletion list.
        if self._deletions is not None:
            yield
            return

        self._deletions = []
        try:
            yield
        finally:
            deletions, self._deletions = self._deletions, None
            for handle in deletions:
                self._purge(handle)

    def _purge(self, handle: Handle) -> None:
        for directory in handle.directories:
            handles = self._directories.get(directory)
            if handles is None:
                continue

            handles.discard(handle)

            # Remove the entire record if there are no handles:
            if not handles:
                del self._directories[directory]
                logger.debug(f"Stopped watching root: {directory}")
                self._updated = True
