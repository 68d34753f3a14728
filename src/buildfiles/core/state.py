"""
Modification-time snapshots and staleness checks.

A State records the mtime of every member of a list. Re-snapshotting
classifies members as added, removed, changed or missing relative to the
previous snapshot, and two states (inputs and outputs) can be compared to
decide whether the outputs need rebuilding.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from buildfiles.core.file_list import FileList
from buildfiles.core.filesystem import FileSystemInterface, get_default_filesystem
from buildfiles.core.path import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class FileTime:
    """
    A file on disk with a specific mtime.

    Ordering compares the time only.
    """

    path: Path = field(compare=False)
    time: float


class State(FileList):
    """
    A list of files captured at a specific time, which can be checked for changes.

    The first snapshot is taken on construction. Each call to `update`
    recomputes every delta list from scratch against the previous snapshot.

    Attributes:
        files: The tracked list
        times: Mapping of path to mtime from the latest snapshot
        added: Paths present now but not in the previous snapshot
        removed: Paths in the previous snapshot that are no longer present
        changed: Paths present in both snapshots with a different mtime
        missing: Paths the list yields that do not exist on disk
        oldest_time: Oldest FileTime among existing non-directory members
        newest_time: Newest FileTime among existing non-directory members
    """

    def __init__(self, files: FileList, filesystem: FileSystemInterface | None = None):
        """
        Initialize the state and take the first snapshot.

        Args:
            files: List of files to track
            filesystem: Adapter used for stat calls (default: local disk)

        Raises:
            TypeError: If files is not a FileList
        """
        if not isinstance(files, FileList):
            raise TypeError(f"Invalid files list: {files!r}")

        self._files = files
        self._filesystem = filesystem or get_default_filesystem()

        self._times: dict[Path, float] = {}
        self._added: list[Path] = []
        self._removed: list[Path] = []
        self._changed: list[Path] = []
        self._missing: list[Path] = []
        self._oldest_time: FileTime | None = None
        self._newest_time: FileTime | None = None

        self.update()

    @property
    def files(self) -> FileList:
        return self._files

    @property
    def times(self) -> dict[Path, float]:
        return dict(self._times)

    @property
    def added(self) -> list[Path]:
        return list(self._added)

    @property
    def removed(self) -> list[Path]:
        return list(self._removed)

    @property
    def changed(self) -> list[Path]:
        return list(self._changed)

    @property
    def missing(self) -> list[Path]:
        return list(self._missing)

    @property
    def oldest_time(self) -> FileTime | None:
        return self._oldest_time

    @property
    def newest_time(self) -> FileTime | None:
        return self._newest_time

    def _modified_time(self, path: Path) -> float | None:
        """Return the mtime of path, or None if it does not exist."""
        if not self._filesystem.exists(path):
            return None
        try:
            return self._filesystem.modified_time(path)
        except FileNotFoundError:
            # Deleted between the two calls.
            return None

    def update(self) -> bool:
        """
        Take a new snapshot and compute the deltas against the previous one.

        Returns:
            True if anything was added, changed, removed or is missing
        """
        last_times = self._times
        self._times = {}

        added: list[Path] = []
        changed: list[Path] = []
        missing: list[Path] = []
        file_times: list[FileTime] = []

        # The same path may be listed twice; only the first occurrence counts.
        seen: set[Path] = set()

        for path in self._files:
            if path in seen:
                continue
            seen.add(path)

            modified_time = self._modified_time(path)

            if modified_time is None:
                missing.append(path)
                continue

            last_time = last_times.pop(path, None)
            if last_time is None:
                added.append(path)
            elif modified_time != last_time:
                changed.append(path)

            self._times[path] = modified_time

            if not self._filesystem.is_directory(path):
                file_times.append(FileTime(path, modified_time))

        self._added = added
        self._changed = changed
        self._missing = missing
        self._removed = list(last_times)

        self._oldest_time = min(file_times, default=None)
        self._newest_time = max(file_times, default=None)

        updated = bool(added or changed or self._removed or missing)
        if updated:
            logger.debug(
                f"State changed: {len(added)} added, {len(changed)} changed, "
                f"{len(self._removed)} removed, {len(missing)} missing"
            )

        return updated

    def has_missing(self) -> bool:
        return bool(self._missing)

    def is_empty(self) -> bool:
        return not self._times

    def is_dirty(self, inputs: "State") -> bool:
        """Check whether these files (as outputs) are stale with respect to inputs."""
        return is_dirty(inputs, self)

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._times))

    def _key(self) -> tuple:
        return (id(self),)

    def __eq__(self, other: Any) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return (
            f"<State added={self._added!r} removed={self._removed!r} "
            f"changed={self._changed!r} missing={self._missing!r}>"
        )


def is_dirty(inputs: State, outputs: State) -> bool:
    """
    Decide whether outputs need to be rebuilt from inputs.

    Args:
        inputs: State of the input files
        outputs: State of the output files

    Returns:
        True if an output is missing, or the newest input is newer than
        the oldest output, or the times cannot be compared
    """
    if outputs.has_missing():
        logger.debug(f"Output files missing: {outputs.missing!r}")
        return True

    # If there are no inputs or no outputs, we are always clean:
    if inputs.is_empty() or outputs.is_empty():
        return False

    oldest_output_time = outputs.oldest_time
    newest_input_time = inputs.newest_time

    if newest_input_time is not None and oldest_output_time is not None:
        # Dirty if any input is newer than any output:
        return newest_input_time > oldest_output_time

    return True
