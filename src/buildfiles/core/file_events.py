"""
File event models for the directory monitor.

Native watch drivers receive individual file system events; these are
folded into a ChangeBatch holding the set of watched roots they touched,
which is what the monitor re-evaluates.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class FileEventType(Enum):
    """Types of file system events."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass
class FileEvent:
    """
    Represents a single file system event.

    Attributes:
        event_type: Type of the file event (CREATED, MODIFIED, DELETED, MOVED)
        file_path: Path to the affected file or directory
        old_path: Previous path for MOVED events, None otherwise
        is_directory: Whether the event concerns a directory
    """

    event_type: FileEventType
    file_path: str
    old_path: str | None = None
    is_directory: bool = False

    def __post_init__(self) -> None:
        """Ensure paths are strings."""
        self.file_path = os.fspath(self.file_path)
        if self.old_path is not None:
            self.old_path = os.fspath(self.old_path)

    @property
    def paths(self) -> list[str]:
        """Every path the event touches."""
        if self.old_path is None:
            return [self.file_path]
        return [self.old_path, self.file_path]


def roots_containing(path: str, roots: Iterable[str]) -> list[str]:
    """
    Return the roots that path lies in (or is).

    Args:
        path: Absolute path of a changed file or directory
        roots: Watched root directories

    Returns:
        Matching roots, in the order given
    """
    matches = []
    for root in roots:
        prefix = root.rstrip(os.sep)
        if path == prefix or path.startswith(prefix + os.sep):
            matches.append(root)
    return matches


@dataclass
class ChangeBatch:
    """
    Watched roots touched by a run of file events.

    Several events in the same root collapse to one entry, so each root is
    re-evaluated once per batch.

    Attributes:
        directories: Roots with at least one event
        event_count: Number of events merged into the batch
    """

    directories: set[str] = field(default_factory=set)
    event_count: int = 0

    def is_empty(self) -> bool:
        """Check if the batch touches no roots."""
        return not self.directories

    def merge(self, event: FileEvent, roots: Iterable[str]) -> None:
        """
        Merge a single event into this batch.

        Args:
            event: The file event to merge
            roots: Currently watched roots
        """
        roots = list(roots)
        for path in event.paths:
            self.directories.update(roots_containing(path, roots))
        self.event_count += 1

    def total_count(self) -> int:
        """Return the number of roots in the batch."""
        return len(self.directories)
