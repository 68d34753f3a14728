"""
Core Layer - Paths, file lists, snapshots and configuration.
"""

from buildfiles.core.config import (
    BuildFilesConfig,
    LoggingConfig,
    MonitorConfig,
    configure_logging,
    load_config,
)
from buildfiles.core.difference import Difference
from buildfiles.core.directory import Directory
from buildfiles.core.file_events import ChangeBatch, FileEvent, FileEventType
from buildfiles.core.file_list import NONE, Composite, FileList, Paths
from buildfiles.core.filesystem import (
    FileSystemInterface,
    LocalFileSystem,
    get_default_filesystem,
)
from buildfiles.core.glob import Glob
from buildfiles.core.path import Path
from buildfiles.core.state import FileTime, State, is_dirty

__all__ = [
    # Config
    "BuildFilesConfig",
    "MonitorConfig",
    "LoggingConfig",
    "load_config",
    "configure_logging",
    # Paths and lists
    "Path",
    "FileList",
    "Paths",
    "Composite",
    "Directory",
    "Glob",
    "Difference",
    "NONE",
    # State
    "State",
    "FileTime",
    "is_dirty",
    # Filesystem
    "FileSystemInterface",
    "LocalFileSystem",
    "get_default_filesystem",
    # Events
    "FileEvent",
    "FileEventType",
    "ChangeBatch",
]
