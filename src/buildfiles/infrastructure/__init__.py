"""
Infrastructure Layer - Watch drivers and test doubles.
"""

from buildfiles.infrastructure.fakes import (
    FakeWatchDriver,
    InMemoryFileSystem,
)
from buildfiles.infrastructure.watch_drivers import (
    NativeWatchDriver,
    PollingWatchDriver,
    WatchDriverError,
    WatchDriverInterface,
    WatchTarget,
    create_watch_driver,
    default_driver_name,
)

__all__ = [
    # Watch drivers
    "WatchDriverInterface",
    "WatchTarget",
    "NativeWatchDriver",
    "PollingWatchDriver",
    "WatchDriverError",
    "create_watch_driver",
    "default_driver_name",
    # Fakes
    "FakeWatchDriver",
    "InMemoryFileSystem",
]
