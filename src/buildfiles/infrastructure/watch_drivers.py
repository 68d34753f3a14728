"""
Watch drivers for the directory monitor.

A driver owns the blocking loop: it waits for directories to change,
hands the changed roots to the monitor, then calls the caller's callback.
Two strategies are provided:
- NativeWatchDriver: OS change notifications through the watchdog library
- PollingWatchDriver: re-checks every watched root at a fixed interval

Cancellation is cooperative. Exceptions raised by the callback propagate
out of `run` (the monitor uses this for its Interrupt), and `stop` may be
called from another thread to end the loop before its next wait.
"""

import logging
import os
import queue
import sys
import threading
import time
from collections.abc import Callable, Iterable
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from buildfiles.core.config import MonitorConfig
from buildfiles.core.file_events import ChangeBatch, FileEvent, FileEventType

logger = logging.getLogger(__name__)

_EVENT_TYPES = {
    "created": FileEventType.CREATED,
    "modified": FileEventType.MODIFIED,
    "deleted": FileEventType.DELETED,
    "moved": FileEventType.MOVED,
}


class WatchDriverError(Exception):
    """Raised when a watch driver cannot watch the requested roots."""

    pass


class WatchTarget(Protocol):
    """The part of the monitor a driver talks to."""

    @property
    def roots(self) -> list[str]:
        """Currently watched root directories."""
        ...

    @property
    def updated(self) -> bool:
        """True when the set of roots changed since the last clear."""
        ...

    def clear_updated(self) -> None:
        ...

    def update(self, directories: Iterable[str]) -> None:
        """Re-evaluate every handle registered under the given roots."""
        ...


class WatchDriverInterface(Protocol):
    """Protocol for watch driver implementations."""

    def run(self, monitor: WatchTarget, callback: Callable[[], None]) -> None:
        """
        Watch the monitor's roots until stopped.

        Args:
            monitor: Monitor to notify of changed roots
            callback: Called after each batch has been delivered
        """
        ...

    def stop(self) -> None:
        """Ask a running loop to exit before its next wait."""
        ...

    def is_running(self) -> bool:
        ...


class PollingWatchDriver(WatchDriverInterface):
    """
    Timed polling driver.

    Every `latency` seconds all watched roots are handed to the monitor,
    which re-snapshots their handles and reports any changes.
    """

    def __init__(self, latency: float = 1.0):
        """
        Initialize the polling driver.

        Args:
            latency: Seconds to sleep between polls
        """
        self._latency = latency
        self._stop_event = threading.Event()
        self._running = False

    @property
    def latency(self) -> float:
        return self._latency

    def run(self, monitor: WatchTarget, callback: Callable[[], None]) -> None:
        self._stop_event.clear()
        self._running = True
        logger.info(f"Polling {len(monitor.roots)} root(s) every {self._latency}s")

        try:
            while not self._stop_event.is_set():
                monitor.clear_updated()
                monitor.update(monitor.roots)

                callback()

                if self._stop_event.wait(self._latency):
                    break
        finally:
            self._running = False
            logger.info("Stopped polling")

    def stop(self) -> None:
        self._stop_event.set()

    def is_running(self) -> bool:
        return self._running


class NativeWatchDriver(WatchDriverInterface):
    """
    Event-based driver using watchdog.

    Each existing root is scheduled recursively on a watchdog Observer.
    Events arriving on the observer thread are queued; the loop thread
    collects them into batches of affected roots and delivers those to the
    monitor. When the monitor's root set changes the observer is rebuilt.
    """

    def __init__(
        self,
        latency: float = 1.0,
        batch_delay_ms: int = 100,
        join_timeout: float = 5.0,
        observer_factory: Callable[[], Observer] | None = None,
    ):
        """
        Initialize the native driver.

        Args:
            latency: Seconds to wait for an event before re-checking for stop
            batch_delay_ms: Quiet period that ends an event batch
            join_timeout: Seconds to wait for the observer thread on shutdown
            observer_factory: Creates the watchdog observer (default: Observer)
        """
        self._latency = latency
        self._batch_delay = batch_delay_ms / 1000.0
        self._join_timeout = join_timeout
        self._observer_factory = observer_factory or Observer
        self._stop_event = threading.Event()
        self._running = False

    def run(self, monitor: WatchTarget, callback: Callable[[], None]) -> None:
        self._stop_event.clear()
        self._running = True

        try:
            while not self._stop_event.is_set():
                monitor.clear_updated()
                roots = list(monitor.roots)

                events: queue.Queue[FileEvent] = queue.Queue()
                observer = self._start_observer(roots, events)

                try:
                    self._process_events(monitor, roots, events, callback)
                finally:
                    observer.stop()
                    observer.join(timeout=self._join_timeout)

                if monitor.updated:
                    logger.info("Watched roots changed, restarting observer")
        finally:
            self._running = False
            logger.info("Stopped watching")

    def stop(self) -> None:
        self._stop_event.set()

    def is_running(self) -> bool:
        return self._running

    def _start_observer(self, roots: list[str], events: "queue.Queue[FileEvent]") -> Observer:
        """
        Create and start an observer for every existing root.

        Raises:
            WatchDriverError: If the platform watch API cannot be used
        """
        observer = self._observer_factory()
        handler = _QueueingEventHandler(events)

        try:
            for root in roots:
                if not os.path.isdir(root):
                    logger.debug(f"Not watching missing directory: {root}")
                    continue
                observer.schedule(handler, root, recursive=True)

            observer.start()
        except OSError as e:
            raise WatchDriverError(f"Could not start native watcher: {e}") from e

        logger.info(f"Started watching {len(roots)} root(s)")
        return observer

    def _process_events(
        self,
        monitor: WatchTarget,
        roots: list[str],
        events: "queue.Queue[FileEvent]",
        callback: Callable[[], None],
    ) -> None:
        """Deliver batches until the root set changes or a stop is requested."""
        while not monitor.updated and not self._stop_event.is_set():
            batch = self._next_batch(roots, events)
            if batch is None or batch.is_empty():
                continue

            logger.debug(
                f"Delivering {batch.event_count} event(s) for {batch.total_count()} root(s)"
            )
            monitor.update(sorted(batch.directories))

            callback()

    def _next_batch(
        self, roots: list[str], events: "queue.Queue[FileEvent]"
    ) -> ChangeBatch | None:
        """
        Wait for an event, then keep collecting until the queue goes quiet.

        Returns:
            The collected batch, or None if no event arrived within latency
        """
        try:
            event = events.get(timeout=self._latency)
        except queue.Empty:
            return None

        batch = ChangeBatch()
        batch.merge(event, roots)

        deadline = time.monotonic() + self._batch_delay
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                event = events.get(timeout=remaining)
            except queue.Empty:
                break
            batch.merge(event, roots)

        return batch


class _QueueingEventHandler(FileSystemEventHandler):
    """
    Internal watchdog event handler.

    Converts watchdog events to FileEvent objects and queues them for the
    driver loop. Runs on the observer thread.
    """

    def __init__(self, events: "queue.Queue[FileEvent]"):
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        event_type = _EVENT_TYPES.get(event.event_type)
        if event_type is None:
            # Opened/closed notifications do not change modification times.
            return

        dest_path = getattr(event, "dest_path", None) or None
        if event_type == FileEventType.MOVED and dest_path:
            file_event = FileEvent(
                event_type=event_type,
                file_path=os.fsdecode(dest_path),
                old_path=os.fsdecode(event.src_path),
                is_directory=event.is_directory,
            )
        else:
            file_event = FileEvent(
                event_type=event_type,
                file_path=os.fsdecode(event.src_path),
                is_directory=event.is_directory,
            )

        logger.debug(f"File change detected: {event_type.value} - {file_event.file_path}")
        self._events.put(file_event)


def default_driver_name() -> str:
    """Pick the driver for this platform."""
    if sys.platform.startswith(("linux", "darwin", "win32")):
        return "native"
    return "polling"


def create_watch_driver(
    name: str | None = None, config: MonitorConfig | None = None
) -> WatchDriverInterface:
    """
    Create a watch driver.

    Args:
        name: "native", "polling" or "auto" (default: config.driver)
        config: Monitor configuration supplying timings

    Returns:
        A driver instance

    Raises:
        ValueError: If the driver name is unknown
    """
    config = config or MonitorConfig()
    name = name or config.driver

    if name == "auto":
        name = default_driver_name()

    if name == "native":
        return NativeWatchDriver(
            latency=config.latency,
            batch_delay_ms=config.batch_delay_ms,
            join_timeout=config.join_timeout,
        )
    if name == "polling":
        return PollingWatchDriver(latency=config.latency)

    raise ValueError(f"Unknown watch driver: {name!r}")
