"""Counters shared by the listers and deleters, and the progress reporter."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass
class PurgeStats:
    """Statistics for tracking purge progress."""

    listed: int = 0
    requests: int = 0
    queued: int = 0
    deletes_pending: int = 0
    deleted: int = 0
    retried: int = 0
    last_key: str = ""
    last_version_id: str = ""
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def record_page(self, count: int, last_key: str = "", last_version_id: str = "") -> None:
        """Thread-safe accounting of one fetched listing page."""
        with self._lock:
            self.requests += 1
            self.listed += count
            if last_key:
                self.last_key = last_key
                self.last_version_id = last_version_id

    def increment_requests(self, count: int = 1) -> None:
        with self._lock:
            self.requests += count

    def increment_queued(self, count: int) -> None:
        with self._lock:
            self.queued += count

    def decrement_queued(self, count: int) -> None:
        with self._lock:
            self.queued -= count

    def begin_delete(self) -> None:
        with self._lock:
            self.deletes_pending += 1

    def end_delete(self) -> None:
        """Close out one delete request, counting it as issued."""
        with self._lock:
            self.deletes_pending -= 1
            self.requests += 1

    def increment_deleted(self, count: int) -> None:
        with self._lock:
            self.deleted += count

    def increment_retried(self, count: int) -> None:
        with self._lock:
            self.retried += count

    def snapshot(self) -> dict[str, int]:
        """Return a consistent copy of the numeric counters."""
        with self._lock:
            return {
                "deleted": self.deleted,
                "deletes_pending": self.deletes_pending,
                "listed": self.listed,
                "queued": self.queued,
                "requests": self.requests,
                "retried": self.retried,
            }

    def format_metrics(self) -> str:
        """Render counters as a single ``metrics:`` line, keys sorted."""
        values = self.snapshot()
        line = "metrics: " + " ".join(f"{name}={values[name]}" for name in sorted(values))
        with self._lock:
            if self.last_key:
                line += f" key={self.last_key} version_id={self.last_version_id}"
        return line

    def log_metrics(self) -> None:
        logger.info(self.format_metrics())


class ProgressReporter:
    """
    Background thread that logs a metrics line every ``interval`` seconds.

    Use as a context manager; a final snapshot is logged on exit.
    """

    def __init__(self, stats: PurgeStats, interval: float) -> None:
        self.stats = stats
        self.interval = interval
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run, name="purge-progress", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.stats.log_metrics()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            self.stats.log_metrics()

    def __enter__(self) -> ProgressReporter:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
