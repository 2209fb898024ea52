"""Bounded many-producer/many-consumer queue of delete batches."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

from .client import ObjectVersion
from .errors import RunCancelled


@dataclass(frozen=True)
class DeleteBatch:
    """Identifiers from one bucket to delete in a single request."""

    bucket: str
    objects: tuple[ObjectVersion, ...]

    def __len__(self) -> int:
        return len(self.objects)


class QueueClosed(Exception):
    """Raised when putting into a queue that has been closed."""


class WorkQueue:
    """
    Bounded FIFO shared by every lister and deleter.

    ``put`` blocks while the queue is full, which keeps listing from running
    far ahead of deletion. ``get`` blocks while the queue is empty and open,
    and returns ``None`` once the queue is closed and drained. ``cancel``
    wakes every blocked caller with ``RunCancelled``.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        self.maxsize = maxsize
        self._items: deque[DeleteBatch] = deque()
        self._closed = False
        self._cancelled = False
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)

    def put(self, batch: DeleteBatch) -> None:
        with self._not_full:
            while len(self._items) >= self.maxsize and not self._cancelled:
                self._not_full.wait()
            if self._cancelled:
                raise RunCancelled("work queue cancelled")
            if self._closed:
                raise QueueClosed("put on closed work queue")
            self._items.append(batch)
            self._not_empty.notify()

    def get(self) -> DeleteBatch | None:
        with self._not_empty:
            while not self._items and not self._closed and not self._cancelled:
                self._not_empty.wait()
            if self._cancelled:
                raise RunCancelled("work queue cancelled")
            if not self._items:
                return None
            batch = self._items.popleft()
            self._not_full.notify()
            return batch

    def close(self) -> None:
        """Signal that no more batches will be put."""
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def cancel(self) -> None:
        """Abandon the queue, waking all blocked producers and consumers."""
        with self._lock:
            self._cancelled = True
            self._items.clear()
            self._not_empty.notify_all()
            self._not_full.notify_all()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[DeleteBatch]:
        while (batch := self.get()) is not None:
            yield batch
