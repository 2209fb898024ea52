"""Shared run state: the first fatal error and cooperative cancellation."""

from __future__ import annotations

import logging
import threading

from .errors import RunCancelled
from .work_queue import WorkQueue

logger = logging.getLogger(__name__)


class RunContext:
    """
    Records the first fatal error of a run and cancels every sibling task.

    Listers and deleters poll ``raise_if_cancelled`` between remote calls;
    tasks blocked on the work queue are woken by cancelling the queue.
    """

    def __init__(self, queue: WorkQueue) -> None:
        self.queue = queue
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._error: BaseException | None = None

    @property
    def error(self) -> BaseException | None:
        with self._lock:
            return self._error

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def fail(self, error: BaseException) -> None:
        """Record ``error`` if it is the first, then cancel the run."""
        with self._lock:
            if self._error is None:
                self._error = error
                logger.debug(f"Cancelling run after fatal error: {error}")
        self._cancelled.set()
        self.queue.cancel()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise RunCancelled("run cancelled after a fatal error")
