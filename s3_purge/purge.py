"""
Purge coordinator.

Runs one lister per scope and a fixed pool of deleters against a shared
bounded queue, waits for listing to finish and the queue to drain, then
removes each touched bucket once. The first fatal error from any task
cancels the rest and is re-raised to the caller.
"""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable

import botocore.exceptions

from .client import S3PurgeClient
from .config import PurgeConfig
from .context import RunContext
from .deleter import DeletionWorker
from .enumerator import VersionEnumerator
from .errors import BucketDeleteError, RunCancelled
from .scopes import Scope, touched_buckets
from .stats import PurgeStats
from .work_queue import WorkQueue

logger = logging.getLogger(__name__)


class PurgePhase(enum.Enum):
    PENDING = "pending"
    LISTING = "listing"
    DRAINING = "draining"
    BUCKET_CLEANUP = "bucket_cleanup"
    DONE = "done"
    FAILED = "failed"


class BucketPurger:
    """
    Coordinates listing, deletion and bucket removal for a set of scopes.

    Attributes:
        client: Store client shared by every task.
        config: Purge configuration.
        stats: Counters updated by listers and deleters.
        phase: Current stage of the run.
    """

    def __init__(
        self,
        client: S3PurgeClient,
        config: PurgeConfig,
        stats: PurgeStats | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.stats = stats if stats is not None else PurgeStats()
        self.phase = PurgePhase.PENDING

    def purge(self, scopes: list[Scope]) -> PurgeStats:
        """
        Delete every version under ``scopes``, then the buckets themselves.

        Args:
            scopes: Scopes to purge; overlapping scopes are allowed.

        Returns:
            The run's counters.

        Raises:
            PurgeError: The first fatal error observed by any task.
        """
        buckets = touched_buckets(scopes)
        mode = " (dry run)" if self.config.dry_run else ""
        logger.info(f"Deleting all objects in buckets {buckets}{mode}")

        try:
            self._purge_objects(scopes)
            if self.config.dry_run or self.config.keep_buckets:
                logger.info("Leaving buckets in place")
            else:
                self.phase = PurgePhase.BUCKET_CLEANUP
                for bucket in buckets:
                    self._delete_bucket(bucket)
        except BaseException:
            self.phase = PurgePhase.FAILED
            raise

        self.phase = PurgePhase.DONE
        logger.info("Done")
        return self.stats

    def _purge_objects(self, scopes: list[Scope]) -> None:
        queue = WorkQueue(self.config.effective_queue_depth)
        context = RunContext(queue)
        enumerator = VersionEnumerator(self.client, queue, self.stats, context)

        self.phase = PurgePhase.LISTING
        with (
            ThreadPoolExecutor(
                max_workers=max(1, len(scopes)), thread_name_prefix="purge-list"
            ) as listers,
            ThreadPoolExecutor(
                max_workers=self.config.workers, thread_name_prefix="purge-delete"
            ) as deleters,
        ):
            try:
                delete_futures = [
                    deleters.submit(
                        self._run_task,
                        context,
                        DeletionWorker(
                            self.client, queue, self.stats, context, dry_run=self.config.dry_run
                        ).run,
                    )
                    for _ in range(self.config.workers)
                ]
                list_futures = [
                    listers.submit(self._run_task, context, enumerator.run, scope)
                    for scope in scopes
                ]

                wait(list_futures)
                self.phase = PurgePhase.DRAINING
                queue.close()
                wait(delete_futures)
            except BaseException as e:
                # Pools join on exit; blocked tasks must be woken first.
                context.fail(e)
                raise

        if context.error is not None:
            raise context.error

    @staticmethod
    def _run_task(context: RunContext, task: Callable[..., None], *args) -> None:
        try:
            task(*args)
        except RunCancelled:
            return
        except Exception as e:
            context.fail(e)
            raise

    def _delete_bucket(self, bucket: str) -> None:
        try:
            self.client.delete_bucket(bucket)
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
            raise BucketDeleteError(bucket, e) from e
        finally:
            self.stats.increment_requests()
