"""Consumer side of the pipeline: batched deletes with item-level retry."""

from __future__ import annotations

import logging

import botocore.exceptions

from .client import ObjectVersion, S3PurgeClient, is_transient
from .context import RunContext
from .errors import DeleteError, NonRetryableDeleteError
from .stats import PurgeStats
from .work_queue import DeleteBatch, WorkQueue

logger = logging.getLogger(__name__)


class DeletionWorker:
    """
    Drains delete batches from the work queue until it is closed and empty.

    A batch that fails with the transient code is resent whole. When a
    response reports per-item errors that are all transient, just those
    items are resent; any other error is fatal. Retries finish before the
    next batch is taken from the queue.
    """

    def __init__(
        self,
        client: S3PurgeClient,
        queue: WorkQueue,
        stats: PurgeStats,
        context: RunContext,
        dry_run: bool = False,
    ) -> None:
        self.client = client
        self.queue = queue
        self.stats = stats
        self.context = context
        self.dry_run = dry_run

    def run(self) -> None:
        for batch in self.queue:
            self.stats.decrement_queued(len(batch))
            self.process(batch)

    def process(self, batch: DeleteBatch) -> None:
        if self.dry_run:
            logger.debug(f"Dry run: would delete {len(batch)} objects from {batch.bucket}")
            return
        self.delete_objects(batch.bucket, list(batch.objects))

    def delete_objects(self, bucket: str, objects: list[ObjectVersion]) -> None:
        """
        Delete ``objects``, resending the retry cohort until it converges.

        There is no retry cap; a transient condition that never clears keeps
        this loop running until the run is cancelled.

        Raises:
            DeleteError: On a non-transient transport failure.
            NonRetryableDeleteError: If any item failed with another code.
            RunCancelled: If another task failed the run.
        """
        pending = objects
        while pending:
            self.context.raise_if_cancelled()
            self.stats.begin_delete()
            try:
                result = self.client.delete_objects(bucket, pending)
            except botocore.exceptions.ClientError as e:
                if is_transient(e):
                    logger.debug(f"Transient error deleting {len(pending)} objects from {bucket}, retrying")
                    self.stats.increment_retried(len(pending))
                    continue
                raise DeleteError(bucket, e) from e
            except botocore.exceptions.BotoCoreError as e:
                raise DeleteError(bucket, e) from e
            finally:
                self.stats.end_delete()

            self.stats.increment_deleted(result.deleted)
            if not result.errors:
                return

            if not all(err.is_transient for err in result.errors):
                raise NonRetryableDeleteError(bucket, result.errors)

            pending = [err.version for err in result.errors]
            logger.warning(f"Retrying {len(pending)} objects in {bucket} after transient errors")
            self.stats.increment_retried(len(pending))
