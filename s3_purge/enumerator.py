"""Producer side of the pipeline: lists one scope into delete batches."""

from __future__ import annotations

import logging

import botocore.exceptions

from .client import MAX_DELETE_BATCH, S3PurgeClient
from .context import RunContext
from .errors import ListingError
from .scopes import Scope
from .stats import PurgeStats
from .work_queue import DeleteBatch, WorkQueue

logger = logging.getLogger(__name__)


class VersionEnumerator:
    """
    Walks every listing page under a scope and queues its identifiers.

    Empty pages produce no batch. A page larger than the delete limit is
    split so no batch exceeds ``MAX_DELETE_BATCH``. The shared queue is
    never closed here; the coordinator closes it once every lister is done.
    """

    def __init__(
        self,
        client: S3PurgeClient,
        queue: WorkQueue,
        stats: PurgeStats,
        context: RunContext,
        batch_size: int = MAX_DELETE_BATCH,
    ) -> None:
        self.client = client
        self.queue = queue
        self.stats = stats
        self.context = context
        self.batch_size = batch_size

    def run(self, scope: Scope) -> None:
        """
        List ``scope`` to exhaustion.

        Raises:
            ListingError: On any listing failure; listing is never retried.
            RunCancelled: If another task failed the run.
        """
        logger.info(f"Listing {scope}")
        try:
            for objects in self.client.list_versions(scope.bucket, scope.prefix):
                self.context.raise_if_cancelled()
                last = objects[-1] if objects else None
                self.stats.record_page(
                    len(objects),
                    last_key=last.key if last else "",
                    last_version_id=(last.version_id or "") if last else "",
                )
                for start in range(0, len(objects), self.batch_size):
                    chunk = tuple(objects[start : start + self.batch_size])
                    self.stats.increment_queued(len(chunk))
                    self.queue.put(DeleteBatch(bucket=scope.bucket, objects=chunk))
        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
            raise ListingError(scope, e) from e
        logger.info(f"Finished listing {scope}")
