"""Tests for DeletionWorker retry handling."""

from unittest import mock

import pytest
from botocore.exceptions import ReadTimeoutError

from s3_purge.client import DeleteResult, ItemError, ObjectVersion
from s3_purge.deleter import DeletionWorker
from s3_purge.errors import DeleteError, NonRetryableDeleteError, RunCancelled
from s3_purge.work_queue import DeleteBatch
from tests.fake_store import client_error

OBJECTS = [ObjectVersion(f"k{i}", f"v{i}") for i in range(4)]


@pytest.fixture(name="worker")
def fixture_worker(store, queue, stats, context):
    store.add_bucket("b", list(OBJECTS))
    return DeletionWorker(store, queue, stats, context)


class TestRun:
    """Test draining the queue"""

    def test_drains_queue_until_closed(self, worker, store, queue, stats):
        stats.increment_queued(4)
        queue.put(DeleteBatch("b", tuple(OBJECTS[:3])))
        queue.put(DeleteBatch("b", tuple(OBJECTS[3:])))
        queue.close()

        worker.run()

        assert store.remaining("b") == []
        assert stats.deleted == 4
        assert stats.queued == 0
        assert stats.requests == 2
        assert stats.deletes_pending == 0

    def test_dry_run_skips_delete_calls(self, store, queue, stats, context):
        store.add_bucket("b", list(OBJECTS))
        worker = DeletionWorker(store, queue, stats, context, dry_run=True)
        stats.increment_queued(4)
        queue.put(DeleteBatch("b", tuple(OBJECTS)))
        queue.close()

        worker.run()

        assert store.delete_calls == []
        assert stats.deleted == 0
        assert stats.queued == 0
        assert len(store.remaining("b")) == 4


class TestDeleteObjects:
    """Test delete_objects retry semantics"""

    def test_transient_items_are_resubmitted_alone(self, worker, store, stats):
        store.transient_items[OBJECTS[1]] = 1
        store.transient_items[OBJECTS[2]] = 2

        worker.delete_objects("b", list(OBJECTS))

        assert [len(objs) for _, objs in store.delete_calls] == [4, 2, 1]
        assert store.delete_calls[1][1] == [OBJECTS[1], OBJECTS[2]]
        assert store.delete_calls[2][1] == [OBJECTS[2]]
        assert stats.deleted == 4
        assert stats.retried == 3
        assert store.remaining("b") == []

    def test_mixed_errors_are_fatal(self, worker, store):
        store.transient_items[OBJECTS[0]] = 1
        store.failing_items[OBJECTS[3]] = "AccessDenied"

        with pytest.raises(NonRetryableDeleteError) as excinfo:
            worker.delete_objects("b", list(OBJECTS))

        codes = {err.version: err.code for err in excinfo.value.errors}
        assert codes[OBJECTS[3]] == "AccessDenied"
        assert "AccessDenied" in str(excinfo.value)
        assert len(store.delete_calls) == 1

    def test_successes_are_counted_before_fatal_error(self, worker, store, stats):
        store.failing_items[OBJECTS[0]] = "AccessDenied"

        with pytest.raises(NonRetryableDeleteError):
            worker.delete_objects("b", list(OBJECTS))

        assert stats.deleted == 3

    def test_transient_transport_error_retries_whole_batch(self, worker, store, stats):
        store.transport_failures["b"] = [client_error("InternalError"), client_error("InternalError")]

        worker.delete_objects("b", list(OBJECTS))

        assert [objs for _, objs in store.delete_calls] == [list(OBJECTS)] * 3
        assert stats.deleted == 4
        assert stats.requests == 3
        assert stats.deletes_pending == 0

    def test_other_transport_error_is_fatal(self, worker, store, stats):
        store.transport_failures["b"] = [client_error("AccessDenied")]

        with pytest.raises(DeleteError) as excinfo:
            worker.delete_objects("b", list(OBJECTS))

        assert excinfo.value.bucket == "b"
        assert stats.requests == 1
        assert stats.deletes_pending == 0

    def test_connection_failure_is_fatal(self, queue, stats, context):
        client = mock.Mock()
        client.delete_objects.side_effect = ReadTimeoutError(endpoint_url="https://s3.example")
        worker = DeletionWorker(client, queue, stats, context)

        with pytest.raises(DeleteError):
            worker.delete_objects("b", list(OBJECTS))

    def test_error_code_matching_is_exact(self, queue, stats, context):
        client = mock.Mock()
        client.delete_objects.return_value = DeleteResult(
            deleted=0,
            errors=[ItemError(OBJECTS[0], "InternalErrorX", "We encountered an internal error.")],
        )
        worker = DeletionWorker(client, queue, stats, context)

        with pytest.raises(NonRetryableDeleteError):
            worker.delete_objects("b", [OBJECTS[0]])

    def test_retry_loop_stops_when_run_is_cancelled(self, queue, stats, context):
        client = mock.Mock()
        client.delete_objects.side_effect = [
            DeleteResult(errors=[ItemError(OBJECTS[0], "InternalError")]),
            AssertionError("should not be called again"),
        ]

        def cancel_after_first(*_args):
            context.fail(RuntimeError("sibling failed"))

        stats.increment_retried = mock.Mock(side_effect=cancel_after_first)
        worker = DeletionWorker(client, queue, stats, context)

        with pytest.raises(RunCancelled):
            worker.delete_objects("b", [OBJECTS[0]])

        assert client.delete_objects.call_count == 1
