"""Shared pytest fixtures for the purge tests."""

from __future__ import annotations

import pytest

from s3_purge.config import PurgeConfig
from s3_purge.context import RunContext
from s3_purge.stats import PurgeStats
from s3_purge.work_queue import WorkQueue
from tests.fake_store import FakeStore


@pytest.fixture(autouse=True)
def clean_purge_env(monkeypatch):
    """Keep S3_PURGE_* variables from the developer's shell out of tests."""
    for name in ("S3_PURGE_REGION", "S3_PURGE_ENDPOINT_URL", "S3_PURGE_WORKERS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(name="fake_aws_credentials")
def fixture_fake_aws_credentials(monkeypatch):
    """Static credentials so boto3 clients can be built offline."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture(name="store")
def fixture_store():
    return FakeStore()


@pytest.fixture(name="stats")
def fixture_stats():
    return PurgeStats()


@pytest.fixture(name="config")
def fixture_config():
    """Small pool so tests stay quick."""
    return PurgeConfig(workers=4, progress_interval=0.05)


@pytest.fixture(name="queue")
def fixture_queue():
    return WorkQueue(maxsize=8)


@pytest.fixture(name="context")
def fixture_context(queue):
    return RunContext(queue)
