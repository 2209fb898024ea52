"""Runtime configuration for a purge run."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigurationError

DEFAULT_REGION = "us-east-1"
DEFAULT_WORKERS = 64
DEFAULT_PROGRESS_INTERVAL = 3.0

# Extra pooled connections beyond one per worker, used by the listers.
CONNECTION_POOL_HEADROOM = 16


@dataclass
class PurgeConfig:
    """Configuration settings for purge operations."""

    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    workers: int = DEFAULT_WORKERS
    queue_depth: int | None = None
    prefix_pattern: str = ""
    dry_run: bool = False
    keep_buckets: bool = False
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL
    max_attempts: int = 3
    connection_pool_size: int | None = None

    @classmethod
    def from_environment(cls) -> PurgeConfig:
        """Create configuration from environment variables."""
        config = cls()
        config.region = os.environ.get("S3_PURGE_REGION", config.region)
        config.endpoint_url = os.environ.get("S3_PURGE_ENDPOINT_URL") or None

        workers = os.environ.get("S3_PURGE_WORKERS")
        if workers:
            try:
                config.workers = int(workers)
            except ValueError as e:
                raise ConfigurationError(
                    f"S3_PURGE_WORKERS must be an integer, got {workers!r}"
                ) from e
        return config

    @property
    def effective_queue_depth(self) -> int:
        """Capacity of the work queue; defaults to one batch per worker."""
        return self.queue_depth if self.queue_depth is not None else self.workers

    @property
    def effective_pool_size(self) -> int:
        if self.connection_pool_size is not None:
            return self.connection_pool_size
        return self.workers + CONNECTION_POOL_HEADROOM

    def validate(self) -> None:
        """
        Check numeric settings.

        Raises:
            ConfigurationError: If any setting is out of range.
        """
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        if self.effective_queue_depth < 1:
            raise ConfigurationError(
                f"queue depth must be at least 1, got {self.effective_queue_depth}"
            )
        if self.progress_interval <= 0:
            raise ConfigurationError(
                f"progress interval must be positive, got {self.progress_interval}"
            )
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max attempts must be at least 1, got {self.max_attempts}"
            )
