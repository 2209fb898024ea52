"""Exceptions raised by the purge pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import ItemError
    from .scopes import Scope


class PurgeError(Exception):
    """Base class for every fatal purge condition."""


class ConfigurationError(PurgeError):
    """Invalid or missing user input, raised before any remote call."""


class RunCancelled(PurgeError):
    """Raised in sibling tasks once another task has failed the run."""


class ListingError(PurgeError):
    """Listing object versions under a scope failed."""

    def __init__(self, scope: Scope, cause: BaseException) -> None:
        self.scope = scope
        self.cause = cause
        super().__init__(f"error while listing {scope}: {cause}")


class DeleteError(PurgeError):
    """A batched delete request failed at transport level."""

    def __init__(self, bucket: str, cause: BaseException) -> None:
        self.bucket = bucket
        self.cause = cause
        super().__init__(f"error while deleting from {bucket}: {cause}")


class NonRetryableDeleteError(PurgeError):
    """A batched delete reported at least one non-transient item error."""

    def __init__(self, bucket: str, errors: list[ItemError]) -> None:
        self.bucket = bucket
        self.errors = errors
        details = ", ".join(str(err) for err in errors)
        super().__init__(f"non-retryable errors while deleting from {bucket}: {details}")


class BucketDeleteError(PurgeError):
    """Removing a bucket after purging it failed."""

    def __init__(self, bucket: str, cause: BaseException) -> None:
        self.bucket = bucket
        self.cause = cause
        super().__init__(f"error while deleting bucket {bucket}: {cause}")
