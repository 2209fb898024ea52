"""
s3-purge - bulk deletion of versioned S3 buckets.

Lists object versions and delete markers under one or more bucket/prefix
scopes in parallel, deletes them in batches with a pool of workers, then
removes the emptied buckets.
"""

from .client import DeleteResult, ItemError, ObjectVersion, S3PurgeClient
from .config import PurgeConfig
from .errors import (
    BucketDeleteError,
    ConfigurationError,
    DeleteError,
    ListingError,
    NonRetryableDeleteError,
    PurgeError,
)
from .purge import BucketPurger, PurgePhase
from .scopes import Scope, build_scopes, expand_prefix, parse_locator
from .stats import PurgeStats

__version__ = "0.1.0"

__all__ = [
    "BucketDeleteError",
    "BucketPurger",
    "ConfigurationError",
    "DeleteError",
    "DeleteResult",
    "ItemError",
    "ListingError",
    "NonRetryableDeleteError",
    "ObjectVersion",
    "PurgeConfig",
    "PurgeError",
    "PurgePhase",
    "PurgeStats",
    "S3PurgeClient",
    "Scope",
    "build_scopes",
    "expand_prefix",
    "parse_locator",
]
