"""
Thin boto3 wrapper exposing the three calls the purge pipeline needs.

Listing yields one list of identifiers per page, batched deletes report
per-item errors instead of raising, and bucket removal is a single call.
Transport-level failures surface as botocore exceptions; callers decide
which of those are fatal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import boto3
import botocore.config
import botocore.exceptions

from .config import PurgeConfig

if TYPE_CHECKING:
    from boto3 import Session
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

# Provider limit for both list page size and DeleteObjects batch size.
MAX_DELETE_BATCH = 1000

# Benign internal hiccup; the only code that is retried.
TRANSIENT_ERROR_CODE = "InternalError"


@dataclass(frozen=True)
class ObjectVersion:
    """One deletable unit: an object version or a delete marker."""

    key: str
    version_id: str | None = None

    def to_identifier(self) -> dict[str, str]:
        identifier = {"Key": self.key}
        if self.version_id:
            identifier["VersionId"] = self.version_id
        return identifier


@dataclass(frozen=True)
class ItemError:
    """A per-item failure reported by a batched delete."""

    version: ObjectVersion
    code: str
    message: str = ""

    @property
    def is_transient(self) -> bool:
        return self.code == TRANSIENT_ERROR_CODE

    def __str__(self) -> str:
        return f"{self.version.key}@{self.version.version_id}: {self.code} {self.message}".rstrip()


@dataclass
class DeleteResult:
    """Outcome of one batched delete request."""

    deleted: int = 0
    errors: list[ItemError] = field(default_factory=list)


def error_code(error: BaseException) -> str:
    """Machine-readable provider code of a botocore error, or ``""``."""
    if isinstance(error, botocore.exceptions.ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def is_transient(error: BaseException) -> bool:
    return error_code(error) == TRANSIENT_ERROR_CODE


class S3PurgeClient:
    """
    Versioned object store client used by the listers and deleters.

    boto3 clients are thread-safe, so a single instance is shared by every
    worker thread.

    Attributes:
        config: Purge configuration carrying region, endpoint and pool size.
    """

    def __init__(self, config: PurgeConfig) -> None:
        self.config = config
        self._session: Session | None = None
        self._s3_client: S3Client | None = None
        self._boto_config: botocore.config.Config | None = None

    @property
    def session(self) -> Session:
        """Lazily create and cache boto3 session."""
        if self._session is None:
            self._session = boto3.session.Session(region_name=self.config.region)
        return self._session

    @property
    def boto_config(self) -> botocore.config.Config:
        """Lazily create and cache boto configuration."""
        if self._boto_config is None:
            self._boto_config = botocore.config.Config(
                max_pool_connections=self.config.effective_pool_size,
                retries={"max_attempts": self.config.max_attempts, "mode": "standard"},
            )
        return self._boto_config

    @property
    def s3_client(self) -> S3Client:
        """Lazily create and cache the S3 client."""
        if self._s3_client is None:
            self._s3_client = self.session.client(
                "s3", endpoint_url=self.config.endpoint_url, config=self.boto_config
            )
        return self._s3_client

    def list_versions(self, bucket: str, prefix: str = "") -> Iterator[list[ObjectVersion]]:
        """
        Walk every page of versions and delete markers under a prefix.

        Versions and delete markers map to the same identifier since both are
        removed the same way.

        Args:
            bucket: Name of the bucket.
            prefix: Key prefix; empty lists the whole bucket.

        Yields:
            The identifiers of one page, possibly empty.
        """
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix

        paginator = self.s3_client.get_paginator("list_object_versions")
        for page in paginator.paginate(
            **params, PaginationConfig={"PageSize": MAX_DELETE_BATCH}
        ):
            versions = [
                ObjectVersion(v["Key"], v.get("VersionId"))
                for v in page.get("Versions", [])
            ]
            markers = [
                ObjectVersion(m["Key"], m.get("VersionId"))
                for m in page.get("DeleteMarkers", [])
            ]
            yield versions + markers

    def delete_objects(self, bucket: str, objects: list[ObjectVersion]) -> DeleteResult:
        """
        Issue one batched delete.

        Args:
            bucket: Name of the bucket.
            objects: At most ``MAX_DELETE_BATCH`` identifiers.

        Returns:
            Count of deleted items and the per-item errors.

        Raises:
            botocore.exceptions.ClientError: On a transport-level failure.
        """
        response = self.s3_client.delete_objects(
            Bucket=bucket,
            Delete={
                "Objects": [obj.to_identifier() for obj in objects],
                "Quiet": False,
            },
        )
        errors = [
            ItemError(
                version=ObjectVersion(err.get("Key", ""), err.get("VersionId")),
                code=err.get("Code", ""),
                message=err.get("Message", ""),
            )
            for err in response.get("Errors", [])
        ]
        return DeleteResult(deleted=len(response.get("Deleted", [])), errors=errors)

    def delete_bucket(self, bucket: str) -> None:
        """Remove a bucket; it must already be empty."""
        logger.info(f"Removing bucket {bucket}")
        self.s3_client.delete_bucket(Bucket=bucket)
