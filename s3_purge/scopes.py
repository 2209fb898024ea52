"""
Scope parsing and expansion.

A scope is a bucket plus a key prefix. Command-line locators are turned into
scopes here, and a brace pattern such as ``logs/{0..9}`` multiplies one scope
into several sibling scopes so that each can be listed in parallel.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from braceexpand import UnbalancedBracesError, braceexpand

from .errors import ConfigurationError

SCHEMES = ("s3",)

_BUCKET_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


@dataclass(frozen=True)
class Scope:
    """A subtree of one bucket to enumerate and delete."""

    bucket: str
    prefix: str = ""

    def __str__(self) -> str:
        return f"{self.bucket}/{self.prefix}"


def parse_locator(locator: str) -> Scope:
    """
    Parse one scope argument.

    Accepts ``bucket``, ``bucket/prefix`` or ``s3://bucket/prefix``.

    Raises:
        ConfigurationError: If the locator is empty, uses an unknown scheme
            or names an invalid bucket.
    """
    locator = locator.strip()
    if not locator:
        raise ConfigurationError("empty scope locator")

    if "://" in locator:
        parts = urlsplit(locator)
        if parts.scheme not in SCHEMES:
            raise ConfigurationError(
                f"unsupported scheme {parts.scheme!r} in {locator!r}; "
                f"expected one of: {', '.join(SCHEMES)}"
            )
        bucket = parts.netloc
        prefix = parts.path.lstrip("/")
    else:
        bucket, _, prefix = locator.partition("/")

    if not _BUCKET_NAME.match(bucket):
        raise ConfigurationError(f"invalid bucket name {bucket!r} in {locator!r}")
    return Scope(bucket=bucket, prefix=prefix)


def expand_prefix(pattern: str) -> list[str]:
    """
    Expand a brace pattern into concrete prefixes.

    ``"{a,b}/x"`` gives ``["a/x", "b/x"]``; a pattern without braces gives
    itself. Backslashes are kept as literal key characters. Order is
    preserved and duplicates are dropped.

    Raises:
        ConfigurationError: If the braces are unbalanced.
    """
    try:
        prefixes = list(braceexpand(pattern, escape=False))
    except UnbalancedBracesError as e:
        raise ConfigurationError(f"invalid prefix pattern {pattern!r}: {e}") from e
    return list(dict.fromkeys(prefixes)) or [""]


def build_scopes(locators: list[str], prefix_pattern: str = "") -> list[Scope]:
    """
    Turn command-line locators into the full list of scopes to purge.

    The prefix pattern is appended to each locator's own prefix before brace
    expansion, so ``bucket/logs/`` with ``{0..9}`` yields ten scopes.

    Raises:
        ConfigurationError: If no locators are given or any is invalid.
    """
    if not locators:
        raise ConfigurationError("at least one bucket or s3:// locator is required")

    scopes: list[Scope] = []
    for locator in locators:
        base = parse_locator(locator)
        for prefix in expand_prefix(base.prefix + prefix_pattern):
            scopes.append(Scope(bucket=base.bucket, prefix=prefix))
    return list(dict.fromkeys(scopes))


def touched_buckets(scopes: list[Scope]) -> list[str]:
    """Distinct buckets referenced by the scopes, in first-seen order."""
    return list(dict.fromkeys(scope.bucket for scope in scopes))
