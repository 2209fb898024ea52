"""Command-line entry point for s3-purge."""

from __future__ import annotations

import argparse
import logging
import sys

from .client import S3PurgeClient
from .config import PurgeConfig
from .errors import ConfigurationError, PurgeError
from .purge import BucketPurger
from .scopes import build_scopes
from .stats import ProgressReporter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # botocore is very chatty at DEBUG.
    logging.getLogger("botocore").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.INFO)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="s3-purge",
        description="Delete every object version and delete marker in S3 buckets, then the buckets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s my-bucket                        Purge and remove a bucket
  %(prog)s s3://my-bucket/logs/             Purge one prefix, then try to remove the bucket
  %(prog)s my-bucket --prefix '{0..9}'      List ten sibling prefixes in parallel
  %(prog)s my-bucket --dry-run              List and count without deleting

Environment Variables:
  S3_PURGE_REGION        Default region
  S3_PURGE_ENDPOINT_URL  Endpoint of an S3-compatible provider
  S3_PURGE_WORKERS       Default number of deleter workers
        """,
    )
    parser.add_argument(
        "locators",
        nargs="*",
        metavar="BUCKET",
        help="bucket, bucket/prefix or s3://bucket/prefix",
    )
    parser.add_argument("--region", "-r", type=str, help="Region of the buckets")
    parser.add_argument(
        "--endpoint-url", type=str, help="Endpoint URL for S3-compatible providers"
    )
    parser.add_argument(
        "--workers", "-w", type=int, help="Number of concurrent deleter workers"
    )
    parser.add_argument(
        "--queue-depth",
        type=int,
        help="Batches buffered between listers and deleters (default: workers)",
    )
    parser.add_argument(
        "--prefix",
        "-p",
        default="",
        help="List only this prefix; supports brace expansion for parallel listing",
    )
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="List and count objects without deleting anything",
    )
    parser.add_argument(
        "--keep-buckets",
        action="store_true",
        help="Purge objects but do not remove the buckets",
    )
    parser.add_argument(
        "--progress-interval",
        type=float,
        help="Seconds between progress lines (default: 3)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PurgeConfig:
    """Merge environment defaults with command-line overrides."""
    config = PurgeConfig.from_environment()
    if args.region:
        config.region = args.region
    if args.endpoint_url:
        config.endpoint_url = args.endpoint_url
    if args.workers is not None:
        config.workers = args.workers
    if args.queue_depth is not None:
        config.queue_depth = args.queue_depth
    if args.progress_interval is not None:
        config.progress_interval = args.progress_interval
    config.prefix_pattern = args.prefix
    config.dry_run = args.dry_run
    config.keep_buckets = args.keep_buckets
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    """Main function that orchestrates the purge. Returns the exit code."""
    args = parse_arguments(argv)
    configure_logging(args.verbose)

    try:
        config = build_config(args)
        scopes = build_scopes(args.locators, config.prefix_pattern)
    except ConfigurationError as e:
        logger.error(f"Invalid arguments: {e}")
        logger.error("usage: s3-purge [OPTION]... BUCKET... (see --help)")
        return EXIT_USAGE

    purger = BucketPurger(S3PurgeClient(config), config)
    try:
        with ProgressReporter(purger.stats, config.progress_interval):
            purger.purge(scopes)
    except PurgeError as e:
        logger.error(f"Purge failed: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"Purge failed with unexpected error: {e!r}")
        logger.debug("Traceback of unexpected error", exc_info=True)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
