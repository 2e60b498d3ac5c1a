"""CLI entry point for stackdump.ingest.

Usage:
    python -m stackdump.ingest                          # Jobs from config.json
    python -m stackdump.ingest --site-list site.list    # Jobs from a manifest
    python -m stackdump.ingest --jobs 5                 # Five jobs at a time
    python -m stackdump.ingest --verbose                # Show more details
    python -m stackdump.ingest --debug                  # Show debug info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from stackdump.ingest.jobs import Error, ManifestError
from stackdump.ingest.logger import logger
from stackdump.ingest.run import run_ingest
from stackdump.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stack Exchange Data Dump Ingest Pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m stackdump.ingest
      Ingest every *.7z archive already in the data directory

  python -m stackdump.ingest --site-list site.list
      Download, extract and ingest every site listed in site.list
      (one "<local_name> <url>" pair per line)

  python -m stackdump.ingest --data-path /srv/dumps --jobs 5
      Use another data directory, five jobs at a time

  python -m stackdump.ingest --debug
      Enable debug logging including third-party libraries
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument(
        "--data-path",
        type=str,
        help="Directory holding archives and extracted dumps (default: ./data)",
    )
    parser.add_argument(
        "--site-list",
        type=str,
        help="Manifest of '<local_name> <url>' lines",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        help="Database URL (default: SQLite file in the data directory)",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        help="Maximum number of jobs running at once (default: 3)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with third-party library logs",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional file to write logs to",
    )
    return parser


def settings_overrides(args: argparse.Namespace) -> dict[str, object]:
    """Settings given on the command line."""
    overrides: dict[str, object] = {
        "data_path": args.data_path,
        "site_list": args.site_list,
        "database_url": args.database_url,
        "max_concurrent_jobs": args.jobs,
    }
    return {key: value for key, value in overrides.items() if value is not None}


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    if args.debug:
        log_level = logging.DEBUG
        debug_third_party = True
    elif args.verbose:
        log_level = logging.DEBUG
        debug_third_party = False
    else:
        log_level = logging.INFO
        debug_third_party = False

    setup_logging(
        level=log_level,
        log_file=args.log_file,
        debug_third_party=debug_third_party,
    )

    logger.info("Starting Stack Exchange dump ingest")

    try:
        jobs = asyncio.run(
            run_ingest(
                config_path=args.config,
                overrides=settings_overrides(args),
            )
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)
    except ManifestError as e:
        logger.error(f"Bad manifest: {e}")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise

    if any(isinstance(job.state, Error) for job in jobs):
        logger.warning("Ingest finished with failed jobs")
        sys.exit(1)
    logger.success("Ingest complete!")


if __name__ == "__main__":
    main()
