"""CLI entry point for stackdump.query.

Usage:
    python -m stackdump.query acme_Post               # First 10 posts
    python -m stackdump.query acme_User --limit 100   # First 100 users
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from stackdump.config.settings import load_config
from stackdump.db.codec import CodecError
from stackdump.db.engine import dispose_engines
from stackdump.db.records import RecordDecodeError
from stackdump.db.writer import StoreError
from stackdump.query.logger import logger
from stackdump.query.rows import QueryOrchestrator
from stackdump.utils.logging import setup_logging


async def run_query(
    table_name: str,
    limit: int | None,
    config_path: str = "config.json",
    database_url: str | None = None,
) -> None:
    settings = load_config(config_path)
    orchestrator = QueryOrchestrator(
        database_url or settings.resolved_database_url(),
        table_name,
        limit,
    )
    try:
        await orchestrator.run()
    finally:
        await dispose_engines()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Read rows of a loaded table back as records",
    )
    parser.add_argument("table", help="Table name, e.g. tor.stackexchange_Post")
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of rows (default: 10, 0 for all)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        help="Database URL (default: SQLite file in the data directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        asyncio.run(
            run_query(
                args.table,
                args.limit or None,
                config_path=args.config,
                database_url=args.database_url,
            )
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)
    except (StoreError, CodecError, RecordDecodeError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
