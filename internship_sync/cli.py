"""Command-line entry point for the internship listing sync."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import (
    DEFAULT_PORTAL_URL,
    ConfigError,
    SyncConfig,
    load_credentials,
    parse_reference_date,
)
from .crawler import run_sync

logger = logging.getLogger("internship_sync.cli")

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Move past-due internship postings into the portal's inactive section "
            "and save their images."
        ),
    )
    parser.add_argument(
        "--portal-url",
        default=DEFAULT_PORTAL_URL,
        help="Portal page that lists the internships",
    )
    parser.add_argument(
        "--output",
        default="inactive_assets",
        type=Path,
        help="Directory where images of expired postings are written (emptied each run)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Optional .env file providing EMAIL and PASSWORD",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run Chromium without a visible window",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for each editor control before giving up",
    )
    parser.add_argument(
        "--today",
        type=str,
        default=None,
        help="Reference date (YYYY-MM-DD) used instead of today when classifying",
    )
    parser.add_argument(
        "--report-only",
        action="store_true",
        help="Print the expired postings without downloading or editing anything",
    )
    parser.add_argument(
        "--skip-assets",
        action="store_true",
        help="Do not download images of expired postings",
    )
    parser.add_argument(
        "--linger",
        type=float,
        default=10.0,
        help="Seconds to keep the browser open after a successful run",
    )
    parser.add_argument(
        "--failure-pause",
        type=float,
        default=30.0,
        help="Seconds to keep the browser open after a failed run",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SyncConfig:
    return SyncConfig(
        output_root=Path(args.output).resolve(),
        credentials=load_credentials(env_file=args.env_file),
        portal_url=args.portal_url,
        headless=args.headless,
        step_timeout=args.timeout,
        linger_seconds=args.linger,
        failure_pause_seconds=args.failure_pause,
        report_only=args.report_only,
        skip_assets=args.skip_assets,
        reference_date=parse_reference_date(args.today) if args.today else None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    try:
        config = build_config(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    result = asyncio.run(run_sync(config))
    logger.info(
        "%d posting(s) scraped, %d expired, %d image(s) saved, %d reconciled",
        len(result.records),
        len(result.expired),
        len(result.assets),
        result.reconciled,
    )
    return EXIT_OK if result.ok else EXIT_RUN_FAILED


if __name__ == "__main__":
    sys.exit(main())
