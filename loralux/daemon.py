"""loraluxd entrypoint. Scrapes the LoRaWAN server for lumen readings.

Usage:
    # Configuration from LORALUX_* environment variables
    python -m loralux

    # Configuration from a JSON or YAML file
    python -m loralux --env-file config.yaml --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from loralux.config import ConfigError, Settings, load_settings
from loralux.logging_config import setup_logging
from loralux.scheduler import ScrapeScheduler, relay_shutdown_signals
from loralux.scrape import Scraper

SERVICE_NAME = "loraluxd"

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog=SERVICE_NAME, description="Scrape a LoRaWAN server for lumen sensor readings")
    ap.add_argument(
        "--env-file",
        default="",
        help=(
            "path of a JSON or YAML file that contains configuration variables, "
            "if not supplied the configuration will be collected from the environment"
        ),
    )
    ap.add_argument("--verbose", action="store_true", help="display verbose information")
    return ap.parse_args(argv)


async def serve(settings: Settings) -> None:
    """Scrape until SIGINT/SIGTERM, then close the HTTP client."""
    shutdown = asyncio.Event()
    relay_shutdown_signals(shutdown)

    async with Scraper(settings.scrape_target()) as scraper:
        scheduler = ScrapeScheduler(
            scraper,
            interval=settings.scrape_interval.total_seconds(),
            shutdown=shutdown,
        )
        await scheduler.run()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        settings = load_settings(args.env_file or None)
    except ConfigError as e:
        source = "file" if args.env_file else "environment"
        print(f"collect config from {source}: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level, service=SERVICE_NAME)

    if args.verbose:
        logger.info(
            "values of CLI flags",
            extra={"env_file": args.env_file, "verbose": args.verbose},
        )
        logger.info(
            "values of configuration",
            extra={
                "log_level": settings.log_level,
                "server_address": settings.server_address,
                "scrape_endpoint": settings.scrape_endpoint,
                "scrape_interval": settings.scrape_interval.total_seconds(),
                "read_timeout": settings.read_timeout.total_seconds(),
            },
        )

    asyncio.run(serve(settings))
    logger.info("loraluxd stopped")
    return 0
