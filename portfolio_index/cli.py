"""Command-line entry point: rebuild ``performance.json`` from ``holdings.json``."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from portfolio_index.config import get_settings
from portfolio_index.core.errors import ConfigError, WriteError
from portfolio_index.core.logging import setup_logging
from portfolio_index.core.telemetry import setup_telemetry, shutdown_telemetry
from portfolio_index.services.pipeline import run_update

logger = logging.getLogger("portfolio_index")

EXIT_CONFIG_ERROR = 1
EXIT_WRITE_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build the weekly portfolio performance index")
    parser.add_argument("--holdings", type=Path, help="Input portfolio definition (holdings.json)")
    parser.add_argument("--output", type=Path, help="Output document (performance.json)")
    parser.add_argument("--cache-dir", type=Path, help="Directory for per-ticker cache blobs")
    parser.add_argument("--mode", choices=["history", "quote"], help="Rebuild from weekly history or merge a point quote")
    parser.add_argument("--weeks", type=int, help="Number of weekly points to keep")
    parser.add_argument("--delay", type=float, help="Seconds to wait between API calls")
    parser.add_argument("--no-cache", action="store_true", help="Ignore fresh cache entries")
    parser.add_argument("--log-level", help="Logging level (default INFO)")
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "holdings_path": args.holdings,
        "performance_path": args.output,
        "cache_dir": args.cache_dir,
        "index_mode": args.mode,
        "index_weeks": args.weeks,
        "api_call_delay_seconds": args.delay,
        "log_level": args.log_level,
    }
    if args.no_cache:
        overrides["cache_enabled"] = False
    return {k: v for k, v in overrides.items() if v is not None}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or "INFO")
    try:
        settings = get_settings(**_overrides(args))
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR
    setup_logging(settings.log_level)
    logger.debug("Settings: %s", settings.dict_for_logging())
    telemetry = setup_telemetry(settings)
    try:
        asyncio.run(run_update(settings))
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR
    except WriteError as exc:
        logger.error("%s", exc)
        return EXIT_WRITE_ERROR
    finally:
        if telemetry:
            shutdown_telemetry()
    return 0


__all__ = ["build_parser", "main"]
