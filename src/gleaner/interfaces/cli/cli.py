from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from gleaner.domain.entities import ExtractionItem, ExtractionOptions
from gleaner.infrastructure.config import AppConfig, load_config
from gleaner.infrastructure.logging.setup import configure_logging
from gleaner.interfaces.composition import build_context
from gleaner.interfaces.main import build_app

log = structlog.get_logger(__name__)


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    # Config wiring flags (no business logic)
    parser.add_argument("--config", default=None, help="Path to YAML config file.")
    parser.add_argument("--dotenv", default=None, help="Path to .env file.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    parser.add_argument(
        "--cache-backend",
        default=None,
        choices=["memory", "diskcache", "redis"],
        help="Override cache backend.",
    )


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gleaner")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind host (overrides HOST env).")
    serve.add_argument("--port", default=None, type=int, help="Bind port (overrides PORT env).")
    _add_config_flags(serve)

    extract = sub.add_parser("extract", help="Extract detail records and print them as JSON.")
    extract.add_argument("urls", nargs="+", metavar="URL")
    extract.add_argument("--source", default=None, help="Source id hint (e.g. javbus).")
    extract.add_argument("--keyword", default="", help="Search keyword for listing pages.")
    extract.add_argument("--no-cache", action="store_true", help="Bypass the record cache.")
    extract.add_argument("--no-retry", action="store_true", help="Do not retry failures.")
    _add_config_flags(extract)

    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.command is None:
        # Bare invocation serves with defaults
        args = parser.parse_args(["serve"])
    return args


def _load(args: argparse.Namespace) -> AppConfig:
    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if args.cache_backend:
        cli_overrides["cache_backend"] = args.cache_backend

    return load_config(
        config_path=Path(args.config) if args.config else None,
        dotenv_path=Path(args.dotenv) if args.dotenv else None,
        cli_overrides=cli_overrides,
    )


async def _extract(config: AppConfig, args: argparse.Namespace) -> list[dict[str, Any]]:
    items = [
        ExtractionItem(
            id=str(index),
            url=url,
            source_hint=args.source,
            keyword=args.keyword,
        )
        for index, url in enumerate(args.urls, start=1)
    ]
    options = ExtractionOptions(
        enable_cache=False if args.no_cache else None,
        enable_retry=False if args.no_retry else None,
    )
    async with build_context(config) as engine:
        if len(items) == 1:
            records = [await engine.extract_single(items[0], options)]
        else:
            records = await engine.extract_batch(items, options)
    return [r.to_dict() for r in records]


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, then either serves the API or runs a
    one-shot extraction.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)
    log_config = configure_logging(config)

    if args.command == "extract":
        records = asyncio.run(_extract(config, args))
        json.dump(records, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        failed = sum(1 for r in records if r["extractionStatus"] in ("error", "timeout"))
        return 1 if failed else 0

    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "8787"))
    uvicorn.run(build_app(config), host=host, port=port, log_config=log_config)
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
