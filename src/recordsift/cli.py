"""CLI entry point for RecordSift.

Two commands:
  - ``serve``: run the HTTP API under uvicorn
  - ``search``: run one search against the configured sources and print JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recordsift.config.settings import Settings


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="recordsift",
        description="RecordSift — Filtered search across paged record collections",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"RecordSift {_get_version()}",
    )
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    serve.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development; the reloaded app reads --config, not --log-level",
    )

    search = commands.add_parser("search", help="Run a single search and print the JSON response")
    search.add_argument("types", nargs="+", help="Collection types to search, in order")
    search.add_argument(
        "--filter",
        "-f",
        dest="filters",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Filter on a field (repeatable)",
    )
    search.add_argument(
        "--operator",
        "-o",
        dest="operators",
        action="append",
        default=[],
        metavar="FIELD=OPERATOR",
        help="Operator for a filter field (repeatable)",
    )
    search.add_argument("--output", type=str, default=None, help="ids-only, summary, full, or comma-separated fields")
    search.add_argument("--limit", type=int, default=None)
    search.add_argument("--offset", type=int, default=None)
    search.add_argument("--pattern-mode", choices=["exact", "wildcard", "regex"], default="wildcard")
    search.add_argument("--case-sensitive", action="store_true")

    args = parser.parse_args(argv)
    settings = _load_settings(args)

    from recordsift.observability.logging import setup_logging

    setup_logging(settings.observability)

    if args.command == "search":
        sys.exit(_run_search(settings, args))
    _serve(settings, args)


def _load_settings(args: argparse.Namespace) -> Settings:
    from recordsift.config.settings import Settings

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    if args.log_level:
        settings.observability.log_level = args.log_level
    return settings


def _serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from recordsift.api.app import CONFIG_ENV_VAR, create_app

    reload = getattr(args, "reload", False)
    if getattr(args, "host", None):
        settings.server.host = args.host
    if getattr(args, "port", None):
        settings.server.port = args.port
    if getattr(args, "workers", None):
        settings.server.workers = args.workers

    if reload or settings.server.workers > 1:
        # Reload and multi-worker modes need an import string; workers load settings themselves.
        if args.config:
            os.environ[CONFIG_ENV_VAR] = str(Path(args.config).resolve())
        uvicorn.run(
            "recordsift.api.app:create_app",
            factory=True,
            host=settings.server.host,
            port=settings.server.port,
            workers=1 if reload else settings.server.workers,
            reload=reload,
            log_level=settings.observability.log_level.lower(),
        )
        return

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.observability.log_level.lower(),
    )


def _run_search(settings: Settings, args: argparse.Namespace) -> int:
    from recordsift.core.exceptions import RecordSiftError
    from recordsift.models.query import SearchRequest

    try:
        request = SearchRequest(
            types=args.types,
            filters=_pairs(args.filters, "--filter"),
            operators=_pairs(args.operators, "--operator"),
            output=_output(args.output),
            limit=args.limit,
            offset=args.offset,
            pattern_mode=args.pattern_mode,
            case_sensitive=args.case_sensitive,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        response = asyncio.run(_search(settings, request))
    except RecordSiftError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    print(response.model_dump_json(indent=2))
    return 0


async def _search(settings: Settings, request):
    from recordsift.api.app import build_source_registry
    from recordsift.core.engine import SearchEngine

    engine = SearchEngine(settings, sources=build_source_registry(settings))
    await engine.initialize()
    try:
        return await engine.search(request)
    finally:
        await engine.shutdown()


def _pairs(items: list[str], flag: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in items:
        field, sep, value = item.partition("=")
        if not sep or not field:
            raise ValueError(f"{flag} expects FIELD=VALUE, got {item!r}")
        pairs[field] = value
    return pairs


def _output(raw: str | None) -> str | list[str] | None:
    if raw is None or raw in ("ids-only", "summary", "full") or raw.startswith("["):
        return raw
    return [f.strip() for f in raw.split(",") if f.strip()]


def _get_version() -> str:
    """Get the package version."""
    from recordsift import __version__

    return __version__


if __name__ == "__main__":
    main()
