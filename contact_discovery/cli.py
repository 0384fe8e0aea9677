"""Command line interface for running contact discovery."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Dict

from .config import load_configuration
from .errors import ContactDiscoveryError
from .factory import build_orchestrator, build_store
from .ingestion import check_compliance, export_results, load_contacts
from .orchestrator import DiscoveryOrchestrator
from .stats import UsageStats
from .watchlist import Watchlist

LOGGER = logging.getLogger(__name__)


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to the discovery configuration file (YAML or JSON)",
    )
    common.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )

    parser = argparse.ArgumentParser(
        prog=prog,
        description="Resolve people into ranked, validated contact details from multiple providers",
    )
    commands = parser.add_subparsers(dest="command")

    discover = commands.add_parser("discover", parents=[common], help="Look up a single person")
    discover.add_argument("query", help='Free-text query, e.g. "Jane Doe (CFO) at TechCorp"')
    discover.add_argument("--skip-cache", action="store_true", help="Ignore any cached result")

    bulk = commands.add_parser("bulk", parents=[common], help="Enrich a spreadsheet of contacts")
    bulk.add_argument("input", help="Path to the input spreadsheet (CSV, TSV or XLSX)")
    bulk.add_argument("output", help="Path where the CRM export should be written")
    bulk.add_argument("--skip-cache", action="store_true", help="Ignore any cached results")
    bulk.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Contacts processed per window (defaults to the configured batch size)",
    )

    serve = commands.add_parser("serve", parents=[common], help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _load_config(path: str | None) -> Dict[str, Any]:
    if not path:
        LOGGER.warning("No configuration file given; running without providers")
        return {}
    return load_configuration(path)


async def _closing(orchestrator: DiscoveryOrchestrator, call: Awaitable[Any]) -> Any:
    try:
        return await call
    finally:
        await orchestrator.close()


def _run_discover(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    orchestrator = build_orchestrator(config)
    result = asyncio.run(_closing(orchestrator, orchestrator.discover(args.query, skip_cache=args.skip_cache)))
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


def _run_bulk(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    contacts = load_contacts(args.input)
    report = check_compliance(contacts)
    for issue in report.issues:
        LOGGER.warning("Row %s (%s) skipped: %s", issue.row, issue.contact or "unnamed", ", ".join(issue.issues))
    if not report.valid_contacts:
        LOGGER.warning("No contacts passed the compliance check - nothing to do")
        return 0

    orchestrator = build_orchestrator(config)
    batch = asyncio.run(
        _closing(
            orchestrator,
            orchestrator.discover_batch(
                [contact.to_query() for contact in report.valid_contacts],
                concurrency=args.concurrency,
                skip_cache=args.skip_cache,
            ),
        )
    )
    for error in batch.errors:
        LOGGER.warning("Lookup failed for %s: %s", error["input"], error["error"])

    export_results(batch.results, args.output)
    LOGGER.info("Enriched %s of %s contacts", batch.successful, len(contacts))
    LOGGER.info("CRM export written to %s", Path(args.output).resolve())
    return 0 if not batch.failed else 1


def _run_serve(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    import uvicorn

    from .api import create_app

    store = build_store(config)
    stats = UsageStats(store)
    orchestrator = build_orchestrator(config, stats=stats)
    app = create_app(orchestrator, watchlist=Watchlist(store), stats=stats)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


_COMMANDS = {"discover": _run_discover, "bulk": _run_bulk, "serve": _run_serve}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 2

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        config = _load_config(args.config)
        return _COMMANDS[args.command](args, config)
    except (ContactDiscoveryError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
