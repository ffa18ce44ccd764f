"""CLI entrypoints for the event collector and the query tool."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from event_shipper import __version__
from event_shipper.config import get_settings
from event_shipper.loki import LokiClient
from event_shipper.query import DEFAULT_QUERIES, QuerySpec, parse_duration, run_query
from event_shipper.shipping import run_collector


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--loki-url",
        default=None,
        help="Base URL of the Loki server (default: from env or http://localhost:8080)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )


def _parse_collector_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="event-shipper",
        description="Watch Kubernetes events, keep the latest per object, and push them to Loki.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--namespace",
        "-n",
        default=None,
        help="Only watch this namespace (default: all namespaces)",
    )
    parser.add_argument(
        "--kubeconfig",
        type=Path,
        default=None,
        help="Path to kubeconfig (default: KUBECONFIG env or ~/.kube/config)",
    )
    parser.add_argument(
        "--context",
        default=None,
        help="Kubernetes context to use",
    )
    parser.add_argument(
        "--flush-interval",
        type=float,
        default=None,
        help="Seconds between pushes (default: from env or 5)",
    )
    _add_common(parser)
    return parser.parse_args(argv)


def _parse_query_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="event-query",
        description="Run range queries against Loki and print the matching lines.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="LogQL stream selector; without it the default log and event queries run",
    )
    parser.add_argument(
        "--events",
        action="store_true",
        help="Render QUERY results as shipped Kubernetes events (requires QUERY)",
    )
    parser.add_argument(
        "--since",
        type=parse_duration,
        default="1h",
        help="How far back to query, e.g. 30s, 15m, 1h, 2d",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of lines per query",
    )
    _add_common(parser)
    args = parser.parse_args(argv)
    if args.events and not args.query:
        parser.error("--events requires QUERY; the default event query is always rendered as events")
    return args


def collector_main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint for the event-shipper collector."""
    args = _parse_collector_args(argv)
    _setup_logging(args.verbose)
    logger = logging.getLogger("event_shipper")
    logger.info("Starting Kubernetes Event Collector")

    overrides = {
        "kubeconfig": args.kubeconfig,
        "context": args.context,
        "namespace": args.namespace,
        "loki_url": args.loki_url,
        "flush_interval": args.flush_interval,
    }
    try:
        settings = get_settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    try:
        run_collector(settings)
    except Exception as e:
        logging.exception("Collector failed")
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


def query_main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint for the event-query tool."""
    args = _parse_query_args(argv)
    _setup_logging(args.verbose)

    settings = get_settings()
    loki_url = args.loki_url or settings.loki_url
    if args.query:
        queries: tuple[QuerySpec, ...] = (
            QuerySpec("Kubernetes Events" if args.events else "Logs", args.query, is_event=args.events),
        )
    else:
        queries = DEFAULT_QUERIES

    end = datetime.now(timezone.utc)
    start = end - args.since
    with LokiClient(loki_url, tenant_id=settings.tenant_id, timeout=settings.request_timeout) as client:
        failures = run_query(client, queries, start, end, Console(), limit=args.limit)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(collector_main())
