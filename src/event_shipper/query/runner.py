"""One-shot range queries against Loki."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from rich.console import Console
from rich.markup import escape

from event_shipper.loki import LokiClient, LokiError
from event_shipper.query.render import print_results

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=1)

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd])\s*$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass(frozen=True)
class QuerySpec:
    """A titled LogQL query; is_event selects the event layout."""

    title: str
    query: str
    is_event: bool = False


DEFAULT_QUERIES = (
    QuerySpec("Logs", '{namespace="monitoring"}'),
    QuerySpec("Kubernetes Events", '{job="kubernetes-events"}', is_event=True),
)


def parse_duration(text: str) -> timedelta:
    """Parse '30s', '15m', '1h' or '2d'."""
    match = _DURATION_RE.match(text)
    if not match:
        raise ValueError(f"invalid duration {text!r}; expected e.g. 30s, 15m, 1h, 2d")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])


def run_query(
    client: LokiClient,
    queries: Iterable[QuerySpec],
    start: datetime,
    end: datetime,
    console: Console | None = None,
    limit: int | None = None,
) -> int:
    """Run each query and print its results. Returns how many queries failed."""
    c = console or Console()
    failures = 0
    for i, item in enumerate(queries):
        if i:
            c.print()
        try:
            response = client.query_range(item.query, start, end, limit=limit)
        except LokiError as e:
            failures += 1
            logger.debug("Query %s failed", item.query, exc_info=True)
            c.print(escape(f"Error querying {item.title.lower()}: {e}"))
            continue
        c.print(f"[bold]{escape(item.title)}:[/bold]")
        print_results(response, c, is_event=item.is_event)
    return failures
