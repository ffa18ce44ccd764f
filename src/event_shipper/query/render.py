"""Render Loki query results, with a dedicated layout for shipped events."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from event_shipper.loki.models import QueryResponse, StreamResult
from event_shipper.loki.payload import MESSAGE_DELIMITER

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NANOS_RE = re.compile(r"-?[0-9]+")

EVENT_LABEL_FIELDS = (
    ("Namespace", "namespace"),
    ("Kind", "kind"),
    ("Name", "name"),
    ("Reason", "reason"),
)


class TimestampParseError(ValueError):
    """Raised when a Loki timestamp is not an integer nanosecond count."""


def parse_unix_nano(ts: Any) -> datetime:
    """Parse a unix-nanoseconds string into a UTC datetime (microsecond precision).

    Only an optional '-' followed by ASCII digits is accepted; no whitespace,
    '+' sign or '_' separators.
    """
    if not isinstance(ts, str) or not _NANOS_RE.fullmatch(ts):
        raise TimestampParseError(f"error parsing Unix nano timestamp {ts!r}: not an integer")
    try:
        return _EPOCH + timedelta(microseconds=int(ts) // 1000)
    except OverflowError as e:
        raise TimestampParseError(f"error parsing Unix nano timestamp {ts!r}: {e}") from e


def format_rfc3339(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def split_event_line(line: str) -> str:
    """Recover the original event message from a shipped line; other lines pass through."""
    _, sep, message = line.partition(MESSAGE_DELIMITER)
    return message if sep else line


def event_fields(ts: datetime, line: str, labels: dict[str, str]) -> list[tuple[str, str]]:
    """Ordered (title, value) pairs describing one event line."""
    fields = [("Time", format_rfc3339(ts))]
    fields.extend((title, labels.get(key, "")) for title, key in EVENT_LABEL_FIELDS)
    fields.append(("Message", split_event_line(line)))
    return fields


def _print_value(console: Console, value: Any, labels: dict[str, str], is_event: bool) -> None:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        logger.warning("Skipping malformed value: %r", value)
        return
    try:
        ts = parse_unix_nano(value[0])
    except TimestampParseError as e:
        logger.warning("Error parsing timestamp: %s", e)
        return
    line = str(value[1])
    if is_event:
        for title, text in event_fields(ts, line, labels):
            console.print(f"[bold]{title}:[/bold] {escape(text)}")
        console.print()
    else:
        console.print(escape(f"[{format_rfc3339(ts)}] {line}"))


def print_results(response: QueryResponse, console: Console | None = None, is_event: bool = False) -> None:
    """Print every stream of a query response; bad entries are logged and skipped."""
    c = console or Console()
    for raw in response.data.result:
        try:
            result = StreamResult.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed stream: %s", e)
            continue
        c.print(escape(f"Stream: {result.stream}"))
        for value in result.values:
            _print_value(c, value, result.stream, is_event)
        c.print()
