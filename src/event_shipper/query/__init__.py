"""Query tool: range queries against Loki and result rendering."""

from event_shipper.query.render import (
    TimestampParseError,
    event_fields,
    parse_unix_nano,
    print_results,
    split_event_line,
)
from event_shipper.query.runner import DEFAULT_QUERIES, QuerySpec, parse_duration, run_query

__all__ = [
    "DEFAULT_QUERIES",
    "QuerySpec",
    "TimestampParseError",
    "event_fields",
    "parse_duration",
    "parse_unix_nano",
    "print_results",
    "run_query",
    "split_event_line",
]
