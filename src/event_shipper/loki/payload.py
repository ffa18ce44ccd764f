"""Map collected events to Loki push streams."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable

from event_shipper.collector.models import EventRecord
from event_shipper.loki.models import PushRequest, PushStream

DEFAULT_JOB = "kubernetes-events"

EVENT_LINE_TEMPLATE = "Event: {reason}, Message: {message}"
# Marker the query side splits on to recover the original message.
MESSAGE_DELIMITER = "Message: "

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MICROSECOND = timedelta(microseconds=1)


def unix_nanos(ts: datetime) -> int:
    """Nanoseconds since the epoch, without float rounding."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ((ts - _EPOCH) // _ONE_MICROSECOND) * 1000


def event_timestamp(record: EventRecord, now: datetime | None = None) -> str:
    """Prefer event_time, then last_timestamp, then the current time."""
    ts = record.event_time or record.last_timestamp or now or datetime.now(timezone.utc)
    return str(unix_nanos(ts))


def format_event_line(record: EventRecord) -> str:
    return EVENT_LINE_TEMPLATE.format(reason=record.reason, message=record.message)


def event_labels(record: EventRecord, job: str = DEFAULT_JOB) -> dict[str, str]:
    return {
        "job": job,
        "namespace": record.namespace,
        "name": record.name,
        "kind": record.involved_object_kind,
        "reason": record.reason,
    }


def build_push_request(
    records: Iterable[EventRecord],
    job: str = DEFAULT_JOB,
    now: datetime | None = None,
) -> PushRequest:
    """Build one stream per record; the whole batch goes in a single request."""
    streams = [
        PushStream(
            stream=event_labels(record, job),
            values=[(event_timestamp(record, now), format_event_line(record))],
        )
        for record in records
    ]
    return PushRequest(streams=streams)
