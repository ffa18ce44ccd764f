"""Builders shared by event-shipper tests."""

from __future__ import annotations

from datetime import datetime, timezone

from kubernetes import client
from rich.console import Console

from event_shipper.collector.models import EventRecord

EVENT_TIME = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
EVENT_TIME_NS = "1700000000000000000"


def make_record(
    name: str = "x",
    *,
    namespace: str = "default",
    kind: str = "Pod",
    event_name: str | None = None,
    reason: str = "Scheduled",
    message: str = "pod assigned",
    event_time: datetime | None = EVENT_TIME,
    last_timestamp: datetime | None = None,
) -> EventRecord:
    return EventRecord(
        namespace=namespace,
        involved_object_kind=kind,
        involved_object_name=name,
        name=event_name or f"{name}.17a8",
        reason=reason,
        message=message,
        event_time=event_time,
        last_timestamp=last_timestamp,
    )


def make_v1_event(
    name: str = "x",
    *,
    namespace: str = "default",
    kind: str = "Pod",
    reason: str = "Scheduled",
    message: str = "pod assigned",
    event_time: datetime | None = None,
    last_timestamp: datetime | None = None,
) -> client.CoreV1Event:
    return client.CoreV1Event(
        metadata=client.V1ObjectMeta(name=f"{name}.17a8", namespace=namespace),
        involved_object=client.V1ObjectReference(kind=kind, name=name, namespace=namespace),
        reason=reason,
        message=message,
        event_time=event_time,
        last_timestamp=last_timestamp,
    )


def console_text(console: Console) -> str:
    return console.file.getvalue()
