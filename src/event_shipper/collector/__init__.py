"""Collector layer: watch Kubernetes events and coalesce them per object."""

from event_shipper.collector.kube import build_event_record, core_api, load_kube_config
from event_shipper.collector.models import CoalescingKey, EventRecord
from event_shipper.collector.store import EventStore
from event_shipper.collector.watcher import EventWatcher

__all__ = [
    "CoalescingKey",
    "EventRecord",
    "EventStore",
    "EventWatcher",
    "build_event_record",
    "core_api",
    "load_kube_config",
]
