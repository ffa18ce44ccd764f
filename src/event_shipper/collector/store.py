"""In-memory store that keeps only the latest event per involved object."""

from __future__ import annotations

import logging
import threading

from event_shipper.collector.models import CoalescingKey, EventRecord

logger = logging.getLogger(__name__)


class EventStore:
    """Coalesces events by (namespace, kind, name) until the next flush.

    All access goes through a single lock: the watch thread upserts while the
    flush loop drains, and a drain hands its records over exactly once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: dict[CoalescingKey, EventRecord] = {}

    def upsert(self, record: EventRecord) -> None:
        """Store record, replacing any earlier event for the same object."""
        key = record.key
        with self._lock:
            self._events[key] = record
        logger.debug("Event added/updated: %s", key)

    def drain_all(self) -> list[EventRecord]:
        """Return every held record and leave the store empty."""
        with self._lock:
            events = list(self._events.values())
            self._events = {}
        logger.debug("Retrieved and cleared %d events from store", len(events))
        return events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
