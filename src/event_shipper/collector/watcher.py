"""Long-running watch on cluster events feeding the coalescing store."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from kubernetes import client, watch

from event_shipper.collector.kube import build_event_record
from event_shipper.collector.store import EventStore

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 5.0


class EventWatcher:
    """Streams events into an EventStore, re-subscribing whenever the stream ends.

    The loop never gives up on its own; it only ends once stop() is called.
    """

    def __init__(
        self,
        core: client.CoreV1Api,
        store: EventStore,
        *,
        namespace: str | None = None,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        timeout_seconds: int | None = None,
        watch_factory: Callable[[], Any] = watch.Watch,
    ) -> None:
        self._core = core
        self.store = store
        self.namespace = namespace
        self.reconnect_delay = reconnect_delay
        self.timeout_seconds = timeout_seconds
        self._watch_factory = watch_factory
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._active: Any = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> threading.Thread:
        """Run the watch loop on a daemon thread."""
        thread = threading.Thread(target=self.run, name="event-watcher", daemon=True)
        thread.start()
        return thread

    def stop(self) -> None:
        """Ask the loop to exit and interrupt the active stream, if any."""
        self._stop.set()
        with self._lock:
            active = self._active
        if active is not None:
            active.stop()

    def run(self) -> None:
        """Subscribe, stream and reconnect until stopped."""
        while not self._stop.is_set():
            logger.info("Setting up event watcher...")
            try:
                self._stream_once()
            except Exception as e:
                if not self._stop.is_set():
                    logger.warning("Event watch failed: %s", e)
            else:
                if not self._stop.is_set():
                    logger.info("Event watcher closed")
            if self._stop.is_set():
                break
            logger.info("Re-subscribing in %.1f seconds...", self.reconnect_delay)
            self._stop.wait(self.reconnect_delay)
        logger.info("Event watcher stopped")

    def _list_call(self) -> tuple[Callable[..., Any], dict[str, Any]]:
        kwargs: dict[str, Any] = {}
        if self.timeout_seconds is not None:
            kwargs["timeout_seconds"] = self.timeout_seconds
        if self.namespace:
            kwargs["namespace"] = self.namespace
            return self._core.list_namespaced_event, kwargs
        return self._core.list_event_for_all_namespaces, kwargs

    def _stream_once(self) -> None:
        w = self._watch_factory()
        with self._lock:
            self._active = w
        try:
            func, kwargs = self._list_call()
            logger.info("Event watcher started")
            for item in w.stream(func, **kwargs):
                if self._stop.is_set():
                    break
                self.handle(item)
        finally:
            with self._lock:
                self._active = None
            w.stop()

    def handle(self, item: dict[str, Any]) -> None:
        """Validate one watch item and upsert it; anything unexpected is skipped."""
        kind = item.get("type")
        obj = item.get("object")
        if kind == "ERROR":
            logger.warning("Error watching events: %s", obj)
            return
        if not isinstance(obj, client.CoreV1Event):
            logger.warning("Unexpected event type: %s", type(obj).__name__)
            return
        try:
            record = build_event_record(obj)
        except (ValueError, AttributeError) as e:
            logger.warning("Skipping malformed event: %s", e)
            return
        logger.debug("Received event: %s (%s)", record.key, record.name)
        self.store.upsert(record)
