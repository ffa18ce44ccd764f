"""Collector process: watch thread plus a periodic flush on the calling thread."""

from __future__ import annotations

import logging
import threading

from event_shipper.collector import EventStore, EventWatcher, core_api
from event_shipper.config import Settings, get_settings
from event_shipper.loki import LokiClient
from event_shipper.shipping.retry import BatchPusher, RetryPolicy, push_with_retry

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_INTERVAL = 5.0
# A watch blocked on a socket read only notices stop() when the read returns.
WATCHER_JOIN_TIMEOUT = 5.0


class FlushLoop:
    """Drains the store every interval seconds and pushes what it finds."""

    def __init__(
        self,
        store: EventStore,
        pusher: BatchPusher,
        *,
        interval: float = DEFAULT_FLUSH_INTERVAL,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.store = store
        self.pusher = pusher
        self.interval = interval
        self.policy = policy or RetryPolicy()
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    def flush_once(self) -> bool | None:
        """Drain and push one batch. Returns None when there was nothing to push."""
        events = self.store.drain_all()
        if not events:
            logger.debug("No events to push")
            return None
        logger.info("Preparing to push %d events to Loki", len(events))
        return push_with_retry(self.pusher, events, self.policy, sleep=self._stop.wait)

    def run(self) -> None:
        while not self._stop.wait(self.interval):
            self.flush_once()
        logger.info("Flush loop stopped")


def retry_policy_from(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.max_push_attempts,
        base_delay=settings.retry_base_delay,
        max_delay=settings.retry_max_delay,
    )


def run_collector(settings: Settings | None = None) -> None:
    """
    Start the event watcher in the background and flush to Loki on this thread until interrupted.
    """
    opts = settings or get_settings()
    logger.info("Setting up Kubernetes client...")
    core = core_api(str(opts.kubeconfig) if opts.kubeconfig else None, opts.context)

    store = EventStore()
    watcher = EventWatcher(
        core,
        store,
        namespace=opts.namespace,
        reconnect_delay=opts.reconnect_delay,
        timeout_seconds=opts.watch_timeout_seconds,
    )
    logger.info("Setting up Loki client with URL: %s", opts.loki_url)
    with LokiClient(
        opts.loki_url,
        job=opts.job_label,
        tenant_id=opts.tenant_id,
        timeout=opts.request_timeout,
    ) as loki:
        flusher = FlushLoop(store, loki, interval=opts.flush_interval, policy=retry_policy_from(opts))
        watch_thread = watcher.start()
        logger.info("Pushing events every %.1f seconds", opts.flush_interval)
        try:
            flusher.run()
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            flusher.stop()
            watcher.stop()
            watch_thread.join(WATCHER_JOIN_TIMEOUT)
            if watch_thread.is_alive():
                logger.warning("Event watcher did not stop within %.1f seconds", WATCHER_JOIN_TIMEOUT)
