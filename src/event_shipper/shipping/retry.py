"""Bounded exponential-backoff retry for batch pushes."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from event_shipper.collector.models import EventRecord
from event_shipper.loki.errors import LokiError

logger = logging.getLogger(__name__)


class BatchPusher(Protocol):
    def push(self, events: Sequence[EventRecord]) -> None: ...


@dataclass(frozen=True)
class RetryPolicy:
    """Delay after failed attempt i is base_delay * 2**i, optionally capped.

    There is no jitter. Without max_delay the delays grow unbounded, which
    matches the historical behaviour (1, 2, 4, 8, 16 s for the defaults).
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float | None = None

    def delay(self, attempt: int) -> float:
        value = self.base_delay * (2**attempt)
        if self.max_delay is not None:
            return min(value, self.max_delay)
        return value

    def delays(self) -> list[float]:
        return [self.delay(i) for i in range(self.max_attempts)]


def push_with_retry(
    pusher: BatchPusher,
    events: Sequence[EventRecord],
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> bool:
    """
    Push a batch, retrying on LokiError. Returns True once pushed.

    A batch that still fails after the last attempt is dropped. If sleep
    returns a truthy value (e.g. threading.Event.wait once the event is set)
    the remaining attempts are abandoned and the batch is dropped too.
    """
    opts = policy or RetryPolicy()
    for attempt in range(opts.max_attempts):
        try:
            pusher.push(events)
        except LokiError as e:
            delay = opts.delay(attempt)
            logger.warning(
                "Failed to push events to Loki (attempt %d/%d): %s. Retrying in %.1fs...",
                attempt + 1,
                opts.max_attempts,
                e,
                delay,
            )
            if sleep(delay):
                logger.error("Shutdown during retry; %d events will be lost.", len(events))
                return False
            continue
        logger.info("Successfully pushed %d events to Loki", len(events))
        return True

    logger.error(
        "Failed to push events to Loki after %d attempts. %d events will be lost.",
        opts.max_attempts,
        len(events),
    )
    return False
