"""Shipping: periodic flush of the event store to Loki with retries."""

from event_shipper.shipping.loop import FlushLoop, run_collector
from event_shipper.shipping.retry import RetryPolicy, push_with_retry

__all__ = [
    "FlushLoop",
    "RetryPolicy",
    "push_with_retry",
    "run_collector",
]
