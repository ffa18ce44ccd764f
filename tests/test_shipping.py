"""Tests for push retries and the flush loop."""

from __future__ import annotations

import logging
import threading
import typing as typ

import pytest

from helpers import make_record

from event_shipper.collector import EventRecord, EventStore
from event_shipper.config import Settings
from event_shipper.loki import LokiPushError
from event_shipper.shipping import FlushLoop, RetryPolicy, push_with_retry
from event_shipper.shipping import loop as shipping_loop


class FakePusher:
    """Fails the first `failures` pushes, then accepts."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.batches: list[list[EventRecord]] = []

    def push(self, events: typ.Sequence[EventRecord]) -> None:
        self.batches.append(list(events))
        if len(self.batches) <= self.failures:
            raise LokiPushError.unexpected_status(500, "down")


class RecordingSleep:
    def __init__(self, interrupt_after: int | None = None) -> None:
        self.delays: list[float] = []
        self.interrupt_after = interrupt_after

    def __call__(self, delay: float) -> bool:
        self.delays.append(delay)
        return self.interrupt_after is not None and len(self.delays) >= self.interrupt_after


def test_default_policy_delays_double_from_one_second() -> None:
    assert RetryPolicy().delays() == [1.0, 2.0, 4.0, 8.0, 16.0]


def test_policy_cap_limits_delays() -> None:
    policy = RetryPolicy(max_attempts=6, base_delay=1.0, max_delay=5.0)
    assert policy.delays() == [1.0, 2.0, 4.0, 5.0, 5.0, 5.0]


def test_success_on_first_attempt_does_not_sleep() -> None:
    pusher = FakePusher()
    sleep = RecordingSleep()

    assert push_with_retry(pusher, [make_record()], sleep=sleep) is True
    assert len(pusher.batches) == 1
    assert sleep.delays == []


def test_retries_until_success() -> None:
    pusher = FakePusher(failures=2)
    sleep = RecordingSleep()

    assert push_with_retry(pusher, [make_record()], sleep=sleep) is True
    assert len(pusher.batches) == 3
    assert sleep.delays == [1.0, 2.0]


def test_gives_up_after_max_attempts(caplog: pytest.LogCaptureFixture) -> None:
    pusher = FakePusher(failures=100)
    sleep = RecordingSleep()

    with caplog.at_level(logging.WARNING):
        ok = push_with_retry(pusher, [make_record()], RetryPolicy(max_attempts=5, base_delay=1.0), sleep=sleep)

    assert ok is False
    assert len(pusher.batches) == 5
    assert sleep.delays == [1.0, 2.0, 4.0, 8.0, 16.0]
    assert "after 5 attempts" in caplog.text


def test_interrupted_sleep_abandons_batch() -> None:
    pusher = FakePusher(failures=100)
    sleep = RecordingSleep(interrupt_after=2)

    assert push_with_retry(pusher, [make_record()], sleep=sleep) is False
    assert len(pusher.batches) == 2


def test_flush_once_on_empty_store_does_not_push() -> None:
    pusher = FakePusher()
    loop = FlushLoop(EventStore(), pusher)

    assert loop.flush_once() is None
    assert pusher.batches == []


def test_flush_once_pushes_coalesced_batch() -> None:
    store = EventStore()
    store.upsert(make_record("a", reason="Scheduled"))
    store.upsert(make_record("a", reason="Started"))
    store.upsert(make_record("b"))
    pusher = FakePusher()

    assert FlushLoop(store, pusher).flush_once() is True
    assert sorted((r.involved_object_name, r.reason) for r in pusher.batches[0]) == [
        ("a", "Started"),
        ("b", "Scheduled"),
    ]
    assert len(store) == 0


def test_failed_batch_is_not_requeued() -> None:
    store = EventStore()
    store.upsert(make_record("a"))
    pusher = FakePusher(failures=100)
    loop = FlushLoop(store, pusher, policy=RetryPolicy(max_attempts=2, base_delay=0.0))

    assert loop.flush_once() is False
    assert len(store) == 0
    assert loop.flush_once() is None


def test_run_flushes_until_stopped() -> None:
    store = EventStore()
    store.upsert(make_record("a"))
    pushed = threading.Event()

    class StoppingPusher(FakePusher):
        def push(self, events: typ.Sequence[EventRecord]) -> None:
            super().push(events)
            pushed.set()

    pusher = StoppingPusher()
    loop = FlushLoop(store, pusher, interval=0.01)
    thread = threading.Thread(target=loop.run)
    thread.start()
    assert pushed.wait(5)
    loop.stop()
    thread.join(5)

    assert not thread.is_alive()
    assert len(pusher.batches) == 1


def test_run_collector_joins_watcher_on_shutdown(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    class FakeThread:
        def join(self, timeout: float | None = None) -> None:
            calls.append(f"join {timeout}")

        def is_alive(self) -> bool:
            return False

    class FakeWatcher:
        def __init__(self, *args: typ.Any, **kwargs: typ.Any) -> None:
            pass

        def start(self) -> FakeThread:
            calls.append("start")
            return FakeThread()

        def stop(self) -> None:
            calls.append("stop")

    def interrupted(self: FlushLoop) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(shipping_loop, "core_api", lambda *args: object())
    monkeypatch.setattr(shipping_loop, "EventWatcher", FakeWatcher)
    monkeypatch.setattr(FlushLoop, "run", interrupted)

    shipping_loop.run_collector(Settings(loki_url="http://loki.test"))

    assert calls == ["start", "stop", f"join {shipping_loop.WATCHER_JOIN_TIMEOUT}"]
