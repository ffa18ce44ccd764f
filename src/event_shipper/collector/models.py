"""Event records retained by the collector."""

from __future__ import annotations

from datetime import datetime
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict


class CoalescingKey(NamedTuple):
    """Identity of the object an event is about."""

    namespace: str
    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.kind}/{self.name}"


class EventRecord(BaseModel):
    """A Kubernetes event as received from the watch stream."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    involved_object_kind: str
    involved_object_name: str
    name: str  # the event's own name
    reason: str = ""
    message: str = ""
    event_time: datetime | None = None
    last_timestamp: datetime | None = None

    @property
    def key(self) -> CoalescingKey:
        return CoalescingKey(self.namespace, self.involved_object_kind, self.involved_object_name)
