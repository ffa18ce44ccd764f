"""Loki integration: push payloads, HTTP client and errors."""

from event_shipper.loki.client import LokiClient
from event_shipper.loki.errors import LokiError, LokiPushError, LokiQueryError, LokiResponseError
from event_shipper.loki.models import PushRequest, PushStream, QueryResponse, StreamResult

__all__ = [
    "LokiClient",
    "LokiError",
    "LokiPushError",
    "LokiQueryError",
    "LokiResponseError",
    "PushRequest",
    "PushStream",
    "QueryResponse",
    "StreamResult",
]
