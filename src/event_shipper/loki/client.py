"""HTTP client for the Loki push and range-query APIs."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

import httpx
from pydantic import ValidationError

from event_shipper.collector.models import EventRecord
from event_shipper.loki.errors import LokiPushError, LokiQueryError, LokiResponseError
from event_shipper.loki.models import QueryResponse
from event_shipper.loki.payload import DEFAULT_JOB, build_push_request, unix_nanos

logger = logging.getLogger(__name__)

PUSH_PATH = "/loki/api/v1/push"
QUERY_RANGE_PATH = "/loki/api/v1/query_range"

DEFAULT_TIMEOUT = 10.0


class LokiClient:
    """Pushes event batches to Loki and runs range queries against it."""

    def __init__(
        self,
        base_url: str,
        *,
        job: str = DEFAULT_JOB,
        tenant_id: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.job = job
        headers = {"X-Scope-OrgID": tenant_id} if tenant_id else {}
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout, headers=headers)
        if http_client is not None and tenant_id:
            self._client.headers.update(headers)

    @property
    def push_url(self) -> str:
        return f"{self.base_url}{PUSH_PATH}"

    @property
    def query_url(self) -> str:
        return f"{self.base_url}{QUERY_RANGE_PATH}"

    def close(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> LokiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def push(self, events: Sequence[EventRecord]) -> None:
        """Send events as one push request. Anything but 204 No Content is an error."""
        payload = build_push_request(events, job=self.job).model_dump(mode="json")
        logger.debug("Sending %d streams to Loki: %s", len(payload["streams"]), self.push_url)
        try:
            resp = self._client.post(self.push_url, json=payload)
        except httpx.HTTPError as e:
            raise LokiPushError.transport(e) from e
        if resp.status_code != httpx.codes.NO_CONTENT:
            raise LokiPushError.unexpected_status(resp.status_code, resp.text)

    def query_range(
        self,
        query: str,
        start: datetime,
        end: datetime,
        limit: int | None = None,
    ) -> QueryResponse:
        """Run a LogQL range query between start and end."""
        params: dict[str, str] = {
            "query": query,
            "start": str(unix_nanos(start)),
            "end": str(unix_nanos(end)),
        }
        if limit is not None:
            params["limit"] = str(limit)
        try:
            resp = self._client.get(self.query_url, params=params)
        except httpx.HTTPError as e:
            raise LokiQueryError.transport(e) from e
        if resp.is_error:
            raise LokiQueryError.http_error(resp.status_code, resp.text)
        try:
            return QueryResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise LokiResponseError.invalid(e) from e
