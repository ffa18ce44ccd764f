"""Wire models for the Loki push and query_range APIs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PushStream(BaseModel):
    """One labelled stream in a push request."""

    stream: dict[str, str] = Field(..., description="Label set identifying the stream")
    values: list[tuple[str, str]] = Field(
        default_factory=list,
        description="(unix nanoseconds as string, log line) pairs",
    )


class PushRequest(BaseModel):
    """Body of POST /loki/api/v1/push."""

    streams: list[PushStream] = Field(default_factory=list)


class StreamResult(BaseModel):
    """A single stream returned by a range query."""

    stream: dict[str, str] = Field(default_factory=dict)
    values: list[Any] = Field(
        default_factory=list,
        description="Raw [timestamp, line] pairs; each one is checked separately when rendering",
    )


class QueryData(BaseModel):
    """The data section of a query_range response."""

    model_config = ConfigDict(populate_by_name=True)

    result_type: str = Field(default="", alias="resultType")
    # Entries are validated lazily so one malformed stream does not hide the rest.
    result: list[Any] = Field(default_factory=list)


class QueryResponse(BaseModel):
    """Response of GET /loki/api/v1/query_range."""

    status: str
    data: QueryData = Field(default_factory=QueryData)
