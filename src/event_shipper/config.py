"""Configuration and environment for the event shipper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Shipper settings loaded from environment and .env."""

    model_config = SettingsConfigDict(
        env_prefix="EVENT_SHIPPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Kubernetes
    kubeconfig: Path | None = Field(
        default=None,
        description="Path to kubeconfig; uses KUBECONFIG env or default location if unset",
    )
    context: str | None = Field(default=None, description="Kubernetes context to use")
    namespace: str | None = Field(
        default=None,
        description="Only watch events in this namespace; all namespaces if unset",
    )
    reconnect_delay: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds to wait before re-subscribing after the watch fails or closes",
    )
    watch_timeout_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Server-side timeout for a single watch request",
    )

    # Loki
    loki_url: str = Field(default="http://localhost:8080", description="Base URL of the Loki server")
    tenant_id: str | None = Field(default=None, description="Value for the X-Scope-OrgID header")
    job_label: str = Field(default="kubernetes-events", description="Value of the job label on pushed streams")
    request_timeout: float = Field(default=10.0, gt=0.0, description="Per-request HTTP timeout in seconds")

    # Shipping
    flush_interval: float = Field(default=5.0, gt=0.0, description="Seconds between flushes of the event store")
    max_push_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Max attempts to push a batch before it is dropped",
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay after the first failed push; doubles after every further failure",
    )
    retry_max_delay: float | None = Field(
        default=None,
        gt=0.0,
        description="Optional upper bound on a single retry delay",
    )


def get_settings(**overrides: Any) -> Settings:
    """Return validated settings instance; overrides take precedence over env and .env."""
    return Settings(**overrides)
