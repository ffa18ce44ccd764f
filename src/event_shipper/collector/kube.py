"""Kubernetes client bootstrap and event conversion."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from kubernetes import client, config

from event_shipper.collector.models import EventRecord


def load_kube_config(kubeconfig_path: str | None = None, context: str | None = None) -> client.Configuration:
    """Load in-cluster or kubeconfig-based configuration."""
    try:
        config.load_incluster_config()
        return client.Configuration.get_default_copy()
    except config.ConfigException:
        pass
    kwargs: dict[str, Any] = {}
    if kubeconfig_path:
        kwargs["config_file"] = str(kubeconfig_path)
    if context:
        kwargs["context"] = context
    config.load_kube_config(**kwargs)
    return client.Configuration.get_default_copy()


def core_api(kubeconfig_path: str | None = None, context: str | None = None) -> client.CoreV1Api:
    """Return a CoreV1Api bound to the loaded configuration."""
    cfg = load_kube_config(kubeconfig_path, context)
    return client.CoreV1Api(client.ApiClient(cfg))


def _utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_event_record(ev: Any) -> EventRecord:
    """Build EventRecord from CoreV1Event. Raises ValueError for an event without an involved object."""
    meta = ev.metadata
    obj = ev.involved_object
    if obj is None:
        raise ValueError(f"event {getattr(meta, 'name', None)!r} has no involved object")
    return EventRecord(
        namespace=getattr(meta, "namespace", None) or "",
        name=getattr(meta, "name", None) or "",
        involved_object_kind=getattr(obj, "kind", None) or "",
        involved_object_name=getattr(obj, "name", None) or "",
        reason=ev.reason or "",
        message=ev.message or "",
        event_time=_utc(ev.event_time),
        last_timestamp=_utc(ev.last_timestamp),
    )
