"""event-shipper: ship Kubernetes events to Loki and query them back."""

__version__ = "0.1.0"
