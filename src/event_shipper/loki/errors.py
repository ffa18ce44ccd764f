"""Loki client errors."""

from __future__ import annotations


class LokiError(RuntimeError):
    """Base class for errors talking to Loki."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)


class LokiPushError(LokiError):
    """Raised when Loki does not accept a pushed batch."""

    @classmethod
    def unexpected_status(cls, status_code: int, body: str) -> LokiPushError:
        """Return an error for any push response other than 204."""
        return cls(f"unexpected status code from Loki: {status_code}, Body: {body}", status_code=status_code)

    @classmethod
    def transport(cls, exc: Exception) -> LokiPushError:
        """Return an error for a request that never got a response."""
        return cls(f"failed to send events to Loki: {exc}")


class LokiQueryError(LokiError):
    """Raised when a range query fails."""

    @classmethod
    def http_error(cls, status_code: int, body: str) -> LokiQueryError:
        """Return an error for non-2xx query responses."""
        return cls(f"Loki query HTTP {status_code}: {body}", status_code=status_code)

    @classmethod
    def transport(cls, exc: Exception) -> LokiQueryError:
        """Return an error for a request that never got a response."""
        return cls(f"error querying Loki: {exc}")


class LokiResponseError(LokiError):
    """Raised when a query response cannot be decoded."""

    @classmethod
    def invalid(cls, detail: object) -> LokiResponseError:
        """Return an error for a body that is not a query response."""
        return cls(f"error unmarshalling response: {detail}")
