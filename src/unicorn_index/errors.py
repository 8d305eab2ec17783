"""
Exception hierarchy for the fetch, processing and insight layers.

Fetch errors carry enough context (HTTP status, URL, attempts, whether the
failure class is retryable) for callers to decide whether to continue with
partial data. Processing errors (``AggregationError``) are raised for single
malformed records and are meant to be caught, logged and skipped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from unicorn_index.services.http import ErrorKind


class UnicornIndexError(Exception):
    """Base class for all errors raised by this package."""


class FetchError(UnicornIndexError):
    """A request to an external source failed."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        url: str | None = None,
        attempts: int = 1,
        retryable: bool = False,
        kind: ErrorKind | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.url = url
        self.attempts = attempts
        self.retryable = retryable
        self.kind = kind


class ValidationError(FetchError, ValueError):
    """Bad input shape or format. Never retried."""


class NotFoundError(FetchError):
    """The requested resource does not exist. Never retried."""


class RateLimitError(FetchError):
    """The source is throttling us (HTTP 403/429)."""


class RequestTimeoutError(FetchError, TimeoutError):
    """The request was aborted after the configured timeout."""


class NetworkError(FetchError):
    """Transport-level failure (DNS, connection reset, refused)."""


class ServerError(NetworkError):
    """The source answered with a 5xx status."""


class AllSourcesFailedError(FetchError):
    """Every source of a multi-source fetch failed."""

    def __init__(self, message: str, outcome: Any) -> None:
        super().__init__(message)
        self.outcome = outcome


class AggregationError(UnicornIndexError, ValueError):
    """A single record could not be processed. Logged and skipped."""
