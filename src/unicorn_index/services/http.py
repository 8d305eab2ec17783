"""
Shared HTTP client with rate limiting, retry and backoff.

Every outbound request goes through one ``ApiClient``, which owns:

- a ``requests.Session`` whose timeout is a hard deadline for the whole
  request and whose connection pool is sized for concurrent fan-out,
- a ``RateLimiter`` holding the time of the last dispatch, shared by all
  threads using the client,
- a ``RetryPolicy`` (exponential backoff with random jitter).

Failures are classified once by ``classify_error`` and the same
``ErrorKind`` drives both the retry decision and the exception finally
raised, so the two never disagree.

Usage::

    from unicorn_index.services.http import ApiClient

    client = ApiClient()
    events = client.get_json("https://api.github.com/users/octocat/events")
"""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import requests
import urllib3
from requests.adapters import HTTPAdapter

from unicorn_index.errors import (
    FetchError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    ValidationError,
)

if TYPE_CHECKING:
    from unicorn_index.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_POOL_SIZE = 10
USER_AGENT = "unicorn-index/0.1"
READ_CHUNK_SIZE = 64 * 1024


def _read_body(
    resp: requests.Response,
    deadline: float,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Load a streamed response body, giving up once ``deadline`` has passed.

    ``read1`` returns as soon as any bytes arrive, so a server that trickles
    its body is checked against the deadline between reads instead of only
    between socket-level gaps.

    Raises:
        requests.ReadTimeout: The body was not complete by ``deadline``.
    """
    chunks: list[bytes] = []
    try:
        while True:
            if clock() > deadline:
                msg = f"Response from {resp.url} not complete within the request timeout"
                raise requests.ReadTimeout(msg, request=resp.request, response=resp)
            try:
                chunk = resp.raw.read1(READ_CHUNK_SIZE, decode_content=True)
            except urllib3.exceptions.ReadTimeoutError as exc:
                raise requests.ReadTimeout(exc, request=resp.request) from exc
            except urllib3.exceptions.ProtocolError as exc:
                raise requests.ConnectionError(exc, request=resp.request) from exc
            except urllib3.exceptions.DecodeError as exc:
                raise requests.exceptions.ContentDecodingError(exc, request=resp.request) from exc
            if not chunk:
                break
            chunks.append(chunk)
    except requests.RequestException:
        resp.close()
        raise

    resp._content = b"".join(chunks)
    resp._content_consumed = True
    resp.raw.release_conn()


def create_session(
    timeout: float = DEFAULT_TIMEOUT,
    pool_size: int = DEFAULT_POOL_SIZE,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> requests.Session:
    """
    Build a ``requests.Session`` for JSON APIs.

    Transport-level retries are disabled: ``ApiClient`` retries itself so that
    every attempt passes the rate limiter.

    ``timeout`` is a hard deadline for the whole request, body included. The
    socket-level timeout that requests applies only bounds each connect and
    each gap between received bytes.

    Args:
        timeout: Default timeout applied to every request.
        pool_size: Connections kept per host (match the fan-out width).
        clock: Monotonic clock used for the total deadline.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=0, pool_connections=pool_size, pool_maxsize=pool_size)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT
    s.headers["Accept"] = "application/json"

    # Monkey-patch send to inject a default timeout so callers don't need to
    # remember to pass ``timeout=`` every time. Session.request always passes
    # the key, so a None value counts as unset.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: Any
    ) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = timeout
        limit = kwargs["timeout"]
        if isinstance(limit, tuple):
            limit = sum(t for t in limit if t is not None)
        deadline = clock() + limit

        caller_streams = kwargs.pop("stream", False)
        resp = _original_send(prepared, stream=True, **kwargs)
        if not caller_streams and resp.raw is not None and resp._content is False:
            _read_body(resp, deadline, clock)
        return resp

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


class ErrorKind(StrEnum):
    """Failure classes shared by the retry loop and the raised exception."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    NETWORK = "network"
    SERVER = "server"
    CLIENT = "client"

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE


_RETRYABLE = frozenset({ErrorKind.RATE_LIMIT, ErrorKind.TIMEOUT, ErrorKind.NETWORK, ErrorKind.SERVER})

_ERROR_CLASSES: dict[ErrorKind, type[FetchError]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.RATE_LIMIT: RateLimitError,
    ErrorKind.TIMEOUT: RequestTimeoutError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.SERVER: ServerError,
    ErrorKind.CLIENT: FetchError,
}


def classify_error(failure: requests.Response | BaseException) -> ErrorKind:
    """Map a failed response or a raised exception to an ``ErrorKind``."""
    if isinstance(failure, requests.Response):
        status = failure.status_code
        if status == 404:
            return ErrorKind.NOT_FOUND
        if status in (403, 429):
            return ErrorKind.RATE_LIMIT
        if status >= 500:
            return ErrorKind.SERVER
        return ErrorKind.CLIENT

    if isinstance(failure, FetchError) and failure.kind is not None:
        return failure.kind
    # JSONDecodeError must be checked before the RequestException branches
    if isinstance(failure, requests.JSONDecodeError | ValueError):
        return ErrorKind.VALIDATION
    if isinstance(failure, requests.Timeout | TimeoutError):
        return ErrorKind.TIMEOUT
    return ErrorKind.NETWORK


def error_for(
    kind: ErrorKind,
    message: str,
    *,
    status: int | None = None,
    url: str | None = None,
    attempts: int = 1,
) -> FetchError:
    """Build the exception that reports a failure of the given kind."""
    return _ERROR_CLASSES[kind](
        message,
        status=status,
        url=url,
        attempts=attempts,
        retryable=kind.retryable,
        kind=kind,
    )


def _describe(exc: BaseException, kind: ErrorKind) -> str:
    if kind is ErrorKind.TIMEOUT:
        return "Request timeout - server took too long to respond"
    return f"Network error - {exc}"


# ---------------------------------------------------------------------------
# Rate limiting and retry policy
# ---------------------------------------------------------------------------


class RateLimiter:
    """Enforce a minimum interval between request dispatches.

    A single "last dispatch" timestamp is read and updated under a lock, so
    concurrent callers queue up behind each other instead of bypassing the
    interval. Only the dispatch moment is serialized; the lock is released
    before the caller sends its request.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_dispatch: float | None = None

    @property
    def last_dispatch(self) -> float | None:
        """Clock reading of the most recent dispatch (None before the first)."""
        return self._last_dispatch

    def wait(self) -> float:
        """Block until a request may be dispatched. Returns the delay applied."""
        with self._lock:
            delay = 0.0
            if self._last_dispatch is not None:
                elapsed = self._clock() - self._last_dispatch
                delay = max(0.0, self.min_interval - elapsed)
            if delay > 0:
                logger.debug("Rate limiting: waiting %.0f ms", delay * 1000)
                self._sleep(delay)
            self._last_dispatch = self._clock()
            return delay


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with random jitter.

    ``delay = base_delay * 2**attempt + uniform(0, jitter)`` where ``attempt``
    is the 1-based number of the attempt that just failed.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    jitter: float = 1.0

    def delay(self, attempt: int, rand: Callable[[], float] = random.random) -> float:
        """Seconds to wait after failed attempt number ``attempt``."""
        return self.base_delay * 2**attempt + rand() * self.jitter


#: Default retry strategy: 3 attempts, ~2s then ~4s between them.
DEFAULT_RETRY = RetryPolicy()


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class ApiClient:
    """Rate-limited, retrying JSON client.

    One instance is shared by every fetch of an analysis run; its
    ``RateLimiter`` is the only backpressure on outbound traffic.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        rate_limiter: RateLimiter | None = None,
        retry: RetryPolicy = DEFAULT_RETRY,
        *,
        sleep: Callable[[float], None] = time.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self.session = session or create_session()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.retry = retry
        self._sleep = sleep
        self._rand = rand

    @classmethod
    def from_settings(cls, settings: Settings) -> ApiClient:
        """Build a client from application settings."""
        return cls(
            session=create_session(
                timeout=settings.request_timeout,
                pool_size=max(DEFAULT_POOL_SIZE, settings.max_workers),
            ),
            rate_limiter=RateLimiter(settings.rate_limit_interval),
            retry=RetryPolicy(
                max_attempts=settings.max_retries,
                base_delay=settings.backoff_base,
                jitter=settings.backoff_jitter,
            ),
        )

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Raises:
            ValidationError: Body is not valid JSON.
            NotFoundError: HTTP 404.
            RateLimitError: HTTP 403/429 after all attempts.
            RequestTimeoutError: Timed out on every attempt.
            NetworkError: Connection failures (``ServerError`` for 5xx).
            FetchError: Any other non-retryable HTTP status.
        """
        attempt = 0
        while True:
            attempt += 1
            self.rate_limiter.wait()
            cause: BaseException | None = None
            status: int | None = None
            try:
                resp = self.session.get(url, params=params or {})
            except requests.RequestException as exc:
                kind = classify_error(exc)
                message = _describe(exc, kind)
                cause = exc
            else:
                if resp.ok:
                    try:
                        return resp.json()
                    except requests.JSONDecodeError as exc:
                        msg = f"Invalid JSON response from {url}"
                        raise error_for(
                            ErrorKind.VALIDATION,
                            msg,
                            status=resp.status_code,
                            url=url,
                            attempts=attempt,
                        ) from exc
                kind = classify_error(resp)
                status = resp.status_code
                message = f"HTTP {status}: {resp.reason or 'error'}"

            if not kind.retryable or attempt >= self.retry.max_attempts:
                raise error_for(kind, message, status=status, url=url, attempts=attempt) from cause

            delay = self.retry.delay(attempt, self._rand)
            logger.warning(
                "Request attempt %d/%d to %s failed: %s. Retrying in %.0f ms",
                attempt,
                self.retry.max_attempts,
                url,
                message,
                delay * 1000,
            )
            self._sleep(delay)
