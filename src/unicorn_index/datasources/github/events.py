"""Push events for users and organizations from the GitHub events API."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from unicorn_index.datasources.github.client import (
    GITHUB_API,
    MAX_PAGES,
    PER_PAGE,
    validate_identifier,
)
from unicorn_index.datasources.github.models import FetchOutcome, OutcomeSummary, SourceError
from unicorn_index.errors import (
    AggregationError,
    AllSourcesFailedError,
    FetchError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from unicorn_index.schemas import PUSH_EVENT, PushEvent
from unicorn_index.services.http import ErrorKind, classify_error

if TYPE_CHECKING:
    from unicorn_index.services.http import ApiClient

logger = logging.getLogger(__name__)

_NON_CRITICAL = frozenset(
    {
        ErrorKind.RATE_LIMIT,
        ErrorKind.SERVER,
        ErrorKind.TIMEOUT,
        ErrorKind.NETWORK,
        ErrorKind.NOT_FOUND,
    }
)


def _fetch_push_events(
    client: ApiClient,
    url: str,
    max_pages: int,
) -> list[PushEvent]:
    """Page through an events endpoint and keep the well-formed push events."""
    pushes: list[PushEvent] = []
    for page in range(1, max_pages + 1):
        data = client.get_json(url, params={"per_page": PER_PAGE, "page": page})
        if not isinstance(data, list):
            msg = f"Expected a list of events from {url}, got {type(data).__name__}"
            raise ValidationError(msg, url=url)
        for item in data:
            if not isinstance(item, Mapping) or item.get("type") != PUSH_EVENT:
                continue
            try:
                pushes.append(PushEvent.from_api(item))
            except AggregationError as exc:
                logger.warning("Skipping malformed push event from %s: %s", url, exc)
        if len(data) < PER_PAGE:
            break
    return pushes


def _with_message(exc: FetchError, message: str) -> FetchError:
    """Copy a fetch error with a caller-friendly message."""
    return type(exc)(
        message,
        status=exc.status,
        url=exc.url,
        attempts=exc.attempts,
        retryable=exc.retryable,
        kind=exc.kind,
    )


def _fetch_owner_events(
    client: ApiClient,
    path: str,
    name: str,
    label: str,
    *,
    max_pages: int,
    base_url: str,
) -> list[PushEvent]:
    logger.info("Fetching events for %s: %s", label, name)
    try:
        events = _fetch_push_events(client, f"{base_url}/{path}/{name}/events", max_pages)
    except NotFoundError as exc:
        raise _with_message(exc, f"{label.capitalize()} '{name}' not found") from exc
    except RateLimitError as exc:
        msg = "GitHub API rate limit exceeded. Please try again later."
        raise _with_message(exc, msg) from exc
    logger.info("Found %d PushEvents for %s", len(events), name)
    return events


def fetch_user_events(
    client: ApiClient,
    username: str,
    *,
    max_pages: int = MAX_PAGES,
    base_url: str = GITHUB_API,
) -> list[PushEvent]:
    """
    Fetch a user's recent push events.

    Args:
        client: Shared API client (owns the rate limiter).
        username: GitHub login.
        max_pages: Pages of 100 events to request at most.
        base_url: GitHub API root.

    Raises:
        ValidationError: Invalid username or malformed response.
        NotFoundError: No such user.
        RateLimitError, RequestTimeoutError, NetworkError: Transport failures.
    """
    validate_identifier(username, "username")
    return _fetch_owner_events(
        client, "users", username, "user", max_pages=max_pages, base_url=base_url
    )


def fetch_org_events(
    client: ApiClient,
    org_name: str,
    *,
    max_pages: int = MAX_PAGES,
    base_url: str = GITHUB_API,
) -> list[PushEvent]:
    """Fetch an organization's recent push events. Errors as ``fetch_user_events``."""
    validate_identifier(org_name, "organization name")
    return _fetch_owner_events(
        client, "orgs", org_name, "organization", max_pages=max_pages, base_url=base_url
    )


def is_non_critical(exc: BaseException) -> bool:
    """Whether a source failure still lets the analysis continue with other sources."""
    return isinstance(exc, FetchError) and classify_error(exc) in _NON_CRITICAL


def source_error_from(exc: BaseException) -> SourceError:
    """Describe a failed source for the outcome's error map."""
    if isinstance(exc, FetchError):
        return SourceError(
            message=exc.message,
            kind=str(classify_error(exc)),
            status=exc.status,
            attempts=exc.attempts,
            retryable=exc.retryable,
            can_continue=is_non_critical(exc),
        )
    return SourceError(message=str(exc) or type(exc).__name__, kind="unexpected")


def fetch_multiple_org_events(
    client: ApiClient,
    org_names: Sequence[str],
    *,
    max_workers: int | None = None,
    max_pages: int = MAX_PAGES,
    base_url: str = GITHUB_API,
) -> FetchOutcome:
    """
    Fetch push events for several organizations concurrently.

    Every fetch is settled; one organization failing never aborts the others.
    All threads share ``client`` and therefore its rate limiter. Every
    requested name lands in exactly one of ``results`` or ``errors``.

    Returns:
        FetchOutcome with events by organization and errors by organization.

    Raises:
        ValidationError: ``org_names`` is empty, not a list, or repeats a name.
        AllSourcesFailedError: No organization could be fetched.
    """
    if isinstance(org_names, str) or not org_names:
        msg = "Organization names must be a non-empty list"
        raise ValidationError(msg)

    requested = list(org_names)
    duplicates = sorted({org for org in requested if requested.count(org) > 1})
    if duplicates:
        msg = f"Duplicate organization names: {', '.join(duplicates)}"
        raise ValidationError(msg)

    outcome = FetchOutcome(requested=requested)
    logger.info("Fetching events for %d organizations", len(requested))

    workers = min(max_workers or len(requested), len(requested))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="org-fetch") as pool:
        futures = {
            org: pool.submit(
                fetch_org_events, client, org, max_pages=max_pages, base_url=base_url
            )
            for org in requested
        }
        for org, future in futures.items():
            try:
                outcome.results[org] = future.result()
            except Exception as exc:  # noqa: BLE001
                outcome.errors[org] = source_error_from(exc)
                logger.warning("Failed to fetch %s: %s", org, exc)

    logger.info(
        "Fetched data from %d/%d organizations", outcome.success_count, len(requested)
    )

    if outcome.success_count == 0:
        critical = [
            f"{org}: {err.message}" for org, err in outcome.errors.items() if not err.can_continue
        ]
        if critical:
            msg = (
                "Failed to fetch data from any organization. "
                f"Critical errors: {'; '.join(critical)}"
            )
        else:
            msg = (
                "All organization requests failed due to network or server issues. "
                "Please try again later."
            )
        raise AllSourcesFailedError(msg, outcome)

    if outcome.error_count:
        logger.warning(
            "Continuing with partial data: %d organizations failed, %d succeeded",
            outcome.error_count,
            outcome.success_count,
        )
    return outcome


def summarize_outcome(outcome: FetchOutcome) -> OutcomeSummary:
    """Describe a fetch outcome for the user and say whether analysis can proceed."""
    if outcome.is_complete and outcome.success_count > 0:
        return OutcomeSummary(
            message=f"Successfully loaded data from all {outcome.success_count} organizations.",
            severity="success",
            can_proceed=True,
        )
    if outcome.has_partial_data:
        failed = ", ".join(outcome.errors)
        return OutcomeSummary(
            message=(
                f"Loaded data from {outcome.success_count} organizations. "
                f"{outcome.error_count} organizations ({failed}) are temporarily unavailable, "
                "but analysis can continue with available data."
            ),
            severity="warning",
            can_proceed=True,
        )
    return OutcomeSummary(
        message=(
            "Unable to load organization data. "
            "Please check your internet connection and try again."
        ),
        severity="error",
        can_proceed=False,
    )
