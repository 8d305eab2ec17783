"""GitHub events data source.

Fetches push activity for users and organizations (no authentication).

Public API:
  - events: fetch_user_events, fetch_org_events, fetch_multiple_org_events,
    summarize_outcome
  - models: FetchOutcome, SourceError, OutcomeSummary
  - client: API URL, identifier validation
"""

from unicorn_index.datasources.github.client import GITHUB_API, validate_identifier
from unicorn_index.datasources.github.events import (
    fetch_multiple_org_events,
    fetch_org_events,
    fetch_user_events,
    is_non_critical,
    summarize_outcome,
)
from unicorn_index.datasources.github.models import FetchOutcome, OutcomeSummary, SourceError

__all__ = [
    "GITHUB_API",
    "FetchOutcome",
    "OutcomeSummary",
    "SourceError",
    "fetch_multiple_org_events",
    "fetch_org_events",
    "fetch_user_events",
    "is_non_critical",
    "summarize_outcome",
    "validate_identifier",
]
