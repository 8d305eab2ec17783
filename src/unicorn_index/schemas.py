"""
Ingestion records for external API payloads.

Pydantic models for the raw shapes returned by the GitHub events API and the
Open-Meteo daily API. Datasources normalize responses to these at the
boundary so malformed shapes are rejected before they reach the statistics
code.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from unicorn_index.errors import AggregationError, ValidationError

PUSH_EVENT = "PushEvent"


# =============================================================================
# GitHub events
# =============================================================================


class PushEvent(BaseModel):
    """A single push from the events API, normalized."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    type: Literal["PushEvent"] = PUSH_EVENT
    created_at: datetime
    owner: str | None = Field(default=None, description="Actor login")
    repo: str | None = None
    commit_count: int = Field(default=1, ge=1)

    @property
    def date(self) -> str:
        """UTC calendar day of the push (YYYY-MM-DD)."""
        ts = self.created_at
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=UTC)
        return ts.astimezone(UTC).date().isoformat()

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> PushEvent:
        """Build from a raw events-API item.

        ``payload.commits`` is optional; a missing or non-list value counts as
        one commit.

        Raises:
            AggregationError: Not a push event, or required fields are invalid.
        """
        if not isinstance(raw, Mapping):
            msg = f"Event must be an object, got {type(raw).__name__}"
            raise AggregationError(msg)
        if raw.get("type") != PUSH_EVENT:
            msg = f"Not a push event: {raw.get('type')!r}"
            raise AggregationError(msg)

        payload = raw.get("payload")
        commits = payload.get("commits") if isinstance(payload, Mapping) else None
        actor = raw.get("actor")
        repo = raw.get("repo")
        try:
            return cls(
                id=str(raw["id"]) if raw.get("id") is not None else None,
                created_at=raw.get("created_at"),  # type: ignore[arg-type]
                owner=actor.get("login") if isinstance(actor, Mapping) else None,
                repo=repo.get("name") if isinstance(repo, Mapping) else None,
                commit_count=max(1, len(commits)) if isinstance(commits, list) else 1,
            )
        except pydantic.ValidationError as exc:
            msg = f"Malformed push event {raw.get('id')!r}: {exc.errors()[0]['msg']}"
            raise AggregationError(msg) from exc


# =============================================================================
# Weather
# =============================================================================


class DailyWeather(BaseModel):
    """Open-Meteo ``daily`` block: parallel arrays aligned by index.

    Only ``time`` is required. Value arrays are kept loosely typed so a single
    bad entry degrades that day instead of rejecting the whole response.
    """

    time: list[Any]
    temperature_2m_max: list[Any] = Field(default_factory=list)
    precipitation_sum: list[Any] = Field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Any) -> DailyWeather:
        """Validate a full Open-Meteo response and return its ``daily`` block.

        Raises:
            ValidationError: ``daily.time`` is missing or an array is not a list.
        """
        daily = payload.get("daily") if isinstance(payload, Mapping) else None
        if not isinstance(daily, Mapping) or "time" not in daily:
            msg = "Invalid weather API response structure: missing daily.time"
            raise ValidationError(msg)
        try:
            return cls.model_validate(daily)
        except pydantic.ValidationError as exc:
            msg = f"Invalid weather API response structure: {exc.errors()[0]['loc']}"
            raise ValidationError(msg) from exc
