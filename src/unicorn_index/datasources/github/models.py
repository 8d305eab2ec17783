"""Result types for multi-source event fetches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unicorn_index.schemas import PushEvent


@dataclass(frozen=True)
class SourceError:
    """Why one source of a fan-out fetch failed."""

    message: str
    kind: str
    status: int | None = None
    attempts: int = 1
    retryable: bool = False
    can_continue: bool = False


@dataclass
class FetchOutcome:
    """Settled result of fetching several sources concurrently.

    Every requested source ends up in exactly one of ``results`` or
    ``errors``.
    """

    requested: list[str]
    results: dict[str, list[PushEvent]] = field(default_factory=dict)
    errors: dict[str, SourceError] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def has_partial_data(self) -> bool:
        """Some, but not all, sources succeeded."""
        return self.success_count > 0 and self.error_count > 0

    @property
    def is_complete(self) -> bool:
        return self.error_count == 0

    @property
    def total_events(self) -> int:
        return sum(len(events) for events in self.results.values())


@dataclass(frozen=True)
class OutcomeSummary:
    """User-facing description of a fetch outcome."""

    message: str
    severity: str  # success | warning | error
    can_proceed: bool
