"""Turn push events into date-keyed daily activity series.

Covers grouping events by day (per user and across baseline organizations),
scaling commit counts to a 0-100 activity score, and filling calendar gaps.
Malformed records are skipped with a warning; one bad record never discards
the rest of a batch.
"""

from __future__ import annotations

import logging
import math
import statistics
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Any

from unicorn_index.analysis.models import (
    ActivitySource,
    AggregatedBaseline,
    DailyActivityPoint,
    SeriesStatistics,
)
from unicorn_index.errors import AggregationError, ValidationError
from unicorn_index.schemas import PUSH_EVENT, PushEvent

logger = logging.getLogger(__name__)

_SCORE_FIELDS = ("commits", "events", "activity_score")


@dataclass
class _DayTotals:
    commits: int = 0
    events: int = 0
    sources: set[str] = field(default_factory=set)


def extract_date(timestamp: str | datetime) -> str:
    """Return the UTC calendar day (YYYY-MM-DD) of an ISO timestamp.

    Naive timestamps are taken to be UTC.

    Raises:
        AggregationError: Missing or unparseable timestamp.
    """
    if not timestamp:
        msg = "Timestamp is required"
        raise AggregationError(msg)
    if isinstance(timestamp, datetime):
        ts = timestamp
    else:
        try:
            ts = datetime.fromisoformat(str(timestamp))
        except ValueError as exc:
            msg = f"Invalid timestamp format: {timestamp!r}"
            raise AggregationError(msg) from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).date().isoformat()


def _coerce_event(item: Any) -> PushEvent | None:
    """Validated push event, None for other event types.

    Raises:
        AggregationError: The item claims to be a push but is malformed.
    """
    if isinstance(item, PushEvent):
        return item
    if not isinstance(item, Mapping):
        msg = f"Event must be an object, got {type(item).__name__}"
        raise AggregationError(msg)
    if item.get("type") != PUSH_EVENT:
        return None
    return PushEvent.from_api(item)


def _accumulate(
    groups: dict[str, _DayTotals],
    events: Iterable[Any],
    source: str,
) -> int:
    """Add valid push events to per-day totals. Returns how many were used."""
    used = 0
    for index, item in enumerate(events):
        try:
            event = _coerce_event(item)
        except AggregationError as exc:
            logger.warning("Skipping invalid event %d from %s: %s", index, source, exc)
            continue
        if event is None:
            continue
        totals = groups.setdefault(event.date, _DayTotals())
        totals.commits += event.commit_count
        totals.events += 1
        totals.sources.add(source)
        used += 1
    return used


def process_user_events(events: Sequence[Any]) -> list[DailyActivityPoint]:
    """Group a user's push events into daily activity points, oldest first."""
    groups: dict[str, _DayTotals] = {}
    used = _accumulate(groups, events, "user")
    logger.info("Processed %d/%d user events", used, len(events))
    return [
        DailyActivityPoint(
            date=day,
            commits=totals.commits,
            events=totals.events,
            source=ActivitySource.USER,
        )
        for day, totals in sorted(groups.items())
    ]


def aggregate_org_data(events_by_source: Mapping[str, Any]) -> AggregatedBaseline:
    """
    Build the daily baseline series across several organizations.

    Push events of every source are grouped by UTC day: commits and events are
    summed and the distinct contributing sources counted. Invalid events are
    skipped with a warning. A source whose value is not a list is recorded in
    ``errors`` and the remaining sources are still aggregated.

    Args:
        events_by_source: Mapping of organization name -> list of push events
            (``PushEvent`` or raw API dicts).

    Returns:
        AggregatedBaseline with points sorted by date and per-source errors.

    Raises:
        AggregationError: ``events_by_source`` is not a mapping.
    """
    if not isinstance(events_by_source, Mapping):
        msg = "Organization data must be a mapping of source name to events"
        raise AggregationError(msg)
    if not events_by_source:
        logger.warning("No organization data provided")
        return AggregatedBaseline()

    groups: dict[str, _DayTotals] = {}
    errors: list[str] = []
    for source, events in events_by_source.items():
        if not isinstance(events, list | tuple):
            errors.append(f"{source}: Invalid data format (expected list)")
            continue
        used = _accumulate(groups, events, source)
        logger.info("Processed %d/%d valid events from %s", used, len(events), source)

    if errors:
        logger.warning("Processing errors encountered: %s", "; ".join(errors))

    data = [
        DailyActivityPoint(
            date=day,
            commits=totals.commits,
            events=totals.events,
            source=ActivitySource.BASELINE,
            org_count=len(totals.sources),
        )
        for day, totals in sorted(groups.items())
    ]
    logger.info("Aggregated data into %d daily baseline points", len(data))
    return AggregatedBaseline(data=data, errors=errors)


def normalize_to_activity_score(
    series: Sequence[DailyActivityPoint],
    max_value: float | None = None,
    *,
    field: str = "commits",
) -> list[DailyActivityPoint]:
    """
    Scale a series to a 0-100 activity score.

    ``score = round(value / max_value * 100)``, clamped to [0, 100].

    Args:
        series: Daily points.
        max_value: Value mapped to 100. Omitted: the series' own maximum.
        field: Which value to scale (``commits`` by default). Passing
            ``activity_score`` with ``max_value=100`` leaves scores unchanged.

    Returns:
        New points with ``activity_score`` set. All zero when the resolved
        maximum is 0.

    Raises:
        ValidationError: Negative or non-finite ``max_value``, or unknown ``field``.
    """
    if field not in _SCORE_FIELDS:
        msg = f"Cannot normalize field {field!r}; expected one of {_SCORE_FIELDS}"
        raise ValidationError(msg)
    if not series:
        return []
    if max_value is not None and (not math.isfinite(max_value) or max_value < 0):
        msg = f"max_value must be a finite non-negative number, got {max_value}"
        raise ValidationError(msg)

    values = [float(getattr(point, field)) for point in series]
    resolved = max(values) if max_value is None else float(max_value)
    if resolved == 0:
        logger.warning("Maximum value is 0, all activity scores will be 0")
        return [point.with_score(0.0) for point in series]

    # Half-up rounding on non-negative values
    return [
        point.with_score(int(value / resolved * 100 + 0.5))
        for point, value in zip(series, values, strict=True)
    ]


def _to_date(value: str | date, label: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        msg = f"{label} must be in YYYY-MM-DD format, got {value!r}"
        raise ValidationError(msg) from exc


def fill_missing_dates(
    series: Sequence[DailyActivityPoint],
    start: str | date,
    end: str | date,
    *,
    source: ActivitySource | None = None,
) -> list[DailyActivityPoint]:
    """
    Return exactly one point per calendar day in ``[start, end]``.

    Existing points are kept; missing days get zero-valued placeholders tagged
    with ``source`` (default: the series' own source, else ``user``). Points
    outside the range are dropped.

    Raises:
        ValidationError: Bad dates or ``start`` after ``end``.
    """
    first = _to_date(start, "Start date")
    last = _to_date(end, "End date")
    if first > last:
        msg = f"Start date must not be after end date ({first} > {last})"
        raise ValidationError(msg)

    by_date = {point.date: point for point in series}
    fill_source = source or (series[0].source if series else ActivitySource.USER)

    filled: list[DailyActivityPoint] = []
    day = first
    while day <= last:
        key = day.isoformat()
        filled.append(by_date.get(key) or DailyActivityPoint.placeholder(key, fill_source))
        day += timedelta(days=1)
    return filled


def calculate_statistics(values: Sequence[float]) -> SeriesStatistics:
    """Count, sum, mean, median, min, max and population std dev of ``values``."""
    clean = [float(v) for v in values if v is not None]
    if not clean:
        return SeriesStatistics()
    return SeriesStatistics(
        count=len(clean),
        total=sum(clean),
        mean=round(statistics.fmean(clean), 2),
        median=round(statistics.median(clean), 2),
        minimum=min(clean),
        maximum=max(clean),
        std_dev=round(statistics.pstdev(clean), 2),
    )


def get_date_range(series: Sequence[DailyActivityPoint]) -> tuple[str | None, str | None]:
    """Earliest and latest date of a series, ``(None, None)`` when empty."""
    dates = sorted(point.date for point in series)
    if not dates:
        return None, None
    return dates[0], dates[-1]
