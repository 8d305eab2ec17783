"""Tests for turning push events into daily activity series."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from typing import Any

import pytest

from unicorn_index.analysis.activity import (
    aggregate_org_data,
    calculate_statistics,
    extract_date,
    fill_missing_dates,
    get_date_range,
    normalize_to_activity_score,
    process_user_events,
)
from unicorn_index.analysis.models import ActivitySource, DailyActivityPoint
from unicorn_index.errors import AggregationError, ValidationError
from unicorn_index.schemas import PushEvent


def push(created_at: str, commits: int = 1, owner: str = "dev") -> dict[str, Any]:
    return {
        "id": f"{owner}-{created_at}-{commits}",
        "type": "PushEvent",
        "created_at": created_at,
        "actor": {"login": owner},
        "payload": {"commits": [{} for _ in range(commits)]},
    }


def point(day: str, commits: int = 0, score: float = 0.0, **kwargs: Any) -> DailyActivityPoint:
    return DailyActivityPoint(date=day, commits=commits, activity_score=score, **kwargs)


class TestExtractDate:
    def test_utc_timestamp(self) -> None:
        assert extract_date("2024-01-15T23:59:59Z") == "2024-01-15"

    def test_offset_converted_to_utc(self) -> None:
        assert extract_date("2024-01-16T02:00:00+05:30") == "2024-01-15"

    def test_naive_is_utc(self) -> None:
        assert extract_date("2024-01-15T10:00:00") == "2024-01-15"

    def test_datetime(self) -> None:
        ts = datetime(2024, 1, 15, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert extract_date(ts) == "2024-01-16"

    @pytest.mark.parametrize("value", ["", "yesterday", "2024-13-45T00:00:00Z"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(AggregationError):
            extract_date(value)


class TestProcessUserEvents:
    def test_groups_by_day(self) -> None:
        series = process_user_events(
            [
                push("2024-01-02T10:00:00Z", commits=2),
                push("2024-01-01T09:00:00Z", commits=1),
                push("2024-01-02T18:00:00Z", commits=3),
            ]
        )
        assert [p.date for p in series] == ["2024-01-01", "2024-01-02"]
        assert series[1].commits == 5
        assert series[1].events == 2
        assert all(p.source is ActivitySource.USER for p in series)

    def test_accepts_validated_events(self) -> None:
        event = PushEvent(created_at=datetime(2024, 1, 1, tzinfo=UTC), commit_count=4)
        assert process_user_events([event])[0].commits == 4

    def test_skips_malformed_and_other_types(self) -> None:
        series = process_user_events(
            [
                push("2024-01-01T00:00:00Z"),
                {"type": "PushEvent", "created_at": "garbage"},
                {"type": "IssuesEvent", "created_at": "2024-01-01T00:00:00Z"},
                "not an event",
            ]
        )
        assert len(series) == 1
        assert series[0].events == 1

    def test_empty(self) -> None:
        assert process_user_events([]) == []


class TestAggregateOrgData:
    def test_sums_across_orgs(self) -> None:
        result = aggregate_org_data(
            {
                "alpha": [push("2024-01-01T10:00:00Z", 2), push("2024-01-02T10:00:00Z", 1)],
                "beta": [push("2024-01-01T12:00:00Z", 3)],
            }
        )
        assert not result.has_errors
        day1, day2 = result.data
        assert day1.date == "2024-01-01"
        assert day1.commits == 5
        assert day1.events == 2
        assert day1.org_count == 2
        assert day1.source is ActivitySource.BASELINE
        assert day2.org_count == 1

    def test_non_list_source_recorded(self) -> None:
        result = aggregate_org_data(
            {"alpha": [push("2024-01-01T10:00:00Z")], "beta": {"unexpected": True}}
        )
        assert result.has_errors
        assert result.errors == ["beta: Invalid data format (expected list)"]
        assert len(result.data) == 1
        assert "1 source(s)" in result.message

    def test_malformed_item_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        result = aggregate_org_data(
            {"alpha": [push("2024-01-01T10:00:00Z"), {"type": "PushEvent"}, 7]}
        )
        assert len(result.data) == 1
        assert result.data[0].events == 1
        assert "Skipping invalid event" in caplog.text

    def test_empty_mapping(self) -> None:
        result = aggregate_org_data({})
        assert result.data == []
        assert result.errors == []

    def test_requires_mapping(self) -> None:
        with pytest.raises(AggregationError):
            aggregate_org_data([push("2024-01-01T10:00:00Z")])  # type: ignore[arg-type]

    def test_completion_order_irrelevant(self) -> None:
        a = [push("2024-01-01T10:00:00Z", 2)]
        b = [push("2024-01-01T11:00:00Z", 1), push("2024-01-03T11:00:00Z", 1)]
        assert aggregate_org_data({"a": a, "b": b}).data == aggregate_org_data({"b": b, "a": a}).data


class TestNormalizeToActivityScore:
    def test_auto_max(self) -> None:
        series = [point("2024-01-01", 5), point("2024-01-02", 10), point("2024-01-03", 0)]
        scores = [p.activity_score for p in normalize_to_activity_score(series)]
        assert scores == [50.0, 100.0, 0.0]

    def test_explicit_max_clamps(self) -> None:
        series = [point("2024-01-01", 30), point("2024-01-02", 5)]
        scores = [p.activity_score for p in normalize_to_activity_score(series, max_value=20)]
        assert scores == [100.0, 25.0]

    def test_rounds_half_up(self) -> None:
        series = [point("2024-01-01", 1), point("2024-01-02", 8)]
        assert normalize_to_activity_score(series)[0].activity_score == 13.0

    def test_zero_max_gives_zero_scores(self) -> None:
        series = [point("2024-01-01", 0), point("2024-01-02", 0)]
        assert all(p.activity_score == 0 for p in normalize_to_activity_score(series))

    def test_negative_max_rejected(self) -> None:
        with pytest.raises(ValidationError):
            normalize_to_activity_score([point("2024-01-01", 1)], max_value=-1)

    @pytest.mark.parametrize("max_value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_max_rejected(self, max_value: float) -> None:
        with pytest.raises(ValidationError, match="finite"):
            normalize_to_activity_score([point("2024-01-01", 1)], max_value=max_value)

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            normalize_to_activity_score([point("2024-01-01", 1)], field="stars")

    def test_empty(self) -> None:
        assert normalize_to_activity_score([]) == []

    def test_idempotent_on_scores(self) -> None:
        """Re-normalizing scores against 100 leaves them unchanged."""
        once = normalize_to_activity_score(
            [point("2024-01-01", 3), point("2024-01-02", 7), point("2024-01-03", 9)]
        )
        twice = normalize_to_activity_score(once, max_value=100, field="activity_score")
        assert twice == once

    def test_scores_always_in_range(self) -> None:
        series = [point(f"2024-01-{d:02d}", d * 7) for d in range(1, 20)]
        for max_value in (None, 1, 50, 1000):
            for p in normalize_to_activity_score(series, max_value=max_value):
                assert 0 <= p.activity_score <= 100


class TestFillMissingDates:
    def test_empty_series(self) -> None:
        filled = fill_missing_dates([], "2024-01-01", "2024-01-03")
        assert [p.date for p in filled] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert all(p.commits == 0 and p.activity_score == 0 for p in filled)

    def test_keeps_existing_points(self) -> None:
        existing = point("2024-01-02", 4, 80.0, source=ActivitySource.BASELINE)
        filled = fill_missing_dates([existing], "2024-01-01", "2024-01-03")
        assert filled[1] is existing
        assert filled[0].source is ActivitySource.BASELINE

    def test_explicit_source(self) -> None:
        filled = fill_missing_dates([], "2024-01-01", "2024-01-01", source=ActivitySource.BASELINE)
        assert filled[0].source is ActivitySource.BASELINE

    def test_drops_points_outside_range(self) -> None:
        filled = fill_missing_dates([point("2023-12-31", 1)], "2024-01-01", "2024-01-02")
        assert [p.date for p in filled] == ["2024-01-01", "2024-01-02"]

    def test_start_after_end(self) -> None:
        with pytest.raises(ValidationError):
            fill_missing_dates([], "2024-01-05", "2024-01-01")

    def test_bad_date(self) -> None:
        with pytest.raises(ValidationError):
            fill_missing_dates([], "Jan 1", "2024-01-01")


class TestCalculateStatistics:
    def test_values(self) -> None:
        stats = calculate_statistics([2, 4, 4, 4, 5, 5, 7, 9])
        assert stats.count == 8
        assert stats.total == 40
        assert stats.mean == 5.0
        assert stats.median == 4.5
        assert stats.minimum == 2
        assert stats.maximum == 9
        assert stats.std_dev == 2.0

    def test_empty(self) -> None:
        stats = calculate_statistics([])
        assert stats.count == 0
        assert stats.mean == 0


class TestGetDateRange:
    def test_range(self) -> None:
        series = [point("2024-01-03"), point("2024-01-01"), point("2024-01-02")]
        assert get_date_range(series) == ("2024-01-01", "2024-01-03")

    def test_empty(self) -> None:
        assert get_date_range([]) == (None, None)


class TestDailyActivityPoint:
    def test_score_clamped(self) -> None:
        assert point("2024-01-01", score=150).activity_score == 100
        assert point("2024-01-01", score=-5).activity_score == 0

    def test_bad_date_key(self) -> None:
        with pytest.raises(AggregationError):
            point("2024/01/01")

    def test_negative_counts(self) -> None:
        with pytest.raises(AggregationError):
            point("2024-01-01", commits=-1)
