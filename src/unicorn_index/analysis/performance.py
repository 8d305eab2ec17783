"""User activity versus the baseline: relative performance, per-company ratios and trend."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from unicorn_index.analysis.activity import aggregate_org_data, normalize_to_activity_score
from unicorn_index.analysis.models import DailyActivityPoint, PerformanceCategory
from unicorn_index.analysis.stats import (
    calculate_consistency,
    calculate_growth_rate,
    calculate_mean,
    calculate_momentum,
    calculate_percentile,
    calculate_std_dev,
    categorize_performance,
)

logger = logging.getLogger(__name__)

MIN_DATA_POINTS = 5
MIN_TREND_POINTS = 7


@dataclass(frozen=True)
class ComparisonPoint:
    date: str
    user_score: float
    baseline_score: float


@dataclass(frozen=True)
class RelativePerformance:
    """How the user's daily scores compare to the baseline's.

    When ``has_enough_data`` is False only ``data_points`` and ``message``
    are meaningful.
    """

    has_enough_data: bool
    data_points: int
    message: str = ""
    user_average: float = 0.0
    baseline_average: float = 0.0
    performance_ratio: float = 0.0
    performance_percentage: int = 0
    category: PerformanceCategory | None = None
    user_consistency: float = 0.0
    baseline_consistency: float = 0.0
    outperform_days: int = 0
    outperform_percentage: int = 0
    percentile: float = 0.0
    points: list[ComparisonPoint] = field(default_factory=list)


@dataclass(frozen=True)
class CompanyComparison:
    average: float
    ratio: float
    percentage: float


@dataclass(frozen=True)
class TrendAnalysis:
    has_enough_data: bool
    data_points: int = 0
    growth_rate: float = 0.0
    volatility: float = 0.0
    momentum: float = 0.0


def synchronize_by_date(
    user: Sequence[DailyActivityPoint],
    baseline: Sequence[DailyActivityPoint],
) -> list[ComparisonPoint]:
    """Outer join of user and baseline scores by date; a missing side scores 0."""
    user_scores = {p.date: p.activity_score for p in user}
    baseline_scores = {p.date: p.activity_score for p in baseline}
    dates = sorted(user_scores.keys() | baseline_scores.keys())
    return [
        ComparisonPoint(
            date=day,
            user_score=user_scores.get(day, 0.0),
            baseline_score=baseline_scores.get(day, 0.0),
        )
        for day in dates
    ]


def calculate_relative_performance(
    user: Sequence[DailyActivityPoint],
    baseline: Sequence[DailyActivityPoint],
    *,
    min_data_points: int = MIN_DATA_POINTS,
) -> RelativePerformance:
    """
    Compare a user's activity scores against the baseline, day by day.

    Args:
        user: Normalized user series.
        baseline: Normalized baseline series.
        min_data_points: Fewer synchronized days than this yields
            ``has_enough_data=False`` instead of numbers.

    Returns:
        RelativePerformance. Never raises for short input.
    """
    points = synchronize_by_date(user, baseline)
    n = len(points)
    if n < min_data_points:
        return RelativePerformance(
            has_enough_data=False,
            data_points=n,
            message=(
                f"Need at least {min_data_points} data points for meaningful comparison. "
                f"Currently have {n}."
            ),
        )

    user_scores = [p.user_score for p in points]
    baseline_scores = [p.baseline_score for p in points]
    user_avg = calculate_mean(user_scores)
    baseline_avg = calculate_mean(baseline_scores)
    ratio = user_avg / baseline_avg if baseline_avg > 0 else 0.0
    outperform_days = sum(1 for p in points if p.user_score > p.baseline_score)

    logger.info("Relative performance over %d days: ratio %.2f", n, ratio)
    return RelativePerformance(
        has_enough_data=True,
        data_points=n,
        message=f"Compared {n} days of activity",
        user_average=round(user_avg, 1),
        baseline_average=round(baseline_avg, 1),
        performance_ratio=round(ratio, 2),
        performance_percentage=round((ratio - 1) * 100),
        category=categorize_performance(ratio),
        user_consistency=round(calculate_consistency(user_scores), 2),
        baseline_consistency=round(calculate_consistency(baseline_scores), 2),
        outperform_days=outperform_days,
        outperform_percentage=round(outperform_days / n * 100),
        percentile=round(calculate_percentile(user_avg, baseline_scores), 1),
        points=points,
    )


def calculate_company_comparisons(
    user: Sequence[DailyActivityPoint],
    events_by_source: Mapping[str, Sequence[Any]],
) -> dict[str, CompanyComparison]:
    """Ratio of the user's mean score to each organization's own normalized mean.

    Organizations without events, or whose mean score is 0, are left out.
    """
    if not user:
        return {}
    user_avg = calculate_mean([p.activity_score for p in user])

    comparisons: dict[str, CompanyComparison] = {}
    for org, events in events_by_source.items():
        if not events:
            continue
        series = normalize_to_activity_score(aggregate_org_data({org: list(events)}).data)
        org_avg = calculate_mean([p.activity_score for p in series])
        if org_avg == 0:
            continue
        ratio = user_avg / org_avg
        comparisons[org] = CompanyComparison(
            average=round(org_avg, 1),
            ratio=round(ratio, 2),
            percentage=round(min(100.0, ratio * 100), 1),
        )
    return comparisons


def calculate_trend_analysis(
    series: Sequence[DailyActivityPoint],
    min_points: int = MIN_TREND_POINTS,
) -> TrendAnalysis:
    """Growth, volatility and momentum of a series' activity scores."""
    if len(series) < min_points:
        return TrendAnalysis(has_enough_data=False, data_points=len(series))
    values = [p.activity_score for p in series]
    return TrendAnalysis(
        has_enough_data=True,
        data_points=len(values),
        growth_rate=round(calculate_growth_rate(values), 1),
        volatility=round(calculate_std_dev(values), 1),
        momentum=round(calculate_momentum(values), 1),
    )
