"""The analysis report and its JSON-compatible form for the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from unicorn_index.analysis.insights import Insight
    from unicorn_index.analysis.models import (
        CorrelationResult,
        DailyActivityPoint,
        SynchronizedPoint,
    )
    from unicorn_index.analysis.performance import (
        CompanyComparison,
        RelativePerformance,
        TrendAnalysis,
    )
    from unicorn_index.analysis.weather_correlation import WeatherCorrelations
    from unicorn_index.datasources.github.models import FetchOutcome


@dataclass
class AnalysisReport:
    """Everything one analysis run produced."""

    username: str
    start: str
    end: str
    series: list[SynchronizedPoint]
    baseline: list[DailyActivityPoint]
    performance: RelativePerformance
    weather: WeatherCorrelations
    trend: TrendAnalysis
    insights: list[Insight]
    companies: Mapping[str, CompanyComparison] = field(default_factory=dict)
    baseline_errors: list[str] = field(default_factory=list)
    outcome: FetchOutcome | None = None
    user_event_count: int = 0


def _correlation(result: CorrelationResult | None) -> dict[str, Any] | None:
    if result is None:
        return None
    return {
        "coefficient": result.coefficient,
        "strength": str(result.strength),
        "isSignificant": result.is_significant,
    }


def _point(point: SynchronizedPoint) -> dict[str, Any]:
    return {
        "date": point.date,
        "commits": point.commits,
        "activityScore": point.activity_score,
        "source": str(point.source),
        "weather": {
            "maxTemp": point.weather.max_temp,
            "rainfall": point.weather.rainfall,
            "conditions": str(point.weather.conditions),
        },
    }


def _performance(perf: RelativePerformance) -> dict[str, Any]:
    if not perf.has_enough_data:
        return {"hasEnoughData": False, "dataPoints": perf.data_points, "message": perf.message}
    return {
        "hasEnoughData": True,
        "dataPoints": perf.data_points,
        "userAverage": perf.user_average,
        "baselineAverage": perf.baseline_average,
        "performanceRatio": perf.performance_ratio,
        "performancePercentage": perf.performance_percentage,
        "category": str(perf.category),
        "userConsistency": perf.user_consistency,
        "baselineConsistency": perf.baseline_consistency,
        "outperformDays": perf.outperform_days,
        "outperformPercentage": perf.outperform_percentage,
        "percentile": perf.percentile,
    }


def _correlations(weather: WeatherCorrelations) -> dict[str, Any]:
    return {
        "hasEnoughData": weather.has_enough_data,
        "dataPoints": weather.data_points,
        "message": weather.message,
        "temperature": _correlation(weather.temperature),
        "rainfall": _correlation(weather.rainfall),
        "conditions": {
            str(condition): {
                "count": stats.count,
                "averageScore": stats.average_score,
                "consistency": stats.consistency,
            }
            for condition, stats in weather.condition_analysis.items()
        },
        "optimal": {
            "condition": str(weather.optimal.condition),
            "averageScore": weather.optimal.average_score,
            "dataPoints": weather.optimal.data_points,
        },
    }


def _fetch(report: AnalysisReport) -> dict[str, Any]:
    outcome = report.outcome
    if outcome is None:
        return {"requested": [], "successCount": 0, "errorCount": 0, "errors": {}}
    return {
        "requested": list(outcome.requested),
        "successCount": outcome.success_count,
        "errorCount": outcome.error_count,
        "errors": {
            org: {"message": err.message, "kind": err.kind, "status": err.status}
            for org, err in outcome.errors.items()
        },
    }


def report_to_dict(report: AnalysisReport) -> dict[str, Any]:
    """
    JSON-compatible view of a report (camelCase keys).

    Top-level keys: ``series``, ``baseline``, ``correlations``,
    ``performance``, ``companies``, ``trend``, ``insights``, ``fetch``.
    """
    return {
        "username": report.username,
        "range": {"start": report.start, "end": report.end},
        "series": [_point(p) for p in report.series],
        "baseline": {
            "data": [
                {
                    "date": p.date,
                    "commits": p.commits,
                    "events": p.events,
                    "activityScore": p.activity_score,
                    "orgCount": p.org_count,
                }
                for p in report.baseline
            ],
            "errors": list(report.baseline_errors),
        },
        "correlations": _correlations(report.weather),
        "performance": _performance(report.performance),
        "companies": {
            org: {"average": c.average, "ratio": c.ratio, "percentage": c.percentage}
            for org, c in report.companies.items()
        },
        "trend": {
            "hasEnoughData": report.trend.has_enough_data,
            "growthRate": report.trend.growth_rate,
            "volatility": report.trend.volatility,
            "momentum": report.trend.momentum,
        },
        "insights": [
            {
                "title": i.title,
                "message": i.message,
                "confidence": i.confidence,
                "category": str(i.category),
                "tone": str(i.tone),
                "dataPoints": i.data_points,
            }
            for i in report.insights
        ],
        "fetch": _fetch(report),
    }
