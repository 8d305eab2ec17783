"""Does weather explain activity? Correlations and per-condition averages."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from unicorn_index.analysis.models import (
    CorrelationResult,
    SynchronizedPoint,
    WeatherCondition,
)
from unicorn_index.analysis.stats import (
    calculate_consistency,
    calculate_correlation,
    calculate_mean,
    correlation_result,
)

logger = logging.getLogger(__name__)

MIN_DATA_POINTS = 5
MIN_CONDITION_POINTS = 2


@dataclass(frozen=True)
class ConditionStats:
    count: int
    average_score: float
    consistency: float


@dataclass(frozen=True)
class OptimalConditions:
    """Weather bucket with the highest mean activity (``unknown`` if none qualifies)."""

    condition: WeatherCondition = WeatherCondition.UNKNOWN
    average_score: float = 0.0
    data_points: int = 0


@dataclass(frozen=True)
class WeatherCorrelations:
    has_enough_data: bool
    data_points: int
    message: str = ""
    temperature: CorrelationResult | None = None
    rainfall: CorrelationResult | None = None
    condition_analysis: dict[WeatherCondition, ConditionStats] = field(default_factory=dict)
    optimal: OptimalConditions = field(default_factory=OptimalConditions)


def analyze_activity_by_conditions(
    series: Sequence[SynchronizedPoint],
) -> dict[WeatherCondition, ConditionStats]:
    """Count, mean score and consistency of activity per weather condition."""
    groups: dict[WeatherCondition, list[float]] = {}
    for point in series:
        groups.setdefault(point.weather.conditions, []).append(point.activity_score)
    return {
        condition: ConditionStats(
            count=len(scores),
            average_score=round(calculate_mean(scores), 1),
            consistency=round(calculate_consistency(scores), 2),
        )
        for condition, scores in groups.items()
    }


def find_optimal_conditions(analysis: dict[WeatherCondition, ConditionStats]) -> OptimalConditions:
    best = OptimalConditions()
    for condition, stats in analysis.items():
        if stats.count >= MIN_CONDITION_POINTS and stats.average_score > best.average_score:
            best = OptimalConditions(
                condition=condition,
                average_score=stats.average_score,
                data_points=stats.count,
            )
    return best


def find_weather_correlations(
    series: Sequence[SynchronizedPoint],
    *,
    min_data_points: int = MIN_DATA_POINTS,
) -> WeatherCorrelations:
    """
    Correlate activity scores with temperature and rainfall.

    Only days with a known temperature count. With fewer than
    ``min_data_points`` such days the result has ``has_enough_data=False``
    and a message saying how many are available.
    """
    known = [p for p in series if p.weather.max_temp is not None]
    n = len(known)
    if n < min_data_points:
        return WeatherCorrelations(
            has_enough_data=False,
            data_points=n,
            message=(
                f"Need at least {min_data_points} data points with weather information. "
                f"Currently have {n}."
            ),
        )

    scores = [p.activity_score for p in known]
    temperatures = [p.weather.max_temp for p in known]
    rainfall = [p.weather.rainfall for p in known]

    conditions = analyze_activity_by_conditions(known)
    result = WeatherCorrelations(
        has_enough_data=True,
        data_points=n,
        message=f"Analyzed {n} days with weather data",
        temperature=correlation_result(calculate_correlation(temperatures, scores)),
        rainfall=correlation_result(calculate_correlation(rainfall, scores)),
        condition_analysis=conditions,
        optimal=find_optimal_conditions(conditions),
    )
    logger.info(
        "Weather correlations over %d days: temperature r=%.3f, rainfall r=%.3f",
        n,
        result.temperature.coefficient,
        result.rainfall.coefficient,
    )
    return result
