"""
Human-readable insights from the performance, weather, company and trend analyses.

Each sub-generator returns a list of ``Insight`` records and runs only when its
analysis had enough data. ``generate_comprehensive_insights`` is the outer
boundary: it never raises, and falls back to a single low-confidence
"Analysis Error" insight if anything unexpected goes wrong.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from unicorn_index.analysis.models import PerformanceCategory, WeatherCondition
from unicorn_index.analysis.performance import (
    CompanyComparison,
    RelativePerformance,
    TrendAnalysis,
)
from unicorn_index.analysis.weather_correlation import WeatherCorrelations

logger = logging.getLogger(__name__)

MIN_DATA_POINTS = 5

TEMPERATURE_INTENSITY = 0.5
CONSISTENCY_CHAMPION_FACTOR = 1.2
FREQUENT_WINNER_PERCENT = 60
COMPANY_EXCELLENCE_RATIO = 1.2
COMPANY_GAP_RATIO = 0.8
GROWTH_POSITIVE = 10.0
GROWTH_CONCERN = -10.0
STABLE_VOLATILITY = 15.0
DATA_QUALITY_SCALE = 1000
DATA_QUALITY_CAP = 0.95


class InsightCategory(StrEnum):
    PERFORMANCE_COMPARISON = "performance_comparison"
    CONSISTENCY_ANALYSIS = "consistency_analysis"
    DOMINANCE_ANALYSIS = "dominance_analysis"
    WEATHER_CORRELATION = "weather_correlation"
    OPTIMAL_CONDITIONS = "optimal_conditions"
    COMPANY_COMPARISON = "company_comparison"
    TREND_ANALYSIS = "trend_analysis"
    DATA_QUALITY = "data_quality"
    DATA_COLLECTION = "data_collection"
    WEATHER_TRACKING = "weather_tracking"
    ERROR = "error"


class Tone(StrEnum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    MOTIVATIONAL = "motivational"
    ANALYTICAL = "analytical"
    ACTIONABLE = "actionable"
    INFORMATIONAL = "informational"
    WARNING = "warning"


@dataclass(frozen=True)
class Insight:
    """One finding for the presentation layer."""

    title: str
    message: str
    confidence: float
    category: InsightCategory
    data_points: int = 0
    tone: Tone = Tone.NEUTRAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", min(1.0, max(0.0, float(self.confidence))))
        object.__setattr__(self, "data_points", max(0, int(self.data_points)))


@dataclass(frozen=True)
class AnalysisBundle:
    """Everything the comprehensive generator looks at."""

    performance: RelativePerformance
    weather: WeatherCorrelations
    companies: Mapping[str, CompanyComparison] = field(default_factory=dict)
    trend: TrendAnalysis = field(default_factory=lambda: TrendAnalysis(has_enough_data=False))
    user_event_count: int = 0
    baseline_point_count: int = 0


def _by_confidence(insights: list[Insight]) -> list[Insight]:
    return sorted(insights, key=lambda i: i.confidence, reverse=True)


# =============================================================================
# Sub-generators
# =============================================================================


def performance_insights(performance: RelativePerformance) -> list[Insight]:
    """Headline comparison, plus consistency and outperform-day findings."""
    n = performance.data_points
    insights: list[Insight] = []

    if performance.baseline_average == 0:
        # Ratio is 0 by convention here, which says nothing about the user
        insights.append(
            Insight(
                title="No Baseline Activity",
                message=(
                    "The baseline organizations recorded no push activity in this window, "
                    "so there is nothing to compare against yet. Your average activity "
                    f"score is {performance.user_average}."
                ),
                confidence=0.5,
                category=InsightCategory.PERFORMANCE_COMPARISON,
                data_points=n,
                tone=Tone.NEUTRAL,
            )
        )
    elif performance.category is PerformanceCategory.OUTPERFORMING:
        insights.append(
            Insight(
                title="Ahead of the Baseline",
                message=(
                    f"You're coding {abs(performance.performance_percentage)}% more intensely "
                    f"than the industry baseline. Your average activity score of "
                    f"{performance.user_average} beats the baseline's "
                    f"{performance.baseline_average}."
                ),
                confidence=0.9,
                category=InsightCategory.PERFORMANCE_COMPARISON,
                data_points=n,
                tone=Tone.POSITIVE,
            )
        )
    elif performance.category is PerformanceCategory.MATCHING:
        insights.append(
            Insight(
                title="Neck and Neck",
                message=(
                    "You're keeping pace with the industry baseline. Your activity level "
                    "matches the established companies."
                ),
                confidence=0.8,
                category=InsightCategory.PERFORMANCE_COMPARISON,
                data_points=n,
                tone=Tone.NEUTRAL,
            )
        )
    else:
        insights.append(
            Insight(
                title="Room for Growth",
                message=(
                    f"The baseline is currently {abs(performance.performance_percentage)}% "
                    "ahead. Every coding session closes the gap."
                ),
                confidence=0.8,
                category=InsightCategory.PERFORMANCE_COMPARISON,
                data_points=n,
                tone=Tone.MOTIVATIONAL,
            )
        )

    baseline_consistency = performance.baseline_consistency
    if performance.user_consistency > baseline_consistency * CONSISTENCY_CHAMPION_FACTOR:
        if baseline_consistency > 0:
            better = round((performance.user_consistency / baseline_consistency - 1) * 100)
            detail = f"is {better}% better than the baseline's"
        else:
            detail = "beats the baseline's"
        insights.append(
            Insight(
                title="Consistency Champion",
                message=(
                    f"Your coding consistency ({performance.user_consistency}) {detail}. "
                    "Steady progress beats sporadic bursts."
                ),
                confidence=0.7,
                category=InsightCategory.CONSISTENCY_ANALYSIS,
                data_points=n,
                tone=Tone.POSITIVE,
            )
        )

    if performance.outperform_percentage >= FREQUENT_WINNER_PERCENT:
        insights.append(
            Insight(
                title="Frequent Winner",
                message=(
                    f"You outperformed the industry baseline on "
                    f"{performance.outperform_percentage}% of days."
                ),
                confidence=0.8,
                category=InsightCategory.DOMINANCE_ANALYSIS,
                data_points=n,
                tone=Tone.POSITIVE,
            )
        )
    return insights


def weather_insights(weather: WeatherCorrelations) -> list[Insight]:
    """Temperature and rain effects, and the best weather bucket."""
    insights: list[Insight] = []
    temperature = weather.temperature
    rainfall = weather.rainfall

    if temperature is not None and temperature.is_significant:
        hotter = temperature.coefficient > 0
        intensity = (
            "significantly" if abs(temperature.coefficient) > TEMPERATURE_INTENSITY else "moderately"
        )
        insights.append(
            Insight(
                title="Temperature Sweet Spot",
                message=(
                    f"You code {intensity} more when it's {'hotter' if hotter else 'cooler'} "
                    f"(temperature correlation {temperature.coefficient}). "
                    + ("Heat fuels your productivity." if hotter else "Cool weather keeps you focused.")
                ),
                confidence=abs(temperature.coefficient),
                category=InsightCategory.WEATHER_CORRELATION,
                data_points=weather.data_points,
                tone=Tone.ANALYTICAL,
            )
        )

    if rainfall is not None and rainfall.is_significant:
        wetter = rainfall.coefficient > 0
        insights.append(
            Insight(
                title="Rain Effect",
                message=(
                    f"Rainy days make you code {'more' if wetter else 'less'} "
                    f"(rainfall correlation {rainfall.coefficient}). You are most active on "
                    f"{'rainy' if wetter else 'dry'} days."
                ),
                confidence=abs(rainfall.coefficient),
                category=InsightCategory.WEATHER_CORRELATION,
                data_points=weather.data_points,
                tone=Tone.ANALYTICAL,
            )
        )

    optimal = weather.optimal
    if optimal.condition is not WeatherCondition.UNKNOWN:
        insights.append(
            Insight(
                title="Your Coding Weather",
                message=(
                    f"You peak during {optimal.condition.value.replace('_', ' ')} weather with "
                    f"an average activity score of {optimal.average_score}. Plan intense "
                    "coding sessions accordingly."
                ),
                confidence=0.7,
                category=InsightCategory.OPTIMAL_CONDITIONS,
                data_points=optimal.data_points,
                tone=Tone.ACTIONABLE,
            )
        )
    return insights


def company_insights(companies: Mapping[str, CompanyComparison]) -> list[Insight]:
    """Best and worst per-company ratios, when they stand out."""
    if not companies:
        return []
    best_name, best = max(companies.items(), key=lambda item: item[1].ratio)
    worst_name, worst = min(companies.items(), key=lambda item: item[1].ratio)
    insights: list[Insight] = []

    if best.ratio > COMPANY_EXCELLENCE_RATIO:
        insights.append(
            Insight(
                title="Company Benchmark Excellence",
                message=(
                    f"You're outperforming {best_name} by {(best.ratio - 1) * 100:.1f}%, "
                    "above the activity level of an established company."
                ),
                confidence=0.8,
                category=InsightCategory.COMPANY_COMPARISON,
                data_points=len(companies),
                tone=Tone.POSITIVE,
            )
        )
    if worst.ratio < COMPANY_GAP_RATIO:
        insights.append(
            Insight(
                title="Benchmark Gap",
                message=(
                    f"Your activity level is {(1 - worst.ratio) * 100:.1f}% below "
                    f"{worst_name}'s. More frequent daily commits would close the gap."
                ),
                confidence=0.7,
                category=InsightCategory.COMPANY_COMPARISON,
                data_points=len(companies),
                tone=Tone.ACTIONABLE,
            )
        )
    return insights


def trend_insights(trend: TrendAnalysis) -> list[Insight]:
    insights: list[Insight] = []
    n = trend.data_points
    if trend.growth_rate > GROWTH_POSITIVE:
        insights.append(
            Insight(
                title="Positive Growth Trajectory",
                message=(
                    f"Your activity grew {trend.growth_rate:.1f}% over the analysis period."
                ),
                confidence=0.8,
                category=InsightCategory.TREND_ANALYSIS,
                data_points=n,
                tone=Tone.POSITIVE,
            )
        )
    elif trend.growth_rate < GROWTH_CONCERN:
        insights.append(
            Insight(
                title="Declining Activity",
                message=(
                    f"Activity decreased by {abs(trend.growth_rate):.1f}% over the analysis "
                    "period. Consider reviewing workload balance and project engagement."
                ),
                confidence=0.7,
                category=InsightCategory.TREND_ANALYSIS,
                data_points=n,
                tone=Tone.WARNING,
            )
        )

    if trend.volatility < STABLE_VOLATILITY:
        insights.append(
            Insight(
                title="Stable Work Pattern",
                message=(
                    f"Low volatility ({trend.volatility:.1f}) indicates consistent daily "
                    "coding habits."
                ),
                confidence=0.8,
                category=InsightCategory.TREND_ANALYSIS,
                data_points=n,
                tone=Tone.POSITIVE,
            )
        )
    return insights


def data_quality_insight(user_event_count: int, baseline_point_count: int) -> Insight:
    total = user_event_count + baseline_point_count
    confidence = min(DATA_QUALITY_CAP, total / DATA_QUALITY_SCALE)
    return Insight(
        title="Analysis Confidence Level",
        message=(
            f"This analysis is based on {user_event_count} user events and "
            f"{baseline_point_count} baseline data points. Statistical confidence level: "
            f"{round(confidence * 100)}%."
        ),
        confidence=confidence,
        category=InsightCategory.DATA_QUALITY,
        data_points=total,
        tone=Tone.INFORMATIONAL,
    )


def encouraging_insights(
    performance: RelativePerformance,
    weather: WeatherCorrelations,
    min_data_points: int = MIN_DATA_POINTS,
) -> list[Insight]:
    """Progress messages for analyses that are still short of data."""
    insights: list[Insight] = []
    if not performance.has_enough_data:
        missing = max(0, min_data_points - performance.data_points)
        insights.append(
            Insight(
                title="Building Your Profile",
                message=(
                    f"Keep coding! {missing} more days of activity unlock your "
                    "baseline comparison."
                ),
                confidence=1.0,
                category=InsightCategory.DATA_COLLECTION,
                data_points=performance.data_points,
                tone=Tone.MOTIVATIONAL,
            )
        )
    if not weather.has_enough_data:
        missing = max(0, min_data_points - weather.data_points)
        insights.append(
            Insight(
                title="Weather Patterns Loading",
                message=(
                    f"{missing} more days with weather data and we'll show how weather "
                    "affects your productivity."
                ),
                confidence=1.0,
                category=InsightCategory.WEATHER_TRACKING,
                data_points=weather.data_points,
                tone=Tone.INFORMATIONAL,
            )
        )
    return insights


# =============================================================================
# Entry points
# =============================================================================


def generate_comprehensive_insights(bundle: AnalysisBundle) -> list[Insight]:
    """
    Run every sub-generator whose analysis has enough data.

    Returns:
        Insights sorted by descending confidence. On any unexpected error a
        single "Analysis Error" insight with confidence 0.1.
    """
    try:
        insights: list[Insight] = []
        if bundle.performance.has_enough_data:
            insights.extend(performance_insights(bundle.performance))
        if bundle.weather.has_enough_data:
            insights.extend(weather_insights(bundle.weather))
        if bundle.companies:
            insights.extend(company_insights(bundle.companies))
        if bundle.trend.has_enough_data:
            insights.extend(trend_insights(bundle.trend))
        insights.append(data_quality_insight(bundle.user_event_count, bundle.baseline_point_count))
    except Exception:  # noqa: BLE001
        logger.exception("Failed to generate comprehensive insights")
        return [
            Insight(
                title="Analysis Error",
                message="Unable to generate insights due to a data processing error.",
                confidence=0.1,
                category=InsightCategory.ERROR,
                data_points=0,
                tone=Tone.WARNING,
            )
        ]
    logger.info("Generated %d comprehensive insights", len(insights))
    return _by_confidence(insights)


def generate_personalized_insights(
    performance: RelativePerformance,
    weather: WeatherCorrelations,
) -> list[Insight]:
    """Performance and weather insights, plus encouragement where data is short."""
    insights: list[Insight] = []
    if performance.has_enough_data:
        insights.extend(performance_insights(performance))
    if weather.has_enough_data:
        insights.extend(weather_insights(weather))
    insights.extend(encouraging_insights(performance, weather))
    return _by_confidence(insights)
