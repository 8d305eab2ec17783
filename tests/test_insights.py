"""Tests for insight generation."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import patch

import pytest

from unicorn_index.analysis.insights import (
    AnalysisBundle,
    Insight,
    InsightCategory,
    Tone,
    company_insights,
    data_quality_insight,
    generate_comprehensive_insights,
    generate_personalized_insights,
    performance_insights,
    trend_insights,
    weather_insights,
)
from unicorn_index.analysis.models import PerformanceCategory, WeatherCondition
from unicorn_index.analysis.performance import (
    CompanyComparison,
    RelativePerformance,
    TrendAnalysis,
)
from unicorn_index.analysis.stats import correlation_result
from unicorn_index.analysis.weather_correlation import OptimalConditions, WeatherCorrelations

PERFORMANCE = RelativePerformance(
    has_enough_data=True,
    data_points=30,
    user_average=60.0,
    baseline_average=50.0,
    performance_ratio=1.2,
    performance_percentage=20,
    category=PerformanceCategory.OUTPERFORMING,
    user_consistency=0.5,
    baseline_consistency=0.5,
    outperform_days=15,
    outperform_percentage=50,
)

WEATHER = WeatherCorrelations(
    has_enough_data=True,
    data_points=30,
    temperature=correlation_result(0.1),
    rainfall=correlation_result(0.1),
)

NOT_ENOUGH_PERFORMANCE = RelativePerformance(has_enough_data=False, data_points=2)
NOT_ENOUGH_WEATHER = WeatherCorrelations(has_enough_data=False, data_points=3)


def titles(insights: list[Insight]) -> list[str]:
    return [i.title for i in insights]


class TestInsight:
    def test_confidence_clamped(self) -> None:
        high = Insight("t", "m", 1.7, InsightCategory.DATA_QUALITY)
        low = Insight("t", "m", -0.2, InsightCategory.DATA_QUALITY)
        assert high.confidence == 1.0
        assert low.confidence == 0.0

    def test_data_points_non_negative(self) -> None:
        assert Insight("t", "m", 0.5, InsightCategory.DATA_QUALITY, data_points=-3).data_points == 0


class TestPerformanceInsights:
    def test_outperforming(self) -> None:
        insights = performance_insights(PERFORMANCE)
        assert titles(insights) == ["Ahead of the Baseline"]
        assert insights[0].confidence == 0.9
        assert insights[0].tone is Tone.POSITIVE
        assert "20%" in insights[0].message

    def test_matching(self) -> None:
        perf = replace(PERFORMANCE, category=PerformanceCategory.MATCHING)
        insight = performance_insights(perf)[0]
        assert insight.title == "Neck and Neck"
        assert insight.confidence == 0.8

    def test_underperforming(self) -> None:
        perf = replace(
            PERFORMANCE, category=PerformanceCategory.UNDERPERFORMING, performance_percentage=-40
        )
        insight = performance_insights(perf)[0]
        assert insight.title == "Room for Growth"
        assert insight.tone is Tone.MOTIVATIONAL
        assert "40%" in insight.message

    def test_zero_baseline_is_not_reported_as_a_gap(self) -> None:
        perf = replace(
            PERFORMANCE,
            baseline_average=0.0,
            performance_ratio=0.0,
            performance_percentage=-100,
            category=PerformanceCategory.UNDERPERFORMING,
        )
        headline = performance_insights(perf)[0]
        assert headline.title == "No Baseline Activity"
        assert headline.tone is Tone.NEUTRAL
        assert "60.0" in headline.message
        assert "ahead" not in headline.message
        assert "Room for Growth" not in titles(performance_insights(perf))

    def test_consistency_champion(self) -> None:
        perf = replace(PERFORMANCE, user_consistency=0.9, baseline_consistency=0.5)
        insight = next(i for i in performance_insights(perf) if i.title == "Consistency Champion")
        assert insight.confidence == 0.7
        assert "80% better" in insight.message

    def test_consistency_needs_twenty_percent_margin(self) -> None:
        perf = replace(PERFORMANCE, user_consistency=0.6, baseline_consistency=0.5)
        assert "Consistency Champion" not in titles(performance_insights(perf))

    def test_frequent_winner(self) -> None:
        perf = replace(PERFORMANCE, outperform_percentage=60)
        assert "Frequent Winner" in titles(performance_insights(perf))

    def test_no_city_names(self) -> None:
        for category in PerformanceCategory:
            for insight in performance_insights(replace(PERFORMANCE, category=category)):
                assert "Bangalore" not in insight.message


class TestWeatherInsights:
    def test_nothing_significant(self) -> None:
        assert weather_insights(WEATHER) == []

    def test_strong_temperature(self) -> None:
        weather = replace(WEATHER, temperature=correlation_result(-0.62))
        (insight,) = weather_insights(weather)
        assert insight.title == "Temperature Sweet Spot"
        assert insight.confidence == pytest.approx(0.62)
        assert "significantly" in insight.message
        assert "cooler" in insight.message

    def test_moderate_temperature(self) -> None:
        weather = replace(WEATHER, temperature=correlation_result(0.4))
        (insight,) = weather_insights(weather)
        assert "moderately" in insight.message
        assert "hotter" in insight.message

    def test_rain_effect(self) -> None:
        weather = replace(WEATHER, rainfall=correlation_result(0.35))
        (insight,) = weather_insights(weather)
        assert insight.title == "Rain Effect"
        assert insight.category is InsightCategory.WEATHER_CORRELATION
        assert insight.confidence == pytest.approx(0.35)

    def test_optimal_conditions(self) -> None:
        weather = replace(
            WEATHER,
            optimal=OptimalConditions(
                condition=WeatherCondition.LIGHT_RAIN, average_score=72.5, data_points=4
            ),
        )
        (insight,) = weather_insights(weather)
        assert insight.confidence == 0.7
        assert "light rain" in insight.message
        assert insight.data_points == 4


class TestCompanyInsights:
    def test_excellence_and_gap(self) -> None:
        insights = company_insights(
            {
                "alpha": CompanyComparison(average=40, ratio=1.5, percentage=100),
                "beta": CompanyComparison(average=90, ratio=0.5, percentage=50),
            }
        )
        excellence, gap = insights
        assert excellence.title == "Company Benchmark Excellence"
        assert "alpha" in excellence.message
        assert "50.0%" in excellence.message
        assert excellence.confidence == 0.8
        assert "beta" in gap.message
        assert gap.confidence == 0.7

    def test_within_band(self) -> None:
        assert company_insights({"a": CompanyComparison(50, 1.0, 100)}) == []

    def test_empty(self) -> None:
        assert company_insights({}) == []


class TestTrendInsights:
    def test_growth_and_stability(self) -> None:
        trend = TrendAnalysis(has_enough_data=True, data_points=30, growth_rate=25.0, volatility=8.0)
        assert titles(trend_insights(trend)) == ["Positive Growth Trajectory", "Stable Work Pattern"]

    def test_decline(self) -> None:
        trend = TrendAnalysis(has_enough_data=True, data_points=30, growth_rate=-30.0, volatility=40)
        (insight,) = trend_insights(trend)
        assert insight.title == "Declining Activity"
        assert insight.confidence == 0.7

    def test_flat_and_volatile(self) -> None:
        trend = TrendAnalysis(has_enough_data=True, data_points=30, growth_rate=5.0, volatility=15.0)
        assert trend_insights(trend) == []


class TestDataQualityInsight:
    def test_confidence_scales_with_points(self) -> None:
        insight = data_quality_insight(100, 150)
        assert insight.confidence == 0.25
        assert insight.data_points == 250

    def test_confidence_capped(self) -> None:
        assert data_quality_insight(5000, 5000).confidence == 0.95


class TestGenerateComprehensiveInsights:
    def test_sorted_by_confidence(self) -> None:
        bundle = AnalysisBundle(
            performance=PERFORMANCE,
            weather=replace(WEATHER, rainfall=correlation_result(0.45)),
            companies={"alpha": CompanyComparison(40, 1.5, 100)},
            trend=TrendAnalysis(has_enough_data=True, data_points=30, growth_rate=20, volatility=5),
            user_event_count=100,
            baseline_point_count=30,
        )
        insights = generate_comprehensive_insights(bundle)
        confidences = [i.confidence for i in insights]
        assert confidences == sorted(confidences, reverse=True)
        assert insights[0].title == "Ahead of the Baseline"
        assert insights[-1].category is InsightCategory.DATA_QUALITY
        assert {i.category for i in insights} >= {
            InsightCategory.PERFORMANCE_COMPARISON,
            InsightCategory.WEATHER_CORRELATION,
            InsightCategory.COMPANY_COMPARISON,
            InsightCategory.TREND_ANALYSIS,
        }

    def test_skips_analyses_without_data(self) -> None:
        bundle = AnalysisBundle(performance=NOT_ENOUGH_PERFORMANCE, weather=NOT_ENOUGH_WEATHER)
        insights = generate_comprehensive_insights(bundle)
        assert [i.category for i in insights] == [InsightCategory.DATA_QUALITY]

    def test_unexpected_error_becomes_single_insight(self) -> None:
        bundle = AnalysisBundle(performance=PERFORMANCE, weather=WEATHER)
        with patch(
            "unicorn_index.analysis.insights.performance_insights",
            side_effect=ZeroDivisionError("boom"),
        ):
            insights = generate_comprehensive_insights(bundle)
        assert len(insights) == 1
        assert insights[0].title == "Analysis Error"
        assert insights[0].confidence == 0.1
        assert insights[0].category is InsightCategory.ERROR


class TestGeneratePersonalizedInsights:
    def test_encouragement_when_data_short(self) -> None:
        insights = generate_personalized_insights(NOT_ENOUGH_PERFORMANCE, NOT_ENOUGH_WEATHER)
        assert titles(insights) == ["Building Your Profile", "Weather Patterns Loading"]
        assert "3 more days" in insights[0].message
        assert "2 more days" in insights[1].message
        assert all(i.confidence == 1.0 for i in insights)

    def test_full_data_has_no_encouragement(self) -> None:
        insights = generate_personalized_insights(PERFORMANCE, WEATHER)
        assert titles(insights) == ["Ahead of the Baseline"]
