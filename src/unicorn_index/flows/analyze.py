"""
Prefect flow that analyzes one GitHub user against the industry baseline.

Fetches the user's push events, the baseline organizations' push events and
the local daily weather, then runs the processing and insight pipeline.

Run locally:
    python -m unicorn_index.flows.analyze octocat

Run with Prefect dashboard:
    prefect server start &
    python -m unicorn_index.flows.analyze octocat
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from prefect import flow, task

from unicorn_index.analysis.activity import (
    aggregate_org_data,
    fill_missing_dates,
    normalize_to_activity_score,
    process_user_events,
)
from unicorn_index.analysis.activity_weather import synchronize_activity_and_weather
from unicorn_index.analysis.insights import AnalysisBundle, generate_comprehensive_insights
from unicorn_index.analysis.models import ActivitySource
from unicorn_index.analysis.performance import (
    calculate_company_comparisons,
    calculate_relative_performance,
    calculate_trend_analysis,
)
from unicorn_index.analysis.serialization import AnalysisReport
from unicorn_index.analysis.weather_correlation import find_weather_correlations
from unicorn_index.config import MAX_ANALYSIS_DAYS, get_settings
from unicorn_index.datasources import github, weather
from unicorn_index.datasources.github.models import FetchOutcome
from unicorn_index.errors import FetchError, ValidationError
from unicorn_index.schemas import DailyWeather, PushEvent
from unicorn_index.services.http import ApiClient

# Shared client: one session and one rate limiter for every request in the run
client = ApiClient.from_settings(get_settings())


@task(name="fetch-user-events")
def fetch_user_events(username: str) -> list[PushEvent]:
    """Fetch the user's recent push events."""
    settings = get_settings()
    return github.fetch_user_events(
        client,
        username,
        max_pages=settings.event_pages,
        base_url=settings.github_api_url,
    )


@task(name="fetch-org-events")
def fetch_org_events(orgs: Sequence[str]) -> FetchOutcome:
    """Fetch baseline organizations concurrently; raises only if every one fails."""
    settings = get_settings()
    return github.fetch_multiple_org_events(
        client,
        orgs,
        max_workers=settings.max_workers,
        max_pages=settings.event_pages,
        base_url=settings.github_api_url,
    )


@task(name="fetch-weather")
def fetch_weather(start: str, end: str) -> DailyWeather | None:
    """Fetch daily weather for the analysis window. Failures degrade to None."""
    settings = get_settings()
    try:
        return weather.fetch_weather_data(
            client,
            start,
            end,
            settings.lat,
            settings.lon,
            timezone=settings.timezone,
            api_url=settings.weather_api_url,
        )
    except FetchError as exc:
        print(f"Weather unavailable, continuing without it: {exc}")
        return None


def build_analysis(
    user_events: Sequence[PushEvent],
    outcome: FetchOutcome | None,
    daily_weather: DailyWeather | None,
    start: str,
    end: str,
    *,
    username: str = "",
    normalization_max: float | None = None,
) -> AnalysisReport:
    """
    Run the processing and insight pipeline over fetched data.

    Both series are gap-filled over ``[start, end]`` and normalized (to
    ``normalization_max`` when given, otherwise each to its own maximum)
    before they are compared.
    """
    user_series = normalize_to_activity_score(
        fill_missing_dates(
            process_user_events(list(user_events)), start, end, source=ActivitySource.USER
        ),
        normalization_max,
    )

    events_by_source = outcome.results if outcome is not None else {}
    baseline = aggregate_org_data(events_by_source)
    baseline_series = normalize_to_activity_score(
        fill_missing_dates(baseline.data, start, end, source=ActivitySource.BASELINE),
        normalization_max,
    )

    series = synchronize_activity_and_weather(user_series, daily_weather)
    performance = calculate_relative_performance(user_series, baseline_series)
    correlations = find_weather_correlations(series)
    companies = calculate_company_comparisons(user_series, events_by_source)
    trend = calculate_trend_analysis(user_series)

    insights = generate_comprehensive_insights(
        AnalysisBundle(
            performance=performance,
            weather=correlations,
            companies=companies,
            trend=trend,
            user_event_count=len(user_events),
            baseline_point_count=len(baseline_series),
        )
    )

    return AnalysisReport(
        username=username,
        start=start,
        end=end,
        series=series,
        baseline=baseline_series,
        performance=performance,
        weather=correlations,
        trend=trend,
        insights=insights,
        companies=companies,
        baseline_errors=baseline.errors,
        outcome=outcome,
        user_event_count=len(user_events),
    )


@task(name="analyze-data")
def analyze_data(
    username: str,
    user_events: list[PushEvent],
    outcome: FetchOutcome,
    daily_weather: DailyWeather | None,
    start: str,
    end: str,
) -> AnalysisReport:
    """Process fetched data into a report."""
    return build_analysis(
        user_events,
        outcome,
        daily_weather,
        start,
        end,
        username=username,
        normalization_max=get_settings().normalization_max,
    )


@flow(name="analyze-user", log_prints=True)
def analyze_user(
    username: str,
    orgs: Sequence[str] | None = None,
    days: int | None = None,
) -> AnalysisReport:
    """
    Analyze one user's activity against the baseline organizations.

    Args:
        username: GitHub login to analyze.
        orgs: Baseline organizations (default: settings.baseline_orgs).
        days: Length of the analysis window (default: settings.analysis_days).

    Raises:
        ValidationError: ``days`` is outside 1..MAX_ANALYSIS_DAYS (checked
            before anything is fetched).
    """
    settings = get_settings()
    orgs = list(orgs or settings.baseline_orgs)
    days = days if days is not None else settings.analysis_days
    if not 1 <= days <= MAX_ANALYSIS_DAYS:
        msg = f"days must be between 1 and {MAX_ANALYSIS_DAYS}, got {days}"
        raise ValidationError(msg)
    start, end = weather.default_date_range(days)

    print(f"Fetching push events for {username}...")
    user_events = fetch_user_events(username)
    print(f"Found {len(user_events)} push events for {username}")

    print(f"Fetching baseline from {len(orgs)} organizations...")
    outcome = fetch_org_events(orgs)
    print(github.summarize_outcome(outcome).message)

    print(f"Fetching weather for {start} to {end}...")
    daily_weather = fetch_weather(start, end)

    report = analyze_data(username, user_events, outcome, daily_weather, start, end)
    print(f"Generated {len(report.insights)} insights over {len(report.series)} days")
    return report


if __name__ == "__main__":
    result = analyze_user(sys.argv[1] if len(sys.argv) > 1 else "octocat")
    for insight in result.insights:
        print(f"[{insight.confidence:.2f}] {insight.title}: {insight.message}")
