"""Tests for joining daily activity with daily weather."""

from __future__ import annotations

from typing import Any

import pytest

from unicorn_index.analysis.activity_weather import (
    determine_weather_conditions,
    synchronize_activity_and_weather,
    weather_observations,
)
from unicorn_index.analysis.models import (
    ActivitySource,
    DailyActivityPoint,
    WeatherCondition,
)
from unicorn_index.schemas import DailyWeather


def activity(day: str, score: float = 50.0) -> DailyActivityPoint:
    return DailyActivityPoint(date=day, commits=1, events=1, activity_score=score)


def daily(**arrays: list[Any]) -> DailyWeather:
    return DailyWeather(**arrays)


class TestDetermineWeatherConditions:
    @pytest.mark.parametrize(
        ("max_temp", "rainfall", "expected"),
        [
            (None, 20.0, WeatherCondition.UNKNOWN),
            (30.0, 12.0, WeatherCondition.HEAVY_RAIN),
            (40.0, 10.5, WeatherCondition.HEAVY_RAIN),
            (25.0, 10.0, WeatherCondition.LIGHT_RAIN),
            (25.0, 2.5, WeatherCondition.LIGHT_RAIN),
            (36.0, 2.0, WeatherCondition.HOT),
            (35.0, 0.0, WeatherCondition.WARM),
            (28.5, 0.0, WeatherCondition.WARM),
            (28.0, 0.0, WeatherCondition.PLEASANT),
            (20.5, 0.0, WeatherCondition.PLEASANT),
            (20.0, 0.0, WeatherCondition.COOL),
            (5.0, None, WeatherCondition.COOL),
        ],
    )
    def test_buckets(
        self, max_temp: float | None, rainfall: float | None, expected: WeatherCondition
    ) -> None:
        assert determine_weather_conditions(max_temp, rainfall) is expected


class TestWeatherObservations:
    def test_builds_one_per_day(self) -> None:
        obs = weather_observations(
            daily(
                time=["2024-01-01", "2024-01-02"],
                temperature_2m_max=[29.0, 24.0],
                precipitation_sum=[0.0, 15.0],
            )
        )
        assert [o.conditions for o in obs] == [WeatherCondition.WARM, WeatherCondition.HEAVY_RAIN]

    def test_bad_values_fall_back(self) -> None:
        obs = weather_observations(
            daily(
                time=["2024-01-01", "2024-01-02", "2024-01-03"],
                temperature_2m_max=["hot", None],
                precipitation_sum=[-3.0, "wet", None],
            )
        )
        assert [o.max_temp for o in obs] == [None, None, None]
        assert [o.rainfall for o in obs] == [0.0, 0.0, 0.0]
        assert all(o.conditions is WeatherCondition.UNKNOWN for o in obs)

    def test_bad_dates_skipped(self) -> None:
        obs = weather_observations(
            daily(time=["2024-01-01", "Jan 2", None], temperature_2m_max=[25.0, 25.0, 25.0])
        )
        assert [o.date for o in obs] == ["2024-01-01"]


class TestSynchronizeActivityAndWeather:
    def test_joins_on_date(self) -> None:
        weather = daily(
            time=["2024-01-01", "2024-01-02"],
            temperature_2m_max=[30.0, 22.0],
            precipitation_sum=[12.0, 0.0],
        )
        synced = synchronize_activity_and_weather(
            [activity("2024-01-01", 80), activity("2024-01-02", 40)], weather
        )
        assert [s.date for s in synced] == ["2024-01-01", "2024-01-02"]
        assert synced[0].weather.conditions is WeatherCondition.HEAVY_RAIN
        assert synced[0].activity_score == 80
        assert synced[1].weather.max_temp == 22.0

    def test_union_of_dates_with_placeholders(self) -> None:
        weather = daily(
            time=["2024-01-02", "2024-01-03"],
            temperature_2m_max=[25.0, 26.0],
            precipitation_sum=[0.0, 0.0],
        )
        synced = synchronize_activity_and_weather(
            [activity("2024-01-03"), activity("2024-01-01")], weather
        )
        assert [s.date for s in synced] == ["2024-01-01", "2024-01-02", "2024-01-03"]

        no_weather, weather_only, both = synced
        assert no_weather.weather.conditions is WeatherCondition.UNKNOWN
        assert no_weather.weather.max_temp is None
        assert weather_only.source is ActivitySource.WEATHER_ONLY
        assert weather_only.commits == 0
        assert weather_only.activity_score == 0
        assert both.source is ActivitySource.USER
        assert all(s.weather is not None for s in synced)

    def test_no_weather(self) -> None:
        synced = synchronize_activity_and_weather([activity("2024-01-01")], None)
        assert len(synced) == 1
        assert synced[0].weather.conditions is WeatherCondition.UNKNOWN
        assert synced[0].weather.rainfall == 0

    def test_raw_api_response_accepted(self) -> None:
        raw = {"daily": {"time": ["2024-01-01"], "temperature_2m_max": [21.0]}}
        synced = synchronize_activity_and_weather([activity("2024-01-01")], raw)
        assert synced[0].weather.conditions is WeatherCondition.PLEASANT

    @pytest.mark.parametrize("bad", [{"daily": "nope"}, {"unrelated": 1}, {"time": 5}])
    def test_invalid_weather_degrades(self, bad: dict[str, Any]) -> None:
        synced = synchronize_activity_and_weather([activity("2024-01-01")], bad)
        assert len(synced) == 1
        assert synced[0].weather.conditions is WeatherCondition.UNKNOWN

    def test_empty_inputs(self) -> None:
        assert synchronize_activity_and_weather([], None) == []
