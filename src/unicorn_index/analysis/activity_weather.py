"""Join daily activity with daily weather.

Weather is optional: when it is missing or malformed every activity day
still comes back, carrying the unknown-weather sentinel.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from unicorn_index.analysis.models import (
    ActivitySource,
    DailyActivityPoint,
    SynchronizedPoint,
    WeatherCondition,
    WeatherObservation,
)
from unicorn_index.errors import AggregationError, ValidationError
from unicorn_index.schemas import DailyWeather

logger = logging.getLogger(__name__)

# Thresholds (mm of rain, degrees C max temperature)
HEAVY_RAIN_MM = 10.0
LIGHT_RAIN_MM = 2.0
HOT_C = 35.0
WARM_C = 28.0
PLEASANT_C = 20.0


def determine_weather_conditions(
    max_temp: float | None, rainfall: float | None
) -> WeatherCondition:
    """Bucket a day's weather. Rain dominates temperature, so a 30 C day with
    12 mm of rain is ``heavy_rain``.
    """
    if max_temp is None:
        return WeatherCondition.UNKNOWN
    rain = rainfall or 0.0
    if rain > HEAVY_RAIN_MM:
        return WeatherCondition.HEAVY_RAIN
    if rain > LIGHT_RAIN_MM:
        return WeatherCondition.LIGHT_RAIN
    if max_temp > HOT_C:
        return WeatherCondition.HOT
    if max_temp > WARM_C:
        return WeatherCondition.WARM
    if max_temp > PLEASANT_C:
        return WeatherCondition.PLEASANT
    return WeatherCondition.COOL


def _number_at(values: list[Any], index: int) -> float | None:
    """Finite number at ``index`` or None."""
    if index >= len(values):
        return None
    value = values[index]
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def weather_observations(daily: DailyWeather) -> list[WeatherObservation]:
    """Convert Open-Meteo parallel arrays into one observation per day.

    A bad temperature becomes None and a bad (or negative) rainfall 0, each
    with a warning. Entries whose date is unusable are skipped.
    """
    observations: list[WeatherObservation] = []
    for index, day in enumerate(daily.time):
        max_temp = _number_at(daily.temperature_2m_max, index)
        if max_temp is None and index < len(daily.temperature_2m_max):
            if daily.temperature_2m_max[index] is not None:
                logger.warning("Invalid temperature at index %d, using null", index)

        rainfall = _number_at(daily.precipitation_sum, index)
        if rainfall is None or rainfall < 0:
            if index < len(daily.precipitation_sum) and daily.precipitation_sum[index] is not None:
                logger.warning("Invalid rainfall at index %d, using 0", index)
            rainfall = 0.0

        try:
            observations.append(
                WeatherObservation(
                    date=day,
                    max_temp=max_temp,
                    rainfall=rainfall,
                    conditions=determine_weather_conditions(max_temp, rainfall),
                )
            )
        except AggregationError as exc:
            logger.warning("Skipping weather entry %d: %s", index, exc)
    return observations


def _coerce_weather(weather: DailyWeather | Mapping[str, Any] | None) -> list[WeatherObservation]:
    if weather is None:
        return []
    if isinstance(weather, DailyWeather):
        return weather_observations(weather)
    try:
        # Accept either the full API response or its bare ``daily`` block
        payload = weather if "daily" in weather else {"daily": weather}
        return weather_observations(DailyWeather.from_api(payload))
    except (TypeError, ValidationError) as exc:
        logger.warning("Ignoring invalid weather data: %s", exc)
        return []


def synchronize_activity_and_weather(
    activity: Sequence[DailyActivityPoint],
    weather: DailyWeather | Mapping[str, Any] | None,
) -> list[SynchronizedPoint]:
    """
    Outer-join activity and weather on date.

    Every activity day gets its weather, or ``WeatherObservation.unknown`` when
    there is none. Weather days without activity become zero-activity
    ``weather-only`` points. Output is sorted by date.

    Args:
        activity: Daily activity points (normally already normalized).
        weather: ``DailyWeather``, a raw Open-Meteo response, or None.

    Returns:
        One SynchronizedPoint per date in the union of both inputs.
    """
    observations = _coerce_weather(weather)
    if not observations:
        logger.warning("No weather data available, returning activity with unknown weather")
    by_date = {obs.date: obs for obs in observations}

    synced: dict[str, SynchronizedPoint] = {}
    for point in activity:
        synced[point.date] = SynchronizedPoint(
            activity=point,
            weather=by_date.get(point.date) or WeatherObservation.unknown(point.date),
        )

    for day, obs in by_date.items():
        if day not in synced:
            synced[day] = SynchronizedPoint(
                activity=DailyActivityPoint.placeholder(day, ActivitySource.WEATHER_ONLY),
                weather=obs,
            )

    logger.info("Synchronized %d activity and weather points", len(synced))
    return [synced[day] for day in sorted(synced)]
