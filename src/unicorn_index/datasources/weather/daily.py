"""Daily max temperature and precipitation from Open-Meteo."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from unicorn_index.datasources.weather.client import (
    DAILY_VARS,
    DATE_RE,
    DEFAULT_LAT,
    DEFAULT_LON,
    DEFAULT_TIMEZONE,
    OPEN_METEO_API,
)
from unicorn_index.errors import ValidationError
from unicorn_index.schemas import DailyWeather

if TYPE_CHECKING:
    from unicorn_index.services.http import ApiClient

logger = logging.getLogger(__name__)


def parse_iso_date(value: object, label: str = "date") -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a date.

    Raises:
        ValidationError: Wrong format or not a real calendar day.
    """
    if not isinstance(value, str) or not DATE_RE.fullmatch(value):
        msg = f"{label.capitalize()} must be in YYYY-MM-DD format, got {value!r}"
        raise ValidationError(msg)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"{label.capitalize()} is not a valid calendar date: {value!r}"
        raise ValidationError(msg) from exc


def default_date_range(days: int = 30, today: date | None = None) -> tuple[str, str]:
    """Return ``(start, end)`` ISO dates covering the last ``days`` days up to today."""
    end = today or date.today()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def fetch_weather_data(
    client: ApiClient,
    start_date: str,
    end_date: str,
    lat: float = DEFAULT_LAT,
    lon: float = DEFAULT_LON,
    *,
    timezone: str = DEFAULT_TIMEZONE,
    api_url: str = OPEN_METEO_API,
) -> DailyWeather:
    """
    Fetch daily weather between two dates (inclusive).

    Args:
        client: Shared API client.
        start_date: ISO date string (YYYY-MM-DD).
        end_date: ISO date string (YYYY-MM-DD), not before ``start_date``.
        lat: Latitude (default: Bangalore).
        lon: Longitude.
        timezone: Timezone used by the API to cut days.
        api_url: Open-Meteo endpoint.

    Returns:
        The ``daily`` block with ``time``, ``temperature_2m_max`` and
        ``precipitation_sum`` arrays.

    Raises:
        ValidationError: Bad dates, or the response lacks ``daily.time``.
    """
    start = parse_iso_date(start_date, "start date")
    end = parse_iso_date(end_date, "end date")
    if start > end:
        msg = f"Start date must not be after end date ({start_date} > {end_date})"
        raise ValidationError(msg)

    params: dict[str, Any] = {
        "latitude": lat,
        "longitude": lon,
        "start_date": start_date,
        "end_date": end_date,
        "daily": ",".join(DAILY_VARS),
        "timezone": timezone,
    }
    logger.info("Fetching weather data from %s to %s", start_date, end_date)
    payload = client.get_json(api_url, params=params)
    daily = DailyWeather.from_api(payload)
    logger.info("Retrieved weather data for %d days", len(daily.time))
    return daily
