"""Open-Meteo weather data source.

Fetches daily max temperature and precipitation (free, no API key).

Public API:
  - daily: fetch_weather_data, default_date_range, parse_iso_date
  - client: API URL, shared constants
"""

from unicorn_index.datasources.weather.client import OPEN_METEO_API
from unicorn_index.datasources.weather.daily import (
    default_date_range,
    fetch_weather_data,
    parse_iso_date,
)

__all__ = [
    "OPEN_METEO_API",
    "default_date_range",
    "fetch_weather_data",
    "parse_iso_date",
]
