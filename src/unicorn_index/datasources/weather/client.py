"""Open-Meteo API client constants and shared configuration.

API docs: https://open-meteo.com/en/docs
The forecast endpoint also serves the last ~3 months when given
``start_date``/``end_date``, which covers the analysis window.
"""

from __future__ import annotations

import re

OPEN_METEO_API = "https://api.open-meteo.com/v1/forecast"

# Daily variables we request from Open-Meteo
DAILY_VARS = [
    "temperature_2m_max",
    "precipitation_sum",
]

# Default location: Bangalore
DEFAULT_LAT = 12.9716
DEFAULT_LON = 77.5946
DEFAULT_TIMEZONE = "Asia/Kolkata"

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
