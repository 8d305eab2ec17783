"""Unicorn Index - a developer's GitHub activity against an industry baseline and the weather.

Architecture::

    services/      Shared HTTP transport (session, rate limiter, retry, error classes)
    datasources/   External APIs (GitHub events, Open-Meteo daily weather)
    schemas.py     Pydantic records validating raw API payloads
    analysis/      Daily series, statistics, correlations and insights
    flows/         Prefect orchestration (fetch, analyze)

Data flow: datasources -> analysis -> report dict for the presentation layer

Extension points - see each package's docstring for step-by-step guides:
  - New data source:   datasources/__init__.py
  - New analysis:      analysis/__init__.py
"""

__version__ = "0.1.0"

from unicorn_index.config import Settings
from unicorn_index.errors import UnicornIndexError

__all__ = ["Settings", "UnicornIndexError", "__version__"]
