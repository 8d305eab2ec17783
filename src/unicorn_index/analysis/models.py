"""Value types shared by the processing and insight layers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import StrEnum

from unicorn_index.errors import AggregationError

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_SCORE = 0.0
MAX_SCORE = 100.0


def clamp_score(value: float) -> float:
    """Clamp an activity score to [0, 100]."""
    return min(MAX_SCORE, max(MIN_SCORE, float(value)))


def _check_date_key(value: str) -> None:
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        msg = f"Date key must be YYYY-MM-DD, got {value!r}"
        raise AggregationError(msg)


class ActivitySource(StrEnum):
    """Where a daily point came from."""

    USER = "user"
    BASELINE = "baseline"
    WEATHER_ONLY = "weather-only"


class WeatherCondition(StrEnum):
    """Categorical weather buckets used for grouping activity."""

    HEAVY_RAIN = "heavy_rain"
    LIGHT_RAIN = "light_rain"
    HOT = "hot"
    WARM = "warm"
    PLEASANT = "pleasant"
    COOL = "cool"
    UNKNOWN = "unknown"


class PerformanceCategory(StrEnum):
    """User average relative to the baseline average."""

    OUTPERFORMING = "outperforming"
    MATCHING = "matching"
    UNDERPERFORMING = "underperforming"


class CorrelationStrength(StrEnum):
    NEGLIGIBLE = "negligible"
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


@dataclass(frozen=True)
class DailyActivityPoint:
    """Push activity for one calendar day."""

    date: str
    commits: int = 0
    events: int = 0
    activity_score: float = 0.0
    source: ActivitySource = ActivitySource.USER
    org_count: int = 0

    def __post_init__(self) -> None:
        _check_date_key(self.date)
        if self.commits < 0 or self.events < 0 or self.org_count < 0:
            msg = f"Counts must be non-negative for {self.date}"
            raise AggregationError(msg)
        object.__setattr__(self, "activity_score", clamp_score(self.activity_score))
        object.__setattr__(self, "source", ActivitySource(self.source))

    def with_score(self, score: float) -> DailyActivityPoint:
        """Copy with a new (clamped) activity score."""
        return replace(self, activity_score=score)

    @classmethod
    def placeholder(cls, date: str, source: ActivitySource) -> DailyActivityPoint:
        """Zero-activity point for a day with no data."""
        return cls(date=date, source=source)


@dataclass(frozen=True)
class WeatherObservation:
    """Weather for one calendar day."""

    date: str
    max_temp: float | None
    rainfall: float = 0.0
    conditions: WeatherCondition = WeatherCondition.UNKNOWN

    def __post_init__(self) -> None:
        _check_date_key(self.date)
        if self.rainfall < 0:
            msg = f"Rainfall must be non-negative for {self.date}"
            raise AggregationError(msg)

    @property
    def is_known(self) -> bool:
        return self.max_temp is not None

    @classmethod
    def unknown(cls, date: str) -> WeatherObservation:
        """Sentinel for a day without weather data."""
        return cls(date=date, max_temp=None, rainfall=0.0, conditions=WeatherCondition.UNKNOWN)


@dataclass(frozen=True)
class SynchronizedPoint:
    """A day of activity joined with that day's weather."""

    activity: DailyActivityPoint
    weather: WeatherObservation

    @property
    def date(self) -> str:
        return self.activity.date

    @property
    def commits(self) -> int:
        return self.activity.commits

    @property
    def activity_score(self) -> float:
        return self.activity.activity_score

    @property
    def source(self) -> ActivitySource:
        return self.activity.source


@dataclass(frozen=True)
class AggregatedBaseline:
    """Baseline series built from several sources, plus per-source problems."""

    data: list[DailyActivityPoint] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def message(self) -> str:
        if not self.errors:
            return f"Baseline calculated from {len(self.data)} daily points"
        return f"Baseline calculated with {len(self.errors)} source(s) having issues"


@dataclass(frozen=True)
class SeriesStatistics:
    """Descriptive statistics of one numeric series."""

    count: int = 0
    total: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    std_dev: float = 0.0


@dataclass(frozen=True)
class CorrelationResult:
    """Pearson correlation with its qualitative reading."""

    coefficient: float
    strength: CorrelationStrength
    is_significant: bool
