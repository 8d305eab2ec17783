"""Small numeric helpers used by the performance and weather analyses.

All functions accept plain sequences of numbers and return 0 rather than
raising on empty or degenerate input.
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence

from unicorn_index.analysis.models import (
    CorrelationResult,
    CorrelationStrength,
    PerformanceCategory,
)

SIGNIFICANCE_THRESHOLD = 0.3
OUTPERFORMING_RATIO = 1.15
MATCHING_RATIO = 0.85


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation of two equal-length series, in [-1, 1].

    Returns 0 for empty, mismatched, single-point or zero-variance input.
    """
    if len(x) != len(y) or len(x) < 2:
        return 0.0
    try:
        r = statistics.correlation([float(v) for v in x], [float(v) for v in y])
    except statistics.StatisticsError:
        # Raised when either series is constant
        return 0.0
    return max(-1.0, min(1.0, r))


def calculate_mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return statistics.fmean(values)


def calculate_std_dev(values: Sequence[float]) -> float:
    """Population standard deviation."""
    if not values:
        return 0.0
    return statistics.pstdev([float(v) for v in values])


def calculate_consistency(values: Sequence[float]) -> float:
    """``1 - coefficient of variation``, floored at 0. Higher is steadier."""
    mean = calculate_mean(values)
    if mean == 0:
        return 0.0
    return max(0.0, 1 - calculate_std_dev(values) / mean)


def calculate_percentile(value: float, dataset: Sequence[float]) -> float:
    """Percentage of ``dataset`` strictly below ``value``."""
    if not dataset:
        return 0.0
    ordered = sorted(dataset)
    for index, item in enumerate(ordered):
        if item >= value:
            return index / len(ordered) * 100
    return 100.0


def calculate_growth_rate(values: Sequence[float]) -> float:
    """Percent change from the first to the last value."""
    if len(values) < 2 or values[0] == 0:
        return 0.0
    first, last = values[0], values[-1]
    return (last - first) / first * 100


def calculate_momentum(values: Sequence[float], window: int = 7) -> float:
    """Mean of the last ``window`` values minus mean of the first ``window``."""
    if window < 1 or len(values) < window:
        return 0.0
    return statistics.fmean(values[-window:]) - statistics.fmean(values[:window])


def interpret_correlation_strength(coefficient: float) -> CorrelationStrength:
    magnitude = abs(coefficient)
    if magnitude < 0.3:
        return CorrelationStrength.NEGLIGIBLE
    if magnitude < 0.5:
        return CorrelationStrength.WEAK
    if magnitude < 0.7:
        return CorrelationStrength.MODERATE
    return CorrelationStrength.STRONG


def correlation_result(coefficient: float) -> CorrelationResult:
    """Rounded coefficient with its strength and significance."""
    r = round(max(-1.0, min(1.0, coefficient)), 3)
    return CorrelationResult(
        coefficient=r,
        strength=interpret_correlation_strength(r),
        is_significant=abs(r) >= SIGNIFICANCE_THRESHOLD,
    )


def categorize_performance(ratio: float) -> PerformanceCategory:
    """Bucket a user/baseline ratio."""
    if ratio >= OUTPERFORMING_RATIO:
        return PerformanceCategory.OUTPERFORMING
    if ratio >= MATCHING_RATIO:
        return PerformanceCategory.MATCHING
    return PerformanceCategory.UNDERPERFORMING
