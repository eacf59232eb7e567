"""Pure statistics over numeric sequences.

Degenerate inputs never raise: zero-variance and too-short sequences return
zeros, and ``describe`` returns ``None`` for an empty sequence.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from filament_insights.processing.sanitizers import is_number


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class DescriptiveStats:
    mean: float
    median: float
    variance: float
    std_dev: float
    q1: float
    q3: float
    min: float
    max: float
    count: int

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


def _mean(values: Sequence[float]) -> float:
    return math.fsum(values) / len(values)


def _is_constant(values: Sequence[float]) -> bool:
    return min(values) == max(values)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient; 0.0 when undefined."""
    if len(x) != len(y):
        raise ValueError("sequences must have equal length")
    if len(x) < 2 or _is_constant(x) or _is_constant(y):
        return 0.0

    mean_x = _mean(x)
    mean_y = _mean(y)
    sxy = math.fsum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y))
    sxx = math.fsum((xi - mean_x) ** 2 for xi in x)
    syy = math.fsum((yi - mean_y) ** 2 for yi in y)
    denominator = math.sqrt(sxx * syy)
    if denominator == 0:
        return 0.0
    return max(-1.0, min(1.0, sxy / denominator))


def regression(x: Sequence[float], y: Sequence[float]) -> RegressionResult:
    """Least-squares line through ``(x, y)``.

    Vertical data (constant x) has no slope; it yields a flat line through
    the mean of y.
    """
    if len(x) != len(y):
        raise ValueError("sequences must have equal length")
    if len(x) < 2:
        return RegressionResult(slope=0.0, intercept=0.0, r_squared=0.0)

    mean_x = _mean(x)
    mean_y = _mean(y)
    if _is_constant(x):
        return RegressionResult(slope=0.0, intercept=mean_y, r_squared=0.0)

    sxy = math.fsum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y))
    sxx = math.fsum((xi - mean_x) ** 2 for xi in x)
    slope = sxy / sxx
    r = correlation(x, y)
    return RegressionResult(slope=slope, intercept=mean_y - slope * mean_x, r_squared=r * r)


def describe(values: Sequence[float]) -> DescriptiveStats | None:
    """Summary statistics with population variance.

    Quartiles index the ascending sort at ``floor(n * q)`` without
    interpolation.
    """
    if not values:
        return None
    ordered = sorted(values)
    n = len(ordered)
    if ordered[0] == ordered[-1]:
        mean, variance = float(ordered[0]), 0.0
    else:
        mean = _mean(ordered)
        variance = math.fsum((value - mean) ** 2 for value in ordered) / n
    return DescriptiveStats(
        mean=mean,
        median=ordered[math.floor(n * 0.5)],
        variance=variance,
        std_dev=math.sqrt(variance),
        q1=ordered[math.floor(n * 0.25)],
        q3=ordered[math.floor(n * 0.75)],
        min=ordered[0],
        max=ordered[-1],
        count=n,
    )


def normalize_min_max(values: Sequence[float]) -> list[float]:
    """Rescale linearly onto [0, 100]; constant input maps to all zeros."""
    if not values:
        return []
    low = min(values)
    span = max(values) - low
    if span == 0:
        return [0.0 for _ in values]
    return [min(100.0, max(0.0, (value - low) / span * 100)) for value in values]


def normalize_z_score(values: Sequence[float]) -> list[float]:
    stats = describe(values)
    if stats is None:
        return []
    if stats.std_dev == 0:
        return [0.0 for _ in values]
    return [(value - stats.mean) / stats.std_dev for value in values]


def detect_outliers(values: Sequence[float]) -> list[bool]:
    """Flag values outside the Tukey fences ``Q1 - 1.5*IQR`` / ``Q3 + 1.5*IQR``."""
    stats = describe(values)
    if stats is None:
        return []
    lower = stats.q1 - 1.5 * stats.iqr
    upper = stats.q3 + 1.5 * stats.iqr
    return [value < lower or value > upper for value in values]


def compute_column_stats(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
) -> dict[str, DescriptiveStats]:
    """Describe each listed column over the rows where it holds a number."""
    result: dict[str, DescriptiveStats] = {}
    for column in columns:
        values = [row[column] for row in rows if is_number(row.get(column))]
        stats = describe(values)
        if stats is not None:
            result[column] = stats
    return result
