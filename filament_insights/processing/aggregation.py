"""Cross-filtering, grouped averages, and ranked comparisons over records."""

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from filament_insights.core.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from filament_insights.core.schemas import FilterCriteria
from filament_insights.processing.records import Record, RecordValue, numeric_columns
from filament_insights.processing.sanitizers import cell_text, is_number
from filament_insights.processing.stats import RegressionResult, correlation, regression

_UNIT_SUFFIX = re.compile(r"\s*\([^)]*\)")


@dataclass(frozen=True)
class ComparedRecord:
    name: str
    brand: RecordValue
    filament_type: RecordValue
    base: RecordValue
    score: float


@dataclass(frozen=True)
class PropertyComparison:
    property: str
    column: str
    normalized: list[float]
    actual: list[RecordValue]


@dataclass(frozen=True)
class ComparisonResult:
    records: list[ComparedRecord] = field(default_factory=list)
    properties: list[PropertyComparison] = field(default_factory=list)


@dataclass(frozen=True)
class ScatterPoint:
    x: float
    y: float
    name: str


@dataclass(frozen=True)
class ScatterSeries:
    points: list[ScatterPoint]
    correlation: float
    regression: RegressionResult | None


def _display_name(record: Record, config: IngestionConfig) -> str:
    brand = cell_text(record.get(config.brand_column))
    filament_type = cell_text(record.get(config.filament_type_column))
    return f"{brand} {filament_type}"


def _categorical_clauses(
    criteria: FilterCriteria,
    config: IngestionConfig,
) -> list[tuple[str, set[str]]]:
    selections = (
        (config.brand_column, criteria.brands),
        (config.filament_type_column, criteria.filament_types),
        (config.base_column, criteria.base_materials),
        (config.fibers_column, criteria.fiber_blends),
    )
    return [(column, set(selected)) for column, selected in selections if selected]


def _matches(
    record: Record,
    categorical: list[tuple[str, set[str]]],
    criteria: FilterCriteria,
    config: IngestionConfig,
) -> bool:
    for column, selected in categorical:
        if cell_text(record.get(column)) not in selected:
            return False

    if criteria.search_text:
        needle = criteria.search_text.lower()
        haystack = (cell_text(record.get(column)).lower() for column in config.search_columns)
        if not any(needle in value for value in haystack if value):
            return False

    for column, bounds in criteria.numeric_ranges.items():
        value = record.get(column)
        if is_number(value) and not bounds.min <= value <= bounds.max:
            return False

    return True


def apply_filters(
    records: Sequence[Record],
    criteria: FilterCriteria,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[Record]:
    """Return the records passing every active clause, in their original order.

    Empty selections and an empty query do not constrain; a numeric range
    only constrains records holding a number in that column.
    """
    categorical = _categorical_clauses(criteria, config)
    return [record for record in records if _matches(record, categorical, criteria, config)]


def _base_material(record: Record, config: IngestionConfig) -> str | None:
    for column in config.base_material_columns:
        value = record.get(column)
        if value is not None and value != "":
            text = cell_text(value)
            return None if text == "undefined" else text
    return None


def group_by_material(
    records: Sequence[Record],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> dict[str, dict[str, float]]:
    """Average the leading numeric columns per base material."""
    columns = numeric_columns(records)[: config.group_column_limit]
    groups: dict[str, list[Record]] = {}
    for record in records:
        material = _base_material(record, config)
        if material is not None:
            groups.setdefault(material, []).append(record)

    result: dict[str, dict[str, float]] = {}
    for material, members in groups.items():
        means: dict[str, float] = {}
        for column in columns:
            values = [member[column] for member in members if is_number(member.get(column))]
            if values:
                means[column] = round(math.fsum(values) / len(values), 2)
        result[material] = means
    return result


def _score(record: Record, config: IngestionConfig) -> float:
    values = (record.get(column) for column in config.score_columns)
    return math.fsum(value for value in values if is_number(value))


def top_n_comparison(
    records: Sequence[Record],
    n: int = 3,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> ComparisonResult:
    """Rank records by combined strength and score their leading properties.

    Each property is min-max normalized against the full dataset range, so
    the scores stay comparable between different top-n selections.
    """
    columns = numeric_columns(records)
    if not records or len(columns) < config.comparison_min_numeric_columns:
        return ComparisonResult()

    top = sorted(records, key=lambda record: _score(record, config), reverse=True)[:n]
    compared = [
        ComparedRecord(
            name=_display_name(record, config),
            brand=record.get(config.brand_column),
            filament_type=record.get(config.filament_type_column),
            base=record.get(config.base_column),
            score=_score(record, config),
        )
        for record in top
    ]

    properties: list[PropertyComparison] = []
    for column in columns[: config.comparison_column_limit]:
        values = [record[column] for record in records if is_number(record.get(column))]
        low, high = (min(values), max(values)) if values else (0, 0)
        span = high - low
        normalized: list[float] = []
        actual: list[RecordValue] = []
        for record in top:
            value = record.get(column)
            actual.append(value)
            if is_number(value) and span > 0:
                normalized.append(round((value - low) / span * 100, 1))
            else:
                normalized.append(0.0)
        properties.append(
            PropertyComparison(
                property=_UNIT_SUFFIX.sub("", column, count=1),
                column=column,
                normalized=normalized,
                actual=actual,
            )
        )
    return ComparisonResult(records=compared, properties=properties)


def facet_values(
    records: Sequence[Record],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> dict[str, list[str]]:
    """Distinct non-empty values offered by each categorical filter."""
    facets = {
        "brands": config.brand_column,
        "filament_types": config.filament_type_column,
        "base_materials": config.base_column,
        "fiber_blends": config.fibers_column,
    }
    return {
        name: sorted({cell_text(record.get(column)) for record in records} - {""})
        for name, column in facets.items()
    }


def column_range(records: Sequence[Record], column: str) -> tuple[float, float]:
    """Slider bounds for a numeric column.

    Falls back to (0, 100) without values and widens a single value by 1.
    """
    values = [
        record[column]
        for record in records
        if is_number(record.get(column)) and math.isfinite(record[column])
    ]
    if not values:
        return 0.0, 100.0
    low, high = min(values), max(values)
    if low == high:
        return low - 1, high + 1
    return low, high


def scatter_series(
    records: Sequence[Record],
    x_column: str,
    y_column: str,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> ScatterSeries:
    """Pair two numeric columns and fit a line through the pairs."""
    points = [
        ScatterPoint(x=record[x_column], y=record[y_column], name=_display_name(record, config))
        for record in records
        if is_number(record.get(x_column)) and is_number(record.get(y_column))
    ]
    xs = [point.x for point in points]
    ys = [point.y for point in points]
    return ScatterSeries(
        points=points,
        correlation=correlation(xs, ys),
        regression=regression(xs, ys) if len(points) >= 2 else None,
    )
