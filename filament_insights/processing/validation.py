"""Whole-dataset schema and data quality validation."""

import math
from collections.abc import Sequence

from filament_insights.core.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from filament_insights.processing.records import Record, numeric_columns
from filament_insights.processing.sanitizers import is_number


def _suspicious_columns(keys: Sequence[str], config: IngestionConfig) -> list[str]:
    return [
        key
        for key in keys
        if any(fragment in key for fragment in config.suspicious_column_fragments)
        or len(key) > config.max_column_name_length
    ]


def _is_unreasonable(value: float, config: IngestionConfig) -> bool:
    # ints compare exactly against the float limit, without conversion
    if isinstance(value, float) and not math.isfinite(value):
        return True
    return abs(value) > config.max_numeric_magnitude


def _quality_issues(records: Sequence[Record], config: IngestionConfig) -> list[str]:
    issues: list[str] = []
    for position, record in enumerate(records[: config.quality_sample_size], start=1):
        for key, value in record.items():
            if is_number(value):
                if _is_unreasonable(value, config):
                    issues.append(f"Row {position}, {key}: unreasonable value {value}")
            elif isinstance(value, str) and len(value) > config.max_quality_string_length:
                issues.append(f"Row {position}, {key}: string too long ({len(value)} chars)")
    return issues


def validate(
    records: Sequence[Record],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[str]:
    """Return ordered diagnostics for a dataset; an empty list means it passed."""
    if not records:
        return ["No data found in the workbook"]
    if len(records) > config.max_rows:
        return [f"Too many rows: {len(records)}. Maximum allowed: {config.max_rows}"]

    errors: list[str] = []
    keys = list(records[0])

    suspicious = _suspicious_columns(keys, config)
    if suspicious:
        errors.append(f"Suspicious column names detected: {', '.join(suspicious)}")

    if not any(column in records[0] for column in config.identifying_columns):
        errors.append(
            "Missing identifying column: expected one of "
            + ", ".join(config.identifying_columns)
        )

    keywords = [keyword.casefold() for keyword in config.measurement_keywords]
    measurement_columns = [
        column
        for column in numeric_columns(records)
        if any(keyword in column.casefold() for keyword in keywords)
    ]
    if not measurement_columns:
        errors.append("No numeric measurement columns found")

    issues = _quality_issues(records, config)
    if len(issues) > config.max_reported_issues:
        errors.append(f"Multiple data quality issues detected ({len(issues)} issues)")
    else:
        errors.extend(f"Data quality issue: {issue}" for issue in issues)

    return errors
