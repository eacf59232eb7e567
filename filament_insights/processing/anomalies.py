"""Anomaly detection utilities for duplicate records and numeric outliers."""

import json
from collections.abc import Sequence
from typing import Any

from filament_insights.processing.records import Record, numeric_columns
from filament_insights.processing.sanitizers import is_number
from filament_insights.processing.stats import detect_outliers


def _compute_duplicate_count(records: Sequence[Record]) -> int:
    """Count duplicate records based on canonical JSON serialization."""
    seen: set[str] = set()
    duplicates = 0
    for record in records:
        key = json.dumps(record, sort_keys=True, default=str)
        if key in seen:
            duplicates += 1
        else:
            seen.add(key)
    return duplicates


def compute_anomalies(records: Sequence[Record], max_examples: int = 5) -> dict[str, Any]:
    """Count duplicate records and list Tukey-fence outliers per numeric column."""
    outliers: dict[str, dict[str, Any]] = {}
    for column in numeric_columns(records):
        indexed = [
            (index, record[column])
            for index, record in enumerate(records)
            if is_number(record.get(column))
        ]
        flags = detect_outliers([value for _, value in indexed])
        examples = [
            {"row_index": index, "value": value}
            for (index, value), flagged in zip(indexed, flags)
            if flagged
        ]
        if examples:
            outliers[column] = {"count": len(examples), "examples": examples[:max_examples]}

    return {
        "duplicates_count": _compute_duplicate_count(records),
        "outliers": outliers,
    }
