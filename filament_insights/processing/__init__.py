"""Workbook ingestion, validation, statistics, and aggregation."""

from .aggregation import apply_filters, group_by_material, top_n_comparison
from .anomalies import compute_anomalies
from .ingestion import IngestionResult, ingest
from .stats import (
    correlation,
    describe,
    detect_outliers,
    normalize_min_max,
    normalize_z_score,
    regression,
)
from .validation import validate

__all__ = [
    "IngestionResult",
    "apply_filters",
    "compute_anomalies",
    "correlation",
    "describe",
    "detect_outliers",
    "group_by_material",
    "ingest",
    "normalize_min_max",
    "normalize_z_score",
    "regression",
    "top_n_comparison",
    "validate",
]
