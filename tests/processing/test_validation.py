from typing import Any

from filament_insights.core.config import IngestionConfig
from filament_insights.processing import validate


def _record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {"Brand": "Acme", "Filament type": "PLA", "Tensile (kg)": 12.5}
    record.update(overrides)
    return record


def test_validate_passes_clean_dataset() -> None:
    assert validate([_record(), _record(Brand="Bolt")]) == []


def test_validate_empty_dataset_short_circuits() -> None:
    assert validate([]) == ["No data found in the workbook"]


def test_validate_row_cap_short_circuits() -> None:
    records = [{"<script>": None} for _ in range(10_001)]

    assert validate(records) == ["Too many rows: 10001. Maximum allowed: 10000"]


def test_validate_flags_suspicious_column_names() -> None:
    long_key = "x" * 101
    records = [{**_record(), "a<b": 1, "javascript": "y", long_key: 2}]

    diagnostics = validate(records)

    assert diagnostics == [f"Suspicious column names detected: a<b, javascript, {long_key}"]


def test_validate_requires_identifying_column() -> None:
    diagnostics = validate([{"Maker": "Acme", "Tensile (kg)": 12.5}])

    assert diagnostics == [
        "Missing identifying column: expected one of Brand, Filament type, Material, Type"
    ]


def test_validate_requires_numeric_measurement_column() -> None:
    records = [{"Brand": "Acme", "Tensile (kg)": "strong", "Price": 20}]

    assert validate(records) == ["No numeric measurement columns found"]


def test_validate_accepts_measurement_keyword_in_any_case() -> None:
    records = [
        {"Brand": "Acme", "IZOD impact test kJ/m2": None},
        {"Brand": "Bolt", "IZOD impact test kJ/m2": 4.2},
    ]

    assert validate(records) == []


def test_validate_reports_individual_quality_issues() -> None:
    records = [_record(Notes="y" * 501), _record(**{"Tensile (kg)": 2e10})]

    assert validate(records) == [
        "Data quality issue: Row 1, Notes: string too long (501 chars)",
        "Data quality issue: Row 2, Tensile (kg): unreasonable value 20000000000.0",
    ]


def test_validate_summarizes_many_quality_issues() -> None:
    records = [_record(Notes="y" * 600) for _ in range(6)]

    assert validate(records) == ["Multiple data quality issues detected (6 issues)"]


def test_validate_only_samples_leading_records() -> None:
    records = [_record() for _ in range(100)] + [_record(Notes="y" * 600)]

    assert validate(records) == []


def test_validate_uses_configured_limits() -> None:
    config = IngestionConfig(max_rows=1)

    assert validate([_record(), _record()], config) == [
        "Too many rows: 2. Maximum allowed: 1"
    ]


def test_validate_reports_oversized_integers_instead_of_raising() -> None:
    diagnostics = validate([_record(**{"Tensile (kg)": 10**400})])

    assert len(diagnostics) == 1
    assert diagnostics[0].startswith(
        "Data quality issue: Row 1, Tensile (kg): unreasonable value 1000"
    )
