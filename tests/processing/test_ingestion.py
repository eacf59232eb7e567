import math
import zipfile
from io import BytesIO

import pytest

from filament_insights.core.config import XLSX_MEDIA_TYPE, IngestionConfig
from filament_insights.core.errors import ParseError, UnsupportedMediaTypeError
from filament_insights.processing import group_by_material, ingest, validate


def test_ingest_single_row_scenario(make_workbook) -> None:
    payload = make_workbook(
        {
            "Filaments": [
                ["Filament tests"],
                ["Brand", "Filament type", "Tensile (kg)"],
                ["Acme", "PLA", 12.5],
            ]
        }
    )

    result = ingest(payload, len(payload), XLSX_MEDIA_TYPE)

    assert result.records == [{"Brand": "Acme", "Filament type": "PLA", "Tensile (kg)": 12.5}]
    assert result.columns == ("Brand", "Filament type", "Tensile (kg)")
    assert result.dropped == {}


def test_ingest_filters_maps_and_counts(filament_workbook_bytes: bytes) -> None:
    result = ingest(filament_workbook_bytes, len(filament_workbook_bytes), XLSX_MEDIA_TYPE)

    assert result.sheet_name == "Filaments"
    assert [record["Brand"] for record in result.records] == ["Acme", "Bolt", "Core"]
    assert result.records[0]["YouTube Link"] == "https://youtu.be/abc123"
    assert result.records[1]["YouTube Link"] is None
    assert result.records[2]["Tensile (kg)"] == 9.75
    assert result.records[0]["Fibers"] is None
    assert result.source_row_count == 5
    assert result.dropped == {"missing_identifier": 1, "non_data_marker": 1}
    assert result.dropped_total == 2


def test_ingest_excludes_undefined_identifier_rows(make_workbook) -> None:
    payload = make_workbook(
        {
            "Filaments": [
                ["Title"],
                ["#", "Brand", "Filament type", "Tensile (kg)"],
                [1, "undefined", "PLA", 99],
                [2, "Acme", "PLA", 10],
            ]
        }
    )

    result = ingest(payload, len(payload), XLSX_MEDIA_TYPE)

    assert [record["Brand"] for record in result.records] == ["Acme"]
    assert result.dropped == {"missing_identifier": 1}


def test_ingest_drops_records_without_identification_signal(make_workbook) -> None:
    payload = make_workbook(
        {
            "Data": [
                ["Title"],
                ["#", "Code", "Tensile (kg)"],
                [1, "X-1", 10],
            ]
        }
    )

    result = ingest(payload, len(payload), XLSX_MEDIA_TYPE)

    assert result.records == []
    assert result.dropped == {"no_identification_signal": 1}


def test_ingest_output_respects_sanitization_invariants(make_workbook) -> None:
    payload = make_workbook(
        {
            "Filaments": [
                ["Title"],
                ["#", "Brand", "Filament type", "Tensile (kg)", "Notes", "YouTube Link"],
                [1, "<b>Acme</b>", "javascript:PLA", 1 / 3, "<img onerror=x>", "javascript:x"],
                [2, "Bolt", "PETG", "7.123456789012345", "ok", "https://youtu.be/x"],
            ]
        }
    )

    result = ingest(payload, len(payload), XLSX_MEDIA_TYPE)

    assert len(result.records) == 2
    for record in result.records:
        for value in record.values():
            if isinstance(value, float):
                assert math.isfinite(value)
                assert value == round(value, 10)
            elif isinstance(value, str):
                assert "<" not in value and ">" not in value
                assert "javascript:" not in value.lower()
    assert result.records[0]["YouTube Link"] is None


def test_ingest_rejects_unsupported_type_before_decoding() -> None:
    with pytest.raises(UnsupportedMediaTypeError):
        ingest(b"garbage", 7, "application/pdf")


def test_ingest_rejects_sheet_without_data_rows(make_workbook) -> None:
    payload = make_workbook({"Filaments": [["Title"], ["Brand", "Filament type"]]})

    with pytest.raises(ParseError, match="Not enough data rows"):
        ingest(payload, len(payload), XLSX_MEDIA_TYPE)


def test_ingest_with_custom_layout(make_workbook) -> None:
    payload = make_workbook({"Sheet1": [["Brand", "Type", "Tensile"], ["Acme", "PLA", 5]]})
    config = IngestionConfig(header_row_index=0, min_row_count=2, identifier_column_index=0)

    result = ingest(payload, len(payload), XLSX_MEDIA_TYPE, config)

    assert result.records == [{"Brand": "Acme", "Type": "PLA", "Tensile": 5}]


def _rewrite_sheet_xml(payload: bytes, old: bytes, new: bytes) -> bytes:
    buffer = BytesIO()
    with zipfile.ZipFile(BytesIO(payload)) as source, zipfile.ZipFile(buffer, "w") as target:
        for item in source.infolist():
            data = source.read(item.filename)
            if item.filename.startswith("xl/worksheets/"):
                data = data.replace(old, new)
            target.writestr(item, data)
    return buffer.getvalue()


def test_ingest_collapses_integers_too_large_for_a_float(make_workbook) -> None:
    payload = make_workbook(
        {
            "Filaments": [
                ["Title"],
                ["#", "Brand", "Filament type", "Base", "Tensile (kg)"],
                [1, "Acme", "PLA", "PLA", 987654321],
                [2, "Bolt", "PLA+", "PLA", 12],
            ]
        }
    )
    payload = _rewrite_sheet_xml(payload, b"<v>987654321</v>", b"<v>" + b"9" * 400 + b"</v>")

    result = ingest(payload, len(payload), XLSX_MEDIA_TYPE)

    assert result.records[0]["Tensile (kg)"] == 0
    assert validate(result.records) == []
    assert group_by_material(result.records) == {"PLA": {"#": 1.5, "Tensile (kg)": 6.0}}
