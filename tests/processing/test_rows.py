import pytest

from filament_insights.core.config import IngestionConfig
from filament_insights.processing.rows import DropReason, filter_rows, row_drop_reason


@pytest.mark.parametrize(
    ("row", "reason"),
    [
        ((), DropReason.empty_row),
        ((None, "New rows below", "PLA"), DropReason.non_data_marker),
        ((None, "Acme", "Orange BG means retested"), DropReason.non_data_marker),
        (("Note: values in kg", "Acme"), DropReason.non_data_marker),
        ((1, "Acme", "see comment"), DropReason.non_data_marker),
        ((None, "Acme"), DropReason.sparse_row),
        (("", "Acme", None), DropReason.sparse_row),
        ((1, None, "PLA"), DropReason.missing_identifier),
        ((1, "   ", "PLA"), DropReason.missing_identifier),
        ((1, "UNDEFINED", "PLA"), DropReason.missing_identifier),
        ((1, "undefined", "PLA", 12.5, "anything"), DropReason.missing_identifier),
        (("Acme", "PLA"), None),
        ((1, "Acme", "PLA", 12.5), None),
    ],
)
def test_row_drop_reason(row: tuple, reason: DropReason | None) -> None:
    assert row_drop_reason(row) == reason


def test_short_row_without_identifier_position_is_dropped() -> None:
    config = IngestionConfig(identifier_column_index=5)

    assert row_drop_reason((1, "Acme", "PLA"), config) == DropReason.missing_identifier


def test_filter_rows_counts_drop_reasons() -> None:
    rows = [
        (1, "Acme", "PLA"),
        (),
        (None, "Header"),
        (2, "undefined", "PETG"),
        (3, "Bolt", "ABS"),
    ]

    kept, dropped = filter_rows(rows)

    assert kept == [(1, "Acme", "PLA"), (3, "Bolt", "ABS")]
    assert dropped == {
        DropReason.empty_row: 1,
        DropReason.non_data_marker: 1,
        DropReason.missing_identifier: 1,
    }


def test_filter_rows_uses_configured_markers() -> None:
    config = IngestionConfig(non_data_markers=("retest",))

    kept, dropped = filter_rows([(1, "Acme", "PLA"), (2, "Bolt", "Retest pending")], config)

    assert kept == [(1, "Acme", "PLA")]
    assert dropped[DropReason.non_data_marker] == 1
