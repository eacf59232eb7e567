"""Cheap structural rejection of non-data rows before record mapping."""

from collections import Counter
from collections.abc import Iterable
from enum import Enum

from filament_insights.core.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from filament_insights.processing.sanitizers import cell_text
from filament_insights.processing.workbook import RawRow


class DropReason(str, Enum):
    empty_row = "empty_row"
    non_data_marker = "non_data_marker"
    sparse_row = "sparse_row"
    missing_identifier = "missing_identifier"
    no_identification_signal = "no_identification_signal"


def row_drop_reason(
    row: RawRow,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> DropReason | None:
    """Return why a raw data row should be discarded, or None to keep it.

    Annotation rows written by hand inside the data region ("new rows
    below", "note: ...") are recognised by marker text.
    """
    if not row:
        return DropReason.empty_row

    row_text = " ".join(cell_text(cell) for cell in row).lower()
    if any(marker in row_text for marker in config.non_data_markers):
        return DropReason.non_data_marker

    meaningful = sum(1 for cell in row if cell is not None and cell != "")
    if meaningful < config.min_meaningful_cells:
        return DropReason.sparse_row

    index = config.identifier_column_index
    identifier = cell_text(row[index]).strip() if index < len(row) else ""
    if not identifier or identifier.lower() == "undefined":
        return DropReason.missing_identifier

    return None


def filter_rows(
    rows: Iterable[RawRow],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> tuple[list[RawRow], Counter[DropReason]]:
    """Split raw rows into kept rows and per-reason drop counts."""
    kept: list[RawRow] = []
    dropped: Counter[DropReason] = Counter()
    for row in rows:
        reason = row_drop_reason(row, config)
        if reason is None:
            kept.append(row)
        else:
            dropped[reason] += 1
    return kept, dropped
