"""Workbook ingestion: decode, filter, map and accept rows into a dataset."""

from dataclasses import dataclass, field

from filament_insights.core.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from filament_insights.core.logging import get_logger
from filament_insights.processing.records import (
    Record,
    build_columns,
    has_identification_signal,
    map_record,
)
from filament_insights.processing.rows import DropReason, filter_rows
from filament_insights.processing.workbook import decode_workbook, header_row, select_sheet

logger = get_logger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Accepted records plus aggregate counts of everything left out."""

    sheet_name: str
    columns: tuple[str, ...]
    records: list[Record]
    source_row_count: int
    dropped: dict[str, int] = field(default_factory=dict)

    @property
    def dropped_total(self) -> int:
        return sum(self.dropped.values())


def ingest(
    payload: bytes,
    declared_size: int,
    declared_type: str,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> IngestionResult:
    """Turn a workbook payload into sanitized records.

    Raises ``InputError`` for size/type violations and ``ParseError`` for
    unreadable or structurally insufficient workbooks. Rows rejected along
    the way only show up in ``IngestionResult.dropped``.
    """
    workbook = decode_workbook(payload, declared_size, declared_type, config)
    sheet = select_sheet(workbook, config)
    logger.info(
        "ingestion.sheet_selected",
        sheet_name=sheet.name,
        sheet_names=list(workbook.sheet_names),
        raw_row_count=len(sheet.rows),
    )

    columns = build_columns(header_row(sheet, config), config)
    data_rows = sheet.rows[config.header_row_index + 1 :]
    kept_rows, dropped = filter_rows(data_rows, config)

    records: list[Record] = []
    for row in kept_rows:
        record = map_record(row, columns, config)
        if has_identification_signal(record, config):
            records.append(record)
        else:
            dropped[DropReason.no_identification_signal] += 1

    drop_counts = {reason.value: count for reason, count in sorted(dropped.items()) if count}
    if drop_counts:
        logger.info("ingestion.rows_dropped", **drop_counts)
    logger.info(
        "ingestion.completed",
        sheet_name=sheet.name,
        column_count=len(columns),
        record_count=len(records),
        dropped_count=sum(drop_counts.values()),
    )

    return IngestionResult(
        sheet_name=sheet.name,
        columns=tuple(column.key for column in columns),
        records=records,
        source_row_count=len(data_rows),
        dropped=drop_counts,
    )
