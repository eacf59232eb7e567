"""Mapping of raw rows into typed records and per-record acceptance."""

from collections.abc import Sequence
from dataclasses import dataclass

from filament_insights.core.config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from filament_insights.processing.sanitizers import (
    is_number,
    looks_numeric,
    sanitize_number,
    sanitize_string,
    validate_url,
)
from filament_insights.processing.workbook import CellValue, RawRow

RecordValue = str | int | float | None
Record = dict[str, RecordValue]

_SKIPPED_CELLS = ("", "undefined")


@dataclass(frozen=True)
class Column:
    index: int
    key: str
    is_url: bool


def build_columns(
    header: Sequence[CellValue],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> tuple[Column, ...]:
    """Derive the record key universe from a raw header row.

    Headers that sanitize to empty are dropped; the first occurrence of a
    repeated header owns the key.
    """
    columns: list[Column] = []
    seen: set[str] = set()
    for index, raw_header in enumerate(header):
        key = sanitize_string(raw_header)
        if not key or key in seen:
            continue
        seen.add(key)
        folded = key.casefold()
        is_url = any(keyword in folded for keyword in config.url_column_keywords)
        columns.append(Column(index=index, key=key, is_url=is_url))
    return tuple(columns)


def map_cell(
    value: CellValue,
    column: Column,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> RecordValue:
    if value is None or (isinstance(value, str) and value in _SKIPPED_CELLS):
        return None

    if column.is_url:
        return validate_url(sanitize_string(value), config) or None

    if is_number(value) or (isinstance(value, str) and looks_numeric(value)):
        return sanitize_number(value, config.numeric_precision)

    text = sanitize_string(value)
    if text and len(text) <= config.max_string_length:
        return text
    return None


def map_record(
    row: RawRow,
    columns: Sequence[Column],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> Record:
    """Build one record; every column key is present, absent cells as None."""
    return {
        column.key: map_cell(row[column.index] if column.index < len(row) else None, column, config)
        for column in columns
    }


def has_identification_signal(
    record: Record,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> bool:
    """Accept records naming the filament, or carrying enough data otherwise."""
    if any(record.get(column) is not None for column in config.identifying_columns):
        return True
    populated = sum(1 for value in record.values() if value is not None)
    return populated > config.min_populated_fields


def numeric_columns(records: Sequence[Record]) -> list[str]:
    """Return keys, in header order, whose first populated value is a number."""
    if not records:
        return []
    columns: list[str] = []
    for key in records[0]:
        first = next((record[key] for record in records if record.get(key) is not None), None)
        if is_number(first):
            columns.append(key)
    return columns
