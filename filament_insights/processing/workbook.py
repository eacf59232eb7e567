"""Workbook decoding into raw sheets, sheet selection, and header row lookup."""

import datetime
from collections.abc import Iterable
from dataclasses import dataclass
from io import BytesIO
from typing import Any

import openpyxl
import xlrd
from openpyxl.utils.datetime import to_excel

from filament_insights.core.config import (
    DEFAULT_INGESTION_CONFIG,
    XLS_MEDIA_TYPE,
    IngestionConfig,
)
from filament_insights.core.errors import (
    FileTooLargeError,
    ParseError,
    UnsupportedMediaTypeError,
)

CellValue = str | int | float | bool | None
RawRow = tuple[CellValue, ...]


@dataclass(frozen=True)
class RawSheet:
    name: str
    rows: tuple[RawRow, ...]


@dataclass(frozen=True)
class Workbook:
    sheet_names: tuple[str, ...]
    sheets: dict[str, RawSheet]


def _is_blank(cell: CellValue) -> bool:
    return cell is None or cell == ""


def _trim_row(cells: Iterable[CellValue]) -> RawRow:
    row = list(cells)
    while row and _is_blank(row[-1]):
        row.pop()
    return tuple(row)


def _trim_rows(rows: Iterable[RawRow]) -> tuple[RawRow, ...]:
    trimmed = list(rows)
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return tuple(trimmed)


def _openpyxl_cell(value: Any) -> CellValue:
    """Normalize an openpyxl cell value; dates become spreadsheet serials."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)):
        return to_excel(value)
    return str(value)


def _xlrd_cell(cell: Any) -> CellValue:
    """Normalize an xlrd cell; error cells carry no usable value."""
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype in (xlrd.XL_CELL_NUMBER, xlrd.XL_CELL_DATE):
        return float(cell.value)
    return str(cell.value)


def _decode_xlsx(payload: bytes) -> Workbook:
    book = openpyxl.load_workbook(BytesIO(payload), read_only=True, data_only=True)
    try:
        sheets: dict[str, RawSheet] = {}
        for worksheet in book.worksheets:
            rows = (
                _trim_row(_openpyxl_cell(value) for value in row)
                for row in worksheet.iter_rows(values_only=True)
            )
            sheets[worksheet.title] = RawSheet(name=worksheet.title, rows=_trim_rows(rows))
    finally:
        book.close()
    return Workbook(sheet_names=tuple(sheets), sheets=sheets)


def _decode_xls(payload: bytes) -> Workbook:
    book = xlrd.open_workbook(file_contents=payload)
    try:
        sheets: dict[str, RawSheet] = {}
        for sheet in book.sheets():
            rows = (
                _trim_row(_xlrd_cell(cell) for cell in sheet.row(index))
                for index in range(sheet.nrows)
            )
            sheets[sheet.name] = RawSheet(name=sheet.name, rows=_trim_rows(rows))
    finally:
        book.release_resources()
    return Workbook(sheet_names=tuple(sheets), sheets=sheets)


def check_upload(
    declared_size: int,
    declared_type: str,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> None:
    """Reject oversized or non-spreadsheet uploads before any decoding work."""
    if declared_size > config.max_file_size_bytes:
        limit_mb = config.max_file_size_bytes // (1024 * 1024)
        raise FileTooLargeError(f"File size exceeds {limit_mb}MB limit")
    if declared_type not in config.allowed_media_types:
        raise UnsupportedMediaTypeError()


def decode_workbook(
    payload: bytes,
    declared_size: int,
    declared_type: str,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> Workbook:
    """Decode an xlsx or xls payload into raw sheets."""
    check_upload(max(declared_size, len(payload)), declared_type, config)

    decoder = _decode_xls if declared_type == XLS_MEDIA_TYPE else _decode_xlsx
    try:
        workbook = decoder(payload)
    except Exception as exc:
        raise ParseError(f"Failed to parse Excel file: {exc}") from exc

    if not workbook.sheet_names:
        raise ParseError("Workbook contains no worksheets")
    return workbook


def select_sheet(
    workbook: Workbook,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> RawSheet:
    """Pick the main data sheet, falling back to the first sheet."""
    keyword = config.sheet_keyword.casefold()
    excluded = config.sheet_excluded_keyword.casefold()
    for name in workbook.sheet_names:
        folded = name.casefold()
        if keyword in folded and excluded not in folded:
            return workbook.sheets[name]
    return workbook.sheets[workbook.sheet_names[0]]


def header_row(sheet: RawSheet, config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> RawRow:
    """Return the raw header row, enforcing the title/header/data layout."""
    if len(sheet.rows) < config.min_row_count:
        raise ParseError("Not enough data rows in Excel file")
    if len(sheet.rows) <= config.header_row_index or not sheet.rows[config.header_row_index]:
        raise ParseError("No header row found")
    return sheet.rows[config.header_row_index]
