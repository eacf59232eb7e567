"""Service layer turning an uploaded workbook into a validated report."""

import asyncio

from fastapi import UploadFile

from filament_insights.core.config import IngestionConfig
from filament_insights.core.errors import DatasetValidationError, MissingFilenameError
from filament_insights.core.logging import get_logger
from filament_insights.core.schemas import ColumnSummary, IngestionReport
from filament_insights.processing import compute_anomalies, ingest, validate
from filament_insights.processing.records import numeric_columns
from filament_insights.processing.stats import compute_column_stats
from filament_insights.processing.workbook import check_upload
from filament_insights.utils.upload import read_upload

logger = get_logger(__name__)


async def ingest_upload(
    upload_file: UploadFile,
    config: IngestionConfig,
    chunk_size: int = 1024 * 1024,
) -> IngestionReport:
    """Ingest an uploaded workbook and gate it through dataset validation.

    Any diagnostic rejects the whole upload; there is no partial acceptance.
    """
    if not upload_file.filename:
        raise MissingFilenameError()

    content_type = upload_file.content_type or ""
    check_upload(upload_file.size or 0, content_type, config)

    payload, checksum_sha256, size_bytes = await read_upload(
        upload_file, config.max_file_size_bytes, chunk_size
    )
    result = await asyncio.to_thread(ingest, payload, size_bytes, content_type, config)

    diagnostics = validate(result.records, config)
    if diagnostics:
        logger.warning(
            "dataset.validation.failed",
            sheet_name=result.sheet_name,
            record_count=len(result.records),
            diagnostics=diagnostics,
        )
        raise DatasetValidationError(diagnostics)

    numeric = numeric_columns(result.records)
    column_stats = compute_column_stats(result.records, numeric)
    return IngestionReport(
        sheet_name=result.sheet_name,
        columns=list(result.columns),
        numeric_columns=numeric,
        row_count=len(result.records),
        source_row_count=result.source_row_count,
        dropped=result.dropped,
        checksum_sha256=checksum_sha256,
        size_bytes=size_bytes,
        column_stats={
            column: ColumnSummary.model_validate(stats) for column, stats in column_stats.items()
        },
        anomalies=compute_anomalies(result.records),
        records=result.records,
    )
