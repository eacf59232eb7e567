"""Dataset API routes for workbook upload, filtering, and filter facets."""

from typing import Annotated

from fastapi import APIRouter, File, UploadFile, status

from filament_insights.core.config import settings
from filament_insights.core.logging import bind_context, get_logger
from filament_insights.core.schemas import (
    ColumnRange,
    FacetsResponse,
    FilterRequest,
    IngestionReport,
    RecordsPayload,
)
from filament_insights.processing import apply_filters
from filament_insights.processing.aggregation import column_range, facet_values
from filament_insights.processing.records import numeric_columns
from filament_insights.services import datasets as datasets_service

router = APIRouter(prefix="/datasets", tags=["datasets"])
logger = get_logger(__name__)


@router.post("", response_model=IngestionReport, status_code=status.HTTP_200_OK)
async def upload_dataset(file: Annotated[UploadFile, File(...)]) -> IngestionReport:
    """Ingest an Excel workbook and return its validated records."""
    bind_context(upload_filename=file.filename, content_type=file.content_type)
    logger.info("dataset.upload.received")

    report = await datasets_service.ingest_upload(
        file, settings.ingestion, chunk_size=settings.upload_chunk_size
    )

    logger.info(
        "dataset.upload.completed",
        sheet_name=report.sheet_name,
        row_count=report.row_count,
        dropped=report.dropped,
        size_bytes=report.size_bytes,
        checksum_sha256=report.checksum_sha256,
    )
    return report


@router.post("/filter", response_model=RecordsPayload)
async def filter_dataset(payload: FilterRequest) -> RecordsPayload:
    """Return the records matching every active filter clause."""
    records = apply_filters(payload.records, payload.criteria, settings.ingestion)
    logger.info(
        "dataset.filter.completed",
        input_count=len(payload.records),
        output_count=len(records),
    )
    return RecordsPayload(records=records)


@router.post("/facets", response_model=FacetsResponse)
async def dataset_facets(payload: RecordsPayload) -> FacetsResponse:
    """Return the choices and slider bounds for the filter controls."""
    ranges = {}
    for column in numeric_columns(payload.records):
        low, high = column_range(payload.records, column)
        ranges[column] = ColumnRange(min=low, max=high)
    return FacetsResponse(
        **facet_values(payload.records, settings.ingestion),
        numeric_ranges=ranges,
    )
