"""Chart-backing aggregation routes over a client-held dataset."""

from fastapi import APIRouter

from filament_insights.core.config import settings
from filament_insights.core.errors import InvalidRequestError
from filament_insights.core.logging import get_logger
from filament_insights.core.schemas import ComparisonRequest, RecordsPayload, ScatterRequest
from filament_insights.processing import group_by_material, top_n_comparison
from filament_insights.processing.aggregation import (
    ComparisonResult,
    ScatterSeries,
    scatter_series,
)

router = APIRouter(prefix="/analysis", tags=["analysis"])
logger = get_logger(__name__)


@router.post("/materials")
async def material_averages(payload: RecordsPayload) -> dict[str, dict[str, float]]:
    """Average the leading numeric properties per base material."""
    groups = group_by_material(payload.records, settings.ingestion)
    logger.info("analysis.materials.completed", group_count=len(groups))
    return groups


@router.post("/comparison", response_model=ComparisonResult)
async def top_comparison(payload: ComparisonRequest) -> ComparisonResult:
    """Compare the strongest records across their leading numeric properties."""
    return top_n_comparison(payload.records, payload.n, settings.ingestion)


@router.post("/scatter", response_model=ScatterSeries)
async def scatter(payload: ScatterRequest) -> ScatterSeries:
    """Pair two numeric columns and fit a regression line through them."""
    missing = [
        column
        for column in (payload.x_column, payload.y_column)
        if payload.records and column not in payload.records[0]
    ]
    if missing:
        raise InvalidRequestError(f"Unknown columns: {', '.join(missing)}")
    return scatter_series(payload.records, payload.x_column, payload.y_column, settings.ingestion)
