"""Stateless statistics routes over raw numeric sequences."""

from fastapi import APIRouter

from filament_insights.core.errors import InvalidRequestError
from filament_insights.core.schemas import (
    CorrelationResponse,
    NormalizationMethod,
    NormalizeRequest,
    OutliersResponse,
    PairedValuesPayload,
    ValuesPayload,
    ValuesResponse,
)
from filament_insights.processing import (
    correlation,
    describe,
    detect_outliers,
    normalize_min_max,
    normalize_z_score,
    regression,
)
from filament_insights.processing.stats import DescriptiveStats, RegressionResult

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.post("/describe", response_model=DescriptiveStats)
async def describe_values(payload: ValuesPayload) -> DescriptiveStats:
    stats = describe(payload.values)
    if stats is None:
        raise InvalidRequestError("No values to describe.")
    return stats


@router.post("/correlation", response_model=CorrelationResponse)
async def correlate(payload: PairedValuesPayload) -> CorrelationResponse:
    return CorrelationResponse(correlation=correlation(payload.x, payload.y))


@router.post("/regression", response_model=RegressionResult)
async def fit_regression(payload: PairedValuesPayload) -> RegressionResult:
    return regression(payload.x, payload.y)


@router.post("/normalize", response_model=ValuesResponse)
async def normalize(payload: NormalizeRequest) -> ValuesResponse:
    if payload.method is NormalizationMethod.z_score:
        return ValuesResponse(values=normalize_z_score(payload.values))
    return ValuesResponse(values=normalize_min_max(payload.values))


@router.post("/outliers", response_model=OutliersResponse)
async def outliers(payload: ValuesPayload) -> OutliersResponse:
    return OutliersResponse(outliers=detect_outliers(payload.values))
