"""FastAPI application entrypoint, middleware, and error handlers."""

import time
from collections.abc import Awaitable, Callable

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from filament_insights import __version__
from filament_insights.api.routes.analysis import router as analysis_router
from filament_insights.api.routes.datasets import router as datasets_router
from filament_insights.api.routes.statistics import router as statistics_router
from filament_insights.core.config import settings
from filament_insights.core.errors import AppError, DatasetValidationError, UnexpectedError
from filament_insights.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

configure_logging(
    log_level=settings.log_level,
    log_format=settings.log_format,
    service_name=settings.service_name,
    environment=settings.environment,
)

app = FastAPI(title="Filament Insights", version=__version__)
logger = get_logger(__name__)

app.include_router(datasets_router)
app.include_router(analysis_router)
app.include_router(statistics_router)


@app.middleware("http")
async def request_logging_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log incoming requests and responses with timing metadata."""
    started_at = time.perf_counter()
    clear_context()
    bind_context(http_method=request.method, http_path=request.url.path)

    logger.info("http.request.started")

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = round((time.perf_counter() - started_at) * 1000, 2)
        logger.exception("http.request.failed", duration_ms=duration_ms)
        clear_context()
        raise

    duration_ms = round((time.perf_counter() - started_at) * 1000, 2)
    logger.info(
        "http.request.completed",
        status_code=response.status_code,
        duration_ms=duration_ms,
    )
    clear_context()
    return response


app.add_middleware(
    CorrelationIdMiddleware,
    header_name="X-Request-ID",
    update_request_header=True,
)


@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    """Translate ingestion and analysis errors into API responses.

    Validation failures carry every diagnostic, so only their number is logged.
    """
    if isinstance(exc, DatasetValidationError):
        context = {"diagnostic_count": len(exc.detail)}
    else:
        context = {"detail": exc.detail}
    logger.info(
        "app.error",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        **context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": jsonable_encoder(exc.detail)},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    logger.info(
        "app.request_invalid",
        error_count=len(exc.errors()),
        locations=sorted({".".join(map(str, error["loc"][:2])) for error in exc.errors()}),
    )
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Return a safe error response for unhandled exceptions."""
    logger.exception("app.unhandled_exception", exc_info=exc)
    fallback = UnexpectedError()
    return JSONResponse(status_code=fallback.status_code, content={"detail": fallback.detail})


@app.get("/")
def read_root() -> dict[str, str | int]:
    """Healthcheck that also advertises the upload limit."""
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": __version__,
        "max_upload_mb": settings.ingestion.max_file_size_bytes // (1024 * 1024),
    }
