"""Structured logging configuration and helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

import structlog
from asgi_correlation_id.context import correlation_id

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger
    from structlog.typing import EventDict, Processor, WrappedLogger

REDACTED_VALUE = "***REDACTED***"
SENSITIVE_FIELD_FRAGMENTS = (
    "password",
    "secret",
    "token",
    "authorization",
    "api_key",
)
# Column names and cell text come from uploaded workbooks.
MAX_LOGGED_STRING_LENGTH = 200
FRAMEWORK_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_LOGGING_CONFIGURED = False


def _resolve_log_level(log_level: str) -> int:
    """Resolve a user-provided log level into a stdlib constant."""
    resolved = getattr(logging, log_level.strip().upper(), logging.INFO)
    return resolved if isinstance(resolved, int) else logging.INFO


def _is_sensitive(field_name: str) -> bool:
    lowered = field_name.lower()
    return any(fragment in lowered for fragment in SENSITIVE_FIELD_FRAGMENTS)


def _scrub(field_name: str, value: object) -> object:
    """Redact sensitive values and shorten oversized strings, recursively."""
    if _is_sensitive(field_name):
        return REDACTED_VALUE
    if isinstance(value, str) and len(value) > MAX_LOGGED_STRING_LENGTH:
        return f"{value[:MAX_LOGGED_STRING_LENGTH]}...(+{len(value) - MAX_LOGGED_STRING_LENGTH})"
    if isinstance(value, dict):
        return {str(key): _scrub(str(key), item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(field_name, item) for item in value]
    return value


def _scrub_event(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor applying `_scrub` to every event field."""
    for key in tuple(event_dict):
        if key == "event":
            continue
        event_dict[key] = _scrub(key, event_dict[key])
    return event_dict


def _service_context(service_name: str, environment: str) -> Processor:
    """Create a processor that stamps service metadata and the request id."""

    def _processor(
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("environment", environment)
        request_id = correlation_id.get()
        if request_id:
            event_dict.setdefault("request_id", request_id)
        return event_dict

    return _processor


def configure_logging(
    *,
    log_level: str,
    log_format: str,
    service_name: str,
    environment: str,
) -> None:
    """Route stdlib and structlog output through one formatter.

    Safe to call more than once; only the first call takes effect.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    json_output = log_format.strip().lower() == "json"
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_context(service_name, environment),
        _scrub_event,
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_resolve_log_level(log_level))

    for logger_name in FRAMEWORK_LOGGERS:
        framework_logger = logging.getLogger(logger_name)
        framework_logger.handlers.clear()
        framework_logger.propagate = True

    processors: list[Processor] = [
        *shared_processors,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
    processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None) -> BoundLogger:
    """Return a configured structured logger."""
    return cast("BoundLogger", structlog.get_logger(name))


def bind_context(**values: object) -> None:
    """Bind values to the active contextvars scope."""
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """Drop every contextvars-bound logging value for the current scope."""
    structlog.contextvars.clear_contextvars()
