import logging

from filament_insights.core.logging import (
    MAX_LOGGED_STRING_LENGTH,
    REDACTED_VALUE,
    _resolve_log_level,
    _scrub_event,
    configure_logging,
    get_logger,
)


def test_configure_logging_allows_logger_creation() -> None:
    configure_logging(
        log_level="INFO",
        log_format="console",
        service_name="filament-insights-tests",
        environment="test",
    )

    logger = get_logger("tests.logging")

    assert logger is not None


def test_resolve_log_level_falls_back_to_info() -> None:
    assert _resolve_log_level(" debug ") == logging.DEBUG
    assert _resolve_log_level("loud") == logging.INFO


def test_scrub_event_redacts_and_truncates() -> None:
    long_cell = "x" * (MAX_LOGGED_STRING_LENGTH + 5)
    event_dict = {
        "event": "dataset.upload.received",
        "api_key": "abc",
        "headers": {"Authorization": "Bearer abc", "accept": "*/*"},
        "upload_filename": long_cell,
    }

    scrubbed = _scrub_event(None, "info", event_dict)

    assert scrubbed["event"] == "dataset.upload.received"
    assert scrubbed["api_key"] == REDACTED_VALUE
    assert scrubbed["headers"] == {"Authorization": REDACTED_VALUE, "accept": "*/*"}
    assert scrubbed["upload_filename"] == f"{'x' * MAX_LOGGED_STRING_LENGTH}...(+5)"
