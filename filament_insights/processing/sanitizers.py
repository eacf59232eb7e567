"""Cell sanitization: markup stripping, numeric coercion, and URL allow-listing."""

import math
import re
from typing import Any
from urllib.parse import urlsplit

from filament_insights.core.config import DEFAULT_INGESTION_CONFIG, IngestionConfig

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JAVASCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_ANGLE_BRACKETS = re.compile(r"[<>]")

_NON_NUMERIC_CHARS = re.compile(r"[^\d.\-]")
_LEADING_FLOAT = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_number(value: Any) -> bool:
    """Return whether a value is a real number; booleans are not."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def cell_text(value: Any) -> str:
    """Render a raw cell the way it reads in the sheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def looks_numeric(text: str) -> bool:
    """Return whether a string is entirely a decimal number literal."""
    return _DECIMAL_LITERAL.fullmatch(text.strip()) is not None


def _strip_markup_once(text: str) -> str:
    text = _SCRIPT_BLOCK.sub("", text)
    text = _JAVASCRIPT_PROTOCOL.sub("", text)
    text = _EVENT_HANDLER.sub("", text)
    text = _ANGLE_BRACKETS.sub("", text)
    return text.strip()


def sanitize_string(value: Any) -> str:
    """Strip script blocks, ``javascript:``, inline handlers and angle brackets.

    The passes are repeated until the text stops changing, so fragments that
    re-form after a removal (``javajavascript:script:``) are removed too and
    the function is idempotent.
    """
    text = value if isinstance(value, str) else cell_text(value)
    while True:
        cleaned = _strip_markup_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def sanitize_number(value: Any, precision: int = 10) -> int | float:
    """Coerce a cell into a finite number rounded to ``precision`` decimals.

    Strings keep only digits, dots and minus signs and the longest leading
    float literal is parsed. Anything unusable, including integers too large
    for a float, becomes 0.
    """
    if is_number(value):
        try:
            finite = math.isfinite(value)
        except OverflowError:
            # ints wider than a double
            return 0
        if not finite:
            return 0
        return value if isinstance(value, int) else round(value, precision)
    if isinstance(value, str):
        match = _LEADING_FLOAT.match(_NON_NUMERIC_CHARS.sub("", value))
        if match is None:
            return 0
        parsed = float(match.group())
        return round(parsed, precision) if math.isfinite(parsed) else 0
    return 0


def validate_url(value: str, config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> str:
    """Return ``value`` when it is an http(s) URL on a trusted host, else ``""``."""
    if not value or not isinstance(value, str):
        return ""
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError:
        return ""

    if parts.scheme.lower() not in config.allowed_url_schemes or not hostname:
        return ""
    hostname = hostname.lower()
    if not any(
        hostname == domain or hostname.endswith(f".{domain}") for domain in config.trusted_hosts
    ):
        return ""
    return value
