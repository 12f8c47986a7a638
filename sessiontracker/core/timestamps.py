# ==============================================================================
# Timestamp Helpers
# ==============================================================================
"""
Timestamp parsing and normalization for heterogeneous upstream producers.

Events arrive with ISO-8601 strings (with or without offset), epoch seconds
or epoch milliseconds. Everything is normalized to an ISO-8601 UTC string
with millisecond precision, e.g. "2024-05-01T12:30:00.000Z".
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

# Numeric values above this are treated as epoch milliseconds (year ~5138 in seconds)
EPOCH_MS_THRESHOLD = 100_000_000_000

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a timestamp value into an aware UTC datetime.

    Args:
        value: ISO-8601 string, epoch number (seconds or milliseconds),
            datetime, or None

    Returns:
        Aware UTC datetime, or None if the value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if abs(value) > EPOCH_MS_THRESHOLD else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            # Numeric strings such as "1714566600000"
            try:
                return parse_timestamp(float(text))
            except ValueError:
                return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format an aware datetime as an ISO-8601 UTC string with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def first_timestamp(candidates: list[Any], now: datetime) -> str:
    """
    Pick the first parseable candidate, falling back to now.

    Args:
        candidates: Timestamp values in order of preference
        now: Fallback used when no candidate parses

    Returns:
        Normalized ISO-8601 UTC string
    """
    for candidate in candidates:
        parsed = parse_timestamp(candidate)
        if parsed is not None:
            return format_timestamp(parsed)
    return format_timestamp(now)
