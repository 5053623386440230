"""
Small helpers shared across BLK modules.
"""
import time
import uuid
from typing import Any


def generate_unique_id() -> str:
    """Generate a random 128-bit identifier as 32 hex characters."""
    return uuid.uuid4().hex


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def as_text(value: Any, default: str = "") -> str:
    """Coerce an untyped value to a string, using default for missing/falsy values."""
    if not value:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def as_timestamp(value: Any, default: int) -> int:
    """Coerce an untyped value to an integer millisecond timestamp."""
    if isinstance(value, bool) or not value:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(float(value if isinstance(value, float) else str(value)))
    except (ValueError, OverflowError):
        return default


def truncate(text: str, width: int) -> str:
    """Shorten text to width characters, marking the cut with an ellipsis."""
    if len(text) <= width:
        return text
    return text[: max(width - 1, 0)] + "…"
