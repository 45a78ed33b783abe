"""Numeric coercion shared by the aggregator and the metrics calculator."""

import math
from datetime import UTC, datetime
from typing import Any

from loguru import logger


def to_non_negative(value: Any) -> float:
    """Coerce to a finite float >= 0. Anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def finite(value: float) -> float:
    """Reset NaN/Infinity to 0."""
    return value if math.isfinite(value) else 0.0


def to_datetime(timestamp: Any, now: datetime) -> datetime:
    """Unix seconds -> aware UTC datetime, falling back to ``now``."""
    if timestamp is None or isinstance(timestamp, bool):
        return now
    if isinstance(timestamp, datetime):
        return timestamp if timestamp.tzinfo else timestamp.replace(tzinfo=UTC)
    try:
        seconds = float(timestamp)
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"bad timestamp {timestamp!r}")
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug(f"[AGG] Unparseable timestamp {timestamp!r}, using now: {e}")
        return now
