"""Presentation helpers for drift values and timestamps."""

import datetime
from typing import Literal, Optional

GOOD_LIMIT = 5
FAIR_LIMIT = 15


def format_accuracy(seconds_per_day: Optional[float]) -> str:
    """Format a drift rate, e.g. '+3.0 s/day', or '--' when unknown."""
    if seconds_per_day is None:
        return "--"
    sign = "+" if seconds_per_day >= 0 else ""
    return f"{sign}{seconds_per_day:.1f} s/day"


def format_offset(offset_ms: float) -> str:
    """Format an offset in milliseconds as signed seconds, e.g. '-1.5s'."""
    seconds = offset_ms / 1000
    sign = "+" if seconds >= 0 else ""
    return f"{sign}{seconds:.1f}s"


def classify_magnitude(
    seconds_per_day: Optional[float],
) -> Literal["good", "fair", "poor", "unknown"]:
    """Rate how good a drift rate is, ignoring its direction.

    Args:
        seconds_per_day: The drift rate, or None if unknown.

    Returns:
        'good' up to 5 s/day, 'fair' up to 15 s/day, 'poor' beyond, and 'unknown'
        when there is no rate.
    """
    if seconds_per_day is None:
        return "unknown"

    magnitude = abs(seconds_per_day)
    if magnitude <= GOOD_LIMIT:
        return "good"
    if magnitude <= FAIR_LIMIT:
        return "fair"
    return "poor"


def format_time(timestamp_ms: int) -> str:
    """Format epoch milliseconds as local 'HH:MM:SS.mmm'."""
    moment = datetime.datetime.fromtimestamp(timestamp_ms / 1000)
    return f"{moment:%H:%M:%S}.{timestamp_ms % 1000:03d}"


def format_time_short(timestamp_ms: int) -> str:
    """Format epoch milliseconds as local 'HH:MM:SS'."""
    moment = datetime.datetime.fromtimestamp(timestamp_ms / 1000)
    return f"{moment:%H:%M:%S}"
