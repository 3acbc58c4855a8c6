"""
Calendar-day interval helpers.

Trips are closed intervals of calendar dates: a trip from 2026-03-11 to
2026-03-16 covers six days. Two trips overlap when they share at least
one day.

    overlaps:      not (end_a < start_b) and not (start_a > end_b)
    overlap_ratio: overlap_days / mean(days_a, days_b)

The boolean form is the hard filter; the ratio is only a compatibility signal.
"""

import logging
from datetime import date, datetime
from typing import Union

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike) -> date:
    """
    Convert a date, datetime or ISO string to a calendar date.

    Datetimes are truncated to their date. Strings may carry a time part
    ("2026-03-11T09:00:00"); only the date is kept.

    Raises:
        ValueError: If the string is not an ISO date
        TypeError: If the value is not date-like
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "T" in text:
            text = text.split("T", 1)[0]
        return date.fromisoformat(text)
    raise TypeError(f"Expected a date or ISO date string, got {type(value).__name__}")


def inclusive_days(start: DateLike, end: DateLike) -> int:
    """Number of calendar days in [start, end], counting both ends."""
    return (parse_date(end) - parse_date(start)).days + 1


def overlaps(
    start_a: DateLike,
    end_a: DateLike,
    start_b: DateLike,
    end_b: DateLike
) -> bool:
    """
    Check whether two closed date intervals share at least one day.

    Args:
        start_a: First interval start
        end_a: First interval end
        start_b: Second interval start
        end_b: Second interval end

    Returns:
        True if the intervals intersect
    """
    a_start, a_end = parse_date(start_a), parse_date(end_a)
    b_start, b_end = parse_date(start_b), parse_date(end_b)
    return not a_end < b_start and not a_start > b_end


def overlap_ratio(
    start_a: DateLike,
    end_a: DateLike,
    start_b: DateLike,
    end_b: DateLike
) -> float:
    """
    Compute the shared-days ratio of two closed date intervals.

    The overlap length (inclusive days) is divided by the average of the
    two interval lengths. Identical intervals score 1.0, disjoint ones 0.0.

    Returns:
        Ratio in [0, 1]
    """
    a_start, a_end = parse_date(start_a), parse_date(end_a)
    b_start, b_end = parse_date(start_b), parse_date(end_b)

    overlap_start = max(a_start, b_start)
    overlap_end = min(a_end, b_end)
    if overlap_start > overlap_end:
        return 0.0

    a_days = inclusive_days(a_start, a_end)
    b_days = inclusive_days(b_start, b_end)
    overlap_days = inclusive_days(overlap_start, overlap_end)

    avg_days = (a_days + b_days) / 2
    if avg_days <= 0:
        return 0.0
    return min(overlap_days / avg_days, 1.0)
