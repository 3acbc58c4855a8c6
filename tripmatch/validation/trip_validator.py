"""
Pre-flight validation of a proposed trip.

Validation reports problems as human-readable messages and never raises;
the caller decides whether to block the matching run.
"""

import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Tuple, Union

from ..scheduling.intervals import parse_date
from ..schema.entities import Trip

logger = logging.getLogger(__name__)

MAX_TRIP_DAYS = 30

DESTINATION_REQUIRED = "Destination is required."
DATES_REQUIRED = "Travel dates are required."
DATES_INVALID = "Travel dates must be valid ISO dates (YYYY-MM-DD)."
START_AFTER_END = "Start date cannot be after end date."
TRIP_TOO_LONG = (
    f"Trip duration should be {MAX_TRIP_DAYS} days or less for companion matching."
)


def _fields(trip: Union[Trip, Mapping[str, Any]]) -> Tuple[Any, Any, Any]:
    if isinstance(trip, Trip):
        return trip.destination, trip.start_date, trip.end_date
    return trip.get("destination"), trip.get("start_date"), trip.get("end_date")


def _try_parse(value: Any) -> Optional[date]:
    try:
        return parse_date(value)
    except (ValueError, TypeError):
        return None


def validate_trip_input(trip: Union[Trip, Mapping[str, Any]]) -> List[str]:
    """
    Validate a trip before running the matching pipeline.

    Checks, in order:
    1. Destination is non-empty after trimming
    2. Both dates are present and parseable (stops here otherwise)
    3. Start date is not after end date
    4. End date is at most MAX_TRIP_DAYS days after start date

    Args:
        trip: A Trip, or a raw form mapping with destination/start_date/end_date

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    destination, start_value, end_value = _fields(trip)

    if not (destination or "").strip():
        errors.append(DESTINATION_REQUIRED)

    if start_value in (None, "") or end_value in (None, ""):
        errors.append(DATES_REQUIRED)
        return errors

    start = _try_parse(start_value)
    end = _try_parse(end_value)
    if start is None or end is None:
        errors.append(DATES_INVALID)
        return errors

    if start > end:
        errors.append(START_AFTER_END)

    if (end - start).days > MAX_TRIP_DAYS:
        errors.append(TRIP_TOO_LONG)

    if errors:
        logger.debug(f"Trip validation failed: {errors}")

    return errors
