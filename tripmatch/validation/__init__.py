"""Trip input validation."""

from .trip_validator import validate_trip_input, MAX_TRIP_DAYS

__all__ = ["validate_trip_input", "MAX_TRIP_DAYS"]
