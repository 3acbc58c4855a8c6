"""Date interval helpers for trip scheduling."""

from .intervals import parse_date, inclusive_days, overlaps, overlap_ratio

__all__ = ["parse_date", "inclusive_days", "overlaps", "overlap_ratio"]
