"""
Travel Companion Matching - Algorithm 2.0

This package scores a requesting traveler and their trip against a pool of
candidate travelers and trips, and turns the scores into ranked matches,
a suggested group and run statistics.

Key Design Decisions:
- Hard filters (destination + date overlap) run before any scoring
- Eight independent similarity scorers, fused by a fixed weight vector
- Match status is assigned purely from score thresholds
- Every run is a pure function of its inputs (stable match identifiers)
"""

__version__ = "2.0.0"

from .matching import run_matching_pipeline, MatchingPipeline
from .validation import validate_trip_input

__all__ = ["run_matching_pipeline", "MatchingPipeline", "validate_trip_input"]
