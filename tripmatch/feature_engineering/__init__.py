"""Pairwise similarity scorers for travel compatibility."""

from .similarity import (
    InterestSimilarity,
    LocationProximity,
    normalize,
    interest_similarity,
    budget_distance,
    budget_compatibility,
    budget_compatibility_level,
    travel_style_match,
    personality_compatibility,
    personality_level,
    location_proximity,
    verification_bonus,
    experience_bonus,
    language_match,
    STYLE_PARTIAL_CREDIT,
)

__all__ = [
    "InterestSimilarity",
    "LocationProximity",
    "normalize",
    "interest_similarity",
    "budget_distance",
    "budget_compatibility",
    "budget_compatibility_level",
    "travel_style_match",
    "personality_compatibility",
    "personality_level",
    "location_proximity",
    "verification_bonus",
    "experience_bonus",
    "language_match",
    "STYLE_PARTIAL_CREDIT",
]
