"""Domain entities and pipeline result types."""

from .entities import (
    BudgetTier,
    TravelStyle,
    Personality,
    VerificationStatus,
    TravelType,
    TripStatus,
    TravelProfile,
    UserStats,
    User,
    Trip,
    coerce_enum,
)
from .results import (
    MatchStatus,
    CompatibilityLevel,
    ProximityTier,
    GroupStatus,
    CompatibilityScore,
    MatchDetails,
    Match,
    MatchSummary,
    Group,
    MatchingEngineResult,
    make_match_id,
)

__all__ = [
    "BudgetTier",
    "TravelStyle",
    "Personality",
    "VerificationStatus",
    "TravelType",
    "TripStatus",
    "TravelProfile",
    "UserStats",
    "User",
    "Trip",
    "coerce_enum",
    "MatchStatus",
    "CompatibilityLevel",
    "ProximityTier",
    "GroupStatus",
    "CompatibilityScore",
    "MatchDetails",
    "Match",
    "MatchSummary",
    "Group",
    "MatchingEngineResult",
    "make_match_id",
]
