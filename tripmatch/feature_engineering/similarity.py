"""
Pairwise similarity scorers for travel compatibility.

Each scorer compares one attribute of two travelers (or their trips) and
returns a score in [0, 1]. Scorers are independent pure functions; the
weighted combination lives in the fusion module.

Scorer Types:
- Set similarity: Jaccard index of interest tags
- Ordinal distance: budget tiers Low < Medium < High
- Equality with partial credit: travel style
- Lookup matrix: personality types
- Tiered proximity: same city / same country / different
- Status bonus: verification state
- Experience: trips completed + average rating
- Schedule: overlap ratio of the two trips

String comparisons are normalized (trimmed, lower-cased) throughout.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Dict, Tuple

from ..schema.entities import (
    User,
    UserStats,
    BudgetTier,
    TravelStyle,
    Personality,
    VerificationStatus,
)
from ..schema.results import CompatibilityLevel, ProximityTier

logger = logging.getLogger(__name__)

BUDGET_ORDER: List[BudgetTier] = [BudgetTier.LOW, BudgetTier.MEDIUM, BudgetTier.HIGH]

# Ordinal budget distance -> numeric score and display label
BUDGET_DISTANCE_SCORES: Dict[int, float] = {0: 1.0, 1: 0.7, 2: 0.3}
BUDGET_DISTANCE_LEVELS: Dict[int, CompatibilityLevel] = {
    0: CompatibilityLevel.HIGH,
    1: CompatibilityLevel.MEDIUM,
    2: CompatibilityLevel.LOW,
}

STYLE_PARTIAL_CREDIT = 0.5

NEUTRAL_PERSONALITY_SCORE = 0.5
PERSONALITY_MATRIX: Dict[Tuple[Personality, Personality], float] = {
    (Personality.EXTROVERT, Personality.EXTROVERT): 1.0,
    (Personality.EXTROVERT, Personality.AMBIVERT): 0.8,
    (Personality.EXTROVERT, Personality.INTROVERT): 0.4,
    (Personality.AMBIVERT, Personality.EXTROVERT): 0.8,
    (Personality.AMBIVERT, Personality.AMBIVERT): 1.0,
    (Personality.AMBIVERT, Personality.INTROVERT): 0.8,
    (Personality.INTROVERT, Personality.EXTROVERT): 0.4,
    (Personality.INTROVERT, Personality.AMBIVERT): 0.8,
    (Personality.INTROVERT, Personality.INTROVERT): 1.0,
}
PERSONALITY_HIGH = 0.8
PERSONALITY_MEDIUM = 0.5

PROXIMITY_SCORES: Dict[ProximityTier, float] = {
    ProximityTier.SAME_CITY: 1.0,
    ProximityTier.NEARBY: 0.7,
    ProximityTier.DIFFERENT: 0.3,
}

VERIFICATION_SCORES: Dict[VerificationStatus, float] = {
    VerificationStatus.VERIFIED: 1.0,
    VerificationStatus.PENDING: 0.5,
    VerificationStatus.UNVERIFIED: 0.0,
}

EXPERIENCE_TRIPS_CAP = 10
MAX_RATING = 5.0


@dataclass
class InterestSimilarity:
    """Jaccard similarity plus the shared tags for display."""
    score: float
    common_interests: List[str]
    total_interests: int


@dataclass
class LocationProximity:
    """Proximity score and its display tier."""
    score: float
    tier: ProximityTier


def normalize(value: Optional[str]) -> str:
    """Trim and lower-case a string; None becomes the empty string."""
    return (value or "").strip().lower()


def _display_interest(tag: str) -> str:
    return tag[:1].upper() + tag[1:]


def interest_similarity(source: List[str], target: List[str]) -> InterestSimilarity:
    """
    Compute Jaccard similarity between two interest lists.

    Tags are normalized before comparison. Common interests keep the order
    in which they appear in `target` (the candidate) and are re-capitalized.

    Args:
        source: Requester's interests
        target: Candidate's interests

    Returns:
        InterestSimilarity with score in [0, 1] (0 when both lists are empty)
    """
    source_set = {normalize(v) for v in source if normalize(v)}
    target_tags: List[str] = []
    for value in target:
        tag = normalize(value)
        if tag and tag not in target_tags:
            target_tags.append(tag)

    common = [tag for tag in target_tags if tag in source_set]
    union_size = len(source_set | set(target_tags))
    score = len(common) / union_size if union_size else 0.0

    return InterestSimilarity(
        score=score,
        common_interests=[_display_interest(tag) for tag in common],
        total_interests=union_size,
    )


def budget_distance(a: BudgetTier, b: BudgetTier) -> int:
    """Ordinal distance between two budget tiers (0, 1 or 2)."""
    return abs(BUDGET_ORDER.index(a) - BUDGET_ORDER.index(b))


def budget_compatibility(a: BudgetTier, b: BudgetTier) -> float:
    """Budget score: 1.0 same tier, 0.7 adjacent, 0.3 otherwise."""
    return BUDGET_DISTANCE_SCORES[budget_distance(a, b)]


def budget_compatibility_level(a: BudgetTier, b: BudgetTier) -> CompatibilityLevel:
    """Display label for the same distance used by budget_compatibility."""
    return BUDGET_DISTANCE_LEVELS[budget_distance(a, b)]


def travel_style_match(a: TravelStyle, b: TravelStyle) -> float:
    """1.0 for the same style, STYLE_PARTIAL_CREDIT otherwise."""
    return 1.0 if a == b else STYLE_PARTIAL_CREDIT


def personality_compatibility(a: Optional[Personality], b: Optional[Personality]) -> float:
    """
    Look up personality compatibility in a symmetric 3x3 matrix.

    Same types score 1.0, Ambivert pairs well with both (0.8), and
    Extrovert/Introvert scores lowest (0.4). Missing data on either side
    gives the neutral 0.5.
    """
    if a is None or b is None:
        return NEUTRAL_PERSONALITY_SCORE
    return PERSONALITY_MATRIX.get((a, b), NEUTRAL_PERSONALITY_SCORE)


def personality_level(score: float) -> CompatibilityLevel:
    """Display label for a personality score."""
    if score >= PERSONALITY_HIGH:
        return CompatibilityLevel.HIGH
    if score >= PERSONALITY_MEDIUM:
        return CompatibilityLevel.MEDIUM
    return CompatibilityLevel.LOW


def location_proximity(user_a: User, user_b: User) -> LocationProximity:
    """
    Coarse three-tier location proximity.

    Same city -> Same City; otherwise same home country -> Nearby;
    otherwise Different. This is a proxy, not a distance computation.
    """
    city_a = normalize(user_a.current_city)
    if city_a and city_a == normalize(user_b.current_city):
        tier = ProximityTier.SAME_CITY
    elif normalize(user_a.home_country) and \
            normalize(user_a.home_country) == normalize(user_b.home_country):
        tier = ProximityTier.NEARBY
    else:
        tier = ProximityTier.DIFFERENT
    return LocationProximity(score=PROXIMITY_SCORES[tier], tier=tier)


def verification_bonus(status: VerificationStatus) -> float:
    """Verified 1.0, Pending 0.5, Unverified 0.0."""
    return VERIFICATION_SCORES[status]


def experience_bonus(stats: Optional[UserStats]) -> float:
    """
    Reward travel history.

    Half the score comes from trips completed (capped at
    EXPERIENCE_TRIPS_CAP trips), half from the average rating out of 5.
    """
    if stats is None:
        return 0.0
    trips = max(stats.trips_completed, 0)
    trip_part = min(trips / EXPERIENCE_TRIPS_CAP, 1.0) * 0.5
    rating_part = min(max(stats.average_rating / MAX_RATING, 0.0), 1.0) * 0.5
    return trip_part + rating_part


def language_match(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive language equality; False if either side is unset."""
    if not normalize(a) or not normalize(b):
        return False
    return normalize(a) == normalize(b)
