"""
Weighted fusion of component scores into one compatibility score.

This module combines the pairwise similarity scorers into a single
0-100 score and derives advisory insight phrases from the components.

Fusion Formula:
    overall = round_half_up(100 * sum(weight_i * component_i))

Canonical weights (algorithm 2.0, sum to 1.0):
    interest_similarity   0.25
    budget_compatibility  0.15
    travel_style_match    0.15
    personality_match     0.10
    schedule_overlap      0.15
    location_proximity    0.10
    verification_bonus    0.05
    experience_bonus      0.05

Insight phrases are threshold-based, never scored, and listed in a fixed order.
"""

import json
import logging
import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Tuple

from ..feature_engineering.similarity import (
    interest_similarity,
    budget_compatibility,
    travel_style_match,
    personality_compatibility,
    location_proximity,
    verification_bonus,
    experience_bonus,
)
from ..scheduling.intervals import overlap_ratio
from ..schema.entities import User, Trip
from ..schema.results import CompatibilityScore

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-6

# Insight thresholds
STRONG_INTEREST = 0.7
STRONG_PERSONALITY = 0.8
STRONG_SCHEDULE = 0.8
WEAK_INTEREST = 0.3
WEAK_BUDGET = 0.5
WEAK_SCHEDULE = 0.3
GAP_PERSONALITY = 0.5
GAP_LOCATION = 0.5
FULL_VERIFICATION = 1.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


@dataclass
class ScoringWeights:
    """
    Weight vector for the compatibility components.

    Attributes mirror the component names in CompatibilityScore.components.
    Weights must be non-negative and sum to 1.
    """
    interest_similarity: float = 0.25
    budget_compatibility: float = 0.15
    travel_style_match: float = 0.15
    personality_match: float = 0.10
    schedule_overlap: float = 0.15
    location_proximity: float = 0.10
    verification_bonus: float = 0.05
    experience_bonus: float = 0.05

    def validate(self) -> None:
        """Validate weight values."""
        for name, weight in self.to_dict().items():
            if weight < 0:
                raise ValueError(f"Weight {name} must be non-negative, got {weight}")
        total = self.total()
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Weights must sum to 1, got {total}")

    def total(self) -> float:
        return sum(self.to_dict().values())

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoringWeights":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScoringWeights":
        """Create from main config dictionary; missing keys keep defaults."""
        weights_config = config.get("scoring", {}).get("weights", {})
        return cls(**weights_config)

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved scoring weights to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "ScoringWeights":
        """Load from JSON file."""
        with open(filepath, "r") as f:
            d = json.load(f)
        return cls.from_dict(d)


class CompatibilityScorer:
    """
    Weighted combiner for travel compatibility.

    Computes every component scorer for a (requester, candidate) pair and
    their trips, fuses them with a fixed weight vector, and attaches
    strengths, concerns and recommendations.

    Attributes:
        weights: ScoringWeights used for fusion
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        """
        Initialize the scorer.

        Args:
            weights: ScoringWeights instance (canonical weights if None)
        """
        self.weights = weights or ScoringWeights()
        self.weights.validate()
        logger.debug(f"Initialized CompatibilityScorer with weights={self.weights.to_dict()}")

    def components(
        self,
        requesting_user: User,
        candidate_user: User,
        requesting_trip: Trip,
        candidate_trip: Trip
    ) -> Dict[str, float]:
        """
        Compute all component scores, each in [0, 1].

        Budget compares the two trips' tiers; verification and experience
        describe the candidate only.
        """
        return {
            "interest_similarity": interest_similarity(
                requesting_user.profile.interests, candidate_user.profile.interests
            ).score,
            "budget_compatibility": budget_compatibility(
                requesting_trip.budget, candidate_trip.budget
            ),
            "travel_style_match": travel_style_match(
                requesting_user.profile.travel_style, candidate_user.profile.travel_style
            ),
            "personality_match": personality_compatibility(
                requesting_user.profile.personality, candidate_user.profile.personality
            ),
            "schedule_overlap": overlap_ratio(
                requesting_trip.start_date, requesting_trip.end_date,
                candidate_trip.start_date, candidate_trip.end_date
            ),
            "location_proximity": location_proximity(requesting_user, candidate_user).score,
            "verification_bonus": verification_bonus(candidate_user.verification_status),
            "experience_bonus": experience_bonus(candidate_user.stats),
        }

    def fuse(self, components: Dict[str, float]) -> int:
        """
        Combine component scores into an integer in [0, 100].

        Raises:
            KeyError: If a weighted component is missing
        """
        weighted = sum(
            weight * components[name] for name, weight in self.weights.to_dict().items()
        )
        return min(max(round_half_up(weighted * 100), 0), 100)

    def score(
        self,
        requesting_user: User,
        candidate_user: User,
        requesting_trip: Trip,
        candidate_trip: Trip
    ) -> CompatibilityScore:
        """
        Score a candidate against the requester.

        Args:
            requesting_user: The traveler asking for matches
            candidate_user: The candidate being evaluated
            requesting_trip: The requester's trip
            candidate_trip: The candidate's trip

        Returns:
            CompatibilityScore with overall score, components and insights
        """
        components = self.components(
            requesting_user, candidate_user, requesting_trip, candidate_trip
        )
        overall = self.fuse(components)
        strengths, concerns, recommendations = derive_insights(components)

        return CompatibilityScore(
            overall=overall,
            components=components,
            strengths=strengths,
            concerns=concerns,
            recommendations=recommendations,
        )


def derive_insights(components: Dict[str, float]) -> Tuple[List[str], List[str], List[str]]:
    """
    Turn component scores into advisory phrases.

    Returns:
        Tuple of (strengths, concerns, recommendations)
    """
    interest = components["interest_similarity"]
    budget = components["budget_compatibility"]
    personality = components["personality_match"]
    location = components["location_proximity"]
    schedule = components["schedule_overlap"]
    verification = components["verification_bonus"]

    strengths: List[str] = []
    concerns: List[str] = []
    recommendations: List[str] = []

    if interest > STRONG_INTEREST:
        strengths.append("Strong interest alignment")
    if budget == 1.0:
        strengths.append("Perfect budget match")
    if personality > STRONG_PERSONALITY:
        strengths.append("Compatible personalities")
    if location == 1.0:
        strengths.append("Same location")
    if schedule > STRONG_SCHEDULE:
        strengths.append("Great schedule overlap")

    if interest < WEAK_INTEREST:
        concerns.append("Limited shared interests")
    if budget < WEAK_BUDGET:
        concerns.append("Budget mismatch")
    if schedule < WEAK_SCHEDULE:
        concerns.append("Limited schedule overlap")

    if personality < GAP_PERSONALITY:
        recommendations.append("Consider communication styles")
    if location < GAP_LOCATION:
        recommendations.append("Plan meeting logistics")
    if verification < FULL_VERIFICATION:
        recommendations.append("Verify profile authenticity")

    return strengths, concerns, recommendations
