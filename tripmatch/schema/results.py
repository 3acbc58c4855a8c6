"""
Result types produced by the matching pipeline.

Every result is built through its dataclass constructor, which validates
the invariants callers rely on (score ranges, status values, consistent
overall score). All types serialize to plain JSON-ready dictionaries.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional, Dict, Any, List

from .entities import User, BudgetTier, TravelType, coerce_enum


class MatchStatus(Enum):
    """Match classification. The pipeline only assigns the first two."""
    RECOMMENDED = "Recommended"
    PENDING = "Pending"
    MATCHED = "Matched"
    REJECTED = "Rejected"


class CompatibilityLevel(Enum):
    """Coarse label for a component score."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ProximityTier(Enum):
    """Coarse location closeness used instead of geodistance."""
    SAME_CITY = "Same City"
    NEARBY = "Nearby"
    DIFFERENT = "Different"


class GroupStatus(Enum):
    ACTIVE = "Active"
    PLANNING = "Planning"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


@dataclass
class CompatibilityScore:
    """
    Weighted compatibility between a requester and one candidate.

    Attributes:
        overall: Weighted score as an integer in [0, 100]
        components: Component name -> score in [0, 1]
        strengths: Advisory phrases for strong components
        concerns: Advisory phrases for weak components
        recommendations: Advisory phrases for mid-range gaps
    """
    overall: int
    components: Dict[str, float]
    strengths: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate score ranges."""
        if not isinstance(self.overall, int) or not 0 <= self.overall <= 100:
            raise ValueError(f"overall must be an integer in [0, 100], got {self.overall}")
        for name, value in self.components.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Component {name} must be in [0, 1], got {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "overall": self.overall,
            "components": {k: float(v) for k, v in self.components.items()},
            "strengths": list(self.strengths),
            "concerns": list(self.concerns),
            "recommendations": list(self.recommendations),
        }


@dataclass
class MatchDetails:
    """Human-facing breakdown shown on a match card."""
    interest_match: List[str]
    budget_compatibility: CompatibilityLevel
    date_overlap: bool
    destination_match: bool
    style_match: bool
    personality_compatibility: CompatibilityLevel
    language_match: bool
    location_proximity: ProximityTier

    def __post_init__(self):
        self.budget_compatibility = coerce_enum(CompatibilityLevel, self.budget_compatibility)
        self.personality_compatibility = coerce_enum(
            CompatibilityLevel, self.personality_compatibility
        )
        self.location_proximity = coerce_enum(ProximityTier, self.location_proximity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interest_match": list(self.interest_match),
            "budget_compatibility": self.budget_compatibility.value,
            "date_overlap": self.date_overlap,
            "destination_match": self.destination_match,
            "style_match": self.style_match,
            "personality_compatibility": self.personality_compatibility.value,
            "language_match": self.language_match,
            "location_proximity": self.location_proximity.value,
        }


def make_match_id(trip_id: str, candidate_user_id: str) -> str:
    """Deterministic match identifier, stable across re-runs."""
    return f"m-{trip_id}-{candidate_user_id}"


@dataclass
class Match:
    """
    A scored candidate for one trip.

    Attributes:
        match_id: Deterministic id derived from trip id and candidate user id
        trip_id: The requester's trip
        user: The candidate
        score: Same value as compatibility_score.overall
        match_status: Pipeline-assigned or caller-overridden status
        chat_enabled: Whether the pair may open a chat
    """
    match_id: str
    trip_id: str
    user: User
    score: int
    match_status: MatchStatus
    compatibility_score: CompatibilityScore
    match_details: MatchDetails
    chat_enabled: bool
    created_at: datetime
    group_id: Optional[str] = None
    last_interaction: Optional[datetime] = None

    def __post_init__(self):
        """Validate score and status."""
        self.match_status = coerce_enum(MatchStatus, self.match_status)
        if not isinstance(self.score, int) or not 0 <= self.score <= 100:
            raise ValueError(f"score must be an integer in [0, 100], got {self.score}")
        if self.score != self.compatibility_score.overall:
            raise ValueError(
                f"score ({self.score}) does not match compatibility overall "
                f"({self.compatibility_score.overall})"
            )

    def with_status(self, status: MatchStatus) -> "Match":
        """Return a copy with a new status (user-driven lifecycle)."""
        return replace(self, match_status=coerce_enum(MatchStatus, status))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "match_id": self.match_id,
            "trip_id": self.trip_id,
            "user": self.user.to_dict(),
            "score": self.score,
            "match_status": self.match_status.value,
            "compatibility_score": self.compatibility_score.to_dict(),
            "match_details": self.match_details.to_dict(),
            "chat_enabled": self.chat_enabled,
            "created_at": self.created_at.isoformat(),
            "group_id": self.group_id,
            "last_interaction": self.last_interaction.isoformat() if self.last_interaction else None,
        }


@dataclass
class MatchSummary:
    """
    Aggregate counters for one pipeline run, plus the filters used.

    Attributes:
        total_candidates: Every user other than the requester
        eligible_after_filtering: Candidates passing destination + date filters
        recommended: Returned matches with status Recommended
        matched: Returned matches with status Matched
        average_score: Rounded mean score of returned matches (0 if none)
    """
    total_candidates: int
    eligible_after_filtering: int
    recommended: int
    matched: int
    average_score: int
    generated_at: datetime
    destination: str
    start_date: Optional[date]
    end_date: Optional[date]
    budget: BudgetTier
    travel_type: TravelType

    def __post_init__(self):
        if self.eligible_after_filtering > self.total_candidates:
            raise ValueError("eligible_after_filtering cannot exceed total_candidates")
        if not 0 <= self.average_score <= 100:
            raise ValueError(f"average_score must be in [0, 100], got {self.average_score}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_candidates": self.total_candidates,
            "eligible_after_filtering": self.eligible_after_filtering,
            "recommended": self.recommended,
            "matched": self.matched,
            "average_score": self.average_score,
            "generated_at": self.generated_at.isoformat(),
            "filters": {
                "destination": self.destination,
                "date_range": {
                    "start": self.start_date.isoformat() if self.start_date else None,
                    "end": self.end_date.isoformat() if self.end_date else None,
                },
                "budget": self.budget.value,
                "travel_type": self.travel_type.value,
            },
        }


@dataclass
class Group:
    """An auto-suggested travel group built from top matches."""
    group_id: str
    trip_id: str
    name: str
    members: List[User]
    created_by: str
    created_at: datetime
    status: GroupStatus
    max_members: int
    group_type: TravelType
    destination: str
    start_date: Optional[date]
    end_date: Optional[date]
    budget: BudgetTier
    description: Optional[str] = None
    chat_id: Optional[str] = None

    def __post_init__(self):
        self.status = coerce_enum(GroupStatus, self.status)
        if len(self.members) > self.max_members:
            raise ValueError(
                f"Group has {len(self.members)} members, more than max_members={self.max_members}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "trip_id": self.trip_id,
            "name": self.name,
            "members": [m.user_id for m in self.members],
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "max_members": self.max_members,
            "group_type": self.group_type.value,
            "destination": self.destination,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "budget": self.budget.value,
            "description": self.description,
            "chat_id": self.chat_id,
        }


@dataclass
class MatchingEngineResult:
    """Everything a single pipeline run returns."""
    matches: List[Match]
    groups: List[Group]
    summary: MatchSummary
    processing_time_ms: float
    algorithm_version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": [m.to_dict() for m in self.matches],
            "groups": [g.to_dict() for g in self.groups],
            "summary": self.summary.to_dict(),
            "processing_time_ms": self.processing_time_ms,
            "algorithm_version": self.algorithm_version,
        }
