"""
Candidate matching pipeline.

Given a requesting user, their trip and a snapshot of all users and trips,
the pipeline performs the following steps:
1. Join every other user to their first trip (users without a dated trip are dropped)
2. Apply hard filters: same destination (normalized) AND overlapping dates
3. Score each eligible candidate with the CompatibilityScorer
4. Classify status from score thresholds (Recommended / Pending / Rejected)
5. Drop Rejected matches
6. Sort by score, descending (stable)
7. Suggest a group from the top matches
8. Summarize the run

The pipeline is a pure function of its inputs: identical inputs give identical
match ids, scores and ordering.
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Sequence, Tuple

from ..feature_engineering.similarity import (
    normalize,
    interest_similarity,
    budget_compatibility_level,
    personality_level,
    location_proximity,
    language_match,
)
from ..fusion.weighted_fusion import CompatibilityScorer, ScoringWeights, round_half_up
from ..scheduling.intervals import overlaps
from ..schema.entities import User, Trip
from ..schema.results import (
    Match,
    MatchDetails,
    MatchStatus,
    MatchSummary,
    MatchingEngineResult,
    CompatibilityScore,
    make_match_id,
)
from .groups import suggest_groups, GroupPolicy

logger = logging.getLogger(__name__)

ALGORITHM_VERSION = "2.0.0"

# Statuses a caller may have confirmed that survive a re-run
STICKY_STATUSES = (MatchStatus.MATCHED, MatchStatus.REJECTED)


@dataclass
class MatchThresholds:
    """
    Score cutoffs for match classification.

    Attributes:
        recommended: score >= recommended -> Recommended
        pending: score >= pending -> Pending (also enables chat)
        group_eligible: minimum score for the suggested group
    """
    recommended: int = 80
    pending: int = 60
    group_eligible: int = 70

    def validate(self) -> None:
        """Validate threshold values."""
        for name, value in self.to_dict().items():
            if not 0 <= value <= 100:
                raise ValueError(f"{name} threshold must be in [0, 100], got {value}")
        if self.pending > self.recommended:
            raise ValueError(
                f"pending threshold ({self.pending}) must not exceed "
                f"recommended threshold ({self.recommended})"
            )

    def classify(self, score: int) -> MatchStatus:
        """Assign a status from a score, highest cutoff first."""
        if score >= self.recommended:
            return MatchStatus.RECOMMENDED
        if score >= self.pending:
            return MatchStatus.PENDING
        return MatchStatus.REJECTED

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MatchThresholds":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchThresholds":
        """Create from main config dictionary."""
        thresholds = config.get("matching", {}).get("thresholds", {})
        return cls(
            recommended=thresholds.get("recommended", 80),
            pending=thresholds.get("pending", 60),
            group_eligible=thresholds.get("group_eligible", 70),
        )

    def save(self, filepath: str) -> None:
        """Save to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved match thresholds to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "MatchThresholds":
        """Load from JSON file."""
        with open(filepath, "r") as f:
            d = json.load(f)
        return cls.from_dict(d)


class MatchingPipeline:
    """
    Orchestrates filtering, scoring, classification and summarization.

    The pipeline holds only configuration; every call to run() recomputes
    from its arguments.

    Attributes:
        scorer: CompatibilityScorer used for every candidate
        thresholds: MatchThresholds for classification and chat
        group_policy: GroupPolicy for group suggestion
    """

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        thresholds: Optional[MatchThresholds] = None,
        group_policy: Optional[GroupPolicy] = None
    ):
        self.scorer = CompatibilityScorer(weights)
        self.thresholds = thresholds or MatchThresholds()
        self.thresholds.validate()
        self.group_policy = group_policy or GroupPolicy()
        self.group_policy.validate()

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchingPipeline":
        """Create from main config dictionary."""
        return cls(
            weights=ScoringWeights.from_config(config),
            thresholds=MatchThresholds.from_config(config),
            group_policy=GroupPolicy.from_config(config),
        )

    def run(
        self,
        requesting_user: User,
        requesting_trip: Trip,
        users: Sequence[User],
        trips: Sequence[Trip],
        now: Optional[datetime] = None
    ) -> MatchingEngineResult:
        """
        Run the matching pipeline for one trip.

        Args:
            requesting_user: The traveler asking for companions
            requesting_trip: The requester's trip (dates required)
            users: Snapshot of all users (the requester is skipped)
            trips: Snapshot of all trips
            now: Timestamp for created_at/generated_at (UTC now if None)

        Returns:
            MatchingEngineResult with matches, groups and summary
        """
        start_time = time.perf_counter()
        now = now or datetime.now(timezone.utc)

        total_candidates = sum(1 for u in users if u.user_id != requesting_user.user_id)
        candidates = build_candidates(requesting_user, users, trips)
        eligible = [
            (candidate, trip) for candidate, trip in candidates
            if passes_hard_filters(requesting_trip, trip)
        ]
        logger.debug(
            f"{len(eligible)}/{len(candidates)} candidates with trips passed destination and date filters"
        )

        scored = [
            self._build_match(requesting_user, requesting_trip, candidate, trip, now)
            for candidate, trip in eligible
        ]
        matches = [m for m in scored if m.match_status != MatchStatus.REJECTED]
        # sorted() is stable, so ties keep filter order
        matches = sorted(matches, key=lambda m: m.score, reverse=True)

        groups = suggest_groups(
            matches, requesting_trip,
            thresholds=self.thresholds, policy=self.group_policy, now=now
        )
        summary = summarize_run(
            requesting_trip, total_candidates, len(eligible), matches, now
        )
        processing_time_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Matched trip {requesting_trip.trip_id} to {requesting_trip.destination}: "
            f"{len(matches)} matches from {summary.eligible_after_filtering} eligible of "
            f"{summary.total_candidates} candidates (avg score {summary.average_score}, "
            f"{processing_time_ms:.1f} ms)"
        )

        return MatchingEngineResult(
            matches=matches,
            groups=groups,
            summary=summary,
            processing_time_ms=processing_time_ms,
            algorithm_version=ALGORITHM_VERSION,
        )

    def _build_match(
        self,
        requesting_user: User,
        requesting_trip: Trip,
        candidate: User,
        candidate_trip: Trip,
        now: datetime
    ) -> Match:
        compatibility = self.scorer.score(requesting_user, candidate, requesting_trip, candidate_trip)
        status = self.thresholds.classify(compatibility.overall)
        details = build_match_details(
            requesting_user, candidate, requesting_trip, candidate_trip, compatibility
        )
        return Match(
            match_id=make_match_id(requesting_trip.trip_id, candidate.user_id),
            trip_id=requesting_trip.trip_id,
            user=candidate,
            score=compatibility.overall,
            match_status=status,
            compatibility_score=compatibility,
            match_details=details,
            chat_enabled=compatibility.overall >= self.thresholds.pending,
            created_at=now,
        )


def build_candidates(
    requesting_user: User,
    users: Sequence[User],
    trips: Sequence[Trip]
) -> List[Tuple[User, Trip]]:
    """
    Pair every other user with their first trip.

    Users without any trip, or whose trip has no dates yet, are dropped here
    and never reach filtering. They still count towards total_candidates.
    """
    first_trip: Dict[str, Trip] = {}
    for trip in trips:
        first_trip.setdefault(trip.user_id, trip)

    candidates = []
    for user in users:
        if user.user_id == requesting_user.user_id:
            continue
        trip = first_trip.get(user.user_id)
        if trip is None:
            logger.debug(f"Skipping candidate {user.user_id}: no trip found")
            continue
        if trip.start_date is None or trip.end_date is None:
            logger.debug(f"Skipping candidate {user.user_id}: trip {trip.trip_id} has no dates")
            continue
        candidates.append((user, trip))
    return candidates


def passes_hard_filters(requesting_trip: Trip, candidate_trip: Trip) -> bool:
    """Same destination (normalized) and at least one shared day."""
    if normalize(candidate_trip.destination) != normalize(requesting_trip.destination):
        return False
    return overlaps(
        requesting_trip.start_date, requesting_trip.end_date,
        candidate_trip.start_date, candidate_trip.end_date
    )


def build_match_details(
    requesting_user: User,
    candidate: User,
    requesting_trip: Trip,
    candidate_trip: Trip,
    compatibility: CompatibilityScore
) -> MatchDetails:
    """Human-facing breakdown for an eligible candidate."""
    interests = interest_similarity(
        requesting_user.profile.interests, candidate.profile.interests
    )
    return MatchDetails(
        interest_match=interests.common_interests,
        budget_compatibility=budget_compatibility_level(
            requesting_trip.budget, candidate_trip.budget
        ),
        # Only candidates passing both hard filters are ever detailed
        date_overlap=True,
        destination_match=True,
        style_match=requesting_user.profile.travel_style == candidate.profile.travel_style,
        personality_compatibility=personality_level(
            compatibility.components["personality_match"]
        ),
        language_match=language_match(
            requesting_user.profile.language_preference,
            candidate.profile.language_preference,
        ),
        location_proximity=location_proximity(requesting_user, candidate).tier,
    )


def summarize_run(
    requesting_trip: Trip,
    total_candidates: int,
    eligible: int,
    matches: List[Match],
    now: datetime
) -> MatchSummary:
    """Aggregate counters for one run; average_score is 0 with no matches."""
    average_score = (
        round_half_up(sum(m.score for m in matches) / len(matches)) if matches else 0
    )
    return MatchSummary(
        total_candidates=total_candidates,
        eligible_after_filtering=eligible,
        recommended=sum(1 for m in matches if m.match_status == MatchStatus.RECOMMENDED),
        matched=sum(1 for m in matches if m.match_status == MatchStatus.MATCHED),
        average_score=average_score,
        generated_at=now,
        destination=requesting_trip.destination,
        start_date=requesting_trip.start_date,
        end_date=requesting_trip.end_date,
        budget=requesting_trip.budget,
        travel_type=requesting_trip.travel_type,
    )


def merge_previous_statuses(
    matches: List[Match],
    previous: Sequence[Match]
) -> List[Match]:
    """
    Re-apply statuses a user already confirmed in an earlier run.

    Matches whose match_id previously carried Matched or Rejected keep that
    status; all other matches keep the freshly assigned one.

    Args:
        matches: Matches from the current run
        previous: Matches from an earlier run of the same trip

    Returns:
        New list of matches, in the same order
    """
    previous_status = {m.match_id: m.match_status for m in previous}
    merged = []
    for match in matches:
        status = previous_status.get(match.match_id)
        if status in STICKY_STATUSES and status != match.match_status:
            merged.append(match.with_status(status))
        else:
            merged.append(match)
    return merged


def run_matching_pipeline(
    requesting_user: User,
    requesting_trip: Trip,
    users: Sequence[User],
    trips: Sequence[Trip],
    weights: Optional[ScoringWeights] = None,
    thresholds: Optional[MatchThresholds] = None,
    group_policy: Optional[GroupPolicy] = None,
    now: Optional[datetime] = None
) -> MatchingEngineResult:
    """
    Run the matching pipeline with canonical (or given) weights, thresholds
    and group policy.

    Returns:
        MatchingEngineResult with matches, groups, summary and timing
    """
    pipeline = MatchingPipeline(weights=weights, thresholds=thresholds, group_policy=group_policy)
    return pipeline.run(requesting_user, requesting_trip, users, trips, now=now)
