"""
Group suggestion from top-scoring matches.

Policy: when at least `min_members` matches score at or above the
group-eligible threshold, suggest exactly one Planning group for the trip
holding up to `max_suggested_members` of them, in score order.
This is a fixed placeholder rule, not a clustering algorithm.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Sequence, TYPE_CHECKING

from ..schema.entities import Trip
from ..schema.results import Group, GroupStatus, Match

if TYPE_CHECKING:
    from .pipeline import MatchThresholds

logger = logging.getLogger(__name__)

DEFAULT_GROUP_ELIGIBLE = 70


@dataclass
class GroupPolicy:
    """
    Sizing rules for suggested groups.

    Attributes:
        min_members: Qualifying matches needed before a group is suggested
        max_suggested_members: Matches placed in the suggested group
        max_members: Capacity of the group once formed
    """
    min_members: int = 2
    max_suggested_members: int = 4
    max_members: int = 6

    def validate(self) -> None:
        """Validate sizing values."""
        if self.min_members < 1:
            raise ValueError(f"min_members must be >= 1, got {self.min_members}")
        if self.max_suggested_members < self.min_members:
            raise ValueError("max_suggested_members must be >= min_members")
        if self.max_members < self.max_suggested_members:
            raise ValueError("max_members must be >= max_suggested_members")

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "GroupPolicy":
        """Create from main config dictionary."""
        groups = config.get("matching", {}).get("groups", {})
        return cls(
            min_members=groups.get("min_members", 2),
            max_suggested_members=groups.get("max_suggested_members", 4),
            max_members=groups.get("max_members", 6),
        )


def suggest_groups(
    matches: Sequence[Match],
    requesting_trip: Trip,
    thresholds: Optional["MatchThresholds"] = None,
    policy: Optional[GroupPolicy] = None,
    now: Optional[datetime] = None
) -> List[Group]:
    """
    Suggest a travel group from already score-sorted matches.

    Args:
        matches: Pipeline matches, sorted by score descending
        requesting_trip: The trip the group is for
        thresholds: Provides group_eligible (70 if None)
        policy: GroupPolicy sizing rules (defaults if None)
        now: Timestamp for created_at (UTC now if None)

    Returns:
        A list with one Group, or an empty list
    """
    policy = policy or GroupPolicy()
    cutoff = thresholds.group_eligible if thresholds is not None else DEFAULT_GROUP_ELIGIBLE

    eligible = [m for m in matches if m.score >= cutoff]
    if len(eligible) < policy.min_members:
        logger.debug(
            f"No group suggested: {len(eligible)} matches at or above {cutoff}"
        )
        return []

    members = [m.user for m in eligible[:policy.max_suggested_members]]
    group = Group(
        group_id=f"group-{requesting_trip.trip_id}",
        trip_id=requesting_trip.trip_id,
        name=f"{requesting_trip.destination} Adventure Group",
        members=members,
        created_by="system",
        created_at=now or datetime.now(timezone.utc),
        status=GroupStatus.PLANNING,
        max_members=policy.max_members,
        group_type=requesting_trip.travel_type,
        destination=requesting_trip.destination,
        start_date=requesting_trip.start_date,
        end_date=requesting_trip.end_date,
        budget=requesting_trip.budget,
        description=f"Automatically suggested group for {requesting_trip.destination} trip",
    )
    logger.info(f"Suggested group {group.group_id} with {len(members)} members")
    return [group]
