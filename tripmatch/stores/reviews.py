"""
In-memory review store.

Travelers rate each other after a match or group trip. A reviewer may review
a given reviewee once per context, where the context is the match id or the
group id the review was written for. Averages and distributions only count
public reviews.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..fusion.weighted_fusion import round_half_up
from .base import InMemoryStore, Clock

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

# Category averages at or above this are strengths, below WEAK are improvements
STRONG_CATEGORY = 4.0
WEAK_CATEGORY = 3.0

# (keywords, feedback phrase) checked against lower-cased comments
FEEDBACK_KEYWORDS = [
    (("punctual", "on time"), "Often praised for punctuality"),
    (("friendly", "easy to talk"), "Noted for being friendly and approachable"),
    (("organized", "planned"), "Recognized for good planning skills"),
]


def _check_rating(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValueError(f"{name} must be an integer between {MIN_RATING} and {MAX_RATING}, got {value!r}")


def _round1(value: float) -> float:
    return round_half_up(value * 10) / 10


@dataclass
class ReviewCategories:
    """Per-aspect ratings, each 1-5."""
    communication: int
    reliability: int
    compatibility: int
    overall: int

    def __post_init__(self):
        for f in fields(self):
            _check_rating(f.name, getattr(self, f.name))

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class Review:
    review_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int
    comment: str
    categories: ReviewCategories
    created_at: datetime
    match_id: Optional[str] = None
    group_id: Optional[str] = None
    trip_id: Optional[str] = None
    is_public: bool = True
    helpful_votes: int = 0
    voters: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "review_id": self.review_id,
            "reviewer_id": self.reviewer_id,
            "reviewee_id": self.reviewee_id,
            "rating": self.rating,
            "comment": self.comment,
            "categories": self.categories.to_dict(),
            "created_at": self.created_at.isoformat(),
            "match_id": self.match_id,
            "group_id": self.group_id,
            "trip_id": self.trip_id,
            "is_public": self.is_public,
            "helpful_votes": self.helpful_votes,
        }


@dataclass
class AverageRating:
    """Public-review averages for one user, rounded to one decimal."""
    overall: float = 0.0
    communication: float = 0.0
    reliability: float = 0.0
    compatibility: float = 0.0
    total_reviews: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ReviewSummary:
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    common_feedback: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
            "common_feedback": list(self.common_feedback),
        }


def _empty_distribution() -> Dict[int, int]:
    return {r: 0 for r in range(MIN_RATING, MAX_RATING + 1)}


def _same_context(review: Review, match_id: Optional[str], group_id: Optional[str]) -> bool:
    """Reviews share a context when they name the same match or the same group."""
    if match_id is not None and review.match_id == match_id:
        return True
    if group_id is not None and review.group_id == group_id:
        return True
    return match_id is None and group_id is None and review.match_id is None and review.group_id is None


class ReviewStore(InMemoryStore):
    """Owns reviews; only a review's author may change or delete it."""

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._reviews: Dict[str, Review] = {}

    def create_review(
        self,
        reviewer_id: str,
        reviewee_id: str,
        rating: int,
        comment: str,
        categories: Any,
        match_id: Optional[str] = None,
        group_id: Optional[str] = None,
        trip_id: Optional[str] = None,
        is_public: bool = True
    ) -> Review:
        """
        Record a review.

        Args:
            categories: ReviewCategories or a mapping with the same keys

        Raises:
            ValueError: On ratings outside 1-5, self-review, or a duplicate
                review for the same reviewee and match/group
        """
        _check_rating("rating", rating)
        if isinstance(categories, dict):
            categories = ReviewCategories(**categories)
        if not self.can_review(reviewer_id, reviewee_id, match_id, group_id):
            if reviewer_id == reviewee_id:
                raise ValueError("Users cannot review themselves")
            raise ValueError(
                f"User {reviewer_id} has already reviewed {reviewee_id} for this match/group"
            )

        review = Review(
            review_id=self._next_id("review"),
            reviewer_id=reviewer_id,
            reviewee_id=reviewee_id,
            rating=rating,
            comment=comment,
            categories=categories,
            created_at=self.clock(),
            match_id=match_id,
            group_id=group_id,
            trip_id=trip_id,
            is_public=is_public,
        )
        self._reviews[review.review_id] = review
        logger.info(f"Created review {review.review_id}: {reviewer_id} -> {reviewee_id} ({rating}/5)")
        return review

    def _require_own_review(self, review_id: str, reviewer_id: str) -> Review:
        if review_id not in self._reviews:
            raise KeyError(f"Review not found: {review_id}")
        review = self._reviews[review_id]
        if review.reviewer_id != reviewer_id:
            raise PermissionError(f"User {reviewer_id} is not the author of review {review_id}")
        return review

    def update_review(
        self,
        review_id: str,
        reviewer_id: str,
        rating: Optional[int] = None,
        comment: Optional[str] = None,
        categories: Any = None,
        is_public: Optional[bool] = None
    ) -> Review:
        """Change the given fields of the author's own review."""
        review = self._require_own_review(review_id, reviewer_id)
        if rating is not None:
            _check_rating("rating", rating)
            review.rating = rating
        if categories is not None:
            review.categories = (
                ReviewCategories(**categories) if isinstance(categories, dict) else categories
            )
        if comment is not None:
            review.comment = comment
        if is_public is not None:
            review.is_public = is_public
        return review

    def delete_review(self, review_id: str, reviewer_id: str) -> None:
        self._require_own_review(review_id, reviewer_id)
        del self._reviews[review_id]
        logger.info(f"Deleted review {review_id}")

    def vote_helpful(self, review_id: str, user_id: str) -> Review:
        """Count a helpful vote; repeat votes by the same user are ignored."""
        if review_id not in self._reviews:
            raise KeyError(f"Review not found: {review_id}")
        review = self._reviews[review_id]
        if user_id not in review.voters:
            review.voters.append(user_id)
            review.helpful_votes += 1
        return review

    def get_review(self, review_id: str) -> Optional[Review]:
        return self._reviews.get(review_id)

    def get_user_reviews(
        self,
        user_id: str,
        as_reviewer: bool = False,
        as_reviewee: bool = False,
        public_only: bool = False,
        limit: Optional[int] = None
    ) -> List[Review]:
        """
        Reviews involving a user, newest first.

        With neither role flag set, reviews where the user is either the
        reviewer or the reviewee are returned.
        """
        reviews = list(self._reviews.values())
        if as_reviewer or as_reviewee:
            reviews = [
                r for r in reviews
                if (as_reviewer and r.reviewer_id == user_id)
                or (as_reviewee and r.reviewee_id == user_id)
            ]
        else:
            reviews = [r for r in reviews if user_id in (r.reviewer_id, r.reviewee_id)]
        if public_only:
            reviews = [r for r in reviews if r.is_public]

        # Insertion order breaks created_at ties, newest first
        reviews = list(reversed(reviews))
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return reviews[:limit] if limit else reviews

    def get_match_reviews(self, match_id: str) -> List[Review]:
        """Public reviews for a match, most helpful first."""
        reviews = [r for r in self._reviews.values() if r.match_id == match_id and r.is_public]
        return sorted(reviews, key=lambda r: r.helpful_votes, reverse=True)

    def get_group_reviews(self, group_id: str) -> List[Review]:
        """Public reviews for a group trip, most helpful first."""
        reviews = [r for r in self._reviews.values() if r.group_id == group_id and r.is_public]
        return sorted(reviews, key=lambda r: r.helpful_votes, reverse=True)

    def get_user_average_rating(self, user_id: str) -> AverageRating:
        reviews = self.get_user_reviews(user_id, as_reviewee=True, public_only=True)
        if not reviews:
            return AverageRating()

        count = len(reviews)
        return AverageRating(
            overall=_round1(sum(r.rating for r in reviews) / count),
            communication=_round1(sum(r.categories.communication for r in reviews) / count),
            reliability=_round1(sum(r.categories.reliability for r in reviews) / count),
            compatibility=_round1(sum(r.categories.compatibility for r in reviews) / count),
            total_reviews=count,
        )

    def get_rating_distribution(self, user_id: str) -> Dict[int, int]:
        distribution = _empty_distribution()
        for review in self.get_user_reviews(user_id, as_reviewee=True, public_only=True):
            distribution[review.rating] += 1
        return distribution

    def can_review(
        self,
        reviewer_id: str,
        reviewee_id: str,
        match_id: Optional[str] = None,
        group_id: Optional[str] = None
    ) -> bool:
        if reviewer_id == reviewee_id:
            return False
        return not any(
            r.reviewer_id == reviewer_id
            and r.reviewee_id == reviewee_id
            and _same_context(r, match_id, group_id)
            for r in self._reviews.values()
        )

    def get_review_stats(self) -> Dict[str, Any]:
        """Store-wide totals over public reviews."""
        public = [r for r in self._reviews.values() if r.is_public]
        distribution = _empty_distribution()
        for review in public:
            distribution[review.rating] += 1
        average = _round1(sum(r.rating for r in public) / len(public)) if public else 0.0
        return {
            "total_reviews": len(public),
            "average_rating": average,
            "reviews_by_rating": distribution,
        }

    def generate_review_summary(self, user_id: str) -> ReviewSummary:
        """Strengths and improvements from category averages, plus comment themes."""
        reviews = self.get_user_reviews(user_id, as_reviewee=True, public_only=True)
        if not reviews:
            return ReviewSummary()

        averages = self.get_user_average_rating(user_id)
        summary = ReviewSummary()

        labels = [
            ("communication", "Excellent communication", "Communication could be improved"),
            ("reliability", "Very reliable", "More reliability needed"),
            ("compatibility", "Great travel compatibility", "Better compatibility matching"),
        ]
        for name, strength, improvement in labels:
            value = getattr(averages, name)
            if value >= STRONG_CATEGORY:
                summary.strengths.append(strength)
            if value < WEAK_CATEGORY:
                summary.improvements.append(improvement)

        comments = [r.comment.lower() for r in reviews]
        for keywords, phrase in FEEDBACK_KEYWORDS:
            if any(k in c for c in comments for k in keywords):
                summary.common_feedback.append(phrase)

        return summary
