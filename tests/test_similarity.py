"""
Tests for the pairwise similarity scorers.

Each scorer is a pure function returning a value in [0, 1].
"""

import pytest

from tripmatch.feature_engineering import (
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
)
from tripmatch.schema import (
    BudgetTier,
    TravelStyle,
    Personality,
    VerificationStatus,
    UserStats,
    CompatibilityLevel,
    ProximityTier,
)
from tripmatch.fusion import CompatibilityScorer

from conftest import make_user


class TestInterestSimilarity:

    def test_identical_sets(self):
        assert interest_similarity(["Food", "Art"], ["art", " food "]).score == 1.0

    def test_disjoint_sets(self):
        assert interest_similarity(["Food"], ["Hiking"]).score == 0.0

    @pytest.mark.parametrize("a,b", [([], ["Food"]), (["Food"], []), ([], [])])
    def test_empty_side_is_zero(self, a, b):
        assert interest_similarity(a, b).score == 0.0

    def test_symmetric_and_bounded(self):
        a = ["Food", "Culture", "Photography"]
        b = ["Food", "Adventure", "Photography", "Music"]
        forward = interest_similarity(a, b).score
        assert forward == interest_similarity(b, a).score
        assert 0.0 <= forward <= 1.0

    def test_common_interests_follow_candidate_order(self):
        result = interest_similarity(
            ["food", "culture", "photography"], ["photography", "adventure", "Food"]
        )
        assert result.common_interests == ["Photography", "Food"]
        assert result.total_interests == 4
        assert result.score == 0.5


class TestBudget:

    @pytest.mark.parametrize("a,b,distance,score,level", [
        (BudgetTier.MEDIUM, BudgetTier.MEDIUM, 0, 1.0, CompatibilityLevel.HIGH),
        (BudgetTier.LOW, BudgetTier.MEDIUM, 1, 0.7, CompatibilityLevel.MEDIUM),
        (BudgetTier.HIGH, BudgetTier.MEDIUM, 1, 0.7, CompatibilityLevel.MEDIUM),
        (BudgetTier.LOW, BudgetTier.HIGH, 2, 0.3, CompatibilityLevel.LOW),
    ])
    def test_score_and_label_share_distance(self, a, b, distance, score, level):
        assert budget_distance(a, b) == distance
        assert budget_compatibility(a, b) == score
        assert budget_compatibility_level(a, b) == level
        assert budget_compatibility(b, a) == score


def test_travel_style_partial_credit():
    assert travel_style_match(TravelStyle.LUXURY, TravelStyle.LUXURY) == 1.0
    assert travel_style_match(TravelStyle.LUXURY, TravelStyle.BACKPACKING) == 0.5


class TestPersonality:

    @pytest.mark.parametrize("a,b,expected", [
        (Personality.EXTROVERT, Personality.EXTROVERT, 1.0),
        (Personality.EXTROVERT, Personality.AMBIVERT, 0.8),
        (Personality.EXTROVERT, Personality.INTROVERT, 0.4),
        (Personality.AMBIVERT, Personality.AMBIVERT, 1.0),
        (Personality.AMBIVERT, Personality.INTROVERT, 0.8),
        (Personality.INTROVERT, Personality.INTROVERT, 1.0),
    ])
    def test_matrix_is_symmetric(self, a, b, expected):
        assert personality_compatibility(a, b) == expected
        assert personality_compatibility(b, a) == expected

    def test_missing_personality_is_neutral(self):
        assert personality_compatibility(None, Personality.INTROVERT) == 0.5
        assert personality_compatibility(Personality.EXTROVERT, None) == 0.5

    def test_levels(self):
        assert personality_level(0.8) == CompatibilityLevel.HIGH
        assert personality_level(0.5) == CompatibilityLevel.MEDIUM
        assert personality_level(0.4) == CompatibilityLevel.LOW


class TestLocationProximity:

    def test_same_city_ignores_case(self):
        result = location_proximity(
            make_user("a", current_city="Bengaluru"), make_user("b", current_city=" bengaluru")
        )
        assert result.tier == ProximityTier.SAME_CITY
        assert result.score == 1.0

    def test_same_country(self):
        result = location_proximity(
            make_user("a"), make_user("b", current_city="Mumbai")
        )
        assert result.tier == ProximityTier.NEARBY
        assert result.score == 0.7

    def test_different(self):
        result = location_proximity(
            make_user("a"), make_user("b", home_country="France", current_city="Paris")
        )
        assert result.tier == ProximityTier.DIFFERENT
        assert result.score == 0.3

    def test_empty_city_never_matches(self):
        result = location_proximity(
            make_user("a", current_city=""), make_user("b", current_city="")
        )
        assert result.tier == ProximityTier.NEARBY


def test_verification_bonus():
    assert verification_bonus(VerificationStatus.VERIFIED) == 1.0
    assert verification_bonus(VerificationStatus.PENDING) == 0.5
    assert verification_bonus(VerificationStatus.UNVERIFIED) == 0.0


class TestExperienceBonus:

    def test_new_user(self):
        assert experience_bonus(UserStats()) == 0.0

    def test_partial(self):
        assert experience_bonus(UserStats(trips_completed=5, average_rating=4.0)) == pytest.approx(0.65)

    def test_capped(self):
        assert experience_bonus(UserStats(trips_completed=40, average_rating=7.0)) == 1.0

    def test_null_stats_read_as_zero(self):
        stats = UserStats(trips_completed=None, average_rating=None)
        assert stats.trips_completed == 0
        assert stats.average_rating == 0.0
        assert experience_bonus(stats) == 0.0

    def test_null_stats_from_json(self, requester, requester_trip):
        candidate = make_user("n", stats={"trips_completed": None, "average_rating": None})
        score = CompatibilityScorer().score(requester, candidate, requester_trip, requester_trip)
        assert score.components["experience_bonus"] == 0.0


def test_language_match():
    assert language_match("English", " english")
    assert not language_match("English", "Hindi")
    assert not language_match(None, "English")
