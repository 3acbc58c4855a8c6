"""Tests for weighted fusion of component scores."""

import json

import pytest

from tripmatch.fusion import CompatibilityScorer, ScoringWeights, derive_insights, round_half_up
from tripmatch.schema import CompatibilityScore

from conftest import make_user, make_trip


class TestScoringWeights:

    def test_canonical_weights_sum_to_one(self):
        weights = ScoringWeights()
        weights.validate()
        assert weights.total() == pytest.approx(1.0)
        assert weights.interest_similarity == 0.25
        assert weights.experience_bonus == 0.05

    def test_rejects_bad_sum(self):
        with pytest.raises(ValueError, match="sum to 1"):
            ScoringWeights(interest_similarity=0.5).validate()

    def test_rejects_negative(self):
        with pytest.raises(ValueError, match="non-negative"):
            ScoringWeights(interest_similarity=0.35, budget_compatibility=-0.1).validate()

    def test_from_config_overrides(self):
        config = {"scoring": {"weights": {"interest_similarity": 0.30, "experience_bonus": 0.0}}}
        weights = ScoringWeights.from_config(config)
        assert weights.interest_similarity == 0.30
        assert weights.budget_compatibility == 0.15
        weights.validate()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "weights.json"
        ScoringWeights().save(str(path))
        assert json.loads(path.read_text())["schedule_overlap"] == 0.15
        assert ScoringWeights.load(str(path)) == ScoringWeights()


def test_round_half_up():
    assert round_half_up(66.5) == 67
    assert round_half_up(66.49) == 66
    assert round_half_up(0.5) == 1


class TestCompatibilityScorer:

    @pytest.fixture
    def scorer(self):
        return CompatibilityScorer()

    def test_goa_scenario_scores_66(self, scorer, requester, goa_candidate,
                                    requester_trip, goa_candidate_trip):
        result = scorer.score(requester, goa_candidate, requester_trip, goa_candidate_trip)

        assert result.components["interest_similarity"] == 0.5
        assert result.components["budget_compatibility"] == 1.0
        assert result.components["travel_style_match"] == 0.5
        assert result.components["personality_match"] == 0.8
        assert result.components["schedule_overlap"] == pytest.approx(3 / 5.5)
        assert result.components["location_proximity"] == 0.7
        assert result.components["verification_bonus"] == 1.0
        assert result.components["experience_bonus"] == pytest.approx(0.65)
        assert result.overall == 66
        assert result.strengths == ["Perfect budget match"]
        assert result.concerns == []
        assert result.recommendations == []

    def test_identical_traveler_scores_100(self, scorer, requester, requester_trip):
        twin = make_user("twin")
        result = scorer.score(requester, twin, requester_trip, make_trip("t-twin", "twin"))
        assert result.overall == 100
        assert result.strengths == [
            "Strong interest alignment",
            "Perfect budget match",
            "Compatible personalities",
            "Same location",
            "Great schedule overlap",
        ]

    def test_components_bounded(self, scorer, requester, requester_trip):
        stranger = make_user(
            "s",
            home_country="Peru",
            current_city="Lima",
            verification_status="Unverified",
            profile={"budget": "Low", "travel_style": "Luxury", "interests": [], "personality": None},
            stats={},
        )
        trip = make_trip("t-s", "s", start_date="2026-03-16", end_date="2026-03-30", budget="High")
        result = scorer.score(requester, stranger, requester_trip, trip)
        assert all(0.0 <= v <= 1.0 for v in result.components.values())
        assert 0 <= result.overall <= 100

    def test_custom_weights_change_score(self, requester, goa_candidate,
                                         requester_trip, goa_candidate_trip):
        budget_only = ScoringWeights(
            interest_similarity=0.0, budget_compatibility=1.0, travel_style_match=0.0,
            personality_match=0.0, schedule_overlap=0.0, location_proximity=0.0,
            verification_bonus=0.0, experience_bonus=0.0,
        )
        scorer = CompatibilityScorer(budget_only)
        result = scorer.score(requester, goa_candidate, requester_trip, goa_candidate_trip)
        assert result.overall == 100


class TestDeriveInsights:

    BASE = {
        "interest_similarity": 0.5,
        "budget_compatibility": 0.7,
        "travel_style_match": 0.5,
        "personality_match": 0.8,
        "schedule_overlap": 0.5,
        "location_proximity": 0.7,
        "verification_bonus": 1.0,
        "experience_bonus": 0.5,
    }

    def test_neutral_components_give_no_insights(self):
        assert derive_insights(self.BASE) == ([], [], [])

    def test_weak_components(self):
        components = dict(self.BASE, interest_similarity=0.1, budget_compatibility=0.3,
                          schedule_overlap=0.2)
        _, concerns, _ = derive_insights(components)
        assert concerns == [
            "Limited shared interests", "Budget mismatch", "Limited schedule overlap"
        ]

    def test_recommendations(self):
        components = dict(self.BASE, personality_match=0.4, location_proximity=0.3,
                          verification_bonus=0.5)
        _, _, recommendations = derive_insights(components)
        assert recommendations == [
            "Consider communication styles",
            "Plan meeting logistics",
            "Verify profile authenticity",
        ]


class TestCompatibilityScoreValidation:

    def test_rejects_overall_out_of_range(self):
        with pytest.raises(ValueError):
            CompatibilityScore(overall=101, components={})

    def test_rejects_non_integer_overall(self):
        with pytest.raises(ValueError):
            CompatibilityScore(overall=66.4, components={})

    def test_rejects_component_out_of_range(self):
        with pytest.raises(ValueError):
            CompatibilityScore(overall=50, components={"interest_similarity": 1.5})
