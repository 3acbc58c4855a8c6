"""
Tests for the matching pipeline.

Pool layout (see conftest.pool): twin1 and twin2 score 100, c1 scores 66,
low scores under 60; elsewhere (Kerala), later (no date overlap) and
no_trip never become eligible.
"""

import pytest

from tripmatch.matching import (
    MatchingPipeline,
    MatchThresholds,
    run_matching_pipeline,
    merge_previous_statuses,
    build_candidates,
    passes_hard_filters,
    GroupPolicy,
    ALGORITHM_VERSION,
)
from tripmatch.schema import MatchStatus, CompatibilityLevel, ProximityTier

from conftest import make_user, make_trip


@pytest.fixture
def result(requester, requester_trip, pool, now):
    users, trips = pool
    return run_matching_pipeline(requester, requester_trip, users, trips, now=now)


# =========================================================================
# Filtering
# =========================================================================

def test_hard_filters_normalize_destination(requester_trip):
    assert passes_hard_filters(requester_trip, make_trip("t", "x", destination=" gOA "))
    assert not passes_hard_filters(requester_trip, make_trip("t", "x", destination="Kerala"))


def test_hard_filters_require_overlap(requester_trip):
    before = make_trip("t", "x", start_date="2026-03-01", end_date="2026-03-10")
    assert not passes_hard_filters(requester_trip, before)


def test_build_candidates_uses_first_trip_and_skips_requester(requester, pool):
    users, trips = pool
    extra = make_trip("t-twin1-second", "twin1", destination="Ladakh")
    candidates = build_candidates(requester, users, trips + [extra])

    ids = [user.user_id for user, _ in candidates]
    assert "r" not in ids
    assert "no_trip" not in ids
    assert dict((u.user_id, t.trip_id) for u, t in candidates)["twin1"] == "t-twin1"


def test_destination_mismatch_excluded_despite_perfect_dates(result):
    assert "elsewhere" not in [m.user.user_id for m in result.matches]


def test_non_overlapping_candidate_excluded(result):
    assert "later" not in [m.user.user_id for m in result.matches]


def test_candidate_trip_without_dates_is_skipped(requester, requester_trip, now):
    users = [requester, make_user("draft"), make_user("ok")]
    trips = [
        requester_trip,
        make_trip("t-draft", "draft", start_date=None, end_date=None),
        make_trip("t-ok", "ok"),
    ]
    assert [u.user_id for u, _ in build_candidates(requester, users, trips)] == ["ok"]

    result = run_matching_pipeline(requester, requester_trip, users, trips, now=now)

    assert [m.user.user_id for m in result.matches] == ["ok"]
    assert result.summary.total_candidates == 2
    assert result.summary.eligible_after_filtering == 1


# =========================================================================
# Scoring and classification
# =========================================================================

def test_no_rejected_matches_returned(result):
    assert all(m.match_status != MatchStatus.REJECTED for m in result.matches)
    assert "low" not in [m.user.user_id for m in result.matches]


def test_matches_sorted_with_stable_ties(result):
    assert [m.user.user_id for m in result.matches] == ["twin1", "twin2", "c1"]
    assert [m.score for m in result.matches] == [100, 100, 66]


def test_status_and_chat_from_thresholds(result):
    by_user = {m.user.user_id: m for m in result.matches}
    assert by_user["twin1"].match_status == MatchStatus.RECOMMENDED
    assert by_user["c1"].match_status == MatchStatus.PENDING
    assert all(m.chat_enabled for m in result.matches)


def test_goa_scenario_match_details(requester, requester_trip, goa_candidate,
                                    goa_candidate_trip, now):
    result = run_matching_pipeline(
        requester, requester_trip,
        [requester, goa_candidate], [requester_trip, goa_candidate_trip],
        now=now,
    )

    assert len(result.matches) == 1
    match = result.matches[0]
    assert match.score == 66
    assert match.match_id == "m-t-r-goa-c1"
    assert match.match_details.destination_match is True
    assert match.match_details.date_overlap is True
    assert match.match_details.budget_compatibility == CompatibilityLevel.HIGH
    assert match.match_details.personality_compatibility == CompatibilityLevel.HIGH
    assert match.match_details.location_proximity == ProximityTier.NEARBY
    assert match.match_details.interest_match == ["Food", "Photography"]
    assert match.match_details.style_match is False
    assert match.match_details.language_match is True
    assert match.created_at == now


def test_custom_thresholds(requester, requester_trip, pool, now):
    users, trips = pool
    strict = MatchThresholds(recommended=95, pending=90, group_eligible=95)
    result = run_matching_pipeline(requester, requester_trip, users, trips,
                                   thresholds=strict, now=now)
    assert [m.user.user_id for m in result.matches] == ["twin1", "twin2"]


def test_thresholds_must_be_ordered():
    with pytest.raises(ValueError):
        MatchingPipeline(thresholds=MatchThresholds(recommended=50, pending=60))


# =========================================================================
# Summary
# =========================================================================

def test_summary_counters(result):
    summary = result.summary
    assert summary.total_candidates == 7
    assert summary.eligible_after_filtering == 4
    assert summary.recommended == 2
    assert summary.matched == 0
    # (100 + 100 + 66) / 3 = 88.67
    assert summary.average_score == 89
    assert summary.destination == "Goa"


def test_empty_pool(requester, requester_trip, now):
    result = run_matching_pipeline(requester, requester_trip, [requester], [requester_trip], now=now)
    assert result.matches == []
    assert result.groups == []
    assert result.summary.total_candidates == 0
    assert result.summary.average_score == 0


def test_result_metadata(result):
    assert result.algorithm_version == ALGORITHM_VERSION == "2.0.0"
    assert result.processing_time_ms >= 0
    payload = result.to_dict()
    assert payload["summary"]["filters"]["date_range"] == {
        "start": "2026-03-11", "end": "2026-03-16"
    }


def test_repeated_runs_are_identical(requester, requester_trip, pool, now):
    users, trips = pool
    first = run_matching_pipeline(requester, requester_trip, users, trips, now=now).to_dict()
    second = run_matching_pipeline(requester, requester_trip, users, trips, now=now).to_dict()
    first.pop("processing_time_ms")
    second.pop("processing_time_ms")
    assert first == second


def test_pipeline_from_config():
    config = {"matching": {"thresholds": {"recommended": 90, "pending": 50, "group_eligible": 60}}}
    pipeline = MatchingPipeline.from_config(config)
    assert pipeline.thresholds.recommended == 90
    assert pipeline.thresholds.classify(55) == MatchStatus.PENDING
    assert pipeline.thresholds.classify(49) == MatchStatus.REJECTED


@pytest.mark.parametrize("score, status", [
    (100, MatchStatus.RECOMMENDED),
    (80, MatchStatus.RECOMMENDED),
    (79, MatchStatus.PENDING),
    (60, MatchStatus.PENDING),
    (59, MatchStatus.REJECTED),
    (0, MatchStatus.REJECTED),
])
def test_default_threshold_edges(score, status):
    assert MatchThresholds().classify(score) == status


def test_default_threshold_values():
    assert MatchThresholds().to_dict() == {"recommended": 80, "pending": 60, "group_eligible": 70}


def test_thresholds_save_and_load(tmp_path):
    thresholds = MatchThresholds(recommended=85, pending=65, group_eligible=75)
    path = tmp_path / "thresholds.json"
    thresholds.save(str(path))
    assert MatchThresholds.load(str(path)) == thresholds


def test_run_accepts_group_policy(requester, requester_trip, pool, now):
    users, trips = pool
    policy = GroupPolicy(min_members=3, max_suggested_members=4)
    result = run_matching_pipeline(requester, requester_trip, users, trips,
                                   group_policy=policy, now=now)
    # twin1 and twin2 are the only matches at or above 70
    assert result.groups == []
    assert len(result.matches) == 3


# =========================================================================
# Caller-confirmed statuses
# =========================================================================

def test_merge_previous_statuses_keeps_confirmed(result):
    twin1, twin2, c1 = result.matches
    previous = [twin1.with_status(MatchStatus.MATCHED), c1.with_status(MatchStatus.REJECTED)]

    merged = merge_previous_statuses(result.matches, previous)

    assert [m.match_status for m in merged] == [
        MatchStatus.MATCHED, MatchStatus.RECOMMENDED, MatchStatus.REJECTED
    ]
    # Inputs are not mutated
    assert twin1.match_status == MatchStatus.RECOMMENDED


def test_merge_ignores_pipeline_statuses(result):
    previous = [m.with_status(MatchStatus.PENDING) for m in result.matches]
    merged = merge_previous_statuses(result.matches, previous)
    assert [m.match_status for m in merged] == [m.match_status for m in result.matches]
