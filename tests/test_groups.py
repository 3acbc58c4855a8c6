"""Tests for group suggestion."""

from dataclasses import replace

import pytest

from tripmatch.matching import suggest_groups, GroupPolicy, MatchThresholds, run_matching_pipeline
from tripmatch.schema import GroupStatus, TravelType

from conftest import make_user, make_trip


def _run(requester, requester_trip, candidates, now):
    users = [requester] + [make_user(uid) for uid in candidates]
    trips = [requester_trip] + [make_trip(f"t-{uid}", uid) for uid in candidates]
    return run_matching_pipeline(requester, requester_trip, users, trips, now=now)


def test_group_from_two_qualifying_matches(requester, requester_trip, pool, now):
    users, trips = pool
    result = run_matching_pipeline(requester, requester_trip, users, trips, now=now)

    assert len(result.groups) == 1
    group = result.groups[0]
    assert group.group_id == "group-t-r-goa"
    assert group.name == "Goa Adventure Group"
    assert [m.user_id for m in group.members] == ["twin1", "twin2"]
    assert group.status == GroupStatus.PLANNING
    assert group.max_members == 6
    assert group.created_by == "system"
    assert group.group_type == TravelType.LEISURE
    assert group.created_at == now


def test_single_qualifying_match_gives_no_group(requester, requester_trip,
                                                goa_candidate, goa_candidate_trip, now):
    users = [requester, make_user("twin1"), goa_candidate]
    trips = [requester_trip, make_trip("t-twin1", "twin1"), goa_candidate_trip]
    result = run_matching_pipeline(requester, requester_trip, users, trips, now=now)

    assert [m.score for m in result.matches] == [100, 66]
    assert result.groups == []


def test_group_takes_top_four(requester, requester_trip, now):
    result = _run(requester, requester_trip, ["a", "b", "c", "d", "e"], now)
    assert len(result.matches) == 5
    assert [m.user_id for m in result.groups[0].members] == ["a", "b", "c", "d"]


def test_suggest_groups_respects_thresholds(requester, requester_trip, now):
    result = _run(requester, requester_trip, ["a", "b"], now)
    strict = MatchThresholds(group_eligible=100)
    assert len(suggest_groups(result.matches, requester_trip, thresholds=strict, now=now)) == 1
    # Only two matches qualify
    policy = GroupPolicy(min_members=3, max_suggested_members=4)
    assert suggest_groups(result.matches, requester_trip, policy=policy, now=now) == []


def test_suggest_groups_empty():
    assert suggest_groups([], make_trip("t", "u")) == []


def _rescored(match, score):
    compatibility = replace(match.compatibility_score, overall=score)
    return replace(match, score=score, compatibility_score=compatibility)


@pytest.mark.parametrize("score, expected_groups", [(70, 1), (69, 0)])
def test_group_cutoff_edge(requester, requester_trip, now, score, expected_groups):
    result = _run(requester, requester_trip, ["a", "b"], now)
    matches = [_rescored(m, score) for m in result.matches]
    assert len(suggest_groups(matches, requester_trip, now=now)) == expected_groups


def test_group_policy_validation():
    with pytest.raises(ValueError):
        GroupPolicy(min_members=3, max_suggested_members=2).validate()
    with pytest.raises(ValueError):
        GroupPolicy(max_suggested_members=4, max_members=3).validate()


def test_group_policy_from_config():
    policy = GroupPolicy.from_config({"matching": {"groups": {"min_members": 3}}})
    assert policy.min_members == 3
    assert policy.max_members == 6
