"""Candidate matching pipeline and group suggestion."""

from .groups import suggest_groups, GroupPolicy
from .pipeline import (
    MatchingPipeline,
    MatchThresholds,
    run_matching_pipeline,
    merge_previous_statuses,
    build_candidates,
    passes_hard_filters,
    ALGORITHM_VERSION,
)

__all__ = [
    "suggest_groups",
    "GroupPolicy",
    "MatchingPipeline",
    "MatchThresholds",
    "run_matching_pipeline",
    "merge_previous_statuses",
    "build_candidates",
    "passes_hard_filters",
    "ALGORITHM_VERSION",
]
