"""Weighted fusion module for combining component scores."""

from .weighted_fusion import CompatibilityScorer, ScoringWeights, derive_insights, round_half_up

__all__ = ["CompatibilityScorer", "ScoringWeights", "derive_insights", "round_half_up"]
