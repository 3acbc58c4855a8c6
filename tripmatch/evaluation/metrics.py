"""
Run statistics for matching results.

The pipeline has no ground-truth labels for companion compatibility, so
reporting focuses on:
1. Score distribution of returned matches
2. Status breakdown (how many Recommended / Pending / Matched / Rejected)
3. Mean value of each compatibility component

This module DOES NOT claim real-world predictive accuracy.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Sequence
import json

import numpy as np

from ..schema.results import Match, MatchStatus, MatchingEngineResult

logger = logging.getLogger(__name__)

DEFAULT_QUANTILES = (0.1, 0.25, 0.5, 0.75, 0.9)


@dataclass
class ScoreDistributionStats:
    """Statistics about score distribution."""
    count: int
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 61.0, "p50": 70.0, "p90": 84.0}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": int(self.count),
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


@dataclass
class RunReport:
    """
    Report for one matching run.

    Contains the run summary, score distribution, status breakdown and
    component means. Documents pipeline behavior WITHOUT claiming predictive
    validity.
    """
    trip_id: str
    destination: str
    algorithm_version: str
    distribution_stats: ScoreDistributionStats
    status_counts: Dict[str, int]
    component_means: Dict[str, float]
    groups_suggested: int = 0
    processing_time_ms: float = 0.0
    additional_metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trip_id": self.trip_id,
            "destination": self.destination,
            "algorithm_version": self.algorithm_version,
            "distribution_stats": self.distribution_stats.to_dict(),
            "status_counts": dict(self.status_counts),
            "component_means": {k: float(v) for k, v in self.component_means.items()},
            "groups_suggested": int(self.groups_suggested),
            "processing_time_ms": float(self.processing_time_ms),
            "additional_metrics": self.additional_metrics
        }

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved run report to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        stats = self.distribution_stats
        lines = [
            f"Run Report: {self.trip_id} -> {self.destination} (v{self.algorithm_version})",
            "=" * 50,
            "",
            f"Score Distribution ({stats.count} matches):",
            f"  Mean: {stats.mean:.2f}",
            f"  Std:  {stats.std:.2f}",
            f"  Min:  {stats.min:.0f}",
            f"  Max:  {stats.max:.0f}",
        ]

        for q_name, q_value in stats.quantiles.items():
            lines.append(f"  {q_name}: {q_value:.2f}")

        lines.extend(["", "Status Breakdown:"])
        for status, count in self.status_counts.items():
            lines.append(f"  {status}: {count}")

        if self.component_means:
            lines.extend(["", "Component Means:"])
            for name, value in self.component_means.items():
                lines.append(f"  {name}: {value:.3f}")

        lines.extend([
            "",
            f"Groups suggested: {self.groups_suggested}",
            f"Processing time: {self.processing_time_ms:.1f} ms",
        ])
        return "\n".join(lines)


def compute_score_distribution_stats(
    scores: Sequence[float],
    quantiles: Sequence[float] = DEFAULT_QUANTILES
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for match scores.

    An empty input yields zeros everywhere rather than numpy warnings.

    Args:
        scores: Match scores (0-100)
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance
    """
    values = np.asarray(scores, dtype=float)
    if values.size == 0:
        return ScoreDistributionStats(
            count=0, mean=0.0, std=0.0, min=0.0, max=0.0,
            quantiles={f"p{int(q * 100)}": 0.0 for q in quantiles}
        )

    quantile_dict = {
        f"p{int(q * 100)}": float(np.percentile(values, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        count=int(values.size),
        mean=float(np.mean(values)),
        std=float(np.std(values)),
        min=float(np.min(values)),
        max=float(np.max(values)),
        quantiles=quantile_dict
    )


def compute_status_counts(matches: Sequence[Match]) -> Dict[str, int]:
    """Count matches per status; every status is present, zero if unused."""
    counts = {status.value: 0 for status in MatchStatus}
    for match in matches:
        counts[match.match_status.value] += 1
    return counts


def compute_component_means(matches: Sequence[Match]) -> Dict[str, float]:
    """Mean of each compatibility component across matches."""
    if not matches:
        return {}
    names = list(matches[0].compatibility_score.components)
    matrix = np.array([
        [m.compatibility_score.components[name] for name in names]
        for m in matches
    ])
    return dict(zip(names, (float(v) for v in matrix.mean(axis=0))))


def create_run_report(
    result: MatchingEngineResult,
    trip_id: str,
    quantiles: Sequence[float] = DEFAULT_QUANTILES,
    additional_metrics: Optional[Dict[str, Any]] = None
) -> RunReport:
    """
    Create a complete report for one pipeline run.

    Args:
        result: Output of the matching pipeline
        trip_id: The requester's trip id
        quantiles: Quantiles to compute
        additional_metrics: Free-form extras stored with the report

    Returns:
        RunReport instance
    """
    scores: List[int] = [m.score for m in result.matches]
    report = RunReport(
        trip_id=trip_id,
        destination=result.summary.destination,
        algorithm_version=result.algorithm_version,
        distribution_stats=compute_score_distribution_stats(scores, quantiles),
        status_counts=compute_status_counts(result.matches),
        component_means=compute_component_means(result.matches),
        groups_suggested=len(result.groups),
        processing_time_ms=result.processing_time_ms,
        additional_metrics=dict(additional_metrics or {}),
    )
    logger.debug(f"Created run report for {trip_id} over {len(scores)} matches")
    return report
