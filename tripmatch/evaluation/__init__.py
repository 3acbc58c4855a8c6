"""Run statistics and reporting for matching results."""

from .metrics import (
    compute_score_distribution_stats,
    compute_status_counts,
    compute_component_means,
    ScoreDistributionStats,
    RunReport,
    create_run_report
)

__all__ = [
    "compute_score_distribution_stats",
    "compute_status_counts",
    "compute_component_means",
    "ScoreDistributionStats",
    "RunReport",
    "create_run_report"
]
