"""Summaries of match regeneration and grouping runs."""

from src.eval.metrics import (
    eligibility_breakdown,
    group_size_distribution,
    matches_per_student,
    score_distribution_stats,
)

__all__ = [
    "eligibility_breakdown",
    "group_size_distribution",
    "matches_per_student",
    "score_distribution_stats",
]
