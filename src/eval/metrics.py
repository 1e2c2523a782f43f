from __future__ import annotations

from collections import Counter
from typing import Any

import pandas as pd

from src.grouping.assembler import StudentGroup


def eligibility_breakdown(candidates_df: pd.DataFrame) -> dict[str, Any]:
    total_count = int(len(candidates_df))
    eligible_count = int(candidates_df["eligible"].sum()) if total_count else 0
    qualifying_count = int(candidates_df["qualifies"].sum()) if total_count else 0
    reason_counter: Counter[str] = Counter()

    if "reasons" in candidates_df.columns:
        for reasons in candidates_df["reasons"]:
            if not isinstance(reasons, list):
                continue
            for reason in reasons:
                if isinstance(reason, str) and reason:
                    reason_counter[reason] += 1

    return {
        "total_count": total_count,
        "eligible_count": eligible_count,
        "qualifying_count": qualifying_count,
        "eligibility_rate": (eligible_count / total_count) if total_count > 0 else 0.0,
        "ineligible_reason_breakdown": dict(sorted(reason_counter.items())),
    }


def score_distribution_stats(matches_df: pd.DataFrame) -> dict[str, Any]:
    if matches_df.empty:
        return {"count": 0, "mean": 0.0, "median": 0.0, "min": 0.0, "max": 0.0}

    series = pd.to_numeric(matches_df["match_score"], errors="coerce").dropna().astype("float64")
    if series.empty:
        return {"count": 0, "mean": 0.0, "median": 0.0, "min": 0.0, "max": 0.0}
    return {
        "count": int(series.size),
        "mean": float(series.mean()),
        "median": float(series.median()),
        "min": float(series.min()),
        "max": float(series.max()),
    }


def matches_per_student(matches_df: pd.DataFrame) -> dict[int, int]:
    if matches_df.empty:
        return {}
    counts = matches_df.groupby("student_id")["scholarship_id"].count()
    return {int(student_id): int(count) for student_id, count in counts.items()}


def group_size_distribution(groups: list[StudentGroup]) -> dict[str, Any]:
    sizes = Counter(group.student_count for group in groups)
    grouped_students = {student_id for group in groups for student_id in group.student_ids}
    return {
        "total_groups": len(groups),
        "largest_group": max(sizes) if sizes else 0,
        "size_counts": {str(size): count for size, count in sorted(sizes.items())},
        "students_in_any_group": len(grouped_students),
    }
