from __future__ import annotations

import pandas as pd

from src.eval.metrics import (
    eligibility_breakdown,
    group_size_distribution,
    matches_per_student,
    score_distribution_stats,
)
from src.grouping.assembler import StudentGroup
from src.matching.models import StudentProfile


def test_eligibility_breakdown_counts_reasons() -> None:
    candidates_df = pd.DataFrame(
        [
            {"eligible": True, "qualifies": True, "reasons": []},
            {"eligible": True, "qualifies": False, "reasons": []},
            {"eligible": False, "qualifies": False, "reasons": ["GPA_BELOW_MIN", "YEAR_BELOW_MIN"]},
            {"eligible": False, "qualifies": False, "reasons": ["GPA_BELOW_MIN"]},
        ]
    )

    summary = eligibility_breakdown(candidates_df)

    assert summary["eligible_count"] == 2
    assert summary["qualifying_count"] == 1
    assert summary["eligibility_rate"] == 0.5
    assert summary["ineligible_reason_breakdown"] == {"GPA_BELOW_MIN": 2, "YEAR_BELOW_MIN": 1}


def test_eligibility_breakdown_handles_empty_frame() -> None:
    assert eligibility_breakdown(pd.DataFrame())["total_count"] == 0


def test_score_distribution_and_per_student_counts() -> None:
    matches_df = pd.DataFrame(
        [
            {"student_id": 1, "scholarship_id": 10, "match_score": 60.0},
            {"student_id": 1, "scholarship_id": 11, "match_score": 80.0},
            {"student_id": 2, "scholarship_id": 10, "match_score": 100.0},
        ]
    )

    stats = score_distribution_stats(matches_df)

    assert stats == {"count": 3, "mean": 80.0, "median": 80.0, "min": 60.0, "max": 100.0}
    assert matches_per_student(matches_df) == {1: 2, 2: 1}
    assert score_distribution_stats(pd.DataFrame())["count"] == 0


def test_group_size_distribution() -> None:
    groups = [
        StudentGroup(group_id=1, members=tuple(StudentProfile(student_id=i) for i in (1, 2, 3)), common_scholarships=()),
        StudentGroup(group_id=2, members=tuple(StudentProfile(student_id=i) for i in (3, 4)), common_scholarships=()),
    ]

    summary = group_size_distribution(groups)

    assert summary == {
        "total_groups": 2,
        "largest_group": 3,
        "size_counts": {"2": 1, "3": 1},
        "students_in_any_group": 4,
    }
