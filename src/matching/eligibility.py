from __future__ import annotations

from typing import Iterable

import pandas as pd

from src.matching.models import ScholarshipCriteria, StudentProfile

NOT_ACTIVE = "SCHOLARSHIP_NOT_ACTIVE"
GPA_MISSING = "GPA_MISSING"
MIN_GPA_MISSING = "MIN_GPA_MISSING"
GPA_BELOW_MIN = "GPA_BELOW_MIN"
YEAR_MISSING = "YEAR_MISSING"
MIN_YEAR_MISSING = "MIN_YEAR_MISSING"
YEAR_BELOW_MIN = "YEAR_BELOW_MIN"


def eligibility_reasons(student: StudentProfile, scholarship: ScholarshipCriteria) -> list[str]:
    reasons: list[str] = []

    if not scholarship.is_active:
        reasons.append(NOT_ACTIVE)

    if student.gpa is None:
        reasons.append(GPA_MISSING)
    if scholarship.min_gpa is None:
        reasons.append(MIN_GPA_MISSING)
    if student.gpa is not None and scholarship.min_gpa is not None:
        if student.gpa < scholarship.min_gpa:
            reasons.append(GPA_BELOW_MIN)

    if student.year_of_study is None:
        reasons.append(YEAR_MISSING)
    if scholarship.min_year_required is None:
        reasons.append(MIN_YEAR_MISSING)
    if student.year_of_study is not None and scholarship.min_year_required is not None:
        if student.year_of_study < scholarship.min_year_required:
            reasons.append(YEAR_BELOW_MIN)

    return reasons


def is_eligible(student: StudentProfile, scholarship: ScholarshipCriteria) -> bool:
    return not eligibility_reasons(student, scholarship)


def apply_eligibility_filter(
    student: StudentProfile, scholarships: Iterable[ScholarshipCriteria]
) -> tuple[pd.DataFrame, pd.DataFrame]:
    rows = [
        {
            "student_id": student.student_id,
            "scholarship_id": scholarship.scholarship_id,
            "name": scholarship.name,
            "reasons": eligibility_reasons(student, scholarship),
        }
        for scholarship in scholarships
    ]
    with_reasons_df = pd.DataFrame(
        rows, columns=["student_id", "scholarship_id", "name", "reasons"]
    )

    is_ineligible = with_reasons_df["reasons"].map(bool).astype(bool)
    ineligible_df = with_reasons_df[is_ineligible].copy()
    eligible_df = with_reasons_df[~is_ineligible].copy()

    return eligible_df, ineligible_df
