"""Weighted compatibility score between a student and a scholarship.

Every sub-score is normalized to [0, 100]. The final score is the
weight-normalized combination, rounded half-up to two decimals. Callers are
expected to run the eligibility filter first: the academic sub-score assumes
both GPA values are present and `gpa >= min_gpa`.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

import numpy as np
import pandas as pd

from src.matching.config import MatchingConfig
from src.matching.eligibility import eligibility_reasons
from src.matching.models import ScholarshipCriteria, StudentProfile

NEUTRAL_SCORE = 50

CANDIDATE_COLUMNS = [
    "student_id",
    "scholarship_id",
    "name",
    "eligible",
    "reasons",
    "academic_score",
    "financial_score",
    "extracurricular_score",
    "match_score",
    "qualifies",
]


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def academic_score(gpa: float, min_gpa: float, gpa_ceiling: float = 10.0) -> int:
    if gpa >= gpa_ceiling:
        return 100
    return int(((gpa - min_gpa) / (gpa_ceiling - min_gpa)) * 100)


def financial_score(need_score: float | None, financial_weight: float | None) -> int:
    # The scholarship's own weight decides neutrality, not the configured fallback.
    if financial_weight is None or financial_weight <= 0:
        return NEUTRAL_SCORE
    if need_score is None:
        return 0
    if need_score >= 8:
        return 100
    if need_score >= 6:
        return 80
    if need_score >= 4:
        return 60
    if need_score >= 2:
        return 40
    return 20


def extracurricular_score(
    service_hours: int | None,
    leadership_points: float | None,
    extracurricular_weight: float | None,
) -> int:
    if extracurricular_weight is None or extracurricular_weight <= 0:
        return NEUTRAL_SCORE
    hours = service_hours if service_hours is not None else 0
    points = leadership_points if leadership_points is not None else 0.0
    volunteer = min(50, int(hours) // 2)
    leadership = int(min(50.0, points * 10))
    return volunteer + leadership


def effective_weights(
    scholarship: ScholarshipCriteria, config: MatchingConfig | None = None
) -> tuple[float, float, float]:
    active_config = config or MatchingConfig.baseline()
    return (
        _weight_or_default(scholarship.academic_weight, active_config.academic_weight),
        _weight_or_default(scholarship.financial_need_weight, active_config.financial_need_weight),
        _weight_or_default(scholarship.extracurricular_weight, active_config.extracurricular_weight),
    )


def score_breakdown(
    student: StudentProfile,
    scholarship: ScholarshipCriteria,
    config: MatchingConfig | None = None,
) -> dict[str, Any]:
    active_config = config or MatchingConfig.baseline()
    if student.gpa is None or scholarship.min_gpa is None:
        raise ValueError(
            f"Cannot score student {student.student_id} against scholarship "
            f"{scholarship.scholarship_id} without both GPA values."
        )

    academic = academic_score(float(student.gpa), float(scholarship.min_gpa), active_config.gpa_ceiling)
    financial = financial_score(student.financial_need_score, scholarship.financial_need_weight)
    extracurricular = extracurricular_score(
        student.community_service_hours,
        student.leadership_score,
        scholarship.extracurricular_weight,
    )

    academic_weight, financial_weight, extracurricular_weight = effective_weights(
        scholarship, active_config
    )
    weighted_sum = (
        academic * academic_weight
        + financial * financial_weight
        + extracurricular * extracurricular_weight
    )
    total_weight = academic_weight + financial_weight + extracurricular_weight
    raw_score = weighted_sum / total_weight if total_weight > 0 else 0.0

    return {
        "academic_score": academic,
        "financial_score": financial,
        "extracurricular_score": extracurricular,
        "academic_weight": academic_weight,
        "financial_need_weight": financial_weight,
        "extracurricular_weight": extracurricular_weight,
        "match_score": round_half_up(raw_score),
    }


def compute_score(
    student: StudentProfile,
    scholarship: ScholarshipCriteria,
    config: MatchingConfig | None = None,
) -> float:
    return score_breakdown(student, scholarship, config)["match_score"]


def score_candidates(
    student: StudentProfile,
    scholarships: Iterable[ScholarshipCriteria],
    config: MatchingConfig | None = None,
) -> pd.DataFrame:
    """Score every scholarship for one student, keeping ineligible rows with their reasons."""
    active_config = config or MatchingConfig.baseline()
    rows: list[dict[str, Any]] = []
    for scholarship in scholarships:
        reasons = eligibility_reasons(student, scholarship)
        row: dict[str, Any] = {
            "student_id": student.student_id,
            "scholarship_id": scholarship.scholarship_id,
            "name": scholarship.name,
            "eligible": not reasons,
            "reasons": reasons,
            "academic_score": np.nan,
            "financial_score": np.nan,
            "extracurricular_score": np.nan,
            "match_score": np.nan,
        }
        if not reasons:
            breakdown = score_breakdown(student, scholarship, active_config)
            for column in ("academic_score", "financial_score", "extracurricular_score", "match_score"):
                row[column] = breakdown[column]
        rows.append(row)

    candidates_df = pd.DataFrame(rows, columns=CANDIDATE_COLUMNS)
    candidates_df["qualifies"] = candidates_df["eligible"].astype(bool) & (
        pd.to_numeric(candidates_df["match_score"], errors="coerce").fillna(-1.0)
        >= active_config.match_threshold
    )
    return candidates_df


def _weight_or_default(value: float | None, default: float) -> float:
    return float(value) if value is not None else float(default)
