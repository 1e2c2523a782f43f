from __future__ import annotations

from datetime import UTC, datetime

from app.main import _ineligible_frame, _top_matches_frame
from src.engine import AllocationEngine
from src.matching.directory import InMemoryScholarshipDirectory, InMemoryStudentDirectory
from src.matching.models import Match, ScholarshipCriteria, StudentProfile
from src.matching.store import InMemoryMatchStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _engine() -> AllocationEngine:
    student = StudentProfile(
        student_id=1,
        gpa=9.5,
        financial_need_score=9.0,
        community_service_hours=80,
        leadership_score=4.0,
        year_of_study=3,
    )
    scholarships = [
        ScholarshipCriteria(scholarship_id=10, name="Merit", min_gpa=7.0, min_year_required=1),
        ScholarshipCriteria(scholarship_id=11, name="Dean's List", min_gpa=9.9, min_year_required=1),
    ]
    # Scholarship 99 was removed from the directory after its match was stored.
    store = InMemoryMatchStore(
        [
            Match(student_id=1, scholarship_id=10, match_score=87.2, match_date=NOW),
            Match(student_id=1, scholarship_id=99, match_score=75.0, match_date=NOW),
        ]
    )
    return AllocationEngine(
        InMemoryStudentDirectory([student]),
        InMemoryScholarshipDirectory(scholarships),
        store,
    )


def test_top_matches_frame_tolerates_scholarships_missing_from_directory() -> None:
    frame = _top_matches_frame(_engine(), 1, 5)

    assert frame["scholarship"].tolist() == ["Merit", 99]
    assert frame.loc[0, "why"] != ""
    assert frame.loc[1, "why"] == ""
    assert frame.loc[1, "amount"] == "Unknown"


def test_ineligible_frame_lists_reasons() -> None:
    frame = _ineligible_frame(_engine(), 1)

    assert frame["scholarship"].tolist() == ["Dean's List"]
    assert frame["reasons"].tolist() == ["GPA_BELOW_MIN"]
    assert _ineligible_frame(_engine(), 42).empty
