from __future__ import annotations

from datetime import UTC, datetime

from src.engine import AllocationEngine
from src.matching.config import GroupingConfig
from src.matching.directory import (
    InMemoryApplicationTracker,
    InMemoryScholarshipDirectory,
    InMemoryStudentDirectory,
)
from src.matching.models import ScholarshipCriteria, StudentProfile
from src.matching.store import InMemoryMatchStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _student(student_id: int, gpa: float = 9.5) -> StudentProfile:
    return StudentProfile(
        student_id=student_id,
        gpa=gpa,
        financial_need_score=9.0,
        community_service_hours=80,
        leadership_score=4.0,
        year_of_study=3,
        first_name=f"Student{student_id}",
    )


def _engine(students: list[StudentProfile], **kwargs) -> AllocationEngine:  # noqa: ANN003
    scholarships = [
        ScholarshipCriteria(scholarship_id=scholarship_id, name=f"Award {scholarship_id}", min_gpa=7.0, min_year_required=1)
        for scholarship_id in (10, 11, 12)
    ]
    for scholarship in scholarships:
        scholarship.financial_need_weight = 0.3
        scholarship.extracurricular_weight = 0.3
    return AllocationEngine(
        InMemoryStudentDirectory(students),
        InMemoryScholarshipDirectory(scholarships),
        InMemoryMatchStore(),
        InMemoryApplicationTracker([(1, 11)]),
        **kwargs,
    )


def test_engine_finds_one_group_of_identical_students() -> None:
    engine = _engine([_student(1), _student(2), _student(3)])
    engine.regenerate_all_matches(now=NOW)

    groups = engine.find_compatible_student_groups(60.0, 2)

    assert len(groups) == 1
    assert groups[0].student_ids == (1, 2, 3)
    assert [item.name for item in groups[0].common_scholarships] == ["Award 10", "Award 11", "Award 12"]
    assert groups[0].members[0].first_name == "Student1"


def test_engine_uses_grouping_defaults() -> None:
    engine = _engine(
        [_student(1), _student(2)],
        grouping_config=GroupingConfig(min_match_score=90.0, min_common_scholarships=1),
    )
    engine.regenerate_all_matches(now=NOW)

    assert engine.find_compatible_student_groups() == []
    assert len(engine.find_compatible_student_groups(min_match_score=60.0)) == 1


def test_engine_top_matches_flag_applications() -> None:
    engine = _engine([_student(1)])

    top = engine.get_top_matches_for_student(1, limit=2)

    assert len(top) == 2
    assert [match.scholarship_id for match in top] == [10, 11]
    assert [match.has_application for match in top] == [False, True]


def test_engine_regenerates_single_student() -> None:
    engine = _engine([_student(1), _student(2, gpa=5.0)])

    assert len(engine.regenerate_matches_for_student(1, now=NOW)) == 3
    assert engine.regenerate_matches_for_student(2, now=NOW) == []
    assert engine.regenerate_matches_for_student(404, now=NOW) == []
