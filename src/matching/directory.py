from __future__ import annotations

from typing import Iterable, Protocol

import pandas as pd

from src.matching.models import ScholarshipCriteria, StudentProfile


class StudentDirectory(Protocol):
    def get_student(self, student_id: int) -> StudentProfile | None: ...

    def list_all_students(self) -> list[StudentProfile]: ...

    def find_all_by_id(self, student_ids: Iterable[int]) -> list[StudentProfile]: ...


class ScholarshipDirectory(Protocol):
    def get_scholarship(self, scholarship_id: int) -> ScholarshipCriteria | None: ...

    def list_all_scholarships(self) -> list[ScholarshipCriteria]: ...


class ApplicationTracker(Protocol):
    def has_application(self, student_id: int, scholarship_id: int) -> bool: ...


class InMemoryStudentDirectory:
    def __init__(self, students: Iterable[StudentProfile] = ()) -> None:
        self._students = {student.student_id: student for student in students}

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> InMemoryStudentDirectory:
        return cls(StudentProfile.from_mapping(row) for row in df.to_dict(orient="records"))

    def get_student(self, student_id: int) -> StudentProfile | None:
        return self._students.get(student_id)

    def list_all_students(self) -> list[StudentProfile]:
        return [self._students[key] for key in sorted(self._students)]

    def find_all_by_id(self, student_ids: Iterable[int]) -> list[StudentProfile]:
        return [self._students[key] for key in sorted(set(student_ids)) if key in self._students]


class InMemoryScholarshipDirectory:
    def __init__(self, scholarships: Iterable[ScholarshipCriteria] = ()) -> None:
        self._scholarships = {scholarship.scholarship_id: scholarship for scholarship in scholarships}

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> InMemoryScholarshipDirectory:
        return cls(ScholarshipCriteria.from_mapping(row) for row in df.to_dict(orient="records"))

    def get_scholarship(self, scholarship_id: int) -> ScholarshipCriteria | None:
        return self._scholarships.get(scholarship_id)

    def list_all_scholarships(self) -> list[ScholarshipCriteria]:
        return [self._scholarships[key] for key in sorted(self._scholarships)]


class InMemoryApplicationTracker:
    def __init__(self, applications: Iterable[tuple[int, int]] = ()) -> None:
        self._applications = {(int(student_id), int(scholarship_id)) for student_id, scholarship_id in applications}

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> InMemoryApplicationTracker:
        if df.empty:
            return cls()
        return cls(zip(df["student_id"].tolist(), df["scholarship_id"].tolist()))

    def has_application(self, student_id: int, scholarship_id: int) -> bool:
        return (student_id, scholarship_id) in self._applications
