from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from src.io.tables import load_directories, load_table
from src.matching.models import ScholarshipStatus


def _write_inputs(data_dir: Path, *, with_applications: bool = True) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(
        [
            {"student_id": 1, "first_name": "Ada", "gpa": 9.2, "financial_need_score": 7.0, "year_of_study": 3},
            {"student_id": 2, "first_name": "Alan", "gpa": None, "financial_need_score": None, "year_of_study": 2},
        ]
    ).to_csv(data_dir / "students.csv", index=False)
    pd.DataFrame(
        [
            {
                "scholarship_id": 10,
                "name": "Merit",
                "status": "active",
                "min_gpa": 7.5,
                "min_year_required": 2,
                "academic_weight": None,
            },
            {
                "scholarship_id": 11,
                "name": "Legacy",
                "status": "CLOSED",
                "min_gpa": 6.0,
                "min_year_required": 1,
                "academic_weight": 0.5,
            },
        ]
    ).to_csv(data_dir / "scholarships.csv", index=False)
    if with_applications:
        pd.DataFrame([{"student_id": 1, "scholarship_id": 11}]).to_csv(
            data_dir / "applications.csv", index=False
        )


def test_load_directories_normalizes_missing_values(tmp_path: Path) -> None:
    _write_inputs(tmp_path)

    students, scholarships, applications = load_directories(tmp_path)

    ada = students.get_student(1)
    alan = students.get_student(2)
    merit = scholarships.get_scholarship(10)
    legacy = scholarships.get_scholarship(11)
    assert ada is not None and ada.gpa == 9.2 and ada.year_of_study == 3
    assert alan is not None and alan.gpa is None and alan.financial_need_score is None
    assert merit is not None and merit.status is ScholarshipStatus.ACTIVE and merit.academic_weight is None
    assert legacy is not None and legacy.status is ScholarshipStatus.CLOSED and legacy.academic_weight == 0.5
    assert applications.has_application(1, 11)
    assert not applications.has_application(2, 11)
    assert students.get_student(99) is None


def test_applications_table_is_optional(tmp_path: Path) -> None:
    _write_inputs(tmp_path, with_applications=False)

    _, _, applications = load_directories(tmp_path)

    assert not applications.has_application(1, 11)


def test_missing_students_table_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_directories(tmp_path)


def test_load_table_rejects_unknown_format(tmp_path: Path) -> None:
    path = tmp_path / "students.xlsx"
    path.write_bytes(b"")

    with pytest.raises(ValueError):
        load_table(path)
