from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from src.matching.directory import (
    InMemoryApplicationTracker,
    InMemoryScholarshipDirectory,
    InMemoryStudentDirectory,
)

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".parquet", ".csv", ".json")

STUDENT_NUMERIC_COLUMNS = (
    "gpa",
    "financial_need_score",
    "community_service_hours",
    "leadership_score",
    "year_of_study",
    "department_id",
)
SCHOLARSHIP_NUMERIC_COLUMNS = (
    "min_gpa",
    "min_year_required",
    "academic_weight",
    "financial_need_weight",
    "extracurricular_weight",
    "available_slots",
    "amount",
    "department_id",
)


def load_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if not path.exists():
        raise FileNotFoundError(f"Input table '{path}' does not exist.")
    if suffix == ".parquet":
        return pd.read_parquet(path)
    if suffix == ".csv":
        return pd.read_csv(path)
    if suffix == ".json":
        return pd.read_json(path, orient="records")
    raise ValueError(f"Unsupported table format '{suffix}' for '{path}'.")


def find_table(data_dir: Path, stem: str) -> Path | None:
    for suffix in SUPPORTED_SUFFIXES:
        candidate = data_dir / f"{stem}{suffix}"
        if candidate.exists():
            return candidate
    return None


def _coerce_numeric(df: pd.DataFrame, columns: tuple[str, ...]) -> pd.DataFrame:
    normalized = df.copy()
    for column in columns:
        if column not in normalized.columns:
            normalized[column] = None
        normalized[column] = pd.to_numeric(normalized[column], errors="coerce")
        normalized[column] = normalized[column].astype(object).where(pd.notna(normalized[column]), None)
    return normalized


def normalize_student_frame(df: pd.DataFrame) -> pd.DataFrame:
    if "student_id" not in df.columns:
        raise ValueError("Student table requires a 'student_id' column.")
    return _coerce_numeric(df, STUDENT_NUMERIC_COLUMNS)


def normalize_scholarship_frame(df: pd.DataFrame) -> pd.DataFrame:
    if "scholarship_id" not in df.columns:
        raise ValueError("Scholarship table requires a 'scholarship_id' column.")
    normalized = _coerce_numeric(df, SCHOLARSHIP_NUMERIC_COLUMNS)
    if "status" not in normalized.columns:
        normalized["status"] = None
    return normalized


def load_directories(
    data_dir: Path,
) -> tuple[InMemoryStudentDirectory, InMemoryScholarshipDirectory, InMemoryApplicationTracker]:
    students_path = find_table(data_dir, "students")
    scholarships_path = find_table(data_dir, "scholarships")
    if students_path is None:
        raise FileNotFoundError(f"No students table (parquet/csv/json) found in '{data_dir}'.")
    if scholarships_path is None:
        raise FileNotFoundError(f"No scholarships table (parquet/csv/json) found in '{data_dir}'.")

    students = InMemoryStudentDirectory.from_frame(normalize_student_frame(load_table(students_path)))
    scholarships = InMemoryScholarshipDirectory.from_frame(
        normalize_scholarship_frame(load_table(scholarships_path))
    )

    applications_path = find_table(data_dir, "applications")
    if applications_path is None:
        applications = InMemoryApplicationTracker()
    else:
        applications = InMemoryApplicationTracker.from_frame(load_table(applications_path))

    logger.info(
        "Loaded %d students and %d scholarships from %s",
        len(students.list_all_students()),
        len(scholarships.list_all_scholarships()),
        data_dir,
    )
    return students, scholarships, applications
