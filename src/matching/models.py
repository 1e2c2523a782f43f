from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

import pandas as pd

MATCH_COLUMNS = ["student_id", "scholarship_id", "match_score", "match_date"]


class ScholarshipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"

    @classmethod
    def parse(cls, value: Any) -> ScholarshipStatus:
        if isinstance(value, cls):
            return value
        text = _optional_text(value)
        if text is None:
            return cls.CLOSED
        return cls(text.upper())


@dataclass(slots=True)
class StudentProfile:
    student_id: int
    gpa: float | None = None
    financial_need_score: float | None = None
    community_service_hours: int | None = None
    leadership_score: float | None = None
    year_of_study: int | None = None
    department_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> StudentProfile:
        return cls(
            student_id=int(payload["student_id"]),
            gpa=_optional_float(payload.get("gpa")),
            financial_need_score=_optional_float(payload.get("financial_need_score")),
            community_service_hours=_optional_int(payload.get("community_service_hours")),
            leadership_score=_optional_float(payload.get("leadership_score")),
            year_of_study=_optional_int(payload.get("year_of_study")),
            department_id=_optional_int(payload.get("department_id")),
            first_name=_optional_text(payload.get("first_name")),
            last_name=_optional_text(payload.get("last_name")),
        )

    @property
    def display_name(self) -> str:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) if parts else f"Student {self.student_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.student_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "gpa": self.gpa,
            "year_of_study": self.year_of_study,
            "department_id": self.department_id,
        }


@dataclass(slots=True)
class ScholarshipCriteria:
    scholarship_id: int
    status: ScholarshipStatus = ScholarshipStatus.ACTIVE
    min_gpa: float | None = None
    min_year_required: int | None = None
    academic_weight: float | None = None
    financial_need_weight: float | None = None
    extracurricular_weight: float | None = None
    available_slots: int = 0
    name: str | None = None
    amount: float | None = None
    deadline: str | None = None
    department_id: int | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ScholarshipCriteria:
        return cls(
            scholarship_id=int(payload["scholarship_id"]),
            status=ScholarshipStatus.parse(payload.get("status")),
            min_gpa=_optional_float(payload.get("min_gpa")),
            min_year_required=_optional_int(payload.get("min_year_required")),
            academic_weight=_optional_float(payload.get("academic_weight")),
            financial_need_weight=_optional_float(payload.get("financial_need_weight")),
            extracurricular_weight=_optional_float(payload.get("extracurricular_weight")),
            available_slots=_optional_int(payload.get("available_slots")) or 0,
            name=_optional_text(payload.get("name")),
            amount=_optional_float(payload.get("amount")),
            deadline=_optional_text(payload.get("deadline")),
            department_id=_optional_int(payload.get("department_id")),
        )

    @property
    def is_active(self) -> bool:
        return self.status is ScholarshipStatus.ACTIVE


@dataclass(slots=True)
class Match:
    """A persisted (student, scholarship) pairing.

    `has_application` is computed when matches are read back and is never
    written to a store.
    """

    student_id: int
    scholarship_id: int
    match_score: float
    match_date: datetime
    has_application: bool = False

    @property
    def key(self) -> tuple[int, int]:
        return (self.student_id, self.scholarship_id)

    def to_record(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "scholarship_id": self.scholarship_id,
            "match_score": self.match_score,
            "match_date": self.match_date,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.to_record(),
            "match_date": self.match_date.isoformat(),
            "has_application": self.has_application,
        }


def matches_to_frame(matches: Iterable[Match]) -> pd.DataFrame:
    records = [match.to_record() for match in matches]
    if not records:
        return pd.DataFrame(columns=MATCH_COLUMNS)
    return pd.DataFrame(records, columns=MATCH_COLUMNS)


def matches_from_frame(df: pd.DataFrame) -> list[Match]:
    matches: list[Match] = []
    for _, row in df.iterrows():
        match_date = pd.Timestamp(row["match_date"]).to_pydatetime()
        matches.append(
            Match(
                student_id=int(row["student_id"]),
                scholarship_id=int(row["scholarship_id"]),
                match_score=float(row["match_score"]),
                match_date=match_date,
            )
        )
    return matches


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _optional_float(value: Any) -> float | None:
    if _is_missing(value):
        return None
    return float(value)


def _optional_int(value: Any) -> int | None:
    if _is_missing(value):
        return None
    return int(value)


def _optional_text(value: Any) -> str | None:
    if _is_missing(value):
        return None
    text = str(value).strip()
    return text or None
