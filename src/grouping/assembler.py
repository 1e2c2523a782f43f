from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import pandas as pd

from src.grouping.graph import CompatibilityGraph
from src.matching.models import ScholarshipCriteria, StudentProfile


@dataclass(frozen=True, slots=True)
class CommonScholarship:
    scholarship_id: int
    average_score: float
    name: str | None = None
    amount: float | None = None
    min_gpa: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.scholarship_id,
            "name": self.name,
            "amount": self.amount,
            "min_gpa": self.min_gpa,
            "avg_match_score": self.average_score,
        }


@dataclass(frozen=True, slots=True)
class StudentGroup:
    """A maximal clique of compatible students.

    `group_id` is positional within one report and is not stable across runs.
    """

    group_id: int
    members: tuple[StudentProfile, ...]
    common_scholarships: tuple[CommonScholarship, ...]

    @property
    def student_ids(self) -> tuple[int, ...]:
        return tuple(member.student_id for member in self.members)

    @property
    def student_count(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_id": self.group_id,
            "student_count": self.student_count,
            "students": [member.to_dict() for member in self.members],
            "common_scholarships": [item.to_dict() for item in self.common_scholarships],
            "common_scholarships_count": len(self.common_scholarships),
        }


def common_scholarships_for_group(
    student_ids: Iterable[int],
    student_scholarship_scores: Mapping[int, Mapping[int, float]],
) -> dict[int, float]:
    """Scholarships shared by every member, mapped to the members' mean score.

    Uses the full score maps, independent of the grouping thresholds.
    """
    member_scores = [
        student_scholarship_scores[student_id]
        for student_id in student_ids
        if student_id in student_scholarship_scores
    ]
    if not member_scores:
        return {}

    common_ids = set(member_scores[0])
    for scores in member_scores[1:]:
        common_ids &= set(scores)

    return {
        scholarship_id: sum(scores.get(scholarship_id, 0.0) for scores in member_scores) / len(member_scores)
        for scholarship_id in common_ids
    }


def assemble_groups(
    cliques: Iterable[Iterable[int]],
    graph: CompatibilityGraph,
    student_scholarship_scores: Mapping[int, Mapping[int, float]],
    scholarships: Mapping[int, ScholarshipCriteria] | None = None,
) -> list[StudentGroup]:
    lookup = scholarships or {}
    groups: list[StudentGroup] = []

    for clique in cliques:
        vertices = list(clique)
        if len(vertices) < 2:
            continue

        members = tuple(
            sorted((graph.label(vertex) for vertex in vertices), key=lambda student: student.student_id)
        )
        averages = common_scholarships_for_group(
            [member.student_id for member in members], student_scholarship_scores
        )
        common = []
        for scholarship_id, average in averages.items():
            scholarship = lookup.get(scholarship_id)
            common.append(
                CommonScholarship(
                    scholarship_id=scholarship_id,
                    average_score=average,
                    name=scholarship.name if scholarship else None,
                    amount=scholarship.amount if scholarship else None,
                    min_gpa=scholarship.min_gpa if scholarship else None,
                )
            )
        common.sort(key=lambda item: (-item.average_score, item.scholarship_id))

        groups.append(
            StudentGroup(
                group_id=len(groups) + 1,
                members=members,
                common_scholarships=tuple(common),
            )
        )

    return sorted(groups, key=lambda group: group.student_count, reverse=True)


def build_groups_report(
    groups: list[StudentGroup], min_match_score: float, min_common_scholarships: int
) -> dict[str, Any]:
    return {
        "total_groups": len(groups),
        "min_match_score": min_match_score,
        "min_common_scholarships": min_common_scholarships,
        "compatible_groups": [group.to_dict() for group in groups],
    }


def groups_to_frame(groups: list[StudentGroup]) -> pd.DataFrame:
    rows = [
        {
            "group_id": group.group_id,
            "student_count": group.student_count,
            "student_ids": list(group.student_ids),
            "members": ", ".join(member.display_name for member in group.members),
            "common_scholarship_ids": [item.scholarship_id for item in group.common_scholarships],
            "common_scholarships_count": len(group.common_scholarships),
        }
        for group in groups
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "group_id",
            "student_count",
            "student_ids",
            "members",
            "common_scholarship_ids",
            "common_scholarships_count",
        ],
    )
