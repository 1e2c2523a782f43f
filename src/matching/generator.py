"""Match regeneration and the top-matches read path.

Regeneration is a full replace: a student's prior matches are deleted in one
call and only pairs that pass eligibility and reach the match threshold are
saved again. Delete and inserts share a single store transaction.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from typing import Iterable

from src.matching.config import MatchingConfig
from src.matching.directory import ApplicationTracker, ScholarshipDirectory, StudentDirectory
from src.matching.eligibility import is_eligible
from src.matching.models import Match, ScholarshipCriteria, StudentProfile
from src.matching.scoring import compute_score
from src.matching.store import MatchStore

logger = logging.getLogger(__name__)


def generate_matches(
    student: StudentProfile,
    scholarships: Iterable[ScholarshipCriteria],
    config: MatchingConfig | None = None,
    *,
    now: datetime | None = None,
) -> list[Match]:
    active_config = config or MatchingConfig.baseline()
    match_date = now or datetime.now(tz=UTC)

    matches: list[Match] = []
    for scholarship in scholarships:
        if not is_eligible(student, scholarship):
            continue
        score = compute_score(student, scholarship, active_config)
        logger.debug(
            "Calculated match score for student %s and scholarship %s: %.2f",
            student.student_id,
            scholarship.scholarship_id,
            score,
        )
        if score >= active_config.match_threshold:
            matches.append(
                Match(
                    student_id=student.student_id,
                    scholarship_id=scholarship.scholarship_id,
                    match_score=score,
                    match_date=match_date,
                )
            )
    return matches


def regenerate_matches(
    student: StudentProfile,
    scholarships: Iterable[ScholarshipCriteria],
    store: MatchStore,
    config: MatchingConfig | None = None,
    *,
    now: datetime | None = None,
) -> list[Match]:
    matches = generate_matches(student, scholarships, config, now=now)
    with store.transaction():
        removed = store.delete_matches_for_student(student.student_id)
        saved = [store.save_match(match) for match in matches]

    logger.info(
        "Regenerated matches for student %s: removed=%d saved=%d",
        student.student_id,
        removed,
        len(saved),
    )
    return saved


def regenerate_matches_for_student(
    student_id: int,
    students: StudentDirectory,
    scholarships: ScholarshipDirectory,
    store: MatchStore,
    config: MatchingConfig | None = None,
    *,
    now: datetime | None = None,
) -> list[Match]:
    student = students.get_student(student_id)
    if student is None:
        logger.info("Student %s not found; nothing to regenerate.", student_id)
        return []
    return regenerate_matches(
        student, scholarships.list_all_scholarships(), store, config, now=now
    )


def regenerate_all_matches(
    students: StudentDirectory,
    scholarships: ScholarshipDirectory,
    store: MatchStore,
    config: MatchingConfig | None = None,
    *,
    now: datetime | None = None,
) -> dict[int, list[Match]]:
    all_scholarships = scholarships.list_all_scholarships()
    match_date = now or datetime.now(tz=UTC)
    results: dict[int, list[Match]] = {}

    with store.transaction():
        for student in students.list_all_students():
            results[student.student_id] = regenerate_matches(
                student, all_scholarships, store, config, now=match_date
            )

    logger.info(
        "Regenerated matches for %d students (%d matches saved).",
        len(results),
        sum(len(matches) for matches in results.values()),
    )
    return results


def get_top_matches(
    student_id: int,
    limit: int,
    students: StudentDirectory,
    scholarships: ScholarshipDirectory,
    store: MatchStore,
    applications: ApplicationTracker,
    config: MatchingConfig | None = None,
) -> list[Match]:
    if limit < 0:
        raise ValueError(f"limit must be non-negative (received {limit}).")

    matches = store.find_matches_for_student(student_id)
    if not matches:
        logger.info("No matches found for student %s. Generating matches...", student_id)
        regenerate_matches_for_student(student_id, students, scholarships, store, config)
        matches = store.find_matches_for_student(student_id)

    return [
        replace(
            match,
            has_application=applications.has_application(student_id, match.scholarship_id),
        )
        for match in matches[:limit]
    ]
