"""Entry point used by the web/admin layer and the scripts."""

from __future__ import annotations

import logging
from datetime import datetime

from src.grouping.assembler import StudentGroup, assemble_groups
from src.grouping.cliques import enumerate_maximal_cliques
from src.grouping.graph import build_compatibility_graph, build_student_scholarship_scores
from src.matching.config import GroupingConfig, MatchingConfig
from src.matching.directory import (
    ApplicationTracker,
    InMemoryApplicationTracker,
    ScholarshipDirectory,
    StudentDirectory,
)
from src.matching.generator import (
    get_top_matches,
    regenerate_all_matches,
    regenerate_matches_for_student,
)
from src.matching.models import Match
from src.matching.store import MatchStore

logger = logging.getLogger(__name__)

DEFAULT_TOP_MATCHES = 5


class AllocationEngine:
    def __init__(
        self,
        students: StudentDirectory,
        scholarships: ScholarshipDirectory,
        store: MatchStore,
        applications: ApplicationTracker | None = None,
        *,
        matching_config: MatchingConfig | None = None,
        grouping_config: GroupingConfig | None = None,
    ) -> None:
        self.students = students
        self.scholarships = scholarships
        self.store = store
        self.applications = applications or InMemoryApplicationTracker()
        self.matching_config = matching_config or MatchingConfig.baseline()
        self.grouping_config = grouping_config or GroupingConfig.baseline()

    def get_top_matches_for_student(self, student_id: int, limit: int = DEFAULT_TOP_MATCHES) -> list[Match]:
        return get_top_matches(
            student_id,
            limit,
            self.students,
            self.scholarships,
            self.store,
            self.applications,
            self.matching_config,
        )

    def regenerate_matches_for_student(self, student_id: int, *, now: datetime | None = None) -> list[Match]:
        return regenerate_matches_for_student(
            student_id,
            self.students,
            self.scholarships,
            self.store,
            self.matching_config,
            now=now,
        )

    def regenerate_all_matches(self, *, now: datetime | None = None) -> dict[int, list[Match]]:
        return regenerate_all_matches(
            self.students,
            self.scholarships,
            self.store,
            self.matching_config,
            now=now,
        )

    def find_compatible_student_groups(
        self,
        min_match_score: float | None = None,
        min_common_scholarships: int | None = None,
    ) -> list[StudentGroup]:
        min_score = (
            self.grouping_config.min_match_score if min_match_score is None else min_match_score
        )
        min_common = (
            self.grouping_config.min_common_scholarships
            if min_common_scholarships is None
            else min_common_scholarships
        )

        matches = self.store.find_matches_above_score(min_score)
        scores = build_student_scholarship_scores(matches)
        profiles = {student.student_id: student for student in self.students.find_all_by_id(scores)}
        graph = build_compatibility_graph(matches, min_score, min_common, students=profiles)
        cliques = enumerate_maximal_cliques(graph.adjacency_map())

        scholarship_lookup = {}
        for scholarship_id in {sid for student_scores in scores.values() for sid in student_scores}:
            scholarship = self.scholarships.get_scholarship(scholarship_id)
            if scholarship is not None:
                scholarship_lookup[scholarship_id] = scholarship
        groups = assemble_groups(cliques, graph, scores, scholarship_lookup)
        logger.info(
            "Found %d compatible groups (min_match_score=%.2f, min_common=%d, students=%d, edges=%d)",
            len(groups),
            min_score,
            min_common,
            graph.vertex_count,
            graph.edge_count,
        )
        return groups
