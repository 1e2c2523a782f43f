"""Compatible student group discovery."""

from src.grouping.assembler import (
    CommonScholarship,
    StudentGroup,
    assemble_groups,
    build_groups_report,
)
from src.grouping.cliques import enumerate_maximal_cliques
from src.grouping.graph import (
    CompatibilityGraph,
    build_compatibility_graph,
    build_student_scholarship_scores,
)

__all__ = [
    "CommonScholarship",
    "CompatibilityGraph",
    "StudentGroup",
    "assemble_groups",
    "build_compatibility_graph",
    "build_groups_report",
    "build_student_scholarship_scores",
    "enumerate_maximal_cliques",
]
