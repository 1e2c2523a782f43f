"""Student compatibility graph.

Vertices are students with at least one match at or above `min_score`. Two
students are adjacent when the number of scholarships on which both score at
least `min_score` reaches `min_common`. A `min_common` below 1 connects every
pair; that is the caller's responsibility.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

import numpy as np
import pandas as pd

from src.matching.models import Match, StudentProfile, matches_to_frame


@dataclass(slots=True)
class CompatibilityGraph:
    """Simple undirected graph stored as an arena of integer vertices."""

    labels: list[StudentProfile] = field(default_factory=list)
    adjacency: list[set[int]] = field(default_factory=list)
    _index: dict[int, int] = field(default_factory=dict)

    def add_vertex(self, label: StudentProfile) -> int:
        if label.student_id in self._index:
            return self._index[label.student_id]
        vertex = len(self.labels)
        self.labels.append(label)
        self.adjacency.append(set())
        self._index[label.student_id] = vertex
        return vertex

    def add_edge(self, u: int, v: int) -> None:
        if u == v:
            return
        self.adjacency[u].add(v)
        self.adjacency[v].add(u)

    def neighbors(self, vertex: int) -> set[int]:
        return self.adjacency[vertex]

    def label(self, vertex: int) -> StudentProfile:
        return self.labels[vertex]

    def vertex_for(self, student_id: int) -> int | None:
        return self._index.get(student_id)

    @property
    def vertex_count(self) -> int:
        return len(self.labels)

    @property
    def edge_count(self) -> int:
        return sum(1 for _ in self.edges())

    def edges(self) -> Iterator[tuple[int, int]]:
        for u, neighbors in enumerate(self.adjacency):
            for v in sorted(neighbors):
                if u < v:
                    yield u, v

    def adjacency_map(self) -> dict[int, set[int]]:
        return {vertex: set(neighbors) for vertex, neighbors in enumerate(self.adjacency)}


def build_student_scholarship_scores(matches: Iterable[Match]) -> dict[int, dict[int, float]]:
    scores: dict[int, dict[int, float]] = {}
    for match in matches:
        scores.setdefault(match.student_id, {})[match.scholarship_id] = float(match.match_score)
    return scores


def build_compatibility_graph(
    matches: Iterable[Match],
    min_score: float,
    min_common: int,
    students: Mapping[int, StudentProfile] | None = None,
) -> CompatibilityGraph:
    """Build the graph; `students` supplies vertex labels, bare profiles are used otherwise."""
    matches_df = matches_to_frame(matches)
    qualifying_df = matches_df[pd.to_numeric(matches_df["match_score"]) >= min_score]

    graph = CompatibilityGraph()
    if qualifying_df.empty:
        return graph

    student_ids = sorted(int(value) for value in qualifying_df["student_id"].unique())
    lookup = students or {}
    for student_id in student_ids:
        graph.add_vertex(lookup.get(student_id) or StudentProfile(student_id=student_id))

    membership = (
        pd.crosstab(qualifying_df["student_id"].astype(int), qualifying_df["scholarship_id"].astype(int))
        .reindex(student_ids)
        .clip(upper=1)
        .to_numpy(dtype=np.int64)
    )
    overlap = membership @ membership.T

    rows, cols = np.triu_indices(len(student_ids), k=1)
    connected = overlap[rows, cols] >= min_common
    for u, v in zip(rows[connected], cols[connected]):
        graph.add_edge(graph.vertex_for(student_ids[u]), graph.vertex_for(student_ids[v]))
    return graph
