"""Maximal clique enumeration (Bron-Kerbosch).

Works on any adjacency mapping of hashable vertices to neighbor sets. Each
maximal clique is reported exactly once, isolated vertices included as
singletons. Output order is not stable across inputs.
"""

from __future__ import annotations

from typing import AbstractSet, Hashable, Mapping, TypeVar

V = TypeVar("V", bound=Hashable)


def enumerate_maximal_cliques(
    adjacency: Mapping[V, AbstractSet[V]],
    *,
    pivot: bool = True,
) -> list[frozenset[V]]:
    neighbors: dict[V, set[V]] = {vertex: set() for vertex in adjacency}
    for vertex, adjacent in adjacency.items():
        for other in adjacent:
            if other == vertex:
                continue
            neighbors[vertex].add(other)
            neighbors.setdefault(other, set()).add(vertex)
    cliques: list[frozenset[V]] = []
    if not neighbors:
        return cliques
    _expand(set(), set(neighbors), set(), neighbors, cliques, pivot)
    return cliques


def _choose_pivot(candidates: set[V], excluded: set[V], neighbors: Mapping[V, set[V]]) -> V:
    return max(candidates | excluded, key=lambda vertex: len(candidates & neighbors[vertex]))


def _expand(
    clique: set[V],
    candidates: set[V],
    excluded: set[V],
    neighbors: Mapping[V, set[V]],
    cliques: list[frozenset[V]],
    pivot: bool,
) -> None:
    if not candidates and not excluded:
        cliques.append(frozenset(clique))
        return

    branch = set(candidates)
    if pivot:
        branch -= neighbors[_choose_pivot(candidates, excluded, neighbors)]

    for vertex in branch:
        adjacent = neighbors[vertex]
        _expand(
            clique | {vertex},
            candidates & adjacent,
            excluded & adjacent,
            neighbors,
            cliques,
            pivot,
        )
        candidates.remove(vertex)
        excluded.add(vertex)
