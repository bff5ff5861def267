"""Father-line ancestor chains used for breadcrumbs and root selection."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .graph import RelationGraph
from .schemas import Gender, HierarchyEntry


def _first_male_parent(graph: RelationGraph, person_id: str) -> Optional[str]:
    person = graph.lookup(person_id)
    if person is None:
        return None
    for relation in person.parents:
        parent = graph.lookup(relation.related_id)
        if parent is not None and parent.gender is Gender.MALE:
            return parent.id
    return None


def build_hierarchy_chain(graph: RelationGraph, start_id: str) -> List[HierarchyEntry]:
    """Walk the patriline of ``start_id`` up to the furthest known forefather.

    At every step the first parent (in storage order) whose record says
    ``male`` is followed. The walk stops when there is no such parent, when a
    record is missing, or when an id repeats. Female parents are never
    followed, so a person with only a mother on record gets an empty chain.

    The result runs from the most distant ancestor down to the immediate
    father.
    """

    chain: List[HierarchyEntry] = []
    visited = {start_id}
    current = start_id
    while True:
        parent_id = _first_male_parent(graph, current)
        if parent_id is None or parent_id in visited:
            break
        visited.add(parent_id)
        parent = graph.lookup(parent_id)
        chain.insert(0, HierarchyEntry(id=parent.id, name=parent.name))
        current = parent_id
    return chain


def populate_hierarchies(graph: RelationGraph) -> Dict[str, List[HierarchyEntry]]:
    return {person.id: build_hierarchy_chain(graph, person.id) for person in graph.persons()}


def default_root(graph: RelationGraph, person_id: str) -> Optional[str]:
    """Return the furthest forefather of ``person_id`` (or the person itself)."""
    if person_id not in graph:
        return None
    chain = build_hierarchy_chain(graph, person_id)
    return chain[0].id if chain else person_id


def format_breadcrumb(chain: Sequence[HierarchyEntry], separator: str = " > ") -> str:
    return separator.join(entry.name for entry in chain)


__all__ = ["build_hierarchy_chain", "default_root", "format_breadcrumb", "populate_hierarchies"]
