"""Relation graph construction and typed accessors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import networkx as nx

from .schemas import INVERSE_RELATIONS, RELATION_KINDS, RELATION_LABELS, Person, Relation
from .utils import logger


@dataclass(frozen=True)
class DanglingReference:
    person_id: str
    kind: str
    related_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"person_id": self.person_id, "kind": self.kind, "related_id": self.related_id}


class RelationGraph:
    """Read-only view over one snapshot of people and their relations.

    People are stored as nodes of a :class:`networkx.MultiDiGraph` (the
    ``person`` attribute holds the record) and every relation entry whose
    target exists becomes an edge labelled with its kind and subtype. The
    typed accessors read the Person records themselves so that storage order
    is preserved exactly as the data source supplied it.
    """

    def __init__(self, persons: Iterable[Person]) -> None:
        self.graph = nx.MultiDiGraph()
        for person in persons:
            if person.id in self.graph:
                logger.debug("Duplicate record for %s ignored", person.id)
                continue
            self.graph.add_node(person.id, person=person, label=person.name, gender=person.gender.value)
        self._dangling: List[DanglingReference] = []
        for person in self.persons():
            for kind in RELATION_KINDS:
                for relation in person.relations(kind):
                    if relation.related_id not in self.graph:
                        self._dangling.append(DanglingReference(person.id, kind, relation.related_id))
                        continue
                    self.graph.add_edge(
                        person.id,
                        relation.related_id,
                        relation=RELATION_LABELS[kind],
                        subtype=relation.subtype.value,
                    )
        if self._dangling:
            logger.debug("Snapshot has %d dangling references", len(self._dangling))

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "RelationGraph":
        persons = []
        for record in records:
            if record.get("id") in (None, ""):
                logger.debug("Skipping record without id: %s", record.get("name"))
                continue
            persons.append(Person.from_record(record))
        return cls(persons)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def lookup(self, person_id: str) -> Optional[Person]:
        """Return the person for ``person_id`` or ``None`` when absent."""
        if person_id not in self.graph:
            return None
        return self.graph.nodes[person_id]["person"]

    def persons(self) -> Iterator[Person]:
        for _, data in self.graph.nodes(data=True):
            yield data["person"]

    def _related(self, person_id: str, kind: str) -> List[Tuple[Person, Relation]]:
        person = self.lookup(person_id)
        if person is None:
            return []
        seen: set[str] = set()
        related: List[Tuple[Person, Relation]] = []
        for relation in person.relations(kind):
            if relation.related_id in seen:
                continue
            other = self.lookup(relation.related_id)
            if other is None:
                continue
            seen.add(relation.related_id)
            related.append((other, relation))
        return related

    def parents_of(self, person_id: str) -> List[Tuple[Person, Relation]]:
        return self._related(person_id, "parents")

    def children_of(self, person_id: str) -> List[Tuple[Person, Relation]]:
        return self._related(person_id, "children")

    def spouses_of(self, person_id: str) -> List[Tuple[Person, Relation]]:
        return self._related(person_id, "spouses")

    def siblings_of(self, person_id: str) -> List[Tuple[Person, Relation]]:
        return self._related(person_id, "siblings")

    def dangling_references(self) -> List[DanglingReference]:
        return list(self._dangling)

    def asymmetric_relations(self) -> List[Tuple[str, str, str]]:
        """Return ``(person_id, kind, related_id)`` entries lacking an inverse."""

        missing: List[Tuple[str, str, str]] = []
        for person in self.persons():
            for kind in RELATION_KINDS:
                inverse = INVERSE_RELATIONS[kind]
                for relation in person.relations(kind):
                    other = self.lookup(relation.related_id)
                    if other is None:
                        continue
                    if not any(rel.related_id == person.id for rel in other.relations(inverse)):
                        missing.append((person.id, kind, relation.related_id))
        return missing

    def summary(self) -> Dict[str, object]:
        genders: Dict[str, int] = {}
        for person in self.persons():
            genders[person.gender.value] = genders.get(person.gender.value, 0) + 1
        return {
            "people": self.graph.number_of_nodes(),
            "relations": self.graph.number_of_edges(),
            "genders": genders,
            "dangling_references": len(self._dangling),
        }


__all__ = ["DanglingReference", "RelationGraph"]
