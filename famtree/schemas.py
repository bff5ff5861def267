"""Dataclasses for people, relations and node identities."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .utils import first_present


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "Gender":
        text = str(value or "").strip().lower()
        if text in {"male", "m", "man"}:
            return cls.MALE
        if text in {"female", "f", "woman"}:
            return cls.FEMALE
        return cls.UNKNOWN


class RelationSubtype(str, Enum):
    BLOOD = "blood"
    ADOPTED = "adopted"
    MARRIED = "married"
    DIVORCED = "divorced"


RELATION_KINDS = ("parents", "children", "spouses", "siblings")

# Edge label used in the relation graph for each Person field
RELATION_LABELS = {
    "parents": "parent",
    "children": "child",
    "spouses": "spouse",
    "siblings": "sibling",
}

INVERSE_RELATIONS = {
    "parents": "children",
    "children": "parents",
    "spouses": "spouses",
    "siblings": "siblings",
}

RELATED_ID_KEYS = ("id", "related_id", "related_person_id", "relatedId")
SUBTYPE_KEYS = ("subtype", "relation_subtype", "relationSubtype", "type", "relation_type")
PERSON_FIELDS = {"id", "name", "gender", "dob", *RELATION_KINDS}


def _default_subtype(kind: str) -> RelationSubtype:
    return RelationSubtype.MARRIED if kind == "spouses" else RelationSubtype.BLOOD


@dataclass(frozen=True)
class Relation:
    related_id: str
    subtype: RelationSubtype = RelationSubtype.BLOOD

    @classmethod
    def parse(cls, entry: object, kind: str) -> Optional["Relation"]:
        """Normalize a relation entry from a bare id or a record mapping.

        The remote service reports entries as ``{"id", "type"}`` where
        ``type`` is sometimes the relation kind (``"parent"``) rather than a
        subtype; anything that is not a known subtype falls back to the
        default for ``kind``.
        """

        if isinstance(entry, Mapping):
            related = first_present(entry, RELATED_ID_KEYS)
            raw_subtype = first_present(entry, SUBTYPE_KEYS)
        else:
            related, raw_subtype = entry, None
        if related is None or related == "":
            return None
        try:
            subtype = RelationSubtype(str(raw_subtype).lower())
        except ValueError:
            subtype = _default_subtype(kind)
        return cls(related_id=str(related), subtype=subtype)


def _parse_relations(entries: Optional[Iterable[object]], kind: str) -> Tuple[Relation, ...]:
    relations = []
    for entry in entries or ():
        relation = Relation.parse(entry, kind)
        if relation is not None:
            relations.append(relation)
    return tuple(relations)


@dataclass(frozen=True)
class Person:
    """Immutable snapshot of one person record."""

    id: str
    name: str
    gender: Gender = Gender.UNKNOWN
    dob: Optional[str] = None
    parents: Tuple[Relation, ...] = ()
    children: Tuple[Relation, ...] = ()
    spouses: Tuple[Relation, ...] = ()
    siblings: Tuple[Relation, ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Person":
        return cls(
            id=str(record["id"]),
            name=str(record.get("name") or ""),
            gender=Gender.parse(record.get("gender")),
            dob=record.get("dob"),
            parents=_parse_relations(record.get("parents"), "parents"),
            children=_parse_relations(record.get("children"), "children"),
            spouses=_parse_relations(record.get("spouses"), "spouses"),
            siblings=_parse_relations(record.get("siblings"), "siblings"),
            attributes={k: v for k, v in record.items() if k not in PERSON_FIELDS},
        )

    def relations(self, kind: str) -> Tuple[Relation, ...]:
        return getattr(self, kind)

    def parent_ids(self) -> set[str]:
        return {relation.related_id for relation in self.parents}

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = dict(self.attributes)
        record.update(
            {
                "id": self.id,
                "name": self.name,
                "gender": self.gender.value,
                "dob": self.dob,
            }
        )
        for kind in RELATION_KINDS:
            record[kind] = [
                {"id": rel.related_id, "subtype": rel.subtype.value} for rel in self.relations(kind)
            ]
        return record


@dataclass(frozen=True)
class HierarchyEntry:
    id: str
    name: str

    def dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class RealPerson:
    """Identity of a node that stands for an actual person."""

    person_id: str


@dataclass(frozen=True)
class Synthetic:
    """Identity of a layout-only node (super-root, spacer or marriage).

    ``person_id`` records the person the node was created for so tooling can
    trace it back, but synthetic nodes are never clickable.
    """

    kind: str
    person_id: Optional[str] = None


NodeRef = Union[RealPerson, Synthetic]

ROOT = "root"
SPACER = "spacer"
MARRIAGE = "marriage"


__all__ = [
    "Gender",
    "HierarchyEntry",
    "INVERSE_RELATIONS",
    "MARRIAGE",
    "NodeRef",
    "Person",
    "RELATION_KINDS",
    "RELATION_LABELS",
    "ROOT",
    "RealPerson",
    "Relation",
    "RelationSubtype",
    "SPACER",
    "Synthetic",
]
