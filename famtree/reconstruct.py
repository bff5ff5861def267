"""Rebuild a renderable marriage tree from a flat relation graph."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .graph import RelationGraph
from .schemas import MARRIAGE, ROOT, SPACER, Gender, NodeRef, Person, RealPerson, Relation, Synthetic
from .utils import logger

Comparator = Callable[[str, Mapping[str, Any], str, Mapping[str, Any]], int]

NODE_CLASSES = {Gender.MALE: "man", Gender.FEMALE: "woman", Gender.UNKNOWN: "person"}
TEXT_CLASS = "nodeText"
MARRIAGE_CLASS = "marriageNode"


def keep_order(a_name: str, a_extra: Mapping[str, Any], b_name: str, b_extra: Mapping[str, Any]) -> int:
    return 0


def alphabetical(a_name: str, a_extra: Mapping[str, Any], b_name: str, b_extra: Mapping[str, Any]) -> int:
    a_key, b_key = a_name.casefold(), b_name.casefold()
    return (a_key > b_key) - (a_key < b_key)


def by_birth_date(a_name: str, a_extra: Mapping[str, Any], b_name: str, b_extra: Mapping[str, Any]) -> int:
    """Order by ISO ``dob`` in the metadata, oldest first; undated people go last."""
    a_key = (not a_extra.get("dob"), a_extra.get("dob") or "")
    b_key = (not b_extra.get("dob"), b_extra.get("dob") or "")
    return (a_key > b_key) - (a_key < b_key)


@dataclass
class RootRequest:
    """A person to place directly under the super-root.

    ``metadata`` and the class hints are passed through untouched to the
    node (and to the comparator); the reconstructor never interprets them.
    """

    person_id: str
    depth_offset: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    css_class: Optional[str] = None
    text_class: Optional[str] = None


@dataclass
class SpouseLink:
    source_node_id: int
    target_node_id: int
    person_a_id: str
    person_b_id: str
    sequence_index: int
    subtype: str = "married"

    def to_dict(self) -> Dict[str, object]:
        return {
            "source": self.source_node_id,
            "target": self.target_node_id,
            "person_a_id": self.person_a_id,
            "person_b_id": self.person_b_id,
            "number": self.sequence_index,
            "subtype": self.subtype,
        }


@dataclass
class TreeNode:
    id: int
    ref: NodeRef
    name: str = ""
    hidden: bool = False
    no_parent: bool = False
    is_marriage: bool = False
    css_class: str = "node"
    text_class: str = TEXT_CLASS
    metadata: Dict[str, Any] = field(default_factory=dict)
    children: List["TreeNode"] = field(default_factory=list)
    spouse_links: List[SpouseLink] = field(default_factory=list)

    @property
    def person_id(self) -> Optional[str]:
        if isinstance(self.ref, RealPerson):
            return self.ref.person_id
        return None

    @property
    def is_person(self) -> bool:
        return isinstance(self.ref, RealPerson)

    @property
    def kind(self) -> str:
        return "person" if isinstance(self.ref, RealPerson) else self.ref.kind


@dataclass
class ReconstructionStats:
    """Diagnostics for one reconstruction pass."""

    placed_people: int = 0
    marriages: int = 0
    duplicates_skipped: int = 0
    missing_references: int = 0
    missing_roots: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "placed_people": self.placed_people,
            "marriages": self.marriages,
            "duplicates_skipped": self.duplicates_skipped,
            "missing_references": self.missing_references,
            "missing_roots": list(self.missing_roots),
        }


@dataclass
class Reconstruction:
    root: TreeNode
    spouse_links: List[SpouseLink]
    stats: ReconstructionStats

    @property
    def is_empty(self) -> bool:
        return not self.root.children


def iter_nodes(root: TreeNode) -> Iterator[TreeNode]:
    """Yield ``root`` and its descendants in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def placed_person_ids(root: TreeNode) -> List[str]:
    return [node.person_id for node in iter_nodes(root) if node.person_id is not None]


def resolve_click(node: TreeNode) -> Optional[str]:
    """Map a clicked node back to its person id; synthetic nodes give ``None``."""
    return node.person_id


def person_metadata(person: Person) -> Dict[str, Any]:
    return {
        "id": person.id,
        "dob": person.dob,
        "gender": person.gender.value,
        "parents_count": len(person.parents),
        "children_count": len(person.children),
        "spouses_count": len(person.spouses),
    }


class _TreeBuilder:
    def __init__(
        self,
        graph: RelationGraph,
        hide_marriage_nodes: bool,
        comparator: Comparator,
        depth_offsets: Mapping[str, int],
        on_duplicate: Optional[Callable[[str], None]],
    ) -> None:
        self.graph = graph
        self.hide_marriage_nodes = hide_marriage_nodes
        self.comparator = comparator
        self.depth_offsets = depth_offsets
        self.on_duplicate = on_duplicate
        self.ids = itertools.count()
        self.visited: set[str] = set()
        self.spouse_links: List[SpouseLink] = []
        self.stats = ReconstructionStats()
        self.root = TreeNode(id=next(self.ids), ref=Synthetic(ROOT), hidden=True)

    def build(self, roots: Sequence[RootRequest]) -> Reconstruction:
        for request in roots:
            if request.person_id not in self.graph:
                logger.debug("Root %s is not in the snapshot", request.person_id)
                self.stats.missing_roots.append(request.person_id)
                continue
            self._place(request.person_id, self.root, request)
        return Reconstruction(root=self.root, spouse_links=self.spouse_links, stats=self.stats)

    def _duplicate(self, person_id: str) -> None:
        logger.debug("Person %s already placed, skipping", person_id)
        self.stats.duplicates_skipped += 1
        if self.on_duplicate is not None:
            self.on_duplicate(person_id)

    def _person_node(self, person: Person, request: Optional[RootRequest] = None) -> TreeNode:
        metadata = person_metadata(person)
        css_class = NODE_CLASSES[person.gender]
        text_class = TEXT_CLASS
        if request is not None:
            metadata.update(request.metadata)
            css_class = request.css_class or css_class
            text_class = request.text_class or text_class
        self.stats.placed_people += 1
        return TreeNode(
            id=next(self.ids),
            ref=RealPerson(person.id),
            name=person.name,
            css_class=css_class,
            text_class=text_class,
            metadata=metadata,
        )

    def _sorted(self, people: Iterable[Tuple[Person, Relation]]) -> List[Tuple[Person, Relation]]:
        def compare(a: Tuple[Person, Relation], b: Tuple[Person, Relation]) -> int:
            return self.comparator(a[0].name, person_metadata(a[0]), b[0].name, person_metadata(b[0]))

        return sorted(people, key=cmp_to_key(compare))

    def _resolve(self, person: Person, kind: str) -> List[Tuple[Person, Relation]]:
        resolved: List[Tuple[Person, Relation]] = []
        seen: set[str] = set()
        for relation in person.relations(kind):
            if relation.related_id in seen:
                continue
            seen.add(relation.related_id)
            other = self.graph.lookup(relation.related_id)
            if other is None:
                logger.debug("%s lists missing %s %s", person.id, kind, relation.related_id)
                self.stats.missing_references += 1
                continue
            resolved.append((other, relation))
        return resolved

    def _marriages(self, person: Person) -> List[Tuple[Person, Relation]]:
        marriages = []
        for spouse, relation in self._resolve(person, "spouses"):
            if spouse.id in self.visited:
                self._duplicate(spouse.id)
                continue
            marriages.append((spouse, relation))
        marriages = self._sorted(marriages)
        # Reserve spouses before recursing so they cannot surface elsewhere.
        self.visited.update(spouse.id for spouse, _ in marriages)
        return marriages

    def _place(self, person_id: str, parent: TreeNode, request: Optional[RootRequest] = None) -> Optional[TreeNode]:
        if person_id in self.visited:
            self._duplicate(person_id)
            return None
        person = self.graph.lookup(person_id)
        if person is None:
            self.stats.missing_references += 1
            return None
        self.visited.add(person_id)

        node = self._person_node(person, request)
        if parent is self.root:
            node.no_parent = True

        slot = parent
        depth_offset = request.depth_offset if request and request.depth_offset else self.depth_offsets.get(person_id, 0)
        for _ in range(max(0, int(depth_offset))):
            spacer = TreeNode(
                id=next(self.ids),
                ref=Synthetic(SPACER, person.id),
                hidden=True,
                no_parent=node.no_parent,
            )
            slot.children.append(spacer)
            slot = spacer

        marriages = self._marriages(person)
        children = self._resolve(person, "children")

        def belongs(child: Person, spouse: Person) -> bool:
            parent_ids = child.parent_ids()
            return person.id in parent_ids and spouse.id in parent_ids

        direct = [
            (child, relation)
            for child, relation in children
            if not any(belongs(child, spouse) for spouse, _ in marriages)
        ]
        for child, _ in self._sorted(direct):
            self._place(child.id, node)

        slot.children.append(node)

        for index, (spouse, relation) in enumerate(marriages):
            marriage = TreeNode(
                id=next(self.ids),
                ref=Synthetic(MARRIAGE, person.id),
                hidden=self.hide_marriage_nodes,
                no_parent=True,
                is_marriage=True,
                css_class=MARRIAGE_CLASS,
                metadata={"spouse_id": spouse.id, "subtype": relation.subtype.value},
            )
            spouse_node = self._person_node(spouse)
            spouse_node.no_parent = True
            slot.children.extend([marriage, spouse_node])

            shared = [(child, rel) for child, rel in children if belongs(child, spouse)]
            for child, _ in self._sorted(shared):
                self._place(child.id, marriage)

            link = SpouseLink(
                source_node_id=node.id,
                target_node_id=spouse_node.id,
                person_a_id=person.id,
                person_b_id=spouse.id,
                sequence_index=index,
                subtype=relation.subtype.value,
            )
            marriage.spouse_links.append(link)
            self.spouse_links.append(link)
            self.stats.marriages += 1

        return node


def _as_request(root: Union[str, RootRequest]) -> RootRequest:
    if isinstance(root, RootRequest):
        return root
    return RootRequest(person_id=str(root))


def reconstruct(
    graph: RelationGraph,
    roots: Iterable[Union[str, RootRequest]],
    *,
    hide_marriage_nodes: bool = True,
    comparator: Optional[Comparator] = None,
    depth_offsets: Optional[Mapping[str, int]] = None,
    on_duplicate: Optional[Callable[[str], None]] = None,
) -> Reconstruction:
    """Build the marriage tree for ``roots`` under one hidden super-root.

    Each person is placed at most once: a shared visited set spans every
    root, so cross-links and cyclic data simply drop the later occurrence.
    A spouse is laid beside the person (person, marriage node, spouse are
    siblings) and the couple's shared children hang from the marriage
    node. Children whose parents do not include both partners of any placed
    marriage hang directly from the person.

    Missing ids are pruned, never raised; when no root exists in the
    snapshot the super-root is returned without children.
    """

    builder = _TreeBuilder(
        graph,
        hide_marriage_nodes=hide_marriage_nodes,
        comparator=comparator or keep_order,
        depth_offsets=depth_offsets or {},
        on_duplicate=on_duplicate,
    )
    return builder.build([_as_request(root) for root in roots])


__all__ = [
    "Comparator",
    "Reconstruction",
    "ReconstructionStats",
    "RootRequest",
    "SpouseLink",
    "TreeNode",
    "alphabetical",
    "by_birth_date",
    "iter_nodes",
    "keep_order",
    "person_metadata",
    "placed_person_ids",
    "reconstruct",
    "resolve_click",
]
