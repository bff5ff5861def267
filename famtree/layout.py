"""Deterministic geometry for reconstructed marriage trees.

Layout runs in two passes over the :class:`~famtree.reconstruct.TreeNode`
tree, in the manner of a Reingold-Tilford tidy tree. The sizing pass
(post-order) builds each subtree's contour: the left and right edge of
every row it occupies, relative to the subtree root. Children are packed
left to right, each one shifted just far enough that no row of it comes
closer than ``horizontal_spacing`` to the siblings already placed, and the
parent is centred over its first and last child. The positioning pass
(pre-order) turns those relative offsets into absolute centres, one row per
depth level.

Spouses need no special handling: the reconstructor makes the person, the
marriage node and the spouse siblings, and the marriage node only occupies
``marriage_node_size`` on their row. The couple's children hang one row
lower, so the children block may spread past the couple without pushing
the spouse away.

Hidden nodes (super-root, spacers, hidden marriage nodes) have no visible
box but still take part in the arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .reconstruct import Comparator, Reconstruction, SpouseLink, TreeNode
from .utils import logger


@dataclass
class LayoutConfig:
    node_width: float = 120.0
    node_height: float = 80.0
    horizontal_spacing: float = 20.0
    vertical_spacing: float = 40.0
    marriage_node_size: float = 10.0
    origin_x: float = 0.0
    origin_y: float = 0.0
    hide_marriage_nodes: bool = True
    comparator: Optional[Comparator] = None

    @property
    def row_height(self) -> float:
        return self.node_height + self.vertical_spacing

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutConfig":
        """Build a config from snake_case or camelCase keys; unknown keys are ignored."""

        aliases = {
            "nodeWidth": "node_width",
            "nodeHeight": "node_height",
            "horizontalSpacing": "horizontal_spacing",
            "verticalSpacing": "vertical_spacing",
            "marriageNodeSize": "marriage_node_size",
            "originX": "origin_x",
            "originY": "origin_y",
            "hideMarriageNodes": "hide_marriage_nodes",
            "hideMarriageConnectorNodes": "hide_marriage_nodes",
        }
        names = {f.name for f in fields(cls)} - {"comparator"}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name in names:
                values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class ResolvedSpouseLink:
    link: SpouseLink
    marriage_node_id: int
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def sequence_index(self) -> int:
        return self.link.sequence_index

    def to_dict(self) -> Dict[str, object]:
        record = self.link.to_dict()
        record.update(
            {
                "marriage": self.marriage_node_id,
                "x1": self.x1,
                "y1": self.y1,
                "x2": self.x2,
                "y2": self.y2,
            }
        )
        return record


@dataclass
class Link:
    source_id: int
    target_id: int
    x1: float
    y1: float
    x2: float
    y2: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "source": self.source_id,
            "target": self.target_id,
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
        }


@dataclass
class LaidOutNode:
    """Geometry of one node.

    ``x, y, width`` describe the node's footprint on its own row (the space
    no other node on that row may enter) and ``height`` the vertical extent
    of its subtree. ``extent_x, extent_width`` give the horizontal span of
    the whole subtree; ``box_*`` is the drawn box, zero for hidden nodes.
    """

    node: TreeNode
    x: float
    y: float
    width: float
    height: float
    center_x: float
    center_y: float
    box_width: float
    box_height: float
    extent_x: float
    extent_width: float
    depth: int
    parent_id: Optional[int] = None
    spouse_links: List[ResolvedSpouseLink] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.node.id

    @property
    def person_id(self) -> Optional[str]:
        return self.node.person_id

    @property
    def clickable(self) -> bool:
        return self.node.is_person


@dataclass
class TreeLayout:
    nodes: Dict[int, LaidOutNode]
    links: List[Link]
    spouse_links: List[ResolvedSpouseLink]
    bounding_box: BoundingBox
    root_id: Optional[int] = None

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[LaidOutNode]:
        return iter(self.nodes.values())

    def node(self, node_id: int) -> Optional[LaidOutNode]:
        return self.nodes.get(node_id)

    def node_for_person(self, person_id: str) -> Optional[LaidOutNode]:
        for laid_out in self.nodes.values():
            if laid_out.person_id == person_id:
                return laid_out
        return None

    def person_nodes(self) -> List[LaidOutNode]:
        return [laid_out for laid_out in self.nodes.values() if laid_out.node.is_person]

    def clickable_nodes(self) -> List[LaidOutNode]:
        return [laid_out for laid_out in self.nodes.values() if laid_out.clickable]

    @property
    def root(self) -> Optional[LaidOutNode]:
        if self.root_id is None:
            return None
        return self.nodes.get(self.root_id)


EMPTY_BOX = BoundingBox(0.0, 0.0, 0.0, 0.0)

# (left, right) edge per row, relative to the subtree root's centre; row 0 is the root's own.
Contour = List[Tuple[float, float]]


class LayoutEngine:
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()
        self._contours: Dict[int, Contour] = {}
        self._offsets: Dict[int, float] = {}

    def _box(self, node: TreeNode) -> tuple[float, float]:
        if node.is_person:
            return self.config.node_width, self.config.node_height
        if node.is_marriage:
            size = self.config.marriage_node_size
            return size, size
        return 0.0, 0.0

    def _measure(self, node: TreeNode) -> Contour:
        own_width, _ = self._box(node)
        contour: Contour = [(-own_width / 2, own_width / 2)]
        if not node.children:
            self._contours[node.id] = contour
            return contour

        spacing = self.config.horizontal_spacing
        placed: Contour = []
        shifts: List[float] = []
        for child in node.children:
            child_contour = self._measure(child)
            shift = 0.0
            if placed:
                shift = max(
                    placed[row][1] + spacing - child_contour[row][0]
                    for row in range(min(len(placed), len(child_contour)))
                )
            shifts.append(shift)
            for row, (left, right) in enumerate(child_contour):
                if row < len(placed):
                    placed[row] = (min(placed[row][0], left + shift), max(placed[row][1], right + shift))
                else:
                    placed.append((left + shift, right + shift))

        middle = (shifts[0] + shifts[-1]) / 2
        for child, shift in zip(node.children, shifts):
            self._offsets[child.id] = shift - middle
        contour.extend((left - middle, right - middle) for left, right in placed)
        self._contours[node.id] = contour
        return contour

    def _position(
        self,
        node: TreeNode,
        center_x: float,
        depth: int,
        parent_id: Optional[int],
        out: Dict[int, LaidOutNode],
    ) -> None:
        config = self.config
        own_width, _ = self._box(node)
        center_y = config.origin_y + depth * config.row_height
        box_width, box_height = (0.0, 0.0) if node.hidden else self._box(node)
        contour = self._contours[node.id]
        left = min(edge for edge, _ in contour)
        right = max(edge for _, edge in contour)
        out[node.id] = LaidOutNode(
            node=node,
            x=center_x - own_width / 2,
            y=center_y - config.node_height / 2,
            width=own_width,
            height=config.node_height + (len(contour) - 1) * config.row_height,
            center_x=center_x,
            center_y=center_y,
            box_width=box_width,
            box_height=box_height,
            extent_x=center_x + left,
            extent_width=right - left,
            depth=depth,
            parent_id=parent_id,
        )
        for child in node.children:
            self._position(child, center_x + self._offsets[child.id], depth + 1, node.id, out)

    def layout(self, reconstruction: Reconstruction) -> TreeLayout:
        if reconstruction.is_empty:
            logger.debug("Nothing to lay out")
            return TreeLayout(nodes={}, links=[], spouse_links=[], bounding_box=EMPTY_BOX)

        root = reconstruction.root
        self._contours = {}
        self._offsets = {}
        self._measure(root)
        nodes: Dict[int, LaidOutNode] = {}
        self._position(root, self.config.origin_x, 0, None, nodes)

        links = []
        for laid_out in nodes.values():
            if laid_out.parent_id is None or laid_out.node.no_parent:
                continue
            parent = nodes[laid_out.parent_id]
            links.append(
                Link(
                    source_id=parent.id,
                    target_id=laid_out.id,
                    x1=parent.center_x,
                    y1=parent.center_y,
                    x2=laid_out.center_x,
                    y2=laid_out.center_y,
                )
            )

        spouse_links = []
        for laid_out in nodes.values():
            for link in laid_out.node.spouse_links:
                source = nodes[link.source_node_id]
                target = nodes[link.target_node_id]
                resolved = ResolvedSpouseLink(
                    link=link,
                    marriage_node_id=laid_out.id,
                    x1=source.center_x,
                    y1=source.center_y,
                    x2=target.center_x,
                    y2=target.center_y,
                )
                laid_out.spouse_links.append(resolved)
                spouse_links.append(resolved)

        return TreeLayout(
            nodes=nodes,
            links=links,
            spouse_links=spouse_links,
            bounding_box=_bounding_box(nodes.values()),
            root_id=root.id,
        )


def _bounding_box(nodes: Iterable[LaidOutNode]) -> BoundingBox:
    visible = [n for n in nodes if n.box_width > 0 or n.box_height > 0]
    if not visible:
        return EMPTY_BOX
    left = min(n.center_x - n.box_width / 2 for n in visible)
    right = max(n.center_x + n.box_width / 2 for n in visible)
    top = min(n.center_y - n.box_height / 2 for n in visible)
    bottom = max(n.center_y + n.box_height / 2 for n in visible)
    return BoundingBox(x=left, y=top, width=right - left, height=bottom - top)


def compute_layout(reconstruction: Reconstruction, config: LayoutConfig | None = None) -> TreeLayout:
    """Lay out ``reconstruction``; identical input always gives identical output."""
    return LayoutEngine(config).layout(reconstruction)


__all__ = [
    "BoundingBox",
    "LaidOutNode",
    "LayoutConfig",
    "LayoutEngine",
    "Link",
    "ResolvedSpouseLink",
    "TreeLayout",
    "compute_layout",
]
