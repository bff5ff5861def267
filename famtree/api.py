"""High-level API helpers for famtree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from .graph import RelationGraph
from .hierarchy import default_root
from .layout import LayoutConfig, TreeLayout, compute_layout
from .reconstruct import Reconstruction, RootRequest, reconstruct

Roots = Sequence[Union[str, RootRequest]]


@dataclass
class TreeResult:
    """Everything produced for one snapshot: graph, tree and geometry."""

    graph: RelationGraph
    reconstruction: Reconstruction
    layout: TreeLayout


def _as_graph(snapshot: Union[RelationGraph, Iterable[Mapping[str, Any]]]) -> RelationGraph:
    if isinstance(snapshot, RelationGraph):
        return snapshot
    return RelationGraph.from_records(snapshot)


def build_tree(
    snapshot: Union[RelationGraph, Iterable[Mapping[str, Any]]],
    roots: Optional[Roots] = None,
    config: LayoutConfig | None = None,
    depth_offsets: Optional[Mapping[str, int]] = None,
) -> TreeResult:
    """Reconstruct and lay out a snapshot in one call.

    Without ``roots`` the first person's furthest forefather is used, which
    is what the tree page shows when nobody has been selected yet.
    """

    config = config or LayoutConfig()
    graph = _as_graph(snapshot)
    if not roots:
        first = next(graph.persons(), None)
        start = default_root(graph, first.id) if first is not None else None
        roots = [start] if start else []
    reconstruction = reconstruct(
        graph,
        roots,
        hide_marriage_nodes=config.hide_marriage_nodes,
        comparator=config.comparator,
        depth_offsets=depth_offsets,
    )
    layout = compute_layout(reconstruction, config)
    return TreeResult(graph=graph, reconstruction=reconstruction, layout=layout)


def build_layout(
    snapshot: Union[RelationGraph, Iterable[Mapping[str, Any]]],
    roots: Optional[Roots] = None,
    config: LayoutConfig | None = None,
) -> TreeLayout:
    return build_tree(snapshot, roots, config).layout


__all__ = ["TreeResult", "build_layout", "build_tree"]
