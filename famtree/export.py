"""Layout and relation graph export utilities."""

from __future__ import annotations

import json
import os
from typing import Dict

import networkx as nx

from .graph import RelationGraph
from .layout import LaidOutNode, TreeLayout
from .utils import console


def _is_scalar(value: object) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def sanitize_graph_for_graphml(graph: nx.MultiDiGraph) -> nx.MultiDiGraph:
    """Return a copy of ``graph`` whose attributes GraphML can store.

    NetworkX's GraphML writer only accepts scalar attributes, so the Person
    record attached to each node is dropped and any other non-scalar value is
    serialized to a JSON string.
    """

    def _sanitize_value(value: object) -> object:
        if _is_scalar(value):
            return value
        try:
            return json.dumps(value, ensure_ascii=False)
        except TypeError:
            return json.dumps(str(value), ensure_ascii=False)

    safe = graph.__class__()
    for node, data in graph.nodes(data=True):
        safe.add_node(node, **{key: _sanitize_value(val) for key, val in data.items() if key != "person"})
    for u, v, data in graph.edges(data=True):
        safe.add_edge(u, v, **{key: _sanitize_value(val) for key, val in data.items()})
    return safe


def _node_record(laid_out: LaidOutNode) -> Dict[str, object]:
    node = laid_out.node
    return {
        "id": node.id,
        "kind": node.kind,
        "name": node.name,
        "person_id": node.person_id,
        "hidden": node.hidden,
        "marriage": node.is_marriage,
        "no_parent": node.no_parent,
        "class": node.css_class,
        "text_class": node.text_class,
        "extra": node.metadata,
        "clickable": laid_out.clickable,
        "parent": laid_out.parent_id,
        "depth": laid_out.depth,
        "x": laid_out.x,
        "y": laid_out.y,
        "width": laid_out.width,
        "height": laid_out.height,
        "center_x": laid_out.center_x,
        "center_y": laid_out.center_y,
        "box_width": laid_out.box_width,
        "box_height": laid_out.box_height,
        "extent_x": laid_out.extent_x,
        "extent_width": laid_out.extent_width,
        "spouse_links": [link.link.to_dict() for link in laid_out.spouse_links],
    }


def layout_to_dict(layout: TreeLayout) -> Dict[str, object]:
    """Project a layout into plain data the renderer can consume."""

    people = layout.person_nodes()
    return {
        "nodes": [_node_record(laid_out) for laid_out in layout],
        "links": [link.to_dict() for link in layout.links],
        "spouse_links": [link.to_dict() for link in layout.spouse_links],
        "bounding_box": layout.bounding_box.to_dict(),
        "summary": {
            "nodes": len(layout),
            "people": len(people),
            "marriages": len(layout.spouse_links),
            "links": len(layout.links),
        },
    }


def export_layout(layout: TreeLayout, out_dir: str) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, "tree_layout.json")
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(layout_to_dict(layout), fh, indent=2)
    console.log("Layout written", path)
    return path


def export_relation_graph(graph: RelationGraph, out_dir: str) -> Dict[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    people_path = os.path.join(out_dir, "people.json")
    relations_path = os.path.join(out_dir, "relations.json")
    graphml_path = os.path.join(out_dir, "relations.graphml")

    people = [person.to_record() for person in graph.persons()]
    relations = []
    for u, v, data in graph.graph.edges(data=True):
        record = {"source": u, "target": v}
        record.update(data)
        relations.append(record)

    with open(people_path, "w", encoding="utf-8") as fh:
        json.dump(people, fh, indent=2)
    with open(relations_path, "w", encoding="utf-8") as fh:
        json.dump(relations, fh, indent=2)
    nx.write_graphml(sanitize_graph_for_graphml(graph.graph), graphml_path)

    return {"people": people_path, "relations": relations_path, "graphml": graphml_path}


__all__ = ["export_layout", "export_relation_graph", "layout_to_dict", "sanitize_graph_for_graphml"]
