"""Command line interface for famtree."""

from __future__ import annotations

import argparse
import json
import os
from typing import Sequence

from .api import build_tree
from .export import export_layout, export_relation_graph
from .graph import RelationGraph
from .hierarchy import build_hierarchy_chain, default_root, format_breadcrumb
from .http import HTTPClient, HTTPError
from .layout import LayoutConfig
from .reconstruct import RootRequest, alphabetical, by_birth_date
from .sources import SnapshotError, TreeServiceClient, load_snapshot, save_snapshot
from .utils import console, logger, set_log_level
from .viewport import Viewport

SORTERS = {"none": None, "alpha": alphabetical, "dob": by_birth_date}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        default=os.getenv("FAMTREE_LOG_LEVEL", "INFO"),
        help="Python logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    parser = argparse.ArgumentParser(prog="famtree", description="Family tree reconstruction and layout")
    sub = parser.add_subparsers(dest="command", required=True)

    layout = sub.add_parser("layout", parents=[common], help="Reconstruct and lay out a snapshot")
    layout.add_argument("snapshot", help="JSON file with person records")
    layout.add_argument("--root", action="append", dest="roots", help="Root person id (repeatable)")
    layout.add_argument("--out", default="out", help="Output directory (default: out)")
    layout.add_argument("--config", help="JSON file with layout options")
    layout.add_argument("--show-marriage-nodes", action="store_true", help="Render marriage connectors")
    layout.add_argument("--sort", choices=sorted(SORTERS), default="none", help="Sibling ordering")
    layout.add_argument("--viewport", default="1200x800", help="Viewport size WIDTHxHEIGHT for the fit transform")
    layout.add_argument("--export-graph", action="store_true", help="Also write people/relations/graphml files")

    hierarchy = sub.add_parser("hierarchy", parents=[common], help="Print the father-line chain of a person")
    hierarchy.add_argument("snapshot")
    hierarchy.add_argument("person_id")

    validate = sub.add_parser("validate", parents=[common], help="Report dangling and one-sided relations")
    validate.add_argument("snapshot")

    fetch = sub.add_parser("fetch", parents=[common], help="Download a tree snapshot from the tree service")
    fetch.add_argument("tree_id")
    fetch.add_argument("--url", default=os.getenv("FAMTREE_SERVICE_URL"), help="Service base URL")
    fetch.add_argument("--out", required=True, help="Snapshot file to write")

    return parser


def _load_graph(path: str) -> RelationGraph:
    try:
        return RelationGraph.from_records(load_snapshot(path))
    except SnapshotError as exc:
        raise SystemExit(str(exc)) from exc


def _parse_viewport(value: str) -> Viewport:
    try:
        width, height = (float(part) for part in value.lower().split("x", 1))
    except ValueError as exc:
        raise SystemExit(f"Invalid viewport size '{value}', expected WIDTHxHEIGHT") from exc
    return Viewport(width=width, height=height)


def _load_config(args: argparse.Namespace) -> LayoutConfig:
    options = {}
    if args.config:
        with open(args.config, "r", encoding="utf-8") as fh:
            options = json.load(fh)
    config = LayoutConfig.from_dict(options)
    if args.show_marriage_nodes:
        config.hide_marriage_nodes = False
    config.comparator = SORTERS[args.sort]
    return config


def run_layout(args: argparse.Namespace) -> None:
    set_log_level(args.log_level)
    graph = _load_graph(args.snapshot)
    config = _load_config(args)
    roots = [RootRequest(person_id=root) for root in args.roots or []]
    result = build_tree(graph, roots, config)
    stats = result.reconstruction.stats
    if stats.missing_roots:
        logger.warning("Roots not found in snapshot: %s", ", ".join(stats.missing_roots))
    if not result.layout.nodes:
        console.log("[yellow]Empty tree: no requested root exists in the snapshot[/yellow]")
    path = export_layout(result.layout, args.out)
    if args.export_graph:
        console.log(export_relation_graph(graph, args.out))
    fit = _parse_viewport(args.viewport).zoom_to_fit(result.layout.bounding_box)
    console.log("Reconstruction", stats.to_dict())
    console.log("Fit transform", fit.to_dict())
    console.log(f"Laid out {len(result.layout.person_nodes())} people into {path}")


def run_hierarchy(args: argparse.Namespace) -> None:
    set_log_level(args.log_level)
    graph = _load_graph(args.snapshot)
    if args.person_id not in graph:
        raise SystemExit(f"Unknown person id {args.person_id}")
    chain = build_hierarchy_chain(graph, args.person_id)
    console.log(format_breadcrumb(chain) or "(no male-line ancestors on record)")
    console.log(f"Default root: {default_root(graph, args.person_id)}")


def run_validate(path: str) -> None:
    graph = _load_graph(path)
    dangling = graph.dangling_references()
    one_sided = graph.asymmetric_relations()
    console.log(graph.summary())
    for person_id, kind, related_id in one_sided[:20]:
        console.log(f"[yellow]{person_id} lists {related_id} in {kind} without the inverse relation[/yellow]")
    if dangling:
        raise SystemExit(f"Relations reference missing people: {[ref.to_dict() for ref in dangling[:3]]}")
    console.log("Validation OK")


def run_fetch(args: argparse.Namespace) -> None:
    set_log_level(args.log_level)
    if not args.url:
        raise SystemExit("Provide --url or set FAMTREE_SERVICE_URL")
    client = TreeServiceClient(HTTPClient(), args.url, api_key=os.getenv("FAMTREE_SERVICE_KEY"))
    try:
        records = client.fetch_tree(args.tree_id)
    except HTTPError as exc:
        raise SystemExit(f"Fetching tree {args.tree_id} failed: {exc}") from exc
    save_snapshot(records, args.out)
    console.log(f"Saved {len(records)} people to {args.out}")


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "layout":
        run_layout(args)
    elif args.command == "hierarchy":
        run_hierarchy(args)
    elif args.command == "validate":
        set_log_level(args.log_level)
        run_validate(args.snapshot)
    elif args.command == "fetch":
        run_fetch(args)
    else:  # pragma: no cover - defensive
        parser.print_help()


if __name__ == "__main__":  # pragma: no cover
    main()
