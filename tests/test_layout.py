import itertools

import pytest

from famtree.export import layout_to_dict
from famtree.graph import RelationGraph
from famtree.layout import LayoutConfig, compute_layout
from famtree.reconstruct import RootRequest, reconstruct


def _couple_graph():
    return RelationGraph.from_records(
        [
            {"id": "P", "name": "Prakash", "gender": "male", "spouses": ["S"], "children": ["C1", "C2"]},
            {"id": "S", "name": "Sita", "gender": "female", "spouses": ["P"], "children": ["C1", "C2"]},
            {"id": "C1", "name": "Chetan", "parents": ["P", "S"]},
            {"id": "C2", "name": "Charu", "parents": ["P", "S"]},
        ]
    )


def _wide_graph():
    records = [
        {"id": "R", "name": "Root", "gender": "male", "spouses": ["W"], "children": ["K1", "K2", "K3", "solo"]},
        {"id": "W", "name": "Wife", "gender": "female", "spouses": ["R"]},
        {"id": "solo", "name": "Solo", "parents": ["R"], "children": ["g1", "g2"]},
        {"id": "g1", "name": "G1", "parents": ["solo"]},
        {"id": "g2", "name": "G2", "parents": ["solo"]},
    ]
    for kid in ("K1", "K2", "K3"):
        records.append({"id": kid, "name": kid, "parents": ["R", "W"], "spouses": [f"{kid}-sp"]})
        records.append({"id": f"{kid}-sp", "name": f"{kid} spouse", "spouses": [kid]})
    return RelationGraph.from_records(records)


def _couple_with_children(count):
    kids = [f"K{i}" for i in range(count)]
    records = [
        {"id": "P", "name": "Prakash", "gender": "male", "spouses": ["S"], "children": kids},
        {"id": "S", "name": "Sita", "gender": "female", "spouses": ["P"], "children": kids},
    ]
    records.extend({"id": kid, "name": kid, "parents": ["P", "S"]} for kid in kids)
    return RelationGraph.from_records(records)


def test_couple_geometry():
    result = reconstruct(_couple_graph(), ["P"])
    layout = compute_layout(result, LayoutConfig())

    p = layout.node_for_person("P")
    s = layout.node_for_person("S")
    c1 = layout.node_for_person("C1")
    c2 = layout.node_for_person("C2")
    marriage = next(n for n in layout if n.node.is_marriage)

    assert layout.root.center_x == 0
    assert (p.center_x, p.center_y) == (-85, 120)
    assert (marriage.center_x, marriage.center_y) == (0, 120)
    assert (s.center_x, s.center_y) == (85, 120)
    assert (c1.center_x, c1.center_y) == (-70, 240)
    assert (c2.center_x, c2.center_y) == (70, 240)
    assert (marriage.x, marriage.width) == (-5, 10)
    assert (marriage.extent_x, marriage.extent_width) == (-130, 260)
    assert (layout.root.extent_x, layout.root.extent_width) == (-145, 290)
    assert layout.root.height == 80 + 2 * 120

    assert marriage.box_width == 0 and marriage.spouse_links
    assert p.box_width == 120 and p.box_height == 80
    assert (p.x, p.width) == (-145, 120)

    (spouse_link,) = layout.spouse_links
    assert (spouse_link.x1, spouse_link.y1, spouse_link.x2, spouse_link.y2) == (-85, 120, 85, 120)
    assert spouse_link.marriage_node_id == marriage.id

    box = layout.bounding_box
    assert (box.x, box.y, box.width, box.height) == (-145, 80, 290, 200)


@pytest.mark.parametrize("children", [0, 2, 6])
def test_spouse_stays_next_to_person_however_many_children(children):
    config = LayoutConfig()
    layout = compute_layout(reconstruct(_couple_with_children(children), ["P"]), config)
    person = layout.node_for_person("P")
    spouse = layout.node_for_person("S")
    marriage = next(n for n in layout if n.node.is_marriage)

    gap = (spouse.center_x - spouse.box_width / 2) - (person.center_x + person.box_width / 2)
    assert gap == 2 * config.horizontal_spacing + config.marriage_node_size
    assert person.center_x < marriage.center_x < spouse.center_x

    kids = [layout.node_for_person(f"K{i}") for i in range(children)]
    if kids:
        middle = (kids[0].center_x + kids[-1].center_x) / 2
        assert middle == marriage.center_x
        assert all(kid.depth == marriage.depth + 1 for kid in kids)


def test_spouse_is_on_the_same_row_to_the_right():
    config = LayoutConfig()
    layout = compute_layout(reconstruct(_wide_graph(), ["R"]), config)
    for kid in ("K1", "K2", "K3"):
        person = layout.node_for_person(kid)
        spouse = layout.node_for_person(f"{kid}-sp")
        assert spouse.depth == person.depth
        assert spouse.center_y == person.center_y
        assert spouse.x - (person.x + person.width) == 2 * config.horizontal_spacing + config.marriage_node_size


def test_nodes_on_a_row_never_overlap():
    config = LayoutConfig()
    layout = compute_layout(reconstruct(_wide_graph(), ["R"]), config)
    rows = {}
    for laid_out in layout:
        rows.setdefault(laid_out.depth, []).append(laid_out)
    for row in rows.values():
        row.sort(key=lambda n: n.x)
        for left, right in zip(row, row[1:]):
            assert right.x - (left.x + left.width) >= config.horizontal_spacing - 1e-9

    by_parent = {}
    for laid_out in layout:
        by_parent.setdefault(laid_out.parent_id, []).append(laid_out)
    for siblings in by_parent.values():
        for a, b in itertools.combinations(siblings, 2):
            assert a.x + a.width <= b.x or b.x + b.width <= a.x

    for laid_out in layout:
        if laid_out.parent_id is not None:
            parent = layout.node(laid_out.parent_id)
            assert parent.extent_x <= laid_out.extent_x + 1e-9
            assert laid_out.extent_x + laid_out.extent_width <= parent.extent_x + parent.extent_width + 1e-9
            assert laid_out.depth == parent.depth + 1


def test_parent_is_centred_over_its_children():
    layout = compute_layout(reconstruct(_wide_graph(), ["R"]))
    solo = layout.node_for_person("solo")
    g1, g2 = layout.node_for_person("g1"), layout.node_for_person("g2")
    assert solo.center_x == (g1.center_x + g2.center_x) / 2
    assert g2.center_x - g1.center_x == 140


def test_layout_is_deterministic():
    config = LayoutConfig(node_width=90, horizontal_spacing=15)
    first = layout_to_dict(compute_layout(reconstruct(_wide_graph(), ["R"]), config))
    second = layout_to_dict(compute_layout(reconstruct(_wide_graph(), ["R"]), config))
    assert first == second


def test_links_skip_nodes_without_a_parent_line():
    result = reconstruct(_couple_graph(), ["P"])
    layout = compute_layout(result)
    targets = {layout.node(link.target_id).person_id for link in layout.links}
    assert targets == {"C1", "C2"}
    sources = {layout.node(link.source_id).node.is_marriage for link in layout.links}
    assert sources == {True}


def test_visible_marriage_nodes_have_a_box():
    layout = compute_layout(reconstruct(_couple_graph(), ["P"], hide_marriage_nodes=False))
    marriage = next(n for n in layout if n.node.is_marriage)
    assert marriage.box_width == 10 and marriage.box_height == 10


def test_depth_offset_pushes_person_down():
    layout = compute_layout(reconstruct(_couple_graph(), [RootRequest("P", depth_offset=1)]))
    assert layout.node_for_person("P").depth == 2
    assert layout.node_for_person("S").depth == 2
    assert layout.node_for_person("C1").depth == 3


def test_origin_moves_the_root():
    layout = compute_layout(reconstruct(_couple_graph(), ["P"]), LayoutConfig(origin_x=500, origin_y=50))
    assert (layout.root.center_x, layout.root.center_y) == (500, 50)
    assert layout.node_for_person("P").center_y == 170


def test_empty_reconstruction_gives_empty_layout():
    layout = compute_layout(reconstruct(_couple_graph(), ["missing"]))
    assert len(layout) == 0
    assert layout.root is None
    assert layout.bounding_box.width == 0


@pytest.mark.parametrize(
    "options",
    [
        {"nodeWidth": 150, "hideMarriageConnectorNodes": False, "unknown": 1},
        {"node_width": 150, "hide_marriage_nodes": False},
    ],
)
def test_config_from_dict_accepts_both_spellings(options):
    config = LayoutConfig.from_dict(options)
    assert config.node_width == 150
    assert config.hide_marriage_nodes is False
    assert config.node_height == 80
