import json

import pytest

from famtree import cli

RECORDS = [
    {"id": "g", "name": "Govind", "gender": "male", "children": ["f"]},
    {"id": "f", "name": "Farhan", "gender": "male", "parents": ["g"], "spouses": ["m"], "children": ["x"]},
    {"id": "m", "name": "Mira", "gender": "female", "spouses": ["f"], "children": ["x"]},
    {"id": "x", "name": "Xavier", "gender": "male", "parents": ["f", "m"]},
]


def _snapshot(tmp_path, records=RECORDS):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


def test_build_parser_has_commands():
    parser = cli.build_parser()
    args = parser.parse_args(["validate", "snap.json"])
    assert args.command == "validate"
    args = parser.parse_args(["layout", "snap.json", "--root", "a", "--root", "b", "--sort", "alpha"])
    assert args.roots == ["a", "b"]
    assert args.log_level


def test_layout_command_writes_tree(tmp_path):
    out_dir = tmp_path / "out"
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"nodeWidth": 100}), encoding="utf-8")
    cli.main(
        [
            "layout",
            _snapshot(tmp_path),
            "--out",
            str(out_dir),
            "--config",
            str(config),
            "--show-marriage-nodes",
            "--export-graph",
        ]
    )
    data = json.loads((out_dir / "tree_layout.json").read_text(encoding="utf-8"))
    people = [node for node in data["nodes"] if node["person_id"]]
    # without --root the furthest forefather of the first record is used
    assert people[0]["person_id"] == "g"
    assert people[0]["box_width"] == 100
    assert any(node["marriage"] and not node["hidden"] for node in data["nodes"])
    assert (out_dir / "relations.graphml").exists()


def test_layout_command_with_missing_root_writes_empty_tree(tmp_path):
    out_dir = tmp_path / "out"
    cli.main(["layout", _snapshot(tmp_path), "--root", "nobody", "--out", str(out_dir)])
    data = json.loads((out_dir / "tree_layout.json").read_text(encoding="utf-8"))
    assert data["nodes"] == []


def test_hierarchy_command(tmp_path, monkeypatch):
    logged = []
    monkeypatch.setattr(cli.console, "log", lambda *args, **kwargs: logged.append(args))
    cli.main(["hierarchy", _snapshot(tmp_path), "x"])
    assert logged[0] == ("Govind > Farhan",)
    assert logged[1] == ("Default root: g",)
    with pytest.raises(SystemExit):
        cli.main(["hierarchy", _snapshot(tmp_path), "nobody"])


def test_validate_command(tmp_path):
    cli.run_validate(_snapshot(tmp_path))
    broken = RECORDS + [{"id": "y", "name": "Yash", "parents": ["ghost"]}]
    with pytest.raises(SystemExit):
        cli.run_validate(_snapshot(tmp_path, broken))


def test_fetch_command(tmp_path, monkeypatch):
    class DummyClient:
        def __init__(self, http, url, api_key=None):
            self.url = url

        def fetch_tree(self, tree_id):
            return RECORDS

    monkeypatch.setattr(cli, "TreeServiceClient", DummyClient)
    out = tmp_path / "fetched.json"
    cli.main(["fetch", "tree-1", "--url", "https://db.example.com", "--out", str(out)])
    assert json.loads(out.read_text(encoding="utf-8")) == RECORDS


def test_snapshot_errors_exit(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["layout", str(tmp_path / "missing.json")])
