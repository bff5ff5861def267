"""Generate an illustrative multi-generation snapshot without network access."""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from famtree.api import build_tree
from famtree.export import export_layout
from famtree.sources import save_snapshot

OUT = os.path.join("out", "sample_tree")


def sample_records() -> list[dict]:
    people = {
        "ramesh": ("Ramesh Patel", "male", "1932-04-11"),
        "savita": ("Savita Patel", "female", "1936-09-02"),
        "kamla": ("Kamla Patel", "female", "1941-01-20"),
        "suresh": ("Suresh Patel", "male", "1958-06-14"),
        "meena": ("Meena Patel", "female", "1961-03-30"),
        "anita": ("Anita Shah", "female", "1963-12-05"),
        "vijay": ("Vijay Patel", "male", "1968-08-21"),
        "rohan": ("Rohan Patel", "male", "1986-02-17"),
        "priya": ("Priya Patel", "female", "1990-07-08"),
        "dev": ("Dev Patel", "male", "1972-10-01"),
    }
    records = {
        pid: {
            "id": pid,
            "name": name,
            "gender": gender,
            "dob": dob,
            "parents": [],
            "children": [],
            "spouses": [],
            "siblings": [],
        }
        for pid, (name, gender, dob) in people.items()
    }

    def marry(a: str, b: str, subtype: str = "married") -> None:
        records[a]["spouses"].append({"id": b, "subtype": subtype})
        records[b]["spouses"].append({"id": a, "subtype": subtype})

    def child(parent: str, kid: str, subtype: str = "blood") -> None:
        records[parent]["children"].append({"id": kid, "subtype": subtype})
        records[kid]["parents"].append({"id": parent, "subtype": subtype})

    marry("ramesh", "savita")
    marry("ramesh", "kamla", "divorced")
    marry("suresh", "meena")
    for kid in ("suresh", "anita"):
        child("ramesh", kid)
        child("savita", kid)
    child("ramesh", "vijay")
    child("kamla", "vijay")
    child("ramesh", "dev", "adopted")
    for kid in ("rohan", "priya"):
        child("suresh", kid)
        child("meena", kid)
    return list(records.values())


def main() -> None:
    records = sample_records()
    save_snapshot(records, os.path.join(OUT, "snapshot.json"))
    result = build_tree(records, ["ramesh"])
    export_layout(result.layout, OUT)


if __name__ == "__main__":
    main()
