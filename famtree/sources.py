"""Loading person snapshots from files or the remote tree service."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

from .http import HTTPClient, HTTPError
from .utils import logger

RECORD_LIST_KEYS = ("members", "people", "nodes")


class SnapshotError(ValueError):
    pass


def extract_records(payload: Any) -> List[Dict[str, Any]]:
    """Return the person records from a list or a wrapping object."""
    if isinstance(payload, list):
        return [record for record in payload if isinstance(record, dict)]
    if isinstance(payload, dict):
        for key in RECORD_LIST_KEYS:
            if isinstance(payload.get(key), list):
                return extract_records(payload[key])
    raise SnapshotError("Snapshot must be a list of people or contain 'members'/'people'")


def load_snapshot(path: str) -> List[Dict[str, Any]]:
    if not os.path.exists(path):
        raise SnapshotError(f"Snapshot file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {exc}") from exc
    records = extract_records(payload)
    logger.debug("Loaded %d records from %s", len(records), path)
    return records


def save_snapshot(records: List[Dict[str, Any]], path: str) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(records, fh, indent=2)
    return path


class TreeServiceClient:
    """Read-only access to the hosted tree database (PostgREST style API)."""

    def __init__(self, http: HTTPClient, base_url: str, api_key: Optional[str] = None) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    def fetch_tree(self, tree_id: str) -> List[Dict[str, Any]]:
        """Fetch every member of ``tree_id`` with relations via the RPC endpoint."""
        payload = self.http.post_json(
            f"{self.base_url}/rest/v1/rpc/get_complete_tree_by_id",
            {"p_tree_id": tree_id},
            headers=self._headers(),
        )
        if isinstance(payload, dict) and payload.get("success") is False:
            raise HTTPError(f"Tree service could not load tree {tree_id}")
        return extract_records(payload)

    def fetch_people(self, tree_id: str) -> List[Dict[str, Any]]:
        payload = self.http.get_json(
            f"{self.base_url}/rest/v1/people",
            params={"select": "*", "tree_id": f"eq.{tree_id}"},
            headers=self._headers(),
        )
        return extract_records(payload)


__all__ = ["SnapshotError", "TreeServiceClient", "extract_records", "load_snapshot", "save_snapshot"]
