"""HTTP client with retries for the remote tree service."""

from __future__ import annotations

import json
import os
import time
from typing import Any, Mapping, Optional

import requests

from .utils import logger

DEFAULT_HEADERS = {
    "User-Agent": os.getenv("FAMTREE_USER_AGENT", "famtree/0.1"),
    "Accept": "application/json",
}
RETRY_STATUSES = {429, 500, 502, 503, 504}


class HTTPError(RuntimeError):
    pass


class HTTPClient:
    def __init__(
        self,
        headers: Optional[Mapping[str, str]] = None,
        max_retries: int = 3,
        backoff: float = 0.5,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.headers = dict(DEFAULT_HEADERS)
        self.headers.update(headers or {})
        self.max_retries = max_retries
        self.backoff = backoff
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> requests.Response:
        merged = dict(self.headers)
        merged.update(headers or {})
        for attempt in range(self.max_retries):
            try:
                resp = self.session.request(
                    method,
                    url,
                    params=params,
                    headers=merged,
                    json=json_body,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise HTTPError(f"Request to {url} failed: {exc}") from exc
            if resp.status_code in (200, 201, 304):
                return resp
            if resp.status_code in RETRY_STATUSES:
                sleep_for = self.backoff * (2**attempt)
                logger.warning("HTTP %s returned %s, retrying in %.2fs", url, resp.status_code, sleep_for)
                time.sleep(sleep_for)
                continue
            raise HTTPError(f"Request failed with status {resp.status_code}: {resp.text[:200]}")
        raise HTTPError(f"Exceeded retries for {url}")

    def get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return self._decode(self.request("GET", url, params=params, headers=headers), url)

    def post_json(
        self,
        url: str,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return self._decode(self.request("POST", url, headers=headers, json_body=body), url)

    @staticmethod
    def _decode(resp: requests.Response, url: str) -> Any:
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise HTTPError(f"Invalid JSON response from {url}") from exc


__all__ = ["DEFAULT_HEADERS", "HTTPClient", "HTTPError"]
