import pytest

from famtree import http as http_module
from famtree.http import HTTPClient, HTTPError


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)


def test_retries_on_server_errors(monkeypatch):
    sleeps = []
    monkeypatch.setattr(http_module.time, "sleep", sleeps.append)
    session = FakeSession([FakeResponse(503), FakeResponse(200, {"ok": True})])
    client = HTTPClient(session=session, backoff=0.1)

    assert client.get_json("https://example.com/x", params={"a": 1}) == {"ok": True}
    assert sleeps == [0.1]
    assert session.calls[1][2]["params"] == {"a": 1}
    assert session.calls[1][2]["headers"]["Accept"] == "application/json"


def test_client_errors_are_not_retried(monkeypatch):
    monkeypatch.setattr(http_module.time, "sleep", lambda _: None)
    session = FakeSession([FakeResponse(404, text="not found")])
    with pytest.raises(HTTPError, match="404"):
        HTTPClient(session=session).post_json("https://example.com/x", {"q": 1})
    assert len(session.calls) == 1


def test_gives_up_after_max_retries(monkeypatch):
    monkeypatch.setattr(http_module.time, "sleep", lambda _: None)
    session = FakeSession([FakeResponse(429)] * 2)
    with pytest.raises(HTTPError, match="Exceeded retries"):
        HTTPClient(session=session, max_retries=2).get_json("https://example.com/x")


def test_invalid_json_raises(monkeypatch):
    session = FakeSession([FakeResponse(200, None)])
    with pytest.raises(HTTPError, match="Invalid JSON"):
        HTTPClient(session=session).get_json("https://example.com/x")
