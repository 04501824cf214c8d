from __future__ import annotations

import io
from pathlib import Path
from urllib.error import HTTPError, URLError

import pytest

from mod_updater import fetch
from mod_updater.fetch import TransportError, fetch_bytes


class _Response:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body
        self.closed = False

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


def test_file_url_reads_local_mirror(tmp_path: Path) -> None:
    src = tmp_path / "mirror dir" / "a.txt"
    src.parent.mkdir()
    src.write_bytes(b"hello\n")
    assert fetch_bytes(src.as_uri()) == (200, b"hello\n")


def test_missing_file_url_is_transport_error(tmp_path: Path) -> None:
    with pytest.raises(TransportError):
        fetch_bytes((tmp_path / "nope.txt").as_uri())


def test_unsupported_scheme() -> None:
    with pytest.raises(TransportError, match="Unsupported URL scheme"):
        fetch_bytes("ftp://example.invalid/a.txt")


def test_http_success_sends_user_agent_and_closes(monkeypatch) -> None:
    seen = {}
    resp = _Response(200, b"payload")

    def _urlopen(req, timeout):
        seen["ua"] = req.get_header("User-agent")
        seen["timeout"] = timeout
        return resp

    monkeypatch.setattr(fetch, "urlopen", _urlopen)
    assert fetch_bytes("https://example.invalid/a.txt", timeout=5) == (200, b"payload")
    assert seen == {"ua": fetch.USER_AGENT, "timeout": 5}
    assert resp.closed


def test_http_error_status_is_returned(monkeypatch) -> None:
    def _urlopen(req, timeout):
        raise HTTPError(req.full_url, 404, "Not Found", None, io.BytesIO(b"gone"))

    monkeypatch.setattr(fetch, "urlopen", _urlopen)
    assert fetch_bytes("https://example.invalid/missing.txt") == (404, b"")


@pytest.mark.parametrize("exc", [URLError("connection refused"), TimeoutError("timed out")])
def test_connection_failure_is_transport_error(monkeypatch, exc) -> None:
    def _urlopen(req, timeout):
        raise exc

    monkeypatch.setattr(fetch, "urlopen", _urlopen)
    with pytest.raises(TransportError):
        fetch_bytes("https://example.invalid/a.txt")
