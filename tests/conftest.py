from __future__ import annotations

import json
from pathlib import Path

import pytest

from mod_updater.config import UpdaterConfig
from mod_updater.fetch import TransportError
from mod_updater.hashing import hash_bytes
from mod_updater.manifest import Manifest, ManifestEntry

ROOT = "https://example.invalid/repo/"
REPO = ROOT + "updater.json"


class FakeRepo:
    """In-memory stand-in for fetch_bytes: url -> (status, body) or an exception."""

    def __init__(self) -> None:
        self.responses: dict[str, object] = {}
        self.calls: list[str] = []

    def serve(self, url: str, body: bytes, status: int = 200) -> None:
        self.responses[url] = (status, body)

    def fail(self, url: str, msg: str = "connection refused") -> None:
        self.responses[url] = TransportError(msg)

    def publish(self, files: dict[str, bytes], extra: list | None = None) -> Manifest:
        """Serve each file plus a manifest listing them."""
        entries = []
        for rel, data in files.items():
            self.serve(ROOT + rel, data)
            entries.append(ManifestEntry(rel, hash_bytes(data)))
        man = Manifest(ROOT, tuple(entries))
        doc = man.to_json()
        doc["Files"].extend(extra or [])
        self.serve(REPO, json.dumps(doc).encode())
        return man

    def __call__(self, url: str) -> tuple[int, bytes]:
        self.calls.append(url)
        res = self.responses.get(url, (404, b""))
        if isinstance(res, Exception):
            raise res
        return res


def write_tree(root: Path, files: dict[str, bytes]) -> None:
    for rel, data in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)


@pytest.fixture(autouse=True)
def _quiet_progress(monkeypatch):
    monkeypatch.setenv("MOD_UPDATER_TQDM", "1")
    monkeypatch.delenv("MOD_UPDATER_REPO_URL", raising=False)
    monkeypatch.delenv("MOD_UPDATER_DOWNLOAD_ROOT", raising=False)
    monkeypatch.delenv("MOD_UPDATER_NO_PAUSE", raising=False)


@pytest.fixture
def repo() -> FakeRepo:
    return FakeRepo()


@pytest.fixture
def lines() -> list[str]:
    return []


@pytest.fixture
def config(tmp_path: Path) -> UpdaterConfig:
    work = tmp_path / "game"
    work.mkdir()
    return UpdaterConfig(repo_url=REPO, working_dir=work, pause_on_exit=False, min_free_mb=0)
