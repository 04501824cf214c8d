from __future__ import annotations

import hashlib
import io
from pathlib import Path

from mod_updater import hashing
from mod_updater.hashing import hash_bytes, hash_file, hash_stream


class _ShortReads:
    """File-like that never returns more than 3 bytes per read."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def read(self, n: int) -> bytes:
        return self._buf.read(min(n, 3))


def test_known_sha1_digests() -> None:
    assert hash_bytes(b"") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"
    assert hash_bytes(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"


def test_stream_keeps_final_partial_chunk(monkeypatch) -> None:
    monkeypatch.setattr(hashing, "CHUNK_SIZE", 7)
    payload = bytes(range(256))
    for n in (0, 1, 6, 7, 8, 14, 15, 100, 256):
        data = payload[:n]
        assert hash_stream(io.BytesIO(data)) == hashlib.sha1(data).hexdigest()


def test_stream_handles_short_reads() -> None:
    data = b"0123456789" * 5
    assert hash_stream(_ShortReads(data)) == hash_bytes(data)


def test_file_hash_is_deterministic(tmp_path: Path) -> None:
    p = tmp_path / "blob.bin"
    p.write_bytes(b"\x00\xff" * 4096 + b"tail")
    first = hash_file(p)
    second = hash_file(p)
    assert first == second == hash_bytes(p.read_bytes())
    assert first == first.lower()
