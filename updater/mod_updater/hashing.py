from __future__ import annotations
from pathlib import Path
from typing import BinaryIO
import hashlib

CHUNK_SIZE = 1024 * 1024


def hash_stream(fp: BinaryIO) -> str:
    """SHA-1 of everything left in ``fp``, as lowercase hex.

    Every byte ``read`` hands back is hashed, so a short final chunk counts
    exactly once.
    """
    h = hashlib.sha1()
    for chunk in iter(lambda: fp.read(CHUNK_SIZE), b""):
        h.update(chunk)
    return h.hexdigest()


def hash_file(p: str | Path) -> str:
    with open(p, "rb") as f:
        return hash_stream(f)


def hash_bytes(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()
