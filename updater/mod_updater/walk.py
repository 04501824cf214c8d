from __future__ import annotations
import os
from pathlib import Path
from typing import Callable

# visitor(path) is called once per regular file, path joined onto root
Visitor = Callable[[str], None]


def walk_files(root: str | Path, visitor: Visitor) -> int:
    """Call ``visitor`` for every regular file under ``root``; returns the count.

    Directories are descended but never visited. Symlinked directories are not
    followed. Errors raised by ``visitor`` propagate and stop the walk.
    """
    count = 0
    for r, dirs, fs in os.walk(root, onerror=_raise):
        dirs.sort()
        for f in sorted(fs):
            p = os.path.join(r, f)
            if not os.path.isfile(p):
                continue
            visitor(p)
            count += 1
    return count


def to_slash(p: str | Path) -> str:
    return str(p).replace(os.sep, "/")


def _raise(err: OSError) -> None:
    raise err
