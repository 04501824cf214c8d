from __future__ import annotations
from pathlib import Path

import psutil

from .log import Reporter, log


def free_mb(path: str | Path) -> float:
    return psutil.disk_usage(str(path)).free / (1024 ** 2)


def check_free_space(path: str | Path, min_free_mb: int = 256, report: Reporter = log) -> bool:
    """Warn when the volume holding ``path`` is low on space. Never fatal."""
    try:
        free = free_mb(path)
    except OSError as e:
        report(f"WARNING: unable to check free space for {path}: {e}")
        return True
    if free < min_free_mb:
        report(f"WARNING: Low disk space ({free:.0f} MB free in {path})")
        return False
    return True
