# mod_updater/paths.py
from __future__ import annotations
import os, sys
from pathlib import Path

# ---- Repository defaults (overridable via config / CLI) ----
REPO_URL: str      = "https://koti.kapsi.fi/darkon/polloeskadroona/repo/updater.json"
DOWNLOAD_ROOT: str = "https://koti.kapsi.fi/darkon/polloeskadroona/repo/"
OUTPUT_NAME: str   = "updater.json"

# ---- Working tree ----
def working_dir() -> Path:
    # Frozen: folder containing the .exe; Dev: current cwd
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(os.getcwd())

__all__ = [
    "REPO_URL", "DOWNLOAD_ROOT", "OUTPUT_NAME",
    "working_dir",
]
