from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from .paths import REPO_URL, DOWNLOAD_ROOT, OUTPUT_NAME, working_dir


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class UpdaterConfig:
    repo_url: str = REPO_URL
    download_root: str = DOWNLOAD_ROOT
    output_name: str = OUTPUT_NAME
    working_dir: Path = field(default_factory=working_dir)
    pause_on_exit: bool = True
    timeout: float = 60.0
    min_free_mb: int = 256

    @staticmethod
    def from_env() -> "UpdaterConfig":
        """Defaults, overridden by MOD_UPDATER_* environment variables."""
        cfg = UpdaterConfig()
        return replace(
            cfg,
            repo_url=os.environ.get("MOD_UPDATER_REPO_URL") or cfg.repo_url,
            download_root=os.environ.get("MOD_UPDATER_DOWNLOAD_ROOT") or cfg.download_root,
            pause_on_exit=cfg.pause_on_exit and not _flag("MOD_UPDATER_NO_PAUSE"),
        )

    def with_overrides(self, **changes) -> "UpdaterConfig":
        """Apply non-empty overrides (CLI flags left unset are ``None``)."""
        return replace(self, **{k: v for k, v in changes.items() if v not in (None, "")})
