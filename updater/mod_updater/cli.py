from __future__ import annotations
import argparse
from pathlib import Path

from .builder import create_repo
from .config import UpdaterConfig
from .log import Reporter, log
from .reconcile import Reconciler, UpdateAborted
from .ui import pause_before_exit


def _cmd_update(cfg: UpdaterConfig, report: Reporter) -> int:
    try:
        Reconciler(cfg, report=report).run()
        code = 0
    except UpdateAborted as e:
        report(str(e))
        code = 1
    if cfg.pause_on_exit:
        pause_before_exit()
    return code


def _cmd_create_repo(cfg: UpdaterConfig, directory: str, report: Reporter) -> int:
    try:
        create_repo(directory, cfg.output_name, cfg.download_root,
                    base=cfg.working_dir, report=report)
    except OSError as e:
        report(f"Unable to create repository from {directory}: {e}")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mod-updater",
                                description="Keep a mod folder in sync with a repository manifest")
    p.add_argument("--repo-url", "-repoUrl", dest="repo_url", type=str,
                   help="Set URL to custom repository json")
    p.add_argument("--create-repo", "-createRepo", dest="create_repo", type=str,
                   help="Directory to create a repository json from")
    p.add_argument("--output", "-output", dest="output_name", type=str,
                   help="Name of the json file for --create-repo (default: updater.json)")
    p.add_argument("--download-root", dest="download_root", type=str,
                   help="DownloadRoot URL written by --create-repo")
    p.add_argument("--dir", dest="working_dir", type=Path,
                   help="Folder to update or build from (default: current folder)")
    p.add_argument("--no-pause", action="store_true",
                   help="Exit without waiting for Enter")
    return p


def run_cli(argv: list[str] | None = None, report: Reporter = log) -> int:
    args = build_parser().parse_args(argv)
    cfg = UpdaterConfig.from_env().with_overrides(
        repo_url=args.repo_url,
        output_name=args.output_name,
        download_root=args.download_root,
        working_dir=args.working_dir,
    )
    if args.no_pause:
        cfg = cfg.with_overrides(pause_on_exit=False)

    if args.create_repo:
        return _cmd_create_repo(cfg, args.create_repo, report)
    return _cmd_update(cfg, report)
