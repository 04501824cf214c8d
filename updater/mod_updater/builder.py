from __future__ import annotations
import os
from pathlib import Path

from .hashing import hash_file
from .log import Reporter, log, progress
from .manifest import Manifest, ManifestEntry
from .walk import to_slash, walk_files


# generator: hash every file under directory → Manifest


def build_manifest(directory: str | Path, download_root: str,
                   base: str | Path | None = None, report: Reporter = log) -> Manifest:
    """Hash every regular file under ``directory``.

    Entry paths are relative to ``base`` (the invocation root, default: cwd), so
    building ``mods`` from the game folder yields ``mods/...`` entries. Any file
    that cannot be read aborts the build with its OSError.
    """
    base = os.path.abspath(base if base is not None else os.getcwd())
    root = os.path.join(base, directory)
    if not os.path.isdir(root):
        raise FileNotFoundError(f"not a directory: {root}")

    entries: list[ManifestEntry] = []
    with progress(None, "Hashing") as bar:
        def _visit(p: str) -> None:
            digest = hash_file(p)
            rel = to_slash(os.path.relpath(p, base))
            report(f"{rel} : {digest}")
            entries.append(ManifestEntry(rel, digest))
            bar.update(1)

        walk_files(root, _visit)
    return Manifest(download_root, tuple(entries))


def create_repo(directory: str | Path, output: str | Path, download_root: str,
                base: str | Path | None = None, report: Reporter = log) -> Manifest:
    man = build_manifest(directory, download_root, base=base, report=report)
    out = Path(output)
    if base is not None and not out.is_absolute():
        out = Path(base, out)
    man.write(out)
    report("")
    report(f"Writing output to {out}")
    return man
