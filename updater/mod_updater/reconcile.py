"""
Reconcile a local tree against a repository manifest.

Three phases, always in this order:

1. plan     - classify every entry (missing / ok / changed / unreadable) and
              collect the managed top-level directories
2. prune    - delete files under managed directories that the manifest
              does not list (directories themselves are kept)
3. download - fetch missing and changed files, verify each one on disk

Per-file problems become Failure records and never stop the run. Only a
manifest that cannot be fetched or parsed aborts, before anything is touched.
"""
from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Callable, Optional

from .config import UpdaterConfig
from .fetch import TransportError, fetch_bytes
from .hashing import hash_stream
from .log import Reporter, log, progress
from .manifest import Manifest, ManifestEntry, ManifestMalformed
from .system import check_free_space
from .walk import to_slash, walk_files

# fetch(url) -> (status, body); raises TransportError
Fetcher = Callable[[str], tuple[int, bytes]]


class UpdateAborted(Exception):
    """Manifest could not be fetched or parsed; nothing on disk was changed."""


class EntryState(Enum):
    INVALID_PATH = "invalid path"
    MISSING = "missing"
    MATCHES = "ok"
    STALE = "changed"
    UNREADABLE = "unreadable"


class FailureKind(Enum):
    TRANSPORT = "transport"
    CHECKSUM = "checksum"
    FILESYSTEM = "filesystem"


@dataclass(frozen=True)
class Failure:
    path: str
    kind: FailureKind
    detail: str


@dataclass
class Plan:
    states: dict[ManifestEntry, EntryState] = field(default_factory=dict)
    downloads: list[ManifestEntry] = field(default_factory=list)
    prune_dirs: list[str] = field(default_factory=list)
    keep: set[str] = field(default_factory=set)
    failures: list[Failure] = field(default_factory=list)


@dataclass
class RunSummary:
    downloaded: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


def _inside(path: str, root: str) -> bool:
    return path.startswith(root.rstrip(os.sep) + os.sep)


def has_valid_path(entry: ManifestEntry, root: str) -> bool:
    """True when ``entry.path`` stays strictly inside ``root``.

    Checked both lexically (``..``, absolute paths) and after resolving
    symlinks, so a linked directory cannot carry writes out of the tree.
    """
    if not entry.path or "\x00" in entry.path:
        return False
    root = os.path.abspath(root)
    resolved = os.path.normpath(os.path.join(root, entry.path))
    if not _inside(resolved, root):
        return False
    return _inside(os.path.realpath(resolved), os.path.realpath(root))


class Reconciler:
    def __init__(self, config: UpdaterConfig, fetch: Optional[Fetcher] = None,
                 report: Reporter = log):
        self.config = config
        self.root = os.path.abspath(config.working_dir)
        self.fetch = fetch or partial(fetch_bytes, timeout=config.timeout)
        self.report = report

    def _key(self, entry: ManifestEntry) -> str:
        # same form the pruning walk produces: resolved, relative, forward slashes
        resolved = os.path.normpath(os.path.join(self.root, entry.path))
        return to_slash(os.path.relpath(resolved, self.root))

    def _local(self, entry: ManifestEntry) -> str:
        return os.path.join(self.root, self._key(entry))

    # ----- manifest -----

    def load_manifest(self) -> Manifest:
        url = self.config.repo_url
        try:
            status, body = self.fetch(url)
        except TransportError as e:
            raise UpdateAborted(f"Unable to get repository data from {url}: {e}") from e
        if status != 200:
            raise UpdateAborted(f"Unable to get repository data from {url}: HTTP status code {status}")
        try:
            manifest = Manifest.parse(body)
        except ManifestMalformed as e:
            raise UpdateAborted(f"Invalid repository data from {url}: {e}") from e
        for msg in manifest.skipped:
            self.report(msg)
        return manifest

    # ----- phase 1: classify -----

    def plan(self, manifest: Manifest) -> Plan:
        plan = Plan()
        for entry in manifest.entries:
            if not has_valid_path(entry, self.root):
                self.report(f"{entry.path} : Skip (outside working directory)")
                plan.states[entry] = EntryState.INVALID_PATH
                continue

            key = self._key(entry)
            if key in plan.keep:
                self.report(f"{entry.path} : Skip (duplicate of {key})")
                continue
            top = key.split("/", 1)[0]
            if top not in plan.prune_dirs:
                plan.prune_dirs.append(top)
            plan.keep.add(key)

            state = self._classify(entry, plan)
            plan.states[entry] = state
            if state in (EntryState.MISSING, EntryState.STALE):
                plan.downloads.append(entry)
        return plan

    def _classify(self, entry: ManifestEntry, plan: Plan) -> EntryState:
        try:
            with open(self._local(entry), "rb") as f:
                digest = hash_stream(f)
        except FileNotFoundError:
            self.report(f"{entry.path} : Download")
            return EntryState.MISSING
        except OSError as e:
            self.report(f"{entry.path} : Skip: {e}")
            plan.failures.append(Failure(entry.path, FailureKind.FILESYSTEM, str(e)))
            return EntryState.UNREADABLE

        if digest == entry.content_hash:
            self.report(f"{entry.path} : OK")
            return EntryState.MATCHES
        self.report(f"{entry.path} : Download (Changed)")
        return EntryState.STALE

    # ----- phase 2: prune -----

    def prune(self, plan: Plan, summary: Optional[RunSummary] = None) -> RunSummary:
        summary = summary if summary is not None else RunSummary()
        real_root = os.path.realpath(self.root)

        self.report("")
        self.report("Pruning non-repository files")
        for top in plan.prune_dirs:
            d = os.path.join(self.root, top)
            if not os.path.isdir(d) or not _inside(os.path.realpath(d), real_root):
                continue

            def _visit(p: str) -> None:
                rel = to_slash(os.path.relpath(p, self.root))
                if posixpath.normpath(rel) in plan.keep:
                    return
                self.report(f"Removing {rel}")
                try:
                    os.remove(p)
                except OSError as e:
                    self.report(f"Unable to remove {rel}: {e}")
                    summary.failures.append(Failure(rel, FailureKind.FILESYSTEM, f"remove failed: {e}"))
                else:
                    summary.removed.append(rel)

            try:
                walk_files(d, _visit)
            except OSError as e:
                self.report(f"Unable to scan {top}: {e}")
                summary.failures.append(Failure(top, FailureKind.FILESYSTEM, f"scan failed: {e}"))
        return summary

    # ----- phase 3: download -----

    def download(self, manifest: Manifest, plan: Plan,
                 summary: Optional[RunSummary] = None) -> RunSummary:
        summary = summary if summary is not None else RunSummary()
        self.report("")
        if not plan.downloads:
            return summary

        check_free_space(self.root, self.config.min_free_mb, self.report)
        with progress(len(plan.downloads), "Downloading") as bar:
            for entry in plan.downloads:
                failure = self._download_one(manifest, entry)
                if failure:
                    summary.failures.append(failure)
                else:
                    summary.downloaded.append(entry.path)
                bar.update(1)
        return summary

    def _download_one(self, manifest: Manifest, entry: ManifestEntry) -> Optional[Failure]:
        target = self._local(entry)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
        except OSError as e:
            return self._fail(entry, FailureKind.FILESYSTEM, f"Unable to create directory: {e}")

        try:
            status, body = self.fetch(manifest.url_for(entry))
        except TransportError as e:
            return self._fail(entry, FailureKind.TRANSPORT, str(e))
        if status != 200:
            return self._fail(entry, FailureKind.TRANSPORT, f"HTTP {status}")

        # create or truncate, then verify what actually landed on disk
        try:
            with open(target, "wb") as f:
                f.write(body)
            with open(target, "rb") as f:
                digest = hash_stream(f)
        except OSError as e:
            return self._fail(entry, FailureKind.FILESYSTEM, str(e))

        if digest != entry.content_hash:
            return self._fail(entry, FailureKind.CHECKSUM, "Checksum failed")
        self.report(f"Downloading {entry.path} ... OK")
        return None

    def _fail(self, entry: ManifestEntry, kind: FailureKind, detail: str) -> Failure:
        self.report(f"Downloading {entry.path} ... {detail}")
        return Failure(entry.path, kind, detail)

    # ----- full run -----

    def run(self) -> RunSummary:
        self.report(f"Repository: {self.config.repo_url}")
        manifest = self.load_manifest()

        self.report("")
        plan = self.plan(manifest)
        summary = RunSummary(failures=list(plan.failures))
        self.prune(plan, summary)
        self.download(manifest, plan, summary)

        if summary.errors:
            self.report(f"Completed with {summary.errors} errors")
        else:
            self.report("Done :-)")
        return summary
