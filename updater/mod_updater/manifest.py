from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote
import json
import posixpath


class ManifestMalformed(ValueError):
    """The manifest payload cannot be used at all (bad JSON or top-level shape)."""


@dataclass(frozen=True)
class ManifestEntry:
    path: str
    content_hash: str

    @property
    def normalized(self) -> str:
        return posixpath.normpath(self.path)


@dataclass(frozen=True)
class Manifest:
    download_root: str
    entries: tuple[ManifestEntry, ...] = ()
    # diagnostics for Files entries dropped while parsing
    skipped: tuple[str, ...] = field(default=(), compare=False)

    def url_for(self, entry: ManifestEntry) -> str:
        return self.download_root + quote(entry.path, safe="/")

    @staticmethod
    def parse(payload: bytes | str) -> "Manifest":
        """Parse the wire format.

        A payload that is not a JSON object with a string ``DownloadRoot`` and a
        list ``Files`` raises ManifestMalformed. Individual ``Files`` entries
        that are not ``[path, hash]`` string pairs, or repeat an earlier path,
        are dropped and described in ``skipped``.
        """
        try:
            data = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            raise ManifestMalformed(f"manifest is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ManifestMalformed("manifest must be a JSON object")
        root = data.get("DownloadRoot")
        files = data.get("Files")
        if not isinstance(root, str):
            raise ManifestMalformed("manifest has no DownloadRoot string")
        if not isinstance(files, list):
            raise ManifestMalformed("manifest has no Files list")

        entries: list[ManifestEntry] = []
        skipped: list[str] = []
        seen: set[str] = set()
        for i, item in enumerate(files):
            if not isinstance(item, list) or len(item) != 2:
                skipped.append(f"Files entry {i} does not contain 2 items")
                continue
            rel, digest = item
            if not isinstance(rel, str) or not isinstance(digest, str):
                skipped.append(f"Files entry {i} is not a pair of strings")
                continue
            entry = ManifestEntry(rel, digest)
            if entry.normalized in seen:
                skipped.append(f"Files entry {i} repeats path {rel}")
                continue
            seen.add(entry.normalized)
            entries.append(entry)
        return Manifest(root, tuple(entries), tuple(skipped))

    def to_json(self) -> dict:
        return {
            "DownloadRoot": self.download_root,
            "Files": [[e.path, e.content_hash] for e in self.entries],
        }

    def dumps(self) -> str:
        return json.dumps(self.to_json(), indent=2)

    def write(self, out_path: str | Path) -> None:
        p = Path(out_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(self.dumps() + "\n", encoding="utf-8")
