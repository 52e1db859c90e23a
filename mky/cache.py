from __future__ import annotations

import hashlib
import json
import logging
import shutil
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from .directives import DirectiveCompiler
from .errors import CompileError, DirectiveError
from .types import CompiledArtifact, TemplateId

logger = logging.getLogger(__name__)

CACHE_VERSION = 1

Entry = Tuple[CompiledArtifact, float]


def cache_key(template: TemplateId) -> str:
    """Stable key for a template: sha1 of 'role:name'."""
    return hashlib.sha1(template.key().encode("utf-8")).hexdigest()


def _ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SourceReader(Protocol):
    def source_mtime(self, template: TemplateId) -> float: ...

    def read_source(self, template: TemplateId) -> Tuple[str, float]: ...


class CacheStore(Protocol):
    def get(self, key: str) -> Optional[Entry]: ...

    def put(self, key: str, artifact: CompiledArtifact, stored_at: float) -> None: ...

    def purge(self) -> None: ...


@dataclass(frozen=True)
class CacheSnapshot:
    enabled: bool
    path: Optional[Path]
    exists: bool
    size_bytes: int
    entries: int


class MemoryStore:
    """Process-local store; keeps artifact identity stable between resolves."""

    def __init__(self):
        self._entries: Dict[str, Entry] = {}

    def get(self, key: str) -> Optional[Entry]:
        return self._entries.get(key)

    def put(self, key: str, artifact: CompiledArtifact, stored_at: float) -> None:
        self._entries[key] = (artifact, stored_at)

    def purge(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class FileStore:
    """
    On-disk store for compiled artifacts.

    Keys are laid out in subdirectories by sha1 prefix.
    Any IO error is best-effort: logged, never fatal to a render.
    """

    BUCKET = "views"

    def __init__(self, root: Path):
        self.dir = root
        self.enabled = True
        try:
            _ensure_dir(self.dir)
        except OSError as e:
            logger.warning(f"Artifact cache disabled, cannot create {self.dir}: {e}")
            self.enabled = False

    def get(self, key: str) -> Optional[Entry]:
        data = self._load_json(self._bucket_path(key))
        if not data or data.get("v") != CACHE_VERSION:
            return None
        try:
            artifact = CompiledArtifact(
                template=TemplateId.parse(data["template"]),
                code=data["code"],
                compiled_at=float(data["stored_at"]),
            )
            return artifact, float(data["stored_at"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed cache entry {key}: {e}")
            return None

    def put(self, key: str, artifact: CompiledArtifact, stored_at: float) -> None:
        self._atom_write(self._bucket_path(key), {
            "v": CACHE_VERSION,
            "template": str(artifact.template),
            "code": artifact.code,
            "stored_at": stored_at,
            "created_at": _now_iso(),
        })

    # --------------------------- IO helpers --------------------------- #

    def _bucket_path(self, key: str) -> Path:
        d = self.dir / self.BUCKET / key[:2] / key[2:4]
        return d / f"{key}.json"

    def _load_json(self, path: Path) -> Optional[dict]:
        if not self.enabled or not path.is_file():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read cache entry {path}: {e}")
            return None

    def _atom_write(self, path: Path, data: dict) -> None:
        if not self.enabled:
            return
        try:
            _ensure_dir(path.parent)
            # per-thread tmp name: concurrent writers of one key must not share it
            tmp = path.parent / f"{path.name}.{threading.get_ident()}.tmp"
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            tmp.replace(path)
        except OSError as e:
            logger.warning(f"Failed to write cache entry {path}: {e}")

    # --------------------------- Maintenance --------------------------- #

    def purge(self) -> None:
        """Full cleanup of the cache directory contents."""
        try:
            if self.dir.exists():
                shutil.rmtree(self.dir, ignore_errors=True)
            self.dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Failed to purge cache {self.dir}: {e}")

    def snapshot(self) -> CacheSnapshot:
        size = 0
        entries = 0
        if self.dir.exists():
            for p in self.dir.rglob("*.json"):
                try:
                    size += p.stat().st_size
                    entries += 1
                except OSError:
                    # vanished between listing and stat
                    continue
        return CacheSnapshot(
            enabled=self.enabled,
            path=self.dir,
            exists=self.dir.exists(),
            size_bytes=size,
            entries=entries,
        )


class ArtifactCache:
    """
    Get-or-compile cache of compiled artifacts.

    Lookup order: memory store, then the optional file store. An entry is
    fresh while its stored time is not older than the source modification
    time. Concurrent resolves of one key may compile twice; compilation is
    pure, so the last write wins with an equivalent artifact.
    """

    def __init__(self, reader: SourceReader, compiler: DirectiveCompiler, store: Optional[CacheStore] = None):
        self.reader = reader
        self.compiler = compiler
        self.memory = MemoryStore()
        self.store = store

    def resolve(self, template: TemplateId) -> CompiledArtifact:
        """
        Returns the compiled artifact for a template, compiling when stale.

        Raises:
            TemplateNotFound: Source file does not exist
            CompileError: Source contains malformed directives
        """
        key = cache_key(template)
        mtime = self.reader.source_mtime(template)

        entry = self.memory.get(key)
        if entry is not None and entry[1] >= mtime:
            return entry[0]

        if self.store is not None:
            entry = self.store.get(key)
            if entry is not None and entry[1] >= mtime:
                self.memory.put(key, *entry)
                logger.debug(f"Artifact '{template}' loaded from disk cache")
                return entry[0]

        return self._compile(key, template)

    def _compile(self, key: str, template: TemplateId) -> CompiledArtifact:
        source, mtime = self.reader.read_source(template)
        try:
            code = self.compiler.compile(source)
        except DirectiveError as e:
            raise CompileError(template, e) from e

        stored_at = max(time.time(), mtime)
        artifact = CompiledArtifact(template=template, code=code, compiled_at=stored_at)
        self.memory.put(key, artifact, stored_at)
        if self.store is not None:
            self.store.put(key, artifact, stored_at)
        logger.debug(f"Compiled '{template}' into cache key {key}")
        return artifact

    def purge(self) -> None:
        self.memory.purge()
        if self.store is not None:
            self.store.purge()

    def snapshot(self) -> CacheSnapshot:
        if isinstance(self.store, FileStore):
            return self.store.snapshot()
        return CacheSnapshot(enabled=False, path=None, exists=False, size_bytes=0, entries=0)


__all__ = [
    "CACHE_VERSION",
    "cache_key",
    "CacheStore",
    "CacheSnapshot",
    "MemoryStore",
    "FileStore",
    "ArtifactCache",
]
