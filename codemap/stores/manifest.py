"""Persistent per-module state used to decide which modules need regeneration."""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
import tempfile
import time
from typing import Dict, Iterable, Optional

from ..logging import get_logger
from ..models import ModuleState

MANIFEST_FILENAME = ".manifest.json"

_MANIFEST_VERSION = "1"

_logger = get_logger("stores.manifest")


class ManifestError(RuntimeError):
    """Raised when the manifest cannot be written."""


def current_timestamp() -> int:
    """Unix seconds, as stored in ``generated_at``."""
    return int(time.time())


def calculate_module_state(root: Path, relative_paths: Iterable[str]) -> ModuleState:
    """Fingerprint a module from its member files.

    ``latest_mtime`` is the newest whole-second mtime among readable members;
    unreadable files are skipped. ``files_hash`` depends only on the set of
    member paths, never on their order.
    """
    paths = sorted(set(relative_paths))
    latest_mtime = 0
    for relative in paths:
        try:
            mtime = int((root / relative).stat().st_mtime)
        except OSError:
            continue
        latest_mtime = max(latest_mtime, mtime)

    digest = hashlib.sha256()
    for relative in paths:
        digest.update(relative.encode("utf-8"))
        digest.update(b"\0")
    files_hash = int.from_bytes(digest.digest()[:8], "big")

    return ModuleState(latest_mtime=latest_mtime, file_count=len(paths), files_hash=files_hash)


class Manifest:
    """Slug to ``ModuleState`` map stored as ``.manifest.json`` in the output directory."""

    def __init__(
        self,
        modules: Optional[Dict[str, ModuleState]] = None,
        *,
        generated_at: Optional[int] = None,
    ) -> None:
        self.modules: Dict[str, ModuleState] = dict(modules or {})
        self.generated_at = current_timestamp() if generated_at is None else generated_at
        self.version = _MANIFEST_VERSION

    @classmethod
    def load(cls, output_dir: Path) -> "Manifest":
        """Read the manifest; a missing or malformed file yields an empty one."""
        path = output_dir / MANIFEST_FILENAME
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return cls()
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            _logger.debug("Ignoring unreadable manifest %s: %s", path, exc)
            return cls()
        if not isinstance(data, dict):
            return cls()
        raw_modules = data.get("modules")
        if not isinstance(raw_modules, dict):
            return cls()

        modules: Dict[str, ModuleState] = {}
        for slug, raw in raw_modules.items():
            state = _state_from_dict(raw)
            if isinstance(slug, str) and state is not None:
                modules[slug] = state
        generated_at = data.get("generated_at")
        if not isinstance(generated_at, int) or isinstance(generated_at, bool):
            generated_at = None
        return cls(modules, generated_at=generated_at)

    def needs_regeneration(self, slug: str, state: ModuleState) -> bool:
        previous = self.modules.get(slug)
        if previous is None:
            return True
        # any differing field is stale, an older mtime included
        return state != previous

    def update_module(self, slug: str, state: ModuleState) -> None:
        self.modules[slug] = state

    def prune_modules(self, current_slugs: Iterable[str]) -> list[str]:
        """Drop entries for modules that no longer exist; return the removed slugs."""
        keep = set(current_slugs)
        removed = sorted(slug for slug in self.modules if slug not in keep)
        for slug in removed:
            del self.modules[slug]
        return removed

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": self.version,
            "generated_at": self.generated_at,
            "modules": {
                slug: {
                    "latest_mtime": state.latest_mtime,
                    "file_count": state.file_count,
                    "files_hash": state.files_hash,
                }
                for slug, state in sorted(self.modules.items())
            },
        }

    def save(self, output_dir: Path) -> Path:
        """Write the manifest atomically; raise ``ManifestError`` on I/O failure."""
        self.generated_at = current_timestamp()
        path = output_dir / MANIFEST_FILENAME
        payload = json.dumps(self.to_dict(), indent=2)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(prefix=".manifest.", suffix=".tmp", dir=output_dir)
            try:
                with os.fdopen(handle, "w", encoding="utf-8") as stream:
                    stream.write(payload)
                os.replace(temp_name, path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ManifestError(f"Failed to write manifest {path}: {exc}") from exc
        return path


def _state_from_dict(raw: object) -> Optional[ModuleState]:
    if not isinstance(raw, dict):
        return None
    values = [raw.get(key) for key in ("latest_mtime", "file_count", "files_hash")]
    if not all(isinstance(value, int) and not isinstance(value, bool) for value in values):
        return None
    latest_mtime, file_count, files_hash = values
    return ModuleState(latest_mtime=latest_mtime, file_count=file_count, files_hash=files_hash)


__all__ = [
    "MANIFEST_FILENAME",
    "Manifest",
    "ManifestError",
    "calculate_module_state",
    "current_timestamp",
]
