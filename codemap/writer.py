"""Filesystem writer for generated documentation."""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import tempfile
from typing import List, Mapping

from .logging import get_logger

MODULES_DIRNAME = "modules"

_logger = get_logger("writer")


class OutputError(RuntimeError):
    """Raised when generated documentation cannot be written or removed."""


class OutputWriter:
    """Writes rendered documents beneath ``output_dir``.

    In dry-run mode nothing touches disk; the paths that would have been
    written are still recorded in ``written``.
    """

    def __init__(self, output_dir: Path, *, dry_run: bool = False) -> None:
        self.output_dir = output_dir
        self.dry_run = dry_run
        self.written: List[Path] = []
        self.removed: List[Path] = []

    def module_dir(self, slug: str) -> Path:
        return self.output_dir / MODULES_DIRNAME / slug

    def write_text(self, relative: str | Path, content: str) -> Path:
        path = self.output_dir / relative
        self.written.append(path)
        if self.dry_run:
            _logger.info("[dry-run] would write %s", path)
            return path
        _atomic_write(path, content)
        _logger.debug("Wrote %s", path)
        return path

    def write_module(self, slug: str, documents: Mapping[str, str]) -> List[Path]:
        return [
            self.write_text(Path(MODULES_DIRNAME) / slug / name, content)
            for name, content in documents.items()
        ]

    def existing_module_slugs(self) -> List[str]:
        root = self.output_dir / MODULES_DIRNAME
        if not root.is_dir():
            return []
        return sorted(child.name for child in root.iterdir() if child.is_dir())

    def remove_module(self, slug: str) -> None:
        target = self.module_dir(slug)
        if not target.exists():
            return
        self.removed.append(target)
        if self.dry_run:
            _logger.info("[dry-run] would remove %s", target)
            return
        try:
            shutil.rmtree(target)
        except OSError as exc:
            raise OutputError(f"Failed to remove {target}: {exc}") from exc
        _logger.debug("Removed %s", target)


def _atomic_write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(content)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise OutputError(f"Failed to write {path}: {exc}") from exc


__all__ = ["MODULES_DIRNAME", "OutputError", "OutputWriter"]
