"""File-level import graph with hub detection."""

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Tuple

HUB_THRESHOLD = 3


class FileGraph:
    """Maps files to the identifiers they import, and identifiers back to importers.

    Identifiers are stored as extracted; they are not required to be paths of
    scanned files.
    """

    def __init__(self) -> None:
        self.imports: Dict[str, List[str]] = {}
        self.importers: Dict[str, List[str]] = {}

    def add_file(self, path: str, imports: Iterable[str]) -> None:
        identifiers = list(imports)
        self.imports[path] = identifiers
        for identifier in identifiers:
            self.importers.setdefault(identifier, []).append(path)

    def resolve_import(self, from_file: str, spec: str) -> str:
        """Best-effort normalisation of ``spec`` relative to ``from_file``."""
        from_dir = posixpath.dirname(_normalize_separators(from_file))
        if spec.startswith("./") or spec.startswith("../"):
            return _normalize(posixpath.join(from_dir, spec))
        if "/" not in spec and "." not in spec:
            return _normalize(posixpath.join(from_dir, spec))
        return spec

    def hub_files(self) -> List[Tuple[str, int]]:
        """Identifiers imported by at least ``HUB_THRESHOLD`` files, most imported first."""
        hubs = [
            (identifier, len(importers))
            for identifier, importers in self.importers.items()
            if len(importers) >= HUB_THRESHOLD
        ]
        hubs.sort(key=lambda item: (-item[1], item[0]))
        return hubs

    def is_hub(self, identifier: str) -> bool:
        return len(self.importers.get(identifier, ())) >= HUB_THRESHOLD

    def importers_of(self, identifier: str) -> List[str]:
        return list(self.importers.get(identifier, ()))


def _normalize_separators(path: str) -> str:
    path = path.replace("\\", "/")
    while "//" in path:
        path = path.replace("//", "/")
    return path


def _normalize(path: str) -> str:
    normalized = posixpath.normpath(_normalize_separators(path))
    if normalized == ".":
        return ""
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized
