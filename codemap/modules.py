"""Grouping of scanned files into documentation modules."""

from __future__ import annotations

import re
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .models import BoundaryType, FileEntry, ModuleInfo

ROOT_SLUG = "root"

PACKAGE_MARKERS = (
    "Cargo.toml",
    "package.json",
    "pyproject.toml",
    "setup.py",
    "go.mod",
    "composer.json",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "pubspec.yaml",
    "Package.swift",
    "Gemfile",
)

_TYPED_MARKERS = (
    (BoundaryType.RUST_MODULE, ("mod.rs", "lib.rs")),
    (BoundaryType.PYTHON_PACKAGE, ("__init__.py",)),
    (BoundaryType.JS_MODULE, ("index.js", "index.ts", "index.jsx", "index.tsx")),
)

ENTRY_POINT_NAMES = (
    "main.rs",
    "lib.rs",
    "mod.rs",
    "__main__.py",
    "__init__.py",
    "main.py",
    "app.py",
    "index.ts",
    "index.tsx",
    "index.js",
    "index.jsx",
    "main.go",
    "main.c",
    "main.cpp",
    "index.php",
    "Program.cs",
    "Main.java",
    "Application.java",
    "main.dart",
    "main.swift",
    "main.rb",
)

_SLUG_INVALID = re.compile(r"[^a-z0-9_]")


def slugify(path: str) -> str:
    """Filesystem-safe slug for a module path; the root path maps to ``root``."""
    if not path:
        return ROOT_SLUG
    return _SLUG_INVALID.sub("-", path.lower())


def module_path_for(relative_path: str, max_depth: int) -> str:
    """Directory of ``relative_path`` truncated to ``max_depth`` segments (0 = unlimited)."""
    parts = relative_path.replace("\\", "/").split("/")[:-1]
    if max_depth > 0:
        parts = parts[:max_depth]
    return "/".join(part for part in parts if part)


def detect_modules(
    files: Iterable[FileEntry], *, max_depth: int, root: Optional[Path] = None
) -> List[ModuleInfo]:
    """Partition ``files`` into modules, root first then by path.

    Every file belongs to exactly one module. Marker files are looked up in the
    scanned file set and, when ``root`` is given, on disk.
    """
    members: Dict[str, Set[str]] = defaultdict(set)
    names_by_dir: Dict[str, Set[str]] = defaultdict(set)

    for entry in files:
        relative = entry.relative_path.replace("\\", "/")
        members[module_path_for(relative, max_depth)].add(relative)
        directory, _, name = relative.rpartition("/")
        names_by_dir[directory].add(name)

    members.setdefault("", set())
    paths = sorted(members)

    slugs = _assign_slugs(paths)
    modules: Dict[str, ModuleInfo] = {}
    for path in paths:
        present = _present_names(path, names_by_dir, root)
        modules[path] = ModuleInfo(
            path=path,
            slug=slugs[path],
            boundary_type=_boundary_type(path, present),
            files=set(members[path]),
            entry_point=_entry_point(path, names_by_dir.get(path, set())),
        )

    for path in paths:
        if not path:
            continue
        parent = modules[_parent_path(path, modules)]
        parent.children.append(modules[path].slug)

    for module in modules.values():
        module.children.sort()

    return [modules[path] for path in paths]


def _assign_slugs(paths: List[str]) -> Dict[str, str]:
    used: Set[str] = set()
    slugs: Dict[str, str] = {}
    for path in paths:
        base = slugify(path)
        candidate = base
        counter = 2
        while candidate in used:
            candidate = f"{base}-{counter}"
            counter += 1
        used.add(candidate)
        slugs[path] = candidate
    return slugs


def _present_names(path: str, names_by_dir: Dict[str, Set[str]], root: Optional[Path]) -> Set[str]:
    present = set(names_by_dir.get(path, set()))
    if root is None:
        return present
    directory = root / path if path else root
    candidates = PACKAGE_MARKERS + tuple(name for _, names in _TYPED_MARKERS for name in names)
    for name in candidates:
        if name not in present and (directory / name).is_file():
            present.add(name)
    if any(child.suffix == ".csproj" for child in _safe_listdir(directory)):
        present.add("*.csproj")
    return present


def _safe_listdir(directory: Path) -> List[Path]:
    try:
        return list(directory.iterdir())
    except OSError:
        return []


def _boundary_type(path: str, present: Set[str]) -> BoundaryType:
    if not path:
        return BoundaryType.ROOT
    if any(name in present for name in PACKAGE_MARKERS) or any(name.endswith(".csproj") for name in present):
        return BoundaryType.PACKAGE
    for boundary, names in _TYPED_MARKERS:
        if any(name in present for name in names):
            return boundary
    return BoundaryType.DIRECTORY


def _entry_point(path: str, names: Set[str]) -> Optional[str]:
    for name in ENTRY_POINT_NAMES:
        if name in names:
            return f"{path}/{name}" if path else name
    return None


def _parent_path(path: str, modules: Dict[str, ModuleInfo]) -> str:
    parent = path.rpartition("/")[0]
    while parent and parent not in modules:
        parent = parent.rpartition("/")[0]
    return parent


__all__ = ["ROOT_SLUG", "detect_modules", "module_path_for", "slugify"]
