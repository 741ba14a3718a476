"""Markdown rendering of module documentation and the top-level index."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
import posixpath
from typing import Dict, Iterable, List, Mapping, Sequence

from .graph import FileGraph
from .models import MEMORY_CATEGORIES, FileEntry, MemoryEntry, ModuleInfo, Priority, Symbol

MODULE_FILENAME = "MODULE.md"
OUTLINE_FILENAME = "outline.md"
MEMORY_FILENAME = "memory.md"
IMPORTS_FILENAME = "imports.md"
INDEX_FILENAME = "INDEX.md"

_BACK_LINKS = "[Back to MODULE](MODULE.md) | [Back to INDEX](../../INDEX.md)"
_PRIORITY_ORDER = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)


@dataclass
class ModuleDocs:
    """Rendered documents for one module."""

    module_md: str
    outline: str
    memory: str
    imports: str

    def as_files(self) -> Dict[str, str]:
        return {
            MODULE_FILENAME: self.module_md,
            OUTLINE_FILENAME: self.outline,
            MEMORY_FILENAME: self.memory,
            IMPORTS_FILENAME: self.imports,
        }


def render_module(
    module: ModuleInfo,
    files: Sequence[FileEntry],
    symbols: Mapping[str, List[Symbol]],
    memory: Sequence[MemoryEntry],
    graph: FileGraph,
) -> ModuleDocs:
    members = sorted(
        (entry for entry in files if entry.relative_path in module.files),
        key=lambda entry: entry.relative_path,
    )
    return ModuleDocs(
        module_md=_render_module_md(module, members),
        outline=_render_outline(members, symbols),
        memory=_render_memory(module, memory),
        imports=_render_imports(module, graph),
    )


def render_index(
    modules: Sequence[ModuleInfo],
    files: Sequence[FileEntry],
    memory: Sequence[MemoryEntry],
    graph: FileGraph,
) -> str:
    lines = ["# Codebase Index", ""]
    large = sum(1 for entry in files if entry.is_large)
    lines.append(f"**Files:** {len(files)} | **Large files:** {large} | **Modules:** {len(modules)}")
    lines.append("")

    lines.extend(["## Modules", "", "| Module | Type | Files | Entry point |", "| ------ | ---- | ----- | ----------- |"])
    for module in modules:
        title = module.path or "(root)"
        entry = f"`{module.entry_point}`" if module.entry_point else ""
        lines.append(
            f"| [{title}](modules/{module.slug}/{MODULE_FILENAME}) | {module.boundary_type.value} "
            f"| {module.file_count} | {entry} |"
        )
    lines.append("")

    hubs = graph.hub_files()
    if hubs:
        lines.extend(["## Hub Files", "", "Imported by many files; changes here ripple widely.", ""])
        for identifier, count in hubs:
            lines.append(f"- `{identifier}` ({count} importers)")
        lines.append("")

    if memory:
        counts = Counter(entry.kind.category for entry in memory)
        lines.extend(["## Memory Markers", "", "| Category | Count |", "| -------- | ----- |"])
        for category in MEMORY_CATEGORIES:
            if counts.get(category):
                lines.append(f"| {category} | {counts[category]} |")
        lines.append("")

        critical = _critical_files(memory)
        if critical:
            lines.extend(["### Critical Files", ""])
            for path, count in critical:
                lines.append(f"- `{path}` ({count} high-priority markers)")
            lines.append("")

    return "\n".join(lines)


def _render_module_md(module: ModuleInfo, members: Sequence[FileEntry]) -> str:
    title = "Root Module" if not module.path else f"Module: {module.path}"
    lines = [f"# {title}", "", "[Back to INDEX](../../INDEX.md)", ""]
    lines.append(f"**Type:** {module.boundary_type.value} | **Files:** {module.file_count}")
    lines.append("")
    if module.entry_point:
        lines.extend([f"**Entry point:** `{module.entry_point}`", ""])

    if members:
        lines.extend(["## Files", "", "| File | Language | Lines | Large |", "| ---- | -------- | ----- | ----- |"])
        for entry in members:
            flag = "yes" if entry.is_large else ""
            lines.append(f"| `{entry.relative_path}` | {entry.language.value} | {entry.line_count} | {flag} |")
        lines.append("")

    if module.children:
        lines.extend(["## Child Modules", ""])
        for child in module.children:
            lines.append(f"- [{child}](../{child}/{MODULE_FILENAME})")
        lines.append("")

    lines.extend(
        [
            "## Documentation",
            "",
            f"- [{OUTLINE_FILENAME}]({OUTLINE_FILENAME}): symbol maps",
            f"- [{MEMORY_FILENAME}]({MEMORY_FILENAME}): warnings, rules and TODOs",
            f"- [{IMPORTS_FILENAME}]({IMPORTS_FILENAME}): dependencies",
            "",
        ]
    )
    return "\n".join(lines)


def _render_outline(members: Sequence[FileEntry], symbols: Mapping[str, List[Symbol]]) -> str:
    lines = ["# Outline", "", _BACK_LINKS, ""]
    mapped = [entry for entry in members if symbols.get(entry.relative_path)]
    if not mapped:
        lines.append("_No symbols extracted in this module._")
        return "\n".join(lines) + "\n"

    for entry in mapped:
        suffix = ", large" if entry.is_large else ""
        lines.extend([f"## {entry.relative_path} ({entry.line_count} lines{suffix})", ""])
        lines.extend(["| Lines | Kind | Name | Visibility |", "| ----- | ---- | ---- | ---------- |"])
        for symbol in symbols[entry.relative_path]:
            span = symbol.line_range
            where = str(span.start) if span.start == span.end else f"{span.start}-{span.end}"
            lines.append(f"| {where} | {symbol.kind} | {symbol.name} | {symbol.visibility} |")
        lines.append("")

        documented = [symbol for symbol in symbols[entry.relative_path] if symbol.doc_comment]
        if documented:
            lines.extend(["### Documented Symbols", ""])
            for symbol in documented:
                signature = symbol.signature or symbol.name
                summary = symbol.doc_comment.splitlines()[0] if symbol.doc_comment else ""
                lines.append(f"- `{signature}` (L{symbol.line_range.start}): {summary}")
            lines.append("")
    return "\n".join(lines)


def _render_memory(module: ModuleInfo, memory: Sequence[MemoryEntry]) -> str:
    lines = ["# Memory", "", _BACK_LINKS, ""]
    entries = [entry for entry in memory if entry.source_file in module.files]
    if not entries:
        lines.append("_No memory markers in this module._")
        return "\n".join(lines) + "\n"

    counts = Counter(entry.priority for entry in entries)
    lines.extend(["## Summary", "", "| High | Medium | Low |", "| ---- | ------ | --- |"])
    lines.append(f"| {counts[Priority.HIGH]} | {counts[Priority.MEDIUM]} | {counts[Priority.LOW]} |")
    lines.append("")

    for priority in _PRIORITY_ORDER:
        selected = sorted(
            (entry for entry in entries if entry.priority is priority),
            key=lambda entry: (entry.source_file, entry.line_number),
        )
        if not selected:
            continue
        lines.extend([f"## {priority} Priority", ""])
        for entry in selected:
            lines.append(f"### `{entry.kind}` ({entry.source_file}:{entry.line_number})")
            lines.extend(["", f"> {entry.content}", ""])
    return "\n".join(lines)


def _render_imports(module: ModuleInfo, graph: FileGraph) -> str:
    lines = ["# Imports", "", _BACK_LINKS, ""]
    internal: set[str] = set()
    external: set[str] = set()
    consumers: set[str] = set()

    for path in sorted(module.files):
        for identifier in graph.imports.get(path, ()):
            if _targets(graph.resolve_import(path, identifier), module.files):
                internal.add(identifier)
            else:
                external.add(identifier)

    for path, identifiers in graph.imports.items():
        if path in module.files:
            continue
        if any(_targets(graph.resolve_import(path, identifier), module.files) for identifier in identifiers):
            consumers.add(path)

    if not (internal or external or consumers):
        lines.append("_No import relationships detected._")
        return "\n".join(lines) + "\n"

    for heading, caption, items in (
        ("Internal Dependencies", "Imports resolved within this module:", internal),
        ("External Dependencies", "Imports from other modules or packages:", external),
        ("Consumers", "Files from other modules that import from this module:", consumers),
    ):
        if not items:
            continue
        lines.extend([f"## {heading}", "", caption, ""])
        lines.extend(f"- `{item}`" for item in sorted(items))
        lines.append("")
    return "\n".join(lines)


def _targets(resolved: str, files: Iterable[str]) -> bool:
    """True when ``resolved`` names one of ``files``, with or without its extension."""
    for path in files:
        if resolved == path or resolved == posixpath.splitext(path)[0]:
            return True
    return False


def _critical_files(memory: Sequence[MemoryEntry]) -> List[tuple[str, int]]:
    counts = Counter(entry.source_file for entry in memory if entry.priority is Priority.HIGH)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


__all__ = [
    "IMPORTS_FILENAME",
    "INDEX_FILENAME",
    "MEMORY_FILENAME",
    "MODULE_FILENAME",
    "ModuleDocs",
    "OUTLINE_FILENAME",
    "render_index",
    "render_module",
]
