"""Python declarations, delimited by indentation."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from .base import LanguageParser
from .scanning import (
    LineIndex,
    enclosing,
    find_indent_end,
    finalize,
    in_order,
    make_symbol,
    signature_from_line,
)
from ..models import LineRange, Symbol, SymbolKind, Visibility

_DEF_PATTERN = re.compile(r"^(?P<indent>[ \t]*)(?:async\s+)?def\s+(?P<name>\w+)\s*\(", re.MULTILINE)
_CLASS_PATTERN = re.compile(r"^(?P<indent>[ \t]*)class\s+(?P<name>\w+)", re.MULTILINE)
_CONST_PATTERN = re.compile(
    r"^(?P<name>[A-Z][A-Z0-9_]*)\s*(?::\s*[^=\n]+)?=(?!=)", re.MULTILINE
)

_IMPORT_PATTERN = re.compile(r"^[ \t]*import\s+(?P<modules>[\w., \t]+)", re.MULTILINE)
_FROM_IMPORT_PATTERN = re.compile(r"^[ \t]*from\s+(?P<module>[\w.]+)\s+import", re.MULTILINE)

_DOCSTRING_QUOTES = ('"""', "'''")


def _def_visibility(name: str) -> Visibility:
    if name.startswith("__") and name.endswith("__"):
        return Visibility.PUBLIC
    if name.startswith("_"):
        return Visibility.PRIVATE
    return Visibility.PUBLIC


def _docstring(lines: Sequence[str], line: int, end_line: int) -> Optional[str]:
    """Return the first line of the docstring opening the block at ``line``."""
    for position in range(line, min(end_line, len(lines))):
        stripped = lines[position].strip()
        if not stripped:
            continue
        for prefix in ("r", "u", ""):
            for quote in _DOCSTRING_QUOTES:
                opener = prefix + quote
                if stripped.startswith(opener):
                    body = stripped[len(opener):]
                    if body.endswith(quote):
                        body = body[: -len(quote)]
                    body = body.strip()
                    if body:
                        return body
                    if position + 1 < len(lines):
                        following = lines[position + 1].strip().rstrip(quote).strip()
                        return following or None
                    return None
        return None
    return None


class PythonParser(LanguageParser):
    """Extracts classes, functions/methods and module-level constants."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        lines = index.lines
        symbols: List[Symbol] = []
        class_blocks: List[LineRange] = []

        for match in _CLASS_PATTERN.finditer(text):
            name = match.group("name")
            line = index.line_at(match.start())
            end_line = find_indent_end(lines, line, len(match.group("indent")))
            line_range = LineRange(line, end_line)
            class_blocks.append(line_range)
            symbols.append(
                make_symbol(
                    SymbolKind.CLASS,
                    name,
                    line_range,
                    Visibility.PRIVATE if name.startswith("_") else Visibility.PUBLIC,
                    signature=signature_from_line(index, line),
                    doc_comment=_docstring(lines, line, end_line),
                )
            )

        for match in _DEF_PATTERN.finditer(text):
            name = match.group("name")
            indent = len(match.group("indent"))
            line = index.line_at(match.start())
            end_line = find_indent_end(lines, line, indent)
            kind = SymbolKind.FUNCTION
            if indent and enclosing(class_blocks, line):
                kind = SymbolKind.METHOD
            symbols.append(
                make_symbol(
                    kind,
                    name,
                    LineRange(line, end_line),
                    _def_visibility(name),
                    signature=signature_from_line(index, line),
                    doc_comment=_docstring(lines, line, end_line),
                )
            )

        for match in _CONST_PATTERN.finditer(text):
            name = match.group("name")
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.CONST,
                    name,
                    LineRange.single(line),
                    Visibility.PUBLIC,
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _IMPORT_PATTERN.finditer(text):
            for part in match.group("modules").split(","):
                module = part.strip().split(" ")[0]
                found.append((match.start(), module.split(".")[0]))
        for match in _FROM_IMPORT_PATTERN.finditer(text):
            module = match.group("module")
            if module.startswith("."):
                # relative imports keep their leading dots
                found.append((match.start(), module))
            else:
                found.append((match.start(), module.split(".")[0]))
        return in_order(found)
