"""Ruby declarations, delimited by keyword/``end`` pairs."""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from .base import LanguageParser
from .scanning import LineIndex, enclosing, finalize, in_order, leading_comment, make_symbol
from ..models import LineRange, Symbol, SymbolKind, Visibility

_CLASS_PATTERN = re.compile(r"^[ \t]*class\s+(?P<name>[A-Z][\w:]*)(?:\s*<\s*[\w:]+)?", re.MULTILINE)
_MODULE_PATTERN = re.compile(r"^[ \t]*module\s+(?P<name>[A-Z][\w:]*)", re.MULTILINE)
_DEF_PATTERN = re.compile(
    r"^[ \t]*(?P<inline>(?:private|protected|public)[ \t]+)?def\s+(?P<self>self\.)?(?P<name>\w+[?!=]?)",
    re.MULTILINE,
)
_ATTR_PATTERN = re.compile(r"^[ \t]*attr_(?:reader|writer|accessor)\s+(?P<names>[^\n#]+)", re.MULTILINE)
_CONST_PATTERN = re.compile(r"^[ \t]*(?P<name>[A-Z][A-Z0-9_]*)\s*=(?!=)", re.MULTILINE)

_REQUIRE_PATTERN = re.compile(
    r"^[ \t]*(?P<keyword>require|require_relative|load)\s*\(?\s*['\"](?P<path>[^'\"]+)['\"]",
    re.MULTILINE,
)

_OPENER = re.compile(
    r"^(?:(?:private|protected|public)[ \t]+)?(?:class|module|def|if|unless|case|while|until|for|begin)\b"
)
_DO_BLOCK = re.compile(r"\bdo(?:\s*\|[^|]*\|)?\s*$")
_ENDLESS_DEF = re.compile(r"^(?:(?:private|protected|public)[ \t]+)?def\s+[\w.?!]+(?:\([^)]*\))?\s*=(?!=)")
_CLOSER = re.compile(r"(?:^|;\s*)end\b")
_SECTION = re.compile(r"^(?P<section>private|protected|public)\s*(?:#.*)?$")

_SECTION_VISIBILITY = {
    "private": Visibility.PRIVATE,
    "protected": Visibility.PROTECTED,
    "public": Visibility.PUBLIC,
}


def find_ruby_end(lines: Sequence[str], start_line: int) -> int:
    """Line of the ``end`` matching the opener on ``start_line`` (1-based)."""
    depth = 0
    for position in range(start_line - 1, len(lines)):
        stripped = lines[position].strip()
        if not stripped or stripped.startswith("#"):
            continue
        if _OPENER.match(stripped) and not _ENDLESS_DEF.match(stripped):
            depth += 1
        elif _DO_BLOCK.search(stripped):
            depth += 1
        depth -= len(_CLOSER.findall(stripped))
        if depth <= 0:
            return position + 1
    return start_line


def _section_visibility(lines: Sequence[str], line: int) -> Visibility:
    """Nearest bare ``private``/``protected``/``public`` above ``line`` in the same body."""
    for position in range(line - 2, -1, -1):
        stripped = lines[position].strip()
        section = _SECTION.match(stripped)
        if section is not None:
            return _SECTION_VISIBILITY[section.group("section")]
        if stripped.startswith("class ") or stripped.startswith("module "):
            break
    return Visibility.PUBLIC


class RubyParser(LanguageParser):
    """Extracts classes, modules, methods, attributes and constants."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        lines = index.lines
        symbols: List[Symbol] = []
        containers: List[LineRange] = []

        for pattern, kind, keyword in (
            (_CLASS_PATTERN, SymbolKind.CLASS, "class"),
            (_MODULE_PATTERN, SymbolKind.MODULE, "module"),
        ):
            for match in pattern.finditer(text):
                name = match.group("name")
                line = index.line_at(match.start())
                line_range = LineRange(line, find_ruby_end(lines, line))
                containers.append(line_range)
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        line_range,
                        Visibility.PUBLIC,
                        signature=f"{keyword} {name}",
                        doc_comment=leading_comment(lines, line, ("#",)),
                    )
                )

        for match in _DEF_PATTERN.finditer(text):
            line = index.line_at(match.start())
            name = match.group("name")
            if match.group("self"):
                name = f"self.{name}"
                kind = SymbolKind.FUNCTION
            elif enclosing(containers, line):
                kind = SymbolKind.METHOD
            else:
                kind = SymbolKind.FUNCTION
            inline = match.group("inline")
            if inline:
                visibility = _SECTION_VISIBILITY[inline.strip()]
            else:
                visibility = _section_visibility(lines, line)
            symbols.append(
                make_symbol(
                    kind,
                    name,
                    LineRange(line, find_ruby_end(lines, line)),
                    visibility,
                    signature=f"def {name}",
                    doc_comment=leading_comment(lines, line, ("#",)),
                )
            )

        for match in _ATTR_PATTERN.finditer(text):
            line = index.line_at(match.start())
            for raw in match.group("names").split(","):
                attr = raw.strip().lstrip(":").strip()
                if not attr:
                    continue
                symbols.append(
                    make_symbol(SymbolKind.CONST, attr, LineRange.single(line), Visibility.PUBLIC)
                )

        for match in _CONST_PATTERN.finditer(text):
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.CONST,
                    match.group("name"),
                    LineRange.single(line),
                    Visibility.PUBLIC,
                    signature=lines[line - 1].strip(),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _REQUIRE_PATTERN.finditer(text):
            path = match.group("path")
            if match.group("keyword") == "require_relative" and not path.startswith("."):
                path = f"./{path}"
            found.append((match.start(), path))
        return in_order(found)
