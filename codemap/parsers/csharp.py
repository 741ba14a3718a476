"""C# declarations: types, namespaces, methods, properties and constants."""

from __future__ import annotations

import re
from typing import List, Tuple

from .base import LanguageParser
from .scanning import (
    CONTROL_FLOW_KEYWORDS,
    LineIndex,
    brace_range,
    enclosing,
    finalize,
    in_order,
    leading_comment,
    make_symbol,
    signature_from_line,
)
from ..models import LineRange, Symbol, SymbolKind, Visibility

_MODIFIERS = (
    r"(?P<mods>(?:(?:public|private|protected|internal|static|sealed|abstract|partial|readonly|"
    r"virtual|override|async|extern|unsafe|new|file)[ \t]+)*)"
)

_TYPE_PATTERN = re.compile(
    r"^[ \t]*" + _MODIFIERS + r"(?P<keyword>class|struct|interface|enum|record(?:\s+(?:class|struct))?)\s+(?P<name>\w+)",
    re.MULTILINE,
)
_NAMESPACE_PATTERN = re.compile(r"^[ \t]*namespace\s+(?P<name>[\w.]+)\s*(?P<scoped>;)?", re.MULTILINE)
_METHOD_PATTERN = re.compile(
    r"^[ \t]+" + _MODIFIERS + r"(?P<type>[\w.]+(?:<[^()]*?>)?(?:\[\])?\??)\s+(?P<name>\w+)\s*(?:<[^>]+>)?\s*\([^)]*\)"
    r"(?:\s*where\s+[^{;]+)?\s*(?P<end>[{;]|=>)",
    re.MULTILINE,
)
_PROPERTY_PATTERN = re.compile(
    r"^[ \t]+" + _MODIFIERS + r"(?P<type>[\w.]+(?:<[^()]*?>)?(?:\[\])?\??)\s+(?P<name>[A-Z]\w*)\s*\{\s*(?:get|set|init)\b",
    re.MULTILINE,
)
_CONST_PATTERN = re.compile(
    r"^[ \t]+" + _MODIFIERS + r"const\s+[\w.<>\[\]?]+\s+(?P<name>\w+)\s*=",
    re.MULTILINE,
)

_USING_PATTERN = re.compile(
    r"^(?:global\s+)?using\s+(?:static\s+)?(?:\w+\s*=\s*)?(?P<name>[\w.]+)\s*;", re.MULTILINE
)

_TYPE_KINDS = {
    "class": SymbolKind.CLASS,
    "struct": SymbolKind.STRUCT,
    "interface": SymbolKind.INTERFACE,
    "enum": SymbolKind.ENUM,
}

_STATEMENT_KEYWORDS = frozenset({"return", "new", "throw", "else", "await", "yield", "using", "lock"})
_ACCESS_WORDS = frozenset({"public", "private", "protected", "internal", "static"})


def _visibility(mods: str, default: Visibility = Visibility.PRIVATE) -> Visibility:
    words = mods.split()
    if "public" in words:
        return Visibility.PUBLIC
    if "protected" in words:
        return Visibility.PROTECTED
    if "internal" in words:
        return Visibility.INTERNAL
    if "private" in words:
        return Visibility.PRIVATE
    return default


def _type_kind(keyword: str) -> SymbolKind:
    if keyword.startswith("record"):
        return SymbolKind.STRUCT if keyword.endswith("struct") else SymbolKind.CLASS
    return _TYPE_KINDS[keyword]


class CSharpParser(LanguageParser):
    """Extracts namespaces, types, methods, properties and constants."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        type_blocks: List[LineRange] = []

        for match in _NAMESPACE_PATTERN.finditer(text):
            line = index.line_at(match.start())
            if match.group("scoped"):
                line_range = LineRange(line, max(line, len(index.lines)))
            else:
                line_range = brace_range(index, line, match.end())
            symbols.append(
                make_symbol(
                    SymbolKind.MODULE,
                    match.group("name"),
                    line_range,
                    Visibility.PUBLIC,
                    signature=f"namespace {match.group('name')}",
                )
            )

        for match in _TYPE_PATTERN.finditer(text):
            line = index.line_at(match.start())
            line_range = brace_range(index, line, match.end())
            type_blocks.append(line_range)
            symbols.append(
                make_symbol(
                    _type_kind(match.group("keyword")),
                    match.group("name"),
                    line_range,
                    # top-level types default to internal
                    _visibility(match.group("mods"), Visibility.INTERNAL),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        for match in _METHOD_PATTERN.finditer(text):
            name = match.group("name")
            if name in CONTROL_FLOW_KEYWORDS or match.group("type") in _STATEMENT_KEYWORDS:
                continue
            line = index.line_at(match.start())
            if not enclosing(type_blocks, line):
                continue
            mods = match.group("mods")
            if match.group("type") in _ACCESS_WORDS:
                # constructor: the modifier was captured as the return type
                mods = f"{mods} {match.group('type')}"
            if match.group("end") == "{":
                line_range = brace_range(index, line, match.end() - 1)
            else:
                line_range = LineRange.single(line)
            symbols.append(
                make_symbol(
                    SymbolKind.METHOD,
                    name,
                    line_range,
                    _visibility(mods),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        for match in _PROPERTY_PATTERN.finditer(text):
            line = index.line_at(match.start())
            if not enclosing(type_blocks, line):
                continue
            symbols.append(
                make_symbol(
                    SymbolKind.CONST,
                    match.group("name"),
                    LineRange.single(line),
                    _visibility(match.group("mods")),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        for match in _CONST_PATTERN.finditer(text):
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.CONST,
                    match.group("name"),
                    LineRange.single(line),
                    _visibility(match.group("mods")),
                    signature=signature_from_line(index, line),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _USING_PATTERN.finditer(text):
            found.append((match.start(), match.group("name")))
        return in_order(found)
