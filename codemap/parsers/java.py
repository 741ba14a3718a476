"""Java declarations: types, methods and static final constants."""

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

_MODIFIERS = r"(?P<mods>(?:(?:public|private|protected|static|final|abstract|sealed|non-sealed|strictfp|default|synchronized|native)[ \t]+)*)"

_TYPE_PATTERN = re.compile(
    r"^[ \t]*" + _MODIFIERS + r"(?P<keyword>class|interface|enum|record|@interface)\s+(?P<name>\w+)",
    re.MULTILINE,
)
_METHOD_PATTERN = re.compile(
    r"^[ \t]+" + _MODIFIERS + r"(?:<[^>]+>\s+)?(?P<type>[\w.]+(?:<[^()]*?>)?(?:\[\])*)\s+(?P<name>\w+)\s*\([^)]*\)"
    r"(?:\s*throws\s+[\w.,\s]+)?\s*[{;]",
    re.MULTILINE,
)
_CONSTRUCTOR_PATTERN = re.compile(
    r"^[ \t]+" + _MODIFIERS + r"(?P<name>[A-Z]\w*)\s*\([^)]*\)(?:\s*throws\s+[\w.,\s]+)?\s*\{",
    re.MULTILINE,
)
_CONST_PATTERN = re.compile(
    r"^[ \t]+" + _MODIFIERS + r"[\w.<>\[\]]+\s+(?P<name>[A-Z][A-Z0-9_]*)\s*=",
    re.MULTILINE,
)

_IMPORT_PATTERN = re.compile(r"^import\s+(?:static\s+)?(?P<name>[\w.]+(?:\.\*)?)\s*;", re.MULTILINE)

_TYPE_KINDS = {
    "class": SymbolKind.CLASS,
    "record": SymbolKind.CLASS,
    "interface": SymbolKind.INTERFACE,
    "@interface": SymbolKind.INTERFACE,
    "enum": SymbolKind.ENUM,
}

_STATEMENT_KEYWORDS = frozenset({"return", "new", "throw", "else", "yield"})
# a constructor backtracks into the method pattern with its modifier as the type
_MODIFIER_WORDS = frozenset({"public", "private", "protected", "static", "final", "abstract", "synchronized"})


def member_visibility(mods: str) -> Visibility:
    """Keyword visibility; no modifier means package-private (internal)."""
    words = mods.split()
    if "public" in words:
        return Visibility.PUBLIC
    if "private" in words:
        return Visibility.PRIVATE
    if "protected" in words:
        return Visibility.PROTECTED
    return Visibility.INTERNAL


class JavaParser(LanguageParser):
    """Extracts classes, interfaces, enums, records, methods and constants."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        type_blocks: List[LineRange] = []

        for match in _TYPE_PATTERN.finditer(text):
            line = index.line_at(match.start())
            line_range = brace_range(index, line, match.end())
            type_blocks.append(line_range)
            symbols.append(
                make_symbol(
                    _TYPE_KINDS[match.group("keyword")],
                    match.group("name"),
                    line_range,
                    member_visibility(match.group("mods")),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("//",)),
                )
            )

        for pattern in (_METHOD_PATTERN, _CONSTRUCTOR_PATTERN):
            for match in pattern.finditer(text):
                name = match.group("name")
                if name in CONTROL_FLOW_KEYWORDS:
                    continue
                if pattern is _METHOD_PATTERN and (
                    match.group("type") in _STATEMENT_KEYWORDS or match.group("type") in _MODIFIER_WORDS
                ):
                    continue
                line = index.line_at(match.start())
                if not enclosing(type_blocks, line):
                    continue
                symbols.append(
                    make_symbol(
                        SymbolKind.METHOD,
                        name,
                        brace_range(index, line, match.end() - 1),
                        member_visibility(match.group("mods")),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("//",)),
                    )
                )

        for match in _CONST_PATTERN.finditer(text):
            mods = match.group("mods").split()
            if "static" not in mods or "final" not in mods:
                continue
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.CONST,
                    match.group("name"),
                    LineRange.single(line),
                    member_visibility(match.group("mods")),
                    signature=signature_from_line(index, line),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _IMPORT_PATTERN.finditer(text):
            found.append((match.start(), match.group("name")))
        return in_order(found)
