"""Swift declarations: types, protocols, extensions, funcs and constants."""

from __future__ import annotations

import re
from typing import List, Tuple

from .base import LanguageParser
from .scanning import (
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
    r"(?P<mods>(?:(?:public|open|private|fileprivate|internal|static|class|final|override|"
    r"mutating|nonmutating|indirect|dynamic|nonisolated|@\w+)[ \t]+)*)"
)

_TYPE_PATTERN = re.compile(
    r"^[ \t]*" + _MODIFIERS + r"(?P<keyword>class|struct|enum|protocol|actor|extension)\s+(?P<name>[\w.]+)",
    re.MULTILINE,
)
_FUNC_PATTERN = re.compile(
    r"^[ \t]*" + _MODIFIERS + r"func\s+(?P<name>\w+|[^\s(<]+)\s*(?:<[^>]*>)?\s*\(",
    re.MULTILINE,
)
_INIT_PATTERN = re.compile(r"^[ \t]+" + _MODIFIERS + r"(?P<name>init|deinit)[?!]?\s*[({]", re.MULTILINE)
_TYPEALIAS_PATTERN = re.compile(r"^[ \t]*" + _MODIFIERS + r"typealias\s+(?P<name>\w+)", re.MULTILINE)
_CONST_PATTERN = re.compile(r"^" + _MODIFIERS + r"let\s+(?P<name>\w+)", re.MULTILINE)

_IMPORT_PATTERN = re.compile(
    r"^[ \t]*(?:@\w+\s+)?import\s+(?:(?:typealias|struct|class|enum|protocol|let|var|func)\s+)?(?P<name>\w+)",
    re.MULTILINE,
)

_TYPE_KINDS = {
    "class": SymbolKind.CLASS,
    "actor": SymbolKind.CLASS,
    "struct": SymbolKind.STRUCT,
    "enum": SymbolKind.ENUM,
    "protocol": SymbolKind.TRAIT,
    "extension": SymbolKind.MODULE,
}


def _visibility(mods: str) -> Visibility:
    words = mods.split()
    if "public" in words or "open" in words:
        return Visibility.PUBLIC
    if "private" in words or "fileprivate" in words:
        return Visibility.PRIVATE
    return Visibility.INTERNAL


class SwiftParser(LanguageParser):
    """Extracts types, protocols, extensions, functions, initialisers and globals."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        type_blocks: List[LineRange] = []
        protocol_blocks: List[LineRange] = []

        for match in _TYPE_PATTERN.finditer(text):
            line = index.line_at(match.start())
            line_range = brace_range(index, line, match.end(), quotes="\"")
            type_blocks.append(line_range)
            if match.group("keyword") == "protocol":
                protocol_blocks.append(line_range)
            symbols.append(
                make_symbol(
                    _TYPE_KINDS[match.group("keyword")],
                    match.group("name"),
                    line_range,
                    _visibility(match.group("mods")),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        for pattern in (_FUNC_PATTERN, _INIT_PATTERN):
            for match in pattern.finditer(text):
                line = index.line_at(match.start())
                inside = enclosing(type_blocks, line)
                if pattern is _INIT_PATTERN and not inside:
                    continue
                start = match.end() - 1 if pattern is _INIT_PATTERN else match.end()
                if enclosing(protocol_blocks, line):
                    # requirements have no body
                    line_range = LineRange.single(line)
                else:
                    line_range = brace_range(index, line, start, quotes="\"")
                symbols.append(
                    make_symbol(
                        SymbolKind.METHOD if inside else SymbolKind.FUNCTION,
                        match.group("name"),
                        line_range,
                        _visibility(match.group("mods")),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("///", "//")),
                    )
                )

        for pattern, kind in ((_TYPEALIAS_PATTERN, SymbolKind.TYPE), (_CONST_PATTERN, SymbolKind.CONST)):
            for match in pattern.finditer(text):
                line = index.line_at(match.start())
                symbols.append(
                    make_symbol(
                        kind,
                        match.group("name"),
                        LineRange.single(line),
                        _visibility(match.group("mods")),
                        signature=signature_from_line(index, line),
                    )
                )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _IMPORT_PATTERN.finditer(text):
            found.append((match.start(), match.group("name")))
        return in_order(found)
