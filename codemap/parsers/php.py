"""PHP declarations: classes, interfaces, traits, enums, functions, constants."""

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

_CLASS_PATTERN = re.compile(
    r"^[ \t]*(?:(?:abstract|final|readonly)[ \t]+)*class\s+(?P<name>\w+)", re.MULTILINE
)
_INTERFACE_PATTERN = re.compile(r"^[ \t]*interface\s+(?P<name>\w+)", re.MULTILINE)
_TRAIT_PATTERN = re.compile(r"^[ \t]*trait\s+(?P<name>\w+)", re.MULTILINE)
_ENUM_PATTERN = re.compile(r"^[ \t]*enum\s+(?P<name>\w+)", re.MULTILINE)
_FUNCTION_PATTERN = re.compile(
    r"^[ \t]*(?P<mods>(?:(?:public|private|protected|static|abstract|final)[ \t]+)*)function\s+&?(?P<name>\w+)\s*\(",
    re.MULTILINE,
)
_CONST_PATTERN = re.compile(
    r"^[ \t]*(?P<mods>(?:(?:public|private|protected|final)[ \t]+)*)const\s+(?:\w+\s+)?(?P<name>\w+)\s*=",
    re.MULTILINE,
)

_USE_PATTERN = re.compile(r"^use\s+(?:function\s+|const\s+)?\\?(?P<name>[\w\\]+)", re.MULTILINE)
_REQUIRE_PATTERN = re.compile(
    r"\b(?:require|include)(?:_once)?\s*\(?[^'\";\n]*['\"](?P<path>[^'\"]+)['\"]"
)


def _visibility(mods: str) -> Visibility:
    words = mods.split()
    if "private" in words:
        return Visibility.PRIVATE
    if "protected" in words:
        return Visibility.PROTECTED
    return Visibility.PUBLIC


class PhpParser(LanguageParser):
    """Extracts PHP types, functions (methods inside type bodies) and constants."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        type_blocks: List[LineRange] = []

        for pattern, kind in (
            (_CLASS_PATTERN, SymbolKind.CLASS),
            (_INTERFACE_PATTERN, SymbolKind.INTERFACE),
            (_TRAIT_PATTERN, SymbolKind.TRAIT),
            (_ENUM_PATTERN, SymbolKind.ENUM),
        ):
            for match in pattern.finditer(text):
                line = index.line_at(match.start())
                line_range = brace_range(index, line, match.end())
                type_blocks.append(line_range)
                symbols.append(
                    make_symbol(
                        kind,
                        match.group("name"),
                        line_range,
                        Visibility.PUBLIC,
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("//", "#")),
                    )
                )

        for match in _FUNCTION_PATTERN.finditer(text):
            line = index.line_at(match.start())
            kind = SymbolKind.METHOD if enclosing(type_blocks, line) else SymbolKind.FUNCTION
            symbols.append(
                make_symbol(
                    kind,
                    match.group("name"),
                    brace_range(index, line, match.end()),
                    _visibility(match.group("mods")),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("//", "#")),
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
        for match in _USE_PATTERN.finditer(text):
            found.append((match.start(), match.group("name")))
        for match in _REQUIRE_PATTERN.finditer(text):
            found.append((match.start(), match.group("path")))
        return in_order(found)
