"""Dart declarations; a leading underscore marks library-private names."""

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
    underscore_visibility,
)
from ..models import LineRange, Symbol, SymbolKind

_CLASS_PATTERN = re.compile(
    r"^(?:(?:abstract|base|final|interface|sealed|mixin)[ \t]+)*class\s+(?P<name>\w+)[^{;]*\{",
    re.MULTILINE,
)
_MIXIN_PATTERN = re.compile(r"^(?:base\s+)?mixin\s+(?P<name>\w+)[^{;]*\{", re.MULTILINE)
_EXTENSION_PATTERN = re.compile(r"^extension\s+(?P<name>\w+)(?:<[^>]*>)?\s+on\s+[^{]+\{", re.MULTILINE)
_ENUM_PATTERN = re.compile(r"^enum\s+(?P<name>\w+)[^{;]*\{", re.MULTILINE)
_FUNCTION_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)(?:(?:static|external|@\w+)[ \t]+)*(?P<type>[\w?]+(?:<[^()]*?>)?\??)\s+(?P<name>\w+)\s*(?:<[^>]*>)?"
    r"\([^)]*\)\s*(?:async\*?|sync\*)?\s*(?P<end>\{|=>)",
    re.MULTILINE,
)
_GETTER_PATTERN = re.compile(
    r"^[ \t]*(?:static\s+)?(?:[\w?<>]+\s+)?get\s+(?P<name>\w+)\s*(?:async\s*)?(?P<end>\{|=>)",
    re.MULTILINE,
)
_SETTER_PATTERN = re.compile(r"^[ \t]*(?:static\s+)?set\s+(?P<name>\w+)\s*\([^)]*\)\s*(?P<end>\{|=>)", re.MULTILINE)
_TYPEDEF_PATTERN = re.compile(r"^typedef\s+(?P<name>\w+)", re.MULTILINE)
_CONST_PATTERN = re.compile(r"^[ \t]*(?:static\s+)?const\s+(?:[\w<>?]+\s+)?(?P<name>\w+)\s*=", re.MULTILINE)

_IMPORT_PATTERN = re.compile(r"^(?:import|export|part)\s+['\"](?P<uri>[^'\"]+)['\"]", re.MULTILINE)

_STATEMENT_KEYWORDS = frozenset({"return", "new", "throw", "else", "await", "yield", "const", "final", "var"})


class DartParser(LanguageParser):
    """Extracts classes, mixins, extensions, enums, functions, accessors and constants."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        type_blocks: List[LineRange] = []

        for pattern, kind in (
            (_CLASS_PATTERN, SymbolKind.CLASS),
            (_MIXIN_PATTERN, SymbolKind.TRAIT),
            (_EXTENSION_PATTERN, SymbolKind.MODULE),
            (_ENUM_PATTERN, SymbolKind.ENUM),
        ):
            for match in pattern.finditer(text):
                name = match.group("name")
                line = index.line_at(match.start())
                line_range = brace_range(index, line, match.end() - 1)
                type_blocks.append(line_range)
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        line_range,
                        underscore_visibility(name),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("///",)),
                    )
                )

        for pattern in (_FUNCTION_PATTERN, _GETTER_PATTERN, _SETTER_PATTERN):
            for match in pattern.finditer(text):
                name = match.group("name")
                if name in CONTROL_FLOW_KEYWORDS:
                    continue
                if pattern is _FUNCTION_PATTERN and match.group("type") in _STATEMENT_KEYWORDS:
                    continue
                line = index.line_at(match.start())
                inside = enclosing(type_blocks, line)
                if pattern is _FUNCTION_PATTERN and match.group("indent") and not inside:
                    continue
                if match.group("end") == "{":
                    line_range = brace_range(index, line, match.end() - 1)
                else:
                    line_range = LineRange.single(line)
                symbols.append(
                    make_symbol(
                        SymbolKind.METHOD if inside else SymbolKind.FUNCTION,
                        name,
                        line_range,
                        underscore_visibility(name),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("///",)),
                    )
                )

        for pattern, kind in ((_TYPEDEF_PATTERN, SymbolKind.TYPE), (_CONST_PATTERN, SymbolKind.CONST)):
            for match in pattern.finditer(text):
                name = match.group("name")
                line = index.line_at(match.start())
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        LineRange.single(line),
                        underscore_visibility(name),
                        signature=signature_from_line(index, line),
                    )
                )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _IMPORT_PATTERN.finditer(text):
            found.append((match.start(), match.group("uri")))
        return in_order(found)
