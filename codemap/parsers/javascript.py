"""JavaScript and TypeScript declarations (shared extractor)."""

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
    visibility_from_flag,
)
from ..models import LineRange, Symbol, SymbolKind, Visibility

_JS_QUOTES = "\"'`"

_FUNCTION_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>\w+)",
    re.MULTILINE,
)
_CLASS_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(?P<name>\w+)",
    re.MULTILINE,
)
_ARROW_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:const|let|var)\s+(?P<name>\w+)\s*(?::[^=]+)?=\s*(?:async\s*)?\([^)]*\)\s*(?::\s*[^=]+)?=>",
    re.MULTILINE,
)
_SIMPLE_ARROW_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:const|let|var)\s+(?P<name>\w+)\s*=\s*(?:async\s+)?\w+\s*=>",
    re.MULTILINE,
)
_INTERFACE_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:declare\s+)?interface\s+(?P<name>\w+)", re.MULTILINE
)
_ENUM_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:declare\s+)?(?:const\s+)?enum\s+(?P<name>\w+)", re.MULTILINE
)
_NAMESPACE_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:declare\s+)?(?:namespace|module)\s+(?P<name>[\w.]+)\s*\{",
    re.MULTILINE,
)
_TYPE_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?(?:declare\s+)?type\s+(?P<name>\w+)(?:<[^>]*>)?\s*=", re.MULTILINE
)
_CONST_PATTERN = re.compile(
    r"^[ \t]*(?P<export>export\s+)?const\s+(?P<name>\w+)\s*:\s*[^=]+=\s*[^(\s]", re.MULTILINE
)
_METHOD_PATTERN = re.compile(
    r"^[ \t]+(?P<mods>(?:(?:public|private|protected|static|async|readonly|override|get|set)[ \t]+)*)"
    r"(?P<name>#?\w+)\s*(?:<[^>]*>)?\([^)]*\)\s*(?::\s*[^{;=]+)?\{",
    re.MULTILINE,
)

_IMPORT_FROM_PATTERN = re.compile(
    r"^[ \t]*(?:import|export)\s+(?:type\s+)?[^'\";]*?\bfrom\s*['\"](?P<spec>[^'\"]+)['\"]",
    re.MULTILINE,
)
_BARE_IMPORT_PATTERN = re.compile(r"^[ \t]*import\s*['\"](?P<spec>[^'\"]+)['\"]", re.MULTILINE)
_REQUIRE_PATTERN = re.compile(r"\b(?:require|import)\s*\(\s*['\"](?P<spec>[^'\"]+)['\"]\s*\)")


def _method_visibility(mods: str, name: str) -> Visibility:
    if name.startswith("#") or "private" in mods:
        return Visibility.PRIVATE
    if "protected" in mods:
        return Visibility.PROTECTED
    return Visibility.PUBLIC


class JavaScriptParser(LanguageParser):
    """Extracts functions, classes, arrow functions, class methods and TS types."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        class_blocks: List[LineRange] = []

        braced = (
            (_CLASS_PATTERN, SymbolKind.CLASS),
            (_FUNCTION_PATTERN, SymbolKind.FUNCTION),
            (_ARROW_PATTERN, SymbolKind.FUNCTION),
            (_INTERFACE_PATTERN, SymbolKind.INTERFACE),
            (_ENUM_PATTERN, SymbolKind.ENUM),
            (_NAMESPACE_PATTERN, SymbolKind.MODULE),
        )
        for pattern, kind in braced:
            for match in pattern.finditer(text):
                line = index.line_at(match.start())
                start = match.end() - 1 if kind is SymbolKind.MODULE else match.end()
                line_range = brace_range(index, line, start, quotes=_JS_QUOTES)
                if kind is SymbolKind.CLASS:
                    class_blocks.append(line_range)
                symbols.append(
                    make_symbol(
                        kind,
                        match.group("name"),
                        line_range,
                        visibility_from_flag(bool(match.group("export"))),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("//",)),
                    )
                )

        single = (
            (_SIMPLE_ARROW_PATTERN, SymbolKind.FUNCTION),
            (_TYPE_PATTERN, SymbolKind.TYPE),
            (_CONST_PATTERN, SymbolKind.CONST),
        )
        for pattern, kind in single:
            for match in pattern.finditer(text):
                line = index.line_at(match.start())
                symbols.append(
                    make_symbol(
                        kind,
                        match.group("name"),
                        LineRange.single(line),
                        visibility_from_flag(bool(match.group("export"))),
                        signature=signature_from_line(index, line),
                    )
                )

        for match in _METHOD_PATTERN.finditer(text):
            name = match.group("name")
            line = index.line_at(match.start())
            if name in CONTROL_FLOW_KEYWORDS or name == "function":
                continue
            if not enclosing(class_blocks, line):
                continue
            symbols.append(
                make_symbol(
                    SymbolKind.METHOD,
                    name,
                    brace_range(index, line, match.end() - 1, quotes=_JS_QUOTES),
                    _method_visibility(match.group("mods"), name),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("//",)),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for pattern in (_IMPORT_FROM_PATTERN, _BARE_IMPORT_PATTERN, _REQUIRE_PATTERN):
            for match in pattern.finditer(text):
                found.append((match.start(), match.group("spec")))
        return in_order(found)
