"""C declarations: function definitions and prototypes, aggregates, typedefs."""

from __future__ import annotations

import re
from typing import List, Tuple

from .base import LanguageParser
from .scanning import (
    CONTROL_FLOW_KEYWORDS,
    LineIndex,
    brace_range,
    finalize,
    in_order,
    leading_comment,
    make_symbol,
    signature_from_match,
    visibility_from_flag,
)
from ..models import LineRange, Symbol, SymbolKind

_FUNCTION_PATTERN = re.compile(
    r"^(?P<static>static\s+)?(?:inline\s+)?(?:const\s+)?\w+(?:\s*\*)*\s+\**(?P<name>\w+)\s*\([^)]*\)\s*\{",
    re.MULTILINE,
)
_PROTOTYPE_PATTERN = re.compile(
    r"^(?:extern\s+)?(?P<static>static\s+)?\w+(?:\s*\*)*\s+\**(?P<name>\w+)\s*\([^)]*\)\s*;",
    re.MULTILINE,
)
_STRUCT_PATTERN = re.compile(r"^(?:typedef\s+)?(?P<keyword>struct|union)\s+(?P<name>\w+)?\s*\{", re.MULTILINE)
_ENUM_PATTERN = re.compile(r"^(?:typedef\s+)?enum\s+(?P<name>\w+)?\s*\{", re.MULTILINE)
_TYPEDEF_PATTERN = re.compile(r"^typedef\s+[^;{}]+?\s+\**(?P<name>\w+)\s*;", re.MULTILINE)
_TYPEDEF_TAIL_PATTERN = re.compile(r"\}\s*(?P<name>\w+)\s*;")

_INCLUDE_PATTERN = re.compile(r"^[ \t]*#\s*include\s*\"(?P<path>[^\"]+)\"", re.MULTILINE)

ANONYMOUS = "anonymous"

_SKIPPED_NAMES = CONTROL_FLOW_KEYWORDS | {"return", "sizeof"}


def include_imports(text: str) -> List[str]:
    """Quoted ``#include`` targets, shared with the C++ extractor."""
    found: List[Tuple[int, str]] = []
    for match in _INCLUDE_PATTERN.finditer(text):
        found.append((match.start(), match.group("path")))
    return in_order(found)


class CParser(LanguageParser):
    """Extracts functions, prototypes, structs/unions, enums and typedefs."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []

        for match in _FUNCTION_PATTERN.finditer(text):
            name = match.group("name")
            if name in _SKIPPED_NAMES:
                continue
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.FUNCTION,
                    name,
                    brace_range(index, line, match.end() - 1),
                    visibility_from_flag(not match.group("static")),
                    signature=signature_from_match(match.group(0), "{"),
                    doc_comment=leading_comment(index.lines, line, ("//",)),
                )
            )

        for match in _PROTOTYPE_PATTERN.finditer(text):
            name = match.group("name")
            if name in _SKIPPED_NAMES:
                continue
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.FUNCTION,
                    name,
                    LineRange.single(line),
                    visibility_from_flag(not match.group("static")),
                    signature=signature_from_match(match.group(0), ";"),
                    doc_comment=leading_comment(index.lines, line, ("//",)),
                )
            )

        for pattern, kind in ((_STRUCT_PATTERN, SymbolKind.STRUCT), (_ENUM_PATTERN, SymbolKind.ENUM)):
            for match in pattern.finditer(text):
                name = match.group("name") or ANONYMOUS
                line = index.line_at(match.start())
                keyword = "enum" if kind is SymbolKind.ENUM else match.group("keyword")
                line_range = brace_range(index, line, match.end() - 1)
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        line_range,
                        visibility_from_flag(True),
                        signature=f"{keyword} {name}",
                        doc_comment=leading_comment(index.lines, line, ("//",)),
                    )
                )
                if match.group(0).startswith("typedef"):
                    # typedef struct { ... } Alias;
                    tail = _TYPEDEF_TAIL_PATTERN.match(index.line_text(line_range.end).strip())
                    if tail is not None and line_range.end > line:
                        symbols.append(
                            make_symbol(
                                SymbolKind.TYPE,
                                tail.group("name"),
                                LineRange.single(line_range.end),
                                visibility_from_flag(True),
                                signature=f"typedef {keyword} {name} {tail.group('name')}",
                            )
                        )

        for match in _TYPEDEF_PATTERN.finditer(text):
            line = index.line_at(match.start())
            symbols.append(
                make_symbol(
                    SymbolKind.TYPE,
                    match.group("name"),
                    LineRange.single(line),
                    visibility_from_flag(True),
                    signature=signature_from_match(match.group(0), ";"),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        return include_imports(text)
