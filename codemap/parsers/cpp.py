"""C++ declarations with access-section tracking."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from .base import LanguageParser
from .c import include_imports
from .scanning import (
    CONTROL_FLOW_KEYWORDS,
    LineIndex,
    brace_range,
    finalize,
    leading_comment,
    make_symbol,
    signature_from_match,
)
from ..models import LineRange, Symbol, SymbolKind, Visibility

_CLASS_PATTERN = re.compile(
    r"^[ \t]*(?:template\s*<[^>]*>\s*)?(?P<keyword>class|struct)\s+(?P<name>\w+)(?:\s+final)?(?:\s*:\s*[^{;]+)?\s*\{",
    re.MULTILINE,
)
_NAMESPACE_PATTERN = re.compile(r"^[ \t]*(?:inline\s+)?namespace\s+(?P<name>[\w:]+)\s*\{", re.MULTILINE)
_ENUM_PATTERN = re.compile(
    r"^[ \t]*enum(?:\s+(?:class|struct))?\s+(?P<name>\w+)(?:\s*:\s*[\w:]+)?\s*\{", re.MULTILINE
)
_FUNCTION_PATTERN = re.compile(
    r"^(?P<mods>(?:(?:virtual|static|inline|constexpr|explicit)[ \t]+)*)"
    r"(?:template\s*<[^>]*>\s*)?(?P<type>[\w:]+)(?:\s*<[^>]+>)?(?:\s*[*&]+)?\s+[*&]?(?P<name>\w+(?:::~?\w+)*)\s*\([^)]*\)"
    r"(?:\s*(?:const|override|noexcept|final))*\s*\{",
    re.MULTILINE,
)
_METHOD_DECL_PATTERN = re.compile(
    r"^[ \t]*(?P<mods>(?:(?:virtual|static|inline|constexpr|explicit)[ \t]+)*)"
    r"(?P<type>[\w:]+)(?:\s*<[^>]+>)?(?:\s*[*&]+)?\s+[*&]?(?P<name>\w+)\s*\([^)]*\)"
    r"(?:\s*(?:const|override|noexcept|final))*\s*(?:=\s*(?:0|default|delete)\s*)?;",
    re.MULTILINE,
)
_ACCESS_PATTERN = re.compile(r"^[ \t]*(?P<access>public|private|protected)\s*:", re.MULTILINE)

_SKIPPED_NAMES = CONTROL_FLOW_KEYWORDS | {"return", "delete", "new", "sizeof"}
_STATEMENT_KEYWORDS = frozenset({"return", "delete", "new", "throw", "else", "goto", "co_return", "co_await"})

_ACCESS_VISIBILITY = {
    "public": Visibility.PUBLIC,
    "private": Visibility.PRIVATE,
    "protected": Visibility.PROTECTED,
}


def _section_visibility(
    sections: Sequence[Tuple[int, Visibility]],
    classes: Sequence[Tuple[LineRange, Visibility]],
    line: int,
) -> Optional[Visibility]:
    """Visibility of the innermost class body containing ``line``.

    The class default (``private`` for classes, ``public`` for structs) applies
    until the first access label of that body.
    """
    owner: Optional[Tuple[LineRange, Visibility]] = None
    for block, default in classes:
        if block.start < line <= block.end:
            if owner is None or block.start >= owner[0].start:
                owner = (block, default)
    if owner is None:
        return None
    block, visibility = owner
    for section_line, section_visibility in sections:
        if block.start < section_line < line:
            visibility = section_visibility
    return visibility


class CppParser(LanguageParser):
    """Extracts classes, structs, namespaces, enums, functions and member declarations."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []
        classes: List[Tuple[LineRange, Visibility]] = []

        sections = [
            (index.line_at(match.start()), _ACCESS_VISIBILITY[match.group("access")])
            for match in _ACCESS_PATTERN.finditer(text)
        ]

        for match in _CLASS_PATTERN.finditer(text):
            keyword = match.group("keyword")
            name = match.group("name")
            line = index.line_at(match.start())
            line_range = brace_range(index, line, match.end() - 1)
            default = Visibility.PUBLIC if keyword == "struct" else Visibility.PRIVATE
            classes.append((line_range, default))
            symbols.append(
                make_symbol(
                    SymbolKind.STRUCT if keyword == "struct" else SymbolKind.CLASS,
                    name,
                    line_range,
                    Visibility.PUBLIC,
                    signature=f"{keyword} {name}",
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        for pattern, kind, keyword in (
            (_NAMESPACE_PATTERN, SymbolKind.MODULE, "namespace"),
            (_ENUM_PATTERN, SymbolKind.ENUM, "enum"),
        ):
            for match in pattern.finditer(text):
                name = match.group("name")
                line = index.line_at(match.start())
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        brace_range(index, line, match.end() - 1),
                        _section_visibility(sections, classes, line) or Visibility.PUBLIC,
                        signature=f"{keyword} {name}",
                        doc_comment=leading_comment(index.lines, line, ("///", "//")),
                    )
                )

        for match in _FUNCTION_PATTERN.finditer(text):
            name = match.group("name")
            if name in _SKIPPED_NAMES or match.group("type") in _STATEMENT_KEYWORDS:
                continue
            line = index.line_at(match.start())
            kind = SymbolKind.METHOD if "::" in name else SymbolKind.FUNCTION
            visibility = Visibility.PRIVATE if "static" in match.group("mods") else Visibility.PUBLIC
            symbols.append(
                make_symbol(
                    kind,
                    name,
                    brace_range(index, line, match.end() - 1),
                    visibility,
                    signature=signature_from_match(match.group(0), "{"),
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        for match in _METHOD_DECL_PATTERN.finditer(text):
            name = match.group("name")
            if name in _SKIPPED_NAMES or match.group("type") in _STATEMENT_KEYWORDS:
                continue
            line = index.line_at(match.start())
            visibility = _section_visibility(sections, classes, line)
            if visibility is None:
                if match.group(0)[:1].isspace():
                    continue
                # free prototype outside any class body
                kind = SymbolKind.FUNCTION
                visibility = Visibility.PUBLIC
            else:
                kind = SymbolKind.METHOD
            symbols.append(
                make_symbol(
                    kind,
                    name,
                    LineRange.single(line),
                    visibility,
                    signature=signature_from_match(match.group(0), ";"),
                    doc_comment=leading_comment(index.lines, line, ("///", "//")),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        return include_imports(text)
