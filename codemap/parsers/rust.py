"""Rust declarations: fn, struct, enum, trait, const/static, type, mod."""

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

_VIS = r"(?P<vis>pub(?:\s*\([^)]+\))?[ \t]+)?"

_FN_PATTERN = re.compile(
    r"^[ \t]*" + _VIS + r"(?:(?:default|const|async|unsafe|extern[ \t]+\"[^\"]*\")[ \t]+)*fn\s+(?P<name>\w+)",
    re.MULTILINE,
)
_STRUCT_PATTERN = re.compile(r"^[ \t]*" + _VIS + r"struct\s+(?P<name>\w+)", re.MULTILINE)
_ENUM_PATTERN = re.compile(r"^[ \t]*" + _VIS + r"enum\s+(?P<name>\w+)", re.MULTILINE)
_TRAIT_PATTERN = re.compile(
    r"^[ \t]*" + _VIS + r"(?:unsafe\s+)?trait\s+(?P<name>\w+)", re.MULTILINE
)
_CONST_PATTERN = re.compile(
    r"^[ \t]*" + _VIS + r"(?:const|static(?:\s+mut)?)\s+(?P<name>\w+)\s*:", re.MULTILINE
)
_TYPE_PATTERN = re.compile(r"^[ \t]*" + _VIS + r"type\s+(?P<name>\w+)", re.MULTILINE)
_MOD_PATTERN = re.compile(r"^[ \t]*" + _VIS + r"mod\s+(?P<name>\w+)", re.MULTILINE)
_IMPL_PATTERN = re.compile(
    r"^[ \t]*(?:unsafe\s+)?impl(?:\s*<[^>]*>)?\s+(?:(?:[\w:]+)(?:<[^>]*>)?\s+for\s+)?(?P<name>\w+)",
    re.MULTILINE,
)

_USE_PATTERN = re.compile(
    r"^[ \t]*(?:pub(?:\s*\([^)]+\))?\s+)?use\s+(?P<path>[\w:]+)", re.MULTILINE
)
_MOD_DECL_PATTERN = re.compile(
    r"^[ \t]*(?:pub(?:\s*\([^)]+\))?\s+)?mod\s+(?P<name>\w+)\s*;", re.MULTILINE
)

_RELATIVE_ROOTS = ("crate", "self", "super")


def _visibility(raw: str | None) -> Visibility:
    if not raw:
        return Visibility.PRIVATE
    if "(" in raw:
        return Visibility.INTERNAL
    return Visibility.PUBLIC


class RustParser(LanguageParser):
    """Extracts Rust items; fns inside impl/trait blocks become methods."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []

        blocks: List[LineRange] = []
        for match in _IMPL_PATTERN.finditer(text):
            line = index.line_at(match.start())
            blocks.append(brace_range(index, line, match.end(), lifetimes=True))

        simple = (
            (_STRUCT_PATTERN, SymbolKind.STRUCT, True),
            (_ENUM_PATTERN, SymbolKind.ENUM, True),
            (_TRAIT_PATTERN, SymbolKind.TRAIT, True),
            (_MOD_PATTERN, SymbolKind.MODULE, True),
            (_CONST_PATTERN, SymbolKind.CONST, False),
            (_TYPE_PATTERN, SymbolKind.TYPE, False),
        )
        for pattern, kind, has_body in simple:
            for match in pattern.finditer(text):
                line = index.line_at(match.start())
                if has_body:
                    line_range = brace_range(index, line, match.end(), lifetimes=True)
                else:
                    line_range = LineRange.single(line)
                if kind is SymbolKind.TRAIT:
                    blocks.append(line_range)
                symbols.append(
                    make_symbol(
                        kind,
                        match.group("name"),
                        line_range,
                        _visibility(match.group("vis")),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("///",)),
                    )
                )

        for match in _FN_PATTERN.finditer(text):
            line = index.line_at(match.start())
            kind = SymbolKind.METHOD if enclosing(blocks, line) else SymbolKind.FUNCTION
            symbols.append(
                make_symbol(
                    kind,
                    match.group("name"),
                    brace_range(index, line, match.end(), lifetimes=True),
                    _visibility(match.group("vis")),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("///",)),
                )
            )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _USE_PATTERN.finditer(text):
            segments = [part for part in match.group("path").split("::") if part]
            while segments and segments[0] in _RELATIVE_ROOTS:
                segments.pop(0)
            if segments:
                found.append((match.start(), segments[0]))
        for match in _MOD_DECL_PATTERN.finditer(text):
            found.append((match.start(), match.group("name")))
        return in_order(found)
