"""Go declarations; exported names start with an uppercase letter."""

from __future__ import annotations

import re
from typing import List, Tuple

from .base import LanguageParser
from .scanning import (
    LineIndex,
    brace_range,
    finalize,
    in_order,
    leading_comment,
    make_symbol,
    signature_from_line,
    visibility_from_flag,
)
from ..models import LineRange, Symbol, SymbolKind

_FUNC_PATTERN = re.compile(
    r"^func\s+(?P<receiver>\([^)]+\)\s+)?(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\(", re.MULTILINE
)
_STRUCT_PATTERN = re.compile(r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+struct\b", re.MULTILINE)
_INTERFACE_PATTERN = re.compile(
    r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+interface\b", re.MULTILINE
)
_TYPE_PATTERN = re.compile(
    r"^type\s+(?P<name>\w+)\s+(?!struct\b|interface\b)(?:=\s*)?[\w.*\[\]]", re.MULTILINE
)
_CONST_PATTERN = re.compile(r"^(?:const|var)\s+(?P<name>\w+)(?:\s+[\w.*\[\]]+)?\s*=", re.MULTILINE)

_IMPORT_BLOCK_PATTERN = re.compile(r"^import\s*\((?P<body>[^)]*)\)", re.MULTILINE)
_IMPORT_LINE_PATTERN = re.compile(r"^\s*(?:[\w.]+\s+)?\"(?P<path>[^\"]+)\"\s*$", re.MULTILINE)
_SINGLE_IMPORT_PATTERN = re.compile(r"^import\s+(?:[\w.]+\s+)?\"(?P<path>[^\"]+)\"", re.MULTILINE)


def _exported(name: str) -> bool:
    return name[:1].isupper()


def _package_name(import_path: str) -> str:
    return import_path.rstrip("/").rsplit("/", 1)[-1]


class GoParser(LanguageParser):
    """Extracts funcs (methods when a receiver is present), types and consts."""

    def parse_symbols(self, text: str) -> List[Symbol]:
        index = LineIndex(text)
        symbols: List[Symbol] = []

        for match in _FUNC_PATTERN.finditer(text):
            name = match.group("name")
            line = index.line_at(match.start())
            kind = SymbolKind.METHOD if match.group("receiver") else SymbolKind.FUNCTION
            symbols.append(
                make_symbol(
                    kind,
                    name,
                    brace_range(index, line, match.end(), quotes="\"'`"),
                    visibility_from_flag(_exported(name)),
                    signature=signature_from_line(index, line),
                    doc_comment=leading_comment(index.lines, line, ("//",)),
                )
            )

        for pattern, kind in ((_STRUCT_PATTERN, SymbolKind.STRUCT), (_INTERFACE_PATTERN, SymbolKind.INTERFACE)):
            for match in pattern.finditer(text):
                name = match.group("name")
                line = index.line_at(match.start())
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        brace_range(index, line, match.end(), quotes="\"'`"),
                        visibility_from_flag(_exported(name)),
                        signature=signature_from_line(index, line),
                        doc_comment=leading_comment(index.lines, line, ("//",)),
                    )
                )

        for pattern, kind in ((_TYPE_PATTERN, SymbolKind.TYPE), (_CONST_PATTERN, SymbolKind.CONST)):
            for match in pattern.finditer(text):
                name = match.group("name")
                line = index.line_at(match.start())
                symbols.append(
                    make_symbol(
                        kind,
                        name,
                        LineRange.single(line),
                        visibility_from_flag(_exported(name)),
                        signature=signature_from_line(index, line),
                    )
                )

        return finalize(symbols)

    def parse_imports(self, text: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in _SINGLE_IMPORT_PATTERN.finditer(text):
            found.append((match.start(), _package_name(match.group("path"))))
        for block in _IMPORT_BLOCK_PATTERN.finditer(text):
            body_start = block.start("body")
            for line_match in _IMPORT_LINE_PATTERN.finditer(block.group("body")):
                found.append((body_start + line_match.start(), _package_name(line_match.group("path"))))
        return in_order(found)
