"""Shared text scanning helpers for the pattern-based parsers.

None of these helpers raise on malformed input: an unterminated block or a
missing opening brace simply yields ``None`` and callers fall back to a
single-line range.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from typing import Iterable, List, Optional, Sequence, Tuple

from ..models import LineRange, Symbol, SymbolKind, Visibility

CONTROL_FLOW_KEYWORDS = frozenset({"if", "for", "while", "switch", "catch"})

_QUOTES = "\"'"
_CHAR_LITERAL = re.compile(r"'(?:\\.|\\u\{[0-9a-fA-F]+\}|[^\\'\n])'")


class LineIndex:
    """Maps character offsets to 1-based line numbers."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.lines = [line.rstrip("\r") for line in text.split("\n")]
        self._starts = [0]
        for match in re.finditer("\n", text):
            self._starts.append(match.end())

    def line_at(self, offset: int) -> int:
        return bisect_right(self._starts, offset)

    def line_text(self, line: int) -> str:
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return ""


def find_brace_end(
    text: str, start: int, *, quotes: str = _QUOTES, lifetimes: bool = False
) -> Optional[int]:
    """Return the offset of the brace closing the block that opens at/after ``start``.

    Braces inside string or char literals are ignored. A ``;`` seen before the
    first ``{`` means the declaration has no body. With ``lifetimes`` set, a
    single quote only opens a literal when it forms a complete char literal
    (so Rust's ``'a`` is skipped).
    """
    depth = 0
    opened = False
    quote: Optional[str] = None
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if quote is not None:
            if char == quote and text[index - 1] != "\\":
                quote = None
            index += 1
            continue
        if char in quotes:
            if char == "'" and lifetimes:
                literal = _CHAR_LITERAL.match(text, index)
                if literal is not None:
                    index = literal.end()
                    continue
                index += 1
                continue
            quote = char
        elif char == "{":
            depth += 1
            opened = True
        elif char == "}":
            if opened:
                depth -= 1
                if depth == 0:
                    return index
        elif char == ";" and not opened:
            return None
        index += 1
    return None


def brace_range(
    index: LineIndex, line: int, start: int, *, quotes: str = _QUOTES, lifetimes: bool = False
) -> LineRange:
    end = find_brace_end(index.text, start, quotes=quotes, lifetimes=lifetimes)
    if end is None:
        return LineRange.single(line)
    return LineRange(line, index.line_at(end))


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def find_indent_end(
    lines: Sequence[str], start_line: int, base_indent: int, comment: str = "#"
) -> int:
    """Return the last line indented deeper than ``base_indent`` after ``start_line``."""
    end_line = start_line
    for position in range(start_line, len(lines)):
        line = lines[position]
        stripped = line.strip()
        if not stripped or stripped.startswith(comment):
            continue
        if indent_of(line) <= base_indent:
            break
        end_line = position + 1
    return end_line


def leading_comment(
    lines: Sequence[str], line: int, prefixes: Iterable[str] = ("///", "//")
) -> Optional[str]:
    """Collect the comment block directly above ``line`` (1-based).

    Attribute and decorator lines (``#[...]``, ``@...``) between the comment and
    the declaration are skipped. Block comments (``/** ... */``) are supported.
    """
    prefixes = tuple(prefixes)
    position = line - 2
    while position >= 0:
        stripped = lines[position].strip()
        if stripped.startswith("#[") or stripped.startswith("@"):
            position -= 1
            continue
        break

    collected: List[str] = []
    if position >= 0 and lines[position].strip().endswith("*/"):
        while position >= 0:
            stripped = lines[position].strip()
            collected.append(_strip_block_comment(stripped))
            if stripped.startswith("/*"):
                break
            position -= 1
        else:
            return None
    else:
        while position >= 0:
            stripped = lines[position].strip()
            prefix = next((p for p in prefixes if stripped.startswith(p)), None)
            if prefix is None:
                break
            collected.append(stripped[len(prefix):].strip())
            position -= 1

    body = [part for part in reversed(collected) if part]
    if not body:
        return None
    return "\n".join(body)


def _strip_block_comment(line: str) -> str:
    for token in ("/**", "/*"):
        if line.startswith(token):
            line = line[len(token):]
            break
    if line.endswith("*/"):
        line = line[:-2]
    return line.strip().lstrip("*").strip()


def signature_from_line(index: LineIndex, line: int) -> Optional[str]:
    text = index.line_text(line).strip().rstrip("{").rstrip()
    return text or None


def signature_from_match(matched: str, terminator: str) -> str:
    """Collapse a multi-line declaration match into a one-line signature."""
    collapsed = " ".join(matched.split())
    if collapsed.endswith(terminator):
        collapsed = collapsed[: -len(terminator)]
    return collapsed.strip()


def visibility_from_flag(public: bool) -> Visibility:
    return Visibility.PUBLIC if public else Visibility.PRIVATE


def underscore_visibility(name: str) -> Visibility:
    return Visibility.PRIVATE if name.startswith("_") else Visibility.PUBLIC


def make_symbol(
    kind: SymbolKind,
    name: str,
    line_range: LineRange,
    visibility: Visibility,
    signature: Optional[str] = None,
    doc_comment: Optional[str] = None,
) -> Symbol:
    return Symbol(
        kind=kind,
        name=name,
        line_range=line_range,
        visibility=visibility,
        signature=signature,
        doc_comment=doc_comment,
    )


def finalize(symbols: Iterable[Symbol]) -> List[Symbol]:
    """Sort by start line and drop repeated ``(name, start)`` pairs (first wins)."""
    ordered = sorted(symbols, key=lambda symbol: symbol.line_range.start)
    seen = set()
    result: List[Symbol] = []
    for symbol in ordered:
        key = (symbol.name, symbol.line_range.start)
        if key in seen:
            continue
        seen.add(key)
        result.append(symbol)
    return result


def unique(items: Iterable[str]) -> List[str]:
    """Order-preserving de-duplication that also drops empty identifiers."""
    seen = set()
    result: List[str] = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def enclosing(ranges: Sequence[LineRange], line: int) -> bool:
    return any(block.start < line <= block.end for block in ranges)


def in_order(found: Iterable[Tuple[int, str]]) -> List[str]:
    """Unique identifiers from ``(offset, identifier)`` pairs, by first offset."""
    return unique(identifier for _, identifier in sorted(found, key=lambda item: item[0]))
