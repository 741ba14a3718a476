"""Extraction of knowledge markers (TODO, SAFETY, RULE, ...) from comments."""

from __future__ import annotations

import re
from typing import List, Optional

from .models import MemoryEntry, MemoryKind

_LEADER = r"(?://|#|/\*+|\*)"

_STANDARD_PATTERN = re.compile(
    _LEADER + r"[ \t]*\b(?P<keyword>TODO|FIXME|XXX|BUG|HACK|WARNING|WARN|NOTE)\b[: \t]*(?P<message>.*)",
    re.IGNORECASE,
)
_SAFETY_PATTERN = re.compile(
    _LEADER + r"[ \t]*\b(?P<keyword>SAFETY|INVARIANT|GUARANTEES?)\b[: \t]*(?P<message>.*)",
    re.IGNORECASE,
)
_RULE_PATTERN = re.compile(
    r"^[ \t]*" + _LEADER + r"[ \t]*\b(?:RULE|POLICY|ACCORDING[ \t]+TO)[:!]?[ \t]+(?P<message>.+)",
    re.IGNORECASE,
)
_DEPRECATED_PATTERN = re.compile(
    _LEADER + r"[ \t]*(?:\bDEPRECATED\b|@deprecated\b)[: \t]*(?P<message>.*)",
    re.IGNORECASE,
)

_KIND_BY_KEYWORD = {
    "TODO": MemoryKind.TODO,
    "FIXME": MemoryKind.FIXME,
    "XXX": MemoryKind.FIXME,
    "BUG": MemoryKind.FIXME,
    "HACK": MemoryKind.HACK,
    "WARNING": MemoryKind.WARNING,
    "WARN": MemoryKind.WARNING,
    "NOTE": MemoryKind.NOTE,
    "SAFETY": MemoryKind.SAFETY,
    "INVARIANT": MemoryKind.INVARIANT,
    "GUARANTEE": MemoryKind.INVARIANT,
    "GUARANTEES": MemoryKind.INVARIANT,
}

DEPRECATED_FALLBACK = "Deprecated"


def extract_memory_markers(text: str, source_file: str) -> List[MemoryEntry]:
    """Return every marker found in ``text`` sorted by line number.

    Matching is case-insensitive. Markers with an empty message are dropped,
    except deprecations which fall back to ``"Deprecated"``.
    """
    lines = text.split("\n")
    entries: List[MemoryEntry] = []

    for line_number, line in enumerate(lines, start=1):
        for pattern in (_STANDARD_PATTERN, _SAFETY_PATTERN):
            for match in pattern.finditer(line):
                message = _clean(match.group("message"))
                if not message:
                    continue
                kind = _KIND_BY_KEYWORD[match.group("keyword").upper()]
                entries.append(MemoryEntry(kind, message, source_file, line_number))

        rule = _RULE_PATTERN.match(line)
        if rule is not None:
            message = _clean(rule.group("message"))
            if message:
                entries.append(MemoryEntry(MemoryKind.BUSINESS_RULE, message, source_file, line_number))

        for match in _DEPRECATED_PATTERN.finditer(line):
            message = _clean(match.group("message")) or DEPRECATED_FALLBACK
            entries.append(MemoryEntry(MemoryKind.DEPRECATED, message, source_file, line_number))

    entries.sort(key=lambda entry: entry.line_number)
    return entries


def _clean(message: Optional[str]) -> str:
    if not message:
        return ""
    message = message.strip()
    if message.endswith("*/"):
        message = message[:-2].rstrip()
    return message
