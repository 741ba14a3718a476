"""Tests for comment marker extraction."""

from __future__ import annotations

import textwrap

from codemap.memory import DEPRECATED_FALLBACK, extract_memory_markers
from codemap.models import MemoryKind, Priority

SOURCE = textwrap.dedent(
    """
    // TODO: add caching
    # FIXME handle unicode
    /* WARNING: not thread safe */
    // SAFETY: pointer is valid
    // RULE: totals must balance
    /// @deprecated
    // NOTE: see docs
    // todo:
    x = 1  # hack: temporary workaround
    """
).lstrip("\n")


def test_markers_are_classified_and_ordered() -> None:
    entries = extract_memory_markers(SOURCE, "src/lib.rs")

    assert [(entry.kind, entry.line_number, entry.content) for entry in entries] == [
        (MemoryKind.TODO, 1, "add caching"),
        (MemoryKind.FIXME, 2, "handle unicode"),
        (MemoryKind.WARNING, 3, "not thread safe"),
        (MemoryKind.SAFETY, 4, "pointer is valid"),
        (MemoryKind.BUSINESS_RULE, 5, "totals must balance"),
        (MemoryKind.DEPRECATED, 6, DEPRECATED_FALLBACK),
        (MemoryKind.NOTE, 7, "see docs"),
        (MemoryKind.HACK, 9, "temporary workaround"),
    ]
    assert all(entry.source_file == "src/lib.rs" for entry in entries)


def test_marker_priorities() -> None:
    entries = {entry.kind: entry for entry in extract_memory_markers(SOURCE, "a.py")}

    assert entries[MemoryKind.WARNING].priority is Priority.HIGH
    assert entries[MemoryKind.SAFETY].priority is Priority.HIGH
    assert entries[MemoryKind.BUSINESS_RULE].priority is Priority.HIGH
    assert entries[MemoryKind.DEPRECATED].priority is Priority.HIGH
    assert entries[MemoryKind.TODO].priority is Priority.MEDIUM
    assert entries[MemoryKind.NOTE].priority is Priority.MEDIUM


def test_markers_require_a_comment_leader() -> None:
    assert extract_memory_markers('print("TODO list")\nlet rule = 1;\n', "a.py") == []


def test_rule_marker_must_start_the_line() -> None:
    entries = extract_memory_markers("x = 1  # RULE: not a rule\n  # POLICY: refunds need approval\n", "a.py")

    assert [(entry.kind, entry.line_number) for entry in entries] == [(MemoryKind.BUSINESS_RULE, 2)]
    assert entries[0].content == "refunds need approval"


def test_empty_text_has_no_markers() -> None:
    assert extract_memory_markers("", "a.py") == []
