"""Tests for the C extractor."""

from __future__ import annotations

import textwrap

from codemap.models import LineRange, SymbolKind, Visibility
from codemap.parsers.c import ANONYMOUS, CParser

SOURCE = textwrap.dedent(
    """
    #include <stdio.h>
    #include "util.h"

    // Adds two numbers.
    int add(int a, int b) {
        return a + b;
    }

    static int helper(void);

    typedef struct {
        int x;
    } Point;

    enum Color { RED, GREEN };

    typedef unsigned long size_type;
    """
).lstrip("\n")


def test_c_symbols() -> None:
    symbols = CParser().parse_symbols(SOURCE)

    assert [(symbol.name, symbol.kind, symbol.line_range) for symbol in symbols] == [
        ("add", SymbolKind.FUNCTION, LineRange(5, 7)),
        ("helper", SymbolKind.FUNCTION, LineRange.single(9)),
        (ANONYMOUS, SymbolKind.STRUCT, LineRange(11, 13)),
        ("Point", SymbolKind.TYPE, LineRange.single(13)),
        ("Color", SymbolKind.ENUM, LineRange.single(15)),
        ("size_type", SymbolKind.TYPE, LineRange.single(17)),
    ]
    by_name = {symbol.name: symbol for symbol in symbols}
    assert by_name["add"].visibility is Visibility.PUBLIC
    assert by_name["add"].doc_comment == "Adds two numbers."
    assert by_name["add"].signature == "int add(int a, int b)"
    assert by_name["helper"].visibility is Visibility.PRIVATE


def test_c_imports_only_quoted_includes() -> None:
    assert CParser().parse_imports(SOURCE) == ["util.h"]
