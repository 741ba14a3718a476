"""Tests for the Python extractor."""

from __future__ import annotations

import textwrap

from codemap.models import LineRange, SymbolKind, Visibility
from codemap.parsers.python import PythonParser

SOURCE = textwrap.dedent(
    '''
    """Module doc."""
    import os, sys
    from .models import User
    from collections.abc import Mapping

    MAX_SIZE = 10


    class Service:
        """Handles requests."""

        def handle(self):
            return 1

        def _helper(self):
            pass


    def main():
        pass
    '''
).lstrip("\n")


def test_python_symbols_use_indentation_ranges() -> None:
    symbols = PythonParser().parse_symbols(SOURCE)

    assert [(symbol.name, symbol.kind) for symbol in symbols] == [
        ("MAX_SIZE", SymbolKind.CONST),
        ("Service", SymbolKind.CLASS),
        ("handle", SymbolKind.METHOD),
        ("_helper", SymbolKind.METHOD),
        ("main", SymbolKind.FUNCTION),
    ]
    by_name = {symbol.name: symbol for symbol in symbols}
    assert by_name["Service"].line_range == LineRange(9, 16)
    assert by_name["Service"].doc_comment == "Handles requests."
    assert by_name["handle"].line_range == LineRange(12, 13)
    assert by_name["_helper"].visibility is Visibility.PRIVATE
    assert by_name["main"].line_range == LineRange(19, 20)
    assert by_name["MAX_SIZE"].line_range == LineRange.single(6)


def test_python_dunder_methods_are_public() -> None:
    source = "class A:\n    def __init__(self):\n        pass\n"

    symbols = PythonParser().parse_symbols(source)

    assert symbols[1].name == "__init__"
    assert symbols[1].visibility is Visibility.PUBLIC


def test_python_imports_keep_relative_dots() -> None:
    assert PythonParser().parse_imports(SOURCE) == ["os", "sys", ".models", "collections"]
