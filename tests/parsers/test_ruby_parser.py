"""Tests for the Ruby extractor."""

from __future__ import annotations

import textwrap

from codemap.models import LineRange, SymbolKind, Visibility
from codemap.parsers.ruby import RubyParser, find_ruby_end

SOURCE = textwrap.dedent(
    """
    require 'json'
    require_relative 'helpers/format'

    # Handles billing.
    module Billing
      class Invoice < Base
        attr_reader :total, :items
        TAX_RATE = 0.2

        def self.build(items)
          new(items)
        end

        def initialize(items)
          @items = items
          @items.each do |item|
            puts item
          end
        end

        def paid?
          true
        end

        private

        def compute
          if @items.empty?
            0
          else
            1
          end
        end
      end
    end
    """
).lstrip("\n")


def test_ruby_symbols() -> None:
    symbols = RubyParser().parse_symbols(SOURCE)

    assert [(symbol.name, symbol.kind, symbol.line_range) for symbol in symbols] == [
        ("Billing", SymbolKind.MODULE, LineRange(5, 35)),
        ("Invoice", SymbolKind.CLASS, LineRange(6, 34)),
        ("total", SymbolKind.CONST, LineRange.single(7)),
        ("items", SymbolKind.CONST, LineRange.single(7)),
        ("TAX_RATE", SymbolKind.CONST, LineRange.single(8)),
        ("self.build", SymbolKind.FUNCTION, LineRange(10, 12)),
        ("initialize", SymbolKind.METHOD, LineRange(14, 19)),
        ("paid?", SymbolKind.METHOD, LineRange(21, 23)),
        ("compute", SymbolKind.METHOD, LineRange(27, 33)),
    ]
    by_name = {symbol.name: symbol for symbol in symbols}
    assert by_name["Billing"].doc_comment == "Handles billing."
    assert by_name["paid?"].visibility is Visibility.PUBLIC
    assert by_name["compute"].visibility is Visibility.PRIVATE


def test_ruby_inline_private_def() -> None:
    source = "class A\n  private def secret\n    1\n  end\n\n  def open\n  end\nend\n"

    symbols = RubyParser().parse_symbols(source)

    assert [(symbol.name, symbol.line_range, symbol.visibility) for symbol in symbols] == [
        ("A", LineRange(1, 8), Visibility.PUBLIC),
        ("secret", LineRange(2, 4), Visibility.PRIVATE),
        ("open", LineRange(6, 7), Visibility.PUBLIC),
    ]


def test_find_ruby_end_ignores_endless_defs() -> None:
    lines = ["class A", "  def one = 1", "  def two", "  end", "end"]

    assert find_ruby_end(lines, 1) == 5


def test_ruby_imports_mark_relative_requires() -> None:
    assert RubyParser().parse_imports(SOURCE) == ["json", "./helpers/format"]


def test_ruby_private_section_line_stays_out_of_the_def() -> None:
    source = "class A\n  private\n\n  def compute\n    1\n  end\nend\n"

    symbols = RubyParser().parse_symbols(source)

    assert [(symbol.name, symbol.line_range, symbol.visibility) for symbol in symbols] == [
        ("A", LineRange(1, 7), Visibility.PUBLIC),
        ("compute", LineRange(4, 6), Visibility.PRIVATE),
    ]
