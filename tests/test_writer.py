"""Tests for the documentation writer."""

from __future__ import annotations

from pathlib import Path

import pytest

from codemap.writer import MODULES_DIRNAME, OutputError, OutputWriter


def test_write_module_creates_documents(tmp_path: Path) -> None:
    writer = OutputWriter(tmp_path / "out")

    paths = writer.write_module("src", {"MODULE.md": "# src\n", "outline.md": "# Outline\n"})

    assert paths == [
        tmp_path / "out" / MODULES_DIRNAME / "src" / "MODULE.md",
        tmp_path / "out" / MODULES_DIRNAME / "src" / "outline.md",
    ]
    assert paths[0].read_text(encoding="utf-8") == "# src\n"
    assert writer.existing_module_slugs() == ["src"]
    assert sorted(path.name for path in (tmp_path / "out" / MODULES_DIRNAME / "src").iterdir()) == [
        "MODULE.md",
        "outline.md",
    ]


def test_dry_run_records_without_writing(tmp_path: Path) -> None:
    writer = OutputWriter(tmp_path / "out", dry_run=True)

    writer.write_text("INDEX.md", "# Index\n")

    assert writer.written == [tmp_path / "out" / "INDEX.md"]
    assert not (tmp_path / "out").exists()


def test_remove_module(tmp_path: Path) -> None:
    writer = OutputWriter(tmp_path / "out")
    writer.write_module("old", {"MODULE.md": "x"})

    writer.remove_module("old")
    writer.remove_module("never-existed")

    assert writer.existing_module_slugs() == []
    assert writer.removed == [tmp_path / "out" / MODULES_DIRNAME / "old"]


def test_write_failure_raises_output_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(OutputError):
        OutputWriter(blocker).write_text("INDEX.md", "x")
