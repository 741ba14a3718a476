"""Tests for codemap.repo_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from codemap.models import Language
from codemap.repo_scanner import RepoScanner, count_lines, parse_gitignore


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scan_classifies_source_files(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    _write(repo_root / "src" / "app.py", "print('hi')\n")
    _write(repo_root / "src" / "lib.rs", "pub fn a() {}\n")
    _write(repo_root / "web" / "index.tsx", "export const A = () => null;\n")
    _write(repo_root / "docs" / "overview.md", "# Overview\n")
    _write(repo_root / "bin" / "tool", "#!/usr/bin/env python3\nprint('tool')\n")
    _write(repo_root / ".venv" / "should_ignore.py", "print('nope')\n")
    _write(repo_root / "node_modules" / "dep" / "index.js", "module.exports = 1;\n")

    entries = RepoScanner().scan(repo_root)
    by_path = {entry.relative_path: entry for entry in entries}

    assert list(by_path) == ["bin/tool", "src/app.py", "src/lib.rs", "web/index.tsx"]
    assert by_path["src/app.py"].language is Language.PYTHON
    assert by_path["src/lib.rs"].language is Language.RUST
    assert by_path["web/index.tsx"].language is Language.TYPESCRIPT
    assert by_path["bin/tool"].language is Language.PYTHON
    assert by_path["src/app.py"].path == (repo_root / "src" / "app.py").resolve()
    assert by_path["src/app.py"].line_count == 1
    assert by_path["src/app.py"].size == len("print('hi')\n")


def test_scan_rejects_missing_directory(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(FileNotFoundError) as excinfo:
        RepoScanner().scan(missing)

    assert str(missing) in str(excinfo.value)


def test_scan_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.py"
    target.write_text("x = 1\n", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        RepoScanner().scan(target)


def test_scan_respects_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    _write(repo_root / ".gitignore", "generated/\n*.gen.py\n!keep.gen.py\n")
    _write(repo_root / "src" / "main.py", "print('ok')\n")
    _write(repo_root / "generated" / "models.py", "X = 1\n")
    _write(repo_root / "src" / "schema.gen.py", "Y = 1\n")
    _write(repo_root / "src" / "keep.gen.py", "Z = 1\n")

    paths = [entry.relative_path for entry in RepoScanner().scan(repo_root)]
    assert paths == ["src/keep.gen.py", "src/main.py"]

    unfiltered = [entry.relative_path for entry in RepoScanner(respect_gitignore=False).scan(repo_root)]
    assert "generated/models.py" in unfiltered


def test_scan_skips_binary_and_minified_files(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    (repo_root / "blob.py").write_bytes(b"x = 1\n\x00\x01\x02")
    _write(repo_root / "app.min.js", "var a=" + "1+" * 200 + "1;\n")
    _write(repo_root / "app.js", "const a = 1;\n")

    paths = [entry.relative_path for entry in RepoScanner().scan(repo_root)]

    assert paths == ["app.js"]


def test_scan_flags_large_files_and_applies_filters(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    _write(repo_root / "big.py", "x = 1\n" * 5)
    _write(repo_root / "small.py", "x = 1\n")
    _write(repo_root / "main.go", "package main\n")
    _write(repo_root / "vendorish" / "skip.py", "x = 1\n")
    _write(repo_root / "docs_out" / "gen.py", "x = 1\n")

    scanner = RepoScanner(threshold=3, exclude_paths=["vendorish/"], languages=["Python"], output="docs_out")
    entries = {entry.relative_path: entry for entry in scanner.scan(repo_root)}

    assert list(entries) == ["big.py", "small.py"]
    assert entries["big.py"].is_large is True
    assert entries["small.py"].is_large is False


def test_parse_gitignore_skips_comments(tmp_path: Path) -> None:
    gitignore = tmp_path / ".gitignore"
    gitignore.write_text("# comment\n\n/build/\n!important.log\n", encoding="utf-8")

    rules = parse_gitignore(gitignore)

    assert [(rule.pattern, rule.anchored, rule.directory_only, rule.negate) for rule in rules] == [
        ("build", True, True, False),
        ("important.log", False, False, True),
    ]


def test_count_lines() -> None:
    assert count_lines("") == 0
    assert count_lines("a") == 1
    assert count_lines("a\nb\n") == 2
    assert count_lines("a\nb") == 2
