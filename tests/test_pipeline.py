"""End-to-end tests for the regeneration pipeline."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import List

import pytest

from codemap.config import CodemapConfig
from codemap.models import FileEntry
from codemap.pipeline import Pipeline, find_module
from codemap.repo_scanner import RepoScanner
from codemap.stores.manifest import MANIFEST_FILENAME
from tests._fixtures.repo_builder import RepoBuilder

RUST_PROJECT = {
    "Cargo.toml": """
        [package]
        name = "demo"
        """,
    "src/main.rs": """
        mod util;

        fn main() {
            util::run();
        }
        """,
    "src/util.rs": """
        // TODO: handle errors
        /// Runs the job.
        pub fn run() {}
        """,
}


def _touch_future(path: Path) -> None:
    later = time.time() + 100
    os.utime(path, (later, later))


def test_run_generates_module_documentation(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    root = repo_builder.path()

    result = Pipeline().run(root)

    output = root.resolve() / ".codemap"
    assert result.output_dir == output
    assert result.regenerated == ["root", "src"]
    assert result.skipped == []
    assert result.files_scanned == 2
    assert (output / "INDEX.md").is_file()
    assert (output / MANIFEST_FILENAME).is_file()

    module_dir = output / "modules" / "src"
    assert sorted(path.name for path in module_dir.iterdir()) == ["MODULE.md", "imports.md", "memory.md", "outline.md"]
    outline = (module_dir / "outline.md").read_text(encoding="utf-8")
    assert "| run |" in outline
    assert "| main |" in outline
    assert "handle errors" in (module_dir / "memory.md").read_text(encoding="utf-8")
    assert "- `util`" in (module_dir / "imports.md").read_text(encoding="utf-8")
    assert find_module(result.modules, "src") is not None


def test_second_run_regenerates_nothing(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    pipeline = Pipeline()
    pipeline.run(repo_builder.path())
    index = repo_builder.path() / ".codemap" / "INDEX.md"
    before = index.stat().st_mtime_ns

    result = pipeline.run(repo_builder.path())

    assert result.regenerated == []
    assert result.skipped == ["root", "src"]
    assert index.stat().st_mtime_ns == before


def test_touched_module_is_regenerated(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    repo_builder.write({"lib/helpers.rs": "pub fn help() {}\n"})
    pipeline = Pipeline()
    pipeline.run(repo_builder.path())

    _touch_future(repo_builder.path() / "src" / "util.rs")
    result = pipeline.run(repo_builder.path())

    assert result.regenerated == ["src"]


def test_force_regenerates_everything(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    pipeline = Pipeline()
    pipeline.run(repo_builder.path())

    result = pipeline.run(repo_builder.path(), force=True)

    assert result.regenerated == ["root", "src"]


def test_dry_run_writes_nothing(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)

    result = Pipeline().run(repo_builder.path(), dry_run=True)

    assert result.dry_run is True
    assert result.regenerated == ["root", "src"]
    assert result.written
    assert not (repo_builder.path() / ".codemap").exists()


def test_vanished_module_output_is_removed(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    repo_builder.write({"lib/helpers.rs": "pub fn help() {}\n"})
    pipeline = Pipeline()
    pipeline.run(repo_builder.path())
    lib_dir = repo_builder.path() / ".codemap" / "modules" / "lib"
    assert lib_dir.is_dir()

    repo_builder.remove("lib/helpers.rs")
    result = pipeline.run(repo_builder.path())

    assert result.removed == ["lib"]
    assert not lib_dir.exists()
    assert "modules/lib/" not in (repo_builder.path() / ".codemap" / "INDEX.md").read_text(encoding="utf-8")


def test_check_reports_staleness(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    pipeline = Pipeline()

    before = pipeline.check(repo_builder.path())
    assert before.is_stale
    assert before.new == ["root", "src"]

    pipeline.run(repo_builder.path())
    assert not pipeline.check(repo_builder.path()).is_stale

    repo_builder.write({"tools/gen.py": "def gen():\n    pass\n"})
    _touch_future(repo_builder.path() / "src" / "main.rs")
    report = pipeline.check(repo_builder.path())
    assert report.new == ["tools"]
    assert report.stale == ["src"]
    assert report.removed == []


def test_outline_returns_file_symbols(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    pipeline = Pipeline()

    symbols = pipeline.outline(repo_builder.path(), "src/util.rs")

    assert [symbol.name for symbol in symbols] == ["run"]
    assert symbols[0].doc_comment == "Runs the job."
    with pytest.raises(FileNotFoundError):
        pipeline.outline(repo_builder.path(), "src/missing.rs")


def test_explicit_config_controls_output(repo_builder: RepoBuilder) -> None:
    repo_builder.write(RUST_PROJECT)
    config = CodemapConfig(root=repo_builder.path(), output="map", module_depth=1)

    result = Pipeline(config=config).run(repo_builder.path())

    assert result.output_dir == repo_builder.path() / "map"
    assert (repo_builder.path() / "map" / "INDEX.md").is_file()
    # the output directory is never scanned back in
    assert Pipeline(config=config).run(repo_builder.path()).files_scanned == 2


class _VanishingScanner(RepoScanner):
    """Reports every scanned file, then deletes it before anyone reads it."""

    def scan(self, root: str | Path) -> List[FileEntry]:
        entries = super().scan(root)
        for entry in entries:
            entry.path.unlink()
        return entries


def test_outline_of_unreadable_file_is_empty(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/util.rs": "pub fn run() {}\n"})
    pipeline = Pipeline(_VanishingScanner())

    assert pipeline.outline(repo_builder.path(), "src/util.rs") == []
