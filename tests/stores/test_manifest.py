"""Tests for the manifest store."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

import pytest

from codemap.models import ModuleState
from codemap.stores.manifest import (
    MANIFEST_FILENAME,
    Manifest,
    ManifestError,
    calculate_module_state,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_module_state_ignores_member_order(tmp_path: Path) -> None:
    _write(tmp_path / "a.rs", "fn a() {}\n")
    _write(tmp_path / "b.rs", "fn b() {}\n")

    forward = calculate_module_state(tmp_path, ["a.rs", "b.rs"])
    backward = calculate_module_state(tmp_path, ["b.rs", "a.rs"])

    assert forward == backward
    assert forward.file_count == 2
    assert forward.latest_mtime == max(
        int((tmp_path / "a.rs").stat().st_mtime), int((tmp_path / "b.rs").stat().st_mtime)
    )


def test_module_state_skips_unreadable_members(tmp_path: Path) -> None:
    _write(tmp_path / "a.rs", "fn a() {}\n")

    state = calculate_module_state(tmp_path, ["a.rs", "gone.rs"])

    assert state.file_count == 2
    assert state.latest_mtime == int((tmp_path / "a.rs").stat().st_mtime)


def test_needs_regeneration_rules(tmp_path: Path) -> None:
    _write(tmp_path / "a.rs", "fn a() {}\n")
    state = calculate_module_state(tmp_path, ["a.rs"])
    manifest = Manifest()

    assert manifest.needs_regeneration("src", state)

    manifest.update_module("src", state)
    assert not manifest.needs_regeneration("src", state)

    later = int(state.latest_mtime) + 100
    os.utime(tmp_path / "a.rs", (later, later))
    assert manifest.needs_regeneration("src", calculate_module_state(tmp_path, ["a.rs"]))

    _write(tmp_path / "b.rs", "fn b() {}\n")
    os.utime(tmp_path / "b.rs", (state.latest_mtime, state.latest_mtime))
    os.utime(tmp_path / "a.rs", (state.latest_mtime, state.latest_mtime))
    grown = calculate_module_state(tmp_path, ["a.rs", "b.rs"])
    assert grown.latest_mtime == state.latest_mtime
    assert manifest.needs_regeneration("src", grown)


def test_older_mtime_with_same_membership_is_stale(tmp_path: Path) -> None:
    _write(tmp_path / "a.rs", "fn a() {}\n")
    os.utime(tmp_path / "a.rs", (2_000_000_000, 2_000_000_000))
    manifest = Manifest()
    manifest.update_module("root", calculate_module_state(tmp_path, ["a.rs"]))

    os.utime(tmp_path / "a.rs", (1_000_000_000, 1_000_000_000))
    restored = calculate_module_state(tmp_path, ["a.rs"])

    assert restored.latest_mtime == 1_000_000_000
    assert manifest.needs_regeneration("root", restored)


def test_manifest_save_and_load(tmp_path: Path) -> None:
    manifest = Manifest({"src": ModuleState(latest_mtime=10, file_count=2, files_hash=2**63 + 5)})

    path = manifest.save(tmp_path / "out")

    assert path == tmp_path / "out" / MANIFEST_FILENAME
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["version"] == "1"
    assert isinstance(data["generated_at"], int)
    assert not isinstance(data["generated_at"], bool)
    assert data["modules"]["src"] == {"latest_mtime": 10, "file_count": 2, "files_hash": 2**63 + 5}
    assert os.listdir(tmp_path / "out") == [MANIFEST_FILENAME]

    loaded = Manifest.load(tmp_path / "out")
    assert loaded.modules == manifest.modules


def test_manifest_load_tolerates_missing_and_malformed(tmp_path: Path) -> None:
    assert Manifest.load(tmp_path).modules == {}

    (tmp_path / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")
    assert Manifest.load(tmp_path).modules == {}

    (tmp_path / MANIFEST_FILENAME).write_text(
        json.dumps({"modules": {"ok": {"latest_mtime": 1, "file_count": 1, "files_hash": 1}, "bad": {"latest_mtime": "x"}}}),
        encoding="utf-8",
    )
    assert list(Manifest.load(tmp_path).modules) == ["ok"]


def test_prune_modules_returns_removed_slugs() -> None:
    state = ModuleState(latest_mtime=1, file_count=1, files_hash=1)
    manifest = Manifest({"a": state, "b": state, "c": state})

    assert manifest.prune_modules(["b"]) == ["a", "c"]
    assert list(manifest.modules) == ["b"]


def test_manifest_save_reports_io_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ManifestError):
        Manifest().save(blocker / "out")


def test_manifest_generated_at_is_unix_seconds(tmp_path: Path) -> None:
    before = int(time.time())

    Manifest().save(tmp_path)
    data = json.loads((tmp_path / MANIFEST_FILENAME).read_text(encoding="utf-8"))

    assert isinstance(data["generated_at"], int)
    assert before <= data["generated_at"] <= int(time.time())
    assert Manifest.load(tmp_path).generated_at == data["generated_at"]


def test_manifest_load_drops_non_integer_generated_at(tmp_path: Path) -> None:
    (tmp_path / MANIFEST_FILENAME).write_text(
        json.dumps({"generated_at": "2024-01-01T00:00:00Z", "modules": {}}), encoding="utf-8"
    )

    assert isinstance(Manifest.load(tmp_path).generated_at, int)
