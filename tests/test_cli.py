"""CLI parser behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from codemap.cli import _build_parser, main


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose == 1
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "-vv"])
    assert args.verbose == 2
    assert args.command == "analyze"


def test_cli_accepts_force_and_dry_run_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "some/repo", "--force", "--dry-run"])
    assert args.path == "some/repo"
    assert args.force is True
    assert args.dry_run is True


def test_cli_serve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--host", "0.0.0.0", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "0.0.0.0"
    assert args.port == 9000


def test_cli_requires_command() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_main_analyze_then_check(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    (repo / "src").mkdir(parents=True)
    (repo / "src" / "lib.rs").write_text("pub fn run() {}\n", encoding="utf-8")

    assert main(["check", str(repo)]) == 1
    assert main(["analyze", str(repo)]) == 0
    assert (repo / ".codemap" / "INDEX.md").is_file()
    assert main(["check", str(repo)]) == 0

    output = capsys.readouterr().out
    assert "Documentation is stale" in output
    assert "Documentation is up to date" in output


def test_main_analyze_dry_run_writes_nothing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "main.py").write_text("def main():\n    pass\n", encoding="utf-8")

    assert main(["analyze", str(repo), "--dry-run"]) == 0

    assert not (repo / ".codemap").exists()
    assert "Would regenerate" in capsys.readouterr().out


def test_main_reports_missing_repository(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "missing")])
    assert excinfo.value.code == 1
