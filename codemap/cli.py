"""CLI entrypoints for codemap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging
from .pipeline import Pipeline, RunResult, StalenessReport


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=argparse.SUPPRESS if suppress_default else 0,
        help="Increase log verbosity (repeat for debug output).",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codemap",
        description="Map a source tree into module documentation and keep it fresh.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Regenerate documentation for modules that changed since the last run.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_path_argument(analyze_parser)
    analyze_parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate every module regardless of the manifest.",
    )
    analyze_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be written without touching disk.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Exit with status 1 when the documentation is stale.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_path_argument(check_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the map over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind address (defaults to config).")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (defaults to config).")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for codemap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbosity=int(args.verbose), log_file=args.log_file)

    pipeline = Pipeline()

    if args.command == "analyze":
        try:
            result = pipeline.run(args.path, force=bool(args.force), dry_run=bool(args.dry_run))
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"codemap analyze failed: {exc}\nRun with --verbose for more details.\n")
        _print_run(result)
        return 0

    if args.command == "check":
        try:
            report = pipeline.check(args.path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(2, f"{exc}\n")
        except RuntimeError as exc:
            parser.exit(2, f"codemap check failed: {exc}\n")
        _print_report(report)
        return 1 if report.is_stale else 0

    if args.command == "serve":
        from .service import run_service

        try:
            config = load_config(Path(args.path))
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        host = args.host or config.service.host
        port = args.port or config.service.port
        print(f"Serving {config.root} on http://{host}:{port}")
        run_service(config.root, host=host, port=port)
        return 0

    parser.exit(1, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return 1


def _print_run(result: RunResult) -> None:
    prefix = "Would regenerate" if result.dry_run else "Regenerated"
    print(
        f"{prefix} {len(result.regenerated)} of {len(result.modules)} modules "
        f"from {result.files_scanned} files into {_relativize(result.output_dir)}"
    )
    for slug in result.regenerated:
        print(f"  + {slug}")
    for slug in result.removed:
        print(f"  - {slug}")
    if result.dry_run:
        for path in result.written:
            print(f"  would write {_relativize(path)}")


def _print_report(report: StalenessReport) -> None:
    if not report.is_stale:
        print("Documentation is up to date")
        return
    print("Documentation is stale")
    for label, slugs in (("stale", report.stale), ("new", report.new), ("removed", report.removed)):
        for slug in slugs:
            print(f"  {label}: {slug}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
