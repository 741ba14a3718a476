"""Repository scanning: source discovery, ignore rules and file classification."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .config import DEFAULT_OUTPUT, DEFAULT_THRESHOLD, CodemapConfig
from .logging import get_logger
from .models import FileEntry, Language

_EXCLUDED_DIRS = {
    "node_modules",
    "__pycache__",
    "target",
    "vendor",
    "dist",
    "build",
    "venv",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_BINARY_SNIFF_BYTES = 8192
_MINIFIED_LINE_LENGTH = 200

_logger = get_logger("scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .codemap.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _is_binary(head: bytes) -> bool:
    return b"\0" in head[:_BINARY_SNIFF_BYTES]


def _is_minified(text: str) -> bool:
    lengths = [len(line) for line in text.splitlines() if line.strip()]
    if not lengths:
        return False
    return sum(lengths) / len(lengths) > _MINIFIED_LINE_LENGTH


def count_lines(text: str) -> int:
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def detect_language(path: Path, text: str) -> Language:
    language = Language.from_extension(path.suffix)
    if language is not Language.UNKNOWN:
        return language
    first_line = text.split("\n", 1)[0]
    return Language.from_shebang(first_line) or Language.UNKNOWN


class RepoScanner:
    """Walks a source tree and returns the files the analysis core can map."""

    def __init__(
        self,
        *,
        threshold: int = DEFAULT_THRESHOLD,
        exclude_paths: Sequence[str] = (),
        languages: Sequence[str] = (),
        respect_gitignore: bool = True,
        output: str = DEFAULT_OUTPUT,
    ) -> None:
        self.threshold = threshold
        self.exclude_paths = list(exclude_paths)
        self.languages = {language.lower() for language in languages}
        self.respect_gitignore = respect_gitignore
        self.output = output

    @classmethod
    def from_config(cls, config: CodemapConfig) -> "RepoScanner":
        return cls(
            threshold=config.threshold,
            exclude_paths=config.exclude_paths,
            languages=config.languages,
            respect_gitignore=config.respect_gitignore,
            output=config.output,
        )

    def scan(self, root: str | Path) -> List[FileEntry]:
        """Return source files under ``root`` sorted by relative path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        rules = self._load_rules(root_path)
        entries: List[FileEntry] = []
        for path in self._iter_files(root_path, rules):
            entry = self._classify(root_path, path)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda entry: entry.relative_path)
        _logger.info("Scanned %d source files under %s", len(entries), root_path)
        return entries

    def _load_rules(self, root: Path) -> List[IgnoreRule]:
        rules: List[IgnoreRule] = []
        if self.respect_gitignore:
            rules.extend(parse_gitignore(root / ".gitignore"))
        for pattern in self.exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                rules.append(rule)
        output = Path(self.output)
        if not output.is_absolute():
            rule = build_ignore_rule(f"/{output.as_posix()}/")
            if rule is not None:
                rules.append(rule)
        return rules

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS or name.startswith("."):
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in sorted(filenames):
                if filename in _EXCLUDED_FILES:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                yield current_dir / filename

    def _classify(self, root: Path, path: Path) -> Optional[FileEntry]:
        rel_path = path.relative_to(root).as_posix()
        try:
            raw = path.read_bytes()
        except OSError as exc:
            _logger.debug("Skipping unreadable file %s: %s", rel_path, exc)
            return None
        if _is_binary(raw):
            _logger.debug("Skipping binary file %s", rel_path)
            return None

        text = raw.decode("utf-8", errors="replace")
        language = detect_language(path, text)
        if language is Language.UNKNOWN:
            return None
        if self.languages and language.value not in self.languages:
            return None
        if _is_minified(text):
            _logger.debug("Skipping minified file %s", rel_path)
            return None

        line_count = count_lines(text)
        return FileEntry(
            path=path,
            relative_path=rel_path,
            language=language,
            size=len(raw),
            line_count=line_count,
            is_large=line_count > self.threshold,
        )


__all__ = ["IgnoreRule", "RepoScanner", "build_ignore_rule", "count_lines", "detect_language", "parse_gitignore"]
