"""Analysis and regeneration pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import CodemapConfig, load_config
from .graph import FileGraph
from .logging import get_logger
from .memory import extract_memory_markers
from .models import FileEntry, MemoryEntry, ModuleInfo, ModuleState, Symbol
from .modules import detect_modules
from .parsers import extract_imports, extract_symbols
from .render import INDEX_FILENAME, render_index, render_module
from .repo_scanner import RepoScanner
from .stores.manifest import Manifest, calculate_module_state
from .writer import OutputWriter


@dataclass
class Analysis:
    """Per-run extraction results keyed by relative path."""

    symbols: Dict[str, List[Symbol]] = field(default_factory=dict)
    memory: List[MemoryEntry] = field(default_factory=list)
    graph: FileGraph = field(default_factory=FileGraph)


@dataclass
class RunResult:
    """Outcome of a pipeline run."""

    output_dir: Path
    modules: List[ModuleInfo]
    regenerated: List[str]
    skipped: List[str]
    removed: List[str]
    files_scanned: int
    dry_run: bool
    written: List[Path] = field(default_factory=list)


@dataclass
class StalenessReport:
    """Difference between the manifest on disk and the current source tree."""

    stale: List[str]
    new: List[str]
    removed: List[str]

    @property
    def is_stale(self) -> bool:
        return bool(self.stale or self.new or self.removed)


@dataclass
class _Plan:
    root: Path
    config: CodemapConfig
    files: List[FileEntry]
    modules: List[ModuleInfo]
    states: Dict[str, ModuleState]
    manifest: Manifest


class Pipeline:
    """Scans a repository, maps it and regenerates documentation for changed modules."""

    def __init__(self, scanner: RepoScanner | None = None, *, config: CodemapConfig | None = None) -> None:
        self._scanner = scanner
        self._config = config
        self.logger = get_logger("pipeline")

    def analyze(self, files: Sequence[FileEntry]) -> Analysis:
        """Extract symbols, imports and memory markers from every readable file."""
        analysis = Analysis()
        for entry in files:
            try:
                text = entry.path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                self.logger.debug("Skipping unreadable file %s: %s", entry.relative_path, exc)
                continue
            analysis.memory.extend(extract_memory_markers(text, entry.relative_path))
            analysis.graph.add_file(entry.relative_path, extract_imports(entry, text))
            symbols = extract_symbols(entry, text)
            if symbols:
                analysis.symbols[entry.relative_path] = symbols
        return analysis

    def run(self, path: str | Path, *, force: bool = False, dry_run: bool = False) -> RunResult:
        """Regenerate documentation for stale modules (all of them when ``force``)."""
        plan = self._plan(path)
        output_dir = plan.config.output_dir
        self.logger.info("Mapping %s into %s", plan.root, output_dir)

        analysis = self.analyze(plan.files)

        regenerated: List[str] = []
        skipped: List[str] = []
        for module in plan.modules:
            if force or plan.manifest.needs_regeneration(module.slug, plan.states[module.slug]):
                regenerated.append(module.slug)
            else:
                skipped.append(module.slug)

        writer = OutputWriter(output_dir, dry_run=dry_run)
        by_slug = {module.slug: module for module in plan.modules}
        for slug in regenerated:
            docs = render_module(by_slug[slug], plan.files, analysis.symbols, analysis.memory, analysis.graph)
            writer.write_module(slug, docs.as_files())

        current = set(by_slug)
        stale_outputs = {slug for slug in writer.existing_module_slugs() if slug not in current}
        removed = sorted(set(plan.manifest.prune_modules(current)) | stale_outputs)
        for slug in removed:
            writer.remove_module(slug)

        if regenerated or removed or not (output_dir / INDEX_FILENAME).exists():
            writer.write_text(
                INDEX_FILENAME,
                render_index(plan.modules, plan.files, analysis.memory, analysis.graph),
            )

        if not dry_run:
            for slug in regenerated:
                plan.manifest.update_module(slug, plan.states[slug])
            plan.manifest.save(output_dir)

        self.logger.info(
            "Regenerated %d of %d modules (%d removed)%s",
            len(regenerated),
            len(plan.modules),
            len(removed),
            " [dry-run]" if dry_run else "",
        )
        return RunResult(
            output_dir=output_dir,
            modules=plan.modules,
            regenerated=regenerated,
            skipped=skipped,
            removed=removed,
            files_scanned=len(plan.files),
            dry_run=dry_run,
            written=list(writer.written),
        )

    def check(self, path: str | Path) -> StalenessReport:
        """Report stale, new and removed modules without writing anything."""
        plan = self._plan(path)
        stale: List[str] = []
        new: List[str] = []
        for module in plan.modules:
            if module.slug not in plan.manifest.modules:
                new.append(module.slug)
            elif plan.manifest.needs_regeneration(module.slug, plan.states[module.slug]):
                stale.append(module.slug)
        current = {module.slug for module in plan.modules}
        removed = sorted(slug for slug in plan.manifest.modules if slug not in current)
        return StalenessReport(stale=stale, new=new, removed=removed)

    def outline(self, path: str | Path, relative_path: str) -> List[Symbol]:
        """Symbols of one scanned file; ``FileNotFoundError`` when it is not part of the scan."""
        root = Path(path).expanduser().resolve()
        config = self._config_for(root)
        scanner = self._scanner or RepoScanner.from_config(config)
        wanted = relative_path.replace("\\", "/").lstrip("/")
        for entry in scanner.scan(root):
            if entry.relative_path != wanted:
                continue
            try:
                text = entry.path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                self.logger.debug("Skipping unreadable file %s: %s", entry.relative_path, exc)
                return []
            return extract_symbols(entry, text)
        raise FileNotFoundError(f"File '{relative_path}' not in scan results")

    def _plan(self, path: str | Path) -> _Plan:
        root = Path(path).expanduser().resolve()
        config = self._config_for(root)
        scanner = self._scanner or RepoScanner.from_config(config)
        files = scanner.scan(root)
        self.logger.debug("Scanner discovered %d files", len(files))

        modules = detect_modules(files, max_depth=config.module_depth, root=root)
        states = {module.slug: calculate_module_state(root, module.files) for module in modules}
        manifest = Manifest.load(config.output_dir)
        return _Plan(
            root=root,
            config=config,
            files=files,
            modules=modules,
            states=states,
            manifest=manifest,
        )

    def _config_for(self, root: Path) -> CodemapConfig:
        if self._config is not None:
            return self._config
        return load_config(root)


def find_module(modules: Sequence[ModuleInfo], slug: str) -> Optional[ModuleInfo]:
    for module in modules:
        if module.slug == slug:
            return module
    return None


__all__ = ["Analysis", "Pipeline", "RunResult", "StalenessReport", "find_module"]
