"""FastAPI application entrypoint for codemap service mode."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, TypeVar

import uvicorn
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import CodemapConfig, load_config
from ..logging import get_logger
from ..pipeline import Pipeline, RunResult, StalenessReport
from ..render import IMPORTS_FILENAME, MEMORY_FILENAME, MODULE_FILENAME, OUTLINE_FILENAME
from ..stores.manifest import ManifestError
from ..writer import MODULES_DIRNAME, OutputError

_T = TypeVar("_T")

_logger = get_logger("service")


class HealthResponse(BaseModel):
    status: str
    root: str


class ModuleResponse(BaseModel):
    slug: str
    content: str


class CheckResponse(BaseModel):
    is_stale: bool
    stale_modules: List[str]
    new_modules: List[str]
    removed_modules: List[str]


class RegenerateResponse(BaseModel):
    status: str
    regenerated: List[str]
    removed: List[str]
    module_count: int


class SymbolModel(BaseModel):
    kind: str
    name: str
    start_line: int
    end_line: int
    visibility: str
    signature: Optional[str] = None
    doc_comment: Optional[str] = None


class OutlineResponse(BaseModel):
    file: str
    symbols: List[SymbolModel]


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer; waiting writers block new readers."""

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._writer and not self._waiting_writers)
            self._readers += 1
        try:
            yield
        finally:
            async with self._condition:
                self._readers -= 1
                self._condition.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._condition.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._condition:
                self._writer = False
                self._condition.notify_all()


async def _in_executor(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def _read_module(output_dir: Path, slug: str) -> str:
    module_dir = output_dir / MODULES_DIRNAME / slug
    if not module_dir.is_dir():
        raise FileNotFoundError(f"Module '{slug}' not found")

    parts: List[str] = []
    module_md = module_dir / MODULE_FILENAME
    if module_md.is_file():
        parts.append(module_md.read_text(encoding="utf-8"))
    for name in (OUTLINE_FILENAME, MEMORY_FILENAME, IMPORTS_FILENAME):
        document = module_dir / name
        if document.is_file():
            text = document.read_text(encoding="utf-8")
            if text:
                parts.append(f"## {name}\n\n{text}")
    if not parts:
        raise FileNotFoundError(f"Module '{slug}' has no content")
    return "\n\n---\n\n".join(parts)


def create_app(
    root: str | Path,
    *,
    config: CodemapConfig | None = None,
    pipeline_factory: Callable[[CodemapConfig], Pipeline] | None = None,
) -> FastAPI:
    """Create the FastAPI application serving the map of the repository at ``root``."""

    root_path = Path(root).expanduser().resolve()
    settings = config or load_config(root_path)
    factory = pipeline_factory or (lambda cfg: Pipeline(config=cfg))
    lock = ReadWriteLock()

    app = FastAPI(title="codemap service", version="1.0.0")
    app.state.config = settings

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", root=str(root_path))

    @app.get("/modules/{slug}", response_model=ModuleResponse)
    async def get_module(slug: str) -> ModuleResponse:
        async with lock.read():
            output_dir = app.state.config.output_dir
            content = await _in_executor(lambda: _read_module(output_dir, slug))
        return ModuleResponse(slug=slug, content=content)

    @app.get("/check", response_model=CheckResponse)
    async def check() -> CheckResponse:
        async with lock.read():
            pipeline = factory(app.state.config)
            report: StalenessReport = await _in_executor(lambda: pipeline.check(root_path))
        return CheckResponse(
            is_stale=report.is_stale,
            stale_modules=report.stale,
            new_modules=report.new,
            removed_modules=report.removed,
        )

    @app.get("/outline", response_model=OutlineResponse)
    async def outline(file: str = Query(..., description="Path relative to the repository root")) -> OutlineResponse:
        async with lock.read():
            pipeline = factory(app.state.config)
            symbols = await _in_executor(lambda: pipeline.outline(root_path, file))
        return OutlineResponse(
            file=file,
            symbols=[
                SymbolModel(
                    kind=str(symbol.kind),
                    name=symbol.name,
                    start_line=symbol.line_range.start,
                    end_line=symbol.line_range.end,
                    visibility=str(symbol.visibility),
                    signature=symbol.signature,
                    doc_comment=symbol.doc_comment,
                )
                for symbol in symbols
            ],
        )

    @app.post("/regenerate", response_model=RegenerateResponse)
    async def regenerate() -> RegenerateResponse:
        async with lock.write():
            app.state.config = load_config(root_path) if config is None else app.state.config
            pipeline = factory(app.state.config)
            result: RunResult = await _in_executor(lambda: pipeline.run(root_path, force=True))
        _logger.info("Regenerated %d modules via service", len(result.regenerated))
        return RegenerateResponse(
            status="ok",
            regenerated=result.regenerated,
            removed=result.removed,
            module_count=len(result.modules),
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ManifestError)
    @app.exception_handler(OutputError)
    async def persistence_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        _logger.error("Persisting documentation failed: %s", exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(root: str | Path, host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app(root)
    uvicorn.run(app, host=host, port=port)
