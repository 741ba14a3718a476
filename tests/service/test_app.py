"""Tests for the FastAPI service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from codemap.service import ReadWriteLock, create_app
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def client(repo_builder: RepoBuilder) -> TestClient:
    repo_builder.write(
        {
            "src/main.rs": """
                mod util;

                fn main() {}
                """,
            "src/util.rs": """
                // WARNING: not reentrant

                /// Runs once.
                pub fn run() {}
                """,
        }
    )
    return TestClient(create_app(repo_builder.path()))


def test_health_endpoint(client: TestClient, repo_builder: RepoBuilder) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "root": str(repo_builder.path().resolve())}


def test_regenerate_then_read_module(client: TestClient) -> None:
    response = client.post("/regenerate")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["regenerated"] == ["root", "src"]
    assert body["module_count"] == 2

    module = client.get("/modules/src")
    assert module.status_code == 200
    content = module.json()["content"]
    assert content.startswith("# Module: src")
    assert "not reentrant" in content


def test_unknown_module_is_404(client: TestClient) -> None:
    client.post("/regenerate")

    response = client.get("/modules/nope")

    assert response.status_code == 404
    assert "nope" in response.json()["detail"]


def test_check_endpoint_tracks_staleness(client: TestClient) -> None:
    stale = client.get("/check").json()
    assert stale["is_stale"] is True
    assert stale["new_modules"] == ["root", "src"]

    client.post("/regenerate")

    fresh = client.get("/check").json()
    assert fresh == {"is_stale": False, "stale_modules": [], "new_modules": [], "removed_modules": []}


def test_outline_endpoint(client: TestClient) -> None:
    response = client.get("/outline", params={"file": "src/util.rs"})

    assert response.status_code == 200
    body = response.json()
    assert body["file"] == "src/util.rs"
    assert body["symbols"] == [
        {
            "kind": "fn",
            "name": "run",
            "start_line": 4,
            "end_line": 4,
            "visibility": "pub",
            "signature": "pub fn run() {}",
            "doc_comment": "Runs once.",
        }
    ]

    missing = client.get("/outline", params={"file": "src/none.rs"})
    assert missing.status_code == 404


def test_read_write_lock_serialises_writers_against_readers() -> None:
    async def scenario() -> List[str]:
        lock = ReadWriteLock()
        events: List[str] = []

        async def writer() -> None:
            async with lock.write():
                events.append("write-start")
                await asyncio.sleep(0.01)
                events.append("write-end")

        async def reader() -> None:
            await asyncio.sleep(0)
            async with lock.read():
                events.append("read")

        await asyncio.gather(writer(), reader())
        return events

    assert asyncio.run(scenario()) == ["write-start", "write-end", "read"]


def test_read_write_lock_allows_concurrent_readers() -> None:
    async def scenario() -> int:
        lock = ReadWriteLock()
        active = 0
        peak = 0

        async def reader() -> None:
            nonlocal active, peak
            async with lock.read():
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1

        await asyncio.gather(reader(), reader(), reader())
        return peak

    assert asyncio.run(scenario()) == 3
