from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from codemap import parsers
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a throwaway repository rooted under the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def fresh_parser_registry() -> Iterator[None]:
    """Drop cached parsers so entry-point patches never leak between tests."""
    parsers.reset_registry()
    yield
    parsers.reset_registry()
