"""Base class for language symbol extractors."""

from abc import ABC, abstractmethod
from typing import List

from ..models import Symbol


class LanguageParser(ABC):
    """Contract for pattern-based extractors of a single language."""

    @abstractmethod
    def parse_symbols(self, text: str) -> List[Symbol]:
        """Return declarations sorted by start line, deduplicated by (name, start)."""

    def parse_imports(self, text: str) -> List[str]:
        """Return import identifiers in order of first appearance."""
        return []
