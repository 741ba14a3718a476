"""Language parser registry and extraction helpers."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Optional

from ..logging import get_logger
from ..models import FileEntry, Language, Symbol
from .base import LanguageParser
from .c import CParser
from .cpp import CppParser
from .csharp import CSharpParser
from .dart import DartParser
from .go import GoParser
from .java import JavaParser
from .javascript import JavaScriptParser
from .php import PhpParser
from .python import PythonParser
from .ruby import RubyParser
from .rust import RustParser
from .swift import SwiftParser

_ENTRY_POINT_GROUP = "codemap.parsers"

_BUILTIN_FACTORIES: dict[Language, Callable[[], LanguageParser]] = {
    Language.C: CParser,
    Language.CPP: CppParser,
    Language.RUST: RustParser,
    Language.GO: GoParser,
    Language.PYTHON: PythonParser,
    Language.JAVASCRIPT: JavaScriptParser,
    Language.TYPESCRIPT: JavaScriptParser,
    Language.PHP: PhpParser,
    Language.JAVA: JavaParser,
    Language.CSHARP: CSharpParser,
    Language.RUBY: RubyParser,
    Language.DART: DartParser,
    Language.SWIFT: SwiftParser,
}

_logger = get_logger("parsers")

_registry: Optional[Dict[Language, LanguageParser]] = None


def get_parser(language: Language) -> Optional[LanguageParser]:
    """Return the extractor for ``language`` or ``None`` when unsupported."""
    return _parsers().get(language)


def supported_languages() -> List[Language]:
    return sorted(_parsers(), key=lambda language: language.value)


def extract_symbols(file: FileEntry, text: str) -> List[Symbol]:
    parser = get_parser(file.language)
    if parser is None:
        return []
    return parser.parse_symbols(text)


def extract_imports(file: FileEntry, text: str) -> List[str]:
    parser = get_parser(file.language)
    if parser is None:
        return []
    return parser.parse_imports(text)


def reset_registry() -> None:
    """Forget discovered parsers so the next lookup rescans entry points."""
    global _registry
    _registry = None


def _parsers() -> Dict[Language, LanguageParser]:
    global _registry
    if _registry is None:
        _registry = _build_registry()
    return _registry


def _build_registry() -> Dict[Language, LanguageParser]:
    registry: Dict[Language, LanguageParser] = {
        language: factory() for language, factory in _BUILTIN_FACTORIES.items()
    }

    for entry in _iter_entry_points():
        language = _language_for(entry.name)
        if language is None:
            _logger.debug("Ignoring parser entry point '%s': unknown language", entry.name)
            continue
        try:
            parser = _coerce_parser(entry.load())
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Failed to load parser entry point '%s': %s", entry.name, exc)
            continue
        _logger.info("Using parser entry point '%s' for %s", entry.name, language.value)
        registry[language] = parser

    return registry


def _language_for(name: str) -> Optional[Language]:
    try:
        language = Language(name.lower())
    except ValueError:
        return None
    return None if language is Language.UNKNOWN else language


def _coerce_parser(obj: object) -> LanguageParser:
    if isinstance(obj, LanguageParser):
        return obj
    if isinstance(obj, type) and issubclass(obj, LanguageParser):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, LanguageParser):
            return instance
    raise TypeError("Parser entry point must be a LanguageParser subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "LanguageParser",
    "extract_imports",
    "extract_symbols",
    "get_parser",
    "reset_registry",
    "supported_languages",
]
