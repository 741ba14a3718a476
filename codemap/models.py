"""Core data models shared across codemap components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set


class Language(str, Enum):
    """Language tag assigned to scanned files."""

    RUST = "rust"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    GO = "go"
    PHP = "php"
    JAVA = "java"
    CSHARP = "csharp"
    C = "c"
    CPP = "cpp"
    RUBY = "ruby"
    DART = "dart"
    SWIFT = "swift"
    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, extension: str) -> "Language":
        return _LANGUAGE_BY_EXTENSION.get(extension.lower().lstrip("."), cls.UNKNOWN)

    @classmethod
    def from_shebang(cls, first_line: str) -> Optional["Language"]:
        if not first_line.startswith("#!"):
            return None
        if "python" in first_line:
            return cls.PYTHON
        if any(runtime in first_line for runtime in ("node", "deno", "bun")):
            return cls.JAVASCRIPT
        if "php" in first_line:
            return cls.PHP
        if "ruby" in first_line:
            return cls.RUBY
        return None


_LANGUAGE_BY_EXTENSION = {
    "rs": Language.RUST,
    "py": Language.PYTHON,
    "pyi": Language.PYTHON,
    "js": Language.JAVASCRIPT,
    "jsx": Language.JAVASCRIPT,
    "mjs": Language.JAVASCRIPT,
    "cjs": Language.JAVASCRIPT,
    "ts": Language.TYPESCRIPT,
    "tsx": Language.TYPESCRIPT,
    "mts": Language.TYPESCRIPT,
    "cts": Language.TYPESCRIPT,
    "go": Language.GO,
    "php": Language.PHP,
    "phtml": Language.PHP,
    "java": Language.JAVA,
    "cs": Language.CSHARP,
    "c": Language.C,
    "h": Language.CPP,
    "hh": Language.CPP,
    "hpp": Language.CPP,
    "hxx": Language.CPP,
    "cc": Language.CPP,
    "cpp": Language.CPP,
    "cxx": Language.CPP,
    "rb": Language.RUBY,
    "dart": Language.DART,
    "swift": Language.SWIFT,
}


@dataclass
class FileEntry:
    """Scanned source file handed to the analysis core."""

    path: Path
    relative_path: str
    language: Language
    size: int
    line_count: int
    is_large: bool = False


class SymbolKind(Enum):
    FUNCTION = "fn"
    METHOD = "method"
    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    TRAIT = "trait"
    INTERFACE = "interface"
    CONST = "const"
    MODULE = "mod"
    TYPE = "type"

    def __str__(self) -> str:
        return self.value


class Visibility(Enum):
    PUBLIC = "pub"
    PRIVATE = "(private)"
    PROTECTED = "(protected)"
    INTERNAL = "(internal)"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LineRange:
    """Inclusive, 1-based line span of a declaration."""

    start: int
    end: int

    @classmethod
    def single(cls, line: int) -> "LineRange":
        return cls(start=line, end=line)


@dataclass(frozen=True)
class Symbol:
    """Named declaration extracted from a single file."""

    kind: SymbolKind
    name: str
    line_range: LineRange
    visibility: Visibility
    signature: Optional[str] = None
    doc_comment: Optional[str] = None


class Priority(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    def __str__(self) -> str:
        return self.value


class MemoryKind(Enum):
    WARNING = "WARNING"
    BUSINESS_RULE = "RULE"
    INVARIANT = "INVARIANT"
    TODO = "TODO"
    FIXME = "FIXME"
    DEPRECATED = "DEPRECATED"
    NOTE = "NOTE"
    HACK = "HACK"
    SAFETY = "SAFETY"

    def __str__(self) -> str:
        return self.value

    @property
    def default_priority(self) -> Priority:
        if self in _HIGH_PRIORITY_KINDS:
            return Priority.HIGH
        return Priority.MEDIUM

    @property
    def category(self) -> str:
        return _CATEGORY_BY_KIND[self]


_HIGH_PRIORITY_KINDS = {
    MemoryKind.WARNING,
    MemoryKind.SAFETY,
    MemoryKind.DEPRECATED,
    MemoryKind.BUSINESS_RULE,
    MemoryKind.INVARIANT,
}

_CATEGORY_BY_KIND = {
    MemoryKind.WARNING: "Warnings",
    MemoryKind.SAFETY: "Warnings",
    MemoryKind.BUSINESS_RULE: "Business Rules",
    MemoryKind.INVARIANT: "Business Rules",
    MemoryKind.TODO: "Technical Debt",
    MemoryKind.FIXME: "Technical Debt",
    MemoryKind.HACK: "Technical Debt",
    MemoryKind.DEPRECATED: "Technical Debt",
    MemoryKind.NOTE: "Notes",
}

MEMORY_CATEGORIES = ("Warnings", "Business Rules", "Technical Debt", "Notes")


@dataclass
class MemoryEntry:
    """Knowledge marker found in a source comment."""

    kind: MemoryKind
    content: str
    source_file: str
    line_number: int
    priority: Optional[Priority] = None

    def __post_init__(self) -> None:
        if self.priority is None:
            self.priority = self.kind.default_priority


class BoundaryType(str, Enum):
    ROOT = "root"
    PACKAGE = "package"
    RUST_MODULE = "rust_module"
    PYTHON_PACKAGE = "python_package"
    JS_MODULE = "js_module"
    DIRECTORY = "directory"


@dataclass
class ModuleInfo:
    """Documentation grouping unit; one node of the module tree."""

    path: str
    slug: str
    boundary_type: BoundaryType
    files: Set[str] = field(default_factory=set)
    children: List[str] = field(default_factory=list)
    entry_point: Optional[str] = None

    @property
    def file_count(self) -> int:
        return len(self.files)


@dataclass(frozen=True)
class ModuleState:
    """Fingerprint of a module's membership and modification recency."""

    latest_mtime: int
    file_count: int
    files_hash: int
