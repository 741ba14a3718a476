"""Configuration loading for codemap (.codemap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".codemap.yml"

DEFAULT_OUTPUT = ".codemap"
DEFAULT_THRESHOLD = 500
DEFAULT_MODULE_DEPTH = 3


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ServiceConfig:
    """Bind address for `codemap serve`."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class CodemapConfig:
    """Represents the settings defined in .codemap.yml."""

    root: Path
    output: str = DEFAULT_OUTPUT
    threshold: int = DEFAULT_THRESHOLD
    module_depth: int = DEFAULT_MODULE_DEPTH
    exclude_paths: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    respect_gitignore: bool = True
    service: ServiceConfig = field(default_factory=ServiceConfig)

    @property
    def output_dir(self) -> Path:
        output = Path(self.output).expanduser()
        if output.is_absolute():
            return output
        return self.root / output


def load_config(config_path: Path) -> CodemapConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CodemapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = CodemapConfig(root=root)

    output = _as_str(data.get("output"))
    if output:
        config.output = output

    threshold = _as_int(data.get("threshold"))
    if threshold is not None:
        if threshold <= 0:
            raise ConfigError("threshold must be a positive integer")
        config.threshold = threshold

    module_depth = _as_int(data.get("module_depth"))
    if module_depth is not None:
        if module_depth < 0:
            raise ConfigError("module_depth must be zero (unlimited) or positive")
        config.module_depth = module_depth

    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.languages = [item.lower() for item in _as_str_list(data.get("languages"))]

    gitignore = _as_bool(data.get("respect_gitignore"))
    if gitignore is not None:
        config.respect_gitignore = gitignore

    service_data = _as_dict(data.get("service"))
    if service_data:
        host = _as_str(service_data.get("host"))
        port = _as_int(service_data.get("port"))
        if host:
            config.service.host = host
        if port is not None:
            config.service.port = port

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
