"""Logging utilities for codemap commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "codemap"

_LEVEL_BY_VERBOSITY = {
    0: logging.WARNING,
    1: logging.INFO,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the codemap hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def level_for_verbosity(verbosity: int) -> int:
    """Map a repeated ``-v`` count to a logging level (2+ is DEBUG)."""
    if verbosity < 0:
        return logging.ERROR
    return _LEVEL_BY_VERBOSITY.get(verbosity, logging.DEBUG)


def configure_logging(
    *, verbosity: int = 0, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optional file) handlers to the codemap logger."""
    level = level_for_verbosity(verbosity)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # serve mode and repeated CLI invocations in tests reconfigure the same logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[codemap] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(sink)
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["configure_logging", "get_logger", "level_for_verbosity"]
