"""HTTP service mode for codemap."""

from .app import ReadWriteLock, create_app, run_service

__all__ = ["ReadWriteLock", "create_app", "run_service"]
