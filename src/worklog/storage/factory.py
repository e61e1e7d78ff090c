from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from .backend import StorageBackend
from .json_backend import JsonFileBackend
from .sqlite_backend import SQLiteBackend

# ON CONFLICT ... DO UPDATE needs SQLite 3.24.
MIN_SQLITE_VERSION = (3, 24, 0)


def native_storage_available() -> bool:
    """Capability probe: is a usable native SQLite engine present on this host?"""
    try:
        sqlite3 = importlib.import_module("sqlite3")
    except ImportError:
        return False
    return tuple(sqlite3.sqlite_version_info) >= MIN_SQLITE_VERSION


@dataclass(frozen=True)
class BackendChoice:
    backend: StorageBackend
    residual: Optional[JsonFileBackend] = None


@dataclass
class StorageBackendFactory:
    """Factory Pattern: pick native or fallback storage once per process."""

    probe: Callable[[], bool] = native_storage_available

    def select(
        self,
        *,
        db_path: str | Path,
        fallback_path: Optional[str | Path],
        native_enabled: bool = True,
    ) -> BackendChoice:
        if native_enabled and self.probe():
            logger.info("Native storage available, using SQLite")
            residual = JsonFileBackend(fallback_path) if fallback_path else None
            return BackendChoice(backend=SQLiteBackend(db_path), residual=residual)

        logger.warning("Native storage unavailable, using key-value fallback")
        return BackendChoice(backend=JsonFileBackend(fallback_path))
