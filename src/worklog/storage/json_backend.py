from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from loguru import logger

from ..core.constants import DAYS_STORAGE_KEY, SETTINGS_STORAGE_KEY
from ..core.exceptions import StorageError
from .backend import SerialExecutor, StorageBackend, StoredRow

T = TypeVar("T")


class JsonFileBackend(StorageBackend):
    """Key-value fallback used when native storage is unavailable.

    Mirrors a browser-style key-value surface: one JSON document holding a days
    map and a settings map under fixed keys. With no path the data lives in
    memory for the process lifetime only.
    """

    name = "json"

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path else None
        self._memory: dict[str, Any] = {}
        self._serial = SerialExecutor("worklog-json")

    @property
    def path(self) -> Optional[Path]:
        return self._path

    async def open(self) -> None:
        await self._run(self._read)
        logger.info(f"Fallback key-value storage ready at {self._path or 'memory'}")

    async def close(self) -> None:
        self._serial.shutdown()

    async def get_row(self, day_key: str) -> Optional[StoredRow]:
        return await self._run(self._get_row, day_key)

    async def list_rows(self) -> Sequence[StoredRow]:
        return await self._run(self._list_rows)

    async def upsert_day(self, *, day_key: str, payload: str, updated_at: str) -> None:
        await self._run(self._upsert_day, day_key, payload)

    async def delete_all(self) -> None:
        await self._run(self._purge)

    async def purge(self) -> bool:
        """Drop every stored day and setting. Returns True when anything was removed."""
        return await self._run(self._purge)

    async def has_data(self) -> bool:
        return await self._run(self._has_data)

    async def get_setting(self, key: str) -> Optional[str]:
        return await self._run(self._get_setting, key)

    async def set_setting(self, key: str, value: str) -> None:
        await self._run(self._set_setting, key, value)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await self._serial.run(fn, *args)
        except (OSError, ValueError) as e:
            logger.error(f"Fallback storage operation {fn.__name__} failed: {e}")
            raise StorageError(f"Fallback storage operation failed: {e}") from e

    def _read(self) -> dict[str, Any]:
        if self._path is None:
            return self._memory
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        data = json.loads(text) if text.strip() else {}
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        if self._path is None:
            self._memory = data
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self._path)

    def _days(self, data: dict[str, Any]) -> dict[str, Any]:
        days = data.get(DAYS_STORAGE_KEY)
        return days if isinstance(days, dict) else {}

    def _settings(self, data: dict[str, Any]) -> dict[str, Any]:
        settings = data.get(SETTINGS_STORAGE_KEY)
        return settings if isinstance(settings, dict) else {}

    def _get_row(self, day_key: str) -> Optional[StoredRow]:
        days = self._days(self._read())
        if day_key not in days:
            return None
        return _to_row(day_key, days[day_key])

    def _list_rows(self) -> list[StoredRow]:
        days = self._days(self._read())
        return [_to_row(day_key, days[day_key]) for day_key in sorted(days, reverse=True)]

    def _upsert_day(self, day_key: str, payload: str) -> None:
        data = self._read()
        days = self._days(data)
        days[day_key] = payload
        data[DAYS_STORAGE_KEY] = days
        self._write(data)

    def _purge(self) -> bool:
        data = self._read()
        removed = bool(self._days(data) or self._settings(data))
        data.pop(DAYS_STORAGE_KEY, None)
        data.pop(SETTINGS_STORAGE_KEY, None)
        if self._path is not None and not data:
            if self._path.exists():
                self._path.unlink()
            return removed
        self._write(data)
        return removed

    def _has_data(self) -> bool:
        data = self._read()
        return bool(self._days(data) or self._settings(data))

    def _get_setting(self, key: str) -> Optional[str]:
        value = self._settings(self._read()).get(key)
        return None if value is None else str(value)

    def _set_setting(self, key: str, value: str) -> None:
        data = self._read()
        settings = self._settings(data)
        settings[key] = value
        data[SETTINGS_STORAGE_KEY] = settings
        self._write(data)


def _to_row(day_key: str, value: Any) -> StoredRow:
    if isinstance(value, dict):
        return StoredRow(day_key=day_key, flat=value, updated_at=str(value.get("updatedAt") or ""))
    return StoredRow(day_key=day_key, payload=None if value is None else str(value))
