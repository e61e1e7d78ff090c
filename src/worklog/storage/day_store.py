from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from loguru import logger

from ..common.time_utils import now_utc_iso
from ..common.validators import require_day_key
from ..core.exceptions import RecordLoadError
from ..records.model import DayEntry, DayRecord
from .engine import StorageEngine
from .migration import READ_ERRORS, migrate_if_needed, rewrite


class DayStore:
    """Encrypted CRUD over day records keyed by DayKey. Last write wins."""

    def __init__(self, engine: StorageEngine):
        self._engine = engine

    async def save(self, day_key: str, record: DayRecord) -> DayRecord:
        day_key = require_day_key(day_key)
        if not record.updated_at:
            record = replace(record, updated_at=now_utc_iso())

        backend = await self._engine.ready()
        await rewrite(backend, self._engine.cipher, day_key, record)
        logger.debug(f"Saved day {day_key} to {backend.name}")
        return record

    async def load(self, day_key: str) -> Optional[DayRecord]:
        """Return the decrypted record, or None when the day was never saved.

        Raises:
            RecordLoadError: If the stored row cannot be read
        """
        day_key = require_day_key(day_key)
        backend = await self._engine.ready()
        row = await backend.get_row(day_key)
        if row is None:
            return None

        try:
            record, needs_rewrite = await migrate_if_needed(row, self._engine.cipher)
        except RecordLoadError:
            raise
        except READ_ERRORS as e:
            raise RecordLoadError(day_key, str(e)) from e

        if needs_rewrite:
            await rewrite(backend, self._engine.cipher, day_key, record)
            logger.info(f"Re-encrypted legacy day {day_key}")
        return record

    async def list_all(self) -> Sequence[DayEntry]:
        """Every readable day, most recent first. Unreadable rows are logged and skipped."""
        backend = await self._engine.ready()
        entries: list[DayEntry] = []
        for row in await backend.list_rows():
            try:
                record, needs_rewrite = await migrate_if_needed(row, self._engine.cipher)
            except READ_ERRORS as e:
                logger.warning(f"Skipping unreadable day {row.day_key}: {e}")
                continue
            if needs_rewrite:
                await rewrite(backend, self._engine.cipher, row.day_key, record)
            entries.append(DayEntry(day_key=row.day_key, record=record))
        return entries

    async def list_day_keys(self) -> list[str]:
        backend = await self._engine.ready()
        return [row.day_key for row in await backend.list_rows()]

    async def clear_all(self) -> None:
        backend = await self._engine.ready()
        await backend.delete_all()
        await self._engine.purge_residual()
        logger.info(f"Cleared all days and settings from {backend.name}")
