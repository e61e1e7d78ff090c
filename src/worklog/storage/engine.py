from __future__ import annotations

from typing import Optional

from loguru import logger

from ..common.single_flight import SingleFlight
from ..core.constants import AUTO_SAVE_KEY
from ..crypto.envelope import EnvelopeCipher
from .backend import StorageBackend
from .json_backend import JsonFileBackend
from .migration import READ_ERRORS, MigrationReport, migrate_if_needed, rewrite, run_migration


class StorageEngine:
    """The chosen backend behind a one-time open + migrate gate.

    No statement reaches the backend before `ready()` has completed once.
    `residual` is fallback data left from a run without native storage; it is
    folded into the native store and purged after the first successful migration.
    """

    def __init__(
        self,
        backend: StorageBackend,
        cipher: EnvelopeCipher,
        *,
        residual: Optional[JsonFileBackend] = None,
    ):
        self._backend = backend
        self._cipher = cipher
        self._residual = residual
        self._gate = SingleFlight(self._initialize)
        self.last_report: Optional[MigrationReport] = None

    @property
    def backend_name(self) -> str:
        return self._backend.name

    @property
    def cipher(self) -> EnvelopeCipher:
        return self._cipher

    async def ready(self) -> StorageBackend:
        await self._gate.get()
        return self._backend

    async def purge_residual(self) -> None:
        if self._residual is not None:
            await self._residual.purge()

    async def close(self) -> None:
        if self._gate.done:
            await self._backend.close()
        if self._residual is not None:
            await self._residual.close()

    async def _initialize(self) -> None:
        await self._backend.open()
        self.last_report = await run_migration(self._backend, self._cipher)
        if self._residual is not None:
            await self._absorb_residual()

    async def _absorb_residual(self) -> None:
        residual = self._residual
        await residual.open()
        if not await residual.has_data():
            return

        imported = unreadable = 0
        for row in await residual.list_rows():
            if await self._backend.get_row(row.day_key) is not None:
                continue
            try:
                record, _ = await migrate_if_needed(row, self._cipher)
            except READ_ERRORS as e:
                logger.warning(f"Cannot import fallback day {row.day_key}: {e}")
                unreadable += 1
                continue
            await rewrite(self._backend, self._cipher, row.day_key, record)
            imported += 1

        autosave = await residual.get_setting(AUTO_SAVE_KEY)
        if autosave is not None and await self._backend.get_setting(AUTO_SAVE_KEY) is None:
            await self._backend.set_setting(AUTO_SAVE_KEY, autosave)

        if unreadable:
            logger.warning(f"Keeping fallback storage: {unreadable} days could not be imported")
            return
        await residual.purge()
        logger.info(f"Purged fallback storage after native migration (imported {imported} days)")
