from __future__ import annotations

from ..core.constants import AUTO_SAVE_KEY
from .engine import StorageEngine


class SettingsStore:
    """Plain (unencrypted) application flags next to the day records."""

    def __init__(self, engine: StorageEngine):
        self._engine = engine

    async def get_autosave_enabled(self) -> bool:
        backend = await self._engine.ready()
        return await backend.get_setting(AUTO_SAVE_KEY) == "1"

    async def set_autosave_enabled(self, value: bool) -> None:
        backend = await self._engine.ready()
        await backend.set_setting(AUTO_SAVE_KEY, "1" if value else "0")
