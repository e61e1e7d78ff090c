from __future__ import annotations

from typing import Optional, Sequence

from ..common.time_utils import format_minutes_label
from ..ledger.calculator import evaluate_day
from ..ledger.model import DEFAULT_POLICY, DayResult, PolicyConfig, RawDayInput
from ..records.model import DayEntry, DayRecord
from ..storage.day_store import DayStore
from ..storage.settings_store import SettingsStore


class DayService:
    """Use cases behind the tracker screen: live evaluation, save/load, settings."""

    def __init__(self, days: DayStore, settings: SettingsStore, *, policy: Optional[PolicyConfig] = None):
        self._days = days
        self._settings = settings
        self._policy = policy or DEFAULT_POLICY

    @property
    def policy(self) -> PolicyConfig:
        return self._policy

    def evaluate(self, raw: RawDayInput) -> DayResult:
        return evaluate_day(raw, self._policy)

    async def save_day(self, day_key: str, record: DayRecord) -> DayRecord:
        return await self._days.save(day_key, record)

    async def record_day(self, day_key: str, raw: RawDayInput) -> DayRecord:
        """Evaluate `raw` and save it together with the result (updatedAt stamped now)."""
        return await self._days.save(day_key, DayRecord(raw=raw, calculated=self.evaluate(raw)))

    async def load_day(self, day_key: str) -> Optional[DayRecord]:
        return await self._days.load(day_key)

    async def list_days(self) -> Sequence[DayEntry]:
        return await self._days.list_all()

    async def list_day_keys(self) -> list[str]:
        return await self._days.list_day_keys()

    async def clear_all(self) -> None:
        await self._days.clear_all()

    async def get_autosave_enabled(self) -> bool:
        return await self._settings.get_autosave_enabled()

    async def set_autosave_enabled(self, value: bool) -> None:
        await self._settings.set_autosave_enabled(value)

    def summary_row(self, entry: DayEntry) -> dict:
        """Flat row for history listings, minutes rendered as "7h 12m"."""
        calculated = entry.record.calculated
        worked = calculated.display_worked_minutes if calculated else None
        return {
            "day_key": entry.day_key,
            "updated_at": entry.record.updated_at,
            "worked": format_minutes_label(worked) if worked is not None else "-",
            "debt": format_minutes_label(calculated.debt_minutes) if calculated and calculated.debt_minutes else "-",
            "credit": format_minutes_label(calculated.credit_minutes) if calculated and calculated.credit_minutes else "-",
            "predicted_exit": (calculated.predicted_exit if calculated else None) or "-",
        }
