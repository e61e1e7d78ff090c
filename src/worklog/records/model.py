from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..ledger.model import DayResult, RawDayInput


@dataclass(frozen=True)
class DayRecord:
    """One saved day (raw input + last evaluation)."""

    raw: RawDayInput
    calculated: Optional[DayResult]
    updated_at: str = ""


@dataclass(frozen=True)
class DayEntry:
    """Read-model for listings: a record together with its day key."""

    day_key: str
    record: DayRecord
