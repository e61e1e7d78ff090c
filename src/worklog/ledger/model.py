from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core import constants
from ..core.enums import DayMode


@dataclass(frozen=True)
class PolicyConfig:
    """Workplace policy, all values in minutes (times are minutes after midnight)."""

    work_duration: int = constants.WORK_DURATION_MINUTES
    mandatory_break: int = constants.MANDATORY_BREAK_MINUTES
    office_open: int = constants.OFFICE_OPEN_MINUTE
    office_close: int = constants.OFFICE_CLOSE_MINUTE
    lunch_window_start: int = constants.LUNCH_WINDOW_START_MINUTE
    lunch_window_end: int = constants.LUNCH_WINDOW_END_MINUTE
    min_work_for_lunch: int = constants.MIN_WORK_FOR_LUNCH_MINUTES
    checkpoint: int = constants.CHECKPOINT_MINUTE
    min_work_by_checkpoint: int = constants.MIN_WORK_BY_CHECKPOINT_MINUTES


DEFAULT_POLICY = PolicyConfig()


@dataclass(frozen=True)
class RawDayInput:
    """What the user typed for one day. Empty strings mean "not recorded"."""

    morning_in: str = ""
    lunch_out: str = ""
    lunch_in: str = ""
    final_out: str = ""
    pause_no_exit: bool = False
    used_permit: bool = False
    permit_out: str = ""
    permit_in: str = ""
    extra_segments: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def has_extra_segments(self) -> bool:
        return any(entrance or exit_ for entrance, exit_ in self.extra_segments)

    @property
    def mode(self) -> DayMode:
        if self.pause_no_exit:
            return DayMode.NO_EXIT_PAUSE
        if self.has_extra_segments:
            return DayMode.MULTI_SEGMENT
        return DayMode.SIMPLE


@dataclass(frozen=True)
class DayResult:
    """Outcome of one evaluation. Superseded, never merged, by the next one.

    Minute values keep full precision; round only when rendering.
    `worked_minutes`, `debt_minutes` and `credit_minutes` stay None until a
    final exit is recorded.
    """

    mode: DayMode = DayMode.SIMPLE
    predicted_exit: Optional[str] = None
    worked_minutes: Optional[float] = None
    lunch_minutes_counted: Optional[float] = None
    debt_minutes: Optional[float] = None
    credit_minutes: Optional[float] = None
    permit_minutes: float = 0
    total_with_permit_minutes: Optional[float] = None
    permit_absorbed: bool = False
    error: Optional[str] = None
    info: tuple[str, ...] = ()

    @classmethod
    def failed(cls, mode: DayMode, message: str) -> "DayResult":
        return cls(mode=mode, error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display_worked_minutes(self) -> Optional[float]:
        """Worked total shown to the user, with the permit applied where it counts."""
        if self.worked_minutes is None:
            return None
        if self.mode is DayMode.NO_EXIT_PAUSE and self.permit_minutes:
            if self.permit_absorbed:
                return self.worked_minutes + self.permit_minutes
            return self.worked_minutes
        if self.permit_minutes and self.total_with_permit_minutes is not None:
            return self.total_with_permit_minutes
        return self.worked_minutes
