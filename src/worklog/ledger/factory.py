from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import DayMode
from .strategies.base import LunchStrategy
from .strategies.exit_lunch_strategy import ExitLunchStrategy
from .strategies.no_exit_pause_strategy import NoExitPauseStrategy


@dataclass
class LunchStrategyFactory:
    """Factory Pattern: choose the lunch strategy for a day mode."""

    def for_mode(self, mode: DayMode) -> LunchStrategy:
        if mode is DayMode.NO_EXIT_PAUSE:
            return NoExitPauseStrategy()
        return ExitLunchStrategy()
