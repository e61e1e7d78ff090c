from __future__ import annotations

from enum import Enum


class DayMode(str, Enum):
    """How the lunch break and attendance segments are recorded for a day."""

    SIMPLE = "simple"
    NO_EXIT_PAUSE = "noExitPause"
    MULTI_SEGMENT = "multiSegment"
