from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..model import PolicyConfig


@dataclass(frozen=True)
class ParsedDay:
    """Timestamps of one day as minutes after midnight."""

    morning_in: Optional[int]
    lunch_out: Optional[int]
    lunch_in: Optional[int]
    final_out: Optional[int]
    permit_out: Optional[int]
    permit_in: Optional[int]
    extra_entrances: tuple[int, ...] = ()
    extra_exits: tuple[int, ...] = ()


@dataclass(frozen=True)
class LunchDecision:
    """Which lunch stamps join the attendance sequence and whether a break was taken."""

    entrances: tuple[int, ...] = ()
    exits: tuple[int, ...] = ()
    break_logged: bool = False
    window: Optional[tuple[int, int]] = None


class LunchStrategy(ABC):
    """Strategy Pattern: encapsulate how the lunch break of a day is recorded."""

    @abstractmethod
    def validate(self, day: ParsedDay, policy: PolicyConfig) -> None:
        raise NotImplementedError

    @abstractmethod
    def decide(self, day: ParsedDay) -> LunchDecision:
        raise NotImplementedError

    @abstractmethod
    def advisories(self, decision: LunchDecision, lunch_gap: float, policy: PolicyConfig) -> list[str]:
        raise NotImplementedError
