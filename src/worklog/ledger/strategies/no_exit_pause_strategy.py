from __future__ import annotations

from ..model import PolicyConfig
from .base import LunchDecision, LunchStrategy, ParsedDay


class NoExitPauseStrategy(LunchStrategy):
    """Break taken without leaving: lunch stamps are ignored, the floor is counted."""

    def validate(self, day: ParsedDay, policy: PolicyConfig) -> None:
        return None

    def decide(self, day: ParsedDay) -> LunchDecision:
        return LunchDecision(break_logged=True)

    def advisories(self, decision: LunchDecision, lunch_gap: float, policy: PolicyConfig) -> list[str]:
        return [f"break taken without leaving, counted at floor ({policy.mandatory_break} min)"]
