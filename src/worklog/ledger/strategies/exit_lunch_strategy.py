from __future__ import annotations

from ...common.time_utils import format_hhmm
from ...core.exceptions import ValidationError
from ..model import PolicyConfig
from .base import LunchDecision, LunchStrategy, ParsedDay


class ExitLunchStrategy(LunchStrategy):
    """Lunch taken outside the premises, stamped on the way out and back in."""

    def validate(self, day: ParsedDay, policy: PolicyConfig) -> None:
        if day.lunch_out is not None and day.lunch_out < policy.lunch_window_start:
            raise ValidationError(
                f"lunch exit is before lunch window start ({format_hhmm(policy.lunch_window_start)})"
            )
        if day.lunch_in is not None and day.lunch_in > policy.lunch_window_end:
            raise ValidationError(
                f"lunch return is after lunch window end ({format_hhmm(policy.lunch_window_end)})"
            )
        if day.lunch_out is None or day.lunch_in is None:
            return

        if day.lunch_in <= day.lunch_out:
            raise ValidationError("lunch return must be after lunch exit")
        if day.morning_in is not None and day.lunch_out <= day.morning_in:
            raise ValidationError("lunch exit must be after morning entry")
        if day.final_out is not None and day.final_out <= day.lunch_in:
            raise ValidationError("final exit must be after lunch return")

    def decide(self, day: ParsedDay) -> LunchDecision:
        if day.lunch_out is None or day.lunch_in is None:
            return LunchDecision()
        return LunchDecision(
            entrances=(day.lunch_in,),
            exits=(day.lunch_out,),
            break_logged=True,
            window=(day.lunch_out, day.lunch_in),
        )

    def advisories(self, decision: LunchDecision, lunch_gap: float, policy: PolicyConfig) -> list[str]:
        floor = policy.mandatory_break
        if not decision.break_logged:
            return [f"no lunch break logged, {floor} min break counted anyway"]
        if lunch_gap < floor:
            return [f"lunch break under {floor} min, counted at floor ({floor} min)"]
        return []
