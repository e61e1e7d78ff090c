from __future__ import annotations

from typing import Optional, Sequence

from ..common.time_utils import format_hhmm, format_minutes_label, parse_optional_hhmm
from ..core.enums import DayMode
from ..core.exceptions import ValidationError
from .factory import LunchStrategyFactory
from .model import DEFAULT_POLICY, DayResult, PolicyConfig, RawDayInput
from .strategies.base import LunchDecision, ParsedDay

Segment = tuple[int, float]


def evaluate_day(
    raw: RawDayInput,
    policy: PolicyConfig = DEFAULT_POLICY,
    *,
    factory: Optional[LunchStrategyFactory] = None,
) -> DayResult:
    """Validate one day and derive exit time, worked minutes and debt/credit.

    Never raises for bad input: the first violated rule is returned as
    `DayResult.error` and every other field is left blank.
    """
    mode = raw.mode
    try:
        return DayLedger(raw, policy, factory=factory).evaluate()
    except ValidationError as e:
        return DayResult.failed(mode, str(e))


def parse_day(raw: RawDayInput) -> ParsedDay:
    entrances: list[int] = []
    exits: list[int] = []
    for entrance, exit_ in raw.extra_segments:
        parsed_in = parse_optional_hhmm(entrance)
        parsed_out = parse_optional_hhmm(exit_)
        if parsed_in is not None:
            entrances.append(parsed_in)
        if parsed_out is not None:
            exits.append(parsed_out)

    return ParsedDay(
        morning_in=parse_optional_hhmm(raw.morning_in),
        lunch_out=parse_optional_hhmm(raw.lunch_out),
        lunch_in=parse_optional_hhmm(raw.lunch_in),
        final_out=parse_optional_hhmm(raw.final_out),
        permit_out=parse_optional_hhmm(raw.permit_out),
        permit_in=parse_optional_hhmm(raw.permit_in),
        extra_entrances=tuple(entrances),
        extra_exits=tuple(exits),
    )


def worked_until(segments: Sequence[Segment], boundary: int) -> float:
    """Minutes inside `segments` that fall before `boundary`."""
    total = 0.0
    for entrance, exit_ in segments:
        if entrance >= boundary:
            continue
        total += min(exit_, boundary) - entrance
    return total


class DayLedger:
    """One evaluation of one day. Discard after `evaluate()`."""

    def __init__(self, raw: RawDayInput, policy: PolicyConfig, *, factory: Optional[LunchStrategyFactory] = None):
        self._raw = raw
        self._policy = policy
        self._mode = raw.mode
        self._lunch = (factory or LunchStrategyFactory()).for_mode(self._mode)

    def evaluate(self) -> DayResult:
        policy = self._policy
        day = parse_day(self._raw)
        if day.morning_in is None:
            raise ValidationError("morning entry is required")

        self._check_bounds(day)
        decision = self._lunch.decide(day)
        entrances, exits = self._sequence(day, decision)
        self._check_sequence(day, entrances, exits)

        gaps = [(exits[i], entrances[i + 1]) for i in range(len(entrances) - 1)]
        lunch_gap = self._lunch_gap(decision, gaps)
        other_gaps = sum(end - start for start, end in gaps) - lunch_gap
        counted_lunch = max(lunch_gap, policy.mandatory_break) if decision.window else policy.mandatory_break
        unlogged_break = counted_lunch - lunch_gap
        permit = self._permit_minutes(day)

        predicted = day.morning_in + policy.work_duration + counted_lunch + permit + other_gaps
        if predicted > policy.office_close:
            raise ValidationError(
                f"predicted exit {format_hhmm(predicted)} is after office close ({format_hhmm(policy.office_close)})"
            )

        final_supplied = day.final_out is not None
        closing = exits[-1] if final_supplied else max(predicted, entrances[-1])
        segments: list[Segment] = list(zip(entrances, exits[: len(entrances) - 1] + [closing]))
        worked = sum(exit_ - entrance for entrance, exit_ in segments) - unlogged_break - permit

        by_checkpoint = worked_until(segments, policy.checkpoint)
        if by_checkpoint < policy.min_work_by_checkpoint:
            raise ValidationError(
                f"only {format_minutes_label(by_checkpoint)} worked by {format_hhmm(policy.checkpoint)}, "
                f"at least {format_minutes_label(policy.min_work_by_checkpoint)} required"
            )

        if decision.break_logged and worked < policy.min_work_for_lunch:
            raise ValidationError(
                f"lunch requires ≥{policy.min_work_for_lunch // 60}h work "
                f"(worked {format_minutes_label(worked)})"
            )

        info = self._lunch.advisories(decision, lunch_gap, policy)
        if not final_supplied:
            info.append(f"final exit not set, predicted exit {format_hhmm(predicted)}")
            return DayResult(
                mode=self._mode,
                predicted_exit=format_hhmm(predicted),
                lunch_minutes_counted=counted_lunch,
                permit_minutes=permit,
                info=tuple(info),
            )

        required_presence = policy.work_duration + counted_lunch + permit
        elapsed_presence = (closing - day.morning_in) - other_gaps
        balance = elapsed_presence - required_presence
        absorbed = (
            self._mode is DayMode.NO_EXIT_PAUSE
            and self._raw.used_permit
            and permit > 0
            and worked > policy.work_duration
        )
        if absorbed:
            info.append("contractual time reached, permit absorbed")

        return DayResult(
            mode=self._mode,
            predicted_exit=format_hhmm(predicted),
            worked_minutes=worked,
            lunch_minutes_counted=counted_lunch,
            debt_minutes=max(-balance, 0),
            credit_minutes=max(balance, 0),
            permit_minutes=permit,
            total_with_permit_minutes=worked + permit,
            permit_absorbed=absorbed,
            info=tuple(info),
        )

    def _check_bounds(self, day: ParsedDay) -> None:
        policy = self._policy
        if day.morning_in < policy.office_open:
            raise ValidationError(
                f"morning entry {format_hhmm(day.morning_in)} is before office open ({format_hhmm(policy.office_open)})"
            )
        if day.final_out is not None and day.final_out > policy.office_close:
            raise ValidationError(
                f"final exit {format_hhmm(day.final_out)} is after office close ({format_hhmm(policy.office_close)})"
            )
        if day.final_out is not None and day.final_out <= day.morning_in:
            raise ValidationError("final exit must be after morning entry")
        self._lunch.validate(day, policy)

    def _sequence(self, day: ParsedDay, decision: LunchDecision) -> tuple[list[int], list[int]]:
        entrances = sorted((day.morning_in,) + decision.entrances + day.extra_entrances)
        final = (day.final_out,) if day.final_out is not None else ()
        exits = sorted(decision.exits + day.extra_exits + final)
        return entrances, exits

    def _check_sequence(self, day: ParsedDay, entrances: list[int], exits: list[int]) -> None:
        expected_exits = len(entrances) if day.final_out is not None else len(entrances) - 1
        if len(exits) != expected_exits:
            raise ValidationError("entrances and exits do not pair up")
        if entrances[0] != day.morning_in:
            raise ValidationError(f"entrance {format_hhmm(entrances[0])} is before morning entry")

        for entrance, exit_ in zip(entrances, exits):
            if entrance >= exit_:
                raise ValidationError(f"entrance {format_hhmm(entrance)} must precede exit {format_hhmm(exit_)}")
        for i in range(len(entrances) - 1):
            if exits[i] > entrances[i + 1]:
                raise ValidationError(
                    f"segments overlap: exit {format_hhmm(exits[i])} is after entrance {format_hhmm(entrances[i + 1])}"
                )

    def _lunch_gap(self, decision: LunchDecision, gaps: list[tuple[int, int]]) -> float:
        if not decision.window:
            return 0
        lunch_out, lunch_in = decision.window
        return sum(end - start for start, end in gaps if start >= lunch_out and end <= lunch_in)

    def _permit_minutes(self, day: ParsedDay) -> float:
        if not self._raw.used_permit:
            return 0
        if day.permit_out is None or day.permit_in is None:
            return 0
        if day.permit_in <= day.permit_out:
            return 0
        return day.permit_in - day.permit_out
