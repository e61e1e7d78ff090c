from __future__ import annotations

import pytest

from worklog.core.enums import DayMode
from worklog.ledger.calculator import evaluate_day, worked_until
from worklog.ledger.model import PolicyConfig, RawDayInput


def test_predicted_exit_without_final_out():
    result = evaluate_day(RawDayInput(morning_in="07:30", lunch_out="12:00", lunch_in="12:30"))

    assert result.error is None
    assert result.predicted_exit == "15:12"
    assert result.lunch_minutes_counted == 30
    assert result.debt_minutes is None
    assert result.credit_minutes is None
    assert any("final exit not set" in i for i in result.info)


def test_long_lunch_overage_moves_exit():
    result = evaluate_day(RawDayInput(morning_in="07:30", lunch_out="12:00", lunch_in="13:00"))

    assert result.error is None
    assert result.predicted_exit == "15:42"
    assert result.lunch_minutes_counted == 60


def test_no_break_logged_counts_floor_and_debt():
    result = evaluate_day(RawDayInput(morning_in="08:00", final_out="15:30"))

    assert result.error is None
    assert result.worked_minutes == 420
    assert result.debt_minutes == 12
    assert result.credit_minutes == 0
    assert any("no lunch break logged" in i for i in result.info)


@pytest.mark.parametrize(
    "extra",
    [
        {},
        {"final_out": "18:00"},
        {"lunch_out": "11:00", "lunch_in": "16:00"},
        {"pause_no_exit": True},
    ],
)
def test_morning_before_office_open(extra):
    result = evaluate_day(RawDayInput(morning_in="06:00", **extra))

    assert result.error is not None
    assert "before office open" in result.error
    assert result.predicted_exit is None


def test_short_lunch_requires_six_hours_of_work():
    raw = RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="12:05", final_out="13:30")

    result = evaluate_day(raw)

    assert result.error is not None
    assert "lunch requires ≥6h work" in result.error
    assert result.worked_minutes is None


def test_short_lunch_counted_at_floor():
    raw = RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="12:10", final_out="15:42")

    result = evaluate_day(raw)

    assert result.error is None
    assert result.lunch_minutes_counted == 30
    # 452 in segments, minus the 20 unlogged minutes of the floor
    assert result.worked_minutes == 432
    assert any("counted at floor" in i for i in result.info)


def test_exact_contractual_day_has_no_balance():
    raw = RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="12:30", final_out="15:42")

    result = evaluate_day(raw)

    assert result.worked_minutes == 432
    assert result.debt_minutes == 0
    assert result.credit_minutes == 0


def test_staying_longer_gives_credit():
    raw = RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="12:30", final_out="16:42")

    result = evaluate_day(raw)

    assert result.credit_minutes == 60
    assert result.debt_minutes == 0


def test_lunch_overage_must_be_worked_back():
    raw = RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="13:00", final_out="16:00")

    result = evaluate_day(raw)

    assert result.worked_minutes == 420
    assert result.lunch_minutes_counted == 60
    assert result.debt_minutes == 12


def test_debt_and_credit_are_never_both_set():
    evaluated = 0
    for morning in ("07:30", "08:00", "08:30", "09:00", "09:30"):
        for lunch_out in ("12:00", "12:30", "13:00"):
            for lunch_len in (10, 30, 45, 90):
                for final_out in ("15:00", "15:42", "16:30", "17:30", "18:59"):
                    out_h, out_m = map(int, lunch_out.split(":"))
                    back = out_h * 60 + out_m + lunch_len
                    raw = RawDayInput(
                        morning_in=morning,
                        lunch_out=lunch_out,
                        lunch_in=f"{back // 60:02d}:{back % 60:02d}",
                        final_out=final_out,
                    )
                    result = evaluate_day(raw)
                    if result.error:
                        continue
                    evaluated += 1
                    assert result.debt_minutes >= 0
                    assert result.credit_minutes >= 0
                    assert not (result.debt_minutes and result.credit_minutes)

    assert evaluated > 50


@pytest.mark.parametrize(
    "raw, message",
    [
        (RawDayInput(morning_in="7:3x"), "invalid time value"),
        (RawDayInput(morning_in="25:00"), "invalid time value"),
        (RawDayInput(morning_in="08:00", permit_out="10:99"), "invalid time value"),
        (RawDayInput(final_out="15:00"), "morning entry is required"),
        (RawDayInput(morning_in="08:00", final_out="19:30"), "after office close"),
        (RawDayInput(morning_in="08:00", final_out="08:00"), "final exit must be after morning entry"),
        (RawDayInput(morning_in="08:00", lunch_out="11:30", lunch_in="12:30"), "before lunch window start"),
        (RawDayInput(morning_in="08:00", lunch_out="14:30", lunch_in="15:30"), "after lunch window end"),
        (RawDayInput(morning_in="08:00", lunch_out="13:00", lunch_in="12:30"), "lunch return must be after lunch exit"),
        (RawDayInput(morning_in="12:30", lunch_out="12:00", lunch_in="12:45"), "lunch exit must be after morning entry"),
        (
            RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="13:00", final_out="12:45"),
            "final exit must be after lunch return",
        ),
        (RawDayInput(morning_in="11:00", final_out="18:00"), "worked by 14:12"),
        (RawDayInput(morning_in="11:30", lunch_out="12:00", lunch_in="14:30"), "predicted exit"),
    ],
)
def test_validation_errors(raw, message):
    result = evaluate_day(raw)

    assert result.error is not None
    assert message in result.error
    assert not result.ok
    assert result.debt_minutes is None and result.credit_minutes is None


def test_incomplete_lunch_is_treated_as_not_logged():
    result = evaluate_day(RawDayInput(morning_in="08:00", lunch_out="12:00", final_out="15:42"))

    assert result.error is None
    assert result.worked_minutes == 432
    assert result.lunch_minutes_counted == 30


def test_no_exit_pause_ignores_lunch_stamps():
    raw = RawDayInput(morning_in="08:00", lunch_out="11:00", lunch_in="11:05", final_out="15:42", pause_no_exit=True)

    result = evaluate_day(raw)

    assert result.error is None
    assert result.mode is DayMode.NO_EXIT_PAUSE
    assert result.worked_minutes == 432
    assert result.debt_minutes == 0
    assert result.credit_minutes == 0
    assert any("without leaving" in i for i in result.info)


def test_no_exit_pause_predicted_exit_includes_permit():
    raw = RawDayInput(morning_in="08:00", pause_no_exit=True, used_permit=True, permit_out="10:00", permit_in="10:45")

    result = evaluate_day(raw)

    assert result.predicted_exit == "16:27"
    assert result.permit_minutes == 45


def test_permit_absorbed_once_contractual_time_is_met():
    raw = RawDayInput(
        morning_in="08:00",
        final_out="17:30",
        pause_no_exit=True,
        used_permit=True,
        permit_out="10:00",
        permit_in="11:00",
    )

    result = evaluate_day(raw)

    assert result.error is None
    assert result.worked_minutes == 480
    assert result.permit_absorbed is True
    assert result.display_worked_minutes == 540
    assert result.credit_minutes == 48


def test_permit_not_absorbed_at_exact_contractual_time():
    raw = RawDayInput(
        morning_in="08:00",
        final_out="16:42",
        pause_no_exit=True,
        used_permit=True,
        permit_out="10:00",
        permit_in="11:00",
    )

    result = evaluate_day(raw)

    assert result.worked_minutes == 432
    assert result.permit_absorbed is False
    assert result.display_worked_minutes == 432
    assert result.debt_minutes == 0


def test_permit_extends_exit_with_lunch_exit():
    raw = RawDayInput(
        morning_in="08:00",
        lunch_out="12:00",
        lunch_in="12:30",
        final_out="16:42",
        used_permit=True,
        permit_out="14:00",
        permit_in="15:00",
    )

    result = evaluate_day(raw)

    assert result.predicted_exit == "16:42"
    assert result.permit_minutes == 60
    assert result.worked_minutes == 432
    assert result.total_with_permit_minutes == 492
    assert result.display_worked_minutes == 492
    assert result.debt_minutes == 0


@pytest.mark.parametrize(
    "used_permit, permit_out, permit_in",
    [
        (False, "14:00", "15:00"),
        (True, "15:00", "14:00"),
        (True, "14:00", ""),
    ],
)
def test_permit_ignored_unless_used_and_ordered(used_permit, permit_out, permit_in):
    raw = RawDayInput(
        morning_in="08:00",
        lunch_out="12:00",
        lunch_in="12:30",
        final_out="16:42",
        used_permit=used_permit,
        permit_out=permit_out,
        permit_in=permit_in,
    )

    result = evaluate_day(raw)

    assert result.permit_minutes == 0
    assert result.credit_minutes == 60


def test_multi_segment_day():
    raw = RawDayInput(
        morning_in="08:00",
        lunch_out="12:00",
        lunch_in="12:30",
        final_out="15:00",
        extra_segments=(("16:00", "17:00"),),
    )

    result = evaluate_day(raw)

    assert result.error is None
    assert result.mode is DayMode.MULTI_SEGMENT
    # the 60 minute gap outside lunch has to be worked back
    assert result.predicted_exit == "16:42"
    assert result.worked_minutes == 450
    assert result.credit_minutes == 18


def test_multi_segment_projection_without_final_out():
    raw = RawDayInput(
        morning_in="08:00",
        lunch_out="12:00",
        lunch_in="12:30",
        extra_segments=(("10:20", "10:00"),),
    )

    result = evaluate_day(raw)

    assert result.error is None
    assert result.predicted_exit == "16:02"


@pytest.mark.parametrize(
    "segments, message",
    [
        ((("16:00", ""),), "do not pair up"),
        ((("14:00", "14:30"),), "segments overlap"),
        ((("07:45", "07:50"),), "before morning entry"),
    ],
)
def test_multi_segment_ordering_errors(segments, message):
    raw = RawDayInput(morning_in="08:00", lunch_out="12:00", lunch_in="12:30", final_out="15:00", extra_segments=segments)

    result = evaluate_day(raw)

    assert result.error is not None
    assert message in result.error
    assert result.mode is DayMode.MULTI_SEGMENT


def test_policy_is_overridable():
    policy = PolicyConfig(work_duration=480)

    result = evaluate_day(RawDayInput(morning_in="07:30", lunch_out="12:00", lunch_in="12:30"), policy)

    assert result.predicted_exit == "16:00"


def test_worked_until_clips_segments():
    assert worked_until([(480, 720), (750, 900), (960, 1020)], 852) == 240 + 102
