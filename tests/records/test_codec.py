import json

import pytest

from worklog.core.enums import DayMode
from worklog.core.exceptions import ValidationError
from worklog.ledger.calculator import evaluate_day
from worklog.ledger.model import RawDayInput
from worklog.records.codec import (
    decode_record,
    encode_record,
    has_legacy_values,
    raw_from_dict,
    record_from_dict,
    record_from_legacy_row,
)
from worklog.records.model import DayRecord


def test_record_survives_encoding():
    raw = RawDayInput(
        morning_in="08:00",
        lunch_out="12:00",
        lunch_in="12:30",
        final_out="15:00",
        extra_segments=(("16:00", "17:00"),),
    )
    record = DayRecord(raw=raw, calculated=evaluate_day(raw), updated_at="2024-03-01T17:00:00+00:00")

    assert decode_record(encode_record(record)) == record


def test_record_without_calculation():
    record = DayRecord(raw=RawDayInput(morning_in="08:00"), calculated=None, updated_at="2024-03-01T08:00:00+00:00")

    data = json.loads(encode_record(record))

    assert data["calculated"] is None
    assert decode_record(encode_record(record)).calculated is None


def test_missing_updated_at_is_stamped():
    record = record_from_dict({"morningIn": "08:00"})

    assert record.updated_at
    assert record.raw.morning_in == "08:00"
    assert record.raw.final_out == ""


def test_extra_segments_accept_pairs_and_objects():
    raw = raw_from_dict({"extraSegments": [{"entrance": "16:00", "exit": "17:00"}, ["17:30", None]]})

    assert raw.extra_segments == (("16:00", "17:00"), ("17:30", ""))
    assert raw.mode is DayMode.MULTI_SEGMENT


def test_legacy_row():
    row = {
        "morning_in": "08:00",
        "lunch_out": "12:00",
        "lunch_in": "12:30",
        "final_out": "15:42",
        "pause_no_exit": 0,
        "used_permit": 0,
        "permit_out": None,
        "permit_in": None,
        "calculated_json": json.dumps({"total": 432, "debt": 0, "credit": 0, "permitDuration": 0}),
        "updated_at": "2023-11-02T16:00:00Z",
    }

    assert has_legacy_values(row)
    record = record_from_legacy_row(row)

    assert record.raw.final_out == "15:42"
    assert record.calculated.worked_minutes == 432
    assert record.calculated.debt_minutes == 0
    assert record.updated_at == "2023-11-02T16:00:00Z"


def test_blank_legacy_row_has_no_values():
    assert not has_legacy_values({"pause_no_exit": 0, "used_permit": 0, "morning_in": "", "calculated_json": None})
    assert has_legacy_values({"pause_no_exit": 1})


@pytest.mark.parametrize("value", ["false", "true", 0, 1])
def test_flags_must_be_booleans(value):
    with pytest.raises(ValidationError):
        raw_from_dict({"morningIn": "08:00", "pauseNoExit": value})


def test_absent_or_null_flags_are_off():
    raw = raw_from_dict({"morningIn": "08:00", "usedPermit": None})

    assert raw.pause_no_exit is False
    assert raw.used_permit is False


@pytest.mark.parametrize(
    "data",
    [
        {"extraSegments": [["16:00"]]},
        {"extraSegments": [42]},
        {"calculated": ["not", "an", "object"]},
        {"calculated": {"mode": "weekend"}},
    ],
)
def test_bad_shapes_raise_validation_error(data):
    with pytest.raises(ValidationError):
        record_from_dict({"morningIn": "08:00", **data})
