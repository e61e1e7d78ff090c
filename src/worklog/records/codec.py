"""Flat (camelCase) shape of a day record, independent of the storage backend.

The same dict shape is used inside encrypted envelopes, in the JSON fallback
store and on the HTTP surface. Rows written before encryption existed keep
their values in plain columns; `record_from_legacy_row` reads those.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..common.time_utils import now_utc_iso
from ..core.enums import DayMode
from ..core.exceptions import ValidationError
from ..ledger.model import DayResult, RawDayInput
from .model import DayRecord

LEGACY_COLUMNS = (
    "morning_in",
    "lunch_out",
    "lunch_in",
    "final_out",
    "pause_no_exit",
    "used_permit",
    "permit_out",
    "permit_in",
    "calculated_json",
)


def raw_to_dict(raw: RawDayInput) -> dict[str, Any]:
    return {
        "morningIn": raw.morning_in,
        "lunchOut": raw.lunch_out,
        "lunchIn": raw.lunch_in,
        "finalOut": raw.final_out,
        "pauseNoExit": raw.pause_no_exit,
        "usedPermit": raw.used_permit,
        "permitOut": raw.permit_out,
        "permitIn": raw.permit_in,
        "extraSegments": [{"entrance": e, "exit": x} for e, x in raw.extra_segments],
    }


def raw_from_dict(data: Mapping[str, Any]) -> RawDayInput:
    """Build the raw input from its flat shape.

    Raises:
        ValidationError: If a field has the wrong type
    """
    items = data.get("extraSegments") or []
    if not isinstance(items, (list, tuple)):
        raise ValidationError("extraSegments must be a list")
    segments = [_segment(item) for item in items]

    return RawDayInput(
        morning_in=_text(data.get("morningIn")),
        lunch_out=_text(data.get("lunchOut")),
        lunch_in=_text(data.get("lunchIn")),
        final_out=_text(data.get("finalOut")),
        pause_no_exit=_flag(data, "pauseNoExit"),
        used_permit=_flag(data, "usedPermit"),
        permit_out=_text(data.get("permitOut")),
        permit_in=_text(data.get("permitIn")),
        extra_segments=tuple(segments),
    )


def result_to_dict(result: DayResult) -> dict[str, Any]:
    return {
        "mode": result.mode.value,
        "predictedExit": result.predicted_exit,
        "workedMinutes": result.worked_minutes,
        "lunchMinutesCounted": result.lunch_minutes_counted,
        "debtMinutes": result.debt_minutes,
        "creditMinutes": result.credit_minutes,
        "permitMinutes": result.permit_minutes,
        "totalWithPermitMinutes": result.total_with_permit_minutes,
        "permitAbsorbed": result.permit_absorbed,
        "error": result.error,
        "info": list(result.info),
    }


def result_from_dict(data: Mapping[str, Any], *, mode: DayMode = DayMode.SIMPLE) -> DayResult:
    if _is_legacy_result(data):
        return _result_from_legacy(data, mode=mode)

    return DayResult(
        mode=_mode(data.get("mode"), default=mode),
        predicted_exit=data.get("predictedExit"),
        worked_minutes=data.get("workedMinutes"),
        lunch_minutes_counted=data.get("lunchMinutesCounted"),
        debt_minutes=data.get("debtMinutes"),
        credit_minutes=data.get("creditMinutes"),
        permit_minutes=data.get("permitMinutes") or 0,
        total_with_permit_minutes=data.get("totalWithPermitMinutes"),
        permit_absorbed=bool(data.get("permitAbsorbed", False)),
        error=data.get("error"),
        info=tuple(data.get("info") or ()),
    )


def record_to_dict(record: DayRecord) -> dict[str, Any]:
    data = raw_to_dict(record.raw)
    data["calculated"] = result_to_dict(record.calculated) if record.calculated is not None else None
    data["updatedAt"] = record.updated_at
    return data


def record_from_dict(data: Mapping[str, Any]) -> DayRecord:
    raw = raw_from_dict(data)
    calculated = data.get("calculated")
    if calculated is not None and not isinstance(calculated, Mapping):
        raise ValidationError("calculated must be an object or null")
    return DayRecord(
        raw=raw,
        calculated=result_from_dict(calculated, mode=raw.mode) if calculated else None,
        updated_at=_text(data.get("updatedAt")) or now_utc_iso(),
    )


def encode_record(record: DayRecord) -> str:
    return json.dumps(record_to_dict(record), ensure_ascii=False, separators=(",", ":"))


def decode_record(text: str) -> DayRecord:
    return record_from_dict(json.loads(text))


def has_legacy_values(row: Mapping[str, Any]) -> bool:
    """True when any plain legacy column still carries data."""
    for column in LEGACY_COLUMNS:
        value = row.get(column)
        if column in ("pause_no_exit", "used_permit"):
            if int(value or 0) == 1:
                return True
        elif value not in (None, ""):
            return True
    return False


def record_from_legacy_row(row: Mapping[str, Any]) -> DayRecord:
    """Rebuild a record from the plain columns of a pre-encryption row."""
    raw = RawDayInput(
        morning_in=_text(row.get("morning_in")),
        lunch_out=_text(row.get("lunch_out")),
        lunch_in=_text(row.get("lunch_in")),
        final_out=_text(row.get("final_out")),
        pause_no_exit=int(row.get("pause_no_exit") or 0) == 1,
        used_permit=int(row.get("used_permit") or 0) == 1,
        permit_out=_text(row.get("permit_out")),
        permit_in=_text(row.get("permit_in")),
    )

    calculated: Optional[DayResult] = None
    calculated_raw = row.get("calculated_json")
    if isinstance(calculated_raw, str) and calculated_raw:
        calculated = result_from_dict(json.loads(calculated_raw), mode=raw.mode)

    return DayRecord(
        raw=raw,
        calculated=calculated,
        updated_at=_text(row.get("updated_at")) or now_utc_iso(),
    )


def _is_legacy_result(data: Mapping[str, Any]) -> bool:
    return "total" in data and "workedMinutes" not in data


def _result_from_legacy(data: Mapping[str, Any], *, mode: DayMode) -> DayResult:
    # {total, debt, credit, totalWithPermit, permitDuration, totalRaw, totalWithPermitIfReached, reachedWorkTime}
    total = data.get("total")
    permit = data.get("permitDuration") or 0
    if_reached = data.get("totalWithPermitIfReached")
    absorbed = bool(data.get("reachedWorkTime")) and total is not None and if_reached is not None and if_reached > total
    return DayResult(
        mode=mode,
        worked_minutes=total,
        debt_minutes=data.get("debt"),
        credit_minutes=data.get("credit"),
        permit_minutes=permit,
        total_with_permit_minutes=data.get("totalWithPermit"),
        permit_absorbed=absorbed,
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _segment(item: Any) -> tuple[str, str]:
    if isinstance(item, Mapping):
        return _text(item.get("entrance")), _text(item.get("exit"))
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return _text(item[0]), _text(item[1])
    raise ValidationError(f"extra segment must be an entrance/exit pair, got {item!r}")


def _flag(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


def _mode(value: Any, *, default: DayMode) -> DayMode:
    if not value:
        return default
    try:
        return DayMode(value)
    except ValueError as e:
        raise ValidationError(f"unknown day mode {value!r}") from e
