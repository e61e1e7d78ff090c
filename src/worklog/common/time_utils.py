from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError

DAY_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HHMM_PATTERN = re.compile(r"^\d{1,2}:\d{2}$")


def parse_hhmm(value: str) -> int:
    """Parse an "HH:MM" string into minutes after midnight."""
    text = (value or "").strip()
    if not HHMM_PATTERN.match(text):
        raise ValidationError(f"invalid time value: {value!r}")
    try:
        parsed = datetime.strptime(text, "%H:%M")
    except ValueError as e:
        raise ValidationError(f"invalid time value: {value!r}") from e
    return parsed.hour * 60 + parsed.minute


def parse_optional_hhmm(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return parse_hhmm(value)


def format_hhmm(minutes: float) -> str:
    """Render minutes after midnight as "HH:MM" (seconds are dropped)."""
    whole = int(minutes)
    return f"{whole // 60:02d}:{whole % 60:02d}"


def format_minutes_label(minutes: float) -> str:
    whole = int(minutes)
    return f"{whole // 60}h {whole % 60}m"


def is_valid_day_key(value: str) -> bool:
    if not isinstance(value, str) or not DAY_KEY_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_day_key(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not is_valid_day_key(value):
        raise ValidationError(f"invalid day key: {value!r}")
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_day_key(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def now_utc_iso() -> str:
    """Current wall-clock time as an ISO-8601 string.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now(timezone.utc).isoformat()
