from __future__ import annotations

from ..core.exceptions import ValidationError
from .time_utils import is_valid_day_key


def require_day_key(value: str) -> str:
    if not value or not is_valid_day_key(value.strip()):
        raise ValidationError(f"invalid day key {value!r}, expected YYYY-MM-DD")
    return value.strip()
