from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} مطلوب")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} يجب ألا يقل عن {min_len} أحرف")
    return value


def require_in_range(value: int, field_name: str, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} غير صالح")
    if number < low or number > high:
        raise ValidationError(f"{field_name} يجب أن يكون بين {low} و {high}")
    return number
