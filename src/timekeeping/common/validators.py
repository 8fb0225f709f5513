from __future__ import annotations

from ..core.exceptions import ValidationError


def require_positive_seconds(value, field_name: str) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number of seconds") from None
    if seconds <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return seconds


def require_limit(value, field_name: str, *, maximum: int) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None
    if limit < 1 or limit > maximum:
        raise ValidationError(f"{field_name} must be between 1 and {maximum}")
    return limit
