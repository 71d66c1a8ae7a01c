from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_coordinate(value, field_name: str, *, bound: float) -> Optional[float]:
    """Accept a latitude/longitude from request input; blank means not provided."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not -bound <= number <= bound:
        raise ValidationError(f"{field_name} out of range")
    return number


def optional_latitude(value) -> Optional[float]:
    return optional_coordinate(value, "latitude", bound=90.0)


def optional_longitude(value) -> Optional[float]:
    return optional_coordinate(value, "longitude", bound=180.0)
