from __future__ import annotations

from datetime import date

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_date(value, field_name: str = "date") -> date:
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid date")


def require_status(value, field_name: str = "status") -> AttendanceStatus:
    status = AttendanceStatus.parse(value)
    if status is None:
        raise ValidationError(f"{field_name} '{value}' is not a known attendance status")
    return status
