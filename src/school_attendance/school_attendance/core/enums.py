from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    """User roles used for access checks."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Canonical attendance status stored on a roster entry."""

    PRESENT = "Present"
    LATE = "Late"
    LEAVE = "Leave"
    ABSENT = "Absent"
    SICK = "Sick"

    @classmethod
    def parse(cls, value: object) -> Optional["AttendanceStatus"]:
        """Map an English or Thai status label onto the enum (None if unknown)."""

        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        return _STATUS_ALIASES.get(key)


_STATUS_ALIASES = {
    "present": AttendanceStatus.PRESENT,
    "มาเรียน": AttendanceStatus.PRESENT,
    "late": AttendanceStatus.LATE,
    "มาสาย": AttendanceStatus.LATE,
    "absent": AttendanceStatus.ABSENT,
    "ขาด": AttendanceStatus.ABSENT,
    "leave": AttendanceStatus.LEAVE,
    "ลา": AttendanceStatus.LEAVE,
    "sick": AttendanceStatus.SICK,
    "ลาป่วย": AttendanceStatus.SICK,
}


class CheckInOutcome(str, Enum):
    """Result kinds of a QR self check-in."""

    CHECKED_IN = "checked_in"
    ALREADY_CHECKED_IN = "already_checked_in"
