from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class CourseExtension:
    extended_at: datetime
    previous_end_date: Optional[date]
    new_end_date: date
    sessions_added: int
    note: str = ""


@dataclass(frozen=True)
class HistoryEntry:
    """Legacy per-course attendance line embedded in the student profile."""

    date: date
    status: str
    note: str = ""
    check_in_time: str = ""


@dataclass(frozen=True)
class CourseRegistration:
    """A student's enrollment in one subject, with its session quota.

    ``total_sessions == 0`` means unlimited. ``used_sessions`` is a cached
    count rebuilt from attendance records by the reconciliation service.
    """

    subject: str
    teacher_id: Optional[str] = None
    teacher_name: str = ""
    subject_id: Optional[str] = None
    total_sessions: int = 0
    used_sessions: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    extension_history: Tuple[CourseExtension, ...] = ()
    attendance_history: Tuple[HistoryEntry, ...] = ()

    @property
    def is_unlimited(self) -> bool:
        return int(self.total_sessions or 0) == 0

    @property
    def remaining_sessions(self) -> Optional[int]:
        if self.is_unlimited:
            return None
        return int(self.total_sessions) - int(self.used_sessions or 0)


@dataclass(frozen=True)
class Student:
    """Domain entity: Student with embedded course registrations."""

    student_id: str
    first_name: str = ""
    last_name: str = ""
    nickname: str = ""
    display_name: str = ""
    student_name: str = ""
    enrolled_subjects: Tuple[str, ...] = ()
    courses: Tuple[CourseRegistration, ...] = field(default_factory=tuple)

    def name_parts(self) -> Tuple[str, str]:
        """First/last name, falling back to the legacy full-name fields."""

        full = (self.student_name or self.display_name or "").strip().split()
        first = self.first_name or (full[0] if full else "")
        last = self.last_name or " ".join(full[1:])
        return first, last
