from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance record store. Dates are compared at day granularity."""

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_for_subject_and_date(
        self,
        subject_id: str,
        day: date,
        *,
        exclude_id: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_for_subject_name_and_date(self, subject_name: str, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record; an empty ``record_id`` gets a generated one."""

        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        """Replace header fields and the whole roster of an existing record."""

        raise NotImplementedError

    def delete(self, record_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        subject: Optional[str] = None,
        teacher_id: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[AttendanceRecord]:
        """``subject`` matches either the subject id or the subject name."""

        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
