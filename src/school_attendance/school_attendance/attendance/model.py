from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class AttendanceEntry:
    """One student's line on a daily roster.

    ``status`` holds the stored label; rows written by this service are always
    canonical, legacy rows may not be until ``sanitize_system`` runs.
    """

    student_id: str
    first_name: str = ""
    last_name: str = ""
    status: str = ""
    nickname: Optional[str] = None
    leave_type: Optional[str] = None
    time: Optional[str] = None
    class_period: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the authoritative roster of one subject on one day."""

    record_id: str
    subject_id: str
    subject_name: str
    teacher_id: Optional[str]
    date: date
    students: Tuple[AttendanceEntry, ...] = ()

    def find_entry(self, student_id: str) -> Optional[AttendanceEntry]:
        sid = str(student_id)
        for entry in self.students:
            if str(entry.student_id) == sid:
                return entry
        return None

    def with_students(self, students) -> "AttendanceRecord":
        return replace(self, students=tuple(students))

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "subjectId": self.subject_id,
            "subjectName": self.subject_name,
            "teacherId": self.teacher_id,
            "date": self.date.strftime("%Y-%m-%d"),
            "students": [
                {
                    "studentId": e.student_id,
                    "firstName": e.first_name,
                    "lastName": e.last_name,
                    "nickname": e.nickname,
                    "status": e.status,
                    "leaveType": e.leave_type,
                    "time": e.time,
                    "classPeriod": e.class_period,
                    "comment": e.comment,
                }
                for e in self.students
            ],
        }
