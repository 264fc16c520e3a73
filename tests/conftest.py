from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.qr.service import QrCheckInService
from src.school_attendance.school_attendance.qr.store import InMemoryQrSessionStore
from src.school_attendance.school_attendance.quota.ledger import QuotaLedger
from src.school_attendance.school_attendance.reconciliation.service import ReconciliationService
from src.school_attendance.school_attendance.students.model import Student


class InMemoryStudents:
    def __init__(self, *students: Student):
        self.by_id: dict[str, Student] = {s.student_id: s for s in students}
        self.saves = 0
        self.partial_updates = 0

    def add(self, student: Student) -> Student:
        self.by_id[student.student_id] = student
        return student

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self.by_id.get(str(student_id))

    def get_by_ids(self, student_ids):
        return [self.by_id[s] for s in student_ids if s in self.by_id]

    def list_all(self):
        return list(self.by_id.values())

    def set_used_sessions(self, *, student_id: str, course_index: int, used_sessions: int) -> bool:
        student = self.by_id.get(student_id)
        if not student or course_index >= len(student.courses):
            return False
        courses = list(student.courses)
        courses[course_index] = replace(courses[course_index], used_sessions=used_sessions)
        self.by_id[student_id] = replace(student, courses=tuple(courses))
        self.partial_updates += 1
        return True

    def save(self, student: Student) -> None:
        self.by_id[student.student_id] = student
        self.saves += 1

    def used(self, student_id: str, index: int = 0) -> int:
        return self.by_id[student_id].courses[index].used_sessions


class InMemorySubjects:
    def __init__(self, names: Optional[dict[str, str]] = None):
        self.names = dict(names or {})

    def get_by_id(self, subject_id: str) -> Optional[str]:
        return self.names.get(subject_id)

    def find_id_by_name(self, name: str) -> Optional[str]:
        for sid, n in self.names.items():
            if n == (name or "").strip():
                return sid
        return None


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[str, AttendanceRecord] = {}
        self._next = 0
        self.saves = 0

    def get_by_id(self, record_id):
        return self.records.get(record_id)

    def find_for_subject_and_date(self, subject_id, day, *, exclude_id=None):
        for r in self.records.values():
            if r.subject_id == subject_id and r.date == day and r.record_id != exclude_id:
                return r
        return None

    def find_for_subject_name_and_date(self, subject_name, day):
        for r in self.records.values():
            if r.subject_name == subject_name and r.date == day:
                return r
        return None

    def create(self, record):
        if not record.record_id:
            self._next += 1
            record = replace(record, record_id=f"rec-{self._next}")
        self.records[record.record_id] = record
        return record

    def save(self, record):
        self.records[record.record_id] = record
        self.saves += 1
        return record

    def delete(self, record_id):
        return self.records.pop(record_id, None) is not None

    def list_all(self):
        return sorted(self.records.values(), key=lambda r: (r.date, r.record_id))

    def list_filtered(self, *, subject=None, teacher_id=None, descending=False):
        out = [
            r
            for r in self.records.values()
            if (not subject or subject in (r.subject_id, r.subject_name))
            and (not teacher_id or r.teacher_id == teacher_id)
        ]
        return sorted(out, key=lambda r: r.date, reverse=descending)

    def list_for_student(self, student_id):
        out = [r for r in self.records.values() if r.find_entry(student_id)]
        return sorted(out, key=lambda r: r.date, reverse=True)


class RecordingSink:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def emit(self, event, payload):
        self.events.append((event, payload))

    @property
    def names(self):
        return [e for e, _ in self.events]


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def students():
    return InMemoryStudents()


@pytest.fixture
def subjects():
    return InMemorySubjects({"sub-web": "Web Design", "sub-math": "Math"})


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 9, 15, 0))


@pytest.fixture
def ledger(students):
    return QuotaLedger(students)


@pytest.fixture
def attendance_service(attendance, students, subjects, ledger, sink):
    return AttendanceService(attendance, students, subjects, ledger=ledger, notifier=sink)


@pytest.fixture
def qr_store():
    return InMemoryQrSessionStore()


@pytest.fixture
def qr_service(attendance, students, ledger, sink, qr_store, clock):
    return QrCheckInService(attendance, students, store=qr_store, ledger=ledger, notifier=sink, clock=clock)


@pytest.fixture
def reconciliation_service(attendance, students, subjects, ledger):
    return ReconciliationService(attendance, students, subjects, ledger=ledger)


@pytest.fixture
def day():
    return date(2026, 3, 2)
