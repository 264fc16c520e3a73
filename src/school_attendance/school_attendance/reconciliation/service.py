from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Dict, Optional

from ..attendance.model import AttendanceEntry, AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.status import is_deductible, normalize_status
from ..core.constants import (
    DEFAULT_HISTORY_TIME,
    DEFAULT_NICKNAME,
    UNKNOWN_FIRST_NAME,
    UNKNOWN_HISTORY_LAST_NAME,
)
from ..quota.ledger import QuotaLedger
from ..quota.matcher import CourseMatcher
from ..students.model import Student
from ..students.repository import StudentRepository
from ..subjects.repository import SubjectRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecalculateResult:
    updated_count: int
    fail_count: int

    def to_dict(self) -> dict:
        return {"updatedCount": self.updated_count, "failCount": self.fail_count}


@dataclass(frozen=True)
class SanitizeResult:
    cleaned_records: int
    updated_count: int
    fail_count: int

    def to_dict(self) -> dict:
        return {
            "cleanedRecords": self.cleaned_records,
            "updatedCount": self.updated_count,
            "failCount": self.fail_count,
        }


@dataclass(frozen=True)
class RecoveryResult:
    created_count: int
    updated_count: int

    def to_dict(self) -> dict:
        return {"createdCount": self.created_count, "updatedCount": self.updated_count}


def sanitize_record(record: AttendanceRecord) -> Optional[AttendanceRecord]:
    """Cleaned copy of ``record``, or None when it is already clean."""

    name = (record.subject_name or "").strip()
    entries = []
    dirty = name != record.subject_name
    for entry in record.students:
        sid = str(entry.student_id).strip()
        status = normalize_status(entry.status)
        if sid != entry.student_id or status != entry.status:
            dirty = True
            entry = replace(entry, student_id=sid, status=status)
        entries.append(entry)

    if not dirty:
        return None
    return replace(record, subject_name=name, students=tuple(entries))


class ReconciliationService:
    """Bulk passes that rebuild cached quota counters from attendance records.

    None of the passes is transactional. Each one is safe to re-run: a storage
    error stops the pass and leaves earlier writes in place.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        subjects: SubjectRepository,
        *,
        ledger: QuotaLedger | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._subjects = subjects
        self._ledger = ledger or QuotaLedger(students)
        self._replay_matcher = CourseMatcher.subject_only()

    def _reset_used_sessions(self) -> int:
        reset = 0
        for student in self._students.list_all():
            if not any(int(c.used_sessions or 0) != 0 for c in student.courses):
                continue
            courses = tuple(replace(c, used_sessions=0) for c in student.courses)
            self._students.save(replace(student, courses=courses))
            reset += 1
        return reset

    def _replay(self) -> RecalculateResult:
        updated = 0
        failed = 0
        for record in self._attendance.list_all():
            for entry in record.students:
                if not is_deductible(entry.status):
                    continue
                result = self._ledger.apply_delta(
                    entry.student_id, record.subject_name, None, 1, matcher=self._replay_matcher
                )
                if result.success:
                    updated += 1
                else:
                    failed += 1
        return RecalculateResult(updated_count=updated, fail_count=failed)

    def recalculate_quotas(self) -> RecalculateResult:
        logger.info("recalculate: starting")
        reset = self._reset_used_sessions()
        result = self._replay()
        logger.info(
            "recalculate: reset %d students, %d deductions applied, %d failed",
            reset,
            result.updated_count,
            result.fail_count,
        )
        return result

    def sanitize_system(self) -> SanitizeResult:
        logger.info("sanitize: starting")
        cleaned = 0
        for record in self._attendance.list_all():
            fixed = sanitize_record(record)
            if fixed is None:
                continue
            self._attendance.save(fixed)
            cleaned += 1
        logger.info("sanitize: cleaned %d records", cleaned)

        quotas = self.recalculate_quotas()
        return SanitizeResult(
            cleaned_records=cleaned,
            updated_count=quotas.updated_count,
            fail_count=quotas.fail_count,
        )

    def recover_history_from_profiles(self) -> RecoveryResult:
        """Rebuild attendance records from the history embedded in registrations.

        Quotas are left alone; run ``recalculate_quotas`` afterwards.
        """
        logger.info("recover: starting")
        created = 0
        updated = 0
        subject_ids: Dict[str, Optional[str]] = {}

        for student in self._students.list_all():
            for course in student.courses:
                if not course.attendance_history:
                    continue

                subject_name = (course.subject or "").strip()
                subject_id = course.subject_id
                if not subject_id:
                    if subject_name not in subject_ids:
                        subject_ids[subject_name] = self._subjects.find_id_by_name(subject_name)
                    subject_id = subject_ids[subject_name]

                for item in course.attendance_history:
                    entry = self._history_entry(student, item.status, item.note, item.check_in_time)

                    record = self._attendance.find_for_subject_name_and_date(subject_name, item.date)
                    if record is None and subject_id:
                        record = self._attendance.find_for_subject_and_date(subject_id, item.date)

                    if record is not None:
                        if record.find_entry(student.student_id) is None:
                            self._attendance.save(record.with_students(list(record.students) + [entry]))
                            updated += 1
                        continue

                    self._attendance.create(
                        AttendanceRecord(
                            record_id="",
                            subject_id=subject_id or uuid.uuid4().hex,
                            subject_name=subject_name,
                            teacher_id=course.teacher_id or uuid.uuid4().hex,
                            date=item.date,
                            students=(entry,),
                        )
                    )
                    created += 1

        logger.info("recover: created %d records, updated %d records", created, updated)
        return RecoveryResult(created_count=created, updated_count=updated)

    @staticmethod
    def _history_entry(student: Student, status: str, note: str, check_in_time: str) -> AttendanceEntry:
        first, last = student.name_parts()
        return AttendanceEntry(
            student_id=student.student_id,
            first_name=first or UNKNOWN_FIRST_NAME,
            last_name=last or UNKNOWN_HISTORY_LAST_NAME,
            nickname=student.nickname or DEFAULT_NICKNAME,
            status=normalize_status(status),
            time=check_in_time or DEFAULT_HISTORY_TIME,
            comment=note or None,
        )
