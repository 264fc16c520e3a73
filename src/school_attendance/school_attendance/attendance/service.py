from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..common.validators import require_date, require_non_empty, require_status
from ..core.exceptions import ConflictError, DomainError, NotFoundError
from ..notifications.sink import LoggingNotificationSink, NotificationSink
from ..quota.ledger import QuotaLedger
from ..students.repository import StudentRepository
from ..subjects.repository import SubjectRepository
from .model import AttendanceEntry, AttendanceRecord
from .repository import AttendanceRepository
from .roster import fill_names, merge_entries, needs_name, quota_deltas
from .status import is_deductible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    updated_count: int
    errors: List[dict] = field(default_factory=list)


def parse_entry(item: AttendanceEntry | Mapping[str, Any]) -> AttendanceEntry:
    """Build a roster entry from an API payload; the status is canonicalized here."""

    if isinstance(item, AttendanceEntry):
        return replace(item, status=require_status(item.status).value)

    return AttendanceEntry(
        student_id=require_non_empty(str(item.get("studentId") or ""), "studentId"),
        first_name=(item.get("firstName") or "").strip(),
        last_name=(item.get("lastName") or "").strip(),
        status=require_status(item.get("status")).value,
        nickname=item.get("nickname"),
        leave_type=item.get("leaveType"),
        time=item.get("time"),
        class_period=item.get("classPeriod"),
        comment=item.get("comment"),
    )


class AttendanceService:
    """Use cases on daily attendance rosters, keeping quotas in step.

    Attendance truth wins over quota accuracy: a quota delta that cannot be
    matched to a registration is logged and skipped, the roster is still saved.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        subjects: SubjectRepository,
        *,
        ledger: QuotaLedger | None = None,
        notifier: NotificationSink | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._subjects = subjects
        self._ledger = ledger or QuotaLedger(students)
        self._notifier = notifier or LoggingNotificationSink()

    def _resolve_names(self, entries: Sequence[AttendanceEntry]) -> List[AttendanceEntry]:
        missing = [e.student_id for e in entries if needs_name(e)]
        if not missing:
            return list(entries)
        return fill_names(entries, self._students.get_by_ids(missing))

    def _apply_deltas(
        self,
        before: Sequence[AttendanceEntry],
        after: Sequence[AttendanceEntry],
        *,
        subject_name: str,
        teacher_id: Optional[str],
    ) -> None:
        for student_id, delta in quota_deltas(before, after):
            result = self._ledger.apply_delta(student_id, subject_name, teacher_id, delta)
            if not result.success:
                logger.warning("quota %+d not applied: student=%s subject=%r", delta, student_id, subject_name)

    def create_or_update_attendance(
        self,
        *,
        teacher_id: str,
        subject_id: str,
        subject_name: str,
        date: str | date,
        students: Iterable[AttendanceEntry | Mapping[str, Any]],
    ) -> AttendanceRecord:
        subject_id = require_non_empty(subject_id, "subjectId")
        day = require_date(date)
        incoming = [parse_entry(s) for s in students]

        existing = self._attendance.find_for_subject_and_date(subject_id, day)
        before = list(existing.students) if existing else []
        merged = self._resolve_names(merge_entries(before, incoming))
        name = (subject_name or "").strip() or (existing.subject_name if existing else "")

        self._apply_deltas(before, merged, subject_name=name, teacher_id=teacher_id)

        if existing:
            record = self._attendance.save(
                replace(existing, students=tuple(merged), teacher_id=teacher_id, subject_name=name)
            )
        else:
            record = self._attendance.create(
                AttendanceRecord(
                    record_id="",
                    subject_id=subject_id,
                    subject_name=name,
                    teacher_id=teacher_id,
                    date=day,
                    students=tuple(merged),
                )
            )

        self._notifier.emit("attendance.saved", {"recordId": record.record_id, "subjectId": subject_id})
        return record

    def update_attendance(
        self,
        record_id: str,
        *,
        teacher_id: str,
        subject_name: str,
        date: str | date,
        students: Iterable[AttendanceEntry | Mapping[str, Any]],
    ) -> AttendanceRecord:
        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        day = require_date(date)
        if self._attendance.find_for_subject_and_date(record.subject_id, day, exclude_id=record.record_id):
            raise ConflictError("An attendance record already exists for this subject on this date")

        incoming = [parse_entry(s) for s in students]
        before = list(record.students)
        merged = self._resolve_names(merge_entries(before, incoming))
        name = (subject_name or "").strip() or record.subject_name

        self._apply_deltas(before, merged, subject_name=name, teacher_id=record.teacher_id or teacher_id)

        saved = self._attendance.save(replace(record, date=day, subject_name=name, students=tuple(merged)))
        self._notifier.emit("attendance.updated", {"recordId": saved.record_id})
        return saved

    def delete_attendance(self, record_id: str, *, student_id: Optional[str] = None) -> None:
        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        if student_id:
            entry = record.find_entry(student_id)
            if entry is None:
                return

            if is_deductible(entry.status):
                self._ledger.apply_delta(entry.student_id, record.subject_name, record.teacher_id, -1)

            remaining = [e for e in record.students if str(e.student_id) != str(student_id)]
            if remaining:
                self._attendance.save(record.with_students(remaining))
            else:
                self._attendance.delete(record.record_id)
            self._notifier.emit("attendance.student_removed", {"recordId": record_id, "studentId": student_id})
            return

        for entry in record.students:
            if is_deductible(entry.status):
                self._ledger.apply_delta(entry.student_id, record.subject_name, record.teacher_id, -1)
        self._attendance.delete(record.record_id)
        self._notifier.emit("attendance.deleted", {"recordId": record_id})

    def find_by_subject_and_date(self, subject_id: str, date: str | date) -> Optional[AttendanceRecord]:
        return self._attendance.find_for_subject_and_date(subject_id, require_date(date))

    def list_records(self, *, subject: Optional[str] = None, teacher_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        return self._attendance.list_filtered(subject=subject or None, teacher_id=teacher_id or None)

    def list_for_teacher(self, teacher_id: str) -> Sequence[AttendanceRecord]:
        return self._attendance.list_filtered(teacher_id=teacher_id, descending=True)

    def history_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_student(student_id)

    def record_batch(
        self,
        *,
        subject: str,
        teacher_id: str,
        date: str | date,
        records: Iterable[Mapping[str, Any]],
    ) -> BatchResult:
        """Record a list of ``{studentId, status, note}`` for one subject and day.

        ``subject`` may be an id or a name; a name is resolved through the
        subject directory.
        """
        subject = require_non_empty(subject, "subjectId")
        subject_name = self._subjects.get_by_id(subject)
        subject_id: Optional[str] = subject
        if subject_name is None:
            subject_id = self._subjects.find_id_by_name(subject)
            subject_name = subject
        if not subject_id:
            raise NotFoundError(f"Subject '{subject}' not found")

        errors: List[dict] = []
        entries: List[AttendanceEntry] = []
        for item in records:
            student_id = str(item.get("studentId") or "")
            try:
                if not self._students.get_by_id(student_id):
                    raise NotFoundError("Student not found")
                entries.append(
                    parse_entry({"studentId": student_id, "status": item.get("status"), "comment": item.get("note")})
                )
            except DomainError as e:
                errors.append({"studentId": student_id, "error": str(e)})

        if entries:
            self.create_or_update_attendance(
                teacher_id=teacher_id,
                subject_id=subject_id,
                subject_name=subject_name,
                date=date,
                students=entries,
            )
        return BatchResult(updated_count=len(entries), errors=errors)
