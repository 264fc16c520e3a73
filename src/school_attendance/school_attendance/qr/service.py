from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable

from ..attendance.model import AttendanceEntry, AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_hhmm, now_local
from ..common.validators import require_date, require_non_empty
from ..core.constants import (
    DEFAULT_NICKNAME,
    NOT_ENROLLED_WARNING,
    QR_CHECKIN_COMMENT,
    QR_SESSION_TTL_SECONDS,
)
from ..core.enums import AttendanceStatus, CheckInOutcome
from ..core.exceptions import ExpiredError, NotFoundError
from ..notifications.sink import LoggingNotificationSink, NotificationSink
from ..quota.ledger import QuotaLedger
from ..quota.strategies.base import normalize_subject
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import CheckInResult, QrSession, QrToken
from .store import InMemoryQrSessionStore, QrSessionStore

logger = logging.getLogger(__name__)


def _millis(value: datetime) -> int:
    return int(round(value.timestamp() * 1000))


def is_enrolled(student: Student, subject_name: str) -> bool:
    """Advisory enrollment check: registrations first, then the legacy subject list."""

    target = normalize_subject(subject_name)
    if any(normalize_subject(c.subject) == target for c in student.courses):
        return True
    return any(normalize_subject(s) == target for s in student.enrolled_subjects)


class QrCheckInService:
    """QR check-in session manager.

    Session states: Active -> Consumed (student checked in) or Expired.
    A consumed token stays usable until it expires; repeat scans by the same
    student resolve to "already checked in" without a second deduction.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        store: QrSessionStore | None = None,
        ledger: QuotaLedger | None = None,
        notifier: NotificationSink | None = None,
        ttl_seconds: int = QR_SESSION_TTL_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._store = store if store is not None else InMemoryQrSessionStore()
        self._ledger = ledger or QuotaLedger(students)
        self._notifier = notifier or LoggingNotificationSink()
        self._ttl = timedelta(seconds=int(ttl_seconds))
        self._clock = clock

    @property
    def store(self) -> QrSessionStore:
        return self._store

    def generate_token(
        self,
        *,
        teacher_id: str,
        subject_id: str,
        subject_name: str,
        date: str,
        time: str = "",
    ) -> QrToken:
        require_non_empty(subject_id, "subjectId")
        require_date(date)

        session = QrSession(
            token=str(uuid.uuid4()),
            teacher_id=str(teacher_id),
            subject_id=subject_id,
            subject_name=(subject_name or "").strip(),
            date=date,
            time=time or "",
            expires_at=_millis(self._clock() + self._ttl),
        )
        self._store.put(session)
        logger.info("QR session for %s on %s issued by %s", session.subject_name, date, teacher_id)
        return QrToken(token=session.token, expires_at=session.expires_at)

    def check_in(self, token: str, student_id: str) -> CheckInResult:
        session = self._store.get(token)
        if session is None:
            raise NotFoundError("QR code expired or invalid")

        now = self._clock()
        if session.is_expired(_millis(now)):
            self._store.delete(token)
            raise ExpiredError("QR code has expired")

        student = self._students.get_by_id(str(student_id))
        if not student:
            raise NotFoundError("Student not found")

        day = require_date(session.date)
        record = self._attendance.find_for_subject_and_date(session.subject_id, day)
        if record:
            existing = record.find_entry(student.student_id)
            if existing is not None:
                return CheckInResult(
                    outcome=CheckInOutcome.ALREADY_CHECKED_IN,
                    message="Already checked in",
                    status=existing.status,
                )

        first, last = student.name_parts()
        entry = AttendanceEntry(
            student_id=student.student_id,
            first_name=first or "-",
            last_name=last or "-",
            nickname=student.nickname or DEFAULT_NICKNAME,
            status=AttendanceStatus.PRESENT.value,
            comment=QR_CHECKIN_COMMENT,
            time=format_hhmm(now),
        )

        if record:
            self._attendance.save(record.with_students(list(record.students) + [entry]))
        else:
            record = self._attendance.create(
                AttendanceRecord(
                    record_id="",
                    subject_id=session.subject_id,
                    subject_name=session.subject_name,
                    teacher_id=session.teacher_id,
                    date=day,
                    students=(entry,),
                )
            )

        quota = self._ledger.apply_delta(student.student_id, session.subject_name, session.teacher_id, 1)
        self._notifier.emit(
            "attendance.qr_checkin",
            {"recordId": record.record_id, "studentId": student.student_id, "quotaDeducted": quota.success},
        )

        return CheckInResult(
            outcome=CheckInOutcome.CHECKED_IN,
            message="Check-in successful",
            status=entry.status,
            quota_deducted=quota.success,
            remaining_quota=quota.remaining,
            warning=None if is_enrolled(student, session.subject_name) else NOT_ENROLLED_WARNING,
        )
