from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import QR_SESSION_TTL_SECONDS, QR_SWEEP_INTERVAL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .notifications.sink import LoggingNotificationSink, NotificationSink, WebhookNotificationSink
from .qr.service import QrCheckInService
from .qr.store import InMemoryQrSessionStore, QrSessionStore
from .qr.sweeper import QrSessionSweeper
from .quota.ledger import QuotaLedger
from .reconciliation.service import ReconciliationService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository


@dataclass(frozen=True)
class Container:
    students_repo: StudentRepository
    subjects_repo: SubjectRepository
    attendance_repo: AttendanceRepository
    qr_store: QrSessionStore
    notifier: NotificationSink

    ledger: QuotaLedger
    attendance_service: AttendanceService
    qr_service: QrCheckInService
    reconciliation_service: ReconciliationService
    student_service: StudentService
    qr_sweeper: Optional[QrSessionSweeper] = None


def wire(
    *,
    students_repo: StudentRepository,
    subjects_repo: SubjectRepository,
    attendance_repo: AttendanceRepository,
    qr_store: QrSessionStore | None = None,
    notifier: NotificationSink | None = None,
    qr_ttl_seconds: int = QR_SESSION_TTL_SECONDS,
    sweep_interval_seconds: float | None = QR_SWEEP_INTERVAL_SECONDS,
) -> Container:
    """Build services on top of any repository implementations."""

    if qr_store is None:
        qr_store = InMemoryQrSessionStore()
    notifier = notifier or LoggingNotificationSink()
    ledger = QuotaLedger(students_repo)

    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        subjects_repo,
        ledger=ledger,
        notifier=notifier,
    )
    qr_service = QrCheckInService(
        attendance_repo,
        students_repo,
        store=qr_store,
        ledger=ledger,
        notifier=notifier,
        ttl_seconds=qr_ttl_seconds,
    )
    reconciliation_service = ReconciliationService(attendance_repo, students_repo, subjects_repo, ledger=ledger)
    student_service = StudentService(students_repo)

    sweeper = None
    if sweep_interval_seconds:
        sweeper = QrSessionSweeper(qr_store, interval_seconds=sweep_interval_seconds)

    return Container(
        students_repo=students_repo,
        subjects_repo=subjects_repo,
        attendance_repo=attendance_repo,
        qr_store=qr_store,
        notifier=notifier,
        ledger=ledger,
        attendance_service=attendance_service,
        qr_service=qr_service,
        reconciliation_service=reconciliation_service,
        student_service=student_service,
        qr_sweeper=sweeper,
    )


def build_container(
    *,
    db_config: dict,
    webhook_url: str = "",
    qr_ttl_seconds: int = QR_SESSION_TTL_SECONDS,
    sweep_interval_seconds: float | None = QR_SWEEP_INTERVAL_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    notifier = WebhookNotificationSink(webhook_url) if webhook_url else LoggingNotificationSink()

    return wire(
        students_repo=MySQLStudentRepository(conn),
        subjects_repo=MySQLSubjectRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifier=notifier,
        qr_ttl_seconds=qr_ttl_seconds,
        sweep_interval_seconds=sweep_interval_seconds,
    )
