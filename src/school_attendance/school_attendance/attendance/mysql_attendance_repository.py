from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, in_placeholders
from .model import AttendanceEntry, AttendanceRecord
from .repository import AttendanceRepository

_RECORD_COLUMNS = "record_id, subject_id, subject_name, teacher_id, attend_date"


def _entry_from_row(r: Dict[str, Any]) -> AttendanceEntry:
    return AttendanceEntry(
        student_id=str(r["student_id"]),
        first_name=r.get("first_name") or "",
        last_name=r.get("last_name") or "",
        status=r.get("status") or "",
        nickname=r.get("nickname"),
        leave_type=r.get("leave_type"),
        time=r.get("check_time"),
        class_period=r.get("class_period"),
        comment=r.get("comment"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, rows: List[Dict[str, Any]]) -> List[AttendanceRecord]:
        if not rows:
            return []

        ids = [r["record_id"] for r in rows]
        cur.execute(
            f"""
            SELECT record_id, position, student_id, first_name, last_name, nickname,
                   status, leave_type, check_time, class_period, comment
            FROM attendance_entries
            WHERE record_id IN ({in_placeholders(len(ids))})
            ORDER BY record_id, position
            """,
            tuple(ids),
        )
        entries: Dict[str, List[AttendanceEntry]] = {}
        for r in fetchall(cur):
            entries.setdefault(r["record_id"], []).append(_entry_from_row(r))

        return [
            AttendanceRecord(
                record_id=r["record_id"],
                subject_id=str(r["subject_id"]),
                subject_name=r.get("subject_name") or "",
                teacher_id=r.get("teacher_id"),
                date=as_date(r["attend_date"]),
                students=tuple(entries.get(r["record_id"], ())),
            )
            for r in rows
        ]

    def _load_one(self, cur, row: Optional[Dict[str, Any]]) -> Optional[AttendanceRecord]:
        if not row:
            return None
        return self._load(cur, [row])[0]

    def _write_entries(self, cur, record: AttendanceRecord) -> None:
        cur.execute("DELETE FROM attendance_entries WHERE record_id=%s", (record.record_id,))
        if not record.students:
            return
        cur.executemany(
            """
            INSERT INTO attendance_entries(
                record_id, position, student_id, first_name, last_name, nickname,
                status, leave_type, check_time, class_period, comment
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            [
                (
                    record.record_id,
                    i,
                    str(e.student_id),
                    e.first_name,
                    e.last_name,
                    e.nickname,
                    e.status,
                    e.leave_type,
                    e.time,
                    e.class_period,
                    e.comment,
                )
                for i, e in enumerate(record.students)
            ],
        )

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE record_id=%s", (record_id,))
            return self._load_one(cur, fetchone(cur))

    def find_for_subject_and_date(
        self,
        subject_id: str,
        day: date,
        *,
        exclude_id: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        sql = f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE subject_id=%s AND attend_date=%s"
        params: list = [subject_id, day]
        if exclude_id:
            sql += " AND record_id<>%s"
            params.append(exclude_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            return self._load_one(cur, fetchone(cur))

    def find_for_subject_name_and_date(self, subject_name: str, day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE subject_name=%s AND attend_date=%s
                ORDER BY created_at
                LIMIT 1
                """,
                (subject_name, day),
            )
            return self._load_one(cur, fetchone(cur))

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        if not record.record_id:
            record = replace(record, record_id=uuid.uuid4().hex)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(record_id, subject_id, subject_name, teacher_id, attend_date)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (record.record_id, record.subject_id, record.subject_name, record.teacher_id, record.date),
            )
            self._write_entries(cur, record)
        return record

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET subject_id=%s, subject_name=%s, teacher_id=%s, attend_date=%s
                WHERE record_id=%s
                """,
                (record.subject_id, record.subject_name, record.teacher_id, record.date, record.record_id),
            )
            self._write_entries(cur, record)
        return record

    def delete(self, record_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (record_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM attendance_records ORDER BY attend_date, created_at")
            return self._load(cur, fetchall(cur))

    def list_filtered(
        self,
        *,
        subject: Optional[str] = None,
        teacher_id: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[AttendanceRecord]:
        where: List[str] = []
        params: list = []
        if subject:
            where.append("(subject_id=%s OR subject_name=%s)")
            params.extend([subject, subject])
        if teacher_id:
            where.append("teacher_id=%s")
            params.append(teacher_id)

        sql = f"SELECT {_RECORD_COLUMNS} FROM attendance_records"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY attend_date DESC" if descending else " ORDER BY attend_date ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return self._load(cur, fetchall(cur))

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.record_id, r.subject_id, r.subject_name, r.teacher_id, r.attend_date
                FROM attendance_records r
                JOIN attendance_entries e ON e.record_id = r.record_id
                WHERE e.student_id=%s
                ORDER BY r.attend_date DESC
                """,
                (str(student_id),),
            )
            return self._load(cur, fetchall(cur))
