from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, db_cursor, fetchall, fetchone, in_placeholders
from .model import CourseExtension, CourseRegistration, HistoryEntry, Student
from .repository import StudentRepository

_STUDENT_COLUMNS = "student_id, first_name, last_name, nickname, display_name, student_name, enrolled_subjects"

Key = Tuple[str, int]


def _subjects_from_column(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(s) for s in json.loads(value))


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, rows: List[Dict[str, Any]]) -> List[Student]:
        if not rows:
            return []

        ids = [str(r["student_id"]) for r in rows]
        marks = in_placeholders(len(ids))

        cur.execute(
            f"""
            SELECT student_id, position, attend_date, status, note, check_in_time
            FROM course_attendance_history
            WHERE student_id IN ({marks})
            ORDER BY student_id, position, seq
            """,
            tuple(ids),
        )
        history: Dict[Key, List[HistoryEntry]] = {}
        for r in fetchall(cur):
            history.setdefault((r["student_id"], int(r["position"])), []).append(
                HistoryEntry(
                    date=as_date(r["attend_date"]),
                    status=r["status"],
                    note=r.get("note") or "",
                    check_in_time=r.get("check_in_time") or "",
                )
            )

        cur.execute(
            f"""
            SELECT student_id, position, extended_at, previous_end_date, new_end_date, sessions_added, note
            FROM course_extensions
            WHERE student_id IN ({marks})
            ORDER BY student_id, position, seq
            """,
            tuple(ids),
        )
        extensions: Dict[Key, List[CourseExtension]] = {}
        for r in fetchall(cur):
            extensions.setdefault((r["student_id"], int(r["position"])), []).append(
                CourseExtension(
                    extended_at=r["extended_at"],
                    previous_end_date=as_date(r.get("previous_end_date")),
                    new_end_date=as_date(r["new_end_date"]),
                    sessions_added=int(r.get("sessions_added") or 0),
                    note=r.get("note") or "",
                )
            )

        cur.execute(
            f"""
            SELECT student_id, position, subject, subject_id, teacher_id, teacher_name,
                   total_sessions, used_sessions, start_date, end_date
            FROM course_registrations
            WHERE student_id IN ({marks})
            ORDER BY student_id, position
            """,
            tuple(ids),
        )
        courses: Dict[str, List[CourseRegistration]] = {}
        for r in fetchall(cur):
            key = (r["student_id"], int(r["position"]))
            courses.setdefault(r["student_id"], []).append(
                CourseRegistration(
                    subject=r["subject"],
                    subject_id=r.get("subject_id"),
                    teacher_id=r.get("teacher_id"),
                    teacher_name=r.get("teacher_name") or "",
                    total_sessions=int(r.get("total_sessions") or 0),
                    used_sessions=int(r.get("used_sessions") or 0),
                    start_date=as_date(r.get("start_date")),
                    end_date=as_date(r.get("end_date")),
                    extension_history=tuple(extensions.get(key, ())),
                    attendance_history=tuple(history.get(key, ())),
                )
            )

        return [
            Student(
                student_id=str(r["student_id"]),
                first_name=r.get("first_name") or "",
                last_name=r.get("last_name") or "",
                nickname=r.get("nickname") or "",
                display_name=r.get("display_name") or "",
                student_name=r.get("student_name") or "",
                enrolled_subjects=_subjects_from_column(r.get("enrolled_subjects")),
                courses=tuple(courses.get(str(r["student_id"]), ())),
            )
            for r in rows
        ]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s", (str(student_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._load(cur, [row])[0]

    def get_by_ids(self, student_ids: Iterable[str]) -> Sequence[Student]:
        ids = sorted({str(s) for s in student_ids if s})
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id IN ({in_placeholders(len(ids))})",
                tuple(ids),
            )
            return self._load(cur, fetchall(cur))

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students ORDER BY student_id")
            return self._load(cur, fetchall(cur))

    def set_used_sessions(self, *, student_id: str, course_index: int, used_sessions: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE course_registrations SET used_sessions=%s WHERE student_id=%s AND position=%s",
                (max(0, int(used_sessions)), str(student_id), int(course_index)),
            )
            return cur.rowcount > 0

    def save(self, student: Student) -> None:
        sid = str(student.student_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(student_id, first_name, last_name, nickname, display_name, student_name, enrolled_subjects)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    first_name=VALUES(first_name), last_name=VALUES(last_name), nickname=VALUES(nickname),
                    display_name=VALUES(display_name), student_name=VALUES(student_name),
                    enrolled_subjects=VALUES(enrolled_subjects)
                """,
                (
                    sid,
                    student.first_name,
                    student.last_name,
                    student.nickname,
                    student.display_name,
                    student.student_name,
                    json.dumps(list(student.enrolled_subjects), ensure_ascii=False),
                ),
            )

            # Histories and extensions cascade with their registration rows.
            cur.execute("DELETE FROM course_registrations WHERE student_id=%s", (sid,))
            for pos, c in enumerate(student.courses):
                cur.execute(
                    """
                    INSERT INTO course_registrations(
                        student_id, position, subject, subject_id, teacher_id, teacher_name,
                        total_sessions, used_sessions, start_date, end_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        sid,
                        pos,
                        c.subject,
                        c.subject_id,
                        c.teacher_id,
                        c.teacher_name,
                        int(c.total_sessions or 0),
                        max(0, int(c.used_sessions or 0)),
                        c.start_date,
                        c.end_date,
                    ),
                )
                if c.attendance_history:
                    cur.executemany(
                        """
                        INSERT INTO course_attendance_history(student_id, position, seq, attend_date, status, note, check_in_time)
                        VALUES(%s,%s,%s,%s,%s,%s,%s)
                        """,
                        [
                            (sid, pos, seq, h.date, h.status, h.note, h.check_in_time)
                            for seq, h in enumerate(c.attendance_history)
                        ],
                    )
                if c.extension_history:
                    cur.executemany(
                        """
                        INSERT INTO course_extensions(
                            student_id, position, seq, extended_at, previous_end_date, new_end_date, sessions_added, note
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        [
                            (sid, pos, seq, e.extended_at, e.previous_end_date, e.new_end_date, e.sessions_added, e.note)
                            for seq, e in enumerate(c.extension_history)
                        ],
                    )
