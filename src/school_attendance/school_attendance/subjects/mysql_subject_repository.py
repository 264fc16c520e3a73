from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import SubjectRepository


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, subject_id: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT name FROM subjects WHERE subject_id=%s", (str(subject_id),))
            r = fetchone(cur)
            return r["name"] if r else None

    def find_id_by_name(self, name: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT subject_id FROM subjects WHERE name=%s LIMIT 1", ((name or "").strip(),))
            r = fetchone(cur)
            return str(r["subject_id"]) if r else None
