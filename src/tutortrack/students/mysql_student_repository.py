from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Student
from .repository import StudentRepository


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_first(self) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, email FROM students ORDER BY id ASC LIMIT 1")
            row = fetchone(cur)
            if not row:
                return None
            return Student(student_id=int(row["id"]), name=row["name"], email=row.get("email"))

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, email FROM students WHERE id=%s", (int(student_id),))
            row = fetchone(cur)
            if not row:
                return None
            return Student(student_id=int(row["id"]), name=row["name"], email=row.get("email"))

    def create(self, *, name: str, email: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO students(name, email) VALUES(%s,%s)", (name, email))
            return int(cur.lastrowid)
