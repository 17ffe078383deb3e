from __future__ import annotations

from contextlib import contextmanager
from datetime import date, time
from typing import Any, Dict, Iterator, Optional, Sequence

from ..common.datetime_utils import month_bounds
from ..core.enums import AttendanceStatus
from ..core.exceptions import StudentNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, student_id, attendance_date, status, topic, start_time, end_time, created_at"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["id"]),
        student_id=int(r["student_id"]),
        attendance_date=normalize_mysql_date(r["attendance_date"]),
        status=AttendanceStatus(r["status"]),
        topic=r.get("topic"),
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def locked_for_student(self, student_id: int) -> Iterator[None]:
        with self._conn_factory.transaction():
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT id FROM students WHERE id=%s FOR UPDATE", (int(student_id),))
                if not fetchone(cur):
                    raise StudentNotFoundError(f"Student {student_id} does not exist")
            yield

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE student_id=%s AND attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def count_present_in_month(
        self,
        student_id: int,
        *,
        year: int,
        month: int,
        exclude_date: Optional[date] = None,
    ) -> int:
        first, last = month_bounds(year, month)
        clauses = ["student_id=%s", "status=%s", "attendance_date BETWEEN %s AND %s"]
        params: list[object] = [int(student_id), AttendanceStatus.PRESENT.value, first, last]

        if exclude_date is not None:
            clauses.append("attendance_date <> %s")
            params.append(exclude_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS cnt FROM attendance WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["cnt"]) if r else 0

    def upsert_for_date(
        self,
        *,
        student_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        topic: Optional[str],
        start_time: Optional[time],
        end_time: Optional[time],
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(student_id, attendance_date, status, topic, start_time, end_time)
                VALUES(%s,%s,%s,%s,%s,%s) AS new
                ON DUPLICATE KEY UPDATE
                    status=new.status,
                    topic=new.topic,
                    start_time=new.start_time,
                    end_time=new.end_time
                """,
                (int(student_id), attendance_date, status.value, topic, start_time, end_time),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE student_id=%s AND attendance_date=%s",
                (int(student_id), attendance_date),
            )
            return _to_record(fetchone(cur))

    def update_by_id(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        topic: Optional[str],
        start_time: Optional[time],
        end_time: Optional[time],
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, topic=%s, start_time=%s, end_time=%s
                WHERE id=%s
                """,
                (status.value, topic, start_time, end_time, int(record_id)),
            )
            # rowcount is 0 for an unchanged row too, so re-read instead.
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def delete_by_id(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE id=%s", (int(record_id),))
            return cur.rowcount > 0

    def list_for_student(
        self,
        student_id: int,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["student_id=%s"]
        params: list[object] = [int(student_id)]

        if year is not None and month is not None:
            first, last = month_bounds(int(year), int(month))
            clauses.append("attendance_date BETWEEN %s AND %s")
            params.extend([first, last])

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY attendance_date DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_report_rows(self, student_id: int, *, year: int, month: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_with_month_year
                WHERE student_id=%s AND month=%s AND year=%s
                ORDER BY attendance_date ASC
                """,
                (int(student_id), int(month), int(year)),
            )
            return [_to_record(r) for r in fetchall(cur)]
