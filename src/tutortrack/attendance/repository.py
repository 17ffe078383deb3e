from __future__ import annotations

from datetime import date, time
from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Repository interface for attendance rows.

    Note (DIP): the service depends on this interface, not on MySQL.
    """

    def locked_for_student(self, student_id: int) -> ContextManager[None]:
        """Open a transaction holding the student's row lock.

        Raises StudentNotFoundError when the student row does not exist.
        Repository calls made inside the block share the transaction.
        """

        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def count_present_in_month(
        self,
        student_id: int,
        *,
        year: int,
        month: int,
        exclude_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_by_id(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        topic: Optional[str],
        start_time: Optional[time],
        end_time: Optional[time],
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def delete_by_id(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_for_student(
        self,
        student_id: int,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first; restricted to one month when year and month are given."""

        raise NotImplementedError

    def get_report_rows(self, student_id: int, *, year: int, month: int) -> Sequence[AttendanceRecord]:
        """One month, oldest first (reads the month/year view)."""

        raise NotImplementedError
