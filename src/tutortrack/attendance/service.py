from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Callable, Optional, TypeVar

from ..common.datetime_utils import parse_iso_date, parse_time_of_day, today_local
from ..common.validators import clean_topic, require_int, require_month, require_status, require_year
from ..core.constants import CAPACITY_MESSAGE, MAX_PRESENT_PER_MONTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import CapacityExceededError, NotFoundError, StudentNotFoundError, ValidationError
from ..students.resolver import StudentResolver
from .model import AttendanceListing, AttendanceRecord, record_to_dict
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def _time_range(start_time: Any, end_time: Any) -> tuple[Optional[time], Optional[time]]:
    start = start_time if isinstance(start_time, time) else parse_time_of_day(start_time, "Start time")
    end = end_time if isinstance(end_time, time) else parse_time_of_day(end_time, "End time")
    if start and end and end < start:
        raise ValidationError("End time must not be before start time")
    return start, end


def _has_value(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


class AttendanceService:
    """Use case: record, edit, delete and list the student's attendance.

    Both write paths enforce the monthly present cap inside the student's
    row lock, so the count and the write cannot interleave with another
    writer.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        resolver: StudentResolver,
        *,
        monthly_cap: int = MAX_PRESENT_PER_MONTH,
        today: Callable[[], date] = today_local,
    ):
        self._attendance = attendance
        self._resolver = resolver
        self._monthly_cap = int(monthly_cap)
        self._today = today

    def _with_student_lock(self, operation: Callable[[int], T]) -> T:
        student_id = self._resolver.resolve()
        try:
            with self._attendance.locked_for_student(student_id):
                return operation(student_id)
        except StudentNotFoundError:
            logger.warning("Cached student id %s no longer exists; resolving again", student_id)
            self._resolver.invalidate()
            student_id = self._resolver.resolve()
            with self._attendance.locked_for_student(student_id):
                return operation(student_id)

    def _present_elsewhere_in_month(self, student_id: int, day: date) -> int:
        return self._attendance.count_present_in_month(
            student_id,
            year=day.year,
            month=day.month,
            exclude_date=day,
        )

    def _ensure_capacity(self, student_id: int, day: date) -> None:
        count = self._present_elsewhere_in_month(student_id, day)
        if count >= self._monthly_cap:
            logger.info("Rejected Present for %s: %s present days already in month", day, count)
            raise CapacityExceededError(CAPACITY_MESSAGE)

    def record_for_date(
        self,
        *,
        attendance_date: Any,
        status: Any,
        topic: Optional[str] = None,
        start_time: Any = None,
        end_time: Any = None,
    ) -> AttendanceRecord:
        """Insert the day's record or overwrite the existing one (upsert-by-date)."""

        day = _as_date(attendance_date)
        new_status = require_status(status)
        new_topic = clean_topic(topic)
        start, end = _time_range(start_time, end_time)

        def write(student_id: int) -> AttendanceRecord:
            if new_status == AttendanceStatus.PRESENT:
                self._ensure_capacity(student_id, day)
            return self._attendance.upsert_for_date(
                student_id=student_id,
                attendance_date=day,
                status=new_status,
                topic=new_topic,
                start_time=start,
                end_time=end,
            )

        record = self._with_student_lock(write)
        logger.info("Saved attendance %s for %s (id=%s)", record.status.value, day, record.record_id)
        return record

    def update_record(
        self,
        *,
        record_id: Any,
        status: Any,
        topic: Optional[str] = None,
        start_time: Any = None,
        end_time: Any = None,
    ) -> AttendanceRecord:
        rid = require_int(record_id, "ID")
        new_status = require_status(status)
        new_topic = clean_topic(topic)
        start, end = _time_range(start_time, end_time)

        def write(_student_id: int) -> AttendanceRecord:
            existing = self._attendance.get_by_id(rid)
            if not existing:
                raise NotFoundError("Attendance record not found")

            if new_status == AttendanceStatus.PRESENT:
                self._ensure_capacity(existing.student_id, existing.attendance_date)

            updated = self._attendance.update_by_id(
                record_id=rid,
                status=new_status,
                topic=new_topic,
                start_time=start,
                end_time=end,
            )
            if not updated:
                raise NotFoundError("Attendance record not found")
            return updated

        record = self._with_student_lock(write)
        logger.info("Updated attendance id=%s to %s", rid, record.status.value)
        return record

    def delete_record(self, record_id: Any) -> None:
        rid = require_int(record_id, "ID")
        if not self._attendance.delete_by_id(rid):
            raise NotFoundError("Attendance record not found")
        logger.info("Deleted attendance id=%s", rid)

    def list_records(self, *, month: Any = None, year: Any = None) -> AttendanceListing:
        """Records newest first plus a present-day count.

        With both month and year the count covers that month; otherwise it
        covers the current calendar month, whatever is being listed.
        """

        student_id = self._resolver.resolve()

        if _has_value(month) and _has_value(year):
            m = require_month(month)
            y = require_year(year)
            records = list(self._attendance.list_for_student(student_id, year=y, month=m))
            present = sum(1 for r in records if r.is_present)
        else:
            records = list(self._attendance.list_for_student(student_id))
            today = self._today()
            present = self._attendance.count_present_in_month(student_id, year=today.year, month=today.month)

        return AttendanceListing(records=records, present_count=present, total_records=len(records))

    def get_record_for_date(self, attendance_date: Any) -> Optional[AttendanceRecord]:
        day = _as_date(attendance_date)
        return self._attendance.get_for_student_and_date(self._resolver.resolve(), day)

    def can_mark_present(self, attendance_date: Any) -> bool:
        day = _as_date(attendance_date)
        return self._present_elsewhere_in_month(self._resolver.resolve(), day) < self._monthly_cap

    def get_dashboard(self) -> dict:
        """Today's summary for the dashboard widget."""

        today = self._today()
        student_id = self._resolver.resolve()
        present = self._attendance.count_present_in_month(student_id, year=today.year, month=today.month)
        record = self._attendance.get_for_student_and_date(student_id, today)
        already_present = bool(record and record.is_present)

        return {
            "currentDate": today.strftime("%Y-%m-%d"),
            "presentCount": present,
            "canMarkPresent": already_present or present < self._monthly_cap,
            "todayAttendance": record_to_dict(record) if record else None,
        }
