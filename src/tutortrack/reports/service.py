from __future__ import annotations

from typing import Any

from ..attendance.repository import AttendanceRepository
from ..common.validators import require_month, require_year
from ..core.constants import FALLBACK_REPORT_NAME
from ..core.enums import AttendanceStatus
from ..students.repository import StudentRepository
from ..students.resolver import StudentResolver
from .model import MonthlyReport


class ReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        resolver: StudentResolver,
    ):
        self._attendance = attendance
        self._students = students
        self._resolver = resolver

    def build_monthly_report(self, *, month: Any, year: Any) -> MonthlyReport:
        # Validate before touching the store.
        m = require_month(month)
        y = require_year(year)

        student_id = self._resolver.resolve()
        sessions = list(self._attendance.get_report_rows(student_id, year=y, month=m))
        student = self._students.get_by_id(student_id)

        total_present = sum(1 for s in sessions if s.status == AttendanceStatus.PRESENT)
        total_absent = sum(1 for s in sessions if s.status == AttendanceStatus.ABSENT)

        return MonthlyReport(
            student_name=(student.name if student and student.name else FALLBACK_REPORT_NAME),
            month=m,
            year=y,
            sessions=sessions,
            total_present=total_present,
            total_absent=total_absent,
            total_sessions=total_present + total_absent,
        )
