from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import format_time
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one tutoring day for the student."""

    record_id: int
    student_id: int
    attendance_date: date
    status: AttendanceStatus
    topic: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    created_at: Optional[datetime] = None

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT


@dataclass(frozen=True)
class AttendanceListing:
    """Read-model returned by the month listing endpoint."""

    records: list[AttendanceRecord] = field(default_factory=list)
    present_count: int = 0
    total_records: int = 0


def record_to_dict(record: AttendanceRecord) -> dict:
    """JSON shape of a record; the date is a plain YYYY-MM-DD string."""

    return {
        "id": record.record_id,
        "attendance_date": record.attendance_date.strftime("%Y-%m-%d"),
        "status": record.status.value,
        "topic": record.topic,
        "start_time": format_time(record.start_time),
        "end_time": format_time(record.end_time),
    }
