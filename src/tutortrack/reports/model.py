from __future__ import annotations

from dataclasses import dataclass, field

from ..attendance.model import AttendanceRecord, record_to_dict


@dataclass(frozen=True)
class MonthlyReport:
    """Structured month summary consumed by the file renderers."""

    student_name: str
    month: int
    year: int
    sessions: list[AttendanceRecord] = field(default_factory=list)
    total_present: int = 0
    total_absent: int = 0
    total_sessions: int = 0

    def to_dict(self) -> dict:
        return {
            "studentName": self.student_name,
            "month": self.month,
            "year": self.year,
            "sessions": [record_to_dict(s) for s in self.sessions],
            "totalPresent": self.total_present,
            "totalAbsent": self.total_absent,
            "totalSessions": self.total_sessions,
        }


@dataclass(frozen=True)
class RenderedReport:
    content: bytes
    filename: str
    mimetype: str
