from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles stored in the users table."""

    TUTOR = "tutor"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database ENUM column."""

    PRESENT = "Present"
    ABSENT = "Absent"


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"


class AuthProvider(str, Enum):
    """Authentication strategies the app can enable at startup."""

    CREDENTIALS = "credentials"
    GOOGLE = "google"
