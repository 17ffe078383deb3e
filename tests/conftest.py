from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from tutortrack.attendance.model import AttendanceRecord
from tutortrack.attendance.service import AttendanceService
from tutortrack.core.enums import AttendanceStatus, Role
from tutortrack.core.exceptions import StudentNotFoundError
from tutortrack.students.model import Student
from tutortrack.students.resolver import StudentResolver
from tutortrack.users.model import User


class InMemoryStudents:
    def __init__(self, students: Optional[list[Student]] = None):
        self.rows: dict[int, Student] = {s.student_id: s for s in (students or [])}
        self._id = max(self.rows, default=0)
        self.get_first_calls = 0

    def get_first(self) -> Optional[Student]:
        self.get_first_calls += 1
        if not self.rows:
            return None
        return self.rows[min(self.rows)]

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.rows.get(int(student_id))

    def create(self, *, name: str, email: Optional[str]) -> int:
        self._id += 1
        self.rows[self._id] = Student(student_id=self._id, name=name, email=email)
        return self._id


class InMemoryAttendance:
    """Dict-backed stand-in for MySQLAttendanceRepository.

    ``locked_for_student`` restores the previous rows when the block raises,
    like the real transaction's rollback.
    """

    def __init__(self, students: InMemoryStudents):
        self._students = students
        self.rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.lock_calls = 0

    @contextmanager
    def locked_for_student(self, student_id: int):
        if self._students.get_by_id(student_id) is None:
            raise StudentNotFoundError(f"Student {student_id} does not exist")
        self.lock_calls += 1
        snapshot = dict(self.rows)
        try:
            yield
        except Exception:
            self.rows = snapshot
            raise

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(int(record_id))

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        for r in self.rows.values():
            if r.student_id == student_id and r.attendance_date == attendance_date:
                return r
        return None

    def count_present_in_month(self, student_id, *, year, month, exclude_date=None) -> int:
        return sum(
            1
            for r in self.rows.values()
            if r.student_id == student_id
            and r.status == AttendanceStatus.PRESENT
            and r.attendance_date.year == year
            and r.attendance_date.month == month
            and r.attendance_date != exclude_date
        )

    def upsert_for_date(self, *, student_id, attendance_date, status, topic, start_time, end_time) -> AttendanceRecord:
        existing = self.get_for_student_and_date(student_id, attendance_date)
        if existing:
            updated = replace(existing, status=status, topic=topic, start_time=start_time, end_time=end_time)
            self.rows[existing.record_id] = updated
            return updated

        self._id += 1
        rec = AttendanceRecord(
            record_id=self._id,
            student_id=student_id,
            attendance_date=attendance_date,
            status=status,
            topic=topic,
            start_time=start_time,
            end_time=end_time,
        )
        self.rows[self._id] = rec
        return rec

    def update_by_id(self, *, record_id, status, topic, start_time, end_time) -> Optional[AttendanceRecord]:
        existing = self.rows.get(int(record_id))
        if not existing:
            return None
        updated = replace(existing, status=status, topic=topic, start_time=start_time, end_time=end_time)
        self.rows[existing.record_id] = updated
        return updated

    def delete_by_id(self, record_id: int) -> bool:
        return self.rows.pop(int(record_id), None) is not None

    def list_for_student(self, student_id, *, year=None, month=None):
        items = [r for r in self.rows.values() if r.student_id == student_id]
        if year is not None and month is not None:
            items = [r for r in items if r.attendance_date.year == year and r.attendance_date.month == month]
        return sorted(items, key=lambda r: r.attendance_date, reverse=True)

    def get_report_rows(self, student_id, *, year, month):
        return sorted(self.list_for_student(student_id, year=year, month=month), key=lambda r: r.attendance_date)

    # helpers for arranging test data
    def add(self, day: date, status: AttendanceStatus = AttendanceStatus.PRESENT, *, student_id: int = 1, topic=None):
        return self.upsert_for_date(
            student_id=student_id,
            attendance_date=day,
            status=status,
            topic=topic,
            start_time=None,
            end_time=None,
        )

    def fill_present(self, year: int, month: int, days: int, *, student_id: int = 1) -> None:
        for d in range(1, days + 1):
            self.add(date(year, month, d), student_id=student_id)


class InMemoryUsers:
    def __init__(self, users: Optional[list[User]] = None):
        self.by_id: dict[int, User] = {u.user_id: u for u in (users or [])}
        self._id = max(self.by_id, default=0)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        for u in self.by_id.values():
            if u.email.lower() == str(email).lower():
                return u
        return None

    def create_user(self, *, email, password_hash, name, role) -> int:
        self._id += 1
        self.by_id[self._id] = User(user_id=self._id, email=email, name=name, password_hash=password_hash, role=role)
        return self._id

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        u = self.by_id.get(int(user_id))
        if not u:
            return False
        self.by_id[u.user_id] = replace(u, password_hash=password_hash)
        return True


@pytest.fixture
def fixed_today() -> date:
    return date(2025, 8, 15)


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents([Student(student_id=1, name="Raj", email="student@example.com")])


@pytest.fixture
def attendance_repo(students_repo) -> InMemoryAttendance:
    return InMemoryAttendance(students_repo)


@pytest.fixture
def resolver(students_repo) -> StudentResolver:
    return StudentResolver(students_repo, default_name="Raj")


@pytest.fixture
def attendance_service(attendance_repo, resolver, fixed_today) -> AttendanceService:
    return AttendanceService(attendance_repo, resolver, today=lambda: fixed_today)


@pytest.fixture
def tutor() -> User:
    return User(
        user_id=7,
        email="tutor@tutortrack.com",
        name="Tutor",
        password_hash=generate_password_hash("tutor123"),
        role=Role.TUTOR,
    )


@pytest.fixture
def users_repo(tutor) -> InMemoryUsers:
    return InMemoryUsers([tutor])


@pytest.fixture
def empty_students_repo() -> InMemoryStudents:
    return InMemoryStudents()
