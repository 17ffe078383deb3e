from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.bootstrap import SchemaInitializer
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.resolver import StudentResolver
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .users.strategies.factory import AuthStrategyFactory


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: MySQLStudentRepository
    users_repo: MySQLUserRepository
    attendance_repo: MySQLAttendanceRepository

    student_resolver: StudentResolver
    schema_initializer: SchemaInitializer

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    report_service: ReportService


def build_container(
    *,
    db_config: dict,
    student_name: Optional[str] = None,
    google_client_id: Optional[str] = None,
    google_client_secret: Optional[str] = None,
) -> Container:
    # Nothing here touches the network; the pool is created on first use.
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    users_repo = MySQLUserRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    student_resolver = StudentResolver(students_repo, default_name=student_name)
    schema_initializer = SchemaInitializer(conn, student_resolver)

    strategies = AuthStrategyFactory(
        google_client_id=google_client_id,
        google_client_secret=google_client_secret,
    ).build(users_repo)

    return Container(
        conn=conn,
        students_repo=students_repo,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        student_resolver=student_resolver,
        schema_initializer=schema_initializer,
        auth_service=AuthService(strategies),
        user_service=UserService(users_repo),
        attendance_service=AttendanceService(attendance_repo, student_resolver),
        report_service=ReportService(attendance_repo, students_repo, student_resolver),
    )
