from __future__ import annotations

from datetime import date

import pytest

from tutortrack.attendance.service import AttendanceService
from tutortrack.container import Container
from tutortrack.core.enums import AttendanceStatus
from tutortrack.database.bootstrap import SchemaInitializer
from tutortrack.main import create_app
from tutortrack.reports.service import ReportService
from tutortrack.users.service import AuthService, UserService
from tutortrack.users.strategies.factory import AuthStrategyFactory


@pytest.fixture
def container(students_repo, users_repo, attendance_repo, resolver, attendance_service):
    return Container(
        conn=None,
        students_repo=students_repo,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        student_resolver=resolver,
        schema_initializer=SchemaInitializer(None, resolver),
        auth_service=AuthService(AuthStrategyFactory().build(users_repo)),
        user_service=UserService(users_repo),
        attendance_service=attendance_service,
        report_service=ReportService(attendance_repo, students_repo, resolver),
    )


@pytest.fixture
def app(container):
    return create_app(container=container, settings_module="tutortrack.config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in(client):
    resp = client.post("/auth/signin", json={"email": "tutor@tutortrack.com", "password": "tutor123"})
    assert resp.status_code == 200
    return client


@pytest.mark.parametrize(
    "method, url",
    [
        ("get", "/api/attendance"),
        ("post", "/api/attendance"),
        ("put", "/api/attendance"),
        ("delete", "/api/attendance?id=1"),
        ("get", "/api/report?month=8&year=2025"),
        ("get", "/api/init-db"),
        ("get", "/api/dashboard"),
    ],
)
def test_protected_endpoints_require_session(client, method, url):
    resp = getattr(client, method)(url)

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Unauthorized"}


def test_signin_and_session(client):
    assert client.get("/auth/session").get_json() == {"user": None}

    resp = client.post("/auth/signin", json={"email": "tutor@tutortrack.com", "password": "tutor123"})
    assert resp.get_json()["user"]["id"] == 7

    user = client.get("/auth/session").get_json()["user"]
    assert user["email"] == "tutor@tutortrack.com"
    assert user["role"] == "tutor"

    client.post("/auth/signout")
    assert client.get("/auth/session").get_json() == {"user": None}


def test_signin_wrong_password(client):
    resp = client.post("/auth/signin", json={"email": "tutor@tutortrack.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid credentials"}


def test_providers_lists_credentials_only_without_google_settings(client):
    assert client.get("/auth/providers").get_json() == {"providers": ["credentials"]}


def test_post_then_list_month(signed_in):
    resp = signed_in.post(
        "/api/attendance",
        json={"date": "2025-08-03", "status": "Present", "topic": "Algebra", "startTime": "15:30", "endTime": "17:00"},
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["attendance_date"] == "2025-08-03"
    assert body["start_time"] == "15:30"

    listing = signed_in.get("/api/attendance?month=8&year=2025").get_json()

    assert listing["presentCount"] == 1
    assert listing["totalRecords"] == 1
    assert listing["records"][0]["topic"] == "Algebra"


def test_seventeenth_present_returns_400(signed_in, attendance_repo):
    attendance_repo.fill_present(2025, 9, 16)

    resp = signed_in.post("/api/attendance", json={"date": "2025-09-20", "status": "Present"})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Maximum 16 present entries per month reached"}
    assert signed_in.get("/api/attendance?month=9&year=2025").get_json()["totalRecords"] == 16


def test_post_invalid_status_is_400(signed_in):
    resp = signed_in.post("/api/attendance", json={"date": "2025-08-03", "status": "Late"})

    assert resp.status_code == 400


def test_put_updates_by_id(signed_in, attendance_repo):
    rec = attendance_repo.add(date(2025, 8, 3), topic="Algebra")

    resp = signed_in.put("/api/attendance", json={"id": rec.record_id, "status": "Absent", "topic": "Sick"})

    assert resp.status_code == 200
    assert attendance_repo.get_by_id(rec.record_id).status == AttendanceStatus.ABSENT


def test_put_and_delete_unknown_id_are_404(signed_in):
    assert signed_in.put("/api/attendance", json={"id": 999, "status": "Present"}).status_code == 404
    assert signed_in.delete("/api/attendance?id=999").status_code == 404


def test_delete_removes_record(signed_in, attendance_repo):
    rec = attendance_repo.add(date(2025, 8, 3))

    resp = signed_in.delete(f"/api/attendance?id={rec.record_id}")

    assert resp.status_code == 200
    assert attendance_repo.rows == {}


def test_unexpected_error_is_500(signed_in, attendance_service, monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(attendance_service, "list_records", boom)

    resp = signed_in.get("/api/attendance")

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to fetch attendance"}


def test_report_json_without_format(signed_in, attendance_repo):
    attendance_repo.add(date(2025, 8, 3))
    attendance_repo.add(date(2025, 8, 4), AttendanceStatus.ABSENT)

    data = signed_in.get("/api/report?month=8&year=2025").get_json()

    assert data["totalPresent"] == 1
    assert data["totalAbsent"] == 1
    assert data["studentName"] == "Raj"


@pytest.mark.parametrize("fmt, ext", [("pdf", "pdf"), ("excel", "xlsx")])
def test_report_download(signed_in, attendance_repo, fmt, ext):
    attendance_repo.add(date(2025, 8, 3), topic="Algebra")

    resp = signed_in.get(f"/api/report?month=8&year=2025&format={fmt}")

    assert resp.status_code == 200
    disposition = resp.headers["Content-Disposition"]
    assert disposition.startswith("attachment")
    assert f"attendance-report-2025-8.{ext}" in disposition
    assert len(resp.data) > 0


@pytest.mark.parametrize(
    "query",
    ["month=8", "year=2025", "month=13&year=2025", "month=8&year=2025&format=csv"],
)
def test_report_bad_requests(signed_in, query):
    assert signed_in.get(f"/api/report?{query}").status_code == 400


def test_health_reports_database_status(client, monkeypatch):
    monkeypatch.setattr("tutortrack.system.controller.ping", lambda conn: None)

    data = client.get("/api/health").get_json()

    assert data["status"] == "OK"
    assert data["database"] == "Connected"
    assert "timestamp" in data


def test_health_hides_error_detail(client, monkeypatch):
    def failing_ping(conn):
        raise ConnectionError("password=hunter2")

    monkeypatch.setattr("tutortrack.system.controller.ping", failing_ping)

    data = client.get("/api/health").get_json()

    assert data["database"] == "Error: ConnectionError"
    assert "hunter2" not in str(data)


def test_init_db_runs_once(signed_in, monkeypatch):
    calls = []
    monkeypatch.setattr("tutortrack.database.bootstrap.apply_schema", lambda conn, schema_path=None: calls.append(1))

    first = signed_in.get("/api/init-db").get_json()
    second = signed_in.get("/api/init-db").get_json()

    assert first == {"message": "Database initialized successfully"}
    assert second == {"message": "Database already initialized"}
    assert calls == [1]


def test_dashboard(signed_in):
    data = signed_in.get("/api/dashboard").get_json()

    assert data["currentDate"] == "2025-08-15"
    assert data["canMarkPresent"] is True


def test_session_cleared_when_account_removed(signed_in, users_repo):
    assert signed_in.get("/auth/session").get_json()["user"]["name"] == "Tutor"

    del users_repo.by_id[7]

    assert signed_in.get("/auth/session").get_json() == {"user": None}
    assert signed_in.get("/api/attendance").status_code == 401
