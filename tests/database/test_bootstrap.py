from __future__ import annotations

from datetime import time, timedelta

import pytest

from tutortrack.database import bootstrap
from tutortrack.database.bootstrap import SCHEMA_PATH, SchemaInitializer, _iter_sql_statements
from tutortrack.database.connection import DBConfig, DatabaseConnection
from tutortrack.database.mysql_base import db_cursor, normalize_mysql_time


class FakeCursor:
    def __init__(self, log):
        self.log = log

    def execute(self, sql, params=None):
        self.log.append(("execute", sql))

    def close(self):
        self.log.append(("cursor_close",))


class FakeConnection:
    def __init__(self):
        self.log = []

    def cursor(self, dictionary=True):
        return FakeCursor(self.log)

    def start_transaction(self):
        self.log.append(("begin",))

    def commit(self):
        self.log.append(("commit",))

    def rollback(self):
        self.log.append(("rollback",))

    def close(self):
        self.log.append(("close",))


@pytest.fixture
def fake_db(monkeypatch):
    factory = DatabaseConnection(DBConfig(host="h", port=3306, user="u", password="p", database="d"))
    connections = []

    def connect():
        c = FakeConnection()
        connections.append(c)
        return c

    monkeypatch.setattr(factory, "connect", connect)
    return factory, connections


def test_schema_file_splits_into_statements():
    statements = list(_iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8")))

    assert len(statements) == 4
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS students")
    assert "uq_attendance_student_date" in statements[1]
    assert statements[3].startswith("CREATE OR REPLACE VIEW attendance_with_month_year")
    assert not any("--" in s for s in statements)


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); -- note; here\nSELECT \"x;y\";"

    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'SELECT "x;y"']


def test_initializer_applies_schema_once(monkeypatch, resolver):
    calls = []
    monkeypatch.setattr(bootstrap, "apply_schema", lambda conn, schema_path=None: calls.append(conn))
    init = SchemaInitializer("conn", resolver)

    assert init.initialize() is True
    assert init.initialize() is False
    assert calls == ["conn"]
    assert resolver.cached_id == 1

    init.reset()
    assert init.initialized is False
    assert init.initialize() is True
    assert len(calls) == 2


def test_initializer_failure_leaves_flag_unset(monkeypatch):
    def broken(conn, schema_path=None):
        raise RuntimeError("syntax error")

    monkeypatch.setattr(bootstrap, "apply_schema", broken)
    init = SchemaInitializer(None)

    with pytest.raises(RuntimeError):
        init.initialize()
    assert init.initialized is False


def test_db_cursor_commits_and_returns_connection(fake_db):
    factory, connections = fake_db

    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    assert [e[0] for e in connections[0].log] == ["execute", "cursor_close", "commit", "close"]


def test_db_cursor_rolls_back_on_error(fake_db):
    factory, connections = fake_db

    with pytest.raises(RuntimeError):
        with db_cursor(factory):
            raise RuntimeError("boom")

    assert ("rollback",) in connections[0].log
    assert ("commit",) not in connections[0].log
    assert connections[0].log[-1] == ("close",)


def test_transaction_shares_one_connection(fake_db):
    factory, connections = fake_db

    with factory.transaction():
        with db_cursor(factory) as (_, cur):
            cur.execute("SELECT 1")
        with db_cursor(factory) as (_, cur):
            cur.execute("SELECT 2")

    assert len(connections) == 1
    kinds = [e[0] for e in connections[0].log]
    assert kinds[0] == "begin"
    assert kinds.count("commit") == 1
    assert kinds[-2:] == ["commit", "close"]
    assert factory.active_connection() is None


def test_transaction_rolls_back_everything(fake_db):
    factory, connections = fake_db

    with pytest.raises(ValueError):
        with factory.transaction():
            with db_cursor(factory) as (_, cur):
                cur.execute("INSERT")
            raise ValueError("cap reached")

    kinds = [e[0] for e in connections[0].log]
    assert "commit" not in kinds
    assert kinds[-2:] == ["rollback", "close"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        (time(8, 30), time(8, 30)),
        (timedelta(hours=15, minutes=30), time(15, 30)),
        ("17:00:00", time(17, 0)),
        (None, None),
    ],
)
def test_normalize_mysql_time(raw, expected):
    assert normalize_mysql_time(raw) == expected
