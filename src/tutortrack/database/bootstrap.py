from __future__ import annotations

import logging
import re
import threading
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector

from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().with_name("schema.sql")


# Quoted strings, '--' line comments, statement ends, everything else.
_SQL_TOKEN = re.compile(
    r"""
      (?P<quoted>'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*")
    | (?P<comment>--[^\n]*)
    | (?P<end>;)
    | (?P<text>[^'";-]+|.)
    """,
    re.VERBOSE | re.DOTALL,
)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split schema.sql into statements; ';' inside quotes does not split."""
    buf: list[str] = []
    for match in _SQL_TOKEN.finditer(sql):
        kind = match.lastgroup
        if kind == "comment":
            continue
        if kind == "end":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(match.group())

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(config: DBConfig) -> None:
    """Create the target database itself (used by the init script, not the app)."""
    conn = mysql.connector.connect(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        connection_timeout=config.connect_timeout,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Optional[Path] = None) -> None:
    sql = Path(schema_path or SCHEMA_PATH).read_text(encoding="utf-8")
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        _exec_sql(cur, sql)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]


def ping(conn_factory: DatabaseConnection) -> None:
    """Round-trip ``SELECT 1``; raises whatever the driver raises."""
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SELECT 1")
        cur.fetchall()


class SchemaInitializer:
    """Applies the schema at most once per process.

    ``reset()`` clears the flag (tests, or after the database was recreated).
    """

    def __init__(self, conn_factory: DatabaseConnection, resolver=None, *, schema_path: Optional[Path] = None):
        self._conn_factory = conn_factory
        self._resolver = resolver
        self._schema_path = schema_path
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        """Return True when the schema was applied now, False when already done."""
        with self._lock:
            if self._initialized:
                return False

            apply_schema(self._conn_factory, schema_path=self._schema_path)
            if self._resolver is not None:
                self._resolver.invalidate()
                self._resolver.resolve()

            self._initialized = True
            logger.info("Database initialized successfully")
            return True

    def reset(self) -> None:
        with self._lock:
            self._initialized = False
