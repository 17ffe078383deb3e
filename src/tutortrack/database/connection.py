from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from mysql.connector import pooling

from ..core.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_POOL_SIZE, MAX_POOL_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_POOL_SIZE
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "tutortrack")),
            pool_size=int(db_config.get("pool_size", DEFAULT_POOL_SIZE)),
            connect_timeout=int(db_config.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory backed by a lazily created pool.

    Callers borrow one pooled connection per logical operation; closing a
    pooled connection hands it back to the pool. ``transaction()`` pins one
    connection to the current context so several repository calls share it.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_lock = threading.Lock()
        self._active: ContextVar[Any] = ContextVar(f"tutortrack_tx_{id(self)}", default=None)

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            with self._pool_lock:
                if self._pool is None:
                    size = max(1, min(int(self._config.pool_size), MAX_POOL_SIZE))
                    logger.info(
                        "Creating connection pool (size=%s) for %s@%s:%s/%s",
                        size,
                        self._config.user,
                        self._config.host,
                        self._config.port,
                        self._config.database,
                    )
                    self._pool = pooling.MySQLConnectionPool(
                        pool_name=f"tutortrack_{id(self)}",
                        pool_size=size,
                        pool_reset_session=True,
                        host=self._config.host,
                        port=int(self._config.port),
                        user=self._config.user,
                        password=self._config.password,
                        database=self._config.database,
                        connection_timeout=int(self._config.connect_timeout),
                    )
        return self._pool

    def connect(self):
        return self._get_pool().get_connection()

    def active_connection(self):
        """Connection pinned by an enclosing ``transaction()``, if any."""
        return self._active.get()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        current = self._active.get()
        if current is not None:
            yield current
            return

        conn = self.connect()
        token = self._active.set(conn)
        try:
            conn.start_transaction()
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._active.reset(token)
            conn.close()
