"""Bounded pool of database connections.

Connections are created up front (``initial_size``) and on demand up to
``max_size``. Callers never wait for a connection: when every connection is
in use and the ceiling is reached, ``acquire`` fails immediately.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from retailpos.infrastructure.persistence.exceptions import (
    PersistenceError,
    PoolExhaustedError,
)

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], sqlite3.Connection]

_SQLITE_PREFIX = "sqlite:///"


class ConnectionPool:

    def __init__(
        self,
        factory: ConnectionFactory,
        initial_size: int = 2,
        max_size: int = 10,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if not 0 <= initial_size <= max_size:
            raise ValueError("initial_size must be between 0 and max_size")

        self._factory = factory
        self._max_size = max_size
        self._idle: deque[sqlite3.Connection] = deque()
        self._active = 0
        self._closed = False
        self._lock = threading.Lock()

        for _ in range(initial_size):
            self._idle.append(factory())
            self._active += 1
        logger.info("Connection pool ready (%d idle, max %d)", initial_size, max_size)

    # --- Borrowing ------------------------------------------------------------

    def acquire(self) -> sqlite3.Connection:
        with self._lock:
            self._check_open()
            while self._idle:
                conn = self._idle.popleft()
                if _is_healthy(conn):
                    return conn
                logger.warning("Discarding broken idle connection")
                self._discard(conn)

            if self._active >= self._max_size:
                raise PoolExhaustedError(
                    f"All {self._max_size} connections are in use"
                )
            # Reserve the slot before leaving the lock.
            self._active += 1

        try:
            return self._factory()
        except Exception:
            with self._lock:
                self._active -= 1
            raise

    def release(self, conn: sqlite3.Connection) -> None:
        with self._lock:
            if any(idle is conn for idle in self._idle):
                logger.warning("Ignoring release of a connection that is already idle")
                return
            if self._closed or not _is_healthy(conn):
                self._discard(conn)
                return
            self._idle.append(conn)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    # --- Lifecycle ------------------------------------------------------------

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            while self._idle:
                self._discard(self._idle.popleft())
        logger.info("Connection pool shut down")

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    @property
    def active_count(self) -> int:
        """Open connections, idle and in use."""
        with self._lock:
            return self._active

    @property
    def max_size(self) -> int:
        return self._max_size

    # --- Internal helpers (call with the lock held) ---------------------------

    def _discard(self, conn: sqlite3.Connection) -> None:
        self._active -= 1
        try:
            conn.close()
        except sqlite3.Error:
            logger.debug("Error closing discarded connection", exc_info=True)

    def _check_open(self) -> None:
        if self._closed:
            raise PersistenceError("Connection pool has been shut down")


def _is_healthy(conn: sqlite3.Connection) -> bool:
    try:
        conn.execute("SELECT 1").fetchone()
    except sqlite3.Error:
        return False
    return True


def sqlite_path(url: str) -> str:
    """Return the filesystem path (or ``:memory:``) named by a sqlite URL."""
    if not url.startswith(_SQLITE_PREFIX):
        raise ValueError(f"Unsupported database URL '{url}', expected sqlite:///<path>")
    path = url[len(_SQLITE_PREFIX):]
    if not path:
        raise ValueError("Database URL is missing a path")
    return path


def sqlite_connection_factory(url: str) -> ConnectionFactory:
    """Build a factory for autocommit SQLite connections to *url*.

    Transactions are opened explicitly by the transaction manager, so the
    driver's implicit transaction handling is switched off.
    """
    path = sqlite_path(url)
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    def connect() -> sqlite3.Connection:
        conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    return connect
