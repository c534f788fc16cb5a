"""Scoped transactions over pooled connections.

``transaction()`` is the only place a transaction is begun, committed or
rolled back. Repository calls made inside an open transaction on the same
thread reuse its connection, so several repository writes commit or roll
back together.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

from retailpos.infrastructure.persistence.connection_pool import ConnectionPool
from retailpos.infrastructure.persistence.exceptions import StorageError

logger = logging.getLogger(__name__)


class TransactionManager:

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool
        self._local = threading.local()

    @property
    def in_transaction(self) -> bool:
        return getattr(self._local, "conn", None) is not None

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the block as one unit of work.

        Commits on normal exit and rolls back on any exception. A nested
        call joins the enclosing transaction instead of starting its own.
        """
        current = getattr(self._local, "conn", None)
        if current is not None:
            yield current
            return

        conn = self._pool.acquire()
        try:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise StorageError(f"Could not begin transaction: {exc}") from exc

            self._local.conn = conn
            try:
                yield conn
            except BaseException as exc:
                _rollback(conn)
                logger.warning("Transaction rolled back: %s", exc)
                if isinstance(exc, sqlite3.Error):
                    raise StorageError(str(exc)) from exc
                raise
            else:
                try:
                    conn.execute("COMMIT")
                except sqlite3.Error as exc:
                    _rollback(conn)
                    logger.warning("Commit failed, rolled back: %s", exc)
                    raise StorageError(f"Commit failed: {exc}") from exc
            finally:
                self._local.conn = None
        finally:
            self._pool.release(conn)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Borrow a connection for reads.

        Inside a transaction this is the transaction's own connection, so
        reads see its uncommitted writes; otherwise a pooled autocommit
        connection that sees committed data only.
        """
        current = getattr(self._local, "conn", None)
        if current is not None:
            yield current
            return

        with self._pool.connection() as conn:
            try:
                yield conn
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc


def _rollback(conn: sqlite3.Connection) -> None:
    if not conn.in_transaction:
        return
    try:
        conn.execute("ROLLBACK")
    except sqlite3.Error:
        # Closed connections fail the health check, so the pool drops it.
        logger.exception("Rollback failed, closing connection")
        conn.close()
