"""Shared SQLite plumbing for the durable stores."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence


class SQLiteStore:
    """Base class: one short-lived connection per operation, explicit transactions."""

    SCHEMA: Sequence[str] = ()

    def __init__(self, db_path: str, *, busy_timeout: float = 5.0) -> None:
        self._db_path = Path(db_path)
        self._busy_timeout = busy_timeout
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self._db_path,
            timeout=self._busy_timeout,
            check_same_thread=False,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self, *, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """Run a block atomically; ``immediate`` takes the write lock up front."""
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            for statement in self.SCHEMA:
                conn.execute(statement)


__all__ = ["SQLiteStore"]
