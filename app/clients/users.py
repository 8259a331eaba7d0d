"""Read-mostly SQLite directory of users that can pair devices."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from app.clients.sqlite_store import SQLiteStore
from app.models import User
from app.utils.time import to_storage, utcnow


def _row_to_user(row: sqlite3.Row) -> User:
    return User(id=row["id"], email=row["email"])


class SQLiteUserDirectory(SQLiteStore):
    """Users are managed elsewhere; the API only ever reads from this table."""

    SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """,
    )

    def find_by_email(self, email: str) -> Optional[User]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT id, email FROM users WHERE email = ?", (email,)
            ).fetchone()
        return _row_to_user(row) if row else None

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT id, email FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        return _row_to_user(row) if row else None

    def get_password_hash(self, email: str) -> Optional[str]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT password_hash FROM users WHERE email = ?", (email,)
            ).fetchone()
        return row["password_hash"] if row else None

    def add_user(
        self, *, email: str, password_hash: str, created_at: datetime | None = None
    ) -> User:
        """Seed a user (maintenance scripts and tests only)."""
        with self._transaction(immediate=True) as conn:
            cursor = conn.execute(
                "INSERT INTO users (email, password_hash, created_at) VALUES (?, ?, ?)",
                (email, password_hash, to_storage(created_at or utcnow())),
            )
            user_id = cursor.lastrowid
        return User(id=int(user_id), email=email)


__all__ = ["SQLiteUserDirectory"]
