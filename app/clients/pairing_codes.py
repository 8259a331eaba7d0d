"""SQLite system of record for TV pairing codes."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from app.clients.sqlite_store import SQLiteStore
from app.core.errors import CodeCollisionError
from app.models import PairingCode
from app.utils.time import from_storage, to_storage

logger = logging.getLogger(__name__)


def _row_to_code(row: sqlite3.Row) -> PairingCode:
    return PairingCode(
        code=row["one_time_code"],
        user_id=row["user_id"],
        activated=bool(row["activated"]),
        expires_at=from_storage(row["expires_at"]),
    )


class SQLitePairingCodeStore(SQLiteStore):
    """Durable pairing codes; one row per user, codes unique across rows."""

    SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS android_tv_codes (
            user_id INTEGER PRIMARY KEY,
            one_time_code TEXT NOT NULL UNIQUE,
            activated INTEGER NOT NULL DEFAULT 0,
            expires_at TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_tv_codes_code_expiry
        ON android_tv_codes (one_time_code, activated, expires_at)
        """,
    )

    def upsert_for_user(
        self, pairing_code: PairingCode, *, now: datetime
    ) -> Optional[PairingCode]:
        """
        Replace whatever code the user holds with ``pairing_code``.

        Every expired row is purged in the same transaction, so the uniqueness
        constraint only ever applies among valid codes. Returns the replaced
        code, if any, so callers can evict derived state. Raises
        ``CodeCollisionError`` when another user holds the code.
        """
        now_text = to_storage(now)
        try:
            with self._transaction(immediate=True) as conn:
                previous_row = conn.execute(
                    "SELECT * FROM android_tv_codes WHERE user_id = ? AND expires_at > ?",
                    (pairing_code.user_id, now_text),
                ).fetchone()
                conn.execute(
                    "DELETE FROM android_tv_codes WHERE user_id = ?",
                    (pairing_code.user_id,),
                )
                purged = conn.execute(
                    "DELETE FROM android_tv_codes WHERE expires_at <= ?",
                    (now_text,),
                ).rowcount
                conn.execute(
                    """
                    INSERT INTO android_tv_codes (
                        user_id, one_time_code, activated, expires_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        pairing_code.user_id,
                        pairing_code.code,
                        int(pairing_code.activated),
                        to_storage(pairing_code.expires_at),
                        now_text,
                        now_text,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise CodeCollisionError("Pairing code is already held by another user.") from exc
        if purged:
            logger.info("Purged %s expired pairing codes", purged)
        return _row_to_code(previous_row) if previous_row else None

    def find_valid(self, code: str, *, now: datetime) -> Optional[PairingCode]:
        """Return the code only while ``expires_at > now``."""
        with self._transaction() as conn:
            row = conn.execute(
                """
                SELECT * FROM android_tv_codes
                WHERE one_time_code = ? AND expires_at > ?
                """,
                (code, to_storage(now)),
            ).fetchone()
        return _row_to_code(row) if row else None

    def is_code_in_use(self, code: str, *, now: datetime) -> bool:
        return self.find_valid(code, now=now) is not None

    def mark_activated(
        self, code: str, *, user_id: int, now: datetime
    ) -> Optional[PairingCode]:
        """Flip ``activated`` on a still-valid code owned by ``user_id``."""
        now_text = to_storage(now)
        with self._transaction(immediate=True) as conn:
            conn.execute(
                """
                UPDATE android_tv_codes
                SET activated = 1, updated_at = ?
                WHERE one_time_code = ? AND user_id = ? AND expires_at > ?
                """,
                (now_text, code, user_id, now_text),
            )
            row = conn.execute(
                """
                SELECT * FROM android_tv_codes
                WHERE one_time_code = ? AND user_id = ? AND expires_at > ?
                """,
                (code, user_id, now_text),
            ).fetchone()
        return _row_to_code(row) if row else None

    def consume(self, code: str, *, user_id: int) -> bool:
        """Delete an activated code; ``True`` only for the caller that removed it."""
        with self._transaction(immediate=True) as conn:
            cursor = conn.execute(
                """
                DELETE FROM android_tv_codes
                WHERE one_time_code = ? AND user_id = ? AND activated = 1
                """,
                (code, user_id),
            )
            return cursor.rowcount == 1


__all__ = ["SQLitePairingCodeStore"]
