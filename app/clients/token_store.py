"""SQLite repository for the OAuth client, access tokens and refresh tokens."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from typing import Optional

from app.clients.sqlite_store import SQLiteStore
from app.models import AccessToken, OAuthClient, RefreshToken
from app.utils.time import from_storage, to_storage, utcnow

logger = logging.getLogger(__name__)


def _row_to_access_token(row: sqlite3.Row) -> AccessToken:
    return AccessToken(
        id=row["id"],
        user_id=row["user_id"],
        client_id=row["client_id"],
        name=row["name"],
        scopes=tuple(json.loads(row["scopes"])),
        revoked=bool(row["revoked"]),
        created_at=from_storage(row["created_at"]),
        expires_at=from_storage(row["expires_at"]),
    )


def _row_to_refresh_token(row: sqlite3.Row) -> RefreshToken:
    return RefreshToken(
        id=row["id"],
        access_token_id=row["access_token_id"],
        revoked=bool(row["revoked"]),
        expires_at=from_storage(row["expires_at"]),
    )


class SQLiteTokenStore(SQLiteStore):
    """Token rows are never deleted; revocation is the only mutation."""

    SCHEMA = (
        """
        CREATE TABLE IF NOT EXISTS oauth_clients (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            created_at TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS oauth_access_tokens (
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            client_id TEXT NOT NULL REFERENCES oauth_clients(id),
            name TEXT NOT NULL,
            scopes TEXT NOT NULL,
            revoked INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            expires_at TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS oauth_refresh_tokens (
            id TEXT PRIMARY KEY,
            access_token_id TEXT NOT NULL,
            revoked INTEGER NOT NULL DEFAULT 0,
            expires_at TEXT NOT NULL
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS idx_refresh_tokens_access_token
        ON oauth_refresh_tokens (access_token_id)
        """,
    )

    # Clients
    def get_client_by_name(self, name: str) -> Optional[OAuthClient]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM oauth_clients WHERE name = ?", (name,)
            ).fetchone()
        if not row:
            return None
        return OAuthClient(
            id=row["id"], name=row["name"], created_at=from_storage(row["created_at"])
        )

    def register_client(self, name: str) -> OAuthClient:
        """Create the named client, or return it unchanged when it already exists."""
        existing = self.get_client_by_name(name)
        if existing:
            return existing
        client = OAuthClient(id=uuid.uuid4().hex, name=name, created_at=utcnow())
        with self._transaction(immediate=True) as conn:
            conn.execute(
                """
                INSERT INTO oauth_clients (id, name, created_at) VALUES (?, ?, ?)
                ON CONFLICT(name) DO NOTHING
                """,
                (client.id, client.name, to_storage(client.created_at)),
            )
        logger.info("Registered OAuth client '%s'", name)
        return self.get_client_by_name(name) or client

    # Tokens
    def save_token_pair(self, access_token: AccessToken, refresh_token: RefreshToken) -> None:
        if refresh_token.access_token_id != access_token.id:
            raise ValueError("Refresh token must reference the access token it is saved with.")
        with self._transaction(immediate=True) as conn:
            conn.execute(
                """
                INSERT INTO oauth_access_tokens (
                    id, user_id, client_id, name, scopes, revoked, created_at, expires_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    access_token.id,
                    access_token.user_id,
                    access_token.client_id,
                    access_token.name,
                    json.dumps(list(access_token.scopes)),
                    int(access_token.revoked),
                    to_storage(access_token.created_at or utcnow()),
                    to_storage(access_token.expires_at),
                ),
            )
            conn.execute(
                """
                INSERT INTO oauth_refresh_tokens (id, access_token_id, revoked, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    refresh_token.id,
                    refresh_token.access_token_id,
                    int(refresh_token.revoked),
                    to_storage(refresh_token.expires_at),
                ),
            )

    def find_access_token(self, token_id: str) -> Optional[AccessToken]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM oauth_access_tokens WHERE id = ?", (token_id,)
            ).fetchone()
        return _row_to_access_token(row) if row else None

    def find_refresh_token(self, token_id: str) -> Optional[RefreshToken]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM oauth_refresh_tokens WHERE id = ?", (token_id,)
            ).fetchone()
        return _row_to_refresh_token(row) if row else None

    def revoke_chain(
        self, access_token_id: str, *, claim_refresh_token_id: str | None = None
    ) -> bool:
        """
        Revoke an access token and every refresh token that references it.

        With ``claim_refresh_token_id`` the presented refresh token must still
        be unrevoked inside the same transaction; otherwise nothing changes and
        ``False`` is returned, so two concurrent rotations cannot both win.
        """
        with self._transaction(immediate=True) as conn:
            if claim_refresh_token_id is not None:
                claimed = conn.execute(
                    """
                    UPDATE oauth_refresh_tokens SET revoked = 1
                    WHERE id = ? AND access_token_id = ? AND revoked = 0
                    """,
                    (claim_refresh_token_id, access_token_id),
                ).rowcount
                if claimed != 1:
                    return False
            conn.execute(
                "UPDATE oauth_access_tokens SET revoked = 1 WHERE id = ?",
                (access_token_id,),
            )
            conn.execute(
                "UPDATE oauth_refresh_tokens SET revoked = 1 WHERE access_token_id = ?",
                (access_token_id,),
            )
        return True


__all__ = ["SQLiteTokenStore"]
