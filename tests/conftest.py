"""Pytest configuration shared across the suite."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from app.clients import (
    EphemeralCodeCache,
    InMemoryCache,
    InMemoryLockManager,
    SQLitePairingCodeStore,
    SQLiteTokenStore,
    SQLiteUserDirectory,
)
from app.core.config import PairingSettings, TokenSettings
from app.models import User
from app.services import (
    BearerTokenValidator,
    CodeGenerator,
    TokenIssuer,
    TokenRefresher,
    TokenSigner,
    TvPairingService,
    hash_password,
)

SIGNING_KEY = b"unit-test-signing-key-with-at-least-32-bytes"
ISSUER = "https://pairing.example.com"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class PairingStack:
    clock: FrozenClock
    users: SQLiteUserDirectory
    codes: SQLitePairingCodeStore
    tokens: SQLiteTokenStore
    cache: EphemeralCodeCache
    locks: InMemoryLockManager
    signer: TokenSigner
    issuer: TokenIssuer
    refresher: TokenRefresher
    validator: BearerTokenValidator
    pairing: TvPairingService
    client_id: str
    db_path: str

    def add_user(self, email: str, password: str = "password") -> User:
        return self.users.add_user(email=email, password_hash=hash_password(password))

    def _query(self, sql: str, params: tuple) -> list[sqlite3.Row]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    def stored_codes(self, user_id: int) -> list[str]:
        """Every durable pairing code row held by the user, expired or not."""
        rows = self._query(
            "SELECT one_time_code FROM android_tv_codes WHERE user_id = ?", (user_id,)
        )
        return [row["one_time_code"] for row in rows]

    def unrevoked_token_ids(self, user_id: int) -> list[str]:
        rows = self._query(
            "SELECT id FROM oauth_access_tokens WHERE user_id = ? AND revoked = 0",
            (user_id,),
        )
        return [row["id"] for row in rows]


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "pairing.db")


@pytest.fixture
def stack(db_path: str, clock: FrozenClock) -> PairingStack:
    """Fully wired services over a throwaway database and in-process cache."""
    users = SQLiteUserDirectory(db_path)
    codes = SQLitePairingCodeStore(db_path)
    tokens = SQLiteTokenStore(db_path)
    client = tokens.register_client("cross-authentication")
    cache = EphemeralCodeCache(InMemoryCache(clock=clock), clock=clock)
    locks = InMemoryLockManager()
    signer = TokenSigner(key=SIGNING_KEY, issuer=ISSUER)
    issuer = TokenIssuer(tokens, signer, TokenSettings(), clock=clock)
    refresher = TokenRefresher(tokens, issuer, clock=clock)
    validator = BearerTokenValidator(tokens, users, signer, issuer)
    pairing = TvPairingService(
        users=users,
        codes=codes,
        cache=cache,
        locks=locks,
        generator=CodeGenerator(codes),
        token_issuer=issuer,
        settings=PairingSettings(),
        clock=clock,
    )
    return PairingStack(
        clock=clock,
        users=users,
        codes=codes,
        tokens=tokens,
        cache=cache,
        locks=locks,
        signer=signer,
        issuer=issuer,
        refresher=refresher,
        validator=validator,
        pairing=pairing,
        client_id=client.id,
        db_path=db_path,
    )
